# flake8: noqa:F401
from .element import Element, MalformedDocument
from .image import ImageElement
from .text import TextElement, TRANSPARENT, ALIGNMENTS
from .camera import CameraElement
from .group import GroupElement
from .layout import Layout, element_by_type, element_from_dict
