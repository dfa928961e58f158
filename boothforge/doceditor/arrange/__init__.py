# flake8: noqa:F401
from .base import ArrangeStrategy, AXES
from .align import AlignStrategy, ALIGN_MODES
from .spread import SpreadStrategy
