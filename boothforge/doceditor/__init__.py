# flake8: noqa:F401
from .editor import DocEditor
from .selection import Selection
from .shortcuts import handle_shortcut, SHORTCUTS
