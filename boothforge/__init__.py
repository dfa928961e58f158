"""
boothforge: a layout editing engine for photo-booth print templates.
"""

__version__ = "0.1.0"
