# flake8: noqa:F401
from .history import HistoryManager, DEFAULT_CAPACITY
