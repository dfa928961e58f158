import logging
from pathlib import Path
from typing import Any, Dict, Optional
import yaml
from blinker import Signal


logger = logging.getLogger(__name__)


def _same_kind(value: Any, default: Any) -> bool:
    if isinstance(default, bool) or isinstance(value, bool):
        return isinstance(value, bool) and isinstance(default, bool)
    if isinstance(default, (int, float)):
        return isinstance(value, (int, float))
    return isinstance(value, type(default))


class Config:
    """Editor and export preferences."""

    def __init__(self):
        self.snap_to_grid: bool = False
        self.grid_size: float = 10.0
        self.history_size: int = 50
        self.paste_offset: float = 20.0
        self.fallback_font: str = "Arial"
        self.export_scale: float = 1.0
        self.include_background: bool = True
        self.include_sample_photos: bool = True
        self.changed = Signal()

    def set(self, name: str, value: Any):
        if not hasattr(self, name) or name == "changed":
            raise AttributeError(f"Unknown config option '{name}'")
        if getattr(self, name) == value:
            return
        setattr(self, name, value)
        self.changed.send(self, name=name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "snap_to_grid": self.snap_to_grid,
            "grid_size": self.grid_size,
            "history_size": self.history_size,
            "paste_offset": self.paste_offset,
            "fallback_font": self.fallback_font,
            "export_scale": self.export_scale,
            "include_background": self.include_background,
            "include_sample_photos": self.include_sample_photos,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        config = cls()
        for key, default in config.to_dict().items():
            value = data.get(key, default)
            if not _same_kind(value, default):
                logger.warning(
                    f"Ignoring invalid config value {key}={value!r}"
                )
                continue
            setattr(config, key, type(default)(value))
        return config


class ConfigManager:
    def __init__(self, filepath: Path):
        self.filepath = filepath
        self.config: Config = Config()
        self.load_config()

    def save(self):
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        with open(self.filepath, "w") as f:
            yaml.safe_dump(self.config.to_dict(), f)

    def load_config(self) -> Config:
        if not self.filepath.exists():
            self.config = Config()
            return self.config

        with open(self.filepath, "r") as f:
            data: Optional[Dict[str, Any]] = yaml.safe_load(f)
        if not isinstance(data, dict):
            logger.warning(f"Config file {self.filepath} is empty or invalid")
            self.config = Config()
            return self.config
        self.config = Config.from_dict(data)
        return self.config
