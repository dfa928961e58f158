import logging
from pathlib import Path
from typing import Optional
from platformdirs import user_config_dir
from .core.config import Config, ConfigManager


logger = logging.getLogger(__name__)


CONFIG_DIR = Path(user_config_dir("boothforge"))
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Populated by initialize_config() so that importing this module has no
# side effects on disk.
config_mgr: Optional[ConfigManager] = None
config: Optional[Config] = None


def initialize_config() -> Config:
    """
    Loads the user configuration. Safe to call more than once; only the
    first call reads the file.
    """
    global config_mgr, config

    if config_mgr is not None and config is not None:
        return config

    logger.info(f"Loading configuration from {CONFIG_FILE}")
    config_mgr = ConfigManager(CONFIG_FILE)
    config = config_mgr.config
    return config
