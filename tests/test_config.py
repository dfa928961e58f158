import pytest
import yaml
from unittest.mock import Mock
from boothforge import config as config_module
from boothforge.core.config import Config, ConfigManager


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    path = tmp_path / "boothforge" / "config.yaml"
    monkeypatch.setattr(config_module, "CONFIG_FILE", path)
    monkeypatch.setattr(config_module, "config_mgr", None)
    monkeypatch.setattr(config_module, "config", None)
    return path


def test_defaults():
    config = Config()
    assert not config.snap_to_grid
    assert config.grid_size == 10.0
    assert config.history_size == 50
    assert config.paste_offset == 20.0
    assert config.fallback_font == "Arial"


def test_set_emits_changed_only_on_change():
    config = Config()
    listener = Mock()
    config.changed.connect(listener)

    config.set("grid_size", 25.0)
    config.set("grid_size", 25.0)

    listener.assert_called_once_with(config, name="grid_size")
    with pytest.raises(AttributeError):
        config.set("no_such_option", 1)


def test_from_dict_skips_invalid_values():
    config = Config.from_dict(
        {
            "snap_to_grid": "yes",
            "grid_size": 5,
            "history_size": True,
            "fallback_font": "Helvetica",
            "unknown": 1,
        }
    )
    assert config.snap_to_grid is False
    assert config.grid_size == 5.0
    assert isinstance(config.grid_size, float)
    assert config.history_size == 50
    assert config.fallback_font == "Helvetica"


def test_config_manager_round_trip(tmp_path):
    path = tmp_path / "nested" / "config.yaml"
    manager = ConfigManager(path)
    assert manager.config.to_dict() == Config().to_dict()

    manager.config.set("snap_to_grid", True)
    manager.config.set("export_scale", 2.5)
    manager.save()

    assert yaml.safe_load(path.read_text())["export_scale"] == 2.5
    reloaded = ConfigManager(path).config
    assert reloaded.snap_to_grid
    assert reloaded.export_scale == 2.5


def test_config_manager_handles_empty_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("")
    assert ConfigManager(path).config.to_dict() == Config().to_dict()


def test_initialize_config_is_idempotent(config_file):
    config_file.parent.mkdir()
    config_file.write_text(yaml.safe_dump({"paste_offset": 5.0}))

    first = config_module.initialize_config()
    config_file.write_text(yaml.safe_dump({"paste_offset": 50.0}))
    second = config_module.initialize_config()

    assert first is second
    assert first.paste_offset == 5.0
