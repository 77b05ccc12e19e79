import json
import sys

import pytest

from lurk.config import (
    LurkSettings,
    ReaderConfig,
    load_config,
    load_settings,
    save_config,
)
from lurk.core.errors import StorageError


def test_load_settings_creates_paths(tmp_path, monkeypatch):
    monkeypatch.setenv("LURK_HOME", str(tmp_path / "lurk-home"))
    settings = load_settings(tmp_path / "missing.env")
    assert isinstance(settings, LurkSettings)
    for required in (settings.paths.base_dir, settings.paths.logs_dir, settings.paths.config_dir):
        assert required.exists()
    assert settings.paths.config_file.name == "lurk-config.json"
    assert sorted(p.name for p in settings.paths.base_dir.iterdir()) == ["config", "logs"]


def test_load_settings_reads_env_file(tmp_path, monkeypatch):
    # set first so teardown also removes whatever load_dotenv exports
    monkeypatch.setenv("LURK_HOME", "placeholder")
    monkeypatch.setenv("LURK_LOG_LEVEL", "placeholder")
    monkeypatch.delenv("LURK_HOME")
    monkeypatch.delenv("LURK_LOG_LEVEL")
    env_file = tmp_path / ".env"
    env_file.write_text(f"LURK_HOME={tmp_path / 'from-env'}\nLURK_LOG_LEVEL=debug\n")
    settings = load_settings(env_file)
    assert settings.paths.base_dir == tmp_path / "from-env"
    assert settings.log_level == "DEBUG"


def test_reader_defaults():
    config = ReaderConfig()
    assert config.last_file is None
    assert config.last_page == 0
    assert config.last_offset == 0
    assert config.max_chars_per_page == 900
    assert config.appearance.window_opacity == 90
    assert config.appearance.background_color == "#1b1f24"
    assert config.reading.auto_save_interval == "instant"
    assert config.privacy.boss_action == "disguise"
    assert config.keybindings.next_page == "PageDown"
    assert config.system.restore_reading is True
    assert config.system.dev_mode is False


def test_boss_key_default_follows_platform(monkeypatch):
    monkeypatch.setattr(sys, "platform", "darwin")
    assert ReaderConfig().boss_key == "Cmd+Shift+Space"
    monkeypatch.setattr(sys, "platform", "linux")
    assert ReaderConfig().boss_key == "Ctrl+Alt+Space"


def test_missing_file_gives_defaults(config_path):
    assert load_config(config_path) == ReaderConfig()


def test_partial_file_fills_in_defaults(config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text(
        json.dumps({"last_offset": 42, "appearance": {"font_size": 20}, "legacy_field": "x"})
    )
    config = load_config(config_path)
    assert config.last_offset == 42
    assert config.appearance.font_size == 20
    assert config.appearance.window_opacity == 90
    assert config.keybindings == ReaderConfig().keybindings


def test_corrupt_file_falls_back_and_is_backed_up(config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text("{not json")
    assert load_config(config_path) == ReaderConfig()
    backup = config_path.with_name("lurk-config.corrupt.json")
    assert backup.read_text() == "{not json"


def test_out_of_range_values_are_rejected(config_path):
    config_path.parent.mkdir(parents=True)
    config_path.write_text(json.dumps({"appearance": {"window_opacity": 150}, "last_offset": 7}))
    assert load_config(config_path) == ReaderConfig()


def test_save_then_load_round_trips(tmp_path, config_path):
    config = ReaderConfig(last_file=tmp_path / "book.txt", last_page=3, last_offset=1234)
    config.appearance.text_color = "#ffffff"
    config.privacy.auto_fade = True
    config.keybindings.search = "Ctrl+Shift+F"
    config.system.dev_mode = True

    save_config(config_path, config)

    assert config_path.exists()
    assert load_config(config_path) == config
    assert json.loads(config_path.read_text())["last_offset"] == 1234


def test_save_leaves_no_temp_files(config_path):
    save_config(config_path, ReaderConfig())
    save_config(config_path, ReaderConfig(last_offset=5))
    leftovers = [p.name for p in config_path.parent.iterdir() if p.name.startswith(".")]
    assert leftovers == []


def test_save_failure_raises_storage_error(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    with pytest.raises(StorageError):
        save_config(blocker / "lurk-config.json", ReaderConfig())


def test_with_preferences_from_keeps_resume_state(tmp_path):
    current = ReaderConfig(last_file=tmp_path / "a.txt", last_page=2, last_offset=99)
    incoming = ReaderConfig(last_file=tmp_path / "b.txt", last_offset=1, boss_key="Alt+Z")
    incoming.appearance.font_size = 30

    merged = current.with_preferences_from(incoming)

    assert merged.last_file == tmp_path / "a.txt"
    assert merged.last_page == 2
    assert merged.last_offset == 99
    assert merged.boss_key == "Alt+Z"
    assert merged.appearance.font_size == 30
