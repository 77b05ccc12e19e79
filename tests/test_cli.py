import json

import pytest
from typer.testing import CliRunner

from lurk import cli
from lurk.config import load_config

runner = CliRunner()


@pytest.fixture(autouse=True)
def lurk_home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    monkeypatch.setenv("LURK_HOME", str(home))
    monkeypatch.setattr(cli, "configure_logging", lambda *args, **kwargs: None)
    monkeypatch.chdir(tmp_path)
    return home


def test_open_and_resume(novel, lurk_home):
    result = runner.invoke(cli.app, ["open", str(novel)])
    assert result.exit_code == 0, result.output
    assert json.loads(result.stdout)["length"] == 800

    result = runner.invoke(cli.app, ["seek", "120"])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli.app, ["open", str(novel)])
    assert json.loads(result.stdout)["offset"] == 120
    assert load_config(lurk_home / "config" / "lurk-config.json").last_offset == 120


def test_show_without_document():
    result = runner.invoke(cli.app, ["show"])
    assert result.exit_code == 1


def test_set_and_reset(lurk_home):
    result = runner.invoke(cli.app, ["set", "appearance.font_size", "24"])
    assert result.exit_code == 0, result.output
    config_file = lurk_home / "config" / "lurk-config.json"
    assert load_config(config_file).appearance.font_size == 24

    result = runner.invoke(cli.app, ["set", "reading.auto_save_interval", "30"])
    assert result.exit_code == 0, result.output
    assert load_config(config_file).reading.auto_save_interval == "30"

    result = runner.invoke(cli.app, ["reset"])
    assert result.exit_code == 0
    assert load_config(config_file).appearance.font_size == 16


def test_set_refuses_progress_and_unknown_keys():
    assert runner.invoke(cli.app, ["set", "last_offset", "5"]).exit_code == 1
    assert runner.invoke(cli.app, ["set", "appearance.nope", "5"]).exit_code == 1
    assert runner.invoke(cli.app, ["set", "boss_key", "Ctrl+Bogus"]).exit_code == 1


def test_settings_section():
    result = runner.invoke(cli.app, ["settings", "keybindings"])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["search"] == "Ctrl+F"
