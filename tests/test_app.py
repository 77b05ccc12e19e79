from lurk.config import LurkSettings, AppPaths, ReaderConfig, save_config
from lurk.core.app import build_context


def _settings(tmp_path):
    settings = LurkSettings(paths=AppPaths(base_dir=tmp_path / "home"))
    settings.paths.ensure()
    return settings


def test_context_restores_last_session(tmp_path, novel):
    settings = _settings(tmp_path)
    save_config(settings.paths.config_file, ReaderConfig(last_file=novel.resolve(), last_offset=40))

    ctx = build_context(settings)

    doc = ctx.commands.current_document()
    assert doc.offset == 40
    assert ctx.store.events is ctx.events


def test_context_starts_when_last_file_is_unreadable(tmp_path):
    settings = _settings(tmp_path)
    broken = tmp_path / "not-a-file"
    broken.mkdir()
    save_config(settings.paths.config_file, ReaderConfig(last_file=broken))

    ctx = build_context(settings)

    assert not ctx.store.snapshot().has_document


def test_context_without_restore(tmp_path, novel):
    settings = _settings(tmp_path)
    save_config(settings.paths.config_file, ReaderConfig(last_file=novel.resolve()))
    ctx = build_context(settings, restore=False)
    assert not ctx.store.snapshot().has_document
