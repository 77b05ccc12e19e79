"""Application configuration models and helpers."""

from __future__ import annotations

import os
import shutil
import sys
import tempfile
from pathlib import Path
from typing import Any

import portalocker
import typer
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

from lurk.core.errors import StorageError
from lurk.logging import get_logger

CONFIG_FILENAME = "lurk-config.json"

# Fields that track where the reader left off rather than user preferences.
RESUME_FIELDS = frozenset({"last_file", "last_page", "last_offset"})

logger = get_logger("config")


class AppPaths(BaseModel):
    """Resolved directories for lurk runtime assets."""

    base_dir: Path = Field(
        default_factory=lambda: Path(os.getenv("LURK_HOME") or typer.get_app_dir("lurk"))
    )

    @property
    def config_dir(self) -> Path:
        return self.base_dir / "config"

    @property
    def logs_dir(self) -> Path:
        return self.base_dir / "logs"

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    def ensure(self) -> None:
        for path in (self.base_dir, self.config_dir, self.logs_dir):
            path.mkdir(parents=True, exist_ok=True)


class LurkSettings(BaseModel):
    app_name: str = "lurk"
    paths: AppPaths = Field(default_factory=AppPaths)
    log_level: str = "INFO"


def _default_boss_key() -> str:
    if sys.platform == "darwin":
        return "Cmd+Shift+Space"
    return "Ctrl+Alt+Space"


class AppearanceSettings(BaseModel):
    window_opacity: int = Field(default=90, ge=0, le=100)
    text_opacity: int = Field(default=100, ge=0, le=100)
    always_on_top: bool = True
    show_in_taskbar: bool = False
    font_size: int = Field(default=16, gt=0)
    line_height: int = Field(default=18, gt=0)
    background_color: str = "#1b1f24"
    text_color: str = "#d7dce2"


class ReadingSettings(BaseModel):
    smart_break: bool = True
    auto_save_interval: str = "instant"


class PrivacySettings(BaseModel):
    boss_action: str = "disguise"
    auto_fade: bool = False
    fade_delay: int = Field(default=5, ge=0)


class KeybindingSettings(BaseModel):
    prev_page: str = "PageUp"
    next_page: str = "PageDown"
    search: str = "Ctrl+F"


class SystemSettings(BaseModel):
    auto_start: bool = False
    restore_reading: bool = True
    dev_mode: bool = False


class ReaderConfig(BaseModel):
    """Everything persisted between sessions.

    ``last_file``/``last_page``/``last_offset`` mirror the open document so the
    next launch can resume; the remaining groups are user-editable settings.
    Unknown keys in a stored file are ignored and missing ones take defaults.
    """

    last_file: Path | None = None
    last_page: int = Field(default=0, ge=0)
    last_offset: int = Field(default=0, ge=0)
    boss_key: str = Field(default_factory=_default_boss_key)
    max_chars_per_page: int = Field(default=900, gt=0)
    appearance: AppearanceSettings = Field(default_factory=AppearanceSettings)
    reading: ReadingSettings = Field(default_factory=ReadingSettings)
    privacy: PrivacySettings = Field(default_factory=PrivacySettings)
    keybindings: KeybindingSettings = Field(default_factory=KeybindingSettings)
    system: SystemSettings = Field(default_factory=SystemSettings)

    def with_preferences_from(self, other: ReaderConfig) -> ReaderConfig:
        """Return a copy holding ``other``'s preferences and this config's resume state."""

        resume = {name: getattr(self, name) for name in RESUME_FIELDS}
        return other.model_copy(update=resume, deep=True)


def _backup_corrupt(path: Path) -> None:
    backup = path.with_name(f"{path.stem}.corrupt{path.suffix}")
    try:
        shutil.copyfile(path, backup)
    except OSError as exc:
        logger.warning(f"Could not back up unreadable config {path}: {exc}")
        return
    logger.warning(f"Unreadable config backed up to {backup}")


def load_config(path: Path) -> ReaderConfig:
    """Load the persisted config, falling back to defaults on any problem."""

    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        logger.debug(f"No config at {path}, using defaults")
        return ReaderConfig()
    except OSError as exc:
        logger.warning(f"Cannot read config {path}: {exc}; using defaults")
        return ReaderConfig()

    try:
        return ReaderConfig.model_validate_json(raw)
    except ValidationError as exc:
        logger.warning(
            f"Config {path} does not match the expected schema "
            f"({exc.error_count()} errors); using defaults"
        )
        _backup_corrupt(path)
        return ReaderConfig()


def save_config(path: Path, config: ReaderConfig) -> None:
    """Write ``config`` to ``path`` as pretty JSON, replacing the file atomically."""

    data = config.model_dump_json(indent=2)
    lock_path = path.with_name(f"{path.name}.lock")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with portalocker.Lock(str(lock_path), timeout=5):
            fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(data)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
    except (OSError, portalocker.exceptions.LockException) as exc:
        logger.error(f"Failed to write config {path}: {exc}")
        raise StorageError(f"failed to save config to {path}: {exc}") from exc
    logger.debug(f"Config saved to {path}")


def _maybe_level(value: str | None) -> str | None:
    if not value:
        return None
    level = value.strip().upper()
    if level in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
        return level
    return None


def load_settings(env_path: Path | None = None) -> LurkSettings:
    """Load runtime settings from environment variables and defaults."""

    env_file = env_path or Path(".env")
    if env_file.exists():
        load_dotenv(env_file)

    overrides: dict[str, Any] = {}

    if home := os.getenv("LURK_HOME"):
        overrides["paths"] = {"base_dir": Path(home).expanduser()}

    if level := _maybe_level(os.getenv("LURK_LOG_LEVEL")):
        overrides["log_level"] = level

    settings = LurkSettings(**overrides)
    settings.paths.ensure()
    return settings
