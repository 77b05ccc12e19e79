"""Request handlers the UI layer calls into.

Each handler takes the injected :class:`StateStore`, performs one operation and
returns a plain payload. Domain failures come back as :class:`CommandError`
with a message fit for display; :class:`LockFailure` is left to propagate.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from pydantic import BaseModel, ValidationError

from lurk.config import ReaderConfig
from lurk.core.errors import LockFailure, LurkError
from lurk.core.state import StateSnapshot, StateStore
from lurk.logging import get_logger
from lurk.services.pager import page_at, previous_page_start
from lurk.utils.hotkey_parser import parse_hotkey

NO_DOCUMENT = "no document loaded"


class CommandError(Exception):
    """User-facing failure returned from a command."""


class DocumentPayload(BaseModel):
    file_path: str | None
    content: str
    offset: int


class PagePayload(BaseModel):
    start: int
    end: int
    text: str
    total: int


class SettingsPayload(BaseModel):
    boss_key: str


def _to_payload(snapshot: StateSnapshot) -> DocumentPayload:
    return DocumentPayload(
        file_path=str(snapshot.file_path) if snapshot.file_path is not None else None,
        content=snapshot.text,
        offset=snapshot.current_offset,
    )


def _check_hotkeys(config: ReaderConfig) -> None:
    bindings = {
        "boss_key": config.boss_key,
        "keybindings.prev_page": config.keybindings.prev_page,
        "keybindings.next_page": config.keybindings.next_page,
        "keybindings.search": config.keybindings.search,
    }
    for name, shortcut in bindings.items():
        try:
            parse_hotkey(shortcut)
        except ValueError as exc:
            raise CommandError(f"invalid hotkey for {name}: {exc}") from exc


class ReaderCommands:
    def __init__(self, store: StateStore) -> None:
        self.store = store
        self.logger = get_logger("commands")

    @contextmanager
    def _surface(self, action: str) -> Iterator[None]:
        try:
            yield
        except LockFailure:
            raise
        except LurkError as exc:
            self.logger.error(f"{action} failed: {exc}")
            raise CommandError(str(exc)) from exc

    def load_file(self, path: str) -> DocumentPayload:
        with self._surface("load_file"):
            return _to_payload(self.store.load_document(path))

    def current_document(self) -> DocumentPayload:
        snapshot = self.store.snapshot()
        if not snapshot.has_document:
            raise CommandError(NO_DOCUMENT)
        return _to_payload(snapshot)

    def update_progress(self, offset: int) -> None:
        if offset < 0:
            raise CommandError(f"offset must be non-negative, got {offset}")
        with self._surface("update_progress"):
            self.store.update_progress(offset)

    def get_settings(self) -> ReaderConfig:
        return self.store.snapshot().config

    def app_settings(self) -> SettingsPayload:
        return SettingsPayload(boss_key=self.store.snapshot().config.boss_key)

    def update_settings(self, config: ReaderConfig | dict[str, Any]) -> None:
        """Replace user preferences; the tray hears about developer-mode flips via events."""
        try:
            data = config.model_dump() if isinstance(config, BaseModel) else config
            new_config = ReaderConfig.model_validate(data)
        except ValidationError as exc:
            raise CommandError(f"invalid settings: {exc.error_count()} field(s) rejected") from exc
        _check_hotkeys(new_config)
        with self._surface("update_settings"):
            self.store.update_settings(new_config)

    def reset_settings(self) -> None:
        with self._surface("reset_settings"):
            self.store.reset_settings()

    def read_page(self, offset: int | None = None) -> PagePayload:
        snapshot = self.store.snapshot()
        if not snapshot.has_document:
            raise CommandError(NO_DOCUMENT)
        start = snapshot.current_offset if offset is None else offset
        page = page_at(
            snapshot.text,
            start,
            snapshot.config.max_chars_per_page,
            snapshot.config.reading.smart_break,
        )
        return PagePayload(start=page.start, end=page.end, text=page.text, total=len(snapshot.text))

    def next_page(self) -> PagePayload:
        page = self.read_page()
        if page.end >= page.total:
            return page
        self.update_progress(page.end)
        return self.read_page()

    def previous_page(self) -> PagePayload:
        snapshot = self.store.snapshot()
        if not snapshot.has_document:
            raise CommandError(NO_DOCUMENT)
        start = previous_page_start(
            snapshot.text,
            snapshot.current_offset,
            snapshot.config.max_chars_per_page,
            snapshot.config.reading.smart_break,
        )
        self.update_progress(start)
        return self.read_page()
