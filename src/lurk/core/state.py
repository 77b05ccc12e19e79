"""Shared reading state: the open document, progress and persisted config."""

from __future__ import annotations

import os
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar

from lurk.config import ReaderConfig, load_config, save_config
from lurk.core import events as topics
from lurk.core.errors import LockFailure, StorageError
from lurk.core.events import EventBus
from lurk.logging import get_logger
from lurk.services.document_loader import load_text
from lurk.utils.rwlock import ReadWriteLock

T = TypeVar("T")
DocumentLoader = Callable[[Path], str]


@dataclass(slots=True)
class StateSnapshot:
    file_path: Path | None = None
    text: str = ""
    current_offset: int = 0
    config: ReaderConfig = field(default_factory=ReaderConfig)

    def copy(self) -> StateSnapshot:
        return StateSnapshot(
            file_path=self.file_path,
            text=self.text,
            current_offset=self.current_offset,
            config=self.config.model_copy(deep=True),
        )

    @property
    def has_document(self) -> bool:
        return self.file_path is not None


class StateStore:
    """Process-wide reading state guarded by a single reader/writer lock.

    Readers get deep copies through :meth:`snapshot`. Every mutation runs under
    the exclusive lock, which stamps it with a sequence number and records the
    resulting config as the newest one. Persisting happens after the exclusive
    lock is released: each writer takes the persist lock and writes the newest
    recorded config unless a write at least that recent already succeeded. The
    file therefore always ends at the latest mutation, and neither readers nor
    other writers' mutations wait on disk I/O.

    If a mutation raises halfway through, the in-memory state can no longer be
    trusted and every later call raises :class:`LockFailure`.
    """

    def __init__(
        self,
        config_path: Path,
        events: EventBus | None = None,
        loader: DocumentLoader = load_text,
    ) -> None:
        self.config_path = config_path
        self.events = events or EventBus()
        self.logger = get_logger("state")
        self._loader = loader
        self._lock = ReadWriteLock()
        self._persist_lock = threading.Lock()
        self._poisoned = False
        self._state = StateSnapshot(config=load_config(config_path))
        self._sequence = 0
        self._newest: tuple[int, ReaderConfig] = (0, self._state.config.model_copy(deep=True))
        self._persisted_sequence = 0

    def _ensure_healthy(self) -> None:
        if self._poisoned:
            raise LockFailure("reader state is unusable after a failed update")

    def snapshot(self) -> StateSnapshot:
        self._ensure_healthy()
        with self._lock.read_locked():
            return self._state.copy()

    def _commit(self, mutate: Callable[[StateSnapshot], T]) -> T:
        self._ensure_healthy()
        self._lock.acquire_write()
        try:
            self._ensure_healthy()
            try:
                result = mutate(self._state)
            except Exception:
                self._poisoned = True
                self.logger.exception("State mutation failed; store is now unusable")
                raise
            self._sequence += 1
            sequence = self._sequence
            self._newest = (sequence, self._state.config.model_copy(deep=True))
        finally:
            self._lock.release_write()

        self._persist(sequence)
        return result

    def _persist(self, sequence: int) -> None:
        with self._persist_lock:
            if self._persisted_sequence >= sequence:
                self.logger.debug(f"Update {sequence} already on disk")
                return
            newest_sequence, config = self._newest
            save_config(self.config_path, config)
            self._persisted_sequence = newest_sequence

    def load_document(self, path: str | os.PathLike[str]) -> StateSnapshot:
        """Open ``path``, resuming at the saved offset when it is the last file read.

        Decoding happens before any lock is taken. The returned snapshot is the
        state as of this load, even if other writers have run since.
        """
        path = Path(path).expanduser().resolve()
        text = self._loader(path)

        def apply(state: StateSnapshot) -> StateSnapshot:
            same_file = state.config.last_file == path
            state.file_path = path
            state.text = text
            state.current_offset = min(state.config.last_offset, len(text)) if same_file else 0
            state.config.last_file = path
            state.config.last_offset = state.current_offset
            state.config.last_page = 0
            return state.copy()

        loaded = self._commit(apply)
        self.logger.info(f"Opened {path} at offset {loaded.current_offset}/{len(loaded.text)}")
        self.events.emit(topics.DOCUMENT_LOADED, loaded)
        return loaded

    def update_progress(self, offset: int) -> int:
        """Store the reading position, clamped to the document length."""

        if offset < 0:
            raise ValueError(f"offset must be non-negative, got {offset}")

        def apply(state: StateSnapshot) -> int:
            state.current_offset = min(offset, len(state.text))
            state.config.last_offset = state.current_offset
            return state.current_offset

        stored = self._commit(apply)
        self.logger.debug(f"Progress saved at {stored}")
        self.events.emit(topics.PROGRESS_UPDATED, stored)
        return stored

    def _replace_preferences(self, source: ReaderConfig, topic: str) -> bool:
        # Fields may have been assigned after construction; check them before locking.
        source = ReaderConfig.model_validate(source.model_dump())

        def apply(state: StateSnapshot) -> bool:
            before = state.config.system.dev_mode
            state.config = state.config.with_preferences_from(source)
            return before != state.config.system.dev_mode

        dev_mode_changed = self._commit(apply)
        self.events.emit(topic, source.model_copy(deep=True))
        if dev_mode_changed:
            self.logger.info(f"Developer mode now {'on' if source.system.dev_mode else 'off'}")
            self.events.emit(topics.DEV_MODE_CHANGED, source.system.dev_mode)
        return dev_mode_changed

    def update_settings(self, new_config: ReaderConfig) -> bool:
        """Apply every user preference from ``new_config``; keep resume state.

        Returns whether the developer-mode flag changed.
        """
        return self._replace_preferences(new_config, topics.SETTINGS_UPDATED)

    def reset_settings(self) -> bool:
        """Restore default preferences; keep resume state."""

        self.logger.info("Resetting settings to defaults")
        return self._replace_preferences(ReaderConfig(), topics.SETTINGS_RESET)

    def restore_session(self) -> StateSnapshot | None:
        """Reopen the last document at its saved offset, if it is still on disk.

        A recorded file that has disappeared is forgotten and the config saved.
        Loader errors propagate to the caller.
        """
        config = self.snapshot().config
        if not config.system.restore_reading:
            self.logger.debug("Session restore disabled")
            return None
        path = config.last_file
        if path is None:
            return None

        if not path.exists():
            self.logger.info(f"Last file {path} is gone; clearing resume state")

            def forget(state: StateSnapshot) -> None:
                state.config.last_file = None
                state.config.last_page = 0
                state.config.last_offset = 0

            try:
                self._commit(forget)
            except StorageError as exc:
                self.logger.warning(f"Could not persist cleared resume state: {exc}")
            return None

        text = self._loader(path)

        def apply(state: StateSnapshot) -> StateSnapshot:
            state.file_path = path
            state.text = text
            state.current_offset = min(state.config.last_offset, len(text))
            state.config.last_offset = state.current_offset
            return state.copy()

        restored = self._commit(apply)
        self.logger.info(f"Restored {path} at offset {restored.current_offset}")
        self.events.emit(topics.DOCUMENT_LOADED, restored)
        return restored
