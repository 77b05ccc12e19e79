"""Lurk application composition root."""

from __future__ import annotations

from dataclasses import dataclass

from lurk.commands import ReaderCommands
from lurk.config import LurkSettings
from lurk.core import events as topics
from lurk.core.errors import LockFailure, LurkError
from lurk.core.events import EventBus
from lurk.core.state import StateStore
from lurk.logging import get_logger


@dataclass(slots=True)
class LurkContext:
    settings: LurkSettings
    events: EventBus
    store: StateStore
    commands: ReaderCommands


def build_context(settings: LurkSettings, restore: bool = True) -> LurkContext:
    logger = get_logger("bootstrap")
    events = EventBus()
    events.subscribe(
        topics.DEV_MODE_CHANGED,
        lambda enabled: logger.debug(f"Tray menu rebuild requested (dev_mode={enabled})"),
    )
    store = StateStore(settings.paths.config_file, events)

    if restore:
        try:
            store.restore_session()
        except LockFailure:
            raise
        except LurkError as exc:
            # A broken last file must not keep the reader from starting.
            logger.warning(f"Could not restore last session: {exc}")

    logger.info("Lurk context ready")
    return LurkContext(
        settings=settings,
        events=events,
        store=store,
        commands=ReaderCommands(store),
    )
