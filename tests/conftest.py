from pathlib import Path

import pytest

from lurk.core.events import EventBus
from lurk.core.state import StateStore


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    return tmp_path / "config" / "lurk-config.json"


@pytest.fixture
def events() -> EventBus:
    return EventBus()


@pytest.fixture
def store(config_path: Path, events: EventBus) -> StateStore:
    return StateStore(config_path, events)


@pytest.fixture
def novel(tmp_path: Path) -> Path:
    """200 numbered lines, 800 characters in total."""
    path = tmp_path / "novel.txt"
    path.write_text("\n".join(f"{n:03}" for n in range(1, 201)) + "\n", encoding="utf-8")
    return path


@pytest.fixture
def short_story(tmp_path: Path) -> Path:
    path = tmp_path / "short.txt"
    path.write_text("a" * 700, encoding="utf-8")
    return path
