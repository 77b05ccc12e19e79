"""Split decoded text into pages bounded by ``max_chars_per_page``."""

from __future__ import annotations

from dataclasses import dataclass

BREAK_CHARS = frozenset("\n。！？；，.!?; ")
# Only the tail of a page is searched for a break so pages never shrink much.
SMART_BREAK_WINDOW = 200


@dataclass(slots=True, frozen=True)
class Page:
    start: int
    end: int
    text: str


def _break_point(chunk: str) -> int:
    floor = max(0, len(chunk) - SMART_BREAK_WINDOW)
    for index in range(len(chunk) - 1, floor - 1, -1):
        if chunk[index] in BREAK_CHARS:
            return index + 1
    return 0


def page_at(text: str, offset: int, max_chars: int, smart_break: bool = True) -> Page:
    """Return the page that starts at ``offset`` (clamped into the text)."""

    if max_chars <= 0:
        raise ValueError("max_chars must be positive")
    start = max(0, min(offset, len(text)))
    end = min(len(text), start + max_chars)
    if smart_break and end < len(text):
        cut = _break_point(text[start:end])
        if 0 < cut < end - start:
            end = start + cut
    return Page(start=start, end=end, text=text[start:end])


def previous_page_start(text: str, offset: int, max_chars: int, smart_break: bool = True) -> int:
    """Find the start of the page whose end is ``offset``, or the closest one before it."""

    offset = max(0, min(offset, len(text)))
    if offset == 0:
        return 0
    candidate = max(0, offset - max_chars)
    # Walk forward from the furthest possible start until a page reaches offset.
    while candidate < offset:
        if page_at(text, candidate, max_chars, smart_break).end >= offset:
            return candidate
        candidate += 1
    return max(0, offset - 1)
