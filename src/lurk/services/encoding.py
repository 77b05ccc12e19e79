"""Encoding detection for user documents of unknown origin."""

from __future__ import annotations

import codecs

from chardet import UniversalDetector

FALLBACK_ENCODING = "windows-1252"

# chardet reports GB2312 for GBK text; Python's gb2312 codec rejects the extra GBK characters.
SUPERSETS = {
    "gb2312": "gb18030",
    "gbk": "gb18030",
}


def _is_utf8(buffer: bytes) -> bool:
    try:
        buffer.decode("utf-8")
    except UnicodeDecodeError:
        return False
    return True


def guess(buffer: bytes, is_complete: bool = True) -> str:
    """Return the most likely encoding name for ``buffer``.

    Input that is already valid UTF-8 is always reported as UTF-8 (``utf-8-sig``
    when it starts with a byte order mark) so plain UTF-8 text is never
    reinterpreted. Everything else goes through chardet; ``is_complete`` tells
    the detector that no more bytes will follow.
    """
    if _is_utf8(buffer):
        return "utf-8-sig" if buffer.startswith(codecs.BOM_UTF8) else "utf-8"

    detector = UniversalDetector()
    detector.feed(buffer)
    if is_complete:
        detector.close()
    encoding = (detector.result or {}).get("encoding")
    if not encoding:
        return FALLBACK_ENCODING
    encoding = encoding.lower()
    return SUPERSETS.get(encoding, encoding)


def decode(encoding: str, buffer: bytes) -> tuple[str, bool]:
    """Decode ``buffer`` and report whether any sequence was invalid.

    On error the returned text carries replacement characters; callers that
    need lossless text must check the flag.
    """
    try:
        return buffer.decode(encoding), False
    except UnicodeDecodeError:
        return buffer.decode(encoding, errors="replace"), True
    except LookupError:
        return buffer.decode("utf-8", errors="replace"), True
