"""Turn a text file of unknown encoding into validated text."""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path

from lurk.core.errors import DecodeError, DocumentNotFoundError, StorageError
from lurk.logging import get_logger
from lurk.services import encoding

logger = get_logger("loader")


def load_text(
    path: str | os.PathLike[str],
    *,
    guess: Callable[[bytes, bool], str] = encoding.guess,
    decode: Callable[[str, bytes], tuple[str, bool]] = encoding.decode,
) -> str:
    """Read the whole file at ``path`` and decode it with the detected encoding.

    The returned text is exactly what the decoder produced: line endings and
    surrounding whitespace are left alone.

    Raises:
        DocumentNotFoundError: ``path`` does not exist.
        StorageError: the file exists but could not be read.
        DecodeError: the detected encoding hit an invalid byte sequence.
    """
    path = Path(path)
    if not path.exists():
        raise DocumentNotFoundError(path)

    try:
        buffer = path.read_bytes()
    except OSError as exc:
        raise StorageError(f"failed to read {path}: {exc}") from exc

    detected = guess(buffer, True)
    text, had_errors = decode(detected, buffer)
    if had_errors:
        logger.warning(f"Decoding {path} as {detected} produced invalid sequences")
        raise DecodeError(path, detected)

    logger.debug(f"Loaded {path} ({len(buffer)} bytes, {detected}, {len(text)} chars)")
    return text
