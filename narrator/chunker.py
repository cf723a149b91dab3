"""Split sanitized text into byte-bounded chunks for TTS requests."""

import re
from typing import List

DEFAULT_MAX_BYTES = 4500

_SENTENCE_END_RE = re.compile(r"(?<=[.!?])\s+")


def byte_length(text: str) -> int:
    """UTF-8 encoded size (accented letters count as 2 bytes)."""
    return len(text.encode("utf-8"))


def _split_word(word: str, max_bytes: int) -> List[str]:
    """Hard-split a single word that cannot fit in one chunk."""
    pieces = []
    current = ""
    for char in word:
        if current and byte_length(current + char) > max_bytes:
            pieces.append(current)
            current = char
        else:
            current += char
    if current:
        pieces.append(current)
    return pieces


def _pack(units: List[str], max_bytes: int, chunks: List[str], current: str) -> str:
    """Greedily append units to ``current``, flushing full chunks to ``chunks``.

    Returns the still open chunk.
    """
    for unit in units:
        combined = f"{current} {unit}" if current else unit
        if byte_length(combined) <= max_bytes:
            current = combined
            continue

        if current:
            chunks.append(current.strip())
            current = ""

        if byte_length(unit) <= max_bytes:
            current = unit
            continue

        # Unit alone is too large: sentence -> words -> characters
        words = unit.split()
        if len(words) > 1:
            current = _pack(words, max_bytes, chunks, current)
        else:
            pieces = _split_word(unit, max_bytes)
            chunks.extend(pieces[:-1])
            current = pieces[-1]
    return current


def chunk(text: str, max_bytes: int = DEFAULT_MAX_BYTES) -> List[str]:
    """
    Split text into ordered chunks no larger than ``max_bytes`` UTF-8 bytes.

    Sentences (ending with ``.``, ``!`` or ``?`` followed by whitespace) are
    packed greedily; a sentence that does not fit on its own is split on
    words. Joining the chunks with single spaces gives back the
    whitespace-normalized input.

    Args:
        text: Sanitized text
        max_bytes: Provider payload ceiling in bytes

    Returns:
        List of non-empty chunks (empty list for blank text)
    """
    if max_bytes < 4:
        raise ValueError("max_bytes must fit at least one character")

    text = text.strip()
    if not text:
        return []

    if byte_length(text) <= max_bytes:
        return [text]

    sentences = [s for s in _SENTENCE_END_RE.split(text) if s.strip()]
    chunks: List[str] = []
    current = _pack(sentences, max_bytes, chunks, "")
    if current:
        chunks.append(current.strip())

    return [c for c in chunks if c]
