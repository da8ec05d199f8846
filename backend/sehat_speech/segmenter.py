from __future__ import annotations

import re

MAX_CHUNK_CHARS = 480
MIN_FRAGMENT_CHARS = 20

_SENTENCE_BREAK = re.compile(r"(?<=[.!?।\n])\s+")
_MARKDOWN_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"#{1,3}\s+"), ""),
    (re.compile(r"\*\*(.+?)\*\*"), r"\1"),
    (re.compile(r"\*(.+?)\*"), r"\1"),
    (re.compile(r"^[-*]\s+", re.MULTILINE), ""),
    (re.compile(r"^\d+\.\s+", re.MULTILINE), ""),
)


def strip_markdown(text: str) -> str:
    for pattern, replacement in _MARKDOWN_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def split_long(text: str, max_len: int = MAX_CHUNK_CHARS) -> list[str]:
    """Hard-split at the last space at or before ``max_len``, or at ``max_len`` itself."""
    chunks: list[str] = []
    remaining = text.strip()
    while remaining:
        if len(remaining) <= max_len:
            chunks.append(remaining)
            break
        split_at = remaining.rfind(" ", 0, max_len + 1)
        if split_at <= 0:
            split_at = max_len
        head = remaining[:split_at].strip()
        if head:
            chunks.append(head)
        remaining = remaining[split_at:].strip()
    return chunks


def segment(text: str, max_len: int = MAX_CHUNK_CHARS) -> list[str]:
    """Split text into speakable chunks, in order, each non-empty and at most ``max_len`` long."""
    if max_len < 1:
        raise ValueError("max_len must be positive")
    pieces = [piece.strip() for piece in _SENTENCE_BREAK.split(text or "")]
    pieces = [piece for piece in pieces if piece]

    merged: list[str] = []
    for piece in pieces:
        if merged and (len(merged[-1]) < MIN_FRAGMENT_CHARS or len(piece) < MIN_FRAGMENT_CHARS):
            merged[-1] = f"{merged[-1]} {piece}"
        else:
            merged.append(piece)

    chunks: list[str] = []
    for sentence in merged:
        chunks.extend(split_long(sentence, max_len))
    return chunks
