from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from .emergency import SUPPORTED_LANGUAGES

MAX_MESSAGE_LENGTH = 5000
MAX_CONVERSATION_MESSAGES = 20

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")

INJECTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"ignore\s+(all\s+)?(previous|prior|above|your)\s+(instructions|rules|guidelines|prompts)", re.I),
    re.compile(r"ignore\s+all\s+instructions", re.I),
    re.compile(r"disregard\s+(all\s+)?(previous|prior|above|your)\s+(instructions|rules)", re.I),
    re.compile(r"you\s+are\s+now\s+(a|an|my)\s+", re.I),
    re.compile(r"new\s+(role|persona|identity|instructions?):", re.I),
    re.compile(r"^system:", re.I | re.M),
    re.compile(r"###\s*INSTRUCTION", re.I),
    re.compile(r"forget\s+(your|all|previous)\s+(rules|instructions|guidelines|role)", re.I),
    re.compile(r"override\s+(your|all|previous)\s+(rules|instructions|guidelines)", re.I),
    re.compile(r"do\s+not\s+follow\s+(your|the)\s+(rules|instructions|guidelines)", re.I),
    re.compile(r"act\s+as\s+(a|an|if\s+you\s+are)\s+", re.I),
    re.compile(r"pretend\s+(you\s+are|to\s+be)\s+", re.I),
    re.compile(r"reveal\s+(your|the)\s+(system\s+)?prompt", re.I),
    re.compile(r"show\s+me\s+(your|the)\s+(system\s+)?prompt", re.I),
    re.compile(r"what\s+(are|is)\s+your\s+(system\s+)?(prompt|instructions)", re.I),
    re.compile(r"repeat\s+(your|the)\s+(system\s+)?(prompt|instructions)", re.I),
    re.compile(r"अपने\s+(नियम|निर्देश)\s+(भूल|छोड़|बदल)"),
    re.compile(r"सब\s+निर्देश\s+(भूल|छोड़)"),
)


@dataclass(frozen=True)
class SanitizedMessage:
    text: str
    flagged: bool
    reason: str | None = None


def validate_language(value: Any) -> str:
    if isinstance(value, str) and value in SUPPORTED_LANGUAGES:
        return value
    return "en"


def _clean(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def sanitize_message(text: str) -> SanitizedMessage:
    """Strip control characters and cap length. Injection phrasing is flagged, not blocked."""
    cleaned = _clean(text).strip()[:MAX_MESSAGE_LENGTH]
    for pattern in INJECTION_PATTERNS:
        if pattern.search(cleaned):
            return SanitizedMessage(text=cleaned, flagged=True, reason="Potential prompt injection detected")
    return SanitizedMessage(text=cleaned, flagged=False)


def sanitize_history(messages: Any) -> list[dict[str, str]]:
    if not isinstance(messages, list):
        return []

    valid: list[dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            continue
        role = item.get("role")
        content = item.get("content")
        if role not in {"user", "assistant"} or not isinstance(content, str):
            continue
        valid.append({"role": role, "content": _clean(content)[:MAX_MESSAGE_LENGTH]})

    return valid[-MAX_CONVERSATION_MESSAGES:]
