from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

INPUT_MODES = {"text", "voice", "voice_conversation"}


@dataclass(frozen=True)
class Location:
    lat: float
    lng: float

    @classmethod
    def from_payload(cls, payload: Any) -> "Location | None":
        if not isinstance(payload, dict):
            return None
        lat = payload.get("lat")
        lng = payload.get("lng")
        if not isinstance(lat, (int, float)) or not isinstance(lng, (int, float)):
            return None
        if isinstance(lat, bool) or isinstance(lng, bool):
            return None
        if not (-90 <= lat <= 90 and -180 <= lng <= 180):
            return None
        return cls(lat=float(lat), lng=float(lng))


@dataclass(frozen=True)
class ToolContext:
    user_id: str | None
    session_id: str | None
    location: Location | None = None


@dataclass
class TriageTurn:
    message: str
    language: str
    session_id: str
    history: list[dict[str, str]] = field(default_factory=list)
    user_id: str | None = None
    input_mode: str = "text"
    location: Location | None = None
    profile: dict[str, Any] | None = None
    injection_flagged: bool = False

    @property
    def has_history(self) -> bool:
        return bool(self.history)

    @property
    def follow_up_count(self) -> int:
        return sum(1 for item in self.history if item.get("role") == "user")

    def tool_context(self) -> ToolContext:
        return ToolContext(user_id=self.user_id, session_id=self.session_id, location=self.location)
