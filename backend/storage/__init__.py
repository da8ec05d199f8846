from .database import SQLiteTriageDB
from .rate_limit import RateLimitDecision, RateLimitEntry, RateLimiter
from .session_store import SessionStore
from .telemetry import TelemetryStore, TranscribeEvent, TriageEvent, TTSEvent
from .writer import BackgroundWriter

__all__ = [
    "BackgroundWriter",
    "RateLimitDecision",
    "RateLimitEntry",
    "RateLimiter",
    "SQLiteTriageDB",
    "SessionStore",
    "TTSEvent",
    "TelemetryStore",
    "TranscribeEvent",
    "TriageEvent",
]
