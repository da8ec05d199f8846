from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable

from .time_utils import epoch_ms

SUPPORTED_LANGUAGE_CODES = ("hi", "ta", "te", "mr", "kn", "bn", "en")
INPUT_MODES = ("text", "voice", "voice_conversation")
SEVERITIES = ("emergency", "urgent", "routine", "self_care")

_DAY_MS = 24 * 60 * 60 * 1000
_HOUR_MS = 60 * 60 * 1000


@dataclass(frozen=True)
class TriageEvent:
    timestamp: int
    language: str
    input_mode: str
    severity: str | None
    confidence: float | None
    is_emergency: bool
    is_medical_query: bool
    follow_up_count: int
    latency_ms: int
    had_error: bool


@dataclass(frozen=True)
class TranscribeEvent:
    timestamp: int
    language: str
    latency_ms: int
    success: bool
    filtered: bool = False


@dataclass(frozen=True)
class TTSEvent:
    timestamp: int
    language: str
    text_length: int
    latency_ms: int
    success: bool


def _avg(values: list[float]) -> int:
    if not values:
        return 0
    return round(sum(values) / len(values))


def _p95(values: list[float]) -> int:
    if not values:
        return 0
    ordered = sorted(values)
    return round(ordered[int(len(ordered) * 0.95)])


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


class TelemetryStore:
    """Aggregate-only usage metrics. Events carry no message text or identifiers."""

    def __init__(self, *, max_events: int = 10_000, clock: Callable[[], int] = epoch_ms) -> None:
        self._max_events = max_events
        self._clock = clock
        self._started_at = clock()
        self._triage: list[TriageEvent] = []
        self._transcribe: list[TranscribeEvent] = []
        self._tts: list[TTSEvent] = []
        self.tool_calls: dict[str, int] = {}

    def _append(self, bucket: list, event: Any) -> None:
        bucket.append(event)
        if len(bucket) > self._max_events:
            del bucket[: len(bucket) - self._max_events]

    def record_triage(self, event: TriageEvent) -> None:
        self._append(self._triage, event)

    def record_transcribe(self, event: TranscribeEvent) -> None:
        self._append(self._transcribe, event)

    def record_tts(self, event: TTSEvent) -> None:
        self._append(self._tts, event)

    def record_tool_call(self, name: str) -> None:
        self.tool_calls[name] = self.tool_calls.get(name, 0) + 1

    @property
    def triage_events(self) -> list[TriageEvent]:
        return list(self._triage)

    def metrics(self) -> dict[str, Any]:
        now = self._clock()
        last_24h = now - _DAY_MS
        last_1h = now - _HOUR_MS

        recent = [e for e in self._triage if e.timestamp > last_24h]
        recent_stt = [e for e in self._transcribe if e.timestamp > last_24h]
        recent_tts = [e for e in self._tts if e.timestamp > last_24h]
        completed = [e for e in recent if not e.had_error and e.severity is not None]
        ok = [e for e in recent if not e.had_error]

        return {
            "totalTriages": len(self._triage),
            "totalEmergenciesDetected": sum(1 for e in self._triage if e.is_emergency),
            "totalVoiceSessions": len(self._transcribe),
            "languagesServed": len({e.language for e in recent}),
            "voiceUsagePercent": _percent(sum(1 for e in recent if e.input_mode != "text"), len(recent)),
            "uptimeMs": now - self._started_at,
            "triagesLast24h": len(recent),
            "emergenciesLast24h": sum(1 for e in recent if e.is_emergency),
            "triagesLastHour": sum(1 for e in self._triage if e.timestamp > last_1h),
            "severityDistribution": {
                severity: sum(1 for e in completed if e.severity == severity) for severity in SEVERITIES
            },
            "languageDistribution": {
                code: sum(1 for e in recent if e.language == code) for code in SUPPORTED_LANGUAGE_CODES
            },
            "inputModeDistribution": {
                mode: sum(1 for e in recent if e.input_mode == mode) for mode in INPUT_MODES
            },
            "performance": {
                "avgTriageMs": _avg([e.latency_ms for e in ok]),
                "p95TriageMs": _p95([e.latency_ms for e in ok]),
                "avgSTTMs": _avg([e.latency_ms for e in recent_stt if e.success]),
                "avgTTSMs": _avg([e.latency_ms for e in recent_tts if e.success]),
            },
            "quality": {
                "avgConfidence": _avg(
                    [round(e.confidence * 100) for e in completed if e.confidence is not None]
                ),
                "followUpRate": _percent(sum(1 for e in recent if e.follow_up_count > 0), len(recent)),
                "nonMedicalRate": _percent(sum(1 for e in recent if not e.is_medical_query), len(recent)),
            },
            "voicePipeline": {
                "sttSuccessRate": _percent(sum(1 for e in recent_stt if e.success), len(recent_stt)),
                "sttFilteredCount": sum(1 for e in recent_stt if e.filtered),
                "ttsSuccessRate": _percent(sum(1 for e in recent_tts if e.success), len(recent_tts)),
                "totalSTTRequests": len(recent_stt),
                "totalTTSRequests": len(recent_tts),
            },
            "errors": {
                "triageErrorRate": _percent(sum(1 for e in recent if e.had_error), len(recent)),
                "triageErrors": sum(1 for e in recent if e.had_error),
                "sttErrors": sum(1 for e in recent_stt if not e.success),
                "ttsErrors": sum(1 for e in recent_tts if not e.success),
            },
            "toolCalls": dict(sorted(self.tool_calls.items())),
            "recentActivity": [
                {
                    key: value
                    for key, value in asdict(e).items()
                    if key not in {"confidence", "follow_up_count", "had_error"}
                }
                for e in reversed(self._triage[-20:])
            ],
        }
