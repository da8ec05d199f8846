from __future__ import annotations

import asyncio
import logging
import sqlite3
from datetime import datetime

import pytest

from sehat_agent_core import encode_sse
from sehat_agent_core.events import ThinkingEvent
from storage import BackgroundWriter, SessionStore, SQLiteTriageDB, TelemetryStore, TranscribeEvent, TriageEvent, TTSEvent

DAY_MS = 24 * 60 * 60 * 1000


@pytest.fixture
def store(tmp_path) -> SessionStore:
    return SessionStore(SQLiteTriageDB(str(tmp_path / "nested" / "store.sqlite")))


def _session(store: SessionStore, session_id: str, **overrides) -> None:
    values = {
        "session_id": session_id,
        "user_id": "user-a",
        "language": "hi",
        "severity": None,
        "confidence": None,
        "symptoms": [],
        "input_mode": "voice",
        "reasoning_summary": None,
        "is_emergency": False,
        "is_medical_query": True,
        "follow_up_count": 1,
        "latency_ms": 500,
        "had_error": False,
    }
    values.update(overrides)
    store.upsert_session(**values)


def test_session_upsert_accumulates_follow_ups_and_keeps_severity(store):
    _session(store, "s-1", is_emergency=True)
    _session(store, "s-1", severity="urgent", confidence=0.7, symptoms=["fever"], follow_up_count=0, user_id=None)

    sessions = store.recent_sessions("user-a")
    assert len(sessions) == 1
    assert sessions[0]["severity"] == "urgent"
    assert sessions[0]["symptoms"] == ["fever"]
    assert sessions[0]["is_emergency"] is True
    assert store.session_owner("s-1") == "user-a"
    assert store.session_owner("missing") is None


def test_severity_is_constrained(store):
    with pytest.raises(sqlite3.IntegrityError):
        _session(store, "s-bad", severity="catastrophic")


def test_first_owner_keeps_the_session(store):
    _session(store, "s-own", user_id="user-a")
    _session(store, "s-own", user_id="user-b")
    assert store.session_owner("s-own") == "user-a"
    assert store.recent_sessions("user-b") == []


def test_anonymous_session_is_claimed_by_first_identified_user(store):
    _session(store, "s-anon", user_id=None)
    _session(store, "s-anon", user_id="user-a")
    assert store.session_owner("s-anon") == "user-a"


def test_recent_sessions_list_errors_and_skip_non_medical(store):
    _session(store, "ok", severity="routine")
    _session(store, "err", had_error=True)
    _session(store, "chat", is_medical_query=False)
    listed = {item["session_id"]: item for item in store.recent_sessions("user-a")}
    assert set(listed) == {"ok", "err"}
    assert listed["err"]["had_error"] is True
    assert listed["ok"]["had_error"] is False


def test_failed_turn_keeps_earlier_symptoms(store):
    _session(store, "s-4", severity="urgent", confidence=0.8, symptoms=["fever", "rash"])
    _session(store, "s-4", had_error=True)
    [listed] = store.recent_sessions("user-a")
    assert listed["symptoms"] == ["fever", "rash"]
    assert listed["severity"] == "urgent"
    assert listed["had_error"] is True


def test_messages_keep_insertion_order(store):
    for idx, role in enumerate(["user", "assistant", "user"]):
        store.add_message(session_id="s-2", user_id=None, role=role, content=f"m{idx}", language="ta", is_follow_up=idx > 0)
    messages = store.session_messages("s-2")
    assert [m["content"] for m in messages] == ["m0", "m1", "m2"]
    assert [m["is_follow_up"] for m in messages] == [False, True, True]
    assert datetime.fromisoformat(messages[0]["created_at"]).tzinfo is not None


def test_result_and_profile_round_trip(store):
    store.save_result(session_id="s-3", user_id="u", result={"severity": "routine"}, thinking_content="", language="en")
    store.save_result(
        session_id="s-3", user_id="u", result={"severity": "urgent"}, thinking_content="second look", language="en"
    )
    assert store.get_result("s-3") == {"result": {"severity": "urgent"}, "thinking_content": "second look"}
    assert store.get_result("nope") is None

    assert store.get_profile(None) is None
    store.upsert_profile("u", {"age": 40})
    store.upsert_profile("u", {"age": 41, "allergies": ["sulfa"]})
    assert store.get_profile("u") == {"age": 41, "allergies": ["sulfa"]}


def _triage(timestamp: int, **overrides) -> TriageEvent:
    values = {
        "timestamp": timestamp,
        "language": "hi",
        "input_mode": "text",
        "severity": "routine",
        "confidence": 0.8,
        "is_emergency": False,
        "is_medical_query": True,
        "follow_up_count": 0,
        "latency_ms": 1000,
        "had_error": False,
    }
    values.update(overrides)
    return TriageEvent(**values)


def test_metrics_aggregate_recent_window():
    now = 10 * DAY_MS
    telemetry = TelemetryStore(clock=lambda: now)
    telemetry.record_triage(_triage(now - 2 * DAY_MS, severity="emergency", is_emergency=True))
    telemetry.record_triage(_triage(now - 1000, severity="urgent", confidence=0.6, input_mode="voice", latency_ms=3000))
    telemetry.record_triage(_triage(now - 500, severity=None, confidence=None, had_error=True, language="ta"))
    telemetry.record_triage(_triage(now - 100, follow_up_count=2, is_medical_query=False))
    telemetry.record_transcribe(TranscribeEvent(timestamp=now - 10, language="hi-IN", latency_ms=400, success=True))
    telemetry.record_transcribe(
        TranscribeEvent(timestamp=now - 10, language="hi-IN", latency_ms=0, success=True, filtered=True)
    )
    telemetry.record_tts(TTSEvent(timestamp=now - 10, language="hi-IN", text_length=50, latency_ms=800, success=False))
    telemetry.record_tool_call("get_facility_type")
    telemetry.record_tool_call("get_facility_type")

    metrics = telemetry.metrics()
    assert metrics["totalTriages"] == 4
    assert metrics["totalEmergenciesDetected"] == 1
    assert metrics["triagesLast24h"] == 3
    assert metrics["emergenciesLast24h"] == 0
    assert metrics["languagesServed"] == 2
    assert metrics["voiceUsagePercent"] == 33
    assert metrics["severityDistribution"] == {"emergency": 0, "urgent": 1, "routine": 1, "self_care": 0}
    assert metrics["performance"]["avgTriageMs"] == 2000
    assert metrics["performance"]["avgSTTMs"] == 200
    assert metrics["quality"]["avgConfidence"] == 70
    assert metrics["quality"]["nonMedicalRate"] == 33
    assert metrics["voicePipeline"]["sttFilteredCount"] == 1
    assert metrics["voicePipeline"]["ttsSuccessRate"] == 0
    assert metrics["errors"]["triageErrors"] == 1
    assert metrics["toolCalls"] == {"get_facility_type": 2}
    assert metrics["recentActivity"][0]["timestamp"] == now - 100
    assert set(metrics["recentActivity"][0]) == {
        "timestamp",
        "language",
        "input_mode",
        "severity",
        "is_emergency",
        "is_medical_query",
        "latency_ms",
    }


def test_metrics_on_empty_store_are_zero():
    metrics = TelemetryStore(clock=lambda: 5).metrics()
    assert metrics["totalTriages"] == 0
    assert metrics["performance"] == {"avgTriageMs": 0, "p95TriageMs": 0, "avgSTTMs": 0, "avgTTSMs": 0}
    assert metrics["recentActivity"] == []


def test_event_buffers_are_capped():
    telemetry = TelemetryStore(max_events=3, clock=lambda: 100)
    for idx in range(5):
        telemetry.record_triage(_triage(idx))
    assert [event.timestamp for event in telemetry.triage_events] == [2, 3, 4]


def test_background_writer_logs_failures_and_drains(caplog):
    written: list[str] = []

    def ok(value: str) -> None:
        written.append(value)

    def broken() -> None:
        raise sqlite3.OperationalError("database is locked")

    async def scenario(writer: BackgroundWriter) -> None:
        writer.submit("ok", ok, "first")
        writer.submit("broken", broken)
        writer.submit("ok", ok, "second")
        assert writer.pending == 3
        await writer.drain()

    writer = BackgroundWriter()
    with caplog.at_level(logging.ERROR, logger="storage.writer"):
        asyncio.run(scenario(writer))

    assert sorted(written) == ["first", "second"]
    assert writer.pending == 0
    assert any("background write failed (broken)" in record.getMessage() for record in caplog.records)


def test_encode_sse_always_ends_with_done():
    async def failing():
        yield ThinkingEvent(content="हाँ")
        yield {"type": "text", "content": "raw dict"}
        raise RuntimeError("producer died")

    async def collect() -> list[str]:
        return [frame async for frame in encode_sse(failing())]

    frames = asyncio.run(collect())
    assert frames[0] == 'data: {"type": "thinking", "content": "हाँ"}\n\n'
    assert frames[1] == 'data: {"type": "text", "content": "raw dict"}\n\n'
    assert frames[2].startswith('data: {"type": "error"')
    assert frames[3] == "data: [DONE]\n\n"
