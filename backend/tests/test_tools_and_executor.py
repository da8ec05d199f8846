from __future__ import annotations

import asyncio
from typing import Any

import httpx

from sehat_agent_core import HookRunner, Location, ToolContext, ToolDefinition, ToolExecutor, ToolRegistry
from sehat_agent_core.hooks import HookDecision, context_requirements_hook
from sehat_tools import FacilityLookup, SehatToolset, register_tools
from sehat_tools.core_tools import applicable_schemes, facility_for_specialist
from sehat_tools.facility_lookup import haversine_km, rank_elements
from storage import SessionStore, SQLiteTriageDB


def _executor(session_store: SessionStore | None = None, facilities: FacilityLookup | None = None):
    registry = ToolRegistry()
    register_tools(registry, SehatToolset(session_store, facilities))
    hooks = HookRunner()
    hooks.add_before(context_requirements_hook)
    return ToolExecutor(registry=registry, hooks=hooks), registry, hooks


def _run(coro):
    return asyncio.run(coro)


ANON = ToolContext(user_id=None, session_id="s-1")


def test_registry_lists_tools_and_resolves_alias():
    _, registry, _ = _executor()
    assert registry.list_names() == [
        "find_nearby_hospitals",
        "get_facility_type",
        "get_health_schemes",
        "get_patient_history",
    ]
    assert "get_indian_health_schemes" in registry
    assert registry.resolve("get_indian_health_schemes").name == "get_health_schemes"
    schema = registry.schemas()[0]
    assert set(schema) == {"name", "description", "input_schema"}


def test_unknown_tool_returns_structured_not_found():
    executor, _, _ = _executor()
    result = _run(executor.execute("book_ambulance", {}, ANON))
    assert result == {"error": "Unknown tool: book_ambulance", "found": False}


def test_tool_exception_is_contained():
    registry = ToolRegistry()

    async def broken(ctx, payload):
        raise RuntimeError("database down")

    registry.register(ToolDefinition("broken", "always fails", broken))
    outcomes = []
    hooks = HookRunner()
    hooks.add_after(lambda ctx, tool, payload, outcome: outcomes.append(outcome))
    executor = ToolExecutor(registry=registry, hooks=hooks)

    result = _run(executor.execute("broken", None, ANON))
    assert "database down" in result["error"]
    assert outcomes[0].status == "failed"
    assert outcomes[0].error_code == "tool_exception"


def test_failing_after_hook_does_not_break_execution():
    executor, _, hooks = _executor()

    def explode(ctx, tool, payload, outcome):
        raise ValueError("hook bug")

    hooks.add_after(explode)
    result = _run(executor.execute("get_facility_type", {"specialist": "cardiologist", "severity": "urgent"}, ANON))
    assert result["facility_level"] == "District Hospital"


def test_before_hook_blocks_history_for_anonymous_user():
    executor, _, _ = _executor()
    result = _run(executor.execute("get_patient_history", {}, ANON))
    assert result["code"] == "identity_required"


def test_before_hook_can_veto():
    executor, _, hooks = _executor()
    hooks.add_before(lambda ctx, tool, payload: HookDecision(False, "paused", "Tools are paused."))
    result = _run(executor.execute("get_facility_type", {}, ANON))
    assert result == {"error": "Tools are paused.", "code": "paused"}


def test_patient_history_reads_recent_sessions(tmp_path):
    store = SessionStore(SQLiteTriageDB(str(tmp_path / "history.sqlite")))
    for idx, severity in enumerate(["routine", "urgent"]):
        store.upsert_session(
            session_id=f"sess-{idx}",
            user_id="user-a",
            language="en",
            severity=severity,
            confidence=0.8,
            symptoms=["cough"],
            input_mode="text",
            reasoning_summary="summary",
            is_emergency=False,
            is_medical_query=True,
            follow_up_count=0,
            latency_ms=100,
            had_error=False,
        )
    executor, _, _ = _executor(store)
    ctx = ToolContext(user_id="user-a", session_id="now")

    result = _run(executor.execute("get_patient_history", {"limit": 500}, ctx))
    assert result["total_sessions"] == 2
    assert {item["severity"] for item in result["sessions"]} == {"routine", "urgent"}
    assert all("session_id" not in item for item in result["sessions"])

    other = _run(executor.execute("get_patient_history", {}, ToolContext(user_id="user-b", session_id="x")))
    assert other["total_sessions"] == 0


def test_facility_type_mapping():
    assert facility_for_specialist("anything", "emergency")["facility_level"] == "Tertiary / Emergency"
    assert facility_for_specialist("Cardiologist", "urgent")["facility_level"] == "District Hospital"
    assert facility_for_specialist("", "routine")["facility_level"] == "PHC"


def test_health_schemes_filter_by_level_and_condition():
    names = [scheme["name"] for scheme in applicable_schemes("emergency", "cardiac")]
    assert any("PM-JAY" in name for name in names)
    assert any("NPCDCS" in name for name in names)
    assert not any("JSY" in name for name in names)
    assert applicable_schemes("home", "fever") == []


def test_find_nearby_without_location_returns_fallback_link():
    executor, _, _ = _executor()
    result = _run(executor.execute("find_nearby_hospitals", {"care_level": "hospital"}, ANON))
    assert result["hospitals"] == []
    assert result["fallback_url"].startswith("https://www.google.com/maps/search/")


def test_find_nearby_ranks_overpass_results(monkeypatch):
    monkeypatch.setenv("SEHAT_DISABLE_EXTERNAL_WEB", "false")
    seen: dict[str, Any] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = request.content.decode()
        return httpx.Response(
            200,
            json={
                "elements": [
                    {"lat": 28.70, "lon": 77.20, "tags": {"name": "Far Hospital", "amenity": "hospital"}},
                    {"center": {"lat": 28.6140, "lon": 77.2091}, "tags": {"name": "Near Clinic", "amenity": "clinic"}},
                    {"tags": {"name": "No Coordinates"}},
                ]
            },
        )

    lookup = FacilityLookup(client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(handler)))
    executor, _, _ = _executor(facilities=lookup)
    ctx = ToolContext(user_id=None, session_id="s", location=Location(lat=28.6139, lng=77.2090))

    result = _run(executor.execute("find_nearby_hospitals", {"care_level": "hospital", "radius_km": 5}, ctx))

    assert [item["name"] for item in result["hospitals"]] == ["Near Clinic", "Far Hospital"]
    assert result["hospitals"][0]["type"] == "clinic"
    assert result["total_found"] == 3
    assert "around%3A5000" in seen["body"] or "around:5000" in seen["body"]


def test_find_nearby_falls_back_on_upstream_failure(monkeypatch):
    monkeypatch.setenv("SEHAT_DISABLE_EXTERNAL_WEB", "false")
    lookup = FacilityLookup(
        client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(504)))
    )
    result = _run(lookup.nearby(lat=12.97, lng=77.59))
    assert result["hospitals"] == []
    assert "12.97,77.59" in result["fallback_url"]


def test_rank_elements_caps_results_and_sorts():
    elements = [{"lat": 10 + i / 100, "lon": 76.0, "tags": {"name": f"H{i}"}} for i in range(8, 0, -1)]
    ranked = rank_elements(elements, 10.0, 76.0)
    assert len(ranked) == 5
    assert [item.name for item in ranked] == ["H1", "H2", "H3", "H4", "H5"]
    assert haversine_km(0, 0, 0, 0) == 0


def test_location_payload_validation():
    assert Location.from_payload({"lat": 12.9, "lng": 77.6}) == Location(12.9, 77.6)
    assert Location.from_payload({"lat": 200, "lng": 77.6}) is None
    assert Location.from_payload({"lat": True, "lng": 1}) is None
    assert Location.from_payload(None) is None
