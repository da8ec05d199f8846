from __future__ import annotations

import asyncio
import json
from typing import Any

import httpx
import pytest

from sehat_agent_core import (
    AnthropicReasoningEngine,
    ConfigurationError,
    HookRunner,
    StreamFailure,
    ToolDefinition,
    ToolExecutor,
    ToolRegistry,
    TriageTurn,
    UpstreamError,
)
from sehat_agent_core.reasoning import PARSE_FAILURE_MESSAGE, extract_json_object, terminal_event_for

RESULT_JSON = json.dumps(
    {
        "is_medical_query": True,
        "severity": "urgent",
        "confidence": 0.82,
        "reasoning_summary": "Persistent high fever",
        "symptoms_identified": ["fever", "chills"],
        "red_flags": [],
        "needs_follow_up": False,
        "action_plan": {"go_to": "PHC today", "care_level": "phc", "urgency": "within_24h"},
    }
)


def _frames(*events: dict[str, Any]) -> bytes:
    return "".join(f"event: {event['type']}\ndata: {json.dumps(event)}\n\n" for event in events).encode()


def _thinking_block(index: int, text: str) -> list[dict[str, Any]]:
    return [
        {"type": "content_block_start", "index": index, "content_block": {"type": "thinking", "thinking": ""}},
        {"type": "content_block_delta", "index": index, "delta": {"type": "thinking_delta", "thinking": text}},
        {"type": "content_block_delta", "index": index, "delta": {"type": "signature_delta", "signature": "sig"}},
        {"type": "content_block_stop", "index": index},
    ]


def _text_block(index: int, text: str) -> list[dict[str, Any]]:
    half = len(text) // 2
    return [
        {"type": "content_block_start", "index": index, "content_block": {"type": "text", "text": ""}},
        {"type": "content_block_delta", "index": index, "delta": {"type": "text_delta", "text": text[:half]}},
        {"type": "content_block_delta", "index": index, "delta": {"type": "text_delta", "text": text[half:]}},
        {"type": "content_block_stop", "index": index},
    ]


def _tool_block(index: int, tool_id: str, name: str, tool_input: dict[str, Any]) -> list[dict[str, Any]]:
    raw = json.dumps(tool_input)
    return [
        {
            "type": "content_block_start",
            "index": index,
            "content_block": {"type": "tool_use", "id": tool_id, "name": name, "input": {}},
        },
        {"type": "content_block_delta", "index": index, "delta": {"type": "input_json_delta", "partial_json": raw[:5]}},
        {"type": "content_block_delta", "index": index, "delta": {"type": "input_json_delta", "partial_json": raw[5:]}},
        {"type": "content_block_stop", "index": index},
    ]


def _message(*blocks: list[dict[str, Any]], stop_reason: str = "end_turn") -> bytes:
    events: list[dict[str, Any]] = [{"type": "message_start", "message": {"id": "msg"}}]
    for block in blocks:
        events.extend(block)
    events.append({"type": "message_delta", "delta": {"stop_reason": stop_reason}})
    events.append({"type": "message_stop"})
    return _frames(*events)


class _Provider:
    """Serves scripted responses in order and records every request body."""

    def __init__(self, responses: list[httpx.Response | Exception]) -> None:
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _stream_response(body: bytes) -> httpx.Response:
    return httpx.Response(200, content=body, headers={"content-type": "text/event-stream"})


def _engine(provider: _Provider, *, api_key: str = "key", sleeps: list[float] | None = None, **kwargs):
    registry = ToolRegistry()

    async def facility_type(ctx, payload):
        return {"facility_level": "CHC", "specialist": payload.get("specialist")}

    registry.register(ToolDefinition("get_facility_type", "Facility tier for a specialist", facility_type))
    executor = ToolExecutor(registry=registry, hooks=HookRunner())
    recorded = sleeps if sleeps is not None else []

    async def fake_sleep(delay: float) -> None:
        recorded.append(delay)

    return AnthropicReasoningEngine(
        executor=executor,
        api_key=api_key,
        model="test-model",
        base_url="https://anthropic.test/v1",
        client_factory=lambda: httpx.AsyncClient(transport=httpx.MockTransport(provider)),
        sleep=fake_sleep,
        **kwargs,
    )


def _turn(**overrides: Any) -> TriageTurn:
    values: dict[str, Any] = {"message": "I have had fever for 4 days", "language": "en", "session_id": "s-1"}
    values.update(overrides)
    return TriageTurn(**values)


async def _collect(engine: AnthropicReasoningEngine, turn: TriageTurn) -> list[Any]:
    return [event async for event in engine.stream(turn)]


def test_streams_thinking_then_result():
    provider = _Provider([_stream_response(_message(_thinking_block(0, "Fever 4 days"), _text_block(1, RESULT_JSON)))])
    events = asyncio.run(_collect(_engine(provider), _turn()))

    types = [event.type for event in events]
    assert types[:2] == ["thinking", "thinking_done"]
    assert types[-1] == "result"
    assert set(types[2:-1]) == {"text"}
    assert events[-1].data.severity == "urgent"
    assert events[-1].data.symptoms_identified == ["fever", "chills"]

    body = provider.requests[0]
    assert body["stream"] is True
    assert body["thinking"] == {"type": "enabled", "budget_tokens": 10000}
    assert body["messages"][-1] == {"role": "user", "content": "I have had fever for 4 days"}
    assert [tool["name"] for tool in body["tools"]] == ["get_facility_type"]
    assert "tool_choice" not in body


def test_voice_turn_uses_smaller_thinking_budget():
    provider = _Provider([_stream_response(_message(_text_block(0, RESULT_JSON)))])
    asyncio.run(_collect(_engine(provider), _turn(input_mode="voice_conversation")))
    assert provider.requests[0]["thinking"]["budget_tokens"] == 1024


def test_retries_transient_failure_before_anything_is_emitted():
    sleeps: list[float] = []
    provider = _Provider(
        [
            httpx.Response(529, json={"error": {"type": "overloaded_error", "message": "Overloaded"}}),
            httpx.ConnectError("reset"),
            _stream_response(_message(_text_block(0, RESULT_JSON))),
        ]
    )
    events = asyncio.run(_collect(_engine(provider, sleeps=sleeps), _turn()))
    assert events[-1].type == "result"
    assert len(provider.requests) == 3
    assert sleeps == [1.0, 2.0]


def test_gives_up_after_three_attempts():
    sleeps: list[float] = []
    provider = _Provider([httpx.Response(503, text="unavailable") for _ in range(3)])
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(_collect(_engine(provider, sleeps=sleeps), _turn()))
    assert excinfo.value.upstream_status == 503
    assert len(provider.requests) == 3
    assert sleeps == [1.0, 2.0]


def test_client_errors_are_not_retried():
    provider = _Provider([httpx.Response(400, json={"error": {"message": "bad request"}})])
    with pytest.raises(UpstreamError) as excinfo:
        asyncio.run(_collect(_engine(provider), _turn()))
    assert excinfo.value.message == "bad request"
    assert len(provider.requests) == 1


def test_no_retry_once_events_were_emitted():
    body = _frames(
        *_thinking_block(0, "partial"),
        {"type": "error", "error": {"type": "overloaded_error", "message": "Overloaded"}},
    )
    provider = _Provider([_stream_response(body), _stream_response(_message(_text_block(0, RESULT_JSON)))])
    seen: list[str] = []

    async def scenario() -> None:
        async for event in _engine(provider).stream(_turn()):
            seen.append(event.type)

    with pytest.raises(StreamFailure) as excinfo:
        asyncio.run(scenario())
    assert seen == ["thinking", "thinking_done"]
    assert excinfo.value.message == "Reasoning stream interrupted: Overloaded"
    assert isinstance(excinfo.value.__cause__, UpstreamError)
    assert len(provider.requests) == 1


def test_tool_round_sends_results_back():
    first = _message(
        _thinking_block(0, "Need facility tier"),
        _tool_block(1, "toolu_1", "get_facility_type", {"specialist": "general physician", "severity": "routine"}),
        stop_reason="tool_use",
    )
    second = _message(_text_block(0, RESULT_JSON))
    provider = _Provider([_stream_response(first), _stream_response(second)])

    events = asyncio.run(_collect(_engine(provider), _turn()))
    types = [event.type for event in events]
    assert types[:4] == ["thinking", "thinking_done", "tool_call", "tool_result"]
    assert types[-1] == "result"
    assert events[2].input == {"specialist": "general physician", "severity": "routine"}
    assert events[3].result == {"facility_level": "CHC", "specialist": "general physician"}

    follow_up_messages = provider.requests[1]["messages"]
    assistant, tool_results = follow_up_messages[-2], follow_up_messages[-1]
    assert assistant["role"] == "assistant"
    assert assistant["content"][0] == {"type": "thinking", "thinking": "Need facility tier", "signature": "sig"}
    assert assistant["content"][1] == {
        "type": "tool_use",
        "id": "toolu_1",
        "name": "get_facility_type",
        "input": {"specialist": "general physician", "severity": "routine"},
    }
    assert tool_results["role"] == "user"
    assert tool_results["content"][0]["type"] == "tool_result"
    assert tool_results["content"][0]["tool_use_id"] == "toolu_1"
    assert json.loads(tool_results["content"][0]["content"])["facility_level"] == "CHC"


def test_final_round_disables_tools():
    looping = _message(_tool_block(0, "toolu_x", "get_facility_type", {"specialist": "x"}), stop_reason="tool_use")
    final = _message(_text_block(0, RESULT_JSON))
    provider = _Provider([_stream_response(looping), _stream_response(final)])

    events = asyncio.run(_collect(_engine(provider, max_tool_rounds=1), _turn()))
    assert events[-1].type == "result"
    assert "tool_choice" not in provider.requests[0]
    assert provider.requests[1]["tool_choice"] == {"type": "none"}


def test_unknown_tool_result_is_relayed_not_raised():
    first = _message(_tool_block(0, "toolu_2", "book_ambulance", {}), stop_reason="tool_use")
    provider = _Provider([_stream_response(first), _stream_response(_message(_text_block(0, RESULT_JSON)))])
    events = asyncio.run(_collect(_engine(provider), _turn()))
    tool_result = next(event for event in events if event.type == "tool_result")
    assert tool_result.result["found"] is False


def test_follow_up_answer_becomes_follow_up_event():
    payload = json.dumps(
        {
            "is_medical_query": True,
            "needs_follow_up": True,
            "follow_up_question": "Is the fever above 102F?",
            "follow_up_options": [{"label": "Yes", "value": "Yes, above 102F"}],
        }
    )
    provider = _Provider([_stream_response(_message(_text_block(0, payload)))])
    events = asyncio.run(_collect(_engine(provider), _turn()))
    assert events[-1].type == "follow_up"
    assert events[-1].question == "Is the fever above 102F?"
    assert events[-1].options == [{"label": "Yes", "value": "Yes, above 102F"}]


def test_unparseable_answer_becomes_error_event():
    provider = _Provider([_stream_response(_message(_text_block(0, "I am not sure what to say.")))])
    events = asyncio.run(_collect(_engine(provider), _turn()))
    assert events[-1].type == "error"
    assert events[-1].message == PARSE_FAILURE_MESSAGE


def test_missing_api_key_is_configuration_error():
    provider = _Provider([])
    with pytest.raises(ConfigurationError):
        asyncio.run(_collect(_engine(provider, api_key=""), _turn()))
    assert provider.requests == []


def test_extract_json_object_finds_embedded_block():
    assert extract_json_object('Here you go: {"severity": "routine", "nested": {"a": 1}} thanks') == {
        "severity": "routine",
        "nested": {"a": 1},
    }
    assert extract_json_object("no json") is None
    assert extract_json_object("") is None


def test_terminal_event_for_invalid_severity_is_error():
    event = terminal_event_for(json.dumps({"severity": "catastrophic"}))
    assert event.type == "error"


def test_non_medical_query_with_follow_up_flag_is_result():
    event = terminal_event_for(
        json.dumps({"is_medical_query": False, "needs_follow_up": True, "follow_up_question": "?"})
    )
    assert event.type == "result"


def test_system_prompt_carries_profile_language_and_location():
    provider = _Provider([_stream_response(_message(_text_block(0, RESULT_JSON)))])
    turn = _turn(
        language="ta",
        profile={"age": 58, "pre_existing_conditions": ["diabetes", "hypertension"], "gender": ""},
        history=[{"role": "user", "content": "first"}, {"role": "assistant", "content": "second"}],
    )
    asyncio.run(_collect(_engine(provider), turn))

    body = provider.requests[0]
    assert "- pre existing conditions: diabetes, hypertension" in body["system"]
    assert "- age: 58" in body["system"]
    assert "gender" not in body["system"]
    assert "The patient speaks Tamil" in body["system"]
    assert "Do not call `find_nearby_hospitals`" in body["system"]
    assert [message["role"] for message in body["messages"]] == ["user", "assistant", "user"]
