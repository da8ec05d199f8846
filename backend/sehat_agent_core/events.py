from __future__ import annotations

import json
import logging
from typing import Annotated, Any, AsyncIterator, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

logger = logging.getLogger(__name__)

DONE_SENTINEL = "[DONE]"


class DoctorSummary(BaseModel):
    model_config = ConfigDict(extra="allow")

    english: str = ""
    local: str = ""


class ActionPlan(BaseModel):
    model_config = ConfigDict(extra="allow")

    go_to: str = ""
    care_level: str = "phc"
    urgency: str = "within_24h"
    tell_doctor: DoctorSummary = Field(default_factory=DoctorSummary)
    do_not: list[str] = Field(default_factory=list)
    first_aid: list[str] = Field(default_factory=list)
    emergency_numbers: list[str] | None = None


class TriageResult(BaseModel):
    model_config = ConfigDict(extra="allow")

    is_medical_query: bool = True
    redirect_message: str | None = None
    severity: Literal["emergency", "urgent", "routine", "self_care"] = "routine"
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    reasoning_summary: str = ""
    symptoms_identified: list[str] = Field(default_factory=list)
    red_flags: list[str] = Field(default_factory=list)
    risk_factors: list[str] = Field(default_factory=list)
    needs_follow_up: bool = False
    follow_up_question: str | None = None
    follow_up_options: list[dict[str, str]] | None = None
    action_plan: ActionPlan = Field(default_factory=ActionPlan)
    disclaimer: str = ""


class EmergencyEvent(BaseModel):
    type: Literal["emergency"] = "emergency"
    data: dict[str, Any]


class ThinkingEvent(BaseModel):
    type: Literal["thinking"] = "thinking"
    content: str


class ThinkingDoneEvent(BaseModel):
    type: Literal["thinking_done"] = "thinking_done"


class ToolCallEvent(BaseModel):
    type: Literal["tool_call"] = "tool_call"
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class ToolResultEvent(BaseModel):
    type: Literal["tool_result"] = "tool_result"
    name: str
    result: dict[str, Any] | None = None


class FollowUpEvent(BaseModel):
    type: Literal["follow_up"] = "follow_up"
    question: str
    options: list[dict[str, str]] | None = None


class ResultEvent(BaseModel):
    type: Literal["result"] = "result"
    data: TriageResult


class TextEvent(BaseModel):
    type: Literal["text"] = "text"
    content: str


class FacilityResultEvent(BaseModel):
    type: Literal["facility_result"] = "facility_result"
    message: str
    data: dict[str, Any] = Field(default_factory=dict)


class ErrorEvent(BaseModel):
    type: Literal["error"] = "error"
    message: str


StreamEvent = Annotated[
    Union[
        EmergencyEvent,
        ThinkingEvent,
        ThinkingDoneEvent,
        ToolCallEvent,
        ToolResultEvent,
        FollowUpEvent,
        ResultEvent,
        TextEvent,
        FacilityResultEvent,
        ErrorEvent,
    ],
    Field(discriminator="type"),
]

STREAM_EVENT_TYPES: frozenset[str] = frozenset(
    {
        "emergency",
        "thinking",
        "thinking_done",
        "tool_call",
        "tool_result",
        "follow_up",
        "result",
        "text",
        "facility_result",
        "error",
    }
)
TERMINAL_EVENT_TYPES: frozenset[str] = frozenset({"result", "follow_up", "facility_result", "error"})

_EVENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(StreamEvent)


def parse_event(payload: dict[str, Any]) -> Any:
    return _EVENT_ADAPTER.validate_python(payload)


def is_terminal(event: BaseModel) -> bool:
    return getattr(event, "type", None) in TERMINAL_EVENT_TYPES


def event_payload(event: BaseModel) -> dict[str, Any]:
    return event.model_dump(mode="json", exclude_none=True)


def sse_data(payload: dict[str, Any] | str) -> str:
    body = payload if isinstance(payload, str) else json.dumps(payload, ensure_ascii=False)
    return f"data: {body}\n\n"


def sse_done() -> str:
    return sse_data(DONE_SENTINEL)


async def encode_sse(events: AsyncIterator[BaseModel | dict[str, Any]]) -> AsyncIterator[str]:
    """Frame an event iterator as SSE and always close it with ``[DONE]``.

    An exception escaping the producer becomes a final ``error`` frame so the
    client never waits on a stream that silently stopped.
    """
    try:
        async for event in events:
            payload = event if isinstance(event, dict) else event_payload(event)
            yield sse_data(payload)
    except Exception:
        logger.exception("event stream failed")
        yield sse_data(event_payload(ErrorEvent(message="An unexpected error occurred. Please try again.")))
    yield sse_done()
