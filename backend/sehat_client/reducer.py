from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Callable

from pydantic import BaseModel

from sehat_agent_core.events import TriageResult, parse_event

MAX_FOLLOW_UPS = 2


def _new_id() -> str:
    return uuid.uuid4().hex[:16]


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Message:
    role: str
    content: str
    id: str = field(default_factory=_new_id)
    timestamp: int = field(default_factory=_now_ms)
    language: str | None = None
    is_follow_up: bool = False
    options: tuple[dict[str, str], ...] = ()
    facility: dict[str, Any] | None = None


@dataclass(frozen=True)
class ToolStep:
    name: str
    input: dict[str, Any]
    result: dict[str, Any] | None = None
    status: str = "running"


@dataclass(frozen=True)
class ConversationState:
    session_id: str = field(default_factory=_new_id)
    messages: tuple[Message, ...] = ()
    current_result: TriageResult | None = None
    thinking_content: str = ""
    is_thinking: bool = False
    is_streaming: bool = False
    exchange_complete: bool = False
    tool_steps: tuple[ToolStep, ...] = ()
    language: str = "hi"
    is_emergency: bool = False
    emergency_data: dict[str, Any] | None = None
    error: str | None = None
    follow_up_count: int = 0
    narrative: str = ""
    facility: dict[str, Any] | None = None

    @property
    def can_follow_up(self) -> bool:
        return self.follow_up_count < MAX_FOLLOW_UPS

    def history(self) -> list[dict[str, str]]:
        return [{"role": message.role, "content": message.content} for message in self.messages]


# client actions


@dataclass(frozen=True)
class UserMessage:
    message: str
    id: str = field(default_factory=_new_id)
    timestamp: int = field(default_factory=_now_ms)


@dataclass(frozen=True)
class StreamStart:
    pass


@dataclass(frozen=True)
class StreamEnd:
    """The ``[DONE]`` sentinel, or the transport closing."""


@dataclass(frozen=True)
class SetLanguage:
    language: str


@dataclass(frozen=True)
class ClientEmergency:
    detection: dict[str, Any]


@dataclass(frozen=True)
class Reset:
    session_id: str = field(default_factory=_new_id)


# stream event handlers


def _on_emergency(state: ConversationState, event: Any) -> ConversationState:
    return replace(state, is_emergency=True, emergency_data=dict(event.data))


def _on_thinking(state: ConversationState, event: Any) -> ConversationState:
    return replace(state, is_thinking=True, thinking_content=state.thinking_content + event.content)


def _on_thinking_done(state: ConversationState, event: Any) -> ConversationState:
    return replace(state, is_thinking=False)


def _on_tool_call(state: ConversationState, event: Any) -> ConversationState:
    step = ToolStep(name=event.name, input=dict(event.input))
    return replace(state, tool_steps=state.tool_steps + (step,))


def _on_tool_result(state: ConversationState, event: Any) -> ConversationState:
    steps = list(state.tool_steps)
    for idx in range(len(steps) - 1, -1, -1):
        if steps[idx].name == event.name and steps[idx].status == "running":
            steps[idx] = replace(steps[idx], status="done", result=event.result)
            return replace(state, tool_steps=tuple(steps))
    return state


def _on_follow_up(state: ConversationState, event: Any) -> ConversationState:
    message = Message(
        role="assistant",
        content=event.question,
        language=state.language,
        is_follow_up=True,
        options=tuple(event.options or ()),
    )
    return replace(
        state,
        messages=state.messages + (message,),
        follow_up_count=state.follow_up_count + 1,
        exchange_complete=True,
    )


def _on_result(state: ConversationState, event: Any) -> ConversationState:
    return replace(state, current_result=event.data, exchange_complete=True)


def _on_text(state: ConversationState, event: Any) -> ConversationState:
    return replace(state, narrative=state.narrative + event.content)


def _on_facility_result(state: ConversationState, event: Any) -> ConversationState:
    message = Message(
        role="assistant",
        content=event.message,
        language=state.language,
        facility=dict(event.data),
    )
    return replace(
        state,
        messages=state.messages + (message,),
        facility=dict(event.data),
        exchange_complete=True,
    )


def _on_error(state: ConversationState, event: Any) -> ConversationState:
    return replace(state, error=event.message, is_thinking=False, exchange_complete=True)


EVENT_HANDLERS: dict[str, Callable[[ConversationState, Any], ConversationState]] = {
    "emergency": _on_emergency,
    "thinking": _on_thinking,
    "thinking_done": _on_thinking_done,
    "tool_call": _on_tool_call,
    "tool_result": _on_tool_result,
    "follow_up": _on_follow_up,
    "result": _on_result,
    "text": _on_text,
    "facility_result": _on_facility_result,
    "error": _on_error,
}


# action handlers


def _on_user_message(state: ConversationState, action: UserMessage) -> ConversationState:
    message = Message(
        role="user",
        content=action.message,
        id=action.id,
        timestamp=action.timestamp,
        language=state.language,
    )
    return replace(state, messages=state.messages + (message,), error=None, current_result=None)


def _on_stream_start(state: ConversationState, action: StreamStart) -> ConversationState:
    return replace(
        state,
        is_streaming=True,
        is_thinking=False,
        thinking_content="",
        exchange_complete=False,
        tool_steps=(),
        narrative="",
        error=None,
    )


def _on_stream_end(state: ConversationState, action: StreamEnd) -> ConversationState:
    return replace(state, is_streaming=False, is_thinking=False)


def _on_set_language(state: ConversationState, action: SetLanguage) -> ConversationState:
    return replace(state, language=action.language)


def _on_client_emergency(state: ConversationState, action: ClientEmergency) -> ConversationState:
    return replace(state, is_emergency=True, emergency_data=dict(action.detection))


def _on_reset(state: ConversationState, action: Reset) -> ConversationState:
    return ConversationState(session_id=action.session_id, language=state.language)


ACTION_HANDLERS: dict[type, Callable[[ConversationState, Any], ConversationState]] = {
    UserMessage: _on_user_message,
    StreamStart: _on_stream_start,
    StreamEnd: _on_stream_end,
    SetLanguage: _on_set_language,
    ClientEmergency: _on_client_emergency,
    Reset: _on_reset,
}


def reduce(state: ConversationState, item: Any) -> ConversationState:
    """Fold one stream event (model or raw dict) or client action into a new state."""
    action_handler = ACTION_HANDLERS.get(type(item))
    if action_handler is not None:
        return action_handler(state, item)
    if isinstance(item, dict):
        item = parse_event(item)
    if not isinstance(item, BaseModel):
        raise TypeError(f"cannot reduce {type(item).__name__}")
    return EVENT_HANDLERS[item.type](state, item)
