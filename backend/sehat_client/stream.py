from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Callable, Iterable

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from sehat_agent_core.events import DONE_SENTINEL, ErrorEvent, parse_event
from sehat_screening import detect_emergency

from .reducer import ClientEmergency, ConversationState, StreamEnd, StreamStart, UserMessage, reduce

logger = logging.getLogger(__name__)


def _parse_data(data: str) -> BaseModel | None:
    try:
        return parse_event(json.loads(data))
    except (ValueError, PydanticValidationError):
        logger.debug("skipping malformed stream frame: %s", data[:80])
        return None


def parse_sse_lines(lines: Iterable[str]) -> tuple[list[BaseModel], bool]:
    """Collect events from ``data:`` lines up to ``[DONE]``; also report whether it was seen."""
    events: list[BaseModel] = []
    for raw_line in lines:
        line = raw_line.strip("\r")
        if not line.startswith("data: "):
            continue
        data = line[6:].strip()
        if data == DONE_SENTINEL:
            return events, True
        event = _parse_data(data)
        if event is not None:
            events.append(event)
    return events, False


def parse_sse_payload(body: str) -> list[BaseModel]:
    events, _ = parse_sse_lines(body.splitlines())
    return events


class TriageStreamClient:
    """Posts a triage turn and folds the streamed events into conversation state."""

    def __init__(
        self,
        base_url: str,
        *,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers = dict(headers or {})
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(120.0, connect=10.0))
        )

    def request_body(
        self,
        state: ConversationState,
        message: str,
        *,
        input_mode: str = "text",
        location: dict[str, float] | None = None,
    ) -> dict[str, Any]:
        return {
            "message": message,
            "language": state.language,
            "conversationHistory": state.history(),
            "sessionId": state.session_id,
            "inputMode": input_mode,
            "location": location,
        }

    async def events(self, body: dict[str, Any]) -> AsyncIterator[BaseModel]:
        async with self._client_factory() as client:
            async with client.stream(
                "POST", f"{self.base_url}/api/triage", json=body, headers=self.headers
            ) as response:
                if response.status_code >= 400:
                    await response.aread()
                    try:
                        message = response.json().get("error") or f"Server error: {response.status_code}"
                    except ValueError:
                        message = f"Server error: {response.status_code}"
                    yield ErrorEvent(message=str(message))
                    return
                async for line in response.aiter_lines():
                    if not line.startswith("data: "):
                        continue
                    data = line[6:].strip()
                    if data == DONE_SENTINEL:
                        return
                    event = _parse_data(data)
                    if event is not None:
                        yield event

    async def send(
        self,
        state: ConversationState,
        message: str,
        *,
        input_mode: str = "text",
        location: dict[str, float] | None = None,
        on_state: Callable[[ConversationState], None] | None = None,
    ) -> ConversationState:
        body = self.request_body(state, message, input_mode=input_mode, location=location)
        detection = detect_emergency(message, state.language)
        if detection.is_emergency:
            state = reduce(state, ClientEmergency(detection.to_payload()))
        state = reduce(state, UserMessage(message))
        state = reduce(state, StreamStart())
        try:
            async for event in self.events(body):
                state = reduce(state, event)
                if on_state is not None:
                    on_state(state)
        except httpx.HTTPError as exc:
            logger.warning("triage stream request failed: %s", exc)
            state = reduce(state, ErrorEvent(message="Failed to connect. Please try again."))
        return reduce(state, StreamEnd())
