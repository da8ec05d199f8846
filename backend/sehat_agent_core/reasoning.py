from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .errors import ConfigurationError, StreamFailure, UpstreamError
from .events import (
    ErrorEvent,
    FollowUpEvent,
    ResultEvent,
    TextEvent,
    ThinkingDoneEvent,
    ThinkingEvent,
    ToolCallEvent,
    ToolResultEvent,
    TriageResult,
)
from .executor import ToolExecutor
from .models import TriageTurn
from .prompts import build_messages, build_system_prompt

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = frozenset({500, 502, 503, 529})
DEFAULT_RETRY_DELAYS = (1.0, 2.0, 4.0)
MAX_ATTEMPTS = 3
PARSE_FAILURE_MESSAGE = "Failed to parse triage result. Please try describing your symptoms again."


def provider_error_message(response: httpx.Response) -> str:
    message = response.text.strip()
    try:
        payload = response.json()
    except Exception:
        payload = None
    if isinstance(payload, dict):
        err = payload.get("error")
        if isinstance(err, dict):
            msg = err.get("message")
            if isinstance(msg, str) and msg.strip():
                return msg.strip()
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
    return message or f"HTTP {response.status_code}"


def extract_json_object(raw_text: str) -> dict[str, Any] | None:
    """Parse the whole text as JSON, falling back to the first balanced ``{...}`` block."""
    text = (raw_text or "").strip()
    if not text:
        return None
    try:
        payload = json.loads(text)
        if isinstance(payload, dict):
            return payload
    except json.JSONDecodeError:
        pass

    for start_idx in [idx for idx, char in enumerate(text) if char == "{"]:
        depth = 0
        for end_idx in range(start_idx, len(text)):
            char = text[end_idx]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            if depth == 0:
                try:
                    payload = json.loads(text[start_idx : end_idx + 1])
                except json.JSONDecodeError:
                    break
                if isinstance(payload, dict):
                    return payload
                break
    return None


def terminal_event_for(raw_text: str) -> BaseModel:
    """Turn the model's final text into exactly one terminal event."""
    payload = extract_json_object(raw_text)
    if payload is None:
        return ErrorEvent(message=PARSE_FAILURE_MESSAGE)
    try:
        result = TriageResult.model_validate(payload)
    except PydanticValidationError:
        logger.warning("triage result failed validation")
        return ErrorEvent(message=PARSE_FAILURE_MESSAGE)
    if result.is_medical_query and result.needs_follow_up and result.follow_up_question:
        return FollowUpEvent(question=result.follow_up_question, options=result.follow_up_options)
    return ResultEvent(data=result)


@dataclass
class _RoundState:
    blocks: dict[int, dict[str, Any]] = field(default_factory=dict)
    stop_reason: str | None = None

    def text(self) -> str:
        return "".join(block.get("text", "") for _, block in sorted(self.blocks.items()) if block.get("type") == "text")

    def tool_uses(self) -> list[dict[str, Any]]:
        return [block for _, block in sorted(self.blocks.items()) if block.get("type") == "tool_use"]

    def assistant_content(self) -> list[dict[str, Any]]:
        content = []
        for _, block in sorted(self.blocks.items()):
            content.append({key: value for key, value in block.items() if not key.startswith("_")})
        return content


class AnthropicReasoningEngine:
    """Streams a tool-augmented triage answer from the Anthropic Messages API."""

    def __init__(
        self,
        *,
        executor: ToolExecutor,
        api_key: str | None,
        model: str,
        base_url: str = "https://api.anthropic.com/v1",
        api_version: str = "2023-06-01",
        thinking_budget: int = 10000,
        voice_thinking_budget: int = 1024,
        max_tokens: int = 16000,
        max_tool_rounds: int = 5,
        retry_delays: tuple[float, ...] = DEFAULT_RETRY_DELAYS,
        client_factory: Callable[[], httpx.AsyncClient] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.executor = executor
        self.api_key = (api_key or "").strip()
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.thinking_budget = thinking_budget
        self.voice_thinking_budget = voice_thinking_budget
        self.max_tokens = max_tokens
        self.max_tool_rounds = max_tool_rounds
        self.retry_delays = retry_delays
        self._client_factory = client_factory or (
            lambda: httpx.AsyncClient(timeout=httpx.Timeout(120.0, connect=8.0))
        )
        self._sleep = sleep

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise ConfigurationError("Anthropic API key is not configured.")
        return {
            "x-api-key": self.api_key,
            "anthropic-version": self.api_version,
            "Content-Type": "application/json",
        }

    def _request_body(
        self,
        turn: TriageTurn,
        system: str,
        messages: list[dict[str, Any]],
        *,
        final_round: bool,
    ) -> dict[str, Any]:
        budget = self.voice_thinking_budget if turn.input_mode != "text" else self.thinking_budget
        body: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "stream": True,
            "thinking": {"type": "enabled", "budget_tokens": budget},
            "system": system,
            "messages": messages,
        }
        tools = self.executor.registry.schemas()
        if tools:
            body["tools"] = tools
            if final_round:
                body["tool_choice"] = {"type": "none"}
        return body

    async def stream(self, turn: TriageTurn) -> AsyncIterator[BaseModel]:
        headers = self._headers()
        system = build_system_prompt(
            turn.language,
            profile=turn.profile,
            has_location=turn.location is not None,
            voice=turn.input_mode != "text",
        )
        messages = build_messages(turn.history, turn.message)
        ctx = turn.tool_context()
        emitted = 0

        async with self._client_factory() as client:
            for round_no in range(self.max_tool_rounds + 1):
                final_round = round_no == self.max_tool_rounds
                body = self._request_body(turn, system, messages, final_round=final_round)
                attempt = 0
                while True:
                    state = _RoundState()
                    try:
                        async for event in self._stream_round(client, headers, body, state):
                            emitted += 1
                            yield event
                        break
                    except UpstreamError as exc:
                        attempt += 1
                        if emitted:
                            raise StreamFailure(f"Reasoning stream interrupted: {exc.message}") from exc
                        if not exc.retryable or attempt >= MAX_ATTEMPTS:
                            raise
                        delay = self.retry_delays[min(attempt - 1, len(self.retry_delays) - 1)]
                        logger.warning(
                            "reasoning attempt %d failed (%s), retrying in %.1fs", attempt, exc.message, delay
                        )
                        await self._sleep(delay)

                tool_uses = state.tool_uses()
                if state.stop_reason != "tool_use" or not tool_uses or final_round:
                    yield terminal_event_for(state.text())
                    return

                messages.append({"role": "assistant", "content": state.assistant_content()})
                tool_results = []
                for block in tool_uses:
                    result = await self.executor.execute(block["name"], block.get("input") or {}, ctx)
                    emitted += 1
                    yield ToolResultEvent(name=block["name"], result=result)
                    tool_results.append(
                        {
                            "type": "tool_result",
                            "tool_use_id": block["id"],
                            "content": json.dumps(result, ensure_ascii=False),
                        }
                    )
                messages.append({"role": "user", "content": tool_results})

    async def _stream_round(
        self,
        client: httpx.AsyncClient,
        headers: dict[str, str],
        body: dict[str, Any],
        state: _RoundState,
    ) -> AsyncIterator[BaseModel]:
        try:
            async with client.stream("POST", f"{self.base_url}/messages", headers=headers, json=body) as response:
                if response.status_code >= 400:
                    await response.aread()
                    raise UpstreamError(
                        provider_error_message(response),
                        upstream_status=response.status_code,
                        retryable=response.status_code in RETRYABLE_STATUSES,
                    )
                async for line in response.aiter_lines():
                    if not line.startswith("data:"):
                        continue
                    raw = line[5:].strip()
                    if not raw:
                        continue
                    try:
                        payload = json.loads(raw)
                    except json.JSONDecodeError:
                        logger.warning("skipping malformed provider frame")
                        continue
                    for event in self._apply(payload, state):
                        yield event
        except httpx.TransportError as exc:
            raise UpstreamError(f"Reasoning provider unreachable: {exc}", retryable=True) from exc

    def _apply(self, payload: dict[str, Any], state: _RoundState) -> list[BaseModel]:
        kind = payload.get("type")
        if kind == "content_block_start":
            block = dict(payload.get("content_block") or {})
            block_type = block.get("type")
            if block_type == "thinking":
                block["thinking"] = block.get("thinking") or ""
                block["signature"] = block.get("signature") or ""
            elif block_type == "text":
                block["text"] = block.get("text") or ""
            elif block_type == "tool_use":
                block["_json"] = ""
            state.blocks[payload.get("index", len(state.blocks))] = block
            return []

        if kind == "content_block_delta":
            block = state.blocks.get(payload.get("index"), {})
            delta = payload.get("delta") or {}
            delta_type = delta.get("type")
            if delta_type == "thinking_delta" and block.get("type") == "thinking":
                block["thinking"] += delta.get("thinking", "")
                return [ThinkingEvent(content=delta.get("thinking", ""))]
            if delta_type == "signature_delta" and block.get("type") == "thinking":
                block["signature"] += delta.get("signature", "")
            elif delta_type == "text_delta" and block.get("type") == "text":
                block["text"] += delta.get("text", "")
                return [TextEvent(content=delta.get("text", ""))]
            elif delta_type == "input_json_delta" and block.get("type") == "tool_use":
                block["_json"] += delta.get("partial_json", "")
            return []

        if kind == "content_block_stop":
            block = state.blocks.get(payload.get("index"), {})
            if block.get("type") == "thinking":
                return [ThinkingDoneEvent()]
            if block.get("type") == "tool_use":
                raw_input = block.pop("_json", "")
                try:
                    parsed = json.loads(raw_input) if raw_input.strip() else (block.get("input") or {})
                except json.JSONDecodeError:
                    parsed = {}
                block["input"] = parsed if isinstance(parsed, dict) else {}
                return [ToolCallEvent(name=block.get("name", ""), input=block["input"])]
            return []

        if kind == "message_delta":
            stop_reason = (payload.get("delta") or {}).get("stop_reason")
            if stop_reason:
                state.stop_reason = stop_reason
            return []

        if kind == "error":
            err = payload.get("error") or {}
            overloaded = err.get("type") == "overloaded_error"
            raise UpstreamError(
                err.get("message") or "Reasoning provider error",
                upstream_status=529 if overloaded else None,
                retryable=overloaded,
            )
        return []
