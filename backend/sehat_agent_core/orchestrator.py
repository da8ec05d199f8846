from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Callable, Protocol

from pydantic import BaseModel

from sehat_screening import detect_emergency, facility_message, match_facility_query, match_symptom_pattern
from storage.session_store import SessionStore
from storage.telemetry import TelemetryStore, TriageEvent
from storage.time_utils import epoch_ms
from storage.writer import BackgroundWriter

from .errors import SehatError
from .events import (
    EmergencyEvent,
    ErrorEvent,
    FacilityResultEvent,
    FollowUpEvent,
    ResultEvent,
    ThinkingEvent,
    is_terminal,
)
from .executor import ToolExecutor
from .models import TriageTurn

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again."
MISSING_RESULT_MESSAGE = "The assessment ended without a result. Please try again."


class ReasoningEngine(Protocol):
    def stream(self, turn: TriageTurn) -> AsyncIterator[BaseModel]: ...


@dataclass
class ExchangeRecord:
    """What one exchange produced, collected while relaying events."""

    is_emergency: bool = False
    thinking: list[str] = field(default_factory=list)
    terminal: BaseModel | None = None
    path: str = "reasoning"

    def observe(self, event: BaseModel) -> None:
        if isinstance(event, EmergencyEvent):
            self.is_emergency = True
        elif isinstance(event, ThinkingEvent):
            self.thinking.append(event.content)

    @property
    def had_error(self) -> bool:
        return self.terminal is None or isinstance(self.terminal, ErrorEvent)

    def assistant_text(self) -> str | None:
        terminal = self.terminal
        if isinstance(terminal, ResultEvent):
            return terminal.data.redirect_message or terminal.data.reasoning_summary or None
        if isinstance(terminal, FollowUpEvent):
            return terminal.question
        if isinstance(terminal, FacilityResultEvent):
            return terminal.message
        return None


class TriageOrchestrator:
    """Runs one triage exchange: pre-screen, fast paths, then the reasoning engine.

    Exactly one terminal event reaches the caller. Telemetry and persistence are
    scheduled after the stream finishes and never delay it.
    """

    def __init__(
        self,
        *,
        engine: ReasoningEngine,
        executor: ToolExecutor,
        telemetry: TelemetryStore,
        writer: BackgroundWriter,
        session_store: SessionStore | None = None,
        clock: Callable[[], int] = epoch_ms,
    ) -> None:
        self.engine = engine
        self.executor = executor
        self.telemetry = telemetry
        self.writer = writer
        self.session_store = session_store
        self._clock = clock

    async def stream(self, turn: TriageTurn) -> AsyncIterator[BaseModel]:
        started = self._clock()
        record = ExchangeRecord()
        try:
            async for event in self._events(turn, record):
                if is_terminal(event):
                    if record.terminal is not None:
                        logger.warning(
                            "dropping extra terminal event %s for session %s", event.type, turn.session_id
                        )
                        continue
                    record.terminal = event
                record.observe(event)
                yield event
            if record.terminal is None:
                logger.warning("reasoning stream ended without a terminal event (session %s)", turn.session_id)
                record.terminal = ErrorEvent(message=MISSING_RESULT_MESSAGE)
                yield record.terminal
        except Exception as exc:
            logger.exception("triage stream failed for session %s", turn.session_id)
            if record.terminal is None:
                message = exc.message if isinstance(exc, SehatError) else GENERIC_ERROR_MESSAGE
                record.terminal = ErrorEvent(message=message)
                yield record.terminal
        finally:
            self._finish(turn, record, self._clock() - started)

    async def _events(self, turn: TriageTurn, record: ExchangeRecord) -> AsyncIterator[BaseModel]:
        detection = detect_emergency(turn.message, turn.language)
        if detection.is_emergency:
            yield EmergencyEvent(data=detection.to_payload())

        if turn.injection_flagged:
            logger.warning("possible prompt injection in session %s", turn.session_id)

        facility = match_facility_query(turn.message, turn.language, turn.has_history)
        if facility is not None:
            record.path = "facility"
            yield await self._facility_result(turn, facility.care_level)
            return

        # an emergency always gets a full assessment, never a canned follow-up
        pattern = None
        if not detection.is_emergency:
            pattern = match_symptom_pattern(turn.message, turn.language, turn.has_history)
        if pattern is not None:
            record.path = "symptom_pattern"
            yield FollowUpEvent(
                question=pattern.follow_up_question,
                options=[option.to_payload() for option in pattern.follow_up_options],
            )
            return

        async for event in self.engine.stream(turn):
            yield event

    async def _facility_result(self, turn: TriageTurn, care_level: str) -> FacilityResultEvent:
        if turn.location is None:
            return FacilityResultEvent(
                message=facility_message(turn.language, has_location=False),
                data={"found": False, "reason": "location_unavailable"},
            )
        result = await self.executor.execute(
            "find_nearby_hospitals",
            {"care_level": care_level},
            turn.tool_context(),
        )
        return FacilityResultEvent(
            message=facility_message(turn.language, has_location=True),
            data=result or {},
        )

    def _finish(self, turn: TriageTurn, record: ExchangeRecord, latency_ms: int) -> None:
        result = record.terminal.data if isinstance(record.terminal, ResultEvent) else None
        logger.info(
            "triage exchange finished session=%s path=%s latency_ms=%d error=%s",
            turn.session_id,
            record.path,
            latency_ms,
            record.had_error,
        )
        try:
            self.telemetry.record_triage(
                TriageEvent(
                    timestamp=self._clock(),
                    language=turn.language,
                    input_mode=turn.input_mode,
                    severity=result.severity if result else None,
                    confidence=result.confidence if result else None,
                    is_emergency=record.is_emergency or (result is not None and result.severity == "emergency"),
                    is_medical_query=result.is_medical_query if result else True,
                    follow_up_count=turn.follow_up_count,
                    latency_ms=latency_ms,
                    had_error=record.had_error,
                )
            )
        except Exception:
            logger.exception("telemetry write failed for session %s", turn.session_id)

        if self.session_store is None:
            return
        try:
            self.writer.submit(
                "persist_exchange",
                persist_exchange,
                self.session_store,
                turn,
                record,
                latency_ms,
            )
        except RuntimeError:
            logger.exception("could not schedule persistence for session %s", turn.session_id)


def persist_exchange(store: SessionStore, turn: TriageTurn, record: ExchangeRecord, latency_ms: int) -> None:
    """Blocking writer for one exchange. Runs on a worker thread."""
    result = record.terminal.data if isinstance(record.terminal, ResultEvent) else None
    is_follow_up_turn = turn.has_history
    store.add_message(
        session_id=turn.session_id,
        user_id=turn.user_id,
        role="user",
        content=turn.message,
        language=turn.language,
        is_follow_up=is_follow_up_turn,
    )
    reply = record.assistant_text()
    if reply:
        store.add_message(
            session_id=turn.session_id,
            user_id=turn.user_id,
            role="assistant",
            content=reply,
            language=turn.language,
            is_follow_up=isinstance(record.terminal, FollowUpEvent),
        )
    store.upsert_session(
        session_id=turn.session_id,
        user_id=turn.user_id,
        language=turn.language,
        severity=result.severity if result else None,
        confidence=result.confidence if result else None,
        symptoms=list(result.symptoms_identified) if result else [],
        input_mode=turn.input_mode,
        reasoning_summary=result.reasoning_summary if result else None,
        is_emergency=record.is_emergency or (result is not None and result.severity == "emergency"),
        is_medical_query=result.is_medical_query if result else True,
        follow_up_count=1 if isinstance(record.terminal, FollowUpEvent) else 0,
        latency_ms=latency_ms,
        had_error=record.had_error,
    )
    if result is not None:
        store.save_result(
            session_id=turn.session_id,
            user_id=turn.user_id,
            result=_result_payload(result),
            thinking_content="".join(record.thinking),
            language=turn.language,
        )


def _result_payload(result: Any) -> dict[str, Any]:
    return result.model_dump(mode="json")
