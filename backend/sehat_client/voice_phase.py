from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

PHASES = ("idle", "listening", "transcribing", "thinking", "speaking")
RECOVERY_TIMEOUT_S = 60.0

TRANSITIONS: dict[str, frozenset[str]] = {
    "idle": frozenset({"listening", "thinking", "speaking"}),
    "listening": frozenset({"idle", "transcribing", "speaking"}),
    "transcribing": frozenset({"idle", "listening", "thinking", "speaking"}),
    "thinking": frozenset({"idle", "listening", "speaking"}),
    "speaking": frozenset({"idle", "listening"}),
}


class VoicePhaseMachine:
    """Voice conversation phases with a recovery timer on every non-idle phase.

    Each transition cancels the timer armed by the phase it leaves, so a stale
    timer can never fire after a legitimate move. A phase that outlives
    ``recovery_timeout_s`` is forced back to idle.
    """

    def __init__(
        self,
        *,
        on_stop_playback: Callable[[], Any] | None = None,
        on_change: Callable[[str, str, str], None] | None = None,
        recovery_timeout_s: float = RECOVERY_TIMEOUT_S,
    ) -> None:
        self._phase = "idle"
        self._timer: asyncio.TimerHandle | None = None
        self._on_stop_playback = on_stop_playback
        self._on_change = on_change
        self.recovery_timeout_s = recovery_timeout_s
        self._background: set[asyncio.Task] = set()
        self.recoveries = 0

    @property
    def phase(self) -> str:
        return self._phase

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None

    # recorder / transcription

    def start_listening(self) -> bool:
        return self._move("listening", "start_listening")

    def recording_stopped(self) -> bool:
        return self._move("transcribing", "recording_stopped")

    def transcript_received(self, text: str) -> bool:
        if self._phase != "transcribing":
            return False
        return self._move("thinking" if text.strip() else "idle", "transcript")

    def transcription_failed(self) -> bool:
        if self._phase != "transcribing":
            return False
        return self._move("idle", "transcription_failed")

    # triage stream

    def streaming_changed(self, is_streaming: bool) -> bool:
        if is_streaming and self._phase not in {"speaking", "thinking"}:
            return self._move("thinking", "stream_started")
        return False

    # playback

    def playback_started(self) -> bool:
        return self._move("speaking", "playback_started")

    def playback_ended(self, *, auto_listen: bool = True) -> bool:
        if self._phase != "speaking":
            return False
        return self._move("listening" if auto_listen else "idle", "playback_ended")

    def playback_failed(self) -> bool:
        if self._phase != "speaking":
            return False
        return self._move("idle", "playback_failed")

    # user input

    def tap(self) -> bool:
        if self._phase == "speaking":
            self._stop_playback()
            return self._move("listening", "tap_interrupt")
        if self._phase == "listening":
            return self._move("transcribing", "tap_stop_recording")
        if self._phase == "idle":
            return self._move("listening", "tap_start")
        return False

    def exit(self) -> None:
        if self._phase == "speaking":
            self._stop_playback()
        self._cancel_timer()
        self._set("idle", "exit")

    # internals

    def _move(self, target: str, reason: str) -> bool:
        if target == self._phase:
            return False
        if target not in TRANSITIONS[self._phase]:
            logger.debug("ignoring voice transition %s -> %s (%s)", self._phase, target, reason)
            return False
        self._cancel_timer()
        self._set(target, reason)
        if target != "idle":
            self._arm_timer()
        return True

    def _set(self, target: str, reason: str) -> None:
        previous = self._phase
        self._phase = target
        if self._on_change is not None and previous != target:
            self._on_change(previous, target, reason)

    def _arm_timer(self) -> None:
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.recovery_timeout_s, self._recover)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _recover(self) -> None:
        self._timer = None
        logger.warning("voice phase %s stuck for %.0fs, recovering to idle", self._phase, self.recovery_timeout_s)
        self.recoveries += 1
        if self._phase == "speaking":
            self._stop_playback()
        self._set("idle", "recovery_timeout")

    def _stop_playback(self) -> None:
        if self._on_stop_playback is None:
            return
        outcome = self._on_stop_playback()
        if inspect.isawaitable(outcome):
            task = asyncio.ensure_future(outcome)
            self._background.add(task)
            task.add_done_callback(self._background.discard)
