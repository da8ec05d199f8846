from __future__ import annotations

import asyncio

from sehat_client import VoicePhaseMachine


def _drive(scenario):
    return asyncio.run(scenario())


def test_full_voice_loop():
    changes = []

    async def scenario():
        machine = VoicePhaseMachine(on_change=lambda old, new, reason: changes.append((old, new)))
        assert machine.start_listening()
        assert machine.recording_stopped()
        assert machine.transcript_received("mujhe bukhar hai")
        assert not machine.streaming_changed(True)
        assert machine.playback_started()
        assert machine.playback_ended()
        assert machine.phase == "listening"
        machine.exit()
        return machine

    machine = _drive(scenario)
    assert machine.phase == "idle"
    assert not machine.timer_armed
    assert changes == [
        ("idle", "listening"),
        ("listening", "transcribing"),
        ("transcribing", "thinking"),
        ("thinking", "speaking"),
        ("speaking", "listening"),
        ("listening", "idle"),
    ]


def test_empty_transcript_returns_to_idle():
    async def scenario():
        machine = VoicePhaseMachine()
        machine.start_listening()
        machine.recording_stopped()
        machine.transcript_received("   ")
        return machine

    machine = _drive(scenario)
    assert machine.phase == "idle"
    assert not machine.timer_armed


def test_stuck_phase_recovers_to_idle():
    async def scenario():
        machine = VoicePhaseMachine(recovery_timeout_s=0.02)
        machine.start_listening()
        machine.recording_stopped()
        assert machine.phase == "transcribing"
        await asyncio.sleep(0.06)
        return machine

    machine = _drive(scenario)
    assert machine.phase == "idle"
    assert machine.recoveries == 1
    assert not machine.timer_armed


def test_recovery_from_speaking_stops_playback():
    stopped = []

    async def scenario():
        machine = VoicePhaseMachine(on_stop_playback=lambda: stopped.append(True), recovery_timeout_s=0.02)
        machine.streaming_changed(True)
        machine.playback_started()
        await asyncio.sleep(0.06)
        return machine

    machine = _drive(scenario)
    assert machine.phase == "idle"
    assert stopped == [True]


def test_transition_cancels_previous_timer():
    async def scenario():
        machine = VoicePhaseMachine(recovery_timeout_s=0.2)
        machine.start_listening()
        await asyncio.sleep(0.12)
        machine.recording_stopped()
        await asyncio.sleep(0.12)
        # the listening timer would have fired by now if it were still armed
        phase_mid = machine.phase
        machine.transcript_received("hello")
        await asyncio.sleep(0.05)
        return machine, phase_mid

    machine, phase_mid = _drive(scenario)
    assert phase_mid == "transcribing"
    assert machine.phase == "thinking"
    assert machine.recoveries == 0


def test_tap_during_speaking_interrupts_to_listening():
    stop_calls = []

    async def stop_playback():
        stop_calls.append("stopped")

    async def scenario():
        machine = VoicePhaseMachine(on_stop_playback=stop_playback)
        machine.streaming_changed(True)
        machine.playback_started()
        assert machine.tap()
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        return machine

    machine = _drive(scenario)
    assert machine.phase == "listening"
    assert stop_calls == ["stopped"]


def test_tap_cycles_idle_listening_transcribing():
    async def scenario():
        machine = VoicePhaseMachine()
        phases = []
        for _ in range(3):
            machine.tap()
            phases.append(machine.phase)
        machine.exit()
        return phases

    assert _drive(scenario) == ["listening", "transcribing", "transcribing"]


def test_invalid_transitions_are_ignored():
    async def scenario():
        machine = VoicePhaseMachine()
        results = [
            machine.recording_stopped(),
            machine.playback_ended(),
            machine.transcription_failed(),
            machine.transcript_received("late"),
        ]
        return machine, results

    machine, results = _drive(scenario)
    assert results == [False, False, False, False]
    assert machine.phase == "idle"


def test_playback_after_recovery_still_enters_speaking():
    async def scenario():
        machine = VoicePhaseMachine(recovery_timeout_s=0.02)
        machine.streaming_changed(True)
        await asyncio.sleep(0.06)
        recovered = machine.phase
        started = machine.playback_started()
        return machine, recovered, started

    machine, recovered, started = _drive(scenario)
    assert recovered == "idle"
    assert started
    assert machine.phase == "speaking"
    assert machine.recoveries == 1


def test_playback_interrupts_listening():
    async def scenario():
        machine = VoicePhaseMachine()
        machine.start_listening()
        started = machine.playback_started()
        phase = machine.phase
        machine.exit()
        return started, phase

    assert _drive(scenario) == (True, "speaking")
