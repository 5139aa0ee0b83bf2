import pytest

from models.voice_state import (
    IDLE,
    ControllerState,
    VoiceEvent,
    VoiceMode,
    VoicePhase,
    VoiceSessionState,
    transition,
)

SINGLE = VoiceSessionState(VoiceMode.SINGLE_SHOT, VoicePhase.LISTENING)
HANDS_FREE = VoiceSessionState(VoiceMode.HANDS_FREE, VoicePhase.LISTENING)


def run(state, *events):
    for event in events:
        state = transition(state, event)
    return state


def test_idle_to_single_shot():
    assert transition(IDLE, VoiceEvent.START_SINGLE).controller_state == ControllerState.LISTENING_SINGLE_SHOT


def test_idle_to_hands_free():
    assert transition(IDLE, VoiceEvent.START_HANDS_FREE).controller_state == ControllerState.LISTENING_HANDS_FREE


def test_single_shot_command_round_trip_ends_idle():
    state = run(IDLE, VoiceEvent.START_SINGLE, VoiceEvent.COMMAND_ACCEPTED)
    assert state.controller_state == ControllerState.PROCESSING_COMMAND

    assert transition(state, VoiceEvent.DISPATCH_DONE) == IDLE


def test_hands_free_command_returns_to_listening_with_restart_pending():
    state = run(IDLE, VoiceEvent.START_HANDS_FREE, VoiceEvent.COMMAND_ACCEPTED, VoiceEvent.DISPATCH_DONE)

    assert state.controller_state == ControllerState.LISTENING_HANDS_FREE
    assert state.pending_restart

    state = transition(state, VoiceEvent.RESUBSCRIBED)
    assert not state.pending_restart


def test_ignored_transcript_keeps_listening():
    assert transition(HANDS_FREE, VoiceEvent.TRANSCRIPT_IGNORED) == HANDS_FREE


@pytest.mark.parametrize("state", [
    IDLE,
    SINGLE,
    HANDS_FREE,
    VoiceSessionState(VoiceMode.HANDS_FREE, VoicePhase.PROCESSING),
    VoiceSessionState(VoiceMode.HANDS_FREE, VoicePhase.LISTENING, pending_restart=True),
])
def test_stop_from_any_state(state):
    assert transition(state, VoiceEvent.STOP) == IDLE


def test_restart_events_ignored_while_processing():
    processing = VoiceSessionState(VoiceMode.HANDS_FREE, VoicePhase.PROCESSING)

    assert transition(processing, VoiceEvent.RESTART_SCHEDULED) == processing
    assert transition(processing, VoiceEvent.RESUBSCRIBED) == processing


def test_late_events_after_stop_are_no_ops():
    for event in (VoiceEvent.RESUBSCRIBED, VoiceEvent.RESTART_SCHEDULED, VoiceEvent.DISPATCH_DONE,
                  VoiceEvent.COMMAND_ACCEPTED, VoiceEvent.CAPTURE_ENDED):
        assert transition(IDLE, event) == IDLE


def test_capture_end_only_finishes_single_shot():
    assert transition(SINGLE, VoiceEvent.CAPTURE_ENDED) == IDLE
    assert transition(HANDS_FREE, VoiceEvent.CAPTURE_ENDED) == HANDS_FREE


def test_switching_modes():
    assert transition(SINGLE, VoiceEvent.START_HANDS_FREE) == HANDS_FREE
    assert transition(HANDS_FREE, VoiceEvent.START_SINGLE) == HANDS_FREE


def test_status_text():
    assert IDLE.status_text() == "Voice control off"
    assert "Hey Mise" in HANDS_FREE.status_text()
