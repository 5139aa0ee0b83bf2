"""
Voice session state - the single value describing what voice control is doing.

The controller never mutates this value in place; every change goes through
`transition()`, which makes the state machine testable on its own:

    Idle --start(single)-----> ListeningSingleShot --result--> ProcessingCommand --done--> Idle
    Idle --start(handsFree)--> ListeningHandsFree  --wake----> ProcessingCommand --done--> ListeningHandsFree
    any  --stop--------------> Idle
"""

from dataclasses import dataclass, replace
from enum import Enum


class VoiceMode(str, Enum):
    OFF = "off"
    SINGLE_SHOT = "single-shot"
    HANDS_FREE = "hands-free"


class VoicePhase(str, Enum):
    IDLE = "idle"
    LISTENING = "listening"
    PROCESSING = "processing"


class ControllerState(str, Enum):
    IDLE = "Idle"
    LISTENING_SINGLE_SHOT = "ListeningSingleShot"
    LISTENING_HANDS_FREE = "ListeningHandsFree"
    PROCESSING_COMMAND = "ProcessingCommand"


class VoiceEvent(str, Enum):
    START_SINGLE = "start_single"
    START_HANDS_FREE = "start_hands_free"
    COMMAND_ACCEPTED = "command_accepted"
    TRANSCRIPT_IGNORED = "transcript_ignored"
    DISPATCH_DONE = "dispatch_done"
    RESTART_SCHEDULED = "restart_scheduled"
    RESUBSCRIBED = "resubscribed"
    CAPTURE_ENDED = "capture_ended"
    STOP = "stop"


@dataclass(frozen=True)
class VoiceSessionState:
    mode: VoiceMode = VoiceMode.OFF
    phase: VoicePhase = VoicePhase.IDLE
    pending_restart: bool = False

    @property
    def controller_state(self) -> ControllerState:
        if self.phase == VoicePhase.PROCESSING:
            return ControllerState.PROCESSING_COMMAND
        if self.mode == VoiceMode.HANDS_FREE:
            return ControllerState.LISTENING_HANDS_FREE
        if self.mode == VoiceMode.SINGLE_SHOT:
            return ControllerState.LISTENING_SINGLE_SHOT
        return ControllerState.IDLE

    @property
    def is_active(self) -> bool:
        return self.mode != VoiceMode.OFF

    def status_text(self) -> str:
        """Short status line for the UI."""
        if self.phase == VoicePhase.PROCESSING:
            return "Thinking..."
        if self.mode == VoiceMode.HANDS_FREE:
            return "Listening for 'Hey Mise'..."
        if self.mode == VoiceMode.SINGLE_SHOT:
            return "Listening..."
        return "Voice control off"


IDLE = VoiceSessionState()


def transition(state: VoiceSessionState, event: VoiceEvent) -> VoiceSessionState:
    """
    Apply one event to the voice state.

    Events that make no sense in the current state leave it unchanged
    (e.g. a late RESUBSCRIBED after stop()).
    """
    if event == VoiceEvent.STOP:
        return IDLE

    if event == VoiceEvent.START_SINGLE:
        if state.mode != VoiceMode.OFF:
            return state
        return VoiceSessionState(VoiceMode.SINGLE_SHOT, VoicePhase.LISTENING)

    if event == VoiceEvent.START_HANDS_FREE:
        if state.mode == VoiceMode.HANDS_FREE:
            return state
        return VoiceSessionState(VoiceMode.HANDS_FREE, VoicePhase.LISTENING)

    if state.mode == VoiceMode.OFF:
        return state

    if event == VoiceEvent.COMMAND_ACCEPTED:
        if state.phase != VoicePhase.LISTENING:
            return state
        return replace(state, phase=VoicePhase.PROCESSING, pending_restart=False)

    if event == VoiceEvent.TRANSCRIPT_IGNORED:
        return state

    if event == VoiceEvent.DISPATCH_DONE:
        if state.phase != VoicePhase.PROCESSING:
            return state
        if state.mode == VoiceMode.HANDS_FREE:
            return replace(state, phase=VoicePhase.LISTENING, pending_restart=True)
        return IDLE

    if event == VoiceEvent.RESTART_SCHEDULED:
        if state.mode != VoiceMode.HANDS_FREE or state.phase == VoicePhase.PROCESSING:
            return state
        return replace(state, phase=VoicePhase.LISTENING, pending_restart=True)

    if event == VoiceEvent.RESUBSCRIBED:
        if state.mode != VoiceMode.HANDS_FREE or state.phase == VoicePhase.PROCESSING:
            return state
        return replace(state, phase=VoicePhase.LISTENING, pending_restart=False)

    if event == VoiceEvent.CAPTURE_ENDED:
        # Single-shot capture that ended without a usable result
        if state.mode == VoiceMode.SINGLE_SHOT and state.phase == VoicePhase.LISTENING:
            return IDLE
        return state

    return state
