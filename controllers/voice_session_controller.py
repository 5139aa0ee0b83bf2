"""
Voice Session Controller - speech capture, wake phrase gating, command
dispatch and hands-free auto-restart.

Runs on a single asyncio event loop. Capture events, timers and dispatch
completion are all handled there one at a time, so the only shared-state
guard needed is the `processing` flag:

- it is set before capture is aborted for dispatch, and cleared only after
  dispatch (including narration) finishes
- while it is set, capture results/ends never trigger a restart

Resubscription timers are loop.call_later handles tagged with the session
generation. stop() and mode changes bump the generation and cancel the
handle, so a timer from a superseded session does nothing if it still fires.
Capture events are tagged with the subscription they came from, and events
from a released subscription are dropped.
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from controllers.voice_commands import WakePhraseMatcher
from models.voice_state import IDLE, VoiceEvent, VoiceMode, VoiceSessionState, transition
from services.errors import CaptureUnavailableError
from services.ports import ABORTED, NO_SPEECH, CaptureHandlers, CapturePort, CaptureSubscription

logger = logging.getLogger(__name__)

UNSUPPORTED_NOTICE = (
    "Speech recognition is not available here. Check that a microphone is "
    "connected, or type your questions instead."
)
RETRIES_EXHAUSTED_NOTICE = "Hands-free mode stopped after repeated microphone errors."


class VoiceSessionController:
    """State machine for voice input; see models.voice_state for the states."""

    def __init__(
        self,
        capture: CapturePort,
        dispatch: Callable[[str], Awaitable[object]],
        wake_matcher: WakePhraseMatcher,
        on_notice: Optional[Callable[[str], None]] = None,
        on_state_change: Optional[Callable[[VoiceSessionState], None]] = None,
        post_speech_delay: float = 1.0,
        restart_delay: float = 0.3,
        error_backoff: float = 2.0,
        error_backoff_max: float = 30.0,
        max_error_retries: Optional[int] = None,
        arm_timeout: float = 8.0,
    ):
        """
        Args:
            capture: Speech capture device
            dispatch: Coroutine function executing one command (wake phrase removed)
            wake_matcher: Wake phrase patterns for hands-free mode
            on_notice: Receives user-facing notices (unsupported device, retries exhausted)
            on_state_change: Receives every new VoiceSessionState
            post_speech_delay: Pause after a command before listening again, so
                the assistant's own voice is not captured
            restart_delay: Pause before resubscribing after a timeout or device end
            error_backoff: First retry delay after an unexpected capture error;
                doubles per consecutive error up to error_backoff_max
            max_error_retries: Consecutive unexpected errors tolerated before
                hands-free mode gives up (None = retry forever)
            arm_timeout: How long a bare wake phrase waits for its command
        """
        self.capture = capture
        self.dispatch = dispatch
        self.wake_matcher = wake_matcher
        self.on_notice = on_notice
        self.on_state_change = on_state_change
        self.post_speech_delay = post_speech_delay
        self.restart_delay = restart_delay
        self.error_backoff = error_backoff
        self.error_backoff_max = error_backoff_max
        self.max_error_retries = max_error_retries
        self.arm_timeout = arm_timeout

        self._state = IDLE
        self._generation = 0
        self._subscription: Optional[CaptureSubscription] = None
        self._subscription_id = 0
        self._restart_handle: Optional[asyncio.TimerHandle] = None
        self._dispatch_task: Optional[asyncio.Task] = None
        self._processing = False
        self._armed_until: Optional[float] = None
        self._error_retries = 0
        self._unsupported_reported = False

    # State accessors
    @property
    def state(self) -> VoiceSessionState:
        return self._state

    @property
    def is_processing(self) -> bool:
        return self._processing

    @property
    def has_pending_restart(self) -> bool:
        return self._restart_handle is not None

    # Public operations
    def start(self, hands_free: bool = False) -> bool:
        """
        Start listening.

        Args:
            hands_free: Continuous, wake-phrase gated capture instead of a
                single utterance

        Returns:
            True if listening (or already listening in that mode)
        """
        if not self.capture.is_supported():
            self._report_unsupported()
            return False

        if self._processing:
            logger.info("Still handling the previous command, not starting capture")
            return False

        event = VoiceEvent.START_HANDS_FREE if hands_free else VoiceEvent.START_SINGLE
        new_state = transition(self._state, event)
        if new_state == self._state:
            return self._state.is_active

        self._generation += 1
        self._cancel_restart()
        self._disarm()
        self._error_retries = 0
        self._set_state(new_state)
        logger.info(f"Voice capture started ({new_state.mode.value})")
        return self._acquire()

    def stop(self) -> None:
        """Cancel listening immediately and drop any pending restart."""
        self._generation += 1
        self._cancel_restart()
        self._release()
        self._disarm()
        if self._state != IDLE:
            logger.info("Voice capture stopped")
        self._set_state(transition(self._state, VoiceEvent.STOP))

    def submit_task(self, label: str, work: Callable[[], Awaitable[object]]) -> bool:
        """
        Run non-command work (step announcement, photo feedback) under the
        single-flight guard. Capture is released while it runs and hands-free
        listening resumes only after it finishes.

        Args:
            label: Name used in logs
            work: Called once to produce the coroutine to run

        Returns:
            False if another command is still being handled
        """
        if self._processing:
            logger.info(f"Still handling the previous command, dropping '{label}'")
            return False
        self._begin_dispatch(label, work)
        return True

    async def submit_command(self, text: str) -> bool:
        """
        Dispatch a typed or uploaded-audio command through the same
        single-flight guard as spoken ones.

        Returns:
            False if another command is still being handled or text is blank
        """
        text = (text or "").strip()
        if not text or not self.submit_task(text, lambda: self.dispatch(text)):
            return False
        await self._dispatch_task
        return True

    async def wait_idle(self) -> None:
        """Wait for an in-flight command to finish."""
        if self._dispatch_task is not None:
            await asyncio.shield(self._dispatch_task)

    # Capture management
    def _acquire(self) -> bool:
        """Open a fresh subscription, aborting any previous one first."""
        self._release()
        self._subscription_id += 1
        sub_id = self._subscription_id
        handlers = CaptureHandlers(
            on_start=lambda: self._on_start(sub_id),
            on_result=lambda transcripts: self._on_result(sub_id, transcripts),
            on_error=lambda kind: self._on_error(sub_id, kind),
            on_end=lambda: self._on_end(sub_id),
        )
        continuous = self._state.mode == VoiceMode.HANDS_FREE
        try:
            self._subscription = self.capture.open(continuous, handlers)
            self._subscription.start()
        except CaptureUnavailableError as e:
            logger.warning(f"Could not acquire capture device: {e}")
            self._subscription = None
            self._report_unsupported()
            self.stop()
            return False
        return True

    def _release(self) -> None:
        if self._subscription is not None:
            self._subscription.abort()
            self._subscription = None
        # Anything the released subscription still emits is stale
        self._subscription_id += 1

    # Capture events
    def _on_start(self, sub_id: int) -> None:
        if sub_id == self._subscription_id:
            logger.debug("Capture started")

    def _on_result(self, sub_id: int, transcripts: list[str]) -> None:
        if sub_id != self._subscription_id or self._processing:
            return

        transcript = next((t.strip() for t in reversed(transcripts) if t and t.strip()), "")
        if not transcript:
            return
        self._error_retries = 0

        mode = self._state.mode
        if mode == VoiceMode.SINGLE_SHOT:
            command = transcript
        elif mode == VoiceMode.HANDS_FREE:
            command = self.wake_matcher.extract_command(transcript)
            if command is None:
                if not self._is_armed():
                    logger.debug(f"No wake phrase in '{transcript}', still listening")
                    self._set_state(transition(self._state, VoiceEvent.TRANSCRIPT_IGNORED))
                    return
                command = transcript
            elif not command:
                logger.info("Wake phrase heard, waiting for a command")
                self._armed_until = asyncio.get_running_loop().time() + self.arm_timeout
                return
            self._disarm()
        else:
            return

        logger.info(f"Voice command: '{command}'")
        self._begin_dispatch(command, lambda: self.dispatch(command))

    def _on_error(self, sub_id: int, kind: str) -> None:
        if sub_id != self._subscription_id or self._processing or kind == ABORTED:
            return

        mode = self._state.mode
        if mode == VoiceMode.HANDS_FREE:
            if kind == NO_SPEECH:
                logger.debug("No speech detected, resubscribing")
                self._disarm()
                self._schedule_restart(self.restart_delay)
                return

            self._error_retries += 1
            if self.max_error_retries is not None and self._error_retries > self.max_error_retries:
                logger.error(f"Capture error '{kind}', giving up after {self.max_error_retries} retries")
                self._notify(RETRIES_EXHAUSTED_NOTICE)
                self.stop()
                return
            delay = min(self.error_backoff * 2 ** (self._error_retries - 1), self.error_backoff_max)
            logger.warning(f"Capture error '{kind}', retrying in {delay:.1f}s")
            self._schedule_restart(delay)

        elif mode == VoiceMode.SINGLE_SHOT:
            if kind != NO_SPEECH:
                logger.warning(f"Capture error '{kind}' in single-shot mode")
            self._release()
            self._set_state(transition(self._state, VoiceEvent.CAPTURE_ENDED))

    def _on_end(self, sub_id: int) -> None:
        if sub_id != self._subscription_id:
            return
        # The device stopped itself
        self._subscription = None
        if self._processing:
            return

        mode = self._state.mode
        if mode == VoiceMode.HANDS_FREE:
            if self._restart_handle is None:
                self._schedule_restart(self.restart_delay)
        elif mode == VoiceMode.SINGLE_SHOT:
            self._set_state(transition(self._state, VoiceEvent.CAPTURE_ENDED))

    # Dispatch
    def _begin_dispatch(self, label: str, work: Callable[[], Awaitable[object]]) -> None:
        self._processing = True
        self._cancel_restart()
        self._release()
        self._set_state(transition(self._state, VoiceEvent.COMMAND_ACCEPTED))
        self._dispatch_task = asyncio.ensure_future(self._run_dispatch(label, work, self._generation))

    async def _run_dispatch(self, label: str, work: Callable[[], Awaitable[object]], generation: int) -> None:
        try:
            await work()
        except Exception:
            # A failed command must not take voice control down with it
            logger.exception(f"Command '{label}' failed")
        finally:
            self._processing = False
            self._dispatch_task = None

        if generation != self._generation:
            return
        self._set_state(transition(self._state, VoiceEvent.DISPATCH_DONE))
        if self._state.mode == VoiceMode.HANDS_FREE:
            self._schedule_restart(self.post_speech_delay)

    # Restart timers
    def _schedule_restart(self, delay: float) -> None:
        self._cancel_restart()
        loop = asyncio.get_running_loop()
        self._restart_handle = loop.call_later(delay, self._restart, self._generation)
        self._set_state(transition(self._state, VoiceEvent.RESTART_SCHEDULED))

    def _cancel_restart(self) -> None:
        if self._restart_handle is not None:
            self._restart_handle.cancel()
            self._restart_handle = None

    def _restart(self, generation: int) -> None:
        self._restart_handle = None
        if (
            generation != self._generation
            or self._state.mode != VoiceMode.HANDS_FREE
            or self._processing
        ):
            logger.debug("Ignoring stale capture restart")
            return
        if self._acquire():
            self._set_state(transition(self._state, VoiceEvent.RESUBSCRIBED))

    # Helpers
    def _set_state(self, new_state: VoiceSessionState) -> None:
        if new_state == self._state:
            return
        self._state = new_state
        logger.debug(f"Voice state -> {new_state.controller_state.value}")
        if self.on_state_change is not None:
            self.on_state_change(new_state)

    def _is_armed(self) -> bool:
        if self._armed_until is None:
            return False
        if asyncio.get_running_loop().time() >= self._armed_until:
            logger.debug("Wake phrase expired before a command was heard")
            self._armed_until = None
            return False
        return True

    def _disarm(self) -> None:
        self._armed_until = None

    def _notify(self, message: str) -> None:
        if self.on_notice is not None:
            self.on_notice(message)

    def _report_unsupported(self) -> None:
        if self._unsupported_reported:
            return
        self._unsupported_reported = True
        logger.warning("Speech capture is not supported in this environment")
        self._notify(UNSUPPORTED_NOTICE)
