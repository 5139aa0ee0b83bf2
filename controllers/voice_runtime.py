"""
Voice Runtime - hosts the voice controller's event loop for the Streamlit UI.

Streamlit runs the page script on short-lived threads with no event loop,
while voice control needs one long-lived loop (capture callbacks, restart
timers, narration). The runtime owns that loop on a daemon thread; the page
hands work to it with run_coroutine_threadsafe and reads state back.

All mutation of the cooking session (voice commands, step buttons, photo
feedback) happens on the runtime loop, one task at a time.
"""

import asyncio
import logging
import threading
from collections import deque
from functools import partial
from typing import Any, Callable, Coroutine, Optional

from config.settings import Settings
from controllers.voice_commands import CookingCommandHandler, WakePhraseMatcher
from controllers.voice_session_controller import VoiceSessionController
from models.cooking_session import CookingSession
from models.recipe import ImageInput
from models.voice_state import VoiceSessionState
from services.narration_service import NarrationService
from services.ports import CapturePort, GenerationPort

logger = logging.getLogger(__name__)

# Upper bound for page-thread waits on the runtime loop (seconds)
CALL_TIMEOUT = 120


class VoiceRuntime:
    """Background event loop plus the voice controller and narration it drives."""

    def __init__(
        self,
        settings: Settings,
        capture: CapturePort,
        generator: GenerationPort,
        narrator: NarrationService,
    ):
        self.generator = generator
        self.narrator = narrator
        self.handler: Optional[CookingCommandHandler] = None
        self._notices: deque[str] = deque()

        self.controller = VoiceSessionController(
            capture=capture,
            dispatch=self._dispatch,
            wake_matcher=WakePhraseMatcher(settings.wake_phrases),
            on_notice=self._notices.append,
            post_speech_delay=settings.post_speech_delay,
            restart_delay=settings.restart_delay,
            error_backoff=settings.error_backoff,
            error_backoff_max=settings.error_backoff_max,
            max_error_retries=settings.max_error_retries,
            arm_timeout=settings.wake_arm_timeout,
        )

        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run_loop, daemon=True, name="voice-runtime")
        self._thread.start()

    def _run_loop(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    # Loop bridging
    def run(self, coro: Coroutine, timeout: float = CALL_TIMEOUT) -> Any:
        """Run a coroutine on the runtime loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def call(self, fn: Callable[..., Any], *args) -> Any:
        """Run a plain function on the runtime loop and wait for its result."""
        async def invoke():
            return fn(*args)
        return self.run(invoke())

    # Session wiring
    async def _dispatch(self, command: str) -> None:
        if self.handler is None:
            logger.info(f"Ignoring command '{command}': no recipe is being cooked")
            return
        await self.handler.handle(command)

    def set_session(self, session: Optional[CookingSession]) -> None:
        """Point voice commands at a new cooking session (None when leaving)."""
        def apply():
            if session is None:
                self.controller.stop()
                self.handler = None
            else:
                self.handler = CookingCommandHandler(session, self.generator, self.narrator)
        self.call(apply)

    def announce_current_step(self) -> bool:
        """Speak the current step; skipped while a command is being handled."""
        def begin():
            if self.handler is None:
                return False
            return self.controller.submit_task("announce step", self.handler.announce_current_step)
        return self.call(begin)

    def go_to_step(self, index: int) -> None:
        if self.handler is not None:
            self.call(self.handler.session.jump_to, index)

    # Voice operations
    def start_listening(self, hands_free: bool) -> bool:
        return self.call(self.controller.start, hands_free)

    def stop_listening(self) -> None:
        self.call(self.controller.stop)

    def submit_command(self, text: str) -> bool:
        """Queue a typed command. False if a command is still being handled."""
        text = (text or "").strip()
        if not text:
            return False
        return self.call(self.controller.submit_task, text, partial(self._dispatch, text))

    def review_progress_photo(self, image: ImageInput, note: Optional[str] = None) -> bool:
        """Queue photo feedback for the current step, under the same guard as commands."""
        def begin():
            if self.handler is None:
                return False
            work = partial(self.handler.review_progress_photo, image, note)
            return self.controller.submit_task("progress photo", work)
        return self.call(begin)

    @property
    def state(self) -> VoiceSessionState:
        return self.controller.state

    def pop_notice(self) -> Optional[str]:
        return self._notices.popleft() if self._notices else None
