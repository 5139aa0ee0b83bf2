"""
Narration Service - speaks assistant replies and returns when they finish.

Primary path: remote synthesis (edge-tts) -> temp audio file -> AudioSink.
Fallback path: the on-device synthesizer, used when remote narration is
disabled, synthesis fails, or playback fails. The fallback always completes,
even on error, because nothing sits behind it. With neither available,
speak() is a silent no-op.
"""

import asyncio
import logging
import os
import tempfile
from typing import Optional

from models.user_preferences import PREFERRED_VOICE_MARKERS, VoicePreferences
from services.errors import PlaybackError, SynthesisError
from services.ports import AudioSink, RemoteSynthesizer, SynthesisPort, Voice

logger = logging.getLogger(__name__)


def choose_preferred_voice(voices: list[Voice], language: str = "en") -> Optional[Voice]:
    """
    Pick the best-sounding voice from the catalog.

    Voices in the requested language win over others; among those, a name
    containing a quality marker (Neural, Natural, Premium...) wins, earlier
    markers first. Falls back to the first voice in the language, then the
    first voice overall.
    """
    if not voices:
        return None

    in_language = [v for v in voices if v.language.lower().startswith(language)] or voices
    for marker in PREFERRED_VOICE_MARKERS:
        for voice in in_language:
            if marker in voice.name.lower():
                return voice
    return in_language[0]


class NarrationService:
    """Turns assistant text into audible speech."""

    def __init__(
        self,
        remote: Optional[RemoteSynthesizer] = None,
        sink: Optional[AudioSink] = None,
        local: Optional[SynthesisPort] = None,
        voice: Optional[VoicePreferences] = None,
        catalog_timeout: float = 3.0,
    ):
        self.remote = remote
        self.sink = sink
        self.local = local
        self.voice = voice or VoicePreferences()
        self.catalog_timeout = catalog_timeout

    async def speak(self, text: str) -> None:
        """Speak text; returns when playback has finished (or failed)."""
        text = (text or "").strip()
        if not text:
            return

        if self.remote is not None and self.sink is not None:
            try:
                await self._speak_remote(text)
                return
            except (SynthesisError, PlaybackError) as e:
                logger.warning(f"Remote narration failed, using local voice: {e}")

        await self._speak_local(text)

    async def _speak_remote(self, text: str) -> None:
        audio = await self.remote.synthesize(text, self.voice.name, self.voice.rate)

        with tempfile.NamedTemporaryFile(suffix=self.remote.audio_suffix, delete=False) as f:
            f.write(audio)
            temp_path = f.name
        try:
            await self.sink.play(temp_path)
        finally:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

    async def _speak_local(self, text: str) -> None:
        if self.local is None or not self.local.is_supported():
            logger.debug("No speech output available, skipping narration")
            return

        voices = self.local.voices()
        if not voices:
            voices = await self._wait_for_voices()
        voice = choose_preferred_voice(voices)

        loop = asyncio.get_running_loop()
        finished = loop.create_future()

        def on_done():
            if not finished.done():
                finished.set_result(None)

        def on_error(error: str):
            logger.warning(f"Local narration error: {error}")
            on_done()

        self.local.speak(text, voice, on_done=on_done, on_error=on_error, rate=self.voice.speed)
        await finished

    async def _wait_for_voices(self) -> list[Voice]:
        ready = asyncio.Event()
        self.local.on_voices_changed(ready.set)
        try:
            await asyncio.wait_for(ready.wait(), timeout=self.catalog_timeout)
        except asyncio.TimeoutError:
            logger.info("Voice catalog not ready, speaking with the default voice")
        return self.local.voices()
