"""
Local Speech - on-device text-to-speech with pyttsx3.

Used when remote narration is disabled or fails. The voice catalog is
loaded on a background thread, so voices() can be empty for a moment after
start-up; callers wait for on_voices_changed in that case.
"""

import asyncio
import logging
import threading
from typing import Callable, Optional

from services.ports import SynthesisPort, Voice

logger = logging.getLogger(__name__)


def _voice_language(raw_voice) -> str:
    languages = getattr(raw_voice, "languages", None) or []
    if not languages:
        return ""
    language = languages[0]
    if isinstance(language, bytes):
        # espeak reports b'\x05en-us'
        language = language.decode("utf-8", errors="ignore").lstrip("\x05")
    return str(language)


class Pyttsx3Speech(SynthesisPort):
    """SynthesisPort backed by the platform speech engine (SAPI5, NSSpeech, eSpeak)."""

    def __init__(self, base_rate: int = 175):
        self.base_rate = base_rate
        self._voices: Optional[list[Voice]] = None
        self._supported: Optional[bool] = None
        self._waiters: list[tuple[asyncio.AbstractEventLoop, Callable[[], None]]] = []
        self._lock = threading.Lock()
        self._speak_lock = threading.Lock()

    def is_supported(self) -> bool:
        if self._supported is None:
            try:
                import pyttsx3  # noqa: F401
            except ImportError:
                logger.warning("pyttsx3 is not installed, local narration disabled")
                self._supported = False
            else:
                self._supported = True
                threading.Thread(target=self._load_voices, daemon=True).start()
        return self._supported

    def _load_voices(self) -> None:
        import pyttsx3

        try:
            engine = pyttsx3.init()
            raw_voices = engine.getProperty("voices") or []
        except (RuntimeError, OSError) as e:
            logger.warning(f"Could not load system voices: {e}")
            raw_voices = []

        voices = [
            Voice(id=v.id, name=getattr(v, "name", "") or v.id, language=_voice_language(v))
            for v in raw_voices
        ]
        logger.info(f"Loaded {len(voices)} system voice(s)")

        with self._lock:
            self._voices = voices
            waiters, self._waiters = self._waiters, []
        for loop, callback in waiters:
            loop.call_soon_threadsafe(callback)

    def voices(self) -> list[Voice]:
        with self._lock:
            return list(self._voices or [])

    def on_voices_changed(self, callback: Callable[[], None]) -> None:
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._voices is None:
                self._waiters.append((loop, callback))
                return
        loop.call_soon(callback)

    def speak(
        self,
        text: str,
        voice: Optional[Voice],
        on_done: Callable[[], None],
        on_error: Callable[[str], None],
        rate: float = 1.0,
        pitch: float = 1.0,
        volume: float = 1.0,
    ) -> None:
        # pyttsx3 has no pitch property; it is accepted for interface parity
        loop = asyncio.get_running_loop()

        def work():
            import pyttsx3

            try:
                with self._speak_lock:
                    engine = pyttsx3.init()
                    if voice is not None:
                        engine.setProperty("voice", voice.id)
                    engine.setProperty("rate", int(self.base_rate * rate))
                    engine.setProperty("volume", max(0.0, min(volume, 1.0)))
                    engine.say(text)
                    engine.runAndWait()
            except Exception as e:
                # Driver errors vary by platform; report them instead of killing the thread
                loop.call_soon_threadsafe(on_error, str(e))
            else:
                loop.call_soon_threadsafe(on_done)

        threading.Thread(target=work, daemon=True).start()
