"""
Audio sinks for narration playback.

PygameAudioSink plays through the speakers of the machine running the app.
BrowserAudioSink queues audio for the Streamlit page to autoplay.
"""

import asyncio
import logging
import threading
import time
from collections import deque
from typing import Optional

from services.errors import PlaybackError
from services.ports import AudioSink

logger = logging.getLogger(__name__)

# edge-tts default output format is 24kHz 48kbit/s mono MP3
EDGE_TTS_BYTES_PER_SECOND = 48_000 / 8


class PygameAudioSink(AudioSink):
    """Local playback with pygame.mixer; one file at a time."""

    def __init__(self, poll_interval: float = 0.1):
        self.poll_interval = poll_interval
        self._lock = threading.Lock()

    def _play_blocking(self, path: str) -> None:
        # Imported lazily: pygame prints a banner and probes audio drivers on import
        import pygame

        with self._lock:
            try:
                if not pygame.mixer.get_init():
                    pygame.mixer.init()
                pygame.mixer.music.load(path)
                pygame.mixer.music.play()
                while pygame.mixer.music.get_busy():
                    time.sleep(self.poll_interval)
            except pygame.error as e:
                raise PlaybackError(f"Playback failed: {e}") from e
            finally:
                if pygame.mixer.get_init():
                    pygame.mixer.music.unload()

    async def play(self, path: str) -> None:
        await asyncio.to_thread(self._play_blocking, path)


class BrowserAudioSink(AudioSink):
    """
    Hands audio to the page (st.audio autoplay) instead of playing it here.

    play() can wait for the clip's estimated length so hands-free listening
    does not resume while the browser is still talking.
    """

    def __init__(self, wait_for_playback: bool = True):
        self.wait_for_playback = wait_for_playback
        self._pending: deque[bytes] = deque()
        self._lock = threading.Lock()

    async def play(self, path: str) -> None:
        try:
            with open(path, "rb") as f:
                audio = f.read()
        except OSError as e:
            raise PlaybackError(f"Could not read narration audio: {e}") from e

        with self._lock:
            self._pending.append(audio)

        if self.wait_for_playback:
            await asyncio.sleep(len(audio) / EDGE_TTS_BYTES_PER_SECOND)

    def pop_pending(self) -> Optional[bytes]:
        """Oldest queued clip, or None."""
        with self._lock:
            return self._pending.popleft() if self._pending else None
