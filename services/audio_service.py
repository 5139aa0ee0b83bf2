"""
Audio Service - handles speech recognition and text-to-speech.

This service is pure Python with no Streamlit dependencies.
Uses edge-tts for high-quality neural text-to-speech; it is the remote
synthesizer behind the narration service.
"""

import logging
import os
import tempfile
from typing import Optional

import edge_tts
import speech_recognition as sr

from config.settings import get_settings
from models.user_preferences import DEFAULT_VOICE_NAME, DEFAULT_VOICE_RATE, VOICE_OPTIONS
from services.errors import SynthesisError
from services.ports import RemoteSynthesizer

logger = logging.getLogger(__name__)


class AudioService(RemoteSynthesizer):
    """Service for audio transcription and text-to-speech."""

    audio_suffix = ".mp3"

    def __init__(self, max_chars: Optional[int] = None):
        self.recognizer = sr.Recognizer()
        self.max_chars = max_chars or get_settings().tts_max_chars

    def transcribe(self, audio_bytes: bytes) -> Optional[str]:
        """
        Transcribe a recorded clip (tap-to-talk) using Google Speech Recognition.

        Args:
            audio_bytes: Raw audio data (WAV format)

        Returns:
            Transcribed text, or None if transcription failed
        """
        temp_path = None
        try:
            with tempfile.NamedTemporaryFile(suffix=".wav", delete=False) as f:
                f.write(audio_bytes)
                temp_path = f.name

            with sr.AudioFile(temp_path) as source:
                audio_data = self.recognizer.record(source)
                return self.recognizer.recognize_google(audio_data)

        except sr.UnknownValueError:
            logger.warning("Could not understand audio")
            return None
        except sr.RequestError as e:
            logger.error(f"Speech recognition service error: {e}")
            return None
        except (OSError, ValueError) as e:
            logger.error(f"Transcription error: {e}")
            return None
        finally:
            if temp_path and os.path.exists(temp_path):
                os.unlink(temp_path)

    def truncate(self, text: str) -> str:
        """Clip text to the synthesis length limit."""
        return text if len(text) <= self.max_chars else text[: self.max_chars]

    async def synthesize(
        self,
        text: str,
        voice: str = DEFAULT_VOICE_NAME,
        rate: str = DEFAULT_VOICE_RATE,
    ) -> bytes:
        """
        Convert text to speech audio using edge-tts.

        Args:
            text: Text to convert (truncated to max_chars)
            voice: Edge-TTS voice ID (e.g., 'en-US-AriaNeural')
            rate: Speech rate (e.g., '+20%', '-10%')

        Returns:
            MP3 audio bytes

        Raises:
            SynthesisError: if edge-tts fails or returns no audio
        """
        try:
            communicate = edge_tts.Communicate(self.truncate(text), voice, rate=rate)
            audio_bytes = b""
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    audio_bytes += chunk["data"]
        except Exception as e:
            # edge-tts surfaces aiohttp, websocket and its own errors
            logger.error(f"Edge-TTS error: {e}")
            raise SynthesisError(str(e)) from e

        if not audio_bytes:
            raise SynthesisError("Edge-TTS returned no audio")
        return audio_bytes

    @staticmethod
    def get_available_voices() -> dict[str, str]:
        """Get available voice options as {voice_id: display_name}."""
        return VOICE_OPTIONS.copy()
