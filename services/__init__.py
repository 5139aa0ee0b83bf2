"""
Services layer - pure business logic, no Streamlit dependencies.
"""

from services.claude_service import ClaudeService
from services.recipe_service import GenerationResult, RecipeService
from services.audio_service import AudioService
from services.narration_service import NarrationService, choose_preferred_voice
from services.local_speech import Pyttsx3Speech
from services.microphone import MicrophoneCapture
from services.playback import BrowserAudioSink, PygameAudioSink
from services.errors import (
    CaptureUnavailableError,
    GenerationError,
    MiseError,
    PlaybackError,
    SynthesisError,
)

__all__ = [
    "ClaudeService",
    "RecipeService",
    "GenerationResult",
    "AudioService",
    "NarrationService",
    "choose_preferred_voice",
    "Pyttsx3Speech",
    "MicrophoneCapture",
    "BrowserAudioSink",
    "PygameAudioSink",
    "CaptureUnavailableError",
    "GenerationError",
    "MiseError",
    "PlaybackError",
    "SynthesisError",
]
