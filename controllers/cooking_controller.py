"""
Cooking Controller - manages the three-screen flow and its session state.

Screens: preferences -> recommendations -> cooking.

This controller handles:
- Session state initialization and management
- Coordinating between services (recipe generation, transcription, voice runtime)
- Rate limiting
- Voice preferences for narration
"""

import logging
from typing import Optional

import streamlit as st
from pydantic import ValidationError

from config.settings import get_settings
from controllers.voice_runtime import VoiceRuntime
from models.cooking_session import CookingSession
from models.recipe import ImageInput, Preferences, Recipe
from models.user_preferences import (
    DEFAULT_VOICE_NAME,
    DEFAULT_VOICE_RATE,
    VoicePreferences,
    rate_to_slider_value,
    slider_value_to_rate,
)
from services.audio_service import AudioService
from services.claude_service import ClaudeService
from services.errors import GenerationError
from services.local_speech import Pyttsx3Speech
from services.microphone import MicrophoneCapture
from services.narration_service import NarrationService
from services.playback import BrowserAudioSink, PygameAudioSink
from services.rate_limiter import RateLimiter
from services.recipe_service import RecipeService

logger = logging.getLogger(__name__)

SCREEN_PREFERENCES = "preferences"
SCREEN_RECOMMENDATIONS = "recommendations"
SCREEN_COOKING = "cooking"


def _build_runtime(audio: AudioService, claude: ClaudeService) -> tuple[VoiceRuntime, Optional[BrowserAudioSink]]:
    """Wire narration, capture and generation into a voice runtime."""
    settings = get_settings()

    browser_sink = None
    if settings.playback == "browser":
        browser_sink = BrowserAudioSink()
        sink = browser_sink
    else:
        sink = PygameAudioSink()

    narrator = NarrationService(
        remote=audio if settings.remote_tts_enabled else None,
        sink=sink,
        local=Pyttsx3Speech(base_rate=settings.local_tts_rate),
        voice=VoicePreferences(name=settings.tts_voice, rate=settings.tts_rate),
        catalog_timeout=settings.voice_catalog_timeout,
    )
    capture = MicrophoneCapture(
        listen_timeout=settings.listen_timeout,
        phrase_time_limit=settings.phrase_time_limit,
    )
    runtime = VoiceRuntime(settings, capture=capture, generator=claude, narrator=narrator)
    return runtime, browser_sink


class CookingController:
    """Controller for the preferences, recommendations and cooking screens."""

    def __init__(self):
        self._init_session_state()
        self.audio: AudioService = st.session_state.mise_services["audio"]
        self.claude: ClaudeService = st.session_state.mise_services["claude"]
        self.recipes = RecipeService(self.claude)
        self.runtime: VoiceRuntime = st.session_state.mise_services["runtime"]
        self.browser_sink: Optional[BrowserAudioSink] = st.session_state.mise_services["browser_sink"]

    def _init_session_state(self):
        """Initialize session state if not already set."""
        if "mise" not in st.session_state:
            settings = get_settings()
            st.session_state.mise = {
                "screen": SCREEN_PREFERENCES,
                "preferences": None,
                "recipes": [],
                "detected_ingredients": None,
                "session": None,
                "audio_key": 0,
                "photo_key": 0,
                "voice_name": settings.tts_voice or DEFAULT_VOICE_NAME,
                "voice_rate": settings.tts_rate or DEFAULT_VOICE_RATE,
            }
        if "mise_services" not in st.session_state:
            audio = AudioService()
            claude = ClaudeService()
            runtime, browser_sink = _build_runtime(audio, claude)
            st.session_state.mise_services = {
                "audio": audio,
                "claude": claude,
                "runtime": runtime,
                "browser_sink": browser_sink,
            }
        if "request_limiter" not in st.session_state:
            settings = get_settings()
            st.session_state.request_limiter = RateLimiter(
                max_requests=settings.rate_limit_max_requests,
                window_seconds=settings.rate_limit_window_seconds,
            )

    def _check_rate_limit(self) -> bool:
        """Check if user has exceeded rate limit. Returns True if allowed."""
        return st.session_state.request_limiter.allow()

    # Session state accessors
    def get_screen(self) -> str:
        return st.session_state.mise["screen"]

    def get_recipes(self) -> list[Recipe]:
        return st.session_state.mise["recipes"]

    def get_detected_ingredients(self) -> Optional[str]:
        return st.session_state.mise["detected_ingredients"]

    def get_session(self) -> Optional[CookingSession]:
        return st.session_state.mise["session"]

    def get_messages(self) -> list[dict]:
        session = self.get_session()
        return session.messages() if session else []

    def get_audio_key(self) -> int:
        return st.session_state.mise["audio_key"]

    def increment_audio_key(self):
        st.session_state.mise["audio_key"] += 1

    def get_photo_key(self) -> int:
        return st.session_state.mise["photo_key"]

    def get_pending_audio(self) -> Optional[bytes]:
        """Next narration clip for browser playback, if any."""
        if self.browser_sink is None:
            return None
        return self.browser_sink.pop_pending()

    # Voice preferences
    def get_available_voices(self) -> dict[str, str]:
        return self.audio.get_available_voices()

    def get_voice_name(self) -> str:
        return st.session_state.mise["voice_name"]

    def set_voice_name(self, voice_name: str):
        st.session_state.mise["voice_name"] = voice_name
        self._apply_voice()

    def get_speed_slider_value(self) -> int:
        return rate_to_slider_value(st.session_state.mise["voice_rate"])

    def set_speed_from_slider(self, slider_value: int):
        st.session_state.mise["voice_rate"] = slider_value_to_rate(slider_value)
        self._apply_voice()

    def _apply_voice(self):
        self.runtime.narrator.voice = VoicePreferences(
            name=st.session_state.mise["voice_name"],
            rate=st.session_state.mise["voice_rate"],
        )

    # Preferences -> recommendations
    def generate_recipes(self, form: dict) -> tuple[bool, Optional[str]]:
        """
        Generate recipes from the submitted preferences form.

        Args:
            form: Preferences fields (see models.recipe.Preferences)

        Returns (success, error_message)
        """
        try:
            preferences = Preferences(**form)
        except ValidationError as e:
            logger.warning(f"Invalid preferences: {e}")
            return False, "Some preferences are invalid. Please check the form."

        if not preferences.has_ingredient_source() and not preferences.dish_name:
            return False, "Please enter ingredients, a dish name, or upload a photo."

        if not self._check_rate_limit():
            return False, "Too many requests. Please wait a moment."

        try:
            result = self.recipes.generate(preferences)
        except GenerationError as e:
            logger.error(f"Recipe generation failed: {e}")
            return False, "Error generating recipes. Please check your API key and try again."

        state = st.session_state.mise
        state["preferences"] = preferences
        state["recipes"] = result.recipes
        state["detected_ingredients"] = result.detected_ingredients
        state["screen"] = SCREEN_RECOMMENDATIONS
        return True, None

    def back_to_preferences(self):
        st.session_state.mise["screen"] = SCREEN_PREFERENCES

    # Cooking session lifecycle
    def start_cooking(self, recipe_index: int) -> tuple[bool, Optional[str]]:
        """
        Start a cooking session for one of the generated recipes.

        Returns (success, error_message)
        """
        recipes = self.get_recipes()
        if not 0 <= recipe_index < len(recipes):
            return False, "That recipe is no longer available."

        try:
            session = CookingSession(recipe=recipes[recipe_index])
        except ValueError as e:
            return False, str(e)

        self._apply_voice()
        self.runtime.set_session(session)
        state = st.session_state.mise
        state["session"] = session
        state["screen"] = SCREEN_COOKING
        self.runtime.announce_current_step()
        return True, None

    def leave_cooking(self):
        """End the cooking session and return to the recommendations."""
        self.runtime.set_session(None)
        state = st.session_state.mise
        state["session"] = None
        state["screen"] = SCREEN_RECOMMENDATIONS

    def go_to_step(self, index: int):
        """Explicit step control (buttons)."""
        self.runtime.go_to_step(index)

    # Messages
    def send_message(self, text: str) -> tuple[bool, Optional[str]]:
        """
        Send a typed (or transcribed) command.

        Returns (success, error_message)
        """
        if self.get_session() is None:
            return False, "Start cooking a recipe first."
        if not self._check_rate_limit():
            return False, "Too many requests. Please wait a moment."
        if not self.runtime.submit_command(text):
            return False, "Still working on your last request."
        return True, None

    def handle_voice_input(self, audio_bytes: bytes) -> tuple[bool, Optional[str]]:
        """
        Process a tap-to-talk recording.

        Returns (success, error_message)
        """
        text = self.audio.transcribe(audio_bytes)
        if not text:
            return False, "Could not understand audio. Please try again."
        return self.send_message(text)

    def review_progress_photo(
        self, image_bytes: bytes, mime_type: str, note: Optional[str] = None
    ) -> tuple[bool, Optional[str]]:
        """
        Get feedback on a photo of the current step.

        Returns (success, error_message)
        """
        if self.get_session() is None:
            return False, "Start cooking a recipe first."
        if not self._check_rate_limit():
            return False, "Too many requests. Please wait a moment."

        image = ImageInput(data=image_bytes, mime_type=mime_type or "image/jpeg")
        if not self.runtime.review_progress_photo(image, note):
            return False, "Still working on your last request."
        st.session_state.mise["photo_key"] += 1
        return True, None

    # Voice capture
    def start_listening(self, hands_free: bool) -> bool:
        return self.runtime.start_listening(hands_free)

    def stop_listening(self):
        self.runtime.stop_listening()

    def get_voice_state(self):
        return self.runtime.state

    def pop_notice(self) -> Optional[str]:
        return self.runtime.pop_notice()
