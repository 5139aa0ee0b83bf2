"""
Controllers layer - orchestration and session state management.
"""

from controllers.cooking_controller import CookingController
from controllers.voice_commands import CookingCommandHandler, WakePhraseMatcher
from controllers.voice_runtime import VoiceRuntime
from controllers.voice_session_controller import VoiceSessionController

__all__ = [
    "CookingController",
    "CookingCommandHandler",
    "WakePhraseMatcher",
    "VoiceRuntime",
    "VoiceSessionController",
]
