"""
Models Package - domain data for recipes, cooking sessions and voice state.
"""

from models.recipe import (
    Preferences,
    ImageInput,
    Recipe,
    COOKING_TIME_OPTIONS,
    DISH_TYPE_OPTIONS,
    MOOD_OPTIONS,
    DIETARY_OPTIONS,
    split_ingredients,
)
from models.cooking_session import CookingSession, TranscriptEntry
from models.voice_state import (
    VoiceMode,
    VoicePhase,
    VoiceEvent,
    VoiceSessionState,
    ControllerState,
    transition,
)
from models.user_preferences import VoicePreferences

__all__ = [
    # Recipes
    "Preferences",
    "ImageInput",
    "Recipe",
    "COOKING_TIME_OPTIONS",
    "DISH_TYPE_OPTIONS",
    "MOOD_OPTIONS",
    "DIETARY_OPTIONS",
    "split_ingredients",
    # Cooking session
    "CookingSession",
    "TranscriptEntry",
    # Voice
    "VoiceMode",
    "VoicePhase",
    "VoiceEvent",
    "VoiceSessionState",
    "ControllerState",
    "transition",
    "VoicePreferences",
]
