"""
Reusable UI components.
"""

from views.components.chat import render_chat_messages
from views.components.preferences_form import render_preferences_form
from views.components.recipe_card import render_recipe_card, render_step_card
from views.components.voice_panel import (
    render_audio_playback,
    render_listening_controls,
    render_voice_panel,
)

# Sidebar components
from views.components.sidebar import render_cooking_sidebar

__all__ = [
    # Chat
    "render_chat_messages",
    # Screens
    "render_preferences_form",
    "render_recipe_card",
    "render_step_card",
    # Voice & Audio
    "render_audio_playback",
    "render_listening_controls",
    "render_voice_panel",
    # Sidebar
    "render_cooking_sidebar",
]
