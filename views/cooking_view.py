"""
Cooking View - UI for the three Mise screens.

preferences -> recommendations -> cooking

This view handles all rendering for the cooking assistant.
It delegates business logic to the CookingController.
"""

import streamlit as st

from controllers.cooking_controller import (
    SCREEN_COOKING,
    SCREEN_RECOMMENDATIONS,
    CookingController,
)
from models.voice_state import VoiceMode
from views.components.chat import render_chat_messages
from views.components.preferences_form import render_preferences_form
from views.components.recipe_card import render_recipe_card, render_step_card
from views.components.sidebar import render_cooking_sidebar
from views.components.voice_panel import (
    render_audio_playback,
    render_listening_controls,
    render_voice_panel,
)

# How often the voice status area polls the background runtime (seconds)
STATUS_REFRESH_SECONDS = 1.0


class CookingView:
    """View for the preferences, recommendations and cooking screens."""

    def __init__(self):
        self.controller = CookingController()

    def render(self):
        """Main render method - displays the current screen."""
        st.title("Mise")

        screen = self.controller.get_screen()
        if screen == SCREEN_COOKING and self.controller.get_session() is not None:
            self._render_cooking()
        elif screen == SCREEN_RECOMMENDATIONS:
            self._render_recommendations()
        else:
            self._render_preferences()

    def _render_preferences(self):
        """Render the preferences form."""
        st.markdown("Tell me what you have and what you feel like, and I'll suggest a few recipes.")

        form = render_preferences_form()
        if form is None:
            return

        with st.spinner("Cooking up ideas..."):
            success, error = self.controller.generate_recipes(form)

        if success:
            st.rerun()
        else:
            st.warning(error)

    def _render_recommendations(self):
        """Render recipe cards for the generated recipes."""
        st.markdown("### Here's what you could make")

        detected = self.controller.get_detected_ingredients()
        if detected:
            st.info(f"Spotted in your photo: {detected}")

        recipes = self.controller.get_recipes()
        if not recipes:
            st.warning("No recipes came back. Try adjusting your preferences.")

        for index, recipe in enumerate(recipes):
            render_recipe_card(recipe, index, on_start=self._start_cooking)

        if st.button("Back to preferences", use_container_width=True):
            self.controller.back_to_preferences()
            st.rerun()

    def _start_cooking(self, index: int):
        success, error = self.controller.start_cooking(index)
        if success:
            st.rerun()
        else:
            st.error(error)

    def _render_cooking(self):
        """Render the active cooking session."""
        session = self.controller.get_session()

        render_cooking_sidebar(
            recipe=session.recipe,
            photo_key=self.controller.get_photo_key(),
            on_text_submit=self.controller.send_message,
            on_photo_submit=self.controller.review_progress_photo,
            on_end_session=self.controller.leave_cooking,
        )

        # Two-column layout: step and chat on left, voice panel on right
        main_col, voice_col = st.columns([3, 1])

        with main_col:
            render_step_card(session, on_step=self.controller.go_to_step)
            render_chat_messages(self.controller.get_messages())

        with voice_col:
            self._render_voice_panel()

    def _render_voice_panel(self):
        """Render voice control panel."""
        st.markdown("### Voice Controls")

        voice_container = st.container(height=560)
        with voice_container:
            self._render_voice_status()

            hands_free_on = self.controller.get_voice_state().mode == VoiceMode.HANDS_FREE
            render_listening_controls(
                hands_free_on=hands_free_on,
                on_listen_once=lambda: self.controller.start_listening(hands_free=False),
                on_hands_free_change=self._set_hands_free,
            )

            st.markdown("---")

            audio_bytes = render_voice_panel(
                audio_key=self.controller.get_audio_key(),
                voices=self.controller.get_available_voices(),
                current_voice=self.controller.get_voice_name(),
                current_speed=self.controller.get_speed_slider_value(),
                on_voice_change=self.controller.set_voice_name,
                on_speed_change=self.controller.set_speed_from_slider,
            )

            if audio_bytes:
                with st.spinner("Transcribing..."):
                    success, error = self.controller.handle_voice_input(audio_bytes)

                if success:
                    self.controller.increment_audio_key()
                    st.rerun()
                elif error:
                    st.warning(error)

    def _set_hands_free(self, enabled: bool):
        if enabled:
            self.controller.start_listening(hands_free=True)
        else:
            self.controller.stop_listening()

    @st.fragment(run_every=STATUS_REFRESH_SECONDS)
    def _render_voice_status(self):
        """Poll the voice runtime: status line, notices, narration audio."""
        state = self.controller.get_voice_state()
        st.caption(state.status_text())

        notice = self.controller.pop_notice()
        if notice:
            st.toast(notice)

        # Voice commands change the step and transcript off the page thread
        session = self.controller.get_session()
        if session is not None:
            snapshot = (session.current_step_index, len(session.transcript_log))
            previous = st.session_state.get("mise_rendered_snapshot")
            st.session_state.mise_rendered_snapshot = snapshot
            if previous is not None and previous != snapshot:
                st.rerun()

        render_audio_playback(self.controller.get_pending_audio())
