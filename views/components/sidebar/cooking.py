"""
Cooking session sidebar component.
"""

import streamlit as st
from typing import Callable, Optional

from models.recipe import Recipe


def render_cooking_sidebar(
    recipe: Recipe,
    photo_key: int,
    on_text_submit: Callable[[str], tuple[bool, Optional[str]]],
    on_photo_submit: Callable[[bytes, str, Optional[str]], tuple[bool, Optional[str]]],
    on_end_session: Callable[[], None],
):
    """
    Render the cooking session sidebar.

    Args:
        recipe: The recipe being cooked
        photo_key: Unique key for the progress photo uploader
        on_text_submit: Callback when text is submitted, returns (success, error)
        on_photo_submit: Callback with (image bytes, mime type, note), returns (success, error)
        on_end_session: Callback when session ends
    """
    with st.sidebar:
        st.markdown(f"### {recipe.name}")
        if recipe.prep_time:
            st.caption(f"{recipe.prep_time} | {recipe.difficulty}")

        with st.expander("Ingredients", expanded=True):
            for item in recipe.ingredients:
                st.markdown(f"- {item}")

        st.markdown("---")

        # Text Input (fallback)
        st.markdown("**Text Input**")
        with st.form("text_command", clear_on_submit=True, border=False):
            text_input = st.text_input(
                "Type your message:",
                placeholder="What's next?",
                label_visibility="collapsed"
            )
            submitted = st.form_submit_button("Send", use_container_width=True)

        if submitted and text_input.strip():
            success, error = on_text_submit(text_input)
            if not success:
                st.error(error)
            else:
                st.rerun()

        st.markdown("---")

        # Progress photo
        st.markdown("**How's it looking?**")
        photo = st.file_uploader(
            "Upload a photo of your progress",
            type=["jpg", "jpeg", "png", "webp"],
            key=f"progress_photo_{photo_key}",
            label_visibility="collapsed",
        )
        note = st.text_input("Anything to add?", key=f"progress_note_{photo_key}", placeholder="Is this brown enough?")
        if photo is not None and st.button("Check my progress", use_container_width=True):
            success, error = on_photo_submit(photo.getvalue(), photo.type, note)
            if not success:
                st.error(error)
            else:
                st.rerun()

        st.markdown("---")

        if st.button("End Cooking Session", type="secondary", use_container_width=True):
            on_end_session()
            st.rerun()
