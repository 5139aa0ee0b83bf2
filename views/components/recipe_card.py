"""
Recipe card and step display components.
"""

import streamlit as st
from typing import Callable

from models.cooking_session import CookingSession
from models.recipe import Recipe


def render_recipe_card(recipe: Recipe, index: int, on_start: Callable[[int], None]):
    """
    Render one recommended recipe with a button to start cooking it.

    Args:
        recipe: Recipe to show
        index: Position in the recommendations list
        on_start: Callback when "Start Cooking" is clicked (receives index)
    """
    with st.container(border=True):
        st.markdown(f"#### {recipe.name}")
        details = [f"Difficulty: {recipe.difficulty}"]
        if recipe.prep_time:
            details.insert(0, f"Time: {recipe.prep_time}")
        details.append(f"{recipe.step_count} steps")
        st.caption(" | ".join(details))

        with st.expander("Ingredients"):
            for item in recipe.ingredients:
                st.markdown(f"- {item}")

        if st.button("Start Cooking", key=f"start_recipe_{index}", type="primary", use_container_width=True):
            on_start(index)


def render_step_card(session: CookingSession, on_step: Callable[[int], None]):
    """
    Render the current step with previous/next controls.

    Args:
        session: Active cooking session
        on_step: Callback with the step index to jump to
    """
    st.progress(session.step_number / session.step_count)
    st.markdown(f"### Step {session.step_number} of {session.step_count}")
    st.markdown(f"> {session.current_step}")

    col1, col2 = st.columns(2)
    with col1:
        if st.button("Previous", disabled=session.is_first_step(), use_container_width=True, key="step_prev"):
            on_step(session.current_step_index - 1)
            st.rerun()
    with col2:
        if st.button("Next", disabled=session.is_last_step(), type="primary", use_container_width=True, key="step_next"):
            on_step(session.current_step_index + 1)
            st.rerun()
