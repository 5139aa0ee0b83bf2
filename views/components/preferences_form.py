"""
Preferences form component.
"""

import streamlit as st
from typing import Optional

from models.recipe import (
    COOKING_TIME_OPTIONS,
    DIETARY_OPTIONS,
    DISH_TYPE_OPTIONS,
    MOOD_OPTIONS,
)


def render_preferences_form() -> Optional[dict]:
    """
    Render the recipe preferences form.

    Returns:
        Preferences fields when the form is submitted, None otherwise
    """
    with st.form("preferences_form"):
        dish_name = st.text_input(
            "Craving something specific?",
            placeholder="e.g. shakshuka (optional)",
        )

        col1, col2 = st.columns(2)
        with col1:
            cooking_time = st.radio(
                "Cooking time",
                options=[""] + list(COOKING_TIME_OPTIONS.keys()),
                format_func=lambda x: "Any" if x == "" else COOKING_TIME_OPTIONS[x],
                horizontal=True,
            )
        with col2:
            dish_type = st.selectbox(
                "Type of dish",
                options=list(DISH_TYPE_OPTIONS.keys()),
                index=list(DISH_TYPE_OPTIONS.keys()).index("main course"),
                format_func=lambda x: DISH_TYPE_OPTIONS[x],
            )

        mood = st.pills("Mood", options=MOOD_OPTIONS, selection_mode="multi")
        dietary = st.pills("Dietary", options=DIETARY_OPTIONS, selection_mode="multi")

        ingredients = st.text_area(
            "What's in your kitchen?",
            placeholder="chicken, rice, garlic, lemon",
        )
        photo = st.file_uploader(
            "...or snap your ingredients",
            type=["jpg", "jpeg", "png", "webp"],
        )

        submitted = st.form_submit_button("Get Recipes", type="primary", use_container_width=True)

    if not submitted:
        return None

    form = {
        "dish_name": dish_name,
        "cooking_time": cooking_time,
        "dish_type": dish_type,
        "mood": frozenset(mood or []),
        "dietary": frozenset(dietary or []),
        "ingredients": ingredients,
    }
    if photo is not None:
        form["ingredient_image"] = {
            "data": photo.getvalue(),
            "mime_type": photo.type or "image/jpeg",
        }
    return form
