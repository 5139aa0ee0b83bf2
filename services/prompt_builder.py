"""
Prompt Builder - assembles generation requests from user input.

Pure functions, no I/O: the same inputs always produce the same prompt.
"""

from typing import Optional

from models.recipe import (
    COOKING_TIME_OPTIONS,
    DIETARY_OPTIONS,
    MOOD_OPTIONS,
    Preferences,
    Recipe,
)


RECIPE_FORMAT_INSTRUCTIONS = """For each recipe, provide:
1. Recipe name
2. Prep time
3. Ingredients list
4. Step-by-step instructions
5. Difficulty level

Respond ONLY with a JSON array of objects with exactly these keys:
"name" (string), "prepTime" (string), "ingredients" (array of strings),
"instructions" (array of strings, one step per item), "difficulty" (string: Easy, Medium or Hard).
Do not wrap the JSON in markdown or add any text before or after it."""

SPOKEN_ANSWER_NOTE = (
    "IMPORTANT: Your answer will be read aloud by text-to-speech. Do NOT use markdown "
    "formatting like asterisks, bold, or bullet points. Answer in 1-3 short, plain sentences."
)

INGREDIENT_DETECTION_PROMPT = (
    "List the food ingredients you can see in this photo. "
    "Reply with a single comma-separated line of ingredient names and nothing else. "
    "If you cannot see any food, reply with an empty line."
)


def _ordered(selected: frozenset[str], options: list[str]) -> list[str]:
    # Known options in form order, unknown values after them alphabetically
    known = [o for o in options if o in selected]
    extra = sorted(v for v in selected if v not in options)
    return known + extra


def build_recipe_prompt(
    preferences: Preferences,
    detected_ingredients: Optional[str] = None,
    recipe_count: int = 3,
) -> str:
    """
    Build the recipe generation request.

    Only fields the user actually supplied are listed; absent optional
    fields are left out entirely.

    Args:
        preferences: Form snapshot
        detected_ingredients: Ingredients read from the uploaded photo, if any
        recipe_count: Number of recipes to ask for

    Returns:
        Prompt text ending with the JSON output instructions
    """
    criteria = []

    if preferences.dish_name:
        criteria.append(f"- Specific dish requested: {preferences.dish_name.strip()}")
    if preferences.cooking_time:
        label = COOKING_TIME_OPTIONS.get(preferences.cooking_time, preferences.cooking_time)
        criteria.append(f"- Maximum cooking time: {preferences.cooking_time} ({label})")
    criteria.append(f"- Type of dish: {preferences.dish_type}")

    moods = _ordered(preferences.mood, MOOD_OPTIONS)
    if moods:
        criteria.append(f"- Mood/flavor profile: {', '.join(moods)}")

    dietary = [d for d in _ordered(preferences.dietary, DIETARY_OPTIONS) if d != "none"]
    if dietary:
        criteria.append(f"- Dietary preferences: {', '.join(dietary)}")

    if preferences.ingredients.strip():
        criteria.append(f"- Available ingredients: {preferences.ingredients.strip()}")
    if detected_ingredients and detected_ingredients.strip():
        criteria.append(f"- Ingredients detected in the user's photo: {detected_ingredients.strip()}")

    noun = "recipe suggestion" if recipe_count == 1 else "recipe suggestions"
    lines = [f"Generate {recipe_count} {noun} based on the following criteria:"]
    lines.extend(criteria)
    lines.extend(["", RECIPE_FORMAT_INSTRUCTIONS])
    return "\n".join(lines)


def build_ingredient_detection_prompt() -> str:
    """Prompt sent with an ingredient photo to read out what is in it."""
    return INGREDIENT_DETECTION_PROMPT


def format_recipe_context(recipe: Recipe, step_index: int) -> str:
    """Recipe as plain text: ingredients, numbered steps and the current step."""
    lines = [f"Recipe: {recipe.name}", "", "Ingredients:"]
    lines.extend(f"- {item}" for item in recipe.ingredients)
    lines.extend(["", "Instructions:"])
    lines.extend(f"{i}. {step}" for i, step in enumerate(recipe.instructions, start=1))
    if recipe.instructions:
        lines.extend([
            "",
            f"The cook is currently on step {step_index + 1}: {recipe.instructions[step_index]}",
        ])
    return "\n".join(lines)


def build_question_prompt(recipe: Recipe, step_index: int, question: str) -> str:
    """
    Build a context-augmented prompt for a free-form question asked mid-recipe.

    Args:
        recipe: Recipe being cooked
        step_index: 0-based current step
        question: The user's question, verbatim

    Returns:
        Prompt text
    """
    return "\n".join([
        "You are a friendly cooking assistant helping someone cook step by step.",
        "",
        format_recipe_context(recipe, step_index),
        "",
        f'The cook asks: "{question}"',
        "",
        SPOKEN_ANSWER_NOTE,
    ])


def build_progress_prompt(recipe: Recipe, step_index: int, note: Optional[str] = None) -> str:
    """
    Build the request sent alongside a photo of the cook's progress.

    Args:
        recipe: Recipe being cooked
        step_index: 0-based current step
        note: Optional remark from the cook ("does this look done?")
    """
    lines = [
        "You are a friendly cooking assistant. The attached photo shows the cook's progress.",
        "",
        format_recipe_context(recipe, step_index),
        "",
        "Look at the photo and tell them whether it looks right for the current step, "
        "and what to adjust if it doesn't.",
    ]
    if note and note.strip():
        lines.append(f'They add: "{note.strip()}"')
    lines.extend(["", SPOKEN_ANSWER_NOTE])
    return "\n".join(lines)
