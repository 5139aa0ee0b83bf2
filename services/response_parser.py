"""
Response Parser - turns free-form model output into recipes.

The model is asked for a JSON array but nothing guarantees it sends one, so
parsing is best-effort with fallbacks, in order:

1. The first '[' ... last ']' span is parsed as a JSON array of recipes.
2. No such span: one recipe built from the user's ingredients and the
   non-empty lines of the reply.
3. The span exists but cannot be parsed: one recipe holding the whole reply
   as its only instruction.

parse_recipes() never raises and always returns at least one recipe.
"""

import json
import logging
import re
from typing import Optional

from pydantic import ValidationError

from models.recipe import DEFAULT_DIFFICULTY, Recipe, split_ingredients

logger = logging.getLogger(__name__)

ARRAY_PATTERN = re.compile(r"\[[\s\S]*\]")


def parse_recipes(
    raw: Optional[str],
    fallback_ingredients: str = "",
    prep_time: str = "",
) -> list[Recipe]:
    """
    Extract recipes from generated text.

    Args:
        raw: Model reply
        fallback_ingredients: Comma-separated ingredients to use when the
            reply has no structured data (typed or detected from a photo)
        prep_time: Prep time to use for synthesized recipes

    Returns:
        Non-empty list of recipes
    """
    text = raw or ""
    try:
        match = ARRAY_PATTERN.search(text)
        if match:
            recipes = _parse_array(match.group(0))
            if recipes:
                return recipes
            logger.info("Model returned an empty recipe array, synthesizing one")
        return [_recipe_from_lines(text, fallback_ingredients, prep_time)]
    except (ValueError, TypeError, RecursionError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        logger.warning(f"Could not parse recipe JSON: {e}")
        return [_recipe_from_whole_text(text, prep_time)]


def _parse_array(candidate: str) -> list[Recipe]:
    data = json.loads(candidate)
    if not isinstance(data, list):
        raise TypeError(f"Expected a JSON array, got {type(data).__name__}")
    recipes = []
    for item in data:
        if not isinstance(item, dict):
            raise TypeError(f"Expected recipe objects, got {type(item).__name__}")
        recipes.append(Recipe.model_validate(item))
    return recipes


def _recipe_from_lines(text: str, fallback_ingredients: str, prep_time: str) -> Recipe:
    return Recipe(
        name="Generated Recipe",
        prep_time=prep_time,
        ingredients=tuple(split_ingredients(fallback_ingredients)),
        instructions=tuple(line.strip() for line in text.splitlines() if line.strip()),
        difficulty=DEFAULT_DIFFICULTY,
    )


def _recipe_from_whole_text(text: str, prep_time: str) -> Recipe:
    return Recipe(
        name="Recipe Suggestion",
        prep_time=prep_time,
        ingredients=("See details below",),
        instructions=(text,),
        difficulty=DEFAULT_DIFFICULTY,
    )
