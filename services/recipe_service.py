"""
Recipe Service - generates recipes from a preferences snapshot.

This service is pure Python with no Streamlit dependencies.

Flow:
1. If the user attached a photo, ask the vision model which ingredients it shows
2. Build the recipe prompt from the preferences (and detected ingredients)
3. Send it to the generation model
4. Parse the reply into recipes (never fails, see response_parser)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from config.settings import get_settings
from models.recipe import Preferences, Recipe
from services.errors import GenerationError
from services.prompt_builder import build_ingredient_detection_prompt, build_recipe_prompt
from services.response_parser import parse_recipes

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    """Recipes plus what was read from the ingredient photo."""
    recipes: list[Recipe]
    detected_ingredients: Optional[str] = None


class RecipeService:
    """Service for recipe generation."""

    def __init__(self, generator, recipe_count: Optional[int] = None):
        """
        Args:
            generator: Object with generate_text(prompt, image=None) -> str
                (ClaudeService)
            recipe_count: Recipes to request; defaults to settings.recipe_count
        """
        self.generator = generator
        self.recipe_count = recipe_count or get_settings().recipe_count

    def detect_ingredients(self, preferences: Preferences) -> Optional[str]:
        """
        Read ingredients from the attached photo.

        Returns:
            Comma-separated ingredient names, or None if there is no photo
            or the model could not read it
        """
        if preferences.ingredient_image is None:
            return None
        try:
            text = self.generator.generate_text(
                build_ingredient_detection_prompt(),
                image=preferences.ingredient_image,
            )
        except GenerationError as e:
            logger.warning(f"Ingredient detection failed, continuing without it: {e}")
            return None
        detected = " ".join(text.split()).strip(" .")
        return detected or None

    def generate(self, preferences: Preferences) -> GenerationResult:
        """
        Generate recipes for the given preferences.

        Raises:
            GenerationError: if the recipe request itself fails
        """
        detected = self.detect_ingredients(preferences)
        prompt = build_recipe_prompt(preferences, detected, recipe_count=self.recipe_count)
        logger.info(f"Requesting {self.recipe_count} recipes ({len(prompt)} chars)")

        raw = self.generator.generate_text(prompt)

        fallback_ingredients = preferences.ingredients.strip() or (detected or "")
        recipes = parse_recipes(
            raw,
            fallback_ingredients=fallback_ingredients,
            prep_time=preferences.cooking_time or "",
        )
        logger.info(f"Parsed {len(recipes)} recipe(s)")
        return GenerationResult(recipes=recipes, detected_ingredients=detected)
