"""
Recipe domain models - Pydantic models for preferences and generated recipes.

Recipes arrive as free-form model output, so the Recipe model is lenient:
missing keys fall back to defaults and scalar values are coerced to strings.
Both models are frozen; a Preferences snapshot is taken when the user asks
for recipes and never changes afterwards.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


# Form options, in the order they are shown (and emitted into prompts)
COOKING_TIME_OPTIONS = {
    "30min": "30 minutes",
    "1hour": "1 hour",
    "2hours": "2 hours",
    "2+hours": "2+ hours",
}

DISH_TYPE_OPTIONS = {
    "appetizer": "Appetizer",
    "main course": "Main Course",
    "dessert": "Dessert",
    "snack": "Snack",
    "drinks": "Drinks",
}

MOOD_OPTIONS = ["spicy", "comfort food", "healthy", "cheesy", "sour", "sweet"]

DIETARY_OPTIONS = ["high-protein", "vegetarian", "vegan", "gluten-free", "dairy-free", "none"]

DEFAULT_DIFFICULTY = "Medium"

_FIELD_DEFAULTS = {"name": "Untitled Recipe", "prep_time": "", "difficulty": DEFAULT_DIFFICULTY}


class ImageInput(BaseModel):
    """An uploaded photo sent inline to the vision model."""
    model_config = ConfigDict(frozen=True)

    data: bytes = Field(..., description="Raw image bytes")
    mime_type: str = Field("image/jpeg", description="e.g. 'image/png'")


class Preferences(BaseModel):
    """Snapshot of the preferences form at generation time."""
    model_config = ConfigDict(frozen=True)

    cooking_time: Optional[str] = Field(None, description="One of COOKING_TIME_OPTIONS")
    dish_type: str = Field("main course", description="One of DISH_TYPE_OPTIONS")
    mood: frozenset[str] = Field(default_factory=frozenset)
    dietary: frozenset[str] = Field(default_factory=frozenset)
    ingredients: str = Field("", description="Free-text ingredient list")
    dish_name: Optional[str] = Field(None, description="A specific dish the user wants")
    ingredient_image: Optional[ImageInput] = None

    @field_validator("cooking_time", "dish_name", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_validator("cooking_time")
    @classmethod
    def _known_cooking_time(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and value not in COOKING_TIME_OPTIONS:
            raise ValueError(f"Unknown cooking time: {value}")
        return value

    @field_validator("dish_type")
    @classmethod
    def _known_dish_type(cls, value: str) -> str:
        if value not in DISH_TYPE_OPTIONS:
            raise ValueError(f"Unknown dish type: {value}")
        return value

    def has_ingredient_source(self) -> bool:
        """True if the user typed ingredients or attached a photo."""
        return bool(self.ingredients.strip()) or self.ingredient_image is not None

    def ingredient_list(self) -> list[str]:
        """Typed ingredients split on commas."""
        return split_ingredients(self.ingredients)


class Recipe(BaseModel):
    """
    A generated recipe.

    Field aliases match the JSON keys requested from the model
    (name, prepTime, ingredients, instructions, difficulty).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = "Untitled Recipe"
    prep_time: str = Field("", alias="prepTime")
    ingredients: tuple[str, ...] = ()
    instructions: tuple[str, ...] = ()
    difficulty: str = DEFAULT_DIFFICULTY

    @field_validator("name", "prep_time", "difficulty", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return _FIELD_DEFAULTS[info.field_name]
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("ingredients", "instructions", mode="before")
    @classmethod
    def _items_to_str(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        if isinstance(value, (list, tuple)):
            return tuple(_item_text(item) for item in value if _item_text(item))
        return value

    @property
    def step_count(self) -> int:
        return len(self.instructions)


def _item_text(item: Any) -> str:
    # Models sometimes return {"item": "...", "quantity": "..."} objects
    if isinstance(item, dict):
        return " ".join(str(v) for v in item.values() if v not in (None, "")).strip()
    return str(item).strip()


def split_ingredients(text: str) -> list[str]:
    """Split a comma-separated ingredient string, dropping blanks."""
    return [part.strip() for part in (text or "").split(",") if part.strip()]
