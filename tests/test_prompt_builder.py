from models.recipe import ImageInput, Preferences
from services.prompt_builder import (
    build_ingredient_detection_prompt,
    build_progress_prompt,
    build_question_prompt,
    build_recipe_prompt,
)


def test_only_supplied_fields_are_listed():
    prefs = Preferences(
        cooking_time="30min",
        dish_type="main course",
        mood=[],
        dietary=[],
        ingredients="chicken, rice",
    )

    prompt = build_recipe_prompt(prefs)

    assert "30min" in prompt
    assert "main course" in prompt
    assert "chicken, rice" in prompt
    assert "Mood" not in prompt
    assert "Dietary" not in prompt
    assert "Specific dish" not in prompt


def test_all_fields_are_listed():
    prefs = Preferences(
        dish_name="Pad Thai",
        cooking_time="1hour",
        dish_type="dessert",
        mood=["sweet", "spicy"],
        dietary=["vegan", "gluten-free"],
        ingredients="tofu, noodles",
    )

    prompt = build_recipe_prompt(prefs, detected_ingredients="peanuts, lime", recipe_count=2)

    assert prompt.startswith("Generate 2 recipe suggestions")
    for value in ("Pad Thai", "1hour", "dessert", "spicy, sweet", "vegan, gluten-free", "tofu, noodles", "peanuts, lime"):
        assert value in prompt


def test_missing_cooking_time_is_omitted():
    prompt = build_recipe_prompt(Preferences(ingredients="eggs"))

    assert "cooking time" not in prompt.lower()


def test_dietary_none_is_not_a_preference():
    prompt = build_recipe_prompt(Preferences(dietary=["none"], ingredients="eggs"))

    assert "Dietary" not in prompt


def test_requests_json_with_fixed_keys():
    prompt = build_recipe_prompt(Preferences(ingredients="eggs"))

    for key in ('"name"', '"prepTime"', '"ingredients"', '"instructions"', '"difficulty"'):
        assert key in prompt
    assert "JSON array" in prompt


def test_recipe_prompt_is_deterministic():
    photo = ImageInput(data=b"jpg")
    prefs = Preferences(mood=["healthy", "cheesy", "comfort food"], ingredients="kale", ingredient_image=photo)

    assert build_recipe_prompt(prefs, "kale") == build_recipe_prompt(prefs, "kale")


def test_detection_prompt_asks_for_comma_list():
    assert "comma-separated" in build_ingredient_detection_prompt()


def test_question_prompt_contains_recipe_and_question(recipe):
    prompt = build_question_prompt(recipe, 2, "Can I use brown rice?")

    for item in recipe.ingredients + recipe.instructions:
        assert item in prompt
    assert "currently on step 3: Simmer for 15 minutes" in prompt
    assert '"Can I use brown rice?"' in prompt


def test_progress_prompt_note_is_optional(recipe):
    assert "They add" not in build_progress_prompt(recipe, 0)
    assert 'They add: "too dark?"' in build_progress_prompt(recipe, 0, "  too dark?  ")
