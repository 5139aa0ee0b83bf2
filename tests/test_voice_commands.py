import asyncio

import pytest

from conftest import FakeGenerator, RecordingNarrator
from controllers.voice_commands import (
    APOLOGY,
    END_OF_RECIPE_NOTICE,
    PHOTO_APOLOGY,
    START_OF_RECIPE_NOTICE,
    CookingCommandHandler,
)
from models.recipe import ImageInput


@pytest.mark.parametrize("transcript, command", [
    ("hey mise, next", "next"),
    ("Hay Mise next step", "next step"),
    ("hey miss... what temperature?", "what temperature?"),
    ("Hey Mise, what's next", "what's next"),
    ("Hey, Mise - repeat", "repeat"),
    ("hey mise", ""),
])
def test_wake_phrase_is_stripped(wake_matcher, transcript, command):
    assert wake_matcher.extract_command(transcript) == command


@pytest.mark.parametrize("transcript", ["what's next", "hey there", "mise en place is done"])
def test_no_wake_phrase(wake_matcher, transcript):
    assert wake_matcher.extract_command(transcript) is None


def handle(handler, command):
    return asyncio.run(handler.handle(command))


def test_next_advances_and_announces(session):
    narrator = RecordingNarrator()
    handler = CookingCommandHandler(session, FakeGenerator(), narrator)

    reply = handle(handler, "next")

    assert reply == "Step 2: Fry the garlic"
    assert session.current_step_index == 1
    assert narrator.spoken == [reply]
    assert session.messages() == [
        {"role": "user", "content": "next"},
        {"role": "assistant", "content": "Step 2: Fry the garlic"},
    ]


def test_next_at_last_step_keeps_index(session):
    session.jump_to(2)
    handler = CookingCommandHandler(session, FakeGenerator(), RecordingNarrator())

    assert handle(handler, "what's next") == END_OF_RECIPE_NOTICE
    assert session.current_step_index == 2


def test_previous_at_first_step_keeps_index(session):
    handler = CookingCommandHandler(session, FakeGenerator(), RecordingNarrator())

    assert handle(handler, "go back") == START_OF_RECIPE_NOTICE
    assert session.current_step_index == 0


def test_previous_goes_back_one_step(session):
    session.jump_to(2)
    handler = CookingCommandHandler(session, FakeGenerator(), RecordingNarrator())

    assert handle(handler, "previous step") == "Step 2: Fry the garlic"
    assert session.current_step_index == 1


def test_repeat_keeps_index(session):
    session.jump_to(1)
    handler = CookingCommandHandler(session, FakeGenerator(), RecordingNarrator())

    assert handle(handler, "say that again") == "Step 2: Fry the garlic"
    assert session.current_step_index == 1


def test_next_wins_over_back(session):
    handler = CookingCommandHandler(session, FakeGenerator(), RecordingNarrator())

    handle(handler, "back to the next one")

    assert session.current_step_index == 1


def test_question_goes_to_model_with_recipe_context(session):
    generator = FakeGenerator(replies=["Medium heat, until golden."])
    narrator = RecordingNarrator()
    session.jump_to(1)
    handler = CookingCommandHandler(session, generator, narrator)

    reply = handle(handler, "How hot should the pan be?")

    assert reply == "Medium heat, until golden."
    assert narrator.spoken == [reply]
    prompt = generator.prompts[0]
    assert "How hot should the pan be?" in prompt
    for item in ("1 cup rice", "2 cloves garlic", "salt", "Rinse the rice", "Simmer for 15 minutes"):
        assert item in prompt
    assert "currently on step 2: Fry the garlic" in prompt


def test_failed_ingredient_question_lists_ingredients(session):
    handler = CookingCommandHandler(session, FakeGenerator(fail=True), RecordingNarrator())

    reply = handle(handler, "How much salt do I need?")

    assert reply == "Here are the ingredients: 1 cup rice, 2 cloves garlic, salt."
    assert session.current_step_index == 0


def test_failed_question_apologizes(session):
    handler = CookingCommandHandler(session, FakeGenerator(fail=True), RecordingNarrator())

    assert handle(handler, "Can I use brown rice?") == APOLOGY
    assert session.messages()[-1] == {"role": "assistant", "content": APOLOGY}


def test_blank_model_answer_apologizes(session):
    handler = CookingCommandHandler(session, FakeGenerator(replies=["   "]), RecordingNarrator())

    assert handle(handler, "Is it done?") == APOLOGY


def test_progress_photo_is_sent_with_image(session):
    generator = FakeGenerator(replies=["Looks perfectly golden."])
    narrator = RecordingNarrator()
    handler = CookingCommandHandler(session, generator, narrator)
    photo = ImageInput(data=b"\x89PNG", mime_type="image/png")

    reply = asyncio.run(handler.review_progress_photo(photo, "brown enough?"))

    assert reply == "Looks perfectly golden."
    assert generator.images == [photo]
    assert 'They add: "brown enough?"' in generator.prompts[0]
    assert session.messages()[0] == {"role": "user", "content": "[Photo] brown enough?"}
    assert narrator.spoken == [reply]


def test_progress_photo_failure_apologizes(session):
    handler = CookingCommandHandler(session, FakeGenerator(fail=True), RecordingNarrator())

    reply = asyncio.run(handler.review_progress_photo(ImageInput(data=b"jpg")))

    assert reply == PHOTO_APOLOGY


def test_announce_current_step(session):
    narrator = RecordingNarrator()
    handler = CookingCommandHandler(session, FakeGenerator(), narrator)

    asyncio.run(handler.announce_current_step())

    assert narrator.spoken == ["Step 1: Rinse the rice"]
    assert session.messages() == [{"role": "assistant", "content": "Step 1: Rinse the rice"}]
