"""
Voice commands - wake phrase matching and cooking command dispatch.

Commands are matched on the lower-cased utterance, first match wins:

1. "next"                 -> advance one step (or end-of-recipe notice)
2. "repeat" / "again"     -> read the current step again
3. "previous" / "back"    -> go back one step (or start-of-recipe notice)
4. anything else          -> ask the generation model about the recipe

Every exchange is written to the session transcript and every reply is
spoken through the narration service.
"""

import logging
import re
import string
from typing import Iterable, Optional

from models.cooking_session import CookingSession
from models.recipe import ImageInput
from services.errors import GenerationError
from services.narration_service import NarrationService
from services.ports import GenerationPort
from services.prompt_builder import build_progress_prompt, build_question_prompt

logger = logging.getLogger(__name__)

END_OF_RECIPE_NOTICE = "That was the last step. You're all done, enjoy your meal!"
START_OF_RECIPE_NOTICE = "You're already at the first step."
APOLOGY = "Sorry, I couldn't answer that right now. Please try again."
PHOTO_APOLOGY = "Sorry, I couldn't look at that photo right now. Please try again."

_LEADING_JUNK = string.punctuation + string.whitespace


class WakePhraseMatcher:
    """Finds a wake phrase at the start of an utterance and strips it."""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = [re.compile(p, re.IGNORECASE) for p in patterns]

    def extract_command(self, transcript: str) -> Optional[str]:
        """
        Return the command following the wake phrase.

        Returns:
            The remaining text with leading punctuation trimmed ("" if the
            wake phrase was said on its own), or None if no wake phrase matched
        """
        for pattern in self.patterns:
            match = pattern.search(transcript)
            if match:
                return transcript[match.end():].lstrip(_LEADING_JUNK).strip()
        return None


class CookingCommandHandler:
    """Executes spoken or typed commands against one cooking session."""

    def __init__(
        self,
        session: CookingSession,
        generator: GenerationPort,
        narrator: NarrationService,
    ):
        self.session = session
        self.generator = generator
        self.narrator = narrator

    async def handle(self, command: str) -> str:
        """
        Dispatch one command.

        Args:
            command: Utterance with any wake phrase already removed

        Returns:
            The assistant's reply (already logged and spoken)
        """
        self.session.log("user", command)
        lowered = command.lower()

        if "next" in lowered:
            reply = self._next_step()
        elif "repeat" in lowered or "again" in lowered:
            reply = self.session.announcement()
        elif "previous" in lowered or "back" in lowered:
            reply = self._previous_step()
        else:
            reply = await self._answer_question(command)

        await self._reply(reply)
        return reply

    async def announce_current_step(self) -> str:
        """Read the current step aloud (used when cooking starts)."""
        reply = self.session.announcement()
        await self._reply(reply)
        return reply

    async def review_progress_photo(self, image: ImageInput, note: Optional[str] = None) -> str:
        """Ask the vision model whether the cook's photo looks right for the current step."""
        self.session.log("user", f"[Photo] {note.strip()}" if note and note.strip() else "[Photo]")
        prompt = build_progress_prompt(
            self.session.recipe, self.session.current_step_index, note
        )
        try:
            reply = (await self.generator.generate(prompt, image=image)).strip()
        except GenerationError as e:
            logger.error(f"Progress photo feedback failed: {e}")
            reply = PHOTO_APOLOGY
        await self._reply(reply or PHOTO_APOLOGY)
        return reply or PHOTO_APOLOGY

    def _next_step(self) -> str:
        if not self.session.advance():
            return END_OF_RECIPE_NOTICE
        return self.session.announcement()

    def _previous_step(self) -> str:
        if not self.session.go_back():
            return START_OF_RECIPE_NOTICE
        return self.session.announcement()

    async def _answer_question(self, question: str) -> str:
        prompt = build_question_prompt(
            self.session.recipe, self.session.current_step_index, question
        )
        try:
            answer = (await self.generator.generate(prompt)).strip()
            if answer:
                return answer
            logger.warning("Empty answer from the generation model")
        except GenerationError as e:
            logger.error(f"Question answering failed: {e}")

        lowered = question.lower()
        if "ingredient" in lowered or "how much" in lowered:
            return self._ingredient_answer()
        return APOLOGY

    def _ingredient_answer(self) -> str:
        ingredients = self.session.recipe.ingredients
        if not ingredients:
            return APOLOGY
        return f"Here are the ingredients: {', '.join(ingredients)}."

    async def _reply(self, text: str) -> None:
        self.session.log("assistant", text)
        await self.narrator.speak(text)
