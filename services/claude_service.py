"""
Claude API Service - handles all interactions with Claude.

This service is pure Python with no Streamlit dependencies,
making it easy to test and reuse across different contexts.
It is the GenerationPort used for recipe generation, ingredient
photo reading, mid-recipe questions and progress photo feedback.
"""

import asyncio
import base64
import logging
from typing import Optional

import anthropic

from config.settings import get_settings
from models.recipe import ImageInput
from services.errors import GenerationError
from services.ports import GenerationPort

logger = logging.getLogger(__name__)


class ClaudeService(GenerationPort):
    """Service for interacting with Claude API."""

    def __init__(self, client: Optional[anthropic.Anthropic] = None):
        settings = get_settings()
        self.client = client or anthropic.Anthropic(api_key=settings.anthropic_api_key)
        self.model = settings.claude_model
        self.max_tokens = settings.generation_max_tokens

    @staticmethod
    def _build_content(prompt: str, image: Optional[ImageInput]) -> str | list[dict]:
        """Plain text, or an image block followed by the text when a photo is attached."""
        if image is None:
            return prompt
        return [
            {
                "type": "image",
                "source": {
                    "type": "base64",
                    "media_type": image.mime_type,
                    "data": base64.b64encode(image.data).decode("utf-8"),
                },
            },
            {"type": "text", "text": prompt},
        ]

    def generate_text(
        self,
        prompt: str,
        image: Optional[ImageInput] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Send a single-turn prompt to Claude.

        Args:
            prompt: Prompt text
            image: Optional photo sent inline with the prompt
            max_tokens: Override for the configured response limit

        Returns:
            Claude's response text

        Raises:
            GenerationError: if the API call fails or the reply has no text
        """
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens or self.max_tokens,
                messages=[{"role": "user", "content": self._build_content(prompt, image)}],
            )
        except anthropic.APIError as e:
            logger.error(f"Claude API error: {e}")
            raise GenerationError(str(e)) from e

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text.strip():
            raise GenerationError("Claude returned an empty response")
        return text

    async def generate(self, prompt: str, image: Optional[ImageInput] = None) -> str:
        """Async wrapper so the voice controller's event loop never blocks on the network."""
        return await asyncio.to_thread(self.generate_text, prompt, image)
