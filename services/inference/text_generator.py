"""Text generation through OpenAI's Responses API."""

import logging
import os
from typing import Any, Dict

from openai import AsyncOpenAI

from services.inference.media_inputs import build_text_inputs
from services.inference.prompts import text_generation_system_prompt
from services.inference.response_parser import extract_output_text

LOGGER = logging.getLogger(__name__)

TEXT_GENERATION_MODEL = os.getenv("TEXT_GENERATION_MODEL", "gpt-4o-mini")
MAX_OUTPUT_TOKENS = 100
TEMPERATURE = 0.7


class TextGenerator:
    """Generate a short reply for a user prompt."""

    def __init__(self, client: AsyncOpenAI) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.system_prompt = text_generation_system_prompt()

    async def generate(self, prompt: str) -> Dict[str, Any]:
        """Return `{"generated_text": ...}` for the prompt."""
        if not isinstance(prompt, str) or not prompt.strip():
            raise ValueError("Text generation requires a non-empty string input.")
        try:
            response = await self.client.responses.create(
                model=TEXT_GENERATION_MODEL,
                input=build_text_inputs(self.system_prompt, prompt),
                max_output_tokens=MAX_OUTPUT_TOKENS,
                temperature=TEMPERATURE,
            )
        except Exception as exc:
            LOGGER.error("Text generation request failed: %s", exc)
            raise
        return {"generated_text": extract_output_text(response)}
