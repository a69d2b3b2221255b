"""Summarization through OpenAI's Responses API."""

import logging
import os
from typing import Any, Dict, List

from openai import AsyncOpenAI

from services.inference.media_inputs import build_text_inputs
from services.inference.prompts import summarization_system_prompt
from services.inference.response_parser import extract_output_text

LOGGER = logging.getLogger(__name__)

SUMMARIZATION_MODEL = os.getenv("SUMMARIZATION_MODEL", "gpt-4o-mini")
MAX_OUTPUT_TOKENS = 130
MIN_SUMMARY_WORDS = 30


class Summarizer:
    """Condense a passage of text into a short summary."""

    def __init__(self, client: AsyncOpenAI) -> None:
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client

    async def summarize(self, text: str) -> List[Dict[str, Any]]:
        """Return `[{"summary_text": ...}]` for the given text."""
        if not isinstance(text, str) or not text.strip():
            raise ValueError("Summarization requires a non-empty string input.")
        try:
            response = await self.client.responses.create(
                model=SUMMARIZATION_MODEL,
                input=build_text_inputs(summarization_system_prompt(MIN_SUMMARY_WORDS), text),
                max_output_tokens=MAX_OUTPUT_TOKENS,
            )
        except Exception as exc:
            LOGGER.error("Summarization request failed: %s", exc)
            raise
        return [{"summary_text": extract_output_text(response)}]
