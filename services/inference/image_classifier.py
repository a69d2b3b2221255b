"""Image classification using OpenAI's Responses API with a forced function call."""

import logging
import os
import time
from typing import Any, Dict, List, Union

from openai import AsyncOpenAI

from models.errors import UpstreamInferenceFailure
from services.inference.classification_schema import FUNCTION_DEFINITION, FUNCTION_NAME, TOP_K
from services.inference.media_inputs import build_image_inputs
from services.inference.prompts import classification_system_prompt, classification_user_prompt
from services.inference.response_parser import parse_function_call, parse_predictions
from utils.media_validation import to_data_url

LOGGER = logging.getLogger(__name__)

IMAGE_CLASSIFICATION_MODEL = os.getenv("IMAGE_CLASSIFICATION_MODEL", "gpt-4o-mini")


class ImageClassifier:
    """Class for labelling images with confidence scores."""

    def __init__(self, client: AsyncOpenAI) -> None:
        """Initialize the ImageClassifier with an OpenAI async client."""
        if client is None:
            raise ValueError("OpenAI client must be provided.")
        self.client = client
        self.system_prompt = classification_system_prompt()

    async def classify(self, image: Union[str, bytes]) -> List[Dict[str, Any]]:
        """Classify an image given as a data URL, bare base64 text, or raw bytes.

        Returns:
            A list of `{"label": str, "score": float}` entries, highest score first.
        """
        if not isinstance(image, (str, bytes)):
            raise ValueError("Image classification requires a base64 string input.")
        image_url = to_data_url(image)
        inputs = build_image_inputs(self.system_prompt, classification_user_prompt(TOP_K), image_url)

        start_time = time.time()
        response = await self._create_response(inputs)
        predictions = self._parse_response(response)
        LOGGER.info("Image classification latency: %.3fs", time.time() - start_time)
        return predictions

    async def _create_response(self, inputs: List[Dict[str, Any]]) -> Any:
        """Send the image request to the OpenAI Responses API."""
        try:
            return await self.client.responses.create(
                model=IMAGE_CLASSIFICATION_MODEL,
                input=inputs,
                tools=[FUNCTION_DEFINITION],
                tool_choice={"type": "function", "name": FUNCTION_NAME},
            )
        except Exception as exc:
            LOGGER.error("Error during OpenAI Responses API call: %s", exc)
            raise

    def _parse_response(self, response: Any) -> List[Dict[str, Any]]:
        """Parse the classification output from the model."""
        try:
            arguments = parse_function_call(response, tool_name=FUNCTION_NAME)
        except Exception as exc:
            LOGGER.error("Error parsing OpenAI response: %s", exc)
            LOGGER.error("Full response object: %r", response)
            raise UpstreamInferenceFailure(f"Malformed classification output: {exc}") from exc

        predictions = parse_predictions(arguments, top_k=TOP_K)
        if not predictions:
            LOGGER.error("Empty classification output received from OpenAI.")
        return predictions
