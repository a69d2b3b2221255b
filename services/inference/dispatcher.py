"""Select and invoke exactly one upstream inference operation per request."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict

from openai import AsyncOpenAI

from models.errors import UpstreamInferenceFailure
from models.inference import InferenceModel
from services.inference.image_classifier import ImageClassifier
from services.inference.summarizer import Summarizer
from services.inference.text_generator import TextGenerator

LOGGER = logging.getLogger(__name__)

# Every InferenceModel member must be routed here.
OPERATIONS: Dict[InferenceModel, str] = {
	InferenceModel.TEXT_GENERATION: "generate_text",
	InferenceModel.IMAGE_CLASSIFICATION: "classify_image",
	InferenceModel.SUMMARIZATION: "summarize",
}

_unrouted = set(InferenceModel) - set(OPERATIONS)
if _unrouted:
	raise RuntimeError(f"No inference operation registered for: {sorted(m.value for m in _unrouted)}")


class InferenceDispatcher:
	"""Route a model tag to the matching upstream operation."""

	def __init__(self, client: AsyncOpenAI) -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.text_generator = TextGenerator(client)
		self.image_classifier = ImageClassifier(client)
		self.summarizer = Summarizer(client)

	async def dispatch(self, model: Any, inputs: Any) -> Any:
		"""Run the operation for `model` and return its result verbatim.

		Raises:
			UnsupportedModel: `model` is not one of the supported tags.
			ValueError: `inputs` is unusable for the selected operation.
			UpstreamInferenceFailure: the provider call failed.
		"""
		selected = InferenceModel.parse(model)
		operation: Callable[[Any], Awaitable[Any]] = getattr(self, OPERATIONS[selected])
		try:
			return await operation(inputs)
		except (ValueError, UpstreamInferenceFailure):
			raise
		except Exception as exc:
			LOGGER.error("Upstream %s call failed: %s", selected.value, exc)
			raise UpstreamInferenceFailure(str(exc)) from exc

	async def generate_text(self, inputs: Any) -> Dict[str, Any]:
		return await self.text_generator.generate(inputs)

	async def classify_image(self, inputs: Any) -> Any:
		return await self.image_classifier.classify(inputs)

	async def summarize(self, inputs: Any) -> Any:
		return await self.summarizer.summarize(inputs)
