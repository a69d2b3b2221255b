"""Relay controller: forward one inference request to the upstream provider."""

from typing import Any

from fastapi import Request

from models.inference import InferencePayload
from services.inference.dispatcher import InferenceDispatcher


def _get_openai_client(request: Request):
    """Retrieve the shared OpenAI client from the app state."""
    openai_client = getattr(request.app.state, "openai_client", None)
    if openai_client is None:
        raise RuntimeError("OpenAI client not initialized.")
    return openai_client


async def run_inference(request: Request, payload: InferencePayload) -> Any:
    """Dispatch the payload and return the upstream result unchanged.

    Args:
        request: FastAPI Request object (used to access app.state for the shared client).
        payload: Parsed relay body with the model tag and inputs.

    Returns:
        The raw upstream result: a dict for text generation, a list for
        classification and summarization.
    """
    dispatcher = InferenceDispatcher(_get_openai_client(request))
    return await dispatcher.dispatch(payload.model, payload.inputs)
