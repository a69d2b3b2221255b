"""Relay routes: a single POST endpoint plus its CORS pre-flight."""

import logging

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError

from controllers.inference_controller import run_inference
from models.inference import InferencePayload
from utils.cors import CORS_HEADERS

LOGGER = logging.getLogger(__name__)

router = APIRouter()


def _error_response(exc: Exception) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=500, headers=CORS_HEADERS)


@router.options("/", include_in_schema=False)
async def preflight() -> Response:
    """Answer CORS pre-flight requests without touching the dispatcher."""
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post("/")
async def post_inference(request: Request):
    """Forward `{model, inputs}` to the upstream provider and return its result."""
    try:
        body = await request.json()
        payload = InferencePayload.model_validate(body)
    except ValidationError:
        return _error_response(ValueError("Request body must be an object with a 'model' field."))
    except Exception as exc:
        LOGGER.error("Invalid relay request body: %s", exc)
        return _error_response(ValueError("Request body must be JSON."))

    try:
        result = await run_inference(request, payload)
    except Exception as exc:
        LOGGER.error("Relay request for model %r failed: %s", payload.model, exc)
        return _error_response(exc)
    return JSONResponse(result, headers=CORS_HEADERS)
