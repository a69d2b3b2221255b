"""Inference request models for the relay."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel

from models.errors import UnsupportedModel


class InferenceModel(str, Enum):
    """Closed set of inference operations the relay can forward."""

    TEXT_GENERATION = "text-generation"
    IMAGE_CLASSIFICATION = "image-classification"
    SUMMARIZATION = "summarization"

    @classmethod
    def parse(cls, value: Any) -> "InferenceModel":
        """Return the member for `value` or raise UnsupportedModel."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            raise UnsupportedModel(value) from exc


class InferencePayload(BaseModel):
    """Body accepted by the relay: a model tag and free-form inputs."""

    model: str
    inputs: Any = None
