"""Utilities to build input payloads for the Responses API."""

from typing import Any, Dict, List


def text_message(role: str, text: str) -> Dict[str, Any]:
    """Return a single text message entry."""
    return {"type": "message", "role": role, "content": [{"type": "input_text", "text": text}]}


def build_text_inputs(system_prompt: str, user_text: str) -> List[Dict[str, Any]]:
    """Build the input array for a text-only request."""
    return [text_message("system", system_prompt), text_message("user", user_text)]


def build_image_inputs(system_prompt: str, user_prompt: str, image_url: str) -> List[Dict[str, Any]]:
    """Build the input array for an image request; `image_url` is a data URL."""
    return [
        text_message("system", system_prompt),
        text_message("user", user_prompt),
        {"type": "message", "role": "user", "content": [{"type": "input_image", "image_url": image_url}]},
    ]
