"""Schema definition for the image classification tool."""

from typing import Any, Dict

FUNCTION_NAME = "classify_image"
TOP_K = 5

FUNCTION_DEFINITION: Dict[str, Any] = {
    "type": "function",
    "name": FUNCTION_NAME,
    "description": "Return the most likely labels for the image with confidence scores.",
    "parameters": {
        "type": "object",
        "properties": {
            "predictions": {
                "type": "array",
                "description": f"Up to {TOP_K} label/score pairs, most likely first.",
                "items": {
                    "type": "object",
                    "properties": {
                        "label": {
                            "type": "string",
                            "description": "Short name of an object or scene in the image.",
                        },
                        "score": {
                            "type": "number",
                            "description": "Confidence between 0 and 1.",
                        },
                    },
                    "required": ["label", "score"],
                    "additionalProperties": False,
                },
            },
        },
        "required": ["predictions"],
        "additionalProperties": False,
    },
    "strict": True,
}
