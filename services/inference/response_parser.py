"""Helpers to parse Responses API outputs."""

import json
from typing import Any, Dict, List


def extract_output_text(response: Any) -> str:
    """Return the concatenated text output of a Responses API result."""
    text = getattr(response, "output_text", None)
    if text:
        return text.strip()

    parts: List[str] = []
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) == "output_text":
                parts.append(getattr(content, "text", "") or "")
    return "".join(parts).strip()


def parse_function_call(response: Any, *, tool_name: str) -> Dict[str, Any]:
    """Extract the decoded function call arguments for the specified tool name."""
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) == "function_call" and getattr(item, "name", None) == tool_name:
            return json.loads(getattr(item, "arguments", "{}") or "{}")
    raise RuntimeError(f"No function_call output for '{tool_name}' found in Responses API output.")


def parse_predictions(arguments: Dict[str, Any], *, top_k: int) -> List[Dict[str, Any]]:
    """Normalize classifier tool arguments into a label/score list, best first."""
    predictions = []
    for entry in arguments.get("predictions") or []:
        label = str(entry.get("label") or "").strip()
        if not label:
            continue
        try:
            score = float(entry.get("score", 0.0))
        except (TypeError, ValueError):
            score = 0.0
        predictions.append({"label": label, "score": min(max(score, 0.0), 1.0)})
    predictions.sort(key=lambda item: item["score"], reverse=True)
    return predictions[:top_k]
