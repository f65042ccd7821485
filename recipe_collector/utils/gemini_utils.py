"""Helpers for reading Gemini replies."""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from recipe_collector.utils.exceptions import ModelResponseError

logger = logging.getLogger(__name__)

# Greedy: from the first "{" to the last "}", so nested objects survive
_OBJECT_SPAN = re.compile(r"\{[\s\S]*\}")


def _strip_trailing_commas(json_text: str) -> str:
    # {"a": 1,} -> {"a": 1} and [1,2,] -> [1,2]
    return re.sub(r",(\s*[}\]])", r"\1", json_text)


def parse_model_json(text: str) -> Dict[str, Any]:
    """
    Parse a model reply into a JSON object.

    Tries the reply as-is, then the widest ``{...}`` span inside it (which
    drops markdown fences and surrounding prose), then that span with
    trailing commas removed.

    Raises:
        ModelResponseError: If no JSON object can be recovered
    """
    t = (text or "").strip()
    if not t:
        raise ModelResponseError("Model returned empty text")

    try:
        data = json.loads(t)
    except json.JSONDecodeError:
        match = _OBJECT_SPAN.search(t)
        if not match:
            raise ModelResponseError("No JSON object found in model reply")
        span = match.group(0)
        try:
            data = json.loads(span)
        except json.JSONDecodeError:
            try:
                data = json.loads(_strip_trailing_commas(span))
            except json.JSONDecodeError as e:
                raise ModelResponseError(f"Invalid JSON in model reply: {e}") from e

    if not isinstance(data, dict):
        raise ModelResponseError("Model returned JSON that is not an object")
    return data


def get_response_text(response: Any) -> str:
    """
    Text of a google-genai response.

    Prefers ``response.text`` and falls back to the first text part of the
    first candidate; returns "" when neither exists.
    """
    text = getattr(response, "text", None)
    if isinstance(text, str) and text.strip():
        return text

    for candidate in (getattr(response, "candidates", None) or [])[:1]:
        content = getattr(candidate, "content", None)
        for part in getattr(content, "parts", None) or []:
            part_text = getattr(part, "text", None)
            if isinstance(part_text, str) and part_text.strip():
                return part_text
    return ""
