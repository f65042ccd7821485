"""
Step condensing: asks the model to merge trivial steps and reorder a recipe
into parallel phases without losing any quantity, temperature or time.

Unlike refinement and enrichment this call does not degrade silently: a reply
that cannot be parsed or validated is retried once, then reported as a
``CondenseError`` with a machine-readable reason.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from recipe_collector.models.condense import CondenseRequest, CondenseResponse
from recipe_collector.services.gemini_service import GeminiService, get_gemini_service
from recipe_collector.utils.exceptions import (
    CondenseError,
    ModelResponseError,
    ModelUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2
CONDENSE_TEMPERATURE = 0.1
DEFAULT_PHASE_NAME = "制作过程"
UNKNOWN_TITLE = "未知菜谱"
UNKNOWN_PHASE = "未知阶段"
DEFAULT_CONFIDENCE = 0.5

SUGGEST_RETRY_LATER = "Please try again later"
SUGGEST_SIMPLIFY = "Lower maxSteps or check the section structure of the source text"

_LANGUAGES = {"zh": "Simplified Chinese", "ja": "Japanese", "en": "English"}

_SYSTEM_PROMPT = """You are a professional recipe editor (baking and Chinese cooking).
Merge and reorder the steps of the recipe without changing technique or proportions. Output strict JSON.
Rules:
1. You may merge trivial steps that can run in parallel or back to back ("get a bowl / crack eggs / whisk" -> "crack the eggs and whisk").
2. Never merge steps carrying a temperature, a time or a key checkpoint ("turn off the heat once the caramel is amber", "preheat the oven to 180°C").
3. Keep every number (grams, ml, temperatures, times).
4. If the source is split into sections (e.g. caramel / custard), keep the sections.
5. Build a parallel timeline that interleaves phases that can overlap ("while the caramel cools -> mix the custard").
6. Collect hazards in warnings (hot syrup must not be left unattended, pour hot liquid slowly, ...).
7. Write all text in {language}.

Return exactly this shape:
{{
  "concise": {{
    "title": "...",
    "phases": [{{"name": "...", "steps": ["..."]}}],
    "checklist": ["..."],
    "timeline": [{{"at": "...", "actions": [{{"phase": "...", "step": 1, "text": "..."}}]}}],
    "warnings": ["..."],
    "notes": ["..."]
  }},
  "diffMeta": {{
    "originalStepCount": 0,
    "conciseStepCount": 0,
    "mergeHints": ["..."],
    "lostInfo": ["..."],
    "confidence": 0.0
  }}
}}"""


def _build_user_prompt(request: CondenseRequest) -> str:
    lines = [
        f"Recipe title: {request.title}",
        f"Maximum steps: {request.maxSteps}",
        f"Locale: {request.locale}",
        "",
    ]
    if request.rawText:
        lines += ["Source text:", request.rawText, ""]

    if request.phases:
        lines.append("Sections:")
        for phase in request.phases:
            lines.append(f"== {phase.name} ==")
            if phase.ingredients:
                items = ", ".join(
                    f"{ing.name} {ing.amount}" if ing.amount else ing.name for ing in phase.ingredients
                )
                lines.append(f"Ingredients: {items}")
            if phase.steps:
                lines.append("Steps:")
                lines += [f"{step.order}. {step.text}" for step in phase.steps]
            lines.append("")

    lines.append(
        f"Requirement: at most {request.maxSteps} steps in total; merge if over, "
        "but never drop a key parameter. Output JSON only, nothing else."
    )
    return "\n".join(lines)


# =========================================================
# Response normalization
# =========================================================
def _as_list(value: Any) -> List[Any]:
    return value if isinstance(value, list) else []


def _as_int(value: Any) -> int:
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


def _as_float(value: Any, default: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    return number if number else default


def normalize_condense_response(data: Mapping[str, Any]) -> CondenseResponse:
    """
    Coerce a loosely shaped model reply into a ``CondenseResponse``.

    Missing lists become empty, counts become ints, confidence is clamped to
    [0, 1]. Whatever still does not fit raises pydantic's ValidationError.
    """
    concise = data.get("concise") if isinstance(data.get("concise"), dict) else {}
    diff = data.get("diffMeta") if isinstance(data.get("diffMeta"), dict) else {}

    phases = [
        {
            "name": str(phase.get("name") or UNKNOWN_PHASE),
            "steps": [s for s in _as_list(phase.get("steps")) if isinstance(s, str) and s.strip()],
        }
        for phase in _as_list(concise.get("phases"))
        if isinstance(phase, dict)
    ]
    timeline = [
        {
            "at": str(entry.get("at") or ""),
            "actions": [
                {
                    "phase": str(action.get("phase") or ""),
                    "step": _as_int(action.get("step")),
                    "text": str(action.get("text") or ""),
                }
                for action in _as_list(entry.get("actions"))
                if isinstance(action, dict)
            ],
        }
        for entry in _as_list(concise.get("timeline"))
        if isinstance(entry, dict)
    ]

    normalized = {
        "concise": {
            "title": concise.get("title") or UNKNOWN_TITLE,
            "phases": phases,
            "checklist": _as_list(concise.get("checklist")),
            "timeline": timeline,
            "warnings": _as_list(concise.get("warnings")),
            "notes": concise.get("notes") if isinstance(concise.get("notes"), list) else None,
        },
        "diffMeta": {
            "originalStepCount": _as_int(diff.get("originalStepCount")),
            "conciseStepCount": _as_int(diff.get("conciseStepCount")),
            "mergeHints": _as_list(diff.get("mergeHints")),
            "lostInfo": diff.get("lostInfo") if isinstance(diff.get("lostInfo"), list) else None,
            "confidence": max(0.0, min(1.0, _as_float(diff.get("confidence"), DEFAULT_CONFIDENCE))),
        },
        "source": "ai-condense",
    }
    return CondenseResponse.model_validate(normalized)


# =========================================================
# Helpers for callers
# =========================================================
def _json_list(value: Union[str, Sequence[Any], None]) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, str):
        if not value.strip():
            return []
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Expected a JSON list: {str(e)}") from e
    return list(value) if isinstance(value, (list, tuple)) else []


def build_condense_request(
    title: str,
    ingredients: Union[str, Sequence[Any], None] = None,
    steps: Union[str, Sequence[Any], None] = None,
    raw_text: Optional[str] = None,
    locale: str = "zh",
    max_steps: int = 12,
) -> CondenseRequest:
    """
    Build a request from stored recipe fields.

    ``ingredients`` and ``steps`` may be lists or JSON-encoded lists; they are
    put into a single phase. Ingredients may be names or ``{name, amount}``.
    """
    payload: Dict[str, Any] = {"title": title, "locale": locale, "maxSteps": max_steps}
    if raw_text:
        payload["rawText"] = raw_text

    parsed_ingredients = _json_list(ingredients)
    parsed_steps = _json_list(steps)
    if parsed_ingredients or parsed_steps:
        phase_ingredients = []
        for ing in parsed_ingredients:
            if isinstance(ing, dict):
                phase_ingredients.append({"name": str(ing.get("name") or ""), "amount": ing.get("amount") or None})
            else:
                phase_ingredients.append({"name": str(ing), "amount": None})
        payload["phases"] = [
            {
                "name": DEFAULT_PHASE_NAME,
                "ingredients": phase_ingredients,
                "steps": [{"order": i, "text": str(s)} for i, s in enumerate(parsed_steps, start=1)],
            }
        ]

    try:
        return CondenseRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid condense request: {str(e)}") from e


def calculate_condense_stats(response: CondenseResponse) -> Dict[str, Any]:
    """How many steps condensing saved, and a coarse confidence level."""
    original = response.diffMeta.originalStepCount
    saved = original - response.diffMeta.conciseStepCount
    rate = (saved / original * 100) if original > 0 else 0.0
    confidence = response.diffMeta.confidence

    if confidence >= 0.8:
        level = "high"
    elif confidence >= 0.6:
        level = "medium"
    else:
        level = "low"

    return {
        "stepsSaved": saved,
        "savingRate": f"{rate:.1f}%",
        "hasSignificantSaving": saved >= 3,
        "confidenceLevel": level,
    }


# =========================================================
# Service call
# =========================================================
async def condense_recipe(
    request: Union[CondenseRequest, Mapping[str, Any]],
    *,
    gemini: Optional[GeminiService] = None,
) -> CondenseResponse:
    """
    Condense a recipe's steps through the model.

    Raises:
        ValidationError: If ``request`` does not validate
        CondenseError: ``missing_api_key``, ``model_error``, or after the
            retry, ``json_parse_error`` / ``validation_error``
    """
    if not isinstance(request, CondenseRequest):
        try:
            request = CondenseRequest.model_validate(dict(request))
        except (PydanticValidationError, TypeError, ValueError) as e:
            raise ValidationError(f"Invalid condense request: {str(e)}") from e

    gemini = gemini or get_gemini_service()
    if not gemini.configured:
        raise CondenseError("Gemini API key is not configured", reason="missing_api_key")

    system_prompt = _SYSTEM_PROMPT.format(language=_LANGUAGES[request.locale])
    user_prompt = _build_user_prompt(request)
    logger.info(
        "Condensing recipe",
        extra={
            "title": request.title,
            "max_steps": request.maxSteps,
            "has_raw_text": bool(request.rawText),
            "phases": len(request.phases or []),
        },
    )

    reason = "json_parse_error"
    for attempt in range(1, MAX_ATTEMPTS + 1):
        try:
            data = await gemini.call_model_for_json(
                user_prompt,
                system_instruction=system_prompt,
                temperature=CONDENSE_TEMPERATURE,
            )
            result = normalize_condense_response(data)
        except ModelUnavailableError as e:
            raise CondenseError("Gemini service error", reason="model_error", suggest=SUGGEST_RETRY_LATER) from e
        except ModelResponseError as e:
            reason = e.reason
            logger.warning("Condense attempt %d/%d returned bad JSON: %s", attempt, MAX_ATTEMPTS, str(e))
        except PydanticValidationError as e:
            reason = "validation_error"
            logger.warning("Condense attempt %d/%d failed validation: %s", attempt, MAX_ATTEMPTS, str(e))
        else:
            logger.info(
                "Condense finished",
                extra={
                    "original_steps": result.diffMeta.originalStepCount,
                    "concise_steps": result.diffMeta.conciseStepCount,
                    "confidence": result.diffMeta.confidence,
                },
            )
            return result

    message = "Model reply was not valid JSON" if reason == "json_parse_error" else "Model reply failed validation"
    raise CondenseError(message, reason=reason, suggest=SUGGEST_SIMPLIFY)
