"""Model pass that fills the gaps of a partially extracted recipe."""

from __future__ import annotations

import json
import logging
from typing import Any, List, Optional

from recipe_collector.config import settings
from recipe_collector.models.recipe import AI_REFINED_TAG, ParseSource, PartialRecipe
from recipe_collector.services.gemini_service import GeminiService, get_gemini_service
from recipe_collector.utils.exceptions import GeminiError

logger = logging.getLogger(__name__)


def _build_refine_prompt(raw_text: str, existing: PartialRecipe) -> str:
    known = existing.model_dump(
        include={"title", "description", "ingredients", "steps", "tags"},
    )
    return f"""Extract the recipe from the web page text below and return it as JSON.
Information already known: {json.dumps(known, ensure_ascii=False)}

Page text:
{raw_text[: settings.refine_text_limit]}

Return exactly this shape:
{{
  "title": "recipe name (keep the known one if present)",
  "ingredients": ["ingredient 1", "ingredient 2"],
  "steps": ["step 1", "step 2"],
  "tags": ["tag 1", "tag 2"],
  "description": "short description"
}}

Rules:
1. Return JSON only, no other text
2. Keep the known information; only fill missing ingredients and steps
3. Use empty arrays when no recipe can be recognized
4. Tags should cover cuisine, difficulty and notable features
5. Keep the language of the page text"""


def _str_list(value: Any) -> List[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _opt_str(value: Any) -> Optional[str]:
    return value.strip() if isinstance(value, str) and value.strip() else None


async def refine_with_model(
    raw_text: str,
    existing: PartialRecipe,
    *,
    gemini: Optional[GeminiService] = None,
) -> Optional[PartialRecipe]:
    """
    Ask the model to complete ``existing`` from the page text.

    Existing ingredients and steps are never replaced; the model only fills
    them when empty. Returns None when no model is configured, the call or
    its JSON fails, or the reply holds neither ingredients nor steps.
    """
    gemini = gemini or get_gemini_service()
    if not gemini.configured:
        logger.info("Gemini API key not configured, skipping refinement")
        return None
    if not raw_text or not raw_text.strip():
        logger.info("No article text to refine from")
        return None

    try:
        data = await gemini.call_model_for_json(_build_refine_prompt(raw_text, existing))
    except GeminiError as e:
        logger.warning("Refinement failed: %s", str(e))
        return None

    ingredients = _str_list(data.get("ingredients"))
    steps = _str_list(data.get("steps"))
    if not ingredients and not steps:
        logger.info("Refinement reply had no ingredients or steps")
        return None

    filled = (not existing.ingredients and bool(ingredients)) or (not existing.steps and bool(steps))

    merged = PartialRecipe(
        title=existing.title or _opt_str(data.get("title")) or "",
        imageUrl=existing.imageUrl,
        description=existing.description or _opt_str(data.get("description")),
        ingredients=existing.ingredients or ingredients,
        steps=existing.steps or steps,
        tags=[*existing.tags, *_str_list(data.get("tags"))],
        parseSource=existing.parseSource,
        warning=existing.warning,
    )
    if filled:
        merged = merged.model_copy(
            update={"parseSource": ParseSource.strongest(existing.parseSource, ParseSource.AI_REFINE)}
        ).with_tag(AI_REFINED_TAG)

    logger.info(
        "Refinement merged",
        extra={
            "filled": filled,
            "parse_source": merged.parseSource.value,
            "ingredients": len(merged.ingredients),
            "steps": len(merged.steps),
        },
    )
    return merged
