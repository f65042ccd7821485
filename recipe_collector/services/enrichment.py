"""
Enrichment: turns raw ingredient/step text into the canonical
{ingredients, seasonings, tools, tags} record.

Rule-based normalization always runs. The model only adds a category split
pulled from descriptive text, and any model failure leaves the rule-based
result untouched.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from recipe_collector.config import settings
from recipe_collector.data.lexicons import CANONICAL
from recipe_collector.models.recipe import EnrichedRecipe, EnrichRequest
from recipe_collector.services.gemini_service import GeminiService, get_gemini_service
from recipe_collector.utils.exceptions import GeminiError, ValidationError
from recipe_collector.utils.normalize import normalize_list
from recipe_collector.utils.tags import clean_tags, derive_flavor_tags, derive_macro_tags, merge_tags

logger = logging.getLogger(__name__)

_STEP_SPLIT = re.compile(r"[。.\n]")

CATEGORY_KEYS = ("ingredients", "seasonings", "tools")

CATEGORY_PROMPT = """You are a structured information extractor. Extract 3 kinds of information from the recipe text below:
- ingredients: raw food ingredients (names only, no amounts or units)
- seasonings: seasonings (salt, sugar, light soy sauce, dark soy sauce, vinegar, chili, doubanjiang, sichuan pepper, garlic, ginger, ...)
- tools: cookware (oven, air fryer, microwave, steamer, wok, pressure cooker, ...)

Keep the names in the language of the text. Return JSON only, nothing else.
Example: {{"ingredients":["鸡肉"],"seasonings":["盐"],"tools":["炒锅"]}}

Text: {text}"""


def _empty_categories() -> Dict[str, List[str]]:
    return {key: [] for key in CATEGORY_KEYS}


def _split_steps(raw_steps: Optional[Union[List[str], str]]) -> List[str]:
    if raw_steps is None:
        return []
    if isinstance(raw_steps, str):
        parts = _STEP_SPLIT.split(raw_steps)
    else:
        parts = [str(s) for s in raw_steps if s is not None]
    return [p.strip() for p in parts if p.strip()]


async def extract_categories_by_model(
    text: str,
    *,
    gemini: Optional[GeminiService] = None,
) -> Dict[str, List[str]]:
    """Ingredient/seasoning/tool names the model reads out of ``text``; empty lists on any failure."""
    gemini = gemini or get_gemini_service()
    if not gemini.configured:
        logger.debug("Gemini API key not configured, skipping category extraction")
        return _empty_categories()

    try:
        data = await gemini.call_model_for_json(CATEGORY_PROMPT.format(text=text), json_mode=True)
    except GeminiError as e:
        logger.warning("Category extraction failed, using rule-based result: %s", str(e))
        return _empty_categories()

    result = _empty_categories()
    for key in CATEGORY_KEYS:
        value = data.get(key)
        if isinstance(value, list):
            result[key] = [str(v).strip() for v in value if v is not None and str(v).strip()]
    return result


def _coerce_request(payload: Union[EnrichRequest, Mapping[str, Any], None]) -> EnrichRequest:
    if payload is None:
        return EnrichRequest()
    if isinstance(payload, EnrichRequest):
        return payload
    try:
        return EnrichRequest.model_validate(dict(payload))
    except (PydanticValidationError, TypeError, ValueError) as e:
        raise ValidationError(f"Invalid enrichment input: {str(e)}") from e


async def enrich(
    payload: Union[EnrichRequest, Mapping[str, Any], None] = None,
    *,
    gemini: Optional[GeminiService] = None,
) -> EnrichedRecipe:
    """
    Enrich one recipe. Every input field is optional; with nothing given the
    result is four empty lists.

    Raises:
        ValidationError: If ``payload`` has unknown fields or wrong types
    """
    request = _coerce_request(payload)

    rule_ingredients = normalize_list(request.rawIngredients, CANONICAL.ingredients)
    steps = _split_steps(request.rawSteps)

    categories = _empty_categories()
    fallback_text = (request.fallbackText or "").strip()
    if len(fallback_text) > settings.enrich_min_text_length:
        categories = await extract_categories_by_model(fallback_text, gemini=gemini)

    ingredients = normalize_list(
        [*rule_ingredients, *normalize_list(categories["ingredients"], CANONICAL.ingredients)],
        CANONICAL.ingredients,
    )
    seasonings = normalize_list(categories["seasonings"], CANONICAL.seasonings)
    tools = normalize_list(categories["tools"], CANONICAL.tools)

    base_text = "。".join(t for t in (request.title, "。".join(steps), fallback_text) if t)
    tags = clean_tags(
        merge_tags(
            derive_macro_tags(ingredients),
            derive_flavor_tags(base_text, len(steps)),
            request.userTags,
        )
    )

    logger.debug(
        "Enrichment finished",
        extra={
            "ingredients": len(ingredients),
            "seasonings": len(seasonings),
            "tools": len(tools),
            "tags": len(tags),
        },
    )
    return EnrichedRecipe(ingredients=ingredients, seasonings=seasonings, tools=tools, tags=tags)


async def enrich_many(
    payloads: Sequence[Union[EnrichRequest, Mapping[str, Any], None]],
    *,
    gemini: Optional[GeminiService] = None,
) -> List[EnrichedRecipe]:
    """Enrich a batch in order; an item that fails yields an empty record."""
    results = await asyncio.gather(
        *(enrich(p, gemini=gemini) for p in payloads),
        return_exceptions=True,
    )

    enriched: List[EnrichedRecipe] = []
    for index, result in enumerate(results):
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.error("Enrichment failed for batch item %d: %s", index, str(result))
            enriched.append(EnrichedRecipe())
        else:
            enriched.append(result)
    return enriched
