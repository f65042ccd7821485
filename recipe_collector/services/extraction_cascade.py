"""
Extraction cascade: tries extractors from most to least reliable and stops
at the first one whose result is sufficient.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence, Tuple

from recipe_collector.models.recipe import (
    CONTENT_PARTIAL,
    ExtractionResult,
    PartialRecipe,
    RawDocument,
)
from recipe_collector.services.readability_extractor import extract_readability
from recipe_collector.services.structured_extractors import (
    extract_json_ld,
    extract_microdata,
    extract_open_graph,
    resolve_image_url,
)
from recipe_collector.utils.exceptions import ValidationError

logger = logging.getLogger(__name__)

Extractor = Callable[[RawDocument], Optional[PartialRecipe]]

# Most reliable first
DEFAULT_STRATEGIES: Tuple[Extractor, ...] = (
    extract_json_ld,
    extract_microdata,
    extract_readability,
)

MIN_COMPLETE_ITEMS = 2

__all__ = [
    "DEFAULT_STRATEGIES",
    "extract_from_html",
    "is_sufficient",
    "needs_refinement",
    "resolve_image_url",
]


def is_sufficient(partial: Optional[PartialRecipe]) -> bool:
    """An extractor wins once it found any ingredients or any steps."""
    return partial is not None and partial.has_content


def needs_refinement(partial: PartialRecipe) -> bool:
    """Structured data alone is trusted only with at least two ingredients and two steps."""
    return len(partial.ingredients) < MIN_COMPLETE_ITEMS or len(partial.steps) < MIN_COMPLETE_ITEMS


def _run(strategy: Extractor, doc: RawDocument) -> Optional[PartialRecipe]:
    # Strategy errors are logged and skipped
    try:
        return strategy(doc)
    except Exception as e:
        logger.warning(
            "Extractor %s failed: %s",
            getattr(strategy, "__name__", repr(strategy)),
            str(e),
            exc_info=True,
        )
        return None


def extract_from_html(
    html: str,
    source_url: str,
    strategies: Sequence[Extractor] = DEFAULT_STRATEGIES,
) -> ExtractionResult:
    """
    Build the best partial recipe the page supports.

    The winning extractor is laid over the Open Graph record, so page-level
    title/image/description fill whatever the winner lacks. When nothing wins
    the Open Graph record is returned with a ``content-partial`` warning.

    Raises:
        ValidationError: If ``html`` is not a string or ``source_url`` is empty
    """
    if not isinstance(html, str):
        raise ValidationError("HTML must be a string")
    if not source_url or not isinstance(source_url, str):
        raise ValidationError("Source URL must be a non-empty string")

    doc = RawDocument(html=html, url=source_url.strip())
    base = extract_open_graph(doc)

    partial: Optional[PartialRecipe] = None
    for strategy in strategies:
        result = _run(strategy, doc)
        if is_sufficient(result):
            partial = base.overlay(result)
            break

    if partial is None:
        logger.info("No extractor found recipe content", extra={"url": doc.url})
        partial = base.model_copy(update={"warning": CONTENT_PARTIAL})
        refine = True
    else:
        refine = needs_refinement(partial)

    partial = partial.model_copy(update={"imageUrl": resolve_image_url(partial.imageUrl, doc.url)})

    logger.info(
        "Extraction finished",
        extra={
            "url": doc.url,
            "parse_source": partial.parseSource.value,
            "ingredients": len(partial.ingredients),
            "steps": len(partial.steps),
            "needs_refinement": refine,
        },
    )
    return ExtractionResult(partial=partial, needs_refinement=refine)
