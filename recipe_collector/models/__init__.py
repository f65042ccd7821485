"""Pydantic models."""

from recipe_collector.models.condense import CondenseRequest, CondenseResponse
from recipe_collector.models.recipe import (
    CollectedRecipe,
    EnrichedRecipe,
    EnrichRequest,
    ExtractionResult,
    ParseSource,
    PartialRecipe,
    RawDocument,
)

__all__ = [
    "CollectedRecipe",
    "CondenseRequest",
    "CondenseResponse",
    "EnrichedRecipe",
    "EnrichRequest",
    "ExtractionResult",
    "ParseSource",
    "PartialRecipe",
    "RawDocument",
]
