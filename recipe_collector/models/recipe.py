"""Recipe Pydantic models shared by the extraction and enrichment stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Optional, Union

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field, field_validator

from recipe_collector.utils.tags import parse_tags


class ParseSource(str, Enum):
    """Provenance of a recipe record, ordered by extractor reliability."""

    JSONLD = "jsonld"
    MICRODATA = "microdata"
    READABILITY = "readability"
    AI_REFINE = "ai-refine"
    FALLBACK = "fallback"

    @property
    def rank(self) -> int:
        return _PARSE_SOURCE_RANKS[self]

    @classmethod
    def strongest(cls, *sources: "ParseSource") -> "ParseSource":
        """Return the most reliable of the given sources (promote, never downgrade)."""
        return max(sources, key=lambda s: s.rank)


_PARSE_SOURCE_RANKS = {
    ParseSource.JSONLD: 5,
    ParseSource.MICRODATA: 4,
    ParseSource.READABILITY: 3,
    ParseSource.AI_REFINE: 2,
    ParseSource.FALLBACK: 1,
}

CONTENT_PARTIAL = "content-partial"
AI_REFINED_TAG = "ai_refined"


def _clean_lines(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _dedupe(items: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


@dataclass
class RawDocument:
    """Fetched HTML plus its URL. The parsed tree is built once and shared by all extractors."""

    html: str
    url: str
    _soup: Optional[BeautifulSoup] = field(default=None, init=False, repr=False)

    @property
    def soup(self) -> BeautifulSoup:
        if self._soup is None:
            self._soup = BeautifulSoup(self.html, "html.parser")
        return self._soup


class PartialRecipe(BaseModel):
    """In-progress recipe passed between extraction stages."""

    title: str = Field("", description="Recipe title (possibly empty)")
    imageUrl: Optional[str] = Field(None, description="Image URL, possibly relative until resolved")
    description: Optional[str] = Field(None, description="Short description")
    ingredients: List[str] = Field(default_factory=list, description="Raw ingredient lines")
    steps: List[str] = Field(default_factory=list, description="Raw steps, in procedure order")
    tags: List[str] = Field(default_factory=list, description="Raw free-text tags")
    parseSource: ParseSource = Field(ParseSource.FALLBACK, description="Strongest contributing extractor")
    warning: Optional[str] = Field(None, description="Set when extraction is known to be partial")

    @field_validator("title", mode="before")
    @classmethod
    def _title_str(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("ingredients", "steps", mode="before")
    @classmethod
    def _lines(cls, v: Any) -> List[str]:
        return _clean_lines(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, v: Any) -> List[str]:
        return _dedupe(_clean_lines(v))

    @property
    def has_content(self) -> bool:
        return bool(self.ingredients or self.steps)

    def overlay(self, winner: "PartialRecipe") -> "PartialRecipe":
        """
        Lay ``winner`` over this record: every non-empty field of the winner
        replaces ours, and our values fill whatever the winner left empty.
        """
        merged = self.model_dump()
        for name, value in winner.model_dump().items():
            if value not in (None, "", []):
                merged[name] = value
        merged["parseSource"] = winner.parseSource
        return PartialRecipe(**merged)

    def with_tag(self, tag: str) -> "PartialRecipe":
        if tag in self.tags:
            return self
        return self.model_copy(update={"tags": [*self.tags, tag]})


@dataclass
class ExtractionResult:
    """Outcome of the extraction cascade."""

    partial: PartialRecipe
    needs_refinement: bool


class EnrichRequest(BaseModel):
    """Input to the enrichment orchestrator. Every field is optional."""

    model_config = ConfigDict(extra="forbid")

    title: Optional[str] = None
    rawIngredients: Optional[Union[List[str], str]] = None
    rawSteps: Optional[Union[List[str], str]] = None
    fallbackText: Optional[str] = None
    userTags: List[str] = Field(default_factory=list)

    @field_validator("userTags", mode="before")
    @classmethod
    def _user_tags(cls, v: Any) -> Any:
        # Older records stored tags as a JSON string
        if v is None or isinstance(v, str):
            return parse_tags(v)
        return v


class EnrichedRecipe(BaseModel):
    """Final canonical quadruple handed to persistence."""

    ingredients: List[str] = Field(default_factory=list)
    seasonings: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list, description="Deduplicated and alphabetically sorted")


class CollectedRecipe(BaseModel):
    """A fully processed recipe, ready for the persistence layer."""

    title: str
    imageUrl: Optional[str] = None
    sourceUrl: Optional[str] = None
    domain: Optional[str] = None
    description: Optional[str] = None
    steps: List[str] = Field(default_factory=list)
    ingredients: List[str] = Field(default_factory=list)
    seasonings: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    parseSource: ParseSource
    warning: Optional[str] = None

    @property
    def message(self) -> str:
        """User-facing summary of how the recipe was collected."""
        if self.warning:
            return "Recipe saved, but some content is missing. Please edit it to fill the gaps."
        if self.parseSource == ParseSource.AI_REFINE:
            return "Recipe saved. Content was completed automatically."
        return "Recipe saved."
