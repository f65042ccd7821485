"""Pydantic models for the step-condensing call."""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field


class PhaseIngredient(BaseModel):
    """Ingredient inside a recipe phase."""

    name: str
    amount: Optional[str] = None


class PhaseStep(BaseModel):
    """Numbered step inside a recipe phase."""

    order: int
    text: str


class Phase(BaseModel):
    """A named section of a recipe (e.g. caramel, custard)."""

    name: str
    ingredients: List[PhaseIngredient] = Field(default_factory=list)
    steps: List[PhaseStep] = Field(default_factory=list)


class CondenseRequest(BaseModel):
    """Input for condensing a recipe's steps."""

    title: str = Field(..., min_length=1, description="Recipe title")
    rawText: Optional[str] = Field(None, description="Original recipe text, if available")
    phases: Optional[List[Phase]] = None
    locale: Literal["zh", "ja", "en"] = "zh"
    maxSteps: int = Field(12, ge=1, le=50)


class ConcisePhase(BaseModel):
    name: str
    steps: List[str]


class TimelineAction(BaseModel):
    phase: str
    step: int
    text: str


class TimelineEntry(BaseModel):
    at: str
    actions: List[TimelineAction]


class ConciseRecipe(BaseModel):
    title: str
    phases: List[ConcisePhase]
    checklist: List[str]
    timeline: List[TimelineEntry]
    warnings: List[str]
    notes: Optional[List[str]] = None


class DiffMeta(BaseModel):
    originalStepCount: int
    conciseStepCount: int
    mergeHints: List[str]
    lostInfo: Optional[List[str]] = None
    confidence: float = Field(..., ge=0, le=1)


class CondenseResponse(BaseModel):
    """Condensed recipe plus bookkeeping about what was merged."""

    concise: ConciseRecipe
    diffMeta: DiffMeta
    source: Literal["ai-condense"] = "ai-condense"
