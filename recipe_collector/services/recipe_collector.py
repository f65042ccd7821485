"""Recipe collection: page or text in, enriched recipe record out."""

from __future__ import annotations

import logging
from typing import Iterable, Optional
from urllib.parse import urlparse

import httpx

from recipe_collector.config import settings
from recipe_collector.core.request_id import request_scope
from recipe_collector.models.recipe import (
    CONTENT_PARTIAL,
    CollectedRecipe,
    EnrichRequest,
    PartialRecipe,
)
from recipe_collector.services.enrichment import enrich
from recipe_collector.services.extraction_cascade import extract_from_html
from recipe_collector.services.fetcher_service import fetch_html
from recipe_collector.services.gemini_service import GeminiService, get_gemini_service
from recipe_collector.services.readability_extractor import article_text
from recipe_collector.services.refinement import refine_with_model
from recipe_collector.services.structured_extractors import NO_TITLE, TITLE_MAX_LENGTH
from recipe_collector.utils.tags import auto_tag, merge_tags

logger = logging.getLogger(__name__)


def get_domain(url: str) -> Optional[str]:
    """Hostname without a leading ``www.``."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        return None
    if not host:
        return None
    return host[4:] if host.startswith("www.") else host


class RecipeCollector:
    """Runs extraction, optional refinement and enrichment for one recipe at a time."""

    def __init__(
        self,
        gemini: Optional[GeminiService] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.gemini = gemini or get_gemini_service()
        self.http_client = http_client

    async def collect_from_url(self, url: str) -> CollectedRecipe:
        """Fetch ``url`` and collect the recipe on it."""
        with request_scope():
            html = await fetch_html(url, client=self.http_client)
            return await self.collect_from_html(html, url)

    async def collect_from_html(self, html: str, url: str) -> CollectedRecipe:
        """
        Collect a recipe from an already fetched page.

        Strategy:
          1) Extraction cascade (JSON-LD -> microdata -> readability -> Open Graph)
          2) Model refinement over the article text when the result is incomplete
          3) Enrichment into canonical ingredients, seasonings, tools and tags
        """
        with request_scope():
            result = extract_from_html(html, url)
            partial = result.partial

            if result.needs_refinement:
                refined = await refine_with_model(article_text(html), partial, gemini=self.gemini)
                if refined is not None:
                    partial = refined

            return await self._finish(partial, source_url=url)

    async def collect_from_text(
        self,
        text: str,
        *,
        title: Optional[str] = None,
        user_tags: Optional[Iterable[str]] = None,
    ) -> CollectedRecipe:
        """
        Collect a recipe from free text, such as OCR output of a recipe photo.

        The model structures the text into ingredients and steps; without a
        model the text is kept as the description and the record is marked
        partial.
        """
        with request_scope():
            text = (text or "").strip()
            first_line = text.splitlines()[0].strip() if text else ""
            base = PartialRecipe(
                title=(title or first_line)[:TITLE_MAX_LENGTH] or NO_TITLE,
                description=text or None,
            )

            refined = await refine_with_model(text, base, gemini=self.gemini) if text else None
            if refined is None:
                partial = base.model_copy(update={"warning": CONTENT_PARTIAL})
            else:
                partial = refined

            tags = merge_tags(
                partial.tags,
                auto_tag(partial.title, partial.ingredients, partial.steps),
                list(user_tags or []),
            )
            partial = partial.model_copy(update={"tags": tags})
            return await self._finish(partial, source_url=None, fallback_text=text)

    async def _finish(
        self,
        partial: PartialRecipe,
        *,
        source_url: Optional[str],
        fallback_text: Optional[str] = None,
    ) -> CollectedRecipe:
        enrich_text = fallback_text if fallback_text is not None else partial.description
        enriched = await enrich(
            EnrichRequest(
                title=partial.title,
                rawIngredients=partial.ingredients,
                rawSteps=partial.steps,
                fallbackText=(enrich_text or "")[: settings.refine_text_limit] or None,
                userTags=partial.tags,
            ),
            gemini=self.gemini,
        )

        recipe = CollectedRecipe(
            title=partial.title or NO_TITLE,
            imageUrl=partial.imageUrl,
            sourceUrl=source_url,
            domain=get_domain(source_url) if source_url else None,
            description=partial.description,
            steps=partial.steps,
            ingredients=enriched.ingredients,
            seasonings=enriched.seasonings,
            tools=enriched.tools,
            tags=enriched.tags,
            parseSource=partial.parseSource,
            warning=partial.warning,
        )
        logger.info(
            "Recipe collected",
            extra={
                "title": recipe.title,
                "parse_source": recipe.parseSource.value,
                "ingredients": len(recipe.ingredients),
                "seasonings": len(recipe.seasonings),
                "tools": len(recipe.tools),
                "tags": len(recipe.tags),
                "warning": recipe.warning,
            },
        )
        return recipe
