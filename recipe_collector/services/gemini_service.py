"""
Gemini access shared by refinement, enrichment and condensing.

The SDK call is blocking, so it runs in a worker thread and is bounded by
``settings.model_timeout``. Every failure surfaces as one of two errors:

- ``ModelUnavailableError``: no credential, SDK error, timeout or empty reply
- ``ModelResponseError``: a reply that does not contain a JSON object
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Optional

from google import genai
from google.genai import types

from recipe_collector.config import settings
from recipe_collector.utils.exceptions import ModelUnavailableError
from recipe_collector.utils.gemini_utils import get_response_text, parse_model_json

logger = logging.getLogger(__name__)


class GeminiService:
    """Service for interacting with Gemini API."""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None) -> None:
        self.api_key = api_key if api_key is not None else settings.gemini_api_key
        self.model = model or settings.gemini_model
        self._client: Optional[genai.Client] = None

    @property
    def configured(self) -> bool:
        """Whether a credential is available; callers skip the model entirely when not."""
        return bool(self.api_key and self.api_key.strip())

    @property
    def client(self) -> genai.Client:
        """Get or create Gemini client (lazy initialization)."""
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def generate_text(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        json_mode: bool = False,
        temperature: Optional[float] = None,
    ) -> str:
        """
        Single Gemini call returning the reply text.

        Raises:
            ModelUnavailableError: If the model cannot be reached or returns nothing
        """
        if not self.configured:
            raise ModelUnavailableError("Gemini API key is not configured")

        config = types.GenerateContentConfig(
            temperature=settings.gemini_temperature if temperature is None else temperature,
            max_output_tokens=settings.gemini_max_tokens,
            system_instruction=system_instruction,
            response_mime_type="application/json" if json_mode else None,
        )

        def _sync_call() -> Any:
            return self.client.models.generate_content(
                model=self.model,
                contents=prompt,
                config=config,
            )

        try:
            resp = await asyncio.wait_for(asyncio.to_thread(_sync_call), timeout=settings.model_timeout)
        except asyncio.TimeoutError as e:
            logger.warning("Gemini call timed out after %.1fs", settings.model_timeout)
            raise ModelUnavailableError("Gemini call timed out") from e
        except Exception as e:
            logger.warning("Gemini call failed: %s", str(e), exc_info=True)
            raise ModelUnavailableError(f"Gemini call failed: {str(e)}") from e

        text = get_response_text(resp)
        if not text.strip():
            raise ModelUnavailableError("Gemini returned empty response")
        logger.debug("Gemini raw response:\n%s", text)
        return text.strip()

    async def call_model_for_json(
        self,
        prompt: str,
        *,
        system_instruction: Optional[str] = None,
        json_mode: bool = False,
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        Call the model and parse its reply as a JSON object.

        Raises:
            ModelUnavailableError: See ``generate_text``
            ModelResponseError: If the reply holds no JSON object
        """
        text = await self.generate_text(
            prompt,
            system_instruction=system_instruction,
            json_mode=json_mode,
            temperature=temperature,
        )
        return parse_model_json(text)


_gemini_service: Optional[GeminiService] = None


def get_gemini_service() -> GeminiService:
    """Process-wide service built from settings."""
    global _gemini_service
    if _gemini_service is None:
        _gemini_service = GeminiService()
    return _gemini_service
