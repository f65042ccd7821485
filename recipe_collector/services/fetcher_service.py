"""HTML fetcher for recipe pages."""

from __future__ import annotations

import logging
import random
from typing import Dict, Optional

import httpx

from recipe_collector.config import settings
from recipe_collector.utils.exceptions import ScrapingError
from recipe_collector.utils.validators import validate_url

logger = logging.getLogger(__name__)

ACCEPT_LANGUAGES = (
    "zh-CN,zh;q=0.9,en;q=0.8",
    "en-US,en;q=0.9,zh-CN;q=0.8",
    "ja,en-US;q=0.9,en;q=0.8",
)


def build_headers() -> Dict[str, str]:
    """Browser-like request headers; many recipe sites refuse bare clients."""
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": random.choice(ACCEPT_LANGUAGES),
        "Cache-Control": "no-cache",
    }


async def fetch_html(url: str, *, client: Optional[httpx.AsyncClient] = None) -> str:
    """
    Fetch the raw HTML of ``url``.

    Args:
        url: Page URL; validated against internal targets first
        client: Optional shared client (a fresh one is created otherwise)

    Raises:
        ValidationError: If the URL is rejected
        ScrapingError: On network errors or non-2xx responses
    """
    url = validate_url(url)
    logger.info("Fetching page", extra={"url": url})

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.http_timeout, follow_redirects=True)

    try:
        response = await client.get(url, headers=build_headers())
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning("Page returned HTTP %d", e.response.status_code, extra={"url": url})
        raise ScrapingError(f"Failed to fetch page: HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        logger.warning("Page fetch failed: %s", str(e), extra={"url": url})
        raise ScrapingError(f"Failed to fetch page: {str(e)}") from e
    finally:
        if owns_client:
            await client.aclose()

    logger.debug("Fetched page", extra={"url": url, "bytes": len(response.content)})
    return response.text
