"""
Extractors for machine-readable recipe markup.

Each extractor takes a ``RawDocument`` and returns a ``PartialRecipe`` or
None when its markup is absent. Open Graph is the exception: it always
returns a record and serves as the base layer the cascade builds on.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterator, List, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from recipe_collector.models.recipe import ParseSource, PartialRecipe, RawDocument

logger = logging.getLogger(__name__)

NO_TITLE = "no title"
TITLE_MAX_LENGTH = 200
DESCRIPTION_MAX_LENGTH = 500

_KEYWORD_SPLIT = re.compile(r"[,，]")


# =========================================================
# Utils
# =========================================================
def resolve_image_url(image_url: Optional[str], base_url: str) -> Optional[str]:
    """
    Make an image URL absolute.

    ``http(s)://`` URLs are kept, protocol-relative ``//host/x`` gets https,
    anything else is joined onto ``base_url``. A URL that cannot be joined is
    returned unchanged.
    """
    if not image_url:
        return image_url
    image_url = image_url.strip()
    if image_url.startswith(("http://", "https://")):
        return image_url
    if image_url.startswith("//"):
        return f"https:{image_url}"
    try:
        base = urlparse(base_url or "")
        if not base.scheme or not base.netloc:
            return image_url
        return urljoin(base_url, image_url)
    except ValueError:
        logger.debug("Leaving unresolvable image URL as is", extra={"image_url": image_url})
        return image_url


def _truncate(text: Optional[str], limit: int) -> Optional[str]:
    if text is None:
        return None
    text = " ".join(text.split())
    return text[:limit] if text else None


def _meta_content(soup: BeautifulSoup, *, prop: str = "", name: str = "") -> Optional[str]:
    tag = soup.find("meta", attrs={"property": prop}) if prop else None
    if tag is None and name:
        tag = soup.find("meta", attrs={"name": name})
    if tag is None:
        return None
    content = (tag.get("content") or "").strip()
    return content or None


# =========================================================
# JSON-LD
# =========================================================
def _is_recipe_type(node: Any) -> bool:
    if not isinstance(node, dict):
        return False
    node_type = node.get("@type", "")
    if isinstance(node_type, list):
        return "Recipe" in node_type
    return node_type == "Recipe"


def _candidate_nodes(data: Any) -> Iterator[Dict[str, Any]]:
    """Yield objects at the top level, inside a top-level array, or inside @graph."""
    items = data if isinstance(data, list) else [data]
    for item in items:
        if not isinstance(item, dict):
            continue
        yield item
        graph = item.get("@graph")
        if isinstance(graph, list):
            for node in graph:
                if isinstance(node, dict):
                    yield node


def _instruction_text(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return str(item.get("text") or item.get("name") or item)
    return str(item)


def _normalize_instructions(raw: Any) -> List[str]:
    """Flatten recipeInstructions into step strings; HowToSection yields its own steps."""
    if isinstance(raw, str):
        return [s.strip() for s in raw.split("\n") if s.strip()]
    if isinstance(raw, dict):
        raw = [raw]
    if not isinstance(raw, list):
        return []

    steps: List[str] = []
    for item in raw:
        if isinstance(item, dict) and item.get("@type") == "HowToSection":
            section = item.get("itemListElement") or []
            if isinstance(section, dict):
                section = [section]
            steps.extend(_instruction_text(sub) for sub in section)
        else:
            steps.append(_instruction_text(item))
    return [s.strip() for s in steps if s and s.strip()]


def _json_ld_image(image: Any) -> Optional[str]:
    if isinstance(image, list):
        image = image[0] if image else None
    if isinstance(image, dict):
        image = image.get("url")
    return image if isinstance(image, str) and image.strip() else None


def _json_ld_tags(recipe: Dict[str, Any]) -> List[str]:
    keywords = recipe.get("keywords")
    if isinstance(keywords, str):
        tags = _KEYWORD_SPLIT.split(keywords)
    elif isinstance(keywords, list):
        tags = [k for k in keywords if isinstance(k, str)]
    else:
        tags = []

    cuisine = recipe.get("recipeCuisine")
    if isinstance(cuisine, str):
        tags.append(cuisine)
    elif isinstance(cuisine, list):
        tags.extend(c for c in cuisine if isinstance(c, str))
    return tags


def _find_json_ld_recipe(soup: BeautifulSoup) -> Optional[Dict[str, Any]]:
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = script.string or script.get_text() or ""
        if not raw.strip():
            continue
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed JSON-LD block")
            continue
        for node in _candidate_nodes(data):
            if _is_recipe_type(node):
                return node
    return None


def extract_json_ld(doc: RawDocument) -> Optional[PartialRecipe]:
    """Recipe from the first well-formed schema.org Recipe JSON-LD block."""
    recipe = _find_json_ld_recipe(doc.soup)
    if recipe is None:
        return None

    ingredients = recipe.get("recipeIngredient") or []
    if isinstance(ingredients, str):
        ingredients = [ingredients]

    description = recipe.get("description")
    return PartialRecipe(
        title=recipe.get("name") if isinstance(recipe.get("name"), str) else "",
        imageUrl=_json_ld_image(recipe.get("image")),
        description=description if isinstance(description, str) and description.strip() else None,
        ingredients=[i for i in ingredients if isinstance(i, str)],
        steps=_normalize_instructions(recipe.get("recipeInstructions")),
        tags=_json_ld_tags(recipe),
        parseSource=ParseSource.JSONLD,
    )


# =========================================================
# Microdata
# =========================================================
def _own_props(root: Tag, *names: str) -> List[Tag]:
    """itemprop elements belonging to ``root`` itself, not to a nested itemscope."""
    found = []
    for el in root.find_all(attrs={"itemprop": True}):
        props = el.get("itemprop")
        props = props.split() if isinstance(props, str) else list(props or [])
        if not any(n in props for n in names):
            continue
        if el.find_parent(attrs={"itemscope": True}) is root:
            found.append(el)
    return found


def _prop_value(el: Tag) -> str:
    if el.name == "meta":
        return (el.get("content") or "").strip()
    if el.name in ("img", "source"):
        return (el.get("src") or el.get("content") or "").strip()
    if el.name in ("a", "link"):
        return (el.get("href") or el.get_text(" ", strip=True)).strip()
    return el.get_text(" ", strip=True)


def extract_microdata(doc: RawDocument) -> Optional[PartialRecipe]:
    """Recipe from the first ``itemscope`` element whose itemtype names Recipe."""
    root = doc.soup.select_one("[itemscope][itemtype*=\"Recipe\"]")
    if root is None:
        return None

    def first(*names: str) -> Optional[str]:
        for el in _own_props(root, *names):
            value = _prop_value(el)
            if value:
                return value
        return None

    return PartialRecipe(
        title=first("name") or "",
        imageUrl=first("image"),
        description=first("description"),
        ingredients=[_prop_value(el) for el in _own_props(root, "recipeIngredient", "ingredients")],
        steps=[_prop_value(el) for el in _own_props(root, "recipeInstructions")],
        parseSource=ParseSource.MICRODATA,
    )


# =========================================================
# Open Graph / document fallback
# =========================================================
def extract_open_graph(doc: RawDocument) -> PartialRecipe:
    """Title, image and description from meta tags and the document itself. Never fails."""
    soup = doc.soup

    title = _meta_content(soup, prop="og:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        h1 = soup.find("h1")
        title = h1.get_text(" ", strip=True) if h1 else ""
    title = _truncate(title, TITLE_MAX_LENGTH) or NO_TITLE

    image = _meta_content(soup, prop="og:image")
    if not image:
        img = soup.find("img", src=True)
        image = (img.get("src") or "").strip() if img else None
    image = resolve_image_url(image, doc.url) if image else None

    description = _meta_content(soup, prop="og:description", name="description")

    return PartialRecipe(
        title=title,
        imageUrl=image,
        description=_truncate(description, DESCRIPTION_MAX_LENGTH),
        parseSource=ParseSource.FALLBACK,
    )
