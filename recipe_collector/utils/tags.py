"""Tag derivation and cleanup."""

import json
import logging
from typing import Any, Iterable, List, Optional

from recipe_collector.data.lexicons import (
    AUTO_TAG_RULES,
    FLAVOR_HINTS,
    MACRO_CATEGORIES,
    TAG_ALIASES,
)

logger = logging.getLogger(__name__)


def derive_macro_tags(ingredients: Iterable[str]) -> List[str]:
    """Return every macro class (vitamin/protein/starch) touched by the ingredients."""
    present = {i.strip() for i in ingredients if i and i.strip()}
    return [name for name, members in MACRO_CATEGORIES.items() if present & members]


def derive_flavor_tags(text: str, steps_count: int) -> List[str]:
    """Flavor tags from free text, plus quick-dish for short procedures."""
    text = text or ""
    tags: List[str] = []
    if FLAVOR_HINTS.acid.search(text):
        tags.append("sour")
    if FLAVOR_HINTS.spicy.search(text):
        tags.append("spicy")
    if FLAVOR_HINTS.sweet.search(text):
        tags.append("sweet")
    if FLAVOR_HINTS.salty.search(text):
        tags.append("salty")
    if 0 < steps_count <= FLAVOR_HINTS.quick_steps_max:
        tags.append("quick-dish")
    return tags


def normalize_tags(tags: Iterable[str]) -> List[str]:
    """Map each tag through the alias table; unknown tags are kept as they are."""
    out: List[str] = []
    for tag in tags:
        if tag is None:
            continue
        tag = str(tag).strip()
        if not tag:
            continue
        out.append(TAG_ALIASES.get(tag, TAG_ALIASES.get(tag.lower(), tag)))
    return out


def merge_tags(*tag_lists: Optional[Iterable[str]]) -> List[str]:
    """Concatenate tag lists, keeping the first occurrence of each tag."""
    seen = set()
    merged: List[str] = []
    for tags in tag_lists:
        for tag in tags or []:
            if tag not in seen:
                seen.add(tag)
                merged.append(tag)
    return merged


def clean_tags(tags: Iterable[str]) -> List[str]:
    """Trim, canonicalize, dedupe and sort."""
    return sorted(set(normalize_tags(tags)))


def parse_tags(value: Any) -> List[str]:
    """
    Read tags stored either as a list or as a JSON-encoded list string.

    Anything unreadable yields an empty list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return []
        try:
            value = json.loads(value)
        except json.JSONDecodeError:
            logger.debug("Ignoring unreadable tag string", extra={"raw_tags": value[:100]})
            return []
    if not isinstance(value, list):
        return []
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def auto_tag(title: str, ingredients: Iterable[str], steps: Iterable[str]) -> List[str]:
    """
    Scenario, cookware, macro and flavor tags read straight off the recipe text.

    Looser than the derive_* helpers: macro classes match by substring, so a
    line like "500g 五花肉" still counts as protein.
    """
    ingredients = [i for i in ingredients if i]
    steps = [s for s in steps if s]
    text = " ".join([title or "", *ingredients, *steps])

    tags: List[str] = []
    for name, members in MACRO_CATEGORIES.items():
        if any(member in text for member in members):
            tags.append(name)
    tags.extend(derive_flavor_tags(text, len(steps)))
    for tag, pattern, exclude in AUTO_TAG_RULES:
        if pattern.search(text) and not (exclude and exclude.search(text)):
            tags.append(tag)
    return merge_tags(tags)
