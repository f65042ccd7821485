"""List normalization against a canonical vocabulary."""

import re
from typing import Iterable, List, Optional, Union

from recipe_collector.data.lexicons import Vocabulary

_DELIMITERS = re.compile(r"[，,;；\n]+")


def split_items(raw: Optional[Union[Iterable[str], str]]) -> List[str]:
    """Split a delimited string (or flatten a list) into trimmed, non-empty tokens."""
    if raw is None:
        return []
    if isinstance(raw, str):
        parts = _DELIMITERS.split(raw)
    else:
        parts = [str(item) for item in raw if item is not None]
    return [p.strip() for p in parts if p and p.strip()]


def normalize_list(raw: Optional[Union[Iterable[str], str]], vocabulary: Vocabulary) -> List[str]:
    """
    Map raw tokens onto canonical terms.

    Accepts a list, a delimited string (Chinese/ASCII commas, semicolons,
    newlines) or None. Tokens missing from the vocabulary pass through trimmed.
    The result is deduplicated in first-seen order, so normalizing an already
    normalized list returns it unchanged.
    """
    seen = set()
    out: List[str] = []
    for token in split_items(raw):
        term = vocabulary.lookup(token) or token
        if term not in seen:
            seen.add(term)
            out.append(term)
    return out
