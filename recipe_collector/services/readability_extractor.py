"""
Heuristic extractor for pages without recipe markup.

readability-lxml isolates the article body; the body is then scanned for
headings (or bold lines) that announce an ingredient or step section, and the
blocks following each heading are read until the next heading.
"""

from __future__ import annotations

import logging
import re
from typing import Iterator, List, Optional

from bs4 import BeautifulSoup, Tag
from markdownify import markdownify
from readability import Document

from recipe_collector.data.lexicons import DEFAULT_HEADING_LEXICON, HeadingLexicon
from recipe_collector.models.recipe import ParseSource, PartialRecipe, RawDocument

logger = logging.getLogger(__name__)

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
BOLD_TAGS = ("strong", "b")

INGREDIENT_MIN_LENGTH = 2
INGREDIENT_MAX_LENGTH = 100
STEP_MIN_LENGTH = 5
STEP_MAX_LENGTH = 300
DESCRIPTION_LENGTH = 200

_WHITESPACE = re.compile(r"\s+")


def _is_bold_line(el: Tag) -> bool:
    """A block whose whole text is one bold run, used as a makeshift heading."""
    if el.name not in ("p", "div"):
        return False
    bold = el.find(list(BOLD_TAGS))
    return bold is not None and bold.get_text(strip=True) == el.get_text(strip=True)


def _section_blocks(heading: Tag) -> Iterator[Tag]:
    """Blocks after ``heading`` up to the next heading."""
    anchor = heading
    if heading.name in BOLD_TAGS and heading.parent is not None and _is_bold_line(heading.parent):
        anchor = heading.parent

    for sibling in anchor.find_next_siblings():
        if sibling.name in HEADING_TAGS or _is_bold_line(sibling):
            break
        yield sibling


def _lines(el: Tag) -> List[str]:
    return [line.strip() for line in el.get_text("\n").split("\n") if line.strip()]


def _collect_ingredients(heading: Tag) -> List[str]:
    found: List[str] = []
    for block in _section_blocks(heading):
        items = [block] if block.name == "li" else block.find_all("li")
        texts = [li.get_text(" ", strip=True) for li in items] if items else _lines(block)
        found.extend(t for t in texts if INGREDIENT_MIN_LENGTH < len(t) < INGREDIENT_MAX_LENGTH)
    return found


def _collect_steps(heading: Tag, lexicon: HeadingLexicon) -> List[str]:
    found: List[str] = []
    for block in _section_blocks(heading):
        if block.name == "ol" or block.find("ol"):
            for li in block.find_all("li"):
                text = li.get_text(" ", strip=True)
                if STEP_MIN_LENGTH < len(text) < STEP_MAX_LENGTH:
                    found.append(text)
            continue

        for match in lexicon.numbered_step.finditer(block.get_text("\n")):
            text = lexicon.step_numbering.sub("", match.group(0)).strip()
            if len(text) > STEP_MIN_LENGTH:
                found.append(text)
    return found


def scan_sections(root: Tag, lexicon: HeadingLexicon = DEFAULT_HEADING_LEXICON):
    """
    Return ``(ingredients, steps)`` found under section headings in ``root``.

    Every matching section contributes, so split blocks such as 主料 and 辅料
    are read in page order.
    """
    ingredients: List[str] = []
    steps: List[str] = []
    for heading in root.find_all([*HEADING_TAGS, *BOLD_TAGS]):
        # <h2><strong>材料</strong></h2> is one heading
        if heading.name in BOLD_TAGS and heading.find_parent(list(HEADING_TAGS)) is not None:
            continue
        text = heading.get_text(" ", strip=True)
        if not text:
            continue
        if lexicon.is_ingredient_heading(text):
            ingredients.extend(_collect_ingredients(heading))
        elif lexicon.is_step_heading(text):
            steps.extend(_collect_steps(heading, lexicon))
    return ingredients, steps


def _summary_description(summary_html: str) -> Optional[str]:
    text = _WHITESPACE.sub(" ", BeautifulSoup(summary_html, "html.parser").get_text(" ")).strip()
    return text[:DESCRIPTION_LENGTH] or None


def extract_readability(
    doc: RawDocument,
    lexicon: HeadingLexicon = DEFAULT_HEADING_LEXICON,
) -> Optional[PartialRecipe]:
    """
    Recipe sections read from the main article.

    Returns None only when the page cannot be parsed at all; a page without
    recognizable sections still yields its title.
    """
    try:
        article = Document(doc.html)
        summary_html = article.summary(html_partial=True)
        title = (article.short_title() or "").strip()
    except Exception as e:
        logger.warning("Readability could not parse document: %s", str(e), extra={"url": doc.url})
        return None

    ingredients, steps = scan_sections(BeautifulSoup(summary_html, "html.parser"), lexicon)
    # readability drops short lists it scores as boilerplate
    page_ingredients, page_steps = scan_sections(doc.soup.body or doc.soup, lexicon)
    if len(page_ingredients) > len(ingredients):
        ingredients = page_ingredients
    if len(page_steps) > len(steps):
        steps = page_steps

    logger.debug(
        "Readability scan finished",
        extra={"ingredients": len(ingredients), "steps": len(steps)},
    )
    return PartialRecipe(
        title=title,
        description=_summary_description(summary_html),
        ingredients=ingredients,
        steps=steps,
        parseSource=ParseSource.READABILITY,
    )


def article_text(html: str) -> str:
    """Main article content as markdown, or the page's visible text when readability fails."""
    try:
        summary_html = Document(html).summary(html_partial=True)
        return markdownify(summary_html).strip()
    except Exception as e:
        logger.debug("Falling back to full-page text: %s", str(e))
        return BeautifulSoup(html or "", "html.parser").get_text("\n", strip=True)
