"""Tests for the extraction cascade."""

import json

import pytest

from recipe_collector.models.recipe import ParseSource
from recipe_collector.services.extraction_cascade import extract_from_html, is_sufficient, needs_refinement
from recipe_collector.services.structured_extractors import extract_json_ld
from recipe_collector.utils.exceptions import ValidationError

URL = "https://example.com/r/1"


def _ld(recipe):
    return f'<script type="application/ld+json">{json.dumps(recipe, ensure_ascii=False)}</script>'


def test_json_ld_wins(json_ld_html):
    """Test that JSON-LD wins over the other extractors."""
    result = extract_from_html(json_ld_html, URL)
    partial = result.partial
    assert partial.parseSource == ParseSource.JSONLD
    assert partial.ingredients == ["番茄", "鸡蛋", "面条"]
    assert partial.steps == ["炒鸡蛋", "煮面条"]
    assert partial.title == "番茄鸡蛋面"
    assert partial.description == "家常快手面"
    assert partial.imageUrl == "https://example.com/img/a.jpg"
    assert partial.warning is None
    assert result.needs_refinement is False


def test_open_graph_only_page(og_only_html):
    """Test a page with only Open Graph tags falls back with a warning."""
    result = extract_from_html(og_only_html, URL)
    partial = result.partial
    assert partial.parseSource == ParseSource.FALLBACK
    assert result.needs_refinement is True
    assert partial.ingredients == []
    assert partial.title == "红烧肉"
    assert partial.warning == "content-partial"
    assert partial.imageUrl == "https://cdn.example.com/hsr.jpg"


def test_incomplete_structured_data_needs_refinement():
    """Test structured data with one step is flagged for refinement."""
    html = "<html><head>" + _ld({
        "@type": "Recipe",
        "name": "白灼虾",
        "recipeIngredient": ["虾", "姜", "葱"],
        "recipeInstructions": ["虾下锅煮熟"],
    }) + "</head><body></body></html>"
    result = extract_from_html(html, URL)
    assert result.partial.parseSource == ParseSource.JSONLD
    assert result.partial.warning is None
    assert result.needs_refinement is True


def test_empty_json_ld_falls_through_to_microdata():
    """Test a recipe-typed JSON-LD block without content falls through to microdata."""
    html = "<html><head>" + _ld({"@type": "Recipe", "name": "空"}) + """</head><body>
<div itemscope itemtype="http://schema.org/Recipe">
  <span itemprop="name">拍黄瓜</span>
  <span itemprop="recipeIngredient">黄瓜</span>
  <span itemprop="recipeIngredient">蒜</span>
  <p itemprop="recipeInstructions">黄瓜拍碎</p>
  <p itemprop="recipeInstructions">加调料拌匀</p>
</div></body></html>"""
    result = extract_from_html(html, URL)
    assert result.partial.parseSource == ParseSource.MICRODATA
    assert result.partial.title == "拍黄瓜"
    assert result.needs_refinement is False


def test_readability_result_overlays_open_graph(article_html):
    """Test the readability result is laid over the Open Graph record."""
    result = extract_from_html(article_html, URL)
    assert result.partial.parseSource == ParseSource.READABILITY
    assert len(result.partial.ingredients) == 3
    assert result.partial.title == "可乐鸡翅"


def test_readability_page_without_meta_description_gets_one(article_html):
    """Test a page without a meta description still gets a description."""
    result = extract_from_html(article_html, URL)
    assert result.partial.parseSource == ParseSource.READABILITY
    assert result.partial.description
    assert "受欢迎" in result.partial.description


def test_failing_strategy_does_not_break_cascade(json_ld_html):
    """Test a raising extractor is skipped."""
    def broken(doc):
        raise RuntimeError("boom")

    result = extract_from_html(json_ld_html, URL, strategies=(broken, extract_json_ld))
    assert result.partial.parseSource == ParseSource.JSONLD


def test_no_strategies_gives_fallback(json_ld_html):
    """Test an empty strategy list yields the fallback record."""
    result = extract_from_html(json_ld_html, URL, strategies=())
    assert result.partial.parseSource == ParseSource.FALLBACK
    assert result.partial.title == "番茄鸡蛋面的做法"
    assert result.needs_refinement is True


def test_invalid_input():
    """Test non-string HTML and an empty URL are rejected."""
    with pytest.raises(ValidationError):
        extract_from_html(None, URL)
    with pytest.raises(ValidationError):
        extract_from_html("<html></html>", "")


def test_sufficiency_and_refinement_predicates(json_ld_html):
    """Test the sufficiency and refinement checks."""
    result = extract_from_html(json_ld_html, URL)
    assert is_sufficient(result.partial)
    assert not is_sufficient(None)
    assert not needs_refinement(result.partial)
    assert needs_refinement(result.partial.model_copy(update={"steps": ["只有一步"]}))
