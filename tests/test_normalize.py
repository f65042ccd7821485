"""Tests for the canonical vocabulary and list normalization."""

import pytest

from recipe_collector.data.lexicons import CANONICAL, Vocabulary
from recipe_collector.utils.normalize import normalize_list, split_items


def test_normalize_maps_synonyms_to_canonical_terms():
    """Test synonyms map to canonical terms."""
    result = normalize_list(["西红柿", "egg", "noodles"], CANONICAL.ingredients)
    assert result == ["番茄", "鸡蛋", "面条"]


def test_normalize_is_case_insensitive():
    """Test lookup ignores case."""
    result = normalize_list(["Tomato", "tomato", "TOMATO"], CANONICAL.ingredients)
    assert result == ["番茄"]


def test_normalize_is_idempotent():
    """Test normalizing twice changes nothing."""
    once = normalize_list(["Potato", "马铃薯", "Pork Belly", "龙虾"], CANONICAL.ingredients)
    assert normalize_list(once, CANONICAL.ingredients) == once


def test_normalize_accepts_delimited_string():
    """Test delimited strings are split."""
    result = normalize_list("西红柿，鸡蛋;面条\n  ；", CANONICAL.ingredients)
    assert result == ["番茄", "鸡蛋", "面条"]


def test_normalize_passes_unknown_tokens_through_trimmed():
    """Test unknown tokens are kept, trimmed."""
    assert normalize_list(["  龙虾 ", "", None], CANONICAL.ingredients) == ["龙虾"]


def test_normalize_none_is_empty():
    """Test None gives an empty list."""
    assert normalize_list(None, CANONICAL.tools) == []


def test_seasonings_are_not_ingredient_vocabulary():
    """Test seasonings are not canonicalized as ingredients."""
    assert CANONICAL.ingredients.lookup("盐") is None
    assert CANONICAL.seasonings.lookup("盐") == "盐"
    assert CANONICAL.seasonings.lookup("Soy Sauce") == "生抽"
    assert CANONICAL.tools.lookup("WOK") == "炒锅"


def test_vocabulary_first_key_wins_on_case_collision():
    """Test the first key wins when keys differ only by case."""
    vocab = Vocabulary("test", {"Foo": "a", "foo": "b"})
    assert vocab.lookup("FOO") == "a"
    assert vocab.lookup("b") == "b"


def test_vocabulary_is_read_only():
    """Test vocabularies cannot be modified."""
    with pytest.raises(TypeError):
        CANONICAL.ingredients["龙虾"] = "虾"


def test_split_items_flattens_lists():
    """Test list input is split and flattened."""
    assert split_items([" a ", None, "", "b"]) == ["a", "b"]
