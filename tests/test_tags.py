"""Tests for tag derivation and cleanup."""

import itertools

from recipe_collector.utils.tags import (
    auto_tag,
    clean_tags,
    derive_flavor_tags,
    derive_macro_tags,
    merge_tags,
    normalize_tags,
    parse_tags,
)


def test_macro_tags_for_tomato_egg_noodles():
    """Test macro tags for tomato, egg and noodles."""
    assert set(derive_macro_tags(["番茄", "鸡蛋", "面条"])) == {"vitamin", "protein", "starch"}


def test_macro_tags_are_order_independent():
    """Test macro tags ignore ingredient order."""
    ingredients = ["土豆", "牛肉", "洋葱", "龙虾"]
    expected = set(derive_macro_tags(ingredients))
    for perm in itertools.permutations(ingredients):
        assert set(derive_macro_tags(list(perm))) == expected


def test_macro_tags_unknown_ingredients():
    """Test unknown ingredients give no macro tags."""
    assert derive_macro_tags(["盐", "炒锅"]) == []


def test_flavor_tags_from_text():
    """Test flavor tags from text."""
    assert derive_flavor_tags("加入白醋和辣椒", 3) == ["sour", "spicy", "quick-dish"]


def test_flavor_tags_case_insensitive():
    """Test flavor hints ignore case."""
    assert "sour" in derive_flavor_tags("Squeeze some LEMON juice", 0)
    assert "salty" in derive_flavor_tags("Season with SALT", 0)


def test_quick_dish_threshold():
    """Test the quick-dish step threshold."""
    assert "quick-dish" in derive_flavor_tags("", 5)
    assert "quick-dish" not in derive_flavor_tags("", 6)
    assert "quick-dish" not in derive_flavor_tags("", 0)


def test_normalize_tags_maps_aliases():
    """Test tag aliases are mapped."""
    assert normalize_tags([" 辣 ", "蛋白质", "custom", ""]) == ["spicy", "protein", "custom"]


def test_clean_tags_dedupes_and_sorts():
    """Test tags are deduplicated and sorted."""
    assert clean_tags(["vitamin", " 辣 ", "spicy", "蛋白质"]) == ["protein", "spicy", "vitamin"]


def test_merge_tags_keeps_first_occurrence():
    """Test merging keeps the first occurrence."""
    assert merge_tags(["a", "b"], ["b", "c"], None) == ["a", "b", "c"]


def test_parse_tags_list_and_legacy_string():
    """Test tags from a list or a JSON string."""
    assert parse_tags(["快手菜", " 辣 "]) == ["快手菜", "辣"]
    assert parse_tags('["快手菜", "辣"]') == ["快手菜", "辣"]


def test_parse_tags_unreadable_values():
    """Test unreadable tag values give an empty list."""
    assert parse_tags(None) == []
    assert parse_tags("") == []
    assert parse_tags("not json") == []
    assert parse_tags('{"a": 1}') == []


def test_auto_tag_cookware_and_macro():
    """Test cookware and macro auto tags."""
    tags = auto_tag("清蒸鲈鱼", ["鲈鱼", "姜"], ["鲈鱼处理干净", "上锅蒸8分钟"])
    assert "steamer" in tags
    assert "protein" in tags
    assert "quick-dish" in tags
    assert "vegetarian" not in tags


def test_auto_tag_cold_dish():
    """Test the cold-dish auto tag."""
    tags = auto_tag("凉拌黄瓜", ["黄瓜", "蒜", "醋"], ["拍黄瓜", "加醋拌匀"])
    assert {"cold-dish", "vitamin", "sour"} <= set(tags)


def test_auto_tag_vegetarian_excluded_by_meat():
    """Test meat excludes the vegetarian tag."""
    assert "vegetarian" in auto_tag("素炒时蔬", ["青菜"], ["热锅下油翻炒"])
    assert "vegetarian" not in auto_tag("素鸡炖肉", ["素鸡", "五花肉"], ["炖煮"])
