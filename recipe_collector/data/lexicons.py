"""
Canonical lexicons.

Static tables loaded once at import time and never mutated:

- ``CANONICAL``: raw synonym -> canonical term, for ingredients, seasonings and tools
- ``MACRO_CATEGORIES``: canonical ingredients grouped by macro-nutrient class
- ``FLAVOR_HINTS``: flavor patterns and the quick-dish step threshold
- ``TAG_ALIASES`` / ``AUTO_TAG_RULES``: tag canonicalization and scenario rules
- ``DEFAULT_HEADING_LEXICON``: section-heading words used by the readability extractor
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterator, Mapping, Optional, Pattern, Tuple


class Vocabulary(Mapping):
    """
    Immutable synonym -> canonical mapping with case-insensitive lookup.

    The lowercase index is built once. When two keys differ only by case the
    first one listed wins. Every canonical term also maps to itself, so
    normalizing an already-canonical list is a no-op.
    """

    def __init__(self, name: str, synonyms: Mapping[str, str]):
        self.name = name
        table: Dict[str, str] = {}
        for raw, canonical in synonyms.items():
            table.setdefault(raw.strip(), canonical.strip())
        for canonical in list(table.values()):
            table.setdefault(canonical, canonical)
        self._table = MappingProxyType(table)

        index: Dict[str, str] = {}
        for raw, canonical in table.items():
            index.setdefault(raw.lower(), canonical)
        self._index = MappingProxyType(index)

    def __getitem__(self, key: str) -> str:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def lookup(self, token: str) -> Optional[str]:
        """Canonical term for ``token`` (trimmed, any case), or None."""
        return self._index.get(token.strip().lower())

    def __repr__(self) -> str:
        return f"Vocabulary({self.name!r}, {len(self)} terms)"


@dataclass(frozen=True)
class CanonicalVocabulary:
    ingredients: Vocabulary
    seasonings: Vocabulary
    tools: Vocabulary


@dataclass(frozen=True)
class HeadingLexicon:
    """
    Words that mark ingredient / step sections in free-form articles, and the
    pattern of a numbered step inside a loose paragraph.
    """

    ingredient_keywords: Tuple[str, ...]
    step_keywords: Tuple[str, ...]
    numbered_step: Pattern[str]
    step_numbering: Pattern[str]

    def is_ingredient_heading(self, text: str) -> bool:
        lowered = text.lower()
        return any(k in lowered for k in self.ingredient_keywords)

    def is_step_heading(self, text: str) -> bool:
        lowered = text.lower()
        return any(k in lowered for k in self.step_keywords)


# =========================================================
# Canonical vocabularies
# =========================================================
_INGREDIENT_SYNONYMS = {
    # vegetables
    "西红柿": "番茄", "洋柿子": "番茄", "tomato": "番茄", "tomatoes": "番茄",
    "马铃薯": "土豆", "洋芋": "土豆", "potato": "土豆", "potatoes": "土豆",
    "红萝卜": "胡萝卜", "carrot": "胡萝卜", "carrots": "胡萝卜",
    "大白菜": "白菜", "napa cabbage": "白菜",
    "包菜": "卷心菜", "圆白菜": "卷心菜", "甘蓝": "卷心菜", "cabbage": "卷心菜",
    "西蓝花": "西兰花", "绿花菜": "西兰花", "broccoli": "西兰花",
    "spinach": "菠菜",
    "青瓜": "黄瓜", "cucumber": "黄瓜",
    "eggplant": "茄子", "aubergine": "茄子",
    "柿子椒": "青椒", "green pepper": "青椒", "bell pepper": "青椒",
    "onion": "洋葱", "onions": "洋葱",
    "lettuce": "生菜",
    "celery": "芹菜",
    "chinese chives": "韭菜",
    "绿豆芽": "豆芽", "bean sprouts": "豆芽",
    "winter melon": "冬瓜",
    "luffa": "丝瓜",
    "口蘑": "蘑菇", "mushroom": "蘑菇", "mushrooms": "蘑菇",
    "shiitake": "香菇",
    "pumpkin": "南瓜",
    "玉米粒": "玉米", "corn": "玉米",
    # protein
    "鸡子": "鸡蛋", "egg": "鸡蛋", "eggs": "鸡蛋",
    "鸡胸": "鸡胸肉", "chicken breast": "鸡胸肉",
    "chicken": "鸡肉",
    "鸡翅膀": "鸡翅", "chicken wings": "鸡翅",
    "pork": "猪肉",
    "三层肉": "五花肉", "pork belly": "五花肉",
    "猪排骨": "排骨", "spare ribs": "排骨", "ribs": "排骨",
    "beef": "牛肉",
    "lamb": "羊肉", "mutton": "羊肉",
    "虾仁": "虾", "大虾": "虾", "shrimp": "虾", "prawns": "虾",
    "fish": "鱼",
    "salmon": "三文鱼",
    "tofu": "豆腐",
    "milk": "牛奶",
    "yogurt": "酸奶", "yoghurt": "酸奶",
    # starch
    "白米饭": "米饭", "rice": "米饭", "cooked rice": "米饭",
    "米": "大米",
    "挂面": "面条", "面": "面条", "noodles": "面条",
    "意大利面": "意面", "pasta": "意面", "spaghetti": "意面",
    "flour": "面粉", "all-purpose flour": "面粉",
    "steamed bun": "馒头",
    "bread": "面包",
    "地瓜": "红薯", "番薯": "红薯", "sweet potato": "红薯",
    "rice cake": "年糕",
    "vermicelli": "粉丝", "glass noodles": "粉丝",
    "oats": "燕麦",
}

_SEASONING_SYNONYMS = {
    "食盐": "盐", "精盐": "盐", "salt": "盐",
    "白糖": "糖", "白砂糖": "糖", "sugar": "糖",
    "rock sugar": "冰糖",
    "酱油": "生抽", "light soy sauce": "生抽", "soy sauce": "生抽",
    "dark soy sauce": "老抽",
    "米醋": "醋", "陈醋": "醋", "香醋": "醋", "vinegar": "醋",
    "黄酒": "料酒", "cooking wine": "料酒", "shaoxing wine": "料酒",
    "oyster sauce": "蚝油",
    "郫县豆瓣": "豆瓣酱", "doubanjiang": "豆瓣酱",
    "sichuan pepper": "花椒",
    "干辣椒": "辣椒", "小米辣": "辣椒", "chili": "辣椒", "chilli": "辣椒",
    "白胡椒粉": "胡椒粉", "黑胡椒": "胡椒粉", "pepper": "胡椒粉", "black pepper": "胡椒粉",
    "蒜": "大蒜", "蒜头": "大蒜", "蒜瓣": "大蒜", "garlic": "大蒜",
    "生姜": "姜", "姜片": "姜", "ginger": "姜",
    "小葱": "葱", "大葱": "葱", "葱花": "葱", "scallion": "葱", "green onion": "葱",
    "大料": "八角", "star anise": "八角",
    "cinnamon": "桂皮",
    "味精": "鸡精", "msg": "鸡精",
    "植物油": "食用油", "油": "食用油", "oil": "食用油", "vegetable oil": "食用油",
    "芝麻油": "香油", "sesame oil": "香油",
    "玉米淀粉": "淀粉", "生粉": "淀粉", "cornstarch": "淀粉",
}

_TOOL_SYNONYMS = {
    "铁锅": "炒锅", "wok": "炒锅",
    "煎锅": "平底锅", "不粘锅": "平底锅", "frying pan": "平底锅", "skillet": "平底锅",
    "蒸笼": "蒸锅", "steamer": "蒸锅",
    "oven": "烤箱",
    "air fryer": "空气炸锅",
    "微波": "微波炉", "microwave": "微波炉",
    "压力锅": "高压锅", "pressure cooker": "高压锅",
    "电饭锅": "电饭煲", "rice cooker": "电饭煲",
    "clay pot": "砂锅",
    "煮锅": "汤锅", "stockpot": "汤锅", "pot": "汤锅",
    "料理机": "搅拌机", "blender": "搅拌机",
    "whisk": "打蛋器",
    "knife": "菜刀",
    "菜板": "砧板", "cutting board": "砧板",
}

CANONICAL = CanonicalVocabulary(
    ingredients=Vocabulary("ingredients", _INGREDIENT_SYNONYMS),
    seasonings=Vocabulary("seasonings", _SEASONING_SYNONYMS),
    tools=Vocabulary("tools", _TOOL_SYNONYMS),
)


# =========================================================
# Macro-nutrient classes (canonical ingredient terms)
# =========================================================
MACRO_CATEGORIES: Mapping[str, FrozenSet[str]] = MappingProxyType({
    "vitamin": frozenset({
        "番茄", "土豆", "胡萝卜", "白菜", "卷心菜", "西兰花", "菠菜", "黄瓜", "茄子", "青椒",
        "洋葱", "生菜", "芹菜", "韭菜", "豆芽", "冬瓜", "丝瓜", "蘑菇", "香菇", "南瓜",
    }),
    "protein": frozenset({
        "鸡蛋", "鸡胸肉", "鸡肉", "鸡翅", "猪肉", "五花肉", "排骨", "牛肉", "羊肉", "虾",
        "鱼", "三文鱼", "豆腐", "牛奶", "酸奶",
    }),
    "starch": frozenset({
        "米饭", "大米", "面条", "意面", "面粉", "馒头", "面包", "土豆", "红薯", "年糕",
        "粉丝", "燕麦", "玉米",
    }),
})


# =========================================================
# Flavor hints
# =========================================================
@dataclass(frozen=True)
class FlavorHints:
    acid: Pattern[str]
    spicy: Pattern[str]
    sweet: Pattern[str]
    salty: Pattern[str]
    quick_steps_max: int


FLAVOR_HINTS = FlavorHints(
    acid=re.compile(r"醋|柠檬|酸|山楂|vinegar|lemon|lime|sour", re.IGNORECASE),
    spicy=re.compile(r"辣|花椒|胡椒|芥末|咖喱|chili|chilli|spicy|jalape|wasabi|curry", re.IGNORECASE),
    sweet=re.compile(r"糖|蜂蜜|甜|红枣|sugar|honey|syrup|sweet", re.IGNORECASE),
    salty=re.compile(r"盐|咸|腌|酱油|生抽|老抽|salt|soy sauce", re.IGNORECASE),
    quick_steps_max=5,
)


# =========================================================
# Tags
# =========================================================
TAG_ALIASES: Mapping[str, str] = MappingProxyType({
    "维生素": "vitamin", "蔬菜": "vitamin", "vitamins": "vitamin", "vegetable": "vitamin",
    "蛋白质": "protein", "蛋白": "protein", "高蛋白": "protein", "high-protein": "protein",
    "淀粉": "starch", "主食": "starch", "米饭": "starch", "面条": "starch", "staple": "starch",
    "酸": "sour",
    "辣": "spicy",
    "甜": "sweet",
    "咸": "salty",
    "麻": "numbing",
    "清淡": "light",
    "重口": "heavy",
    "快手菜": "quick-dish", "quick": "quick-dish", "quickdish": "quick-dish",
    "下饭菜": "rice-friendly",
    "低脂": "low-fat",
    "素食": "vegetarian",
    "汤": "soup",
    "甜品": "dessert",
    "炸物": "fried",
    "凉菜": "cold-dish",
    "炒锅": "wok",
    "烤箱": "oven",
    "蒸锅": "steamer",
    "微波炉": "microwave",
    "煮锅": "pot",
    "电饭煲": "rice-cooker",
})

# (tag, pattern that must match, pattern that must not match)
AUTO_TAG_RULES: Tuple[Tuple[str, Pattern[str], Optional[Pattern[str]]], ...] = (
    ("oven", re.compile(r"烤箱|空气炸|焗|烘烤|烤制|oven|bake|roast", re.I), None),
    ("steamer", re.compile(r"蒸|steam", re.I), None),
    ("microwave", re.compile(r"微波|microwave", re.I), None),
    ("wok", re.compile(r"炒|起锅|热锅|stir[- ]?fry|wok", re.I), None),
    ("pot", re.compile(r"煮|炖|焖|煲|砂锅|高压锅|boil|simmer|stew|braise", re.I), None),
    ("soup", re.compile(r"汤|soup|broth", re.I), None),
    (
        "vegetarian",
        re.compile(r"素|无肉|蔬菜|vegetarian|vegan", re.I),
        re.compile(r"肉|鱼|虾|蛋|奶|meat|chicken|beef|pork|fish|shrimp|egg", re.I),
    ),
    ("fried", re.compile(r"油炸|炸|deep[- ]?fr", re.I), None),
    ("cold-dish", re.compile(r"凉拌|凉菜|冷菜|沙拉|salad", re.I), None),
    ("rice-friendly", re.compile(r"下饭|配饭|拌饭", re.I), None),
    ("low-fat", re.compile(r"低脂|减肥|健身|轻食|low[- ]fat", re.I), None),
    ("dessert", re.compile(r"甜品|甜点|蛋糕|布丁|果冻|冰淇淋|dessert|cake|pudding", re.I), None),
)


# =========================================================
# Section headings (readability extractor)
# =========================================================
_STEP_NUMBER = r"(?:\d+[.、)）](?!\d)|第[一二三四五六七八九十\d]+步)"

DEFAULT_HEADING_LEXICON = HeadingLexicon(
    ingredient_keywords=("材料", "主料", "辅料", "配料", "用料", "食材", "ingredients", "ingredient", "materials"),
    step_keywords=("步骤", "做法", "制法", "方法", "instructions", "directions", "method", "steps"),
    # A numbered step ends at 。 or a newline, or where the next number starts
    numbered_step=re.compile(rf"{_STEP_NUMBER}(?:(?!{_STEP_NUMBER})[^。\n])*。?"),
    step_numbering=re.compile(rf"^{_STEP_NUMBER}\s*"),
)
