"""Pytest configuration and fixtures."""

import json
from typing import Any, Dict, List, Optional

import pytest

from recipe_collector.utils.exceptions import ModelUnavailableError
from recipe_collector.utils.gemini_utils import parse_model_json


class FakeGemini:
    """
    Stand-in for GeminiService that replays scripted replies.

    Each reply is a dict (returned as parsed JSON), a str (parsed like a real
    model reply) or an exception instance (raised).
    """

    def __init__(self, replies: Optional[List[Any]] = None, configured: bool = True):
        self.replies = list(replies or [])
        self.configured = configured
        self.calls: List[Dict[str, Any]] = []

    async def call_model_for_json(self, prompt: str, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append({"prompt": prompt, **kwargs})
        if not self.configured:
            raise ModelUnavailableError("Gemini API key is not configured")
        if not self.replies:
            raise ModelUnavailableError("No scripted reply left")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        if isinstance(reply, str):
            return parse_model_json(reply)
        return reply


@pytest.fixture
def fake_gemini():
    """Factory for a FakeGemini with scripted replies."""

    def _make(*replies: Any, configured: bool = True) -> FakeGemini:
        return FakeGemini(list(replies), configured=configured)

    return _make


@pytest.fixture
def offline_gemini():
    """A model that is not configured: every model-backed step must degrade."""
    return FakeGemini(configured=False)


@pytest.fixture
def json_ld_html():
    """Page with a schema.org Recipe in JSON-LD."""
    recipe = {
        "@context": "https://schema.org",
        "@type": "Recipe",
        "name": "番茄鸡蛋面",
        "image": ["/img/a.jpg"],
        "description": "家常快手面",
        "recipeIngredient": ["番茄", "鸡蛋", "面条"],
        "recipeInstructions": [
            {"@type": "HowToStep", "text": "炒鸡蛋"},
            {"@type": "HowToStep", "text": "煮面条"},
        ],
        "keywords": "家常菜, 面食",
        "recipeCuisine": "中餐",
    }
    return f"""<html><head>
<title>番茄鸡蛋面 - 示例</title>
<meta property="og:title" content="番茄鸡蛋面的做法">
<script type="application/ld+json">{json.dumps(recipe, ensure_ascii=False)}</script>
</head><body><h1>番茄鸡蛋面</h1></body></html>"""


@pytest.fixture
def og_only_html():
    """Page with Open Graph metadata and no recipe content at all."""
    return """<html><head>
<meta property="og:title" content="红烧肉">
<meta property="og:image" content="//cdn.example.com/hsr.jpg">
<meta property="og:description" content="一道经典的家常菜">
</head><body><p>欢迎光临</p></body></html>"""


@pytest.fixture
def article_html():
    """Blog-style article with headed ingredient and step sections."""
    return """<html><head><title>可乐鸡翅</title></head><body>
<div id="content"><article>
<h1>可乐鸡翅</h1>
<p>这是一道非常受欢迎的家常菜，孩子们都很喜欢，做法也很简单，适合新手尝试。</p>
<h2>材料</h2>
<ul><li>鸡翅 10个</li><li>可乐 1罐</li><li>生姜 3片</li></ul>
<h2>做法</h2>
<ol>
<li>鸡翅洗净后两面划刀</li>
<li>冷水下锅焯水后捞出</li>
<li>倒入可乐大火烧开转小火收汁</li>
</ol>
<p>小贴士：收汁时要不停翻动，防止粘锅。</p>
</article></div>
</body></html>"""
