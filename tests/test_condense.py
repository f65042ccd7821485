"""Tests for the step condensing service."""

import pytest

from recipe_collector.models.condense import CondenseRequest
from recipe_collector.services.condense_service import (
    build_condense_request,
    calculate_condense_stats,
    condense_recipe,
    normalize_condense_response,
)
from recipe_collector.utils.exceptions import CondenseError, ModelUnavailableError, ValidationError

VALID_REPLY = {
    "concise": {
        "title": "焦糖布丁",
        "phases": [
            {"name": "焦糖", "steps": ["糖和水小火熬至琥珀色后关火", "倒入模具底部"]},
            {"name": "布丁液", "steps": ["鸡蛋牛奶混匀过筛", " "]},
        ],
        "checklist": ["糖 50g", "牛奶 250ml"],
        "timeline": [
            {"at": "0-5min", "actions": [{"phase": "焦糖", "step": "1", "text": "熬焦糖"}]},
        ],
        "warnings": ["高温糖浆不可离人"],
    },
    "diffMeta": {
        "originalStepCount": 8,
        "conciseStepCount": 3,
        "mergeHints": ["合并了打蛋和搅拌"],
        "confidence": 0.9,
    },
}


@pytest.fixture
def request_model():
    return CondenseRequest(title="焦糖布丁", rawText="1. 熬焦糖 2. 打蛋 3. 搅拌")


@pytest.mark.asyncio
async def test_missing_api_key(offline_gemini, request_model):
    """Test condensing without a credential fails before any call."""
    with pytest.raises(CondenseError) as exc_info:
        await condense_recipe(request_model, gemini=offline_gemini)
    assert exc_info.value.reason == "missing_api_key"
    assert offline_gemini.calls == []


@pytest.mark.asyncio
async def test_success(fake_gemini, request_model):
    """Test a valid model reply is normalized."""
    gemini = fake_gemini(VALID_REPLY)
    result = await condense_recipe(request_model, gemini=gemini)

    assert result.source == "ai-condense"
    assert result.concise.phases[1].steps == ["鸡蛋牛奶混匀过筛"]
    assert result.concise.timeline[0].actions[0].step == 1
    assert result.diffMeta.conciseStepCount == 3
    assert "Simplified Chinese" in gemini.calls[0]["system_instruction"]
    assert "1. 熬焦糖 2. 打蛋 3. 搅拌" in gemini.calls[0]["prompt"]


@pytest.mark.asyncio
async def test_retries_once_after_bad_json(fake_gemini, request_model):
    """Test one retry after an unparseable reply."""
    gemini = fake_gemini("this is not json", VALID_REPLY)
    result = await condense_recipe(request_model, gemini=gemini)
    assert result.concise.title == "焦糖布丁"
    assert len(gemini.calls) == 2


@pytest.mark.asyncio
async def test_json_parse_error_after_retry(fake_gemini, request_model):
    """Test two unparseable replies give json_parse_error."""
    gemini = fake_gemini("nope", "still nope", VALID_REPLY)
    with pytest.raises(CondenseError) as exc_info:
        await condense_recipe(request_model, gemini=gemini)
    assert exc_info.value.reason == "json_parse_error"
    assert exc_info.value.suggest
    assert len(gemini.calls) == 2


@pytest.mark.asyncio
async def test_validation_error_after_retry(fake_gemini, request_model):
    """Test two invalid replies give validation_error."""
    bad = {"concise": {"checklist": [{"item": "糖"}]}}
    gemini = fake_gemini(bad, bad)
    with pytest.raises(CondenseError) as exc_info:
        await condense_recipe(request_model, gemini=gemini)
    assert exc_info.value.reason == "validation_error"
    assert exc_info.value.to_dict()["reason"] == "validation_error"


@pytest.mark.asyncio
async def test_model_unavailable(fake_gemini, request_model):
    """Test a model failure is not retried."""
    gemini = fake_gemini(ModelUnavailableError("timeout"))
    with pytest.raises(CondenseError) as exc_info:
        await condense_recipe(request_model, gemini=gemini)
    assert exc_info.value.reason == "model_error"
    assert len(gemini.calls) == 1


@pytest.mark.asyncio
async def test_invalid_request(fake_gemini):
    """Test an invalid request is rejected."""
    with pytest.raises(ValidationError):
        await condense_recipe({"title": "布丁", "maxSteps": 0}, gemini=fake_gemini())


def test_normalize_defaults():
    """Test defaults for an empty reply."""
    result = normalize_condense_response({})
    assert result.concise.title == "未知菜谱"
    assert result.concise.phases == []
    assert result.diffMeta.confidence == 0.5
    assert result.concise.notes is None


def test_normalize_clamps_confidence():
    """Test confidence is clamped to [0, 1]."""
    assert normalize_condense_response({"diffMeta": {"confidence": 7}}).diffMeta.confidence == 1.0
    assert normalize_condense_response({"diffMeta": {"confidence": "-1"}}).diffMeta.confidence == 0.0


def test_build_condense_request_from_stored_fields():
    """Test building a request from stored recipe fields."""
    request = build_condense_request(
        "布丁",
        '["牛奶", {"name": "鸡蛋", "amount": "3个"}]',
        ["打蛋", "过筛"],
        locale="ja",
    )
    phase = request.phases[0]
    assert phase.name == "制作过程"
    assert phase.ingredients[0].name == "牛奶"
    assert phase.ingredients[0].amount is None
    assert phase.ingredients[1].amount == "3个"
    assert [(s.order, s.text) for s in phase.steps] == [(1, "打蛋"), (2, "过筛")]
    assert request.locale == "ja"
    assert request.maxSteps == 12


def test_build_condense_request_without_lists():
    """Test a request without lists has no phases."""
    request = build_condense_request("布丁", raw_text="原文")
    assert request.phases is None
    assert request.rawText == "原文"


def test_build_condense_request_rejects_empty_title():
    """Test an empty title is rejected."""
    with pytest.raises(ValidationError):
        build_condense_request("")


def test_condense_stats():
    """Test step saving statistics."""
    stats = calculate_condense_stats(normalize_condense_response(VALID_REPLY))
    assert stats == {
        "stepsSaved": 5,
        "savingRate": "62.5%",
        "hasSignificantSaving": True,
        "confidenceLevel": "high",
    }
