"""Tests for SEO metadata recommendation and confidence scoring."""

from __future__ import annotations

import json
from typing import Any

import pytest

from blogai.agents.seo_metadata import SeoMetadataAgent, SeoMetadataOutput
from blogai.core.exceptions import AIServiceError
from blogai.schemas.seo import SeoOptions, SeoRecommendationRequest
from blogai.services.seo_recommendation import (
    SeoRecommendationService,
    calculate_confidence,
    score_description,
    score_keywords,
    score_slug,
    score_title,
)

CONTENT = (
    "React Hooks let function components manage state and side effects. "
    "This guide covers useState, useEffect and custom hooks with practical examples."
)
TITLE = "React Hooks Complete Guide: useState and useEffect"
DESCRIPTION = "Learn how React Hooks work. " + "x" * 102
SLUG = "react-hooks-complete-guide"


class _FakeGenerator:
    model_name = "fake-model"

    def __init__(self, reply: str = "", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    async def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


def _payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "metaTitle": TITLE,
        "metaDescription": DESCRIPTION,
        "keywords": ["react", "hooks", "useState"],
        "openGraphTitle": "React Hooks, explained",
        "openGraphDescription": "Everything you need to start with hooks.",
        "suggestedSlug": SLUG,
        "reasoning": "Targets the hooks tutorial intent",
    }
    payload.update(overrides)
    return payload


def _reply(payload: dict[str, Any]) -> str:
    return f"```json\n{json.dumps(payload)}\n```"


def _service(generator: _FakeGenerator) -> SeoRecommendationService:
    return SeoRecommendationService(agent=SeoMetadataAgent(generator))


def _request(**overrides: Any) -> SeoRecommendationRequest:
    values: dict[str, Any] = {"content": CONTENT, "title": "React Hooks"}
    values.update(overrides)
    return SeoRecommendationRequest(**values)


def test_score_title() -> None:
    assert score_title(TITLE, ["React Hooks"]) == 100
    assert score_title("Short", []) == 60
    assert score_title("x" * 70, []) == 65


def test_score_description() -> None:
    assert len(DESCRIPTION) == 130
    assert score_description(DESCRIPTION, ["React Hooks"]) == 93
    assert score_description("Too short", []) == 60
    assert score_description("방법을 알아보세요", []) == 65


def test_score_description_caps_keyword_bonus() -> None:
    description = "alpha beta gamma delta epsilon " + "y" * 100

    assert score_description(description, ["alpha", "beta", "gamma", "delta", "epsilon"]) == 95


def test_score_keywords() -> None:
    assert score_keywords(["react", "hooks", "useState"], ["React Hooks"]) == 95
    assert score_keywords(["react"], []) == 60


def test_score_slug() -> None:
    assert score_slug(SLUG) == 100
    assert score_slug("React_Hooks") == 45
    assert score_slug("a" * 60) == 70


def test_calculate_confidence_averages_field_scores() -> None:
    output = SeoMetadataOutput.model_validate(_payload())

    confidence = calculate_confidence(output, ["React Hooks"])

    assert confidence.model_dump() == {
        "overall": 97,
        "title": 100,
        "description": 93,
        "keywords": 95,
        "slug": 100,
    }


@pytest.mark.asyncio
async def test_recommend_metadata_builds_full_payload() -> None:
    generator = _FakeGenerator(_reply(_payload()))
    service = _service(generator)

    result = await service.recommend_metadata(
        _request(
            target_keywords=["React Hooks"],
            options=SeoOptions(include_schema=True, language="en"),
        )
    )

    assert result.success
    data = result.data
    assert data is not None
    assert data.meta_title == TITLE
    assert data.suggested_slug == SLUG
    assert data.open_graph.locale == "en_US"
    assert data.open_graph.type == "article"
    assert data.confidence.overall == 97
    assert data.schema_markup is not None
    assert data.schema_markup["@type"] == "BlogPosting"
    assert data.schema_markup["headline"] == TITLE
    assert data.schema_markup["mainEntityOfPage"]["@id"].endswith(f"/{SLUG}")
    assert "Target keywords: React Hooks" in generator.prompts[0]
    assert "Language: en" in generator.prompts[0]

    metrics = result.metrics
    assert metrics.request_id.startswith("seo-")
    assert metrics.content_length == len(CONTENT)
    assert metrics.words_analyzed == len(CONTENT) // 5
    assert metrics.cache_hit is False
    assert metrics.success is True

    wire = result.model_dump(mode="json", by_alias=True, exclude_none=True)
    assert "schema" in wire["data"]
    assert "metaTitle" in wire["data"]


@pytest.mark.asyncio
async def test_recommend_metadata_defaults_to_korean_without_schema() -> None:
    service = _service(_FakeGenerator(_reply(_payload())))

    result = await service.recommend_metadata(_request())

    assert result.data is not None
    assert result.data.open_graph.locale == "ko_KR"
    assert result.data.schema_markup is None


@pytest.mark.asyncio
async def test_recommend_metadata_missing_field_is_not_retryable() -> None:
    payload = _payload()
    del payload["suggestedSlug"]
    service = _service(_FakeGenerator(_reply(payload)))

    result = await service.recommend_metadata(_request())

    assert result.success is False
    assert result.error is not None
    assert result.error.code == "AI_SERVICE_ERROR"
    assert result.error.message == "Missing required field: suggestedSlug"
    assert result.error.retryable is False
    assert result.metrics.success is False
    assert result.metrics.error_code == "AI_SERVICE_ERROR"
    assert result.metrics.content_length == 0


@pytest.mark.asyncio
async def test_recommend_metadata_blank_field_counts_as_missing() -> None:
    service = _service(_FakeGenerator(_reply(_payload(metaTitle="   "))))

    result = await service.recommend_metadata(_request())

    assert result.error is not None
    assert result.error.message == "Missing required field: metaTitle"


@pytest.mark.asyncio
async def test_recommend_metadata_timeout_is_retryable() -> None:
    service = _service(_FakeGenerator(error=AIServiceError("Generative model request timeout")))

    result = await service.recommend_metadata(_request())

    assert result.error is not None
    assert result.error.code == "AI_SERVICE_ERROR"
    assert result.error.retryable is True


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("overrides", "code"),
    [
        ({"content": "   "}, "INVALID_CONTENT"),
        ({"content": "x" * 99}, "CONTENT_TOO_SHORT"),
        ({"content": "x" * 15_001}, "CONTENT_TOO_LONG"),
        ({"title": " "}, "INVALID_CONTENT"),
        ({"content_type": "pdf"}, "INVALID_CONTENT"),
    ],
)
async def test_recommend_metadata_validation_codes(overrides: dict[str, Any], code: str) -> None:
    generator = _FakeGenerator(_reply(_payload()))

    result = await _service(generator).recommend_metadata(_request(**overrides))

    assert result.error is not None
    assert result.error.code == code
    assert result.error.retryable is False
    assert generator.prompts == []


@pytest.mark.asyncio
async def test_quick_recommend_skips_schema() -> None:
    generator = _FakeGenerator(_reply(_payload()))

    result = await _service(generator).quick_recommend(CONTENT, "React Hooks")

    assert result.data is not None
    assert result.data.schema_markup is None
    assert result.data.open_graph.locale == "ko_KR"
    assert result.data.confidence.overall == 91
    assert "Schema markup requested: false" in generator.prompts[0]


@pytest.mark.asyncio
async def test_recommend_with_keywords_merges_options() -> None:
    generator = _FakeGenerator(_reply(_payload()))

    result = await _service(generator).recommend_with_keywords(
        CONTENT,
        "React Hooks",
        ["React Hooks"],
        SeoOptions(language="en"),
    )

    assert result.data is not None
    assert result.data.schema_markup is not None
    assert result.data.open_graph.locale == "en_US"
    assert result.data.confidence.overall == 97
