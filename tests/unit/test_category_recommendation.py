"""Tests for category recommendation post-processing and failure handling."""

from __future__ import annotations

import json
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import pytest

from blogai.agents.category_classifier import (
    CategoryClassifierAgent,
    CategoryClassifierInput,
    format_available_categories,
)
from blogai.core.exceptions import AIServiceError
from blogai.schemas.category import CategoryRecommendRequest
from blogai.services.category_recommendation import (
    RECOMMENDATION_FAILED,
    CategoryRecommendationEngine,
    apply_domain_weight,
)

CONTENT = (
    "React Hooks let function components hold state and side effects. "
    "This tutorial walks through useState and useEffect with small examples."
)

CATEGORIES = [
    SimpleNamespace(id="c-web", name="Web Development", slug="web-development", description="Frontend"),
    SimpleNamespace(id="c-tut", name="Tutorial", slug="tutorial", description=None),
    SimpleNamespace(id="c-ai", name="AI/ML", slug="ai-ml", description="Machine learning"),
    SimpleNamespace(id="c-ops", name="DevOps", slug="devops", description="Infrastructure"),
]

ANALYSIS = {
    "primaryTopic": "React Hooks",
    "secondaryTopics": ["Frontend"],
    "technicalLevel": "intermediate",
    "contentType": "tutorial",
    "keyTopics": ["React", "Hooks"],
    "technicalTerms": ["useState"],
    "frameworksAndTools": ["React"],
}


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


def _reply(recommendations: list[dict[str, Any]], analysis: dict[str, Any] | None = None) -> str:
    payload = {"recommendations": recommendations, "contentAnalysis": analysis or ANALYSIS}
    return f"```json\n{json.dumps(payload)}\n```"


def _rec(category_id: str, confidence: Any, name: str = "Some Category") -> dict[str, Any]:
    return {
        "categoryId": category_id,
        "categoryName": name,
        "confidence": confidence,
        "reasoning": "Matches the post",
        "keyTopics": ["React"],
    }


def _engine(generator: _FakeGenerator) -> tuple[CategoryRecommendationEngine, SimpleNamespace]:
    store = SimpleNamespace(list=AsyncMock(return_value=CATEGORIES))
    engine = CategoryRecommendationEngine(
        classifier=CategoryClassifierAgent(generator),
        category_store=store,
    )
    return engine, store


def _request(**overrides: Any) -> CategoryRecommendRequest:
    values: dict[str, Any] = {"title": "React Hooks Guide", "content": CONTENT}
    values.update(overrides)
    return CategoryRecommendRequest(**values)


def test_apply_domain_weight_clamps_and_rounds() -> None:
    assert apply_domain_weight(0.6, 1.2) == 0.72
    assert apply_domain_weight(0.9, 1.2) == 1.0
    assert apply_domain_weight(0.777, 1.0) == 0.78
    assert apply_domain_weight(0.8, 0.9) == 0.72


def test_format_available_categories_lists_id_slug_and_description() -> None:
    rendered = format_available_categories(CATEGORIES[:2])

    assert rendered.splitlines() == [
        "- Web Development (id: c-web, slug: web-development): Frontend",
        "- Tutorial (id: c-tut, slug: tutorial): No description",
    ]


def test_classifier_prompt_includes_categories_and_exclusions() -> None:
    agent = CategoryClassifierAgent(_FakeGenerator())

    prompt = agent.build_prompt(
        CategoryClassifierInput(
            title="React Hooks Guide",
            content=CONTENT,
            content_type="markdown",
            available_categories=format_available_categories(CATEGORIES),
            max_suggestions=2,
        )
    )

    assert "Title: React Hooks Guide" in prompt
    assert "(id: c-ops, slug: devops)" in prompt
    assert "do not recommend these): None" in prompt
    assert "at most 2 categories" in prompt
    assert "{{" not in prompt


@pytest.mark.asyncio
async def test_recommend_categories_applies_domain_weight() -> None:
    generator = _FakeGenerator(_reply([_rec("c-web", 0.6, "Web Development")]))
    engine, _ = _engine(generator)

    result = await engine.recommend_categories(_request())

    assert result.success
    assert result.data is not None
    recommendations = result.data.recommendations
    assert len(recommendations) == 1
    assert recommendations[0].category_id == "c-web"
    assert recommendations[0].category_name == "Web Development"
    assert recommendations[0].confidence == 0.72
    assert result.data.content_analysis.primary_topic == "React Hooks"
    assert result.data.processing_metrics.model_used == "fake-model"
    assert result.data.processing_metrics.success is True
    assert len(generator.prompts) == 1


@pytest.mark.asyncio
async def test_recommend_categories_dedupes_filters_and_limits() -> None:
    generator = _FakeGenerator(
        _reply(
            [
                _rec("c-web", 0.75),
                _rec("c-web", 0.8),
                _rec("c-tut", 0.7),
                _rec("c-ghost", 0.95),
                _rec("c-ai", 0.777),
                _rec("c-ops", 0.9),
            ]
        )
    )
    engine, _ = _engine(generator)

    result = await engine.recommend_categories(_request())

    assert result.data is not None
    recommendations = result.data.recommendations
    assert [rec.category_id for rec in recommendations] == ["c-web", "c-ops", "c-ai"]
    assert recommendations[0].confidence == 0.96
    assert all(round(rec.confidence, 2) == rec.confidence for rec in recommendations)
    assert all(rec.confidence >= 0.7 for rec in recommendations)
    assert len({rec.category_id for rec in recommendations}) == len(recommendations)


@pytest.mark.asyncio
async def test_recommend_categories_excludes_existing_categories() -> None:
    generator = _FakeGenerator(_reply([_rec("c-web", 0.9), _rec("c-ops", 0.85)]))
    engine, _ = _engine(generator)

    result = await engine.recommend_categories(_request(existing_categories=["c-web"]))

    assert result.data is not None
    assert [rec.category_id for rec in result.data.recommendations] == ["c-ops"]
    assert "do not recommend these): c-web" in generator.prompts[0]


@pytest.mark.asyncio
async def test_recommend_categories_resolves_slugs_and_names() -> None:
    generator = _FakeGenerator(
        _reply([_rec("web-development", 0.8), _rec("DevOps", 0.8)])
    )
    engine, _ = _engine(generator)

    result = await engine.recommend_categories(_request())

    assert result.data is not None
    assert [rec.category_id for rec in result.data.recommendations] == ["c-web", "c-ops"]
    assert all(rec.is_existing for rec in result.data.recommendations)


@pytest.mark.asyncio
async def test_recommend_categories_honors_max_suggestions() -> None:
    generator = _FakeGenerator(_reply([_rec("c-web", 0.9), _rec("c-ops", 0.85)]))
    engine, _ = _engine(generator)

    result = await engine.recommend_categories(_request(max_suggestions=1))

    assert result.data is not None
    assert [rec.category_id for rec in result.data.recommendations] == ["c-web"]


@pytest.mark.asyncio
async def test_recommend_categories_coerces_unknown_analysis_values() -> None:
    analysis = dict(ANALYSIS, technicalLevel="expert", contentType="essay", keyTopics="React")
    generator = _FakeGenerator(_reply([_rec("c-web", 0.9)], analysis))
    engine, _ = _engine(generator)

    result = await engine.recommend_categories(_request())

    assert result.data is not None
    assert result.data.content_analysis.technical_level == "intermediate"
    assert result.data.content_analysis.content_type == "other"
    assert result.data.content_analysis.key_topics == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"content": "too short"},
        {"content": "x" * 50_001},
        {"title": "   "},
        {"content_type": "pdf"},
    ],
)
async def test_recommend_categories_rejects_invalid_requests(overrides: dict[str, Any]) -> None:
    generator = _FakeGenerator(_reply([_rec("c-web", 0.9)]))
    engine, store = _engine(generator)

    result = await engine.recommend_categories(_request(**overrides))

    assert result.success is False
    assert result.error is not None
    assert result.error.code == "INVALID_REQUEST"
    assert result.error.retryable is False
    assert result.metrics is not None
    assert result.metrics.success is False
    assert generator.prompts == []
    store.list.assert_not_awaited()


@pytest.mark.asyncio
async def test_recommend_categories_reports_unparsable_reply_as_retryable() -> None:
    engine, _ = _engine(_FakeGenerator("I cannot answer that"))

    result = await engine.recommend_categories(_request())

    assert result.success is False
    assert result.error is not None
    assert result.error.code == RECOMMENDATION_FAILED
    assert result.error.retryable is True
    assert result.error.details["cause"] == "AI_PARSE_ERROR"


@pytest.mark.asyncio
async def test_recommend_categories_rejects_non_numeric_confidence() -> None:
    engine, _ = _engine(_FakeGenerator(_reply([_rec("c-web", "high")])))

    result = await engine.recommend_categories(_request())

    assert result.success is False
    assert result.error is not None
    assert result.error.code == RECOMMENDATION_FAILED


@pytest.mark.asyncio
async def test_recommend_categories_wraps_model_failures() -> None:
    engine, _ = _engine(_FakeGenerator(error=AIServiceError("Generative model request timeout")))

    result = await engine.recommend_categories(_request())

    assert result.success is False
    assert result.error is not None
    assert result.error.code == RECOMMENDATION_FAILED
    assert result.error.details["cause"] == "AI_SERVICE_ERROR"


@pytest.mark.asyncio
async def test_health_check_reports_healthy_model() -> None:
    generator = _FakeGenerator("ok")
    engine, _ = _engine(generator)

    health = await engine.health_check()

    assert health.status == "healthy"
    assert health.model == "fake-model"
    assert health.timeout_ms == 30_000
    assert health.retry_attempts == 3
    assert health.cache_ttl_seconds == 86_400
    assert len(generator.prompts) == 1


@pytest.mark.asyncio
async def test_health_check_reports_unhealthy_model() -> None:
    engine, _ = _engine(_FakeGenerator(error=AIServiceError("Generative model API key is invalid")))

    health = await engine.health_check()

    assert health.status == "unhealthy"
