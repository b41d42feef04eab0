"""SEO validation: deterministic structure metrics plus a qualitative model audit."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from datetime import UTC, datetime

from blogai.agents.seo_auditor import SeoAuditInput, SeoAuditOutput, SeoAuditorAgent
from blogai.config import Settings, settings as default_settings
from blogai.core.exceptions import BlogAIError
from blogai.schemas.seo import (
    HeadingStructure,
    QualitativeAnalysis,
    SeoMetadataInput,
    SEOValidationMetrics,
    SEOValidationRequest,
    SEOValidationResult,
    StructuralMetrics,
)
from blogai.services.metadata_extraction import (
    extract_headings,
    extract_images,
    extract_links,
    extract_text_content,
)

module_logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5
RUBRIC_SUGGESTION_THRESHOLD = 80

SCORE_WEIGHTS = {
    "content": 0.25,
    "technical": 0.20,
    "metadata": 0.20,
    "readability": 0.15,
    "keyword_relevance": 0.10,
    "structure": 0.10,
}

FALLBACK_ANALYSIS = QualitativeAnalysis(
    readability_score=70,
    keyword_relevance=70,
    structure_score=70,
    suggestions=[
        "Improve the content structure",
        "Optimize keyword usage",
    ],
)

CONTENT_SUGGESTION = "Lengthen the content and improve its heading structure"
TECHNICAL_SUGGESTION = "Add alt text to images and link to more internal pages"
METADATA_SUGGESTION = "Optimize the meta title and description"

_WORD = re.compile(r"\b\w+\b")


def calculate_content_score(text_length: int, headings: HeadingStructure) -> int:
    score = 0
    if text_length >= 300:
        score += 30
    elif text_length >= 150:
        score += 20
    else:
        score += 10

    if headings.h1_count == 1:
        score += 25
    elif headings.h1_count > 1:
        score += 15
    else:
        score += 5

    if headings.h2_count >= 2 and headings.h3_count >= 1:
        score += 25
    elif headings.h2_count >= 1:
        score += 15
    else:
        score += 5

    score += 20
    return min(100, score)


def calculate_technical_score(image_alt_text_count: int, internal_links_count: int) -> int:
    score = 40 if image_alt_text_count > 0 else 20
    if internal_links_count >= 2:
        score += 30
    elif internal_links_count >= 1:
        score += 20
    else:
        score += 10

    score += 30
    return min(100, score)


def calculate_metadata_score(metadata: SeoMetadataInput | None) -> int:
    if metadata is None:
        return 50

    score = 0
    if metadata.title:
        score += 40 if 10 <= len(metadata.title) <= 60 else 20
    if metadata.description:
        score += 40 if 120 <= len(metadata.description) <= 160 else 20
    if metadata.keywords:
        score += 20
    return min(100, score)


def keyword_density(text: str) -> dict[str, float]:
    """Percentage of all words taken by each word longer than three characters."""
    words = _WORD.findall(text.lower())
    if not words:
        return {}
    counts = Counter(word for word in words if len(word) > 3)
    return {word: count / len(words) * 100 for word, count in counts.items()}


def analyze_structure(content: str, metadata: SeoMetadataInput | None) -> StructuralMetrics:
    """Measure headings, images, links and text without calling the model."""
    headings = extract_headings(content)
    heading_structure = HeadingStructure(
        h1_count=len(headings.h1),
        h2_count=len(headings.h2),
        h3_count=len(headings.h3),
    )
    image_alt_text_count = sum(1 for image in extract_images(content) if image.alt.strip())
    links = extract_links(content)
    text = extract_text_content(content)

    return StructuralMetrics(
        title_length=len(metadata.title or "") if metadata else 0,
        meta_description_length=len(metadata.description or "") if metadata else 0,
        heading_structure=heading_structure,
        image_alt_text_count=image_alt_text_count,
        internal_links_count=len(links.internal),
        external_links_count=len(links.external),
        content_length=len(text),
        keyword_density=keyword_density(text),
        content_score=calculate_content_score(len(text), heading_structure),
        technical_score=calculate_technical_score(image_alt_text_count, len(links.internal)),
        metadata_score=calculate_metadata_score(metadata),
    )


def calculate_overall_score(metrics: StructuralMetrics, analysis: QualitativeAnalysis) -> int:
    weighted = (
        metrics.content_score * SCORE_WEIGHTS["content"]
        + metrics.technical_score * SCORE_WEIGHTS["technical"]
        + metrics.metadata_score * SCORE_WEIGHTS["metadata"]
        + analysis.readability_score * SCORE_WEIGHTS["readability"]
        + analysis.keyword_relevance * SCORE_WEIGHTS["keyword_relevance"]
        + analysis.structure_score * SCORE_WEIGHTS["structure"]
    )
    return max(0, min(100, math.floor(weighted + 0.5)))


def build_suggestions(metrics: StructuralMetrics, analysis: QualitativeAnalysis) -> list[str]:
    """Model suggestions first, then one per weak rubric, at most five."""
    suggestions = list(analysis.suggestions)
    if metrics.content_score < RUBRIC_SUGGESTION_THRESHOLD:
        suggestions.append(CONTENT_SUGGESTION)
    if metrics.technical_score < RUBRIC_SUGGESTION_THRESHOLD:
        suggestions.append(TECHNICAL_SUGGESTION)
    if metrics.metadata_score < RUBRIC_SUGGESTION_THRESHOLD:
        suggestions.append(METADATA_SUGGESTION)
    return suggestions[:MAX_SUGGESTIONS]


class SeoValidationService:
    """Score content for SEO.

    A failed model audit never fails validation: fixed fallback scores are
    used instead and the structural half is still computed.
    """

    def __init__(
        self,
        *,
        auditor: SeoAuditorAgent,
        config: Settings | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._auditor = auditor
        self._config = config or default_settings
        self._logger = logger or module_logger

    async def validate_seo(self, request: SEOValidationRequest) -> SEOValidationResult:
        metrics = analyze_structure(request.content, request.metadata)
        analysis = await self.qualitative_analysis(request)

        overall = calculate_overall_score(metrics, analysis)
        result = SEOValidationResult(
            overall_score=overall,
            passed=overall >= self._config.seo_validation_pass_score,
            metrics=SEOValidationMetrics(
                content_score=metrics.content_score,
                technical_score=metrics.technical_score,
                metadata_score=metrics.metadata_score,
                performance_score=self._config.seo_validation_performance_score,
            ),
            suggestions=build_suggestions(metrics, analysis),
            validated_at=datetime.now(UTC),
        )
        self._logger.info(
            "SEO validation completed",
            extra={
                "overall_score": result.overall_score,
                "passed": result.passed,
                "content_score": metrics.content_score,
                "technical_score": metrics.technical_score,
                "metadata_score": metrics.metadata_score,
            },
        )
        return result

    async def qualitative_analysis(self, request: SEOValidationRequest) -> QualitativeAnalysis:
        metadata = request.metadata.model_dump(by_alias=True, exclude_none=True) if request.metadata else None
        try:
            output: SeoAuditOutput = await self._auditor.run(
                SeoAuditInput(content=request.content, metadata=metadata)
            )
        except BlogAIError as exc:
            self._logger.warning(
                "SEO audit unavailable, using fallback scores",
                extra={"error_type": type(exc).__name__, "reason": exc.message},
            )
            return FALLBACK_ANALYSIS.model_copy(deep=True)

        return QualitativeAnalysis(
            readability_score=output.readability_score,
            keyword_relevance=output.keyword_relevance,
            structure_score=output.structure_score,
            suggestions=output.suggestions,
        )
