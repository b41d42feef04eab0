"""SEO recommendation and validation schemas."""

from datetime import datetime
from typing import Any

from pydantic import Field

from blogai.schemas.base import CamelModel


class SeoOptions(CamelModel):
    """Generation options for SEO metadata."""

    generate_slug: bool = True
    optimize_for_mobile: bool = True
    include_schema: bool = False
    language: str | None = None


class SeoRecommendationRequest(CamelModel):
    """Request to generate SEO metadata for a post."""

    content: str
    title: str
    content_type: str = "markdown"
    target_keywords: list[str] = Field(default_factory=list)
    options: SeoOptions = Field(default_factory=SeoOptions)


class OpenGraph(CamelModel):
    """Open Graph tags for social sharing."""

    title: str
    description: str
    type: str = "article"
    locale: str


class SeoConfidence(CamelModel):
    """Locally computed quality scores for each generated field (0-100)."""

    overall: int = Field(ge=0, le=100)
    title: int = Field(ge=0, le=100)
    description: int = Field(ge=0, le=100)
    keywords: int = Field(ge=0, le=100)
    slug: int = Field(ge=0, le=100)


class SeoRecommendationData(CamelModel):
    """Generated SEO metadata with confidence scores."""

    meta_title: str
    meta_description: str
    keywords: list[str]
    open_graph: OpenGraph
    suggested_slug: str
    schema_markup: dict[str, Any] | None = Field(default=None, alias="schema")
    confidence: SeoConfidence


class SeoProcessingMetrics(CamelModel):
    """Timing and outcome of one SEO recommendation request."""

    request_id: str
    start_time: datetime
    end_time: datetime
    processing_time_ms: int
    model: str
    content_length: int
    words_analyzed: int
    cache_hit: bool = False
    success: bool
    error_code: str | None = None


class SeoMetadataInput(CamelModel):
    """Already-generated metadata submitted for validation."""

    title: str | None = None
    description: str | None = None
    keywords: list[str] = Field(default_factory=list)


class SEOValidationRequest(CamelModel):
    """Request to score content and its metadata."""

    content: str = Field(min_length=1)
    metadata: SeoMetadataInput | None = None
    url: str | None = None


class HeadingStructure(CamelModel):
    """Heading counts by level."""

    h1_count: int = 0
    h2_count: int = 0
    h3_count: int = 0


class StructuralMetrics(CamelModel):
    """Deterministic measurements taken directly from the content."""

    title_length: int = 0
    meta_description_length: int = 0
    heading_structure: HeadingStructure = Field(default_factory=HeadingStructure)
    image_alt_text_count: int = 0
    internal_links_count: int = 0
    external_links_count: int = 0
    content_length: int = 0
    keyword_density: dict[str, float] = Field(default_factory=dict)
    content_score: int = Field(default=0, ge=0, le=100)
    technical_score: int = Field(default=0, ge=0, le=100)
    metadata_score: int = Field(default=0, ge=0, le=100)


class QualitativeAnalysis(CamelModel):
    """Model-judged quality scores (0-100) with improvement suggestions."""

    readability_score: int = Field(ge=0, le=100)
    keyword_relevance: int = Field(ge=0, le=100)
    structure_score: int = Field(ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list)


class SEOValidationMetrics(CamelModel):
    """Rubric scores reported in a validation verdict."""

    content_score: int = Field(ge=0, le=100)
    technical_score: int = Field(ge=0, le=100)
    metadata_score: int = Field(ge=0, le=100)
    performance_score: int = Field(ge=0, le=100)


class SEOValidationResult(CamelModel):
    """Combined structural + qualitative SEO verdict."""

    overall_score: int = Field(ge=0, le=100)
    passed: bool
    metrics: SEOValidationMetrics
    suggestions: list[str] = Field(default_factory=list, max_length=5)
    validated_at: datetime
