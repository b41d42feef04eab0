"""Category recommendation and auto-tagging schemas."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from blogai.schemas.base import CamelModel

TechnicalLevel = Literal["beginner", "intermediate", "advanced"]
AnalysisContentType = Literal["tutorial", "review", "analysis", "guide", "news", "other"]


class CategoryRecommendRequest(CamelModel):
    """Request to classify a post into existing categories."""

    title: str
    content: str
    content_type: str = "markdown"
    max_suggestions: int = 3
    existing_categories: list[str] = Field(default_factory=list)


class CategoryRecommendation(CamelModel):
    """A single suggested category. Transient; persisted only via auto-tagging."""

    category_id: str
    category_name: str
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
    key_topics: list[str] = Field(default_factory=list)
    is_existing: bool = True


class ContentAnalysis(CamelModel):
    """Model-produced summary of what the post is about."""

    primary_topic: str = "Unknown"
    secondary_topics: list[str] = Field(default_factory=list)
    technical_level: TechnicalLevel = "intermediate"
    content_type: AnalysisContentType = "other"
    key_topics: list[str] = Field(default_factory=list)
    technical_terms: list[str] = Field(default_factory=list)
    frameworks_and_tools: list[str] = Field(default_factory=list)


class ProcessingMetrics(CamelModel):
    """Timing and outcome of one recommendation request."""

    request_id: str
    start_time: datetime
    end_time: datetime
    processing_time_ms: int
    content_length: int
    model_used: str
    success: bool


class CategoryRecommendationData(CamelModel):
    """Successful payload of a category recommendation."""

    recommendations: list[CategoryRecommendation]
    content_analysis: ContentAnalysis
    processing_metrics: ProcessingMetrics


class SelectedCategory(CamelModel):
    """Category chosen for tagging, with the confidence to store."""

    category_id: str
    confidence: float


class AutoTagRequest(CamelModel):
    """Request to persist AI-suggested categories on a post."""

    post_id: str
    selected_categories: list[SelectedCategory]
    replace_existing: bool = False


class FinalCategory(CamelModel):
    """A post-category association as it exists after tagging."""

    category_id: str
    category_name: str
    confidence: float
    is_ai_suggested: bool


class AutoTagResult(CamelModel):
    """Outcome of an auto-tagging transaction."""

    post_id: str
    added_categories: int
    removed_categories: int
    final_categories: list[FinalCategory]


class RecommendAndApplyRequest(CamelModel):
    """Request to classify a stored post and optionally tag it."""

    post_id: str
    auto_apply: bool = False


class RecommendAndApplyResult(CamelModel):
    """Recommendations for a stored post and whether any were applied."""

    recommendations: list[CategoryRecommendation]
    applied: bool = False
    applied_categories: list[str] = Field(default_factory=list)


class RemoveCategoriesRequest(CamelModel):
    """Request to detach categories from a post."""

    post_id: str
    category_ids: list[str]
    only_ai_suggested: bool = False


class RemoveCategoriesResult(CamelModel):
    """Number of associations removed."""

    post_id: str
    removed_count: int


class PostCategoryStats(CamelModel):
    """Aggregate view of a post's categories."""

    total: int = 0
    ai_suggested: int = 0
    manual: int = 0
    average_confidence: float = 0.0


class CategoryEngineHealth(CamelModel):
    """Result of a probe call against the classification model."""

    status: Literal["healthy", "unhealthy"]
    model: str
    timestamp: datetime
    timeout_ms: int
    retry_attempts: int
    cache_ttl_seconds: int
