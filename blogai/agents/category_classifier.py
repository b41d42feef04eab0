"""Category classifier agent: maps a post onto the blog's existing categories."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any, Protocol

from pydantic import BaseModel, Field, field_validator

from blogai.agents.base_agent import BaseAgent
from blogai.schemas.base import CamelModel
from blogai.schemas.category import ContentAnalysis

logger = logging.getLogger(__name__)

_TECHNICAL_LEVELS = {"beginner", "intermediate", "advanced"}
_ANALYSIS_CONTENT_TYPES = {"tutorial", "review", "analysis", "guide", "news", "other"}

CATEGORY_CLASSIFICATION_PROMPT = """You are a category classification expert for a technical blog.
Analyze the blog post below and recommend the most fitting categories.

## Post
Title: {{title}}
Content type: {{content_type}}
Already assigned categories (do not recommend these): {{existing_categories}}

## Content
{{content}}

## Available categories
{{available_categories}}

## Classification criteria
1. Core topic: the main technology stack and subject of the post
2. Audience: beginner, intermediate or advanced readers
3. Purpose: tutorial, review, analysis, guide, news or other
4. Technical area: frontend, backend, devops, AI/ML and so on
5. Tools and frameworks actually used in the post

## Recommendation rules
- Recommend at most {{max_suggestions}} categories, best first
- Only use categories from the list above and copy their id exactly
- Give each a confidence between 0.0 and 1.0 and only include those at 0.6 or above
- Explain the reasoning concretely and list the key topics behind it
- Mixing Korean and English technical terms is fine

## Response format
Reply with one fenced json code block shaped like this example:
```json
{
  "recommendations": [
    {
      "categoryId": "web-development",
      "categoryName": "Web Development",
      "confidence": 0.92,
      "reasoning": "A tutorial on building a web application with React and Next.js.",
      "keyTopics": ["React", "Next.js", "Frontend", "Tutorial"]
    }
  ],
  "contentAnalysis": {
    "primaryTopic": "Web Development",
    "secondaryTopics": ["React", "Frontend Development"],
    "technicalLevel": "intermediate",
    "contentType": "tutorial",
    "keyTopics": ["React", "Hooks"],
    "technicalTerms": ["jsx", "useState", "useEffect"],
    "frameworksAndTools": ["React", "Next.js", "npm"]
  }
}
```
"""


class CategoryLike(Protocol):
    id: str
    name: str
    slug: str
    description: str | None


def _string_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


def format_available_categories(categories: Sequence[CategoryLike]) -> str:
    """Render categories as one bullet per line for the prompt."""
    return "\n".join(
        f"- {category.name} (id: {category.id}, slug: {category.slug}): "
        f"{category.description or 'No description'}"
        for category in categories
    )


class CategoryClassifierInput(BaseModel):
    """Input payload for category classification."""

    title: str
    content: str
    content_type: str
    available_categories: str
    max_suggestions: int = 3
    existing_categories: list[str] = Field(default_factory=list)


class ClassifiedCategory(CamelModel):
    """One recommendation exactly as decoded from the model reply."""

    category_id: str = Field(min_length=1)
    category_name: str = Field(min_length=1)
    confidence: float
    reasoning: str = "No reasoning provided"
    key_topics: list[str] = Field(default_factory=list)

    @field_validator("category_id", "category_name", mode="before")
    @classmethod
    def _coerce_identifier(cls, value: Any) -> Any:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float):
            raise ValueError("confidence must be a number")
        return max(0.0, min(1.0, float(value)))

    @field_validator("reasoning", mode="before")
    @classmethod
    def _default_reasoning(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        return text or "No reasoning provided"

    @field_validator("key_topics", mode="before")
    @classmethod
    def _coerce_topics(cls, value: Any) -> list[str]:
        return _string_list(value)


class ClassifiedContentAnalysis(ContentAnalysis):
    """Content analysis with unknown enum values coerced to safe defaults."""

    @field_validator("primary_topic", mode="before")
    @classmethod
    def _default_topic(cls, value: Any) -> str:
        text = str(value).strip() if value is not None else ""
        return text or "Unknown"

    @field_validator("technical_level", mode="before")
    @classmethod
    def _coerce_level(cls, value: Any) -> str:
        return value if value in _TECHNICAL_LEVELS else "intermediate"

    @field_validator("content_type", mode="before")
    @classmethod
    def _coerce_content_type(cls, value: Any) -> str:
        return value if value in _ANALYSIS_CONTENT_TYPES else "other"

    @field_validator(
        "secondary_topics",
        "key_topics",
        "technical_terms",
        "frameworks_and_tools",
        mode="before",
    )
    @classmethod
    def _coerce_lists(cls, value: Any) -> list[str]:
        return _string_list(value)

    def to_analysis(self) -> ContentAnalysis:
        return ContentAnalysis.model_validate(self.model_dump())


class CategoryClassifierOutput(CamelModel):
    """Decoded classification reply."""

    recommendations: list[ClassifiedCategory]
    content_analysis: ClassifiedContentAnalysis


class CategoryClassifierAgent(BaseAgent[CategoryClassifierInput, CategoryClassifierOutput]):
    """Classify post content against the available category list."""

    required_variables = ("title", "content", "content_type", "available_categories")

    @property
    def prompt_template(self) -> str:
        return CATEGORY_CLASSIFICATION_PROMPT

    @property
    def output_type(self) -> type[CategoryClassifierOutput]:
        return CategoryClassifierOutput

    def _build_variables(self, input_data: CategoryClassifierInput) -> dict[str, Any]:
        logger.info(
            "Building category classification prompt",
            extra={
                "content_length": len(input_data.content),
                "max_suggestions": input_data.max_suggestions,
                "excluded": len(input_data.existing_categories),
            },
        )
        return {
            "title": input_data.title,
            "content": input_data.content,
            "content_type": input_data.content_type,
            "available_categories": input_data.available_categories,
            "max_suggestions": input_data.max_suggestions,
            "existing_categories": ", ".join(input_data.existing_categories) or "None",
        }
