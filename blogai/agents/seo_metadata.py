"""SEO metadata agent: drafts titles, descriptions, keywords and a slug for a post."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field, field_validator

from blogai.agents.base_agent import BaseAgent
from blogai.core.exceptions import ParseError
from blogai.schemas.base import CamelModel

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = (
    "metaTitle",
    "metaDescription",
    "keywords",
    "openGraphTitle",
    "openGraphDescription",
    "suggestedSlug",
)

SEO_METADATA_PROMPT = """You are an SEO expert for a technical blog.
Analyze the post below and write optimized metadata for it.

## Post
Title: {{title}}
Content format: {{content_type}}
Language: {{language}}
Target keywords: {{target_keywords}}

## Content
{{content}}

## Requirements
1. Meta title: at most {{max_title_length}} characters, includes the core keyword, invites the click
2. Meta description: at most {{max_description_length}} characters, summarizes the post and works keywords in naturally
3. Keywords: 3-5 primary and up to 8 secondary keywords (Korean and English may be mixed)
4. Open Graph title: tuned for social sharing
5. Open Graph description: social sharing summary of 100-200 characters
6. URL slug: lowercase letters, digits and hyphens only
7. Schema markup requested: {{include_schema}}

## Optimization guidelines
- Match the search intent of the post
- Use natural language and never stuff keywords
- Reflect the expertise of a technical blog

## Response format
Reply with one fenced json code block shaped like this example:
```json
{
  "metaTitle": "Optimized meta title",
  "metaDescription": "Optimized meta description",
  "keywords": ["primary keyword", "secondary keyword"],
  "openGraphTitle": "Title for social sharing",
  "openGraphDescription": "Description for social sharing",
  "suggestedSlug": "seo-friendly-url-slug",
  "reasoning": "Why these choices help the post rank"
}
```
"""


class SeoMetadataInput(BaseModel):
    """Input payload for SEO metadata generation."""

    content: str
    title: str
    content_type: str
    target_keywords: list[str] = Field(default_factory=list)
    language: str = "ko"
    max_title_length: int = 60
    max_description_length: int = 160
    include_schema: bool = False


class SeoMetadataOutput(CamelModel):
    """Decoded metadata reply."""

    meta_title: str
    meta_description: str
    keywords: list[str] = Field(default_factory=list)
    open_graph_title: str
    open_graph_description: str
    suggested_slug: str
    reasoning: str = ""

    @field_validator(
        "meta_title",
        "meta_description",
        "open_graph_title",
        "open_graph_description",
        "suggested_slug",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if isinstance(value, int | float) and not isinstance(value, bool):
            return str(value)
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _coerce_keywords(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item).strip() for item in value if item is not None and str(item).strip()]

    @field_validator("reasoning", mode="before")
    @classmethod
    def _coerce_reasoning(cls, value: Any) -> str:
        return str(value) if value is not None else ""


def _is_blank(value: Any) -> bool:
    return value is None or value is False or (isinstance(value, str) and not value.strip())


class SeoMetadataAgent(BaseAgent[SeoMetadataInput, SeoMetadataOutput]):
    """Generate SEO metadata for a post."""

    required_variables = ("content", "title", "content_type")

    @property
    def prompt_template(self) -> str:
        return SEO_METADATA_PROMPT

    @property
    def output_type(self) -> type[SeoMetadataOutput]:
        return SeoMetadataOutput

    def _build_variables(self, input_data: SeoMetadataInput) -> dict[str, Any]:
        logger.info(
            "Building SEO metadata prompt",
            extra={
                "content_length": len(input_data.content),
                "language": input_data.language,
                "target_keywords": len(input_data.target_keywords),
            },
        )
        return {
            "content": input_data.content,
            "title": input_data.title,
            "content_type": input_data.content_type,
            "target_keywords": ", ".join(input_data.target_keywords) or "None",
            "language": input_data.language,
            "max_title_length": input_data.max_title_length,
            "max_description_length": input_data.max_description_length,
            "include_schema": "true" if input_data.include_schema else "false",
        }

    def _decode(self, payload: dict[str, Any]) -> SeoMetadataOutput:
        for field in REQUIRED_FIELDS:
            if _is_blank(payload.get(field)):
                raise ParseError(f"Missing required field: {field}", {"field": field})
        return super()._decode(payload)
