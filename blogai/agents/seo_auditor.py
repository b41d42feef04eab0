"""SEO auditor agent: qualitative readability, keyword and structure scoring."""

from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import BaseModel, Field, field_validator

from blogai.agents.base_agent import BaseAgent
from blogai.schemas.base import CamelModel

logger = logging.getLogger(__name__)

SEO_AUDIT_PROMPT = """Analyze the following blog content from an SEO point of view.

## Content
{{content}}

## Metadata
{{metadata}}

Scoring criteria (each 0-100):
- readabilityScore: readability, sentence structure and paragraph layout
- keywordRelevance: keyword optimization and semantic relevance
- structureScore: heading structure and logical flow
- suggestions: concrete SEO improvements, at most three

Reply with one fenced json code block shaped like this example:
```json
{
  "readabilityScore": 80,
  "keywordRelevance": 75,
  "structureScore": 70,
  "suggestions": ["Improvement 1", "Improvement 2", "Improvement 3"]
}
```
"""


class SeoAuditInput(BaseModel):
    """Input payload for the qualitative SEO audit."""

    content: str
    metadata: dict[str, Any] | None = None


def _score(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int | float):
        return 0
    return int(max(0, min(100, round(value))))


class SeoAuditOutput(CamelModel):
    """Decoded audit reply with scores clamped to 0-100."""

    readability_score: int = Field(default=0, ge=0, le=100)
    keyword_relevance: int = Field(default=0, ge=0, le=100)
    structure_score: int = Field(default=0, ge=0, le=100)
    suggestions: list[str] = Field(default_factory=list)

    @field_validator("readability_score", "keyword_relevance", "structure_score", mode="before")
    @classmethod
    def _clamp_score(cls, value: Any) -> int:
        return _score(value)

    @field_validator("suggestions", mode="before")
    @classmethod
    def _coerce_suggestions(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [str(item).strip() for item in value if item is not None and str(item).strip()]


class SeoAuditorAgent(BaseAgent[SeoAuditInput, SeoAuditOutput]):
    """Judge readability, keyword relevance and structure of a post."""

    required_variables = ("content",)
    allow_bare_json = True

    def __init__(self, generator, *, max_content_length: int = 2000) -> None:
        super().__init__(generator)
        self.max_content_length = max_content_length

    @property
    def prompt_template(self) -> str:
        return SEO_AUDIT_PROMPT

    @property
    def output_type(self) -> type[SeoAuditOutput]:
        return SeoAuditOutput

    def _build_variables(self, input_data: SeoAuditInput) -> dict[str, Any]:
        content = input_data.content[: self.max_content_length]
        if len(input_data.content) > self.max_content_length:
            content += "..."
        metadata = (
            json.dumps(input_data.metadata, indent=2, ensure_ascii=False)
            if input_data.metadata
            else "None"
        )
        return {"content": content, "metadata": metadata}
