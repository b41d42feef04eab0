"""Prompt rendering, content truncation and JSON extraction for model replies."""

from __future__ import annotations

import json
import re
from collections.abc import Iterable, Mapping
from typing import Any

from blogai.core.exceptions import ParseError, PromptValidationError

PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")
FENCED_JSON_PATTERN = re.compile(r"```json\s*([\s\S]*?)\s*```")
BARE_OBJECT_PATTERN = re.compile(r"\{[\s\S]*\}")

TRUNCATION_SUFFIX = "..."
# Soft cut points are only used when they fall in the last 20% of the limit.
SOFT_CUT_RATIO = 0.8


def template_variables(template: str) -> list[str]:
    """Return placeholder names referenced by a template, in first-use order."""
    seen: dict[str, None] = {}
    for match in PLACEHOLDER_PATTERN.finditer(template):
        seen.setdefault(match.group(1), None)
    return list(seen)


def render_prompt(
    template: str,
    variables: Mapping[str, Any],
    *,
    required_non_blank: Iterable[str] = (),
) -> str:
    """Substitute `{{name}}` placeholders.

    Every placeholder in the template must have a non-None value, and names in
    `required_non_blank` must also be non-blank. Validation happens before any
    substitution so a bad variable set never reaches the model.

    Raises:
        PromptValidationError: listing every missing variable.
    """
    missing = [name for name in template_variables(template) if variables.get(name) is None]
    for name in required_non_blank:
        value = variables.get(name)
        if value is not None and not str(value).strip() and name not in missing:
            missing.append(name)
    if missing:
        raise PromptValidationError(missing)

    return PLACEHOLDER_PATTERN.sub(lambda match: str(variables[match.group(1)]), template)


def truncate_content(content: str, max_length: int) -> str:
    """Shorten content for a prompt, preferring paragraph then sentence boundaries.

    The result is at most `max_length + 3` characters long.
    """
    if len(content) <= max_length:
        return content

    truncated = content[:max_length]
    last_paragraph = truncated.rfind("\n\n")
    last_sentence = truncated.rfind(".")
    soft_floor = max_length * SOFT_CUT_RATIO

    if last_paragraph > soft_floor:
        return truncated[:last_paragraph]
    if last_sentence > soft_floor:
        return truncated[: last_sentence + 1]
    return truncated + TRUNCATION_SUFFIX


def extract_json_block(text: str, *, allow_bare_object: bool = False) -> dict[str, Any]:
    """Decode the first ```json fenced block of a model reply into a dict.

    Args:
        text: Raw model reply.
        allow_bare_object: Fall back to the outermost `{...}` span when the
            reply has no fence.

    Raises:
        ParseError: when no block is found, it is not valid JSON, or it is not
            a JSON object.
    """
    match = FENCED_JSON_PATTERN.search(text)
    if match:
        raw = match.group(1)
    elif allow_bare_object and (bare := BARE_OBJECT_PATTERN.search(text)):
        raw = bare.group(0)
    else:
        raise ParseError("No JSON block found in AI response", {"reply_length": len(text)})

    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ParseError(f"AI response JSON is malformed: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise ParseError("AI response JSON must be an object")
    return payload
