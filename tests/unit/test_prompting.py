"""Tests for prompt rendering, truncation and JSON extraction."""

from __future__ import annotations

import pytest

from blogai.agents.prompting import (
    extract_json_block,
    render_prompt,
    template_variables,
    truncate_content,
)
from blogai.core.exceptions import ParseError, PromptValidationError


def test_template_variables_keeps_first_use_order() -> None:
    template = "{{title}} by {{author}} - {{title}}"

    assert template_variables(template) == ["title", "author"]


def test_render_prompt_substitutes_every_placeholder() -> None:
    rendered = render_prompt("Title: {{title}} ({{count}})", {"title": "Hooks", "count": 3})

    assert rendered == "Title: Hooks (3)"


def test_render_prompt_lists_all_missing_variables() -> None:
    with pytest.raises(PromptValidationError) as exc_info:
        render_prompt("{{title}} {{content}} {{type}}", {"title": "x", "content": None})

    assert exc_info.value.missing == ["content", "type"]
    assert exc_info.value.code == "INVALID_REQUEST"
    assert exc_info.value.retryable is False


def test_render_prompt_rejects_blank_required_variable() -> None:
    with pytest.raises(PromptValidationError) as exc_info:
        render_prompt(
            "{{title}} {{content}}",
            {"title": "React", "content": "   "},
            required_non_blank=("title", "content"),
        )

    assert exc_info.value.missing == ["content"]


def test_render_prompt_allows_blank_optional_variable() -> None:
    assert render_prompt("[{{note}}]", {"note": ""}) == "[]"


def test_truncate_content_returns_short_content_unchanged() -> None:
    assert truncate_content("short text", 100) == "short text"


def test_truncate_content_hard_cut_appends_ellipsis() -> None:
    result = truncate_content("a" * 12_000, 10_000)

    assert result == "a" * 10_000 + "..."
    assert len(result) <= 10_003


def test_truncate_content_prefers_late_paragraph_boundary() -> None:
    content = "x" * 9_000 + "\n\n" + "y" * 2_000

    assert truncate_content(content, 10_000) == "x" * 9_000


def test_truncate_content_falls_back_to_sentence_boundary() -> None:
    content = "x" * 8_500 + ". " + "y" * 3_000

    assert truncate_content(content, 10_000) == "x" * 8_500 + "."


def test_truncate_content_ignores_early_boundaries() -> None:
    content = "Intro.\n\n" + "z" * 12_000

    result = truncate_content(content, 10_000)

    assert result.endswith("...")
    assert len(result) == 10_003


def test_extract_json_block_reads_fenced_block() -> None:
    reply = 'Here you go:\n```json\n{"recommendations": [], "ok": true}\n```\nThanks'

    assert extract_json_block(reply) == {"recommendations": [], "ok": True}


def test_extract_json_block_requires_fence_by_default() -> None:
    with pytest.raises(ParseError):
        extract_json_block('{"readabilityScore": 80}')


def test_extract_json_block_accepts_bare_object_when_allowed() -> None:
    reply = 'Analysis: {"readabilityScore": 80, "suggestions": ["a"]} done'

    assert extract_json_block(reply, allow_bare_object=True) == {
        "readabilityScore": 80,
        "suggestions": ["a"],
    }


def test_extract_json_block_rejects_malformed_json() -> None:
    with pytest.raises(ParseError) as exc_info:
        extract_json_block("```json\n{not json}\n```")

    assert "malformed" in exc_info.value.message


def test_extract_json_block_rejects_non_object_payload() -> None:
    with pytest.raises(ParseError):
        extract_json_block("```json\n[1, 2, 3]\n```")


def test_parse_errors_are_not_retryable() -> None:
    with pytest.raises(ParseError) as exc_info:
        extract_json_block("no json at all")

    assert exc_info.value.retryable is False
