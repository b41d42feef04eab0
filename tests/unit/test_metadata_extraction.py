"""Tests for deterministic metadata extraction from Markdown and HTML."""

from __future__ import annotations

from blogai.services.metadata_extraction import (
    DEFAULT_DESCRIPTION,
    DEFAULT_TITLE,
    ExtractedMetadata,
    analyze_content,
    calculate_readability_score,
    calculate_reading_time,
    count_words,
    extract_all_metadata,
    extract_description,
    extract_headings,
    extract_images,
    extract_keywords,
    extract_links,
    extract_text_content,
    extract_title,
    is_external_url,
)


def test_extract_title_from_markdown_heading() -> None:
    assert extract_title("# Hello\n\nbody") == "Hello"


def test_extract_title_prefers_html_h1() -> None:
    assert extract_title("<h1>From <em>HTML</em></h1>\n# From Markdown") == "From HTML"


def test_extract_title_falls_back_to_lower_headings() -> None:
    assert extract_title("intro <h2>X</h2> more") == "X"


def test_extract_title_default_when_no_heading() -> None:
    assert extract_title("plain text") == DEFAULT_TITLE


def test_extract_text_content_strips_markup() -> None:
    content = "# Title\n\n**bold** and `code` see [docs](https://react.dev)\n\n- item"

    assert extract_text_content(content) == "Title bold and code see docs item"


def test_extract_description_truncates_to_160_chars() -> None:
    sentence = "This is a fairly long sentence about React hooks and state in modern apps. "
    description = extract_description(sentence * 4)

    assert len(description) == 160
    assert description.endswith("...")


def test_extract_description_keeps_short_text() -> None:
    description = extract_description("Hello world. Short.")

    assert description == "Hello world. Short"
    assert not description.endswith("...")


def test_extract_description_default_for_empty_content() -> None:
    assert extract_description("") == DEFAULT_DESCRIPTION


def test_extract_keywords_ranks_frequent_words() -> None:
    content = "# Python Guide\n\npython python code code code testing"

    assert extract_keywords(content) == ["python", "code", "guide", "testing"]


def test_extract_keywords_skips_stop_words() -> None:
    keywords = extract_keywords("the the the and and react react")

    assert keywords == ["react"]


def test_extract_headings_counts_html_and_markdown() -> None:
    content = "# One\n## Two\n## Three\n### Four\n<h2>Five</h2>"

    headings = extract_headings(content)

    assert headings.h1 == ["One"]
    assert headings.h2 == ["Five", "Two", "Three"]
    assert headings.h3 == ["Four"]


def test_extract_images_reads_html_and_markdown() -> None:
    images = extract_images('<img src="/a.png" alt="A" title="T"> ![B](/b.png) <img alt="x">')

    assert [(image.src, image.alt, image.title) for image in images] == [
        ("/a.png", "A", "T"),
        ("/b.png", "B", None),
    ]


def test_extract_links_classifies_and_dedupes() -> None:
    content = (
        '<a href="https://react.dev">React</a> '
        "[Docs](https://react.dev) [About](/about) [About again](/about) "
        "![diagram](/diagram.png)"
    )

    links = extract_links(content)

    assert links.external == ["https://react.dev"]
    assert links.internal == ["/about"]


def test_is_external_url() -> None:
    assert is_external_url("http://example.com")
    assert is_external_url("https://example.com")
    assert not is_external_url("/posts/1")
    assert not is_external_url("mailto:me@example.com")


def test_count_words_mixes_hangul_and_latin() -> None:
    assert count_words("") == 0
    assert count_words("Hello world") == 2
    assert count_words("안녕하세요") == 3
    assert count_words("React 훅") == 2


def test_reading_time_is_at_least_one_minute() -> None:
    assert calculate_reading_time(0) == 1
    assert calculate_reading_time(400) == 2
    assert calculate_reading_time(401) == 3


def test_readability_score_penalties() -> None:
    assert calculate_readability_score(0, 0, 0) == 0
    assert calculate_readability_score(100, 5, 20) == 100
    assert calculate_readability_score(100, 2, 30) == 60
    assert calculate_readability_score(10, 5, 2) == 91


def test_analyze_content_reports_density_and_sentences() -> None:
    content = "React hooks are great. React state is simple.\n\nHooks replace classes."

    analysis = analyze_content(content)

    assert analysis.sentence_count == 3
    assert analysis.paragraph_count == 2
    assert analysis.top_keywords[0].keyword in {"react", "hooks"}
    assert analysis.top_keywords[0].count == 2
    assert round(sum(analysis.keyword_density.values())) == 100


def test_extract_all_metadata_combines_extractors() -> None:
    content = "# React Hooks\n\nHooks let you use state. [Docs](https://react.dev)"

    metadata = extract_all_metadata(content)

    assert metadata.title == "React Hooks"
    assert metadata.headings.h1 == ["React Hooks"]
    assert metadata.links.external == ["https://react.dev"]
    assert metadata.word_count == count_words(metadata.text_content)
    assert metadata.reading_time == 1


def test_extract_all_metadata_returns_defaults_on_bad_input() -> None:
    metadata = extract_all_metadata(None)  # type: ignore[arg-type]

    assert metadata == ExtractedMetadata()
