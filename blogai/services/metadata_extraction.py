"""Pure text analysis over raw HTML or Markdown post content."""

from __future__ import annotations

import logging
import math
import re
from collections import Counter
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "No title"
DEFAULT_DESCRIPTION = "No description"
WORDS_PER_MINUTE = 200
MAX_DESCRIPTION_LENGTH = 160
MAX_KEYWORDS = 8

STOP_WORDS = frozenset(
    {
        # Korean
        "그리고",
        "하지만",
        "그런데",
        "그래서",
        "또한",
        "이것",
        "그것",
        "저것",
        "있다",
        "없다",
        "하다",
        "되다",
        "이다",
        "아니다",
        "같다",
        "다르다",
        "많다",
        "적다",
        # English
        "the",
        "and",
        "or",
        "but",
        "in",
        "on",
        "at",
        "to",
        "for",
        "of",
        "with",
        "by",
        "this",
        "that",
        "these",
        "those",
        "is",
        "are",
        "was",
        "were",
        "be",
        "been",
        "being",
    }
)

_HTML_TAG = re.compile(r"<[^>]*>")
_HTML_ENTITY = re.compile(r"&[a-zA-Z0-9#]+;")
_HTML_H1 = re.compile(r"<h1[^>]*>(.*?)</h1>", re.IGNORECASE)
_HTML_H2_TO_H6 = re.compile(r"<h[2-6][^>]*>(.*?)</h[2-6]>", re.IGNORECASE)
_MARKDOWN_H1 = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_HTML_HEADINGS = {
    level: re.compile(rf"<h{level}[^>]*>(.*?)</h{level}>", re.IGNORECASE) for level in (1, 2, 3)
}
_HTML_IMG = re.compile(r"<img[^>]*>", re.IGNORECASE)
_IMG_SRC = re.compile(r"src\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_IMG_ALT = re.compile(r"alt\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_IMG_TITLE = re.compile(r"title\s*=\s*[\"']([^\"']*)[\"']", re.IGNORECASE)
_HTML_LINK = re.compile(r"<a[^>]*href\s*=\s*[\"']([^\"']*)[\"'][^>]*>", re.IGNORECASE)
_MARKDOWN_IMAGE = re.compile(r"!\[([^\]]*)\]\(([^)]*)\)")
_MARKDOWN_LINK = re.compile(r"(?<!!)\[([^\]]*)\]\(([^)]*)\)")
_EXTERNAL_URL = re.compile(r"^https?://")
_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_NON_WORD = re.compile(r"[^\w\s가-힣]")
_HANGUL_CHAR = re.compile(r"[가-힣]")
_LATIN_WORD = re.compile(r"[a-zA-Z]+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")

# Applied in order; code fences go before inline code and images before links.
_MARKDOWN_STRIP_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"```[\s\S]*?```"), ""),
    (re.compile(r"#{1,6}\s+"), ""),
    (re.compile(r"\*\*([^*]+)\*\*"), r"\1"),
    (re.compile(r"\*([^*]+)\*"), r"\1"),
    (re.compile(r"`([^`]+)`"), r"\1"),
    (re.compile(r"!\[([^\]]*)\]\([^)]+\)"), r"\1"),
    (re.compile(r"\[([^\]]+)\]\([^)]+\)"), r"\1"),
    (re.compile(r"^[-*+]\s+", re.MULTILINE), ""),
    (re.compile(r"^\d+\.\s+", re.MULTILINE), ""),
    (re.compile(r"^>\s+", re.MULTILINE), ""),
    (re.compile(r"---+"), ""),
)


@dataclass
class Headings:
    h1: list[str] = field(default_factory=list)
    h2: list[str] = field(default_factory=list)
    h3: list[str] = field(default_factory=list)


@dataclass
class ImageInfo:
    src: str
    alt: str = ""
    title: str | None = None


@dataclass
class Links:
    internal: list[str] = field(default_factory=list)
    external: list[str] = field(default_factory=list)


@dataclass
class ExtractedMetadata:
    """Everything the extractors can read off a post in one pass."""

    title: str = DEFAULT_TITLE
    description: str = DEFAULT_DESCRIPTION
    keywords: list[str] = field(default_factory=list)
    headings: Headings = field(default_factory=Headings)
    images: list[ImageInfo] = field(default_factory=list)
    links: Links = field(default_factory=Links)
    text_content: str = ""
    word_count: int = 0
    reading_time: int = 1


@dataclass
class KeywordFrequency:
    keyword: str
    count: int
    density: float


@dataclass
class TextAnalysis:
    """Keyword density and sentence statistics for a post."""

    keyword_density: dict[str, float] = field(default_factory=dict)
    top_keywords: list[KeywordFrequency] = field(default_factory=list)
    sentence_count: int = 0
    paragraph_count: int = 0
    average_sentence_length: int = 0
    readability_score: int = 0


def clean_text(text: str) -> str:
    """Drop inline tags and HTML entities."""
    return _HTML_ENTITY.sub("", _HTML_TAG.sub("", text)).strip()


def is_external_url(url: str) -> bool:
    return bool(_EXTERNAL_URL.match(url))


def _split_sentences(text: str) -> list[str]:
    return [sentence.strip() for sentence in _SENTENCE_SPLIT.split(text) if sentence.strip()]


def _tokenize(text: str) -> list[str]:
    return [word for word in _NON_WORD.sub(" ", text.lower()).split() if len(word) > 2]


def extract_title(content: str) -> str:
    """Title from `<h1>`, then a Markdown `# ` line, then any `<h2>`-`<h6>`."""
    for pattern in (_HTML_H1, _MARKDOWN_H1, _HTML_H2_TO_H6):
        match = pattern.search(content)
        if match:
            return clean_text(match.group(1))
    return DEFAULT_TITLE


def extract_text_content(content: str) -> str:
    """Plain text with HTML tags and Markdown syntax removed."""
    text = _HTML_TAG.sub(" ", content)
    for pattern, replacement in _MARKDOWN_STRIP_RULES:
        text = pattern.sub(replacement, text)
    return " ".join(text.split())


def extract_description(content: str) -> str:
    """First three sentences (five when that is too short), capped at 160 chars."""
    sentences = _split_sentences(extract_text_content(content))
    if not sentences:
        return DEFAULT_DESCRIPTION

    description = ". ".join(sentences[:3]).strip()
    if len(description) < 50:
        description = ". ".join(sentences[:5]).strip()
    if len(description) > MAX_DESCRIPTION_LENGTH:
        return description[: MAX_DESCRIPTION_LENGTH - 3] + "..."
    return description


def extract_keywords(content: str) -> list[str]:
    """Frequent body words, with title words moved to the front."""
    words = [word for word in _tokenize(extract_text_content(content)) if word not in STOP_WORDS]
    ranked = [word for word, _ in Counter(words).most_common(10)]

    title_words: list[str] = []
    title = extract_title(content)
    for word in _tokenize(title) if title != DEFAULT_TITLE else []:
        if word not in STOP_WORDS and word not in ranked and word not in title_words:
            title_words.append(word)

    return (title_words + ranked)[:MAX_KEYWORDS]


def extract_headings(content: str) -> Headings:
    headings = Headings()
    for level, pattern in _HTML_HEADINGS.items():
        getattr(headings, f"h{level}").extend(clean_text(text) for text in pattern.findall(content))

    for line in content.split("\n"):
        stripped = line.strip()
        if stripped.startswith("# "):
            headings.h1.append(clean_text(stripped[2:]))
        elif stripped.startswith("## "):
            headings.h2.append(clean_text(stripped[3:]))
        elif stripped.startswith("### "):
            headings.h3.append(clean_text(stripped[4:]))
    return headings


def extract_images(content: str) -> list[ImageInfo]:
    images: list[ImageInfo] = []
    for tag in _HTML_IMG.findall(content):
        src = _IMG_SRC.search(tag)
        if not src:
            continue
        alt = _IMG_ALT.search(tag)
        title = _IMG_TITLE.search(tag)
        images.append(
            ImageInfo(
                src=src.group(1),
                alt=alt.group(1) if alt else "",
                title=title.group(1) if title else None,
            )
        )

    images.extend(ImageInfo(src=src, alt=alt) for alt, src in _MARKDOWN_IMAGE.findall(content))
    return images


def extract_links(content: str) -> Links:
    """HTML and Markdown links split by scheme, each list deduplicated in order."""
    urls = _HTML_LINK.findall(content) + [url for _, url in _MARKDOWN_LINK.findall(content)]
    links = Links()
    for url in urls:
        bucket = links.external if is_external_url(url) else links.internal
        if url not in bucket:
            bucket.append(url)
    return links


def count_words(text: str) -> int:
    """Two Hangul syllables count as one word; Latin words count once each."""
    if not text.strip():
        return 0
    return math.ceil(len(_HANGUL_CHAR.findall(text)) / 2) + len(_LATIN_WORD.findall(text))


def calculate_reading_time(word_count: int) -> int:
    """Minutes to read at 200 words per minute, never less than one."""
    return max(1, math.ceil(word_count / WORDS_PER_MINUTE))


def calculate_readability_score(
    word_count: int,
    sentence_count: int,
    average_sentence_length: float,
) -> int:
    if sentence_count == 0 or word_count == 0:
        return 0

    score = 100.0
    if average_sentence_length > 20:
        score -= (average_sentence_length - 20) * 2
    if average_sentence_length < 5:
        score -= (5 - average_sentence_length) * 3
    if sentence_count < 3:
        score -= 20
    return max(0, min(100, round(score)))


def analyze_content(content: str) -> TextAnalysis:
    text = extract_text_content(content)
    words = _tokenize(text)
    counts = Counter(words)
    total_words = len(words)

    density = {word: count / total_words * 100 for word, count in counts.items()}
    top_keywords = [
        KeywordFrequency(keyword=word, count=count, density=density[word])
        for word, count in counts.most_common(10)
    ]

    sentence_count = len(_split_sentences(text))
    average_sentence_length = round(total_words / sentence_count) if sentence_count else 0

    return TextAnalysis(
        keyword_density=density,
        top_keywords=top_keywords,
        sentence_count=sentence_count,
        paragraph_count=len(_PARAGRAPH_SPLIT.split(content)),
        average_sentence_length=average_sentence_length,
        readability_score=calculate_readability_score(
            total_words, sentence_count, average_sentence_length
        ),
    )


def extract_all_metadata(content: str) -> ExtractedMetadata:
    """Run every extractor; fall back to an empty record if any of them fails."""
    try:
        text_content = extract_text_content(content)
        word_count = count_words(text_content)
        return ExtractedMetadata(
            title=extract_title(content),
            description=extract_description(content),
            keywords=extract_keywords(content),
            headings=extract_headings(content),
            images=extract_images(content),
            links=extract_links(content),
            text_content=text_content,
            word_count=word_count,
            reading_time=calculate_reading_time(word_count),
        )
    except (TypeError, re.error) as exc:
        logger.warning("Metadata extraction failed", extra={"error": repr(exc)})
        return ExtractedMetadata()
