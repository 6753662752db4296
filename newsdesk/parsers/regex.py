"""
Heuristic regex extractor.

Last-resort parser for model answers that contain no usable JSON. It works
on the raw text only and makes no external calls, so the patterns can be
tested in isolation.
"""

import logging
import re
from typing import List, Optional

from newsdesk.models import Article
from newsdesk.parsers.normalize import MAX_ARTICLES, now_iso

logger = logging.getLogger(__name__)

# Tried in order; the first pattern with any match wins.
ARTICLE_PATTERNS = [
    # Title: ... Description: ... Date: ... URL: ...
    re.compile(
        r"Title:\s*([^\n]+)\s*Description:\s*([^\n]+)\s*Date:\s*([^\n]+)\s*URL:\s*([^\n\s]+)",
        re.IGNORECASE,
    ),
    # 1. Title - Description (Date) [URL]
    re.compile(
        r"\d+\.\s*([^-\n]+)\s*-\s*([^\n(]+)\s*\(([^)]+)\)\s*\[([^\]]+)\]",
        re.IGNORECASE,
    ),
    # ## Title Description Date: ... Source: ...
    re.compile(
        r"##\s*([^\n]+)\s*([^\n]+)\s*Date:\s*([^\n]+)\s*Source:\s*([^\n]+)",
        re.IGNORECASE,
    ),
]

URL_PATTERN = re.compile(r"https?://[^\s\])}]+", re.IGNORECASE)
# Trailing run of sentence text right before a URL
TITLE_BEFORE_URL_PATTERN = re.compile(r"([^.\n]{10,100})\s*$")

MAX_URL_ARTICLES = 5
TITLE_WINDOW_CHARS = 200


def _group(match: "re.Match[str]", index: int, default: str) -> str:
    value = (match.group(index) or "").strip()
    return value or default


def _match_patterns(text: str, source: str) -> List[Article]:
    for pattern in ARTICLE_PATTERNS:
        articles: List[Article] = []
        for match in pattern.finditer(text):
            articles.append(
                Article(
                    title=_group(match, 1, "Untitled"),
                    description=_group(match, 2, "No description available"),
                    date=_group(match, 3, now_iso()),
                    source=source,
                    canonical_url=_group(match, 4, "#"),
                )
            )
            if len(articles) >= MAX_ARTICLES:
                break
        if articles:
            return articles
    return []


def guess_title(text: str, url_index: int) -> Optional[str]:
    """Looks for title-like text in the window just before a URL."""
    window = text[max(0, url_index - TITLE_WINDOW_CHARS) : url_index]
    match = TITLE_BEFORE_URL_PATTERN.search(window)
    if not match:
        return None
    return match.group(1).strip() or None


def _articles_from_urls(text: str, source: str, topic: str) -> List[Article]:
    articles: List[Article] = []
    urls = URL_PATTERN.findall(text)[:MAX_URL_ARTICLES]
    for i, url in enumerate(urls, start=1):
        title = guess_title(text, text.index(url))
        articles.append(
            Article(
                title=title or f"{topic} News Article {i}",
                description=f"News article about {topic} from {source}",
                date=now_iso(),
                source=source,
                canonical_url=url,
            )
        )
    return articles


def extract_articles_with_regex(text: str, source: str, topic: str) -> List[Article]:
    """Strategy 5: pattern-based extraction with a bare-URL fallback."""
    source = source or "Unknown Source"
    articles = _match_patterns(text, source)
    if articles:
        return articles

    articles = _articles_from_urls(text, source, topic)
    if articles:
        logger.info("No article patterns matched; built %d articles from URLs", len(articles))
    return articles
