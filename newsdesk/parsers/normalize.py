"""
Article normalization.

Converts heterogeneous candidate objects pulled out of model output into
the canonical Article shape, dropping entries without a title.
"""

import datetime
from typing import Any, Dict, List, Optional, Sequence

from newsdesk.models import Article

MAX_ARTICLES = 10

# First non-blank key wins
_TITLE_KEYS = ("title", "headline")
_DESCRIPTION_KEYS = ("description", "summary", "content")
_DATE_KEYS = ("date", "published_date", "publishedAt", "created_at")
_URL_KEYS = ("canonical_url", "url", "link", "href")


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.datetime.now(datetime.timezone.utc).isoformat()


def _text(value: Any) -> str:
    """Stripped string form of a field value; empty for missing values."""
    if not value:
        return ""
    return (value if isinstance(value, str) else str(value)).strip()


def _first(candidate: Dict[str, Any], keys: Sequence[str], default: str) -> str:
    for key in keys:
        value = _text(candidate.get(key))
        if value:
            return value
    return default


def has_title(candidate: Any) -> bool:
    """True when the candidate is a dict with a non-blank title or headline."""
    return isinstance(candidate, dict) and any(
        _text(candidate.get(k)) for k in _TITLE_KEYS
    )


def validate_and_clean(candidates: Any, default_source: Optional[str]) -> List[Article]:
    """Maps raw candidates onto Article, filling defaults and capping the list."""
    if not isinstance(candidates, list):
        return []

    articles: List[Article] = []
    for candidate in candidates:
        if not has_title(candidate):
            continue
        articles.append(
            Article(
                title=_first(candidate, _TITLE_KEYS, "Untitled"),
                description=_first(
                    candidate, _DESCRIPTION_KEYS, "No description available"
                ),
                date=_first(candidate, _DATE_KEYS, now_iso()),
                source=_first(
                    candidate, ("source",), default_source or "Unknown Source"
                ),
                canonical_url=_first(candidate, _URL_KEYS, "#"),
            )
        )
        if len(articles) >= MAX_ARTICLES:
            break
    return articles
