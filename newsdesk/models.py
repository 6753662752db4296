"""
Data models for the Property News Desk application.
"""

from typing import TypedDict, Optional


class Article(TypedDict):
    """Type definition for an extracted (not yet persisted) article."""

    title: str
    description: str
    date: str  # ISO-8601 preferred, parsed at persistence time
    source: str
    canonical_url: str  # Dedup key in the article store


class PromptTemplate(TypedDict):
    """Type definition for a stored prompt template."""

    name: str
    template: str
    description: Optional[str]
    is_active: bool
