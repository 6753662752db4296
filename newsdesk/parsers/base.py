"""
Base classes and interfaces for response parsers.

This module defines the contract that every extraction strategy must follow.
"""

from typing import Protocol, List
from newsdesk.models import Article


class ExtractionStrategy(Protocol):
    """
    Protocol for extraction strategies.

    A strategy turns one raw model response into a list of normalized
    Article objects. An empty list means "try the next strategy"; a strategy
    may also raise, which the pipeline treats the same way.
    """

    def __call__(self, response: str, source: str, topic: str) -> List[Article]:
        """Extracts articles from a model response."""
