"""
Response-to-article extraction pipeline.

A model answer is run through an ordered chain of strategies, each more
lossy than the previous one. The first strategy that yields at least one
valid article wins; a strategy that raises is logged and skipped. The
pipeline itself never raises and returns an empty list when nothing works.
"""

import logging
from typing import List, Optional, Tuple

from newsdesk.models import Article
from newsdesk.parsers.base import ExtractionStrategy
from newsdesk.parsers.json_parser import (
    find_json_array,
    match_json_array,
    match_json_objects,
    parse_full_response,
)
from newsdesk.parsers.normalize import validate_and_clean
from newsdesk.parsers.regex import extract_articles_with_regex
from newsdesk.prompts import build_conversion_prompt
from newsdesk.services.llm import NewsSearchClient

logger = logging.getLogger(__name__)


class NewsExtractor:
    """Runs the extraction strategies in order for one model response."""

    def __init__(self, search_client: Optional[NewsSearchClient] = None):
        self.search_client = search_client

    @property
    def strategies(self) -> List[Tuple[str, ExtractionStrategy]]:
        """The strategy chain, most structured first."""
        return [
            ("JSON array match", match_json_array),
            ("multiple JSON objects", match_json_objects),
            ("full JSON parse", parse_full_response),
            ("AI conversion", self._convert_with_llm),
            ("regex extraction", extract_articles_with_regex),
        ]

    def _convert_with_llm(self, response: str, source: str, topic: str) -> List[Article]:
        """Asks the model to rewrite its own answer as a strict JSON array."""
        if self.search_client is None:
            logger.info("No search client configured, skipping AI conversion.")
            return []

        prompt = build_conversion_prompt(response, source, topic)
        converted = self.search_client.fetch_news(prompt)
        parsed = find_json_array(converted or "")
        if parsed is None:
            return []
        return validate_and_clean(parsed, source)

    def extract(self, response: str, source: str, topic: str) -> List[Article]:
        """Returns the articles found by the first successful strategy."""
        logger.info("Processing response for %s - %s", source, topic)
        if not isinstance(response, str):
            logger.error("Response for %s - %s is not text: %r", source, topic, response)
            return []

        for number, (name, strategy) in enumerate(self.strategies, start=1):
            try:
                articles = strategy(response, source, topic)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.info("Strategy %d (%s) failed: %s", number, name, e)
                continue
            if articles:
                logger.info(
                    "Strategy %d success: found %d articles via %s",
                    number,
                    len(articles),
                    name,
                )
                return articles

        logger.error("All extraction strategies failed for %s - %s", source, topic)
        return []


def extract_news_from_response(
    response: str,
    source: str,
    topic: str,
    search_client: Optional[NewsSearchClient] = None,
) -> List[Article]:
    """Convenience wrapper around NewsExtractor.extract."""
    return NewsExtractor(search_client).extract(response, source, topic)
