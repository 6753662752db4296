"""
Property News Ingestion
This script prompts an LLM search API for news about each active topic on each
active source, extracts structured articles from the free-text answers,
deduplicates them against Firestore and stores the new ones.

There is no retry inside a run. A pair that fails is simply picked up again
by the next scheduled run, and already stored URLs are skipped.
"""

import datetime
import json
import logging
import os
import sys
from typing import Any, Callable, Dict, List, Optional, TypedDict, TypeVar, cast

from newsdesk.extraction import NewsExtractor
from newsdesk.models import Article
from newsdesk.prompts import (
    DEFAULT_PROMPT_TEMPLATE,
    DEFAULT_SOURCES,
    DEFAULT_TOPICS,
    build_prompt,
    enhance_prompt_for_json,
)
from newsdesk.services.db import ArticleStore
from newsdesk.services.llm import DEFAULT_GEMINI_MODEL, LLMService, NewsSearchClient
from newsdesk.services.sonar import DEFAULT_SONAR_MODEL, SonarService


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

T = TypeVar("T")


def load_config(config_filename: str = "config.json") -> Dict[str, Any]:
    """Loads configuration from a JSON file."""
    # Build absolute path relative to this script
    base_dir = os.path.dirname(os.path.abspath(__file__))
    config_path = os.path.join(base_dir, config_filename)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        logger.warning("Config file not found at %s. Using empty config.", config_path)
        return {}


CONFIG: Dict[str, Any] = load_config()

# Env Vars
GEMINI_API_KEY: Optional[str] = os.environ.get("GEMINI_KEY")
SONAR_API_KEY: Optional[str] = os.environ.get("SONAR_API_KEY")
GCP_PROJECT_ID: Optional[str] = os.environ.get("GCP_PROJECT_ID")


class IngestionConfig(TypedDict):
    """Fallbacks used when nothing is marked active in the store."""

    default_topics: List[str]
    default_sources: List[str]
    default_prompt_template: str


class IngestionSummary(TypedDict):
    """Counters for one ingestion run."""

    pairs: int
    failed_pairs: int
    extracted: int
    inserted: int
    duplicates: int
    errors: int


def build_ingestion_config(config: Dict[str, Any]) -> IngestionConfig:
    """Merges file configuration over the built-in defaults."""
    return IngestionConfig(
        default_topics=list(config.get("default_topics") or DEFAULT_TOPICS),
        default_sources=list(config.get("default_sources") or DEFAULT_SOURCES),
        default_prompt_template=cast(
            str, config.get("default_prompt_template") or DEFAULT_PROMPT_TEMPLATE
        ),
    )


def _read_or_default(what: str, read: Callable[[], Optional[T]], default: T) -> T:
    """Reads a configuration value from the store, substituting the default."""
    try:
        value = read()
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error fetching active %s: %s", what, e)
        value = None
    if not value:
        logger.info("No active %s configured, using defaults.", what)
        return default
    return value


def _persist_articles(
    store: ArticleStore, articles: List[Article], topic: str, summary: IngestionSummary
) -> None:
    for article in articles:
        url = article["canonical_url"]
        try:
            if store.article_exists(url):
                logger.info("Skipping duplicate: %s", url)
                summary["duplicates"] += 1
                continue
            store.insert_article(article, topic)
            summary["inserted"] += 1
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Failed to store article %s: %s", url, e)
            summary["errors"] += 1


def run_ingestion(
    store: ArticleStore,
    search_client: NewsSearchClient,
    config: Optional[IngestionConfig] = None,
) -> IngestionSummary:
    """Fetches, extracts and stores news for every active topic/source pair."""
    config = config or build_ingestion_config({})
    summary = IngestionSummary(
        pairs=0, failed_pairs=0, extracted=0, inserted=0, duplicates=0, errors=0
    )

    # Liveness signal for the dashboard, recorded before anything can fail
    try:
        store.record_last_execution_time(datetime.datetime.now(datetime.timezone.utc))
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.error("Error updating last execution time: %s", e)

    topics = _read_or_default("topics", store.get_active_topics, config["default_topics"])
    sources = _read_or_default(
        "sources", store.get_active_sources, config["default_sources"]
    )
    active_prompt = _read_or_default("prompt template", store.get_active_prompt_template, None)
    template = active_prompt["template"] if active_prompt else config["default_prompt_template"]

    logger.info(
        "--- Starting ingestion: %d topics x %d sources ---", len(topics), len(sources)
    )
    extractor = NewsExtractor(search_client)

    for topic in topics:
        for source in sources:
            summary["pairs"] += 1
            try:
                prompt = enhance_prompt_for_json(build_prompt(template, source, topic))
                response = search_client.fetch_news(prompt)
            except Exception as e:  # pylint: disable=broad-exception-caught
                logger.error("News search failed for %s - %s: %s", source, topic, e)
                summary["failed_pairs"] += 1
                continue

            articles = extractor.extract(response, source, topic)
            if not articles:
                logger.error(
                    "No valid news articles extracted from response for %s - %s.",
                    source,
                    topic,
                )
                summary["failed_pairs"] += 1
                continue

            summary["extracted"] += len(articles)
            _persist_articles(store, articles, topic, summary)

    logger.info(
        "Ingestion finished: %d pairs (%d failed), %d extracted, %d new, "
        "%d duplicates, %d errors.",
        summary["pairs"],
        summary["failed_pairs"],
        summary["extracted"],
        summary["inserted"],
        summary["duplicates"],
        summary["errors"],
    )
    return summary


def create_search_client(config: Dict[str, Any]) -> Optional[NewsSearchClient]:
    """Builds the configured search backend, or None if its key is missing."""
    provider = config.get("llm_provider", "gemini")
    if provider == "sonar":
        if not SONAR_API_KEY:
            logger.error("Error: SONAR_API_KEY not set.")
            return None
        return SonarService(
            SONAR_API_KEY,
            model=config.get("sonar_model", DEFAULT_SONAR_MODEL),
            timeout=config.get("request_timeout", 120),
        )
    if provider != "gemini":
        logger.error("Error: unknown llm_provider %r.", provider)
        return None
    if not GEMINI_API_KEY:
        logger.error("Error: GEMINI_KEY not set.")
        return None
    return LLMService(GEMINI_API_KEY, model=config.get("gemini_model", DEFAULT_GEMINI_MODEL))


def main():
    """Main execution entry point."""
    search_client = create_search_client(CONFIG)
    if search_client is None:
        logger.error("No news search client available. Workflow failed.")
        sys.exit(1)

    store = ArticleStore(GCP_PROJECT_ID)
    try:
        last_run = store.get_last_execution_time()
    except Exception as e:  # pylint: disable=broad-exception-caught
        logger.warning("Could not read last execution time: %s", e)
        last_run = None
    if last_run:
        logger.info("Previous ingestion started at %s.", last_run)

    run_ingestion(store, search_client, build_ingestion_config(CONFIG))


if __name__ == "__main__":
    main()
