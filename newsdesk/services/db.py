"""
Database service for configuration and article storage.

This module provides the ArticleStore class which interfaces with Google Firestore
to read the active topics, sources and prompt template, deduplicate articles by
canonical URL and persist new ones.
"""

import hashlib
import datetime
import logging
from typing import Any, Dict, List, Optional

from dateutil import parser as date_parser
from google.cloud import firestore  # type: ignore

from newsdesk.models import Article, PromptTemplate

logger = logging.getLogger(__name__)

ARTICLES = "news_articles"
TOPICS = "topics"
SOURCES = "sources"
PROMPT_TEMPLATES = "prompt_templates"
SETTINGS = "system_settings"
LAST_FETCH_KEY = "last_news_fetch"


def parse_article_date(value: Optional[str]) -> datetime.datetime:
    """Parses a model-supplied date string, falling back to now."""
    if value:
        try:
            return date_parser.parse(value)
        except (ValueError, OverflowError):
            logger.debug("Unparseable article date %r, using now.", value)
    return datetime.datetime.now(datetime.timezone.utc)


class ArticleStore:
    """Handles configuration reads and deduplicated storage using Google Firestore."""

    def __init__(self, project_id: Optional[str]):
        if not project_id:
            logger.warning("GCP_PROJECT_ID not set. Persistence disabled.")
            self.db = None
            return

        try:
            self.db = firestore.Client(project=project_id)
            logger.info("Connected to Firestore project %s.", project_id)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Firestore connection failed: %s", e)
            self.db = None

    def get_id(self, url: str) -> str:
        """Creates a deterministic hash of the URL."""
        return hashlib.md5(url.encode("utf-8")).hexdigest()

    def _active(self, collection: str) -> List[Dict[str, Any]]:
        if not self.db:
            return []
        query = self.db.collection(collection).where(
            filter=firestore.FieldFilter("is_active", "==", True)
        )
        return [snap.to_dict() for snap in query.stream()]

    def get_active_topics(self) -> List[str]:
        """Names of topics flagged active. Empty means use the defaults."""
        return [str(doc["name"]) for doc in self._active(TOPICS) if doc.get("name")]

    def get_active_sources(self) -> List[str]:
        """URLs of sources flagged active. Empty means use the defaults."""
        return [str(doc["url"]) for doc in self._active(SOURCES) if doc.get("url")]

    def get_active_prompt_template(self) -> Optional[PromptTemplate]:
        """The single active prompt template, or None."""
        for doc in self._active(PROMPT_TEMPLATES):
            if doc.get("template"):
                return PromptTemplate(
                    name=doc.get("name", ""),
                    template=doc["template"],
                    description=doc.get("description"),
                    is_active=True,
                )
        return None

    def article_exists(self, canonical_url: str) -> bool:
        """True when an article with this canonical URL was already stored."""
        if not self.db:
            return False
        ref = self.db.collection(ARTICLES).document(self.get_id(canonical_url))
        return ref.get().exists

    def insert_article(self, article: Article, topic: str) -> None:
        """Stores a new article.

        The document id is derived from the canonical URL and written with
        create(), so a second insert of the same URL raises
        google.api_core.exceptions.AlreadyExists instead of overwriting.
        """
        if not self.db:
            logger.warning("Persistence disabled, dropping %s", article["canonical_url"])
            return

        doc_id = self.get_id(article["canonical_url"])
        self.db.collection(ARTICLES).document(doc_id).create(
            {
                "id": doc_id,
                "title": article["title"],
                "description": article["description"],
                "date_created": parse_article_date(article["date"]),
                "topic": topic,
                "source": article["source"],
                "canonical_url": article["canonical_url"],
                "unique_url": article["canonical_url"],
                "fetched_at": firestore.SERVER_TIMESTAMP,
            }
        )

    def get_articles(self) -> List[Dict[str, Any]]:
        """All stored articles, newest first."""
        if not self.db:
            return []
        query = self.db.collection(ARTICLES).order_by(
            "date_created", direction=firestore.Query.DESCENDING
        )
        return [snap.to_dict() for snap in query.stream()]

    def record_last_execution_time(self, timestamp: datetime.datetime) -> None:
        """Marks when an ingestion run last started."""
        if not self.db:
            return
        self.db.collection(SETTINGS).document(LAST_FETCH_KEY).set(
            {"setting_key": LAST_FETCH_KEY, "setting_value": timestamp.isoformat()}
        )

    def get_last_execution_time(self) -> Optional[str]:
        """ISO timestamp of the last ingestion start, if any."""
        if not self.db:
            return None
        snap = self.db.collection(SETTINGS).document(LAST_FETCH_KEY).get()
        if not snap.exists:
            return None
        return (snap.to_dict() or {}).get("setting_value")

    def _add(self, collection: str, data: Dict[str, Any]) -> Optional[str]:
        if not self.db:
            return None
        data["created_at"] = firestore.SERVER_TIMESTAMP
        _, ref = self.db.collection(collection).add(data)
        return ref.id

    def create_topic(self, name: str, description: Optional[str] = None) -> Optional[str]:
        """Adds an active topic and returns its id."""
        return self._add(
            TOPICS, {"name": name, "description": description, "is_active": True}
        )

    def create_source(
        self, name: str, url: str, description: Optional[str] = None
    ) -> Optional[str]:
        """Adds an active source and returns its id."""
        return self._add(
            SOURCES,
            {"name": name, "url": url, "description": description, "is_active": True},
        )

    def create_prompt_template(
        self, name: str, template: str, description: Optional[str] = None
    ) -> Optional[str]:
        """Adds an inactive prompt template and returns its id."""
        return self._add(
            PROMPT_TEMPLATES,
            {
                "name": name,
                "template": template,
                "description": description,
                "is_active": False,
            },
        )

    def set_active(self, collection: str, doc_id: str, active: bool) -> None:
        """Flags a topic or source as active or inactive."""
        if not self.db:
            return
        self.db.collection(collection).document(doc_id).update({"is_active": active})

    def set_active_prompt_template(self, template_id: str) -> None:
        """Activates one template and deactivates all others in one batch."""
        if not self.db:
            return

        collection = self.db.collection(PROMPT_TEMPLATES)
        batch = self.db.batch()
        for snap in collection.stream():
            batch.update(snap.reference, {"is_active": snap.id == template_id})
        batch.commit()
        logger.info("Prompt template %s is now active.", template_id)
