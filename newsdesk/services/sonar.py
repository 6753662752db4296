"""
Perplexity Sonar search client.

Alternative NewsSearchClient backend talking to the OpenAI-compatible
chat completions endpoint of the Perplexity API over plain HTTP.
"""

import logging

import requests

logger = logging.getLogger(__name__)

SONAR_API_URL = "https://api.perplexity.ai/chat/completions"
DEFAULT_SONAR_MODEL = "sonar"


class SonarService:
    """Searches the web for news with a Perplexity Sonar model."""

    def __init__(
        self, api_key: str, model: str = DEFAULT_SONAR_MODEL, timeout: float = 120
    ):
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    def fetch_news(self, prompt: str) -> str:
        """Sends the prompt as a web search chat completion."""
        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": "Be precise and concise."},
                {"role": "user", "content": prompt},
            ],
            "search_mode": "web",
        }
        logger.debug("Sending prompt to %s (%d chars)", self.model, len(prompt))
        resp = requests.post(
            SONAR_API_URL,
            json=payload,
            timeout=self.timeout,
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        resp.raise_for_status()
        data = resp.json()
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as e:
            raise ValueError(f"Unexpected Sonar response shape: {e}") from e
