"""
LLM Service Module.

This module provides the LLMService class, which interfaces with the Google Gemini API
with Google Search grounding to look up recent news for a prompt.
"""

import logging
from typing import Optional, Protocol

from google import genai
from google.genai import types

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"


class NewsSearchClient(Protocol):
    """
    Protocol for news search backends.

    fetch_news sends one prompt and returns the model's answer as raw text.
    There is no guarantee about the format of that text, and implementations
    raise on transport or API failure instead of returning an empty string.
    """

    def fetch_news(self, prompt: str) -> str:
        """Runs a search prompt and returns the raw answer."""


class LLMService:
    """
    Service for searching news through the Google Gemini API.

    The client is created once; every call runs with the Google Search tool
    enabled so the model can look at live sources.
    """

    _SYSTEM_INSTRUCTION = "Be precise and concise."

    def __init__(self, api_key: str, model: str = DEFAULT_GEMINI_MODEL):
        self.api_key = api_key
        self.model = model
        self.client: Optional[genai.Client] = None
        try:
            self.client = genai.Client(api_key=api_key)
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.error("Failed to initialize Gemini client: %s", e)
            self.client = None

    def fetch_news(self, prompt: str) -> str:
        """Asks Gemini to search for news matching the prompt."""
        if not self.client:
            raise RuntimeError("Gemini client not initialized.")

        logger.debug("Sending prompt to %s (%d chars)", self.model, len(prompt))
        response = self.client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=types.GenerateContentConfig(
                system_instruction=self._SYSTEM_INSTRUCTION,
                tools=[types.Tool(google_search=types.GoogleSearch())],
            ),
        )
        return response.text if response.text else ""
