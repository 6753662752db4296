"""
JSON-based extraction strategies.

These are the first three strategies of the extraction pipeline, ordered
from the most to the least structured reading of a model response:

1. the first bracketed array of objects found anywhere in the text,
2. every standalone object (one level of nesting at most) that has a title,
3. the whole response parsed as JSON, either a list or {"articles": [...]}.
"""

import json
import logging
import re
from typing import Any, List, Optional

from newsdesk.models import Article
from newsdesk.parsers.normalize import has_title, validate_and_clean

logger = logging.getLogger(__name__)

JSON_ARRAY_PATTERN = re.compile(r"\[\s*\{[\s\S]*?\}\s*\]")
JSON_OBJECT_PATTERN = re.compile(r"\{[^{}]*(?:\{[^{}]*\}[^{}]*)*\}")


def find_json_array(text: str) -> Optional[List[Any]]:
    """Returns the first array-of-objects in the text, or None.

    Raises json.JSONDecodeError when the matched text is not valid JSON.
    """
    match = JSON_ARRAY_PATTERN.search(text)
    if not match:
        return None
    parsed = json.loads(match.group(0))
    if isinstance(parsed, list) and parsed:
        return parsed
    return None


def match_json_array(response: str, source: str, topic: str) -> List[Article]:
    """Strategy 1: array-pattern match."""
    try:
        parsed = find_json_array(response)
    except (json.JSONDecodeError, ValueError) as e:
        logger.info("JSON array match found but parsing failed: %s", e)
        return []
    if parsed is None:
        return []
    return validate_and_clean(parsed, source)


def match_json_objects(response: str, source: str, topic: str) -> List[Article]:
    """Strategy 2: scan for individual objects carrying a title or headline."""
    objects = []
    for match in JSON_OBJECT_PATTERN.finditer(response):
        try:
            parsed = json.loads(match.group(0))
        except (json.JSONDecodeError, ValueError):
            continue
        if has_title(parsed):
            objects.append(parsed)
    if not objects:
        return []
    return validate_and_clean(objects, source)


def parse_full_response(response: str, source: str, topic: str) -> List[Article]:
    """Strategy 3: the entire response as a JSON document."""
    try:
        parsed = json.loads(response)
    except (json.JSONDecodeError, ValueError) as e:
        logger.info("Full JSON parse failed: %s", e)
        return []

    if isinstance(parsed, list):
        return validate_and_clean(parsed, source)
    if isinstance(parsed, dict) and isinstance(parsed.get("articles"), list):
        return validate_and_clean(parsed["articles"], source)
    return []
