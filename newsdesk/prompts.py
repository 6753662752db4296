"""
Prompt construction for the news search model.

Holds the built-in defaults used when nothing is marked active in the
store, fills templates with a topic/source pair and appends JSON output
directives when a template does not already ask for them.
"""

import re

DEFAULT_TOPICS = ["HDB", "Condo", "Landed", "Finance"]
DEFAULT_SOURCES = ["https://stackedhomes.com/", "https://www.edgeprop.sg/"]

DEFAULT_PROMPT_TEMPLATE = (
    "Search for the latest news from {source} about {topic} in Singapore from "
    "the last 3 days and Skip the articles which are paid. Return EXACTLY 10 "
    "news articles as a JSON array. Each article must be a JSON object with "
    'these exact fields: "title", "description", "date", "source", '
    '"canonical_url". Return ONLY the JSON array, no additional text or '
    'explanation. Example format: [{"title":"Article Title","description":'
    '"Article description","date":"2024-01-15","source":"Source Name",'
    '"canonical_url":"https://example.com/article"}]'
)

JSON_FORMAT_DIRECTIVE = (
    "IMPORTANT: Return the response as a JSON array. Each news article should "
    'be a JSON object with these fields: "title", "description", "date", '
    '"source", "canonical_url". Example: [{"title":"Title","description":'
    '"Description","date":"2024-01-15","source":"Source",'
    '"canonical_url":"https://example.com"}]'
)

JSON_ONLY_DIRECTIVE = (
    "CRITICAL: Return ONLY the JSON array, no additional text or explanation."
)

# Only this much of the original answer is sent back for re-conversion
CONVERSION_EXCERPT_CHARS = 2000

_CONVERSION_PROMPT = """Convert the following text about {topic} news from {source} into a JSON array format.
Extract any news articles mentioned and format them as JSON objects with these fields: title, description, date, source, canonical_url.
Return ONLY the JSON array, no additional text.

Text to convert:
{excerpt}"""

_JSON_HINT = re.compile(r"json|JSON|\[|\{")


def build_prompt(template: str, source: str, topic: str) -> str:
    """Substitutes every {source} and {topic} placeholder in the template."""
    # Plain replacement: templates may contain literal JSON braces
    return template.replace("{source}", source).replace("{topic}", topic)


def enhance_prompt_for_json(prompt: str) -> str:
    """Appends JSON output instructions unless the prompt already has them."""
    if not _JSON_HINT.search(prompt):
        return f"{prompt}\n\n{JSON_FORMAT_DIRECTIVE}"

    # JSON is mentioned but may be weakly worded
    if "ONLY" not in prompt and "exactly" not in prompt:
        return f"{prompt}\n\n{JSON_ONLY_DIRECTIVE}"

    return prompt


def build_conversion_prompt(response: str, source: str, topic: str) -> str:
    """Returns the prompt asking the model to reformat its own answer as JSON."""
    return _CONVERSION_PROMPT.format(
        topic=topic, source=source, excerpt=response[:CONVERSION_EXCERPT_CHARS]
    )
