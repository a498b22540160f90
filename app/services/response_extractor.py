import json
import re

from app.services.errors import MalformedResponse
from app.utils.logger import get_logger

logger = get_logger("extractor")

# ``` or ```json / ```JSON etc, with trailing whitespace
_FENCE_RE = re.compile(r"```[a-zA-Z0-9_-]*\s*")
# Greedy: first { through last }
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

SNIPPET_LENGTH = 200


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "")


def extract_json(raw_text: str) -> dict:
    """Pull the JSON object out of a model response.

    Raises MalformedResponse when there is no {...} span or it does not parse.
    """
    text = strip_code_fences(raw_text)
    match = _OBJECT_RE.search(text)
    if not match:
        logger.error(f"No JSON found in response: {(raw_text or '')[:SNIPPET_LENGTH]}")
        raise MalformedResponse("Invalid response format - no JSON found", snippet=(raw_text or "")[:SNIPPET_LENGTH])

    candidate = match.group(0)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError as e:
        snippet = candidate[:SNIPPET_LENGTH]
        logger.error(f"JSON parse error: {e}. Attempted to parse: {snippet}")
        raise MalformedResponse(f"Failed to parse JSON response: {e}", snippet=snippet) from e
