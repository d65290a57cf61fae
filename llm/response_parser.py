"""
Parsing of chat-completion responses.

The endpoint answers with an OpenAI-style payload; we need
choices[0].message.content and, when the text talks about
recommendations, the bulleted/numbered lines from it.
"""

import json
import re
from typing import Optional
import logging

from data.models import InsightResult

logger = logging.getLogger(__name__)

UNPARSEABLE_MESSAGE = "Unable to parse AI response"

# Leading whitespace, then a digit, hyphen, asterisk or bullet
RECOMMENDATION_LINE = re.compile(r'^\s*[0-9\-*•]')


class ResponseParseError(Exception):
    """Completion payload does not have the expected shape"""
    pass


def extract_content(raw_body: str) -> str:
    """
    Pulls choices[0].message.content out of the response body.

    Raises:
        json.JSONDecodeError: body is not JSON
        ResponseParseError: JSON has an unexpected shape
    """
    data = json.loads(raw_body)

    if not isinstance(data, dict):
        raise ResponseParseError("response is not a JSON object")

    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        raise ResponseParseError("'choices' is missing or empty")

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else None
    if not isinstance(message, dict):
        raise ResponseParseError("'message' is missing")

    content = message.get("content")
    if not isinstance(content, str):
        raise ResponseParseError("'content' is missing")

    return content


def extract_recommendations(content: str) -> list[str]:
    """
    Numbered or bulleted lines of the text, trimmed, in order.

    Only the marker lines are kept; continuation lines of a
    multi-line recommendation are dropped.
    """
    return [
        line.strip()
        for line in content.split("\n")
        if RECOMMENDATION_LINE.match(line)
    ]


def parse_completion(raw_body: str, analysis_type: Optional[str]) -> InsightResult:
    """
    Converts the raw response body into an InsightResult.

    Never raises: any problem becomes a failed result.

    Args:
        raw_body: response body from the completion client
        analysis_type: echoed into the result
    """
    logger.debug(f"Parsing completion ({len(raw_body)} chars)")

    try:
        content = extract_content(raw_body)
    except ResponseParseError as e:
        logger.error(f"Unexpected completion payload: {e}")
        return InsightResult.failure(UNPARSEABLE_MESSAGE)
    except Exception as e:
        preview = raw_body[:300] + "..." if len(raw_body) > 300 else raw_body
        logger.error(f"Failed to parse completion: {e}. Body: {preview}")
        return InsightResult.failure(f"Error parsing AI response: {e}")

    result = InsightResult.ok(content, analysis_type)

    if "recommend" in content.lower():
        result.recommendations = extract_recommendations(content)
        logger.debug(f"Extracted {len(result.recommendations)} recommendations")

    return result
