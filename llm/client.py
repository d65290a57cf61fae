"""
Completion gateway client for Reservoir Insights.

- CompletionClient: Protocol (interface) used by the orchestrator
- InflectionClient: implementation for Inflection AI's OpenAI-compatible API

Usage:
    from llm import get_completion_client
    client = get_completion_client(inflection_settings)
    raw_body = client.complete(system_prompt, user_prompt)
"""

from typing import Optional, Protocol, runtime_checkable
import re
import time
import logging

import httpx
import openai
from openai import OpenAI

from config import InflectionSettings

logger = logging.getLogger(__name__)

MAX_TOKENS = 1000
TEMPERATURE = 0.7

# Line breaks as a stream reader sees them; U+2028, U+0085 etc. are content
LINE_BREAK = re.compile(r"\r\n|\r|\n")
# Trimmed from each line: ASCII control characters and space only
TRIM_CHARS = "".join(chr(c) for c in range(0x21))


class GatewayError(Exception):
    """Completion endpoint unreachable, timed out or answered with an error status"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


@runtime_checkable
class CompletionClient(Protocol):
    """
    Abstract completion client.

    Implementations perform exactly one blocking call per complete() and
    do not retry.
    """

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        Sends a system/user prompt pair and returns the raw response body.

        Raises:
            GatewayError: network failure, timeout or non-success status
        """
        ...


def build_request_body(model: str, system_prompt: str, user_prompt: str) -> dict:
    """Chat-completion request body (serialised to JSON by the SDK)."""
    return {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ],
        "max_tokens": MAX_TOKENS,
        "temperature": TEMPERATURE,
    }


class InflectionClient:
    """
    Client for Inflection AI (or any OpenAI-compatible endpoint).

    Notes:
    - POSTs to the configured endpoint URL exactly (e.g. .../v1/chat/completions)
    - One timeout for connect and read, taken from settings (ms)
    - No retries: a failure surfaces as a single GatewayError
    - Returns the raw body so parsing stays in response_parser
    """

    def __init__(self, settings: InflectionSettings, http_client: Optional[httpx.Client] = None):
        self.model = settings.model
        self.endpoint = settings.endpoint
        self.timeout_ms = settings.timeout
        self.client = OpenAI(
            api_key=settings.key,
            base_url=settings.endpoint,
            timeout=httpx.Timeout(settings.timeout_seconds),
            max_retries=0,
            http_client=http_client,
        )

        logger.info(f"Completion client initialised (model={self.model}, endpoint={self.endpoint})")

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """
        POSTs the chat-completion request.

        Returns:
            str: response body, each line trimmed and concatenated
        """
        body = build_request_body(self.model, system_prompt, user_prompt)

        logger.debug(f"Completion request ({len(system_prompt) + len(user_prompt)} prompt chars)")
        start_time = time.time()

        try:
            # Absolute URL: the SDK posts to it as-is instead of joining it onto base_url
            response = self.client.post(self.endpoint, cast_to=httpx.Response, body=body)
        except openai.APIStatusError as e:
            logger.warning(f"Completion endpoint returned HTTP {e.status_code}")
            raise GatewayError(
                f"Completion endpoint returned HTTP {e.status_code}", status_code=e.status_code
            ) from e
        except openai.APITimeoutError as e:
            logger.warning(f"Completion endpoint timed out after {self.timeout_ms} ms")
            raise GatewayError(f"Completion endpoint timed out after {self.timeout_ms} ms") from e
        except openai.APIConnectionError as e:
            logger.warning(f"Completion endpoint unreachable: {e}")
            raise GatewayError(f"Completion endpoint unreachable: {e}") from e
        except openai.APIError as e:
            logger.warning(f"Completion request failed: {e}")
            raise GatewayError(f"Completion request failed: {e}") from e

        elapsed = time.time() - start_time
        text = response.text

        logger.info(f"Completion received in {elapsed:.1f}s ({len(text)} chars)")

        return "".join(line.strip(TRIM_CHARS) for line in LINE_BREAK.split(text))


# === Client factory ===

def get_completion_client(settings: InflectionSettings) -> CompletionClient:
    """
    Returns the completion client for the configured endpoint.

    Only Inflection (OpenAI-compatible) is supported.
    """
    return InflectionClient(settings)
