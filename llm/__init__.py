"""
LLM module — integration with the hosted completion endpoint.

- CompletionClient: abstract interface
- get_completion_client(): factory for the configured client
- InflectionClient: implementation for Inflection AI

Usage:
    from llm import get_completion_client, build_system_prompt, parse_completion
    client = get_completion_client(inflection_settings)
    raw_body = client.complete(build_system_prompt("ANALYSIS"), "How are levels in Kitui?")
    result = parse_completion(raw_body, "ANALYSIS")
"""

from llm.client import (
    CompletionClient,
    GatewayError,
    InflectionClient,
    build_request_body,
    get_completion_client,
)
from llm.prompts import (
    CRISIS_SYSTEM_PROMPT,
    CRITICAL_RESERVOIRS_PROMPT,
    PREDICTION_PROMPT,
    PREDICTION_SYSTEM_PROMPT,
    SYSTEM_PROMPTS,
    build_critical_reservoirs_context,
    build_reservoir_context,
    build_system_prompt,
    build_user_prompt,
)
from llm.response_parser import (
    ResponseParseError,
    extract_content,
    extract_recommendations,
    parse_completion,
)

__all__ = [
    # Client
    "CompletionClient",
    "GatewayError",
    "InflectionClient",
    "build_request_body",
    "get_completion_client",
    # Prompts
    "SYSTEM_PROMPTS",
    "PREDICTION_SYSTEM_PROMPT",
    "PREDICTION_PROMPT",
    "CRISIS_SYSTEM_PROMPT",
    "CRITICAL_RESERVOIRS_PROMPT",
    "build_system_prompt",
    "build_user_prompt",
    "build_reservoir_context",
    "build_critical_reservoirs_context",
    # Parser
    "ResponseParseError",
    "extract_content",
    "extract_recommendations",
    "parse_completion",
]
