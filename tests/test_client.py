import json

import httpx
import pytest

from conftest import completion_body
from llm.client import (
    CompletionClient,
    GatewayError,
    InflectionClient,
    build_request_body,
    get_completion_client,
)


def _client(settings, handler) -> InflectionClient:
    return InflectionClient(settings, http_client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_request_body_shape() -> None:
    body = build_request_body("inflection_3_pi", "sys", "user")
    assert body == {
        "model": "inflection_3_pi",
        "messages": [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "user"},
        ],
        "max_tokens": 1000,
        "temperature": 0.7,
    }


def test_complete_posts_valid_json_with_bearer_token(inflection_settings) -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, text=completion_body("ok"), headers={"content-type": "application/json"})

    system_prompt = 'Say "hello"\nthen stop'
    user_prompt = 'Path C:\\dams\n"quoted"\n\nend'
    raw = _client(inflection_settings, handler).complete(system_prompt, user_prompt)

    assert json.loads(raw)["choices"][0]["message"]["content"] == "ok"
    assert seen["method"] == "POST"
    assert seen["url"] == inflection_settings.endpoint
    assert seen["headers"]["authorization"] == "Bearer test-key"
    assert seen["headers"]["content-type"].startswith("application/json")
    assert seen["body"]["model"] == "inflection_3_pi"
    assert seen["body"]["max_tokens"] == 1000
    assert seen["body"]["temperature"] == 0.7
    assert seen["body"]["messages"] == [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def test_complete_trims_and_joins_body_lines(inflection_settings) -> None:
    pretty = json.dumps(json.loads(completion_body("Line one\nLine two")), indent=2)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=pretty, headers={"content-type": "application/json"})

    raw = _client(inflection_settings, handler).complete("sys", "user")

    assert "\n" not in raw
    assert raw == "".join(line.strip() for line in pretty.splitlines())
    assert json.loads(raw)["choices"][0]["message"]["content"] == "Line one\nLine two"


def test_error_status_raises_gateway_error(inflection_settings) -> None:
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(500, json={"error": {"message": "upstream failure"}})

    with pytest.raises(GatewayError) as info:
        _client(inflection_settings, handler).complete("sys", "user")

    assert info.value.status_code == 500
    assert len(calls) == 1


def test_timeout_raises_gateway_error(inflection_settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(GatewayError, match="timed out after 2500 ms"):
        _client(inflection_settings, handler).complete("sys", "user")


def test_connection_failure_raises_gateway_error(inflection_settings) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(GatewayError, match="unreachable"):
        _client(inflection_settings, handler).complete("sys", "user")


def test_timeout_applies_to_connect_and_read(inflection_settings) -> None:
    client = InflectionClient(inflection_settings)
    assert client.client.timeout.connect == 2.5
    assert client.client.timeout.read == 2.5
    assert client.client.max_retries == 0


def test_factory_returns_protocol_implementation(inflection_settings) -> None:
    assert isinstance(get_completion_client(inflection_settings), CompletionClient)


def test_complete_posts_to_configured_url_without_appending(inflection_settings) -> None:
    urls = []

    def handler(request: httpx.Request) -> httpx.Response:
        urls.append(str(request.url))
        return httpx.Response(200, text=completion_body("ok"), headers={"content-type": "application/json"})

    _client(inflection_settings, handler).complete("sys", "user")

    assert urls == ["https://inflection.test/external/api/inference/openai/v1/chat/completions"]


@pytest.mark.parametrize("separator", ["\u2028", "\u2029", "\x85"])
def test_complete_keeps_unicode_line_separators_in_content(inflection_settings, separator) -> None:
    content = f"Level A {separator} level B{separator}end"
    payload = {"choices": [{"message": {"role": "assistant", "content": content}}]}
    body = json.dumps(payload, ensure_ascii=False, indent=2)

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            content=body.encode("utf-8"),
            headers={"content-type": "application/json; charset=utf-8"},
        )

    raw = _client(inflection_settings, handler).complete("sys", "user")

    assert json.loads(raw)["choices"][0]["message"]["content"] == content


def test_complete_joins_crlf_and_cr_lines(inflection_settings) -> None:
    body = '{\r\n  "choices": [\r    {"message": {"content": "ok"}}\r\n  ]\n}'

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text=body, headers={"content-type": "application/json"})

    raw = _client(inflection_settings, handler).complete("sys", "user")

    assert raw == '{"choices": [{"message": {"content": "ok"}}]}'
