"""Tests for the Matcha completion client against a mocked transport."""
import json

import httpx
import pytest

from app.exceptions import UpstreamFailureError
from app.services.completion_client import (
    NO_RESPONSE_TEXT,
    MatchaCompletionClient,
    extract_output_text,
)
from tests.conftest import completion_payload

BASE_URL = "https://matcha.example.test/rest/api/v1"


def _client(handler, api_key="secret-key"):
    return MatchaCompletionClient(
        api_key=api_key,
        base_url=BASE_URL,
        mission_id=42,
        timeout=5.0,
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_complete_sends_mission_input_and_key():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["key"] = request.headers.get("MATCHA-API-KEY")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=completion_payload("Hello SOW"))

    client = _client(handler)
    try:
        payload = await client.complete("Write a SOW")
    finally:
        await client.aclose()

    assert seen["url"] == f"{BASE_URL}/completions"
    assert seen["key"] == "secret-key"
    assert seen["body"] == {"mission_id": 42, "input": "Write a SOW"}
    assert extract_output_text(payload) == "Hello SOW"


@pytest.mark.asyncio
async def test_non_success_status_is_surfaced():
    client = _client(lambda request: httpx.Response(503, text="unavailable"))
    try:
        with pytest.raises(UpstreamFailureError) as exc_info:
            await client.complete("prompt")
    finally:
        await client.aclose()

    assert exc_info.value.status_code == 503
    assert exc_info.value.upstream_status == 503
    assert exc_info.value.message == "Matcha API failed"


@pytest.mark.asyncio
async def test_non_error_upstream_status_maps_to_500():
    client = _client(lambda request: httpx.Response(302, headers={"Location": "/elsewhere"}))
    try:
        with pytest.raises(UpstreamFailureError) as exc_info:
            await client.complete("prompt")
    finally:
        await client.aclose()

    assert exc_info.value.status_code == 500
    assert exc_info.value.upstream_status == 302


@pytest.mark.asyncio
async def test_transport_error_is_upstream_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = _client(handler)
    try:
        with pytest.raises(UpstreamFailureError) as exc_info:
            await client.complete("prompt")
    finally:
        await client.aclose()

    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_timeout_is_upstream_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    client = _client(handler)
    try:
        with pytest.raises(UpstreamFailureError):
            await client.complete("prompt")
    finally:
        await client.aclose()


@pytest.mark.asyncio
async def test_missing_api_key_fails_without_request():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={})

    client = _client(handler, api_key="")
    try:
        assert client.is_configured is False
        with pytest.raises(UpstreamFailureError):
            await client.complete("prompt")
    finally:
        await client.aclose()

    assert calls == []


@pytest.mark.asyncio
async def test_non_json_success_body_yields_empty_payload():
    client = _client(lambda request: httpx.Response(200, text="not json"))
    try:
        payload = await client.complete("prompt")
    finally:
        await client.aclose()

    assert payload == {}
    assert extract_output_text(payload) == NO_RESPONSE_TEXT


@pytest.mark.parametrize(
    "payload",
    [
        {},
        None,
        {"output": []},
        {"output": [{"content": []}]},
        {"output": [{"content": [{"text": ""}]}]},
        {"output": [{"content": [{"text": None}]}]},
        {"output": "unexpected"},
    ],
)
def test_extract_output_text_falls_back_to_placeholder(payload):
    assert extract_output_text(payload) == NO_RESPONSE_TEXT


def test_upstream_error_status_mapping():
    assert UpstreamFailureError(upstream_status=404).status_code == 404
    assert UpstreamFailureError(upstream_status=599).status_code == 599
    assert UpstreamFailureError(upstream_status=200).status_code == 500
    assert UpstreamFailureError().status_code == 500
