"""Tests for POST /chat."""
import pytest
from httpx import AsyncClient

from tests.conftest import StubCompletionClient


@pytest.mark.asyncio
async def test_chat_returns_output_text(client: AsyncClient, completion_stub: StubCompletionClient):
    resp = await client.post("/chat", json={"input": "Say hello"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "completed", "outputText": "Hello SOW"}
    assert completion_stub.prompts == ["Say hello"]


@pytest.mark.asyncio
async def test_chat_placeholder_when_no_text(client: AsyncClient, completion_stub: StubCompletionClient):
    completion_stub.payload = {}
    resp = await client.post("/chat", json={"input": "Say hello"})

    assert resp.status_code == 200
    assert resp.json() == {"status": None, "outputText": "No response text available."}


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [{}, {"input": ""}])
async def test_chat_requires_input(client: AsyncClient, completion_stub: StubCompletionClient, body):
    resp = await client.post("/chat", json=body)

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing input text"
    assert completion_stub.prompts == []


@pytest.mark.asyncio
async def test_chat_upstream_failure(client: AsyncClient, completion_stub: StubCompletionClient):
    completion_stub.fail_status = 401
    resp = await client.post("/chat", json={"input": "Say hello"})
    assert resp.status_code == 401
