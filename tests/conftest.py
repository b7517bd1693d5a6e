"""
Shared fixtures for SOW generator integration tests.

Uses an in-memory SQLite database (aiosqlite) with foreign keys enabled. Each
test function gets a fresh schema and its own session; the completion API is
replaced by a stub that records every prompt it receives.
"""
from __future__ import annotations

import os
from typing import Any, AsyncGenerator, Dict, List, Optional

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Override DATABASE_URL *before* any app module is imported, so that
# settings.DATABASE_URL points at the test DB.
TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["DATABASE_URL"] = TEST_DATABASE_URL

from app.config import settings  # noqa: E402
from app.database import Database, get_db  # noqa: E402
from app.dependencies.services import get_completion_client  # noqa: E402
from app.exceptions import UpstreamFailureError  # noqa: E402
from app.main import app  # noqa: E402


# ---------------------------------------------------------------------------
# Completion stub
# ---------------------------------------------------------------------------

def completion_payload(text: str) -> Dict[str, Any]:
    """Build a success payload in the shape the Matcha API returns."""
    return {
        "status": "completed",
        "output": [{"content": [{"type": "output_text", "text": text}]}],
    }


class StubCompletionClient:
    """Stands in for ``MatchaCompletionClient``; records prompts, never touches the network."""

    def __init__(self) -> None:
        self.prompts: List[str] = []
        self.payload: Dict[str, Any] = completion_payload("Hello SOW")
        self.fail_status: Optional[int] = None
        self.is_configured = True

    async def complete(self, prompt: str) -> Dict[str, Any]:
        self.prompts.append(prompt)
        if self.fail_status is not None:
            raise UpstreamFailureError("Matcha API failed", upstream_status=self.fail_status)
        return self.payload

    async def aclose(self) -> None:
        pass


# ---------------------------------------------------------------------------
# Per-test fixtures
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def database() -> AsyncGenerator[Database, None]:
    """Fresh schema per test; dropped and disposed afterwards."""
    db = Database(TEST_DATABASE_URL)
    await db.create_all()
    yield db
    await db.drop_all()
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database: Database) -> AsyncGenerator[AsyncSession, None]:
    """Provide a DB session for each test."""
    async with database.session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def completion_stub() -> StubCompletionClient:
    return StubCompletionClient()


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    completion_stub: StubCompletionClient,
    tmp_path,
    monkeypatch,
) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app with the DB session and the
    completion client overridden, and uploads redirected to a temp directory.
    """
    monkeypatch.setattr(settings, "UPLOAD_DIR", str(tmp_path / "uploads"))

    async def _override_get_db():
        yield db_session

    async def _override_get_completion_client():
        return completion_stub

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_completion_client] = _override_get_completion_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

ACCOUNT_PAYLOAD = {
    "name": "Acme Corp",
    "company": "Acme Holdings",
    "account_contact": "Jane Doe",
    "email": "jane@acme.test",
    "phone": "555-0100",
    "address": "1 Main St",
}


async def create_account(ac: AsyncClient, **overrides) -> Dict[str, Any]:
    resp = await ac.post("/api/accounts", json={**ACCOUNT_PAYLOAD, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()


async def upload_template(
    ac: AsyncClient,
    filename: str = "scope.txt",
    data: bytes = b"1. Overview\n2. Scope",
    content_type: str = "text/plain",
    name: Optional[str] = None,
) -> Dict[str, Any]:
    form = {"name": name} if name is not None else None
    resp = await ac.post(
        "/api/templates",
        files={"file": (filename, data, content_type)},
        data=form,
    )
    assert resp.status_code == 201, resp.text
    return resp.json()


async def generate_sow(ac: AsyncClient, account_id: int, **overrides) -> Dict[str, Any]:
    body = {
        "account_id": account_id,
        "project_notes": "Migrate the billing system",
        "deliverables": "Migration plan; cut-over runbook",
        **overrides,
    }
    resp = await ac.post("/api/sows/generate", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()
