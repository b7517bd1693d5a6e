"""Tests for template upload, validation and deletion."""
import os

import pytest
from httpx import AsyncClient

from app.config import settings
from app.exceptions import StorageFailureError
from app.services.persistence import PersistenceAdapter
from tests.conftest import create_account, generate_sow, upload_template


def _stored_files() -> list:
    if not os.path.isdir(settings.UPLOAD_DIR):
        return []
    return os.listdir(settings.UPLOAD_DIR)


@pytest.mark.asyncio
async def test_upload_txt_template_extracts_content(client: AsyncClient):
    data = await upload_template(client, filename="scope.txt", data=b"1. Overview\n2. Scope")

    assert data["name"] == "scope.txt"
    assert data["file_type"] == "txt"
    assert data["content"] == "1. Overview\n2. Scope"
    assert os.path.exists(data["file_path"])
    assert data["file_path"].startswith(settings.UPLOAD_DIR)


@pytest.mark.asyncio
async def test_upload_uses_explicit_name(client: AsyncClient):
    data = await upload_template(client, name="Standard SOW")
    assert data["name"] == "Standard SOW"


@pytest.mark.asyncio
async def test_upload_pdf_and_docx_store_no_content(client: AsyncClient):
    pdf = await upload_template(client, filename="Template.PDF", data=b"%PDF-1.4 fake", content_type="application/pdf")
    docx = await upload_template(
        client,
        filename="template.docx",
        data=b"PK fake",
        content_type="application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    )

    assert pdf["file_type"] == "pdf"
    assert pdf["content"] is None
    assert docx["file_type"] == "docx"
    assert docx["content"] is None


@pytest.mark.asyncio
async def test_undecodable_text_is_replaced(client: AsyncClient):
    data = await upload_template(client, filename="latin.txt", data=b"caf\xe9")
    assert data["content"] == "caf\ufffd"


@pytest.mark.asyncio
@pytest.mark.parametrize("filename", ["malware.exe", "notes.md", "noextension"])
async def test_unsupported_extension_rejected_before_storage(client: AsyncClient, filename):
    resp = await client.post(
        "/api/templates",
        files={"file": (filename, b"payload", "application/octet-stream")},
    )
    assert resp.status_code == 400
    assert "Unsupported file type" in resp.json()["detail"]
    assert _stored_files() == []

    listing = await client.get("/api/templates")
    assert listing.json() == []


@pytest.mark.asyncio
async def test_oversized_upload_returns_413(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(settings, "MAX_FILE_SIZE", 10)
    resp = await client.post(
        "/api/templates",
        files={"file": ("big.txt", b"x" * 64, "text/plain")},
    )
    assert resp.status_code == 413
    assert _stored_files() == []


@pytest.mark.asyncio
async def test_list_and_get_templates(client: AsyncClient):
    first = await upload_template(client, name="First")
    second = await upload_template(client, name="Second")

    resp = await client.get("/api/templates")
    assert resp.status_code == 200
    assert [t["id"] for t in resp.json()] == [second["id"], first["id"]]

    detail = await client.get(f"/api/templates/{first['id']}")
    assert detail.status_code == 200
    assert detail.json()["name"] == "First"


@pytest.mark.asyncio
async def test_get_missing_template_returns_404(client: AsyncClient):
    resp = await client.get("/api/templates/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_delete_template_keeps_sows_and_clears_reference(client: AsyncClient):
    account = await create_account(client)
    template = await upload_template(client, name="Standard")
    sow = await generate_sow(client, account["id"], template_id=template["id"])
    assert sow["template_id"] == template["id"]
    assert sow["template_name"] == "Standard"

    resp = await client.delete(f"/api/templates/{template['id']}")
    assert resp.status_code == 204
    assert not os.path.exists(template["file_path"])
    assert (await client.get(f"/api/templates/{template['id']}")).status_code == 404

    kept = await client.get(f"/api/sows/{sow['id']}")
    assert kept.status_code == 200
    data = kept.json()
    assert data["template_id"] is None
    assert data["template_name"] is None
    assert data["content"] == "Hello SOW"


@pytest.mark.asyncio
async def test_delete_missing_template_returns_404(client: AsyncClient):
    resp = await client.delete("/api/templates/9999")
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_failed_commit_keeps_template_file(client: AsyncClient, monkeypatch):
    template = await upload_template(client, name="Standard")

    async def _failing_commit(self):
        raise StorageFailureError("Could not save changes")

    monkeypatch.setattr(PersistenceAdapter, "commit", _failing_commit)

    resp = await client.delete(f"/api/templates/{template['id']}")
    assert resp.status_code == 500
    assert os.path.exists(template["file_path"])
