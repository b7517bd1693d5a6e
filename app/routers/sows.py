"""
Statement-of-work endpoints.

GET    /                       — list SOWs with account/template display fields
GET    /account/{account_id}   — SOWs generated for one account
POST   /generate               — build prompt, call Matcha, store the result
GET    /{id}                   — SOW detail
GET    /{id}/preview           — styled HTML fragment for on-screen display
DELETE /{id}                   — delete SOW
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from fastapi.responses import HTMLResponse

from app.dependencies.services import get_persistence, get_sow_generator
from app.models.schemas import SowGenerateRequest, SowResponse
from app.services.persistence import PersistenceAdapter
from app.services.renderers import HtmlRenderer, SowHeader
from app.services.sow_generator import SowGenerator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[SowResponse])
async def list_sows(
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> List[SowResponse]:
    documents = await persistence.list_documents()
    return [SowResponse.model_validate(d) for d in documents]


@router.get("/account/{account_id}", response_model=List[SowResponse])
async def list_account_sows(
    account_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> List[SowResponse]:
    documents = await persistence.list_documents_by_account(account_id)
    return [SowResponse.model_validate(d) for d in documents]


@router.post("/generate", response_model=SowResponse, status_code=status.HTTP_201_CREATED)
async def generate_sow(
    body: SowGenerateRequest,
    generator: SowGenerator = Depends(get_sow_generator),
) -> SowResponse:
    """
    Generate a statement of work.

    - ``account_id``, ``project_notes`` and ``deliverables`` are required
    - ``template_id`` is optional; only plain-text templates contribute text
    - Blocks until the completion API answers (no retries)
    """
    document = await generator.generate(
        account_id=body.account_id,
        template_id=body.template_id,
        project_notes=body.project_notes,
        deliverables=body.deliverables,
    )
    return SowResponse.model_validate(document)


@router.get("/{sow_id}", response_model=SowResponse)
async def get_sow(
    sow_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> SowResponse:
    document = await persistence.require_document(sow_id)
    return SowResponse.model_validate(document)


@router.get("/{sow_id}/preview", response_class=HTMLResponse)
async def preview_sow(
    sow_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> HTMLResponse:
    """Render the SOW with the same block styling used by the PDF and DOCX exports."""
    document = await persistence.require_document(sow_id)
    html_bytes = HtmlRenderer().render(SowHeader.from_document(document))
    return HTMLResponse(content=html_bytes.decode("utf-8"))


@router.delete(
    "/{sow_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_sow(
    sow_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> None:
    await persistence.delete_document(sow_id)
