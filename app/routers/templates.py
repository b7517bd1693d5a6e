"""
Template upload and management endpoints.

GET    /           — list templates, newest first
POST   /           — upload a .pdf, .docx or .txt template (multipart)
GET    /{id}       — template detail
DELETE /{id}       — delete template; SOWs that used it are kept
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from app.dependencies.services import get_persistence
from app.models.schemas import TemplateResponse
from app.services.persistence import PersistenceAdapter
from app.services.template_store import safe_remove, save_template_upload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[TemplateResponse])
async def list_templates(
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> List[TemplateResponse]:
    templates = await persistence.list_templates()
    return [TemplateResponse.model_validate(t) for t in templates]


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED)
async def upload_template(
    file: UploadFile = File(...),
    name: Optional[str] = Form(None),
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> TemplateResponse:
    """
    Upload a template file.

    - Accepted extensions: .pdf, .docx, .txt (anything else is rejected before storage)
    - The display name defaults to the uploaded file name
    - Text is extracted for .txt templates only
    """
    stored = await save_template_upload(file)
    template = await persistence.create_template(
        name=(name or "").strip() or stored.original_name,
        file_path=stored.file_path,
        file_type=stored.file_type,
        content=stored.content,
    )
    return TemplateResponse.model_validate(template)


@router.get("/{template_id}", response_model=TemplateResponse)
async def get_template(
    template_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> TemplateResponse:
    template = await persistence.require_template(template_id)
    return TemplateResponse.model_validate(template)


@router.delete(
    "/{template_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_template(
    template_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> None:
    """Delete a template row, then its stored file once the row delete is committed."""
    template = await persistence.delete_template(template_id)
    await persistence.commit()
    safe_remove(template.file_path)
