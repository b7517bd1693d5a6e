"""
SOW download endpoints.

GET /{id}/pdf   — application/pdf
GET /{id}/docx  — OOXML word-processing document
GET /{id}/txt   — text/plain

Every response is an attachment named ``SOW-<account>-<timestamp>.<ext>``.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.dependencies.services import get_persistence
from app.models.schemas import ExportFormat
from app.services.persistence import PersistenceAdapter
from app.services.renderers import SowHeader, get_renderer

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{sow_id}/{export_format}")
async def export_sow(
    sow_id: int,
    export_format: ExportFormat,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> Response:
    """Render a stored SOW into the requested download format."""
    # Resolve first so a missing SOW never reaches the renderer
    document = await persistence.require_document(sow_id)

    header = SowHeader.from_document(document)
    renderer = get_renderer(export_format)
    content = renderer.render(header)
    filename = renderer.filename(header)

    logger.info(
        "Exported SOW id=%d as %s (%s bytes)",
        sow_id,
        export_format.value,
        f"{len(content):,}",
    )
    return Response(
        content=content,
        media_type=renderer.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
