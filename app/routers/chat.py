"""
Raw completion passthrough.

POST /chat — forward ``input`` to the Matcha mission unchanged and return the
extracted text. Useful for checking the upstream connection without creating
a SOW.
"""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.dependencies.services import get_completion_client
from app.exceptions import InvalidInputError
from app.models.schemas import ChatRequest, ChatResponse
from app.services.completion_client import MatchaCompletionClient, extract_output_text

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    completion_client: MatchaCompletionClient = Depends(get_completion_client),
) -> ChatResponse:
    if not body.input:
        raise InvalidInputError("Missing input text")

    payload = await completion_client.complete(body.input)
    status_value = payload.get("status") if isinstance(payload, dict) else None
    return ChatResponse(
        status=str(status_value) if status_value is not None else None,
        outputText=extract_output_text(payload),
    )
