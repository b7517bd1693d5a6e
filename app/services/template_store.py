"""
Storage for uploaded SOW templates.

Files are streamed to ``UPLOAD_DIR`` under a UUID name before the database row
is written. A crash between the two leaves an orphaned file on disk; nothing
reconciles that.
"""
from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
from fastapi import UploadFile

from app.config import settings
from app.exceptions import InvalidInputError, SowServiceError, StorageFailureError
from app.models.database_models import TemplateFileType

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 1024 * 1024  # 1 MB slices


class FileTooLargeError(SowServiceError):
    status_code = 413
    default_message = "File exceeds the upload size limit"


@dataclass
class StoredTemplateFile:
    """Result of saving one upload to disk."""

    original_name: str
    file_path: str
    file_type: str          # pdf, docx, txt
    size: int
    content: Optional[str]  # extracted text, plain-text templates only


def template_extension(filename: Optional[str]) -> str:
    """
    Return the lower-cased extension of *filename* if it is an accepted template type.

    Raises:
        InvalidInputError: missing filename or unsupported extension.
    """
    if not filename:
        raise InvalidInputError("Upload must include a filename.")
    file_ext = Path(filename).suffix.lower()
    if file_ext not in settings.SUPPORTED_TEMPLATE_TYPES:
        raise InvalidInputError(
            f"Unsupported file type '{file_ext}'. "
            f"Accepted: {', '.join(settings.SUPPORTED_TEMPLATE_TYPES)}"
        )
    return file_ext


def safe_remove(path: Optional[str]) -> None:
    try:
        if path and os.path.exists(path):
            os.remove(path)
    except OSError as exc:
        logger.warning("Could not remove file %r: %s", path, exc)


async def save_template_upload(file: UploadFile) -> StoredTemplateFile:
    """
    Validate and stream an uploaded template to disk.

    The extension is checked before anything is written. Plain-text uploads
    have their text decoded (UTF-8, undecodable bytes replaced) so it can be
    quoted in generation prompts; PDF and DOCX content is not extracted.
    """
    file_ext = template_extension(file.filename)

    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    stored_name = f"{uuid.uuid4().hex}{file_ext}"
    file_path = os.path.join(settings.UPLOAD_DIR, stored_name)
    file_size = 0
    text_parts = [] if file_ext == ".txt" else None

    try:
        async with aiofiles.open(file_path, "wb") as out:
            while True:
                chunk = await file.read(READ_CHUNK_SIZE)
                if not chunk:
                    break
                file_size += len(chunk)
                if file_size > settings.MAX_FILE_SIZE:
                    raise FileTooLargeError(
                        f"File exceeds the {settings.MAX_FILE_SIZE // (1024 * 1024)} MB size limit."
                    )
                if text_parts is not None:
                    text_parts.append(chunk)
                await out.write(chunk)
    except FileTooLargeError:
        safe_remove(file_path)
        raise
    except OSError as exc:
        safe_remove(file_path)
        logger.error("Could not store upload %r: %s", file.filename, exc)
        raise StorageFailureError("Could not store the uploaded file") from exc

    logger.info("Saved %r → %s (%s bytes)", file.filename, file_path, f"{file_size:,}")

    content = None
    if text_parts is not None:
        content = b"".join(text_parts).decode("utf-8", errors="replace")

    return StoredTemplateFile(
        original_name=file.filename,
        file_path=file_path,
        file_type=TemplateFileType(file_ext.lstrip(".")).value,
        size=file_size,
        content=content,
    )
