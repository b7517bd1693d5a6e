"""Database and schema models for the SOW generator."""
from app.models.database_models import (
    Account,
    Template,
    SowDocument,
    TemplateFileType,
)
from app.models.schemas import (
    AccountCreate,
    AccountResponse,
    TemplateResponse,
    SowGenerateRequest,
    SowResponse,
    ExportFormat,
    HealthCheckResponse,
)

__all__ = [
    # Database models
    "Account",
    "Template",
    "SowDocument",
    "TemplateFileType",
    # Pydantic schemas
    "AccountCreate",
    "AccountResponse",
    "TemplateResponse",
    "SowGenerateRequest",
    "SowResponse",
    "ExportFormat",
    "HealthCheckResponse",
]
