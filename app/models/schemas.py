"""
Pydantic schemas for request/response validation.
"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime
from enum import Enum


# Enums (matching database enums)
class TemplateFileTypeSchema(str, Enum):
    """Template file kinds for API responses."""

    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"


class ExportFormat(str, Enum):
    """Download formats offered by the export endpoints."""

    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"


# Account Schemas
class AccountCreate(BaseModel):
    """Schema for creating or replacing an account."""

    name: str = Field(..., min_length=1, max_length=255)
    company: Optional[str] = None
    account_contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Account name must not be blank")
        return value


class AccountResponse(BaseModel):
    """Schema for account responses."""

    id: int
    name: str
    company: Optional[str] = None
    account_contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Template Schemas
class TemplateResponse(BaseModel):
    """Schema for template responses."""

    id: int
    name: str
    file_path: str
    file_type: TemplateFileTypeSchema
    content: Optional[str] = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


# Statement of Work Schemas
class SowGenerateRequest(BaseModel):
    """
    Schema for the generation endpoint.

    Required fields are declared optional here so that the generation service
    reports them as a single invalid-input error instead of a schema error.
    """

    account_id: Optional[int] = None
    template_id: Optional[int] = None
    project_notes: Optional[str] = None
    deliverables: Optional[str] = None


class SowResponse(BaseModel):
    """Schema for a generated statement of work, with joined display fields."""

    id: int
    account_id: int
    template_id: Optional[int] = None
    project_notes: str
    deliverables: str
    content: str
    created_at: datetime
    account_name: Optional[str] = None
    account_company: Optional[str] = None
    account_contact: Optional[str] = None
    template_name: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# Chat Schemas
class ChatRequest(BaseModel):
    """Raw prompt forwarded to the completion API."""

    input: Optional[str] = None


class ChatResponse(BaseModel):
    """Completion API status and extracted text."""

    status: Optional[str] = None
    outputText: str


# Health Schemas
class HealthCheckResponse(BaseModel):
    """Schema for health check endpoint."""

    status: str
    database: str
    completion_api: str
    timestamp: datetime
    version: str = "1.0.0"
