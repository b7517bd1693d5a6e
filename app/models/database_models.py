"""
SQLAlchemy ORM models for the SOW generator database.
Three tables: accounts, templates and the generated statements of work (sows).
"""
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    ForeignKey,
)
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import enum

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Enums
class TemplateFileType(str, enum.Enum):
    """File kinds accepted for uploaded templates."""

    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"


# Models
class Account(Base):
    """Client account the statements of work are written for."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    company = Column(String(255), nullable=True)
    account_contact = Column(String(255), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(64), nullable=True)
    address = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    documents = relationship("SowDocument", back_populates="account", passive_deletes=True)


class Template(Base):
    """Uploaded SOW template; only plain-text templates carry extracted content."""

    __tablename__ = "templates"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    file_path = Column(String(512), nullable=False)
    file_type = Column(String(16), nullable=False)  # pdf, docx, txt
    content = Column(Text, nullable=True)
    uploaded_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    documents = relationship("SowDocument", back_populates="template", passive_deletes=True)


class SowDocument(Base):
    """Generated statement of work. Never updated after creation."""

    __tablename__ = "sows"

    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    template_id = Column(Integer, ForeignKey("templates.id", ondelete="SET NULL"), nullable=True, index=True)
    project_notes = Column(Text, nullable=False)
    deliverables = Column(Text, nullable=False)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # Relationships
    account = relationship("Account", back_populates="documents")
    template = relationship("Template", back_populates="documents")

    @property
    def account_name(self):
        return self.account.name if self.account else None

    @property
    def account_company(self):
        return self.account.company if self.account else None

    @property
    def account_contact(self):
        return self.account.account_contact if self.account else None

    @property
    def template_name(self):
        return self.template.name if self.template else None
