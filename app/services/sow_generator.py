"""
Statement-of-work generation.

Builds the prompt from an account, optional template excerpt, project notes and
deliverables; sends it to the completion API; stores the returned text.

The prompt text is a module-level constant so it can be tuned without touching
logic code.

Public API
----------
build_prompt(account, project_notes, deliverables, template_content) -> str
SowGenerator.generate(account_id, template_id, project_notes, deliverables) -> SowDocument
"""
from __future__ import annotations

import logging
from typing import Optional, Protocol

from app.exceptions import InvalidInputError
from app.models.database_models import Account, SowDocument
from app.services.completion_client import extract_output_text
from app.services.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "N/A"

REQUIRED_SECTIONS = (
    "Executive Summary",
    "Project Scope",
    "Deliverables",
    "Timeline",
    "Terms and Conditions",
    "Acceptance Criteria",
)


# ---------------------------------------------------------------------------
# Prompt templates
# ---------------------------------------------------------------------------

_SOW_PROMPT = """\
You are a professional consultant writing a Statement of Work (SOW) for a client engagement.

CLIENT INFORMATION
Client Name: {account_name}
Company: {company}
Email: {email}
Phone: {phone}
Address: {address}

PROJECT NOTES
{project_notes}

DELIVERABLES
{deliverables}
{template_section}
Write a complete, professional Statement of Work for this engagement. \
The document must include the following sections:
{sections}

Use clear section headings, keep the language precise and contractual, \
and present timelines or pricing as markdown tables where helpful.\
"""

_TEMPLATE_SECTION = """
TEMPLATE REFERENCE
Use the following template as a reference for the structure, tone and formatting of the SOW:
---
{template_content}
---
"""


def _or_na(value: Optional[str]) -> str:
    return value.strip() if value and value.strip() else NOT_AVAILABLE


def build_prompt(
    account: Account,
    project_notes: str,
    deliverables: str,
    template_content: Optional[str] = None,
) -> str:
    """Interpolate the SOW prompt; the template section is omitted when there is no excerpt."""
    template_section = ""
    if template_content and template_content.strip():
        template_section = _TEMPLATE_SECTION.format(template_content=template_content)

    return _SOW_PROMPT.format(
        account_name=account.name,
        company=_or_na(account.company),
        email=_or_na(account.email),
        phone=_or_na(account.phone),
        address=_or_na(account.address),
        project_notes=project_notes,
        deliverables=deliverables,
        template_section=template_section,
        sections="\n".join(f"{i}. {name}" for i, name in enumerate(REQUIRED_SECTIONS, start=1)),
    )


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class CompletionBoundary(Protocol):
    async def complete(self, prompt: str) -> dict: ...


class SowGenerator:
    """
    Orchestrates one generation request.

    Steps run strictly in order: validate, resolve account and template,
    call the completion API, persist. Nothing is written if the upstream
    call fails, and nothing is sent if validation fails.
    """

    def __init__(self, persistence: PersistenceAdapter, completion_client: CompletionBoundary) -> None:
        self.persistence = persistence
        self.completion_client = completion_client

    @staticmethod
    def _validate(
        account_id: Optional[int],
        project_notes: Optional[str],
        deliverables: Optional[str],
    ) -> None:
        missing = []
        if account_id is None:
            missing.append("account_id")
        if not project_notes or not project_notes.strip():
            missing.append("project_notes")
        if not deliverables or not deliverables.strip():
            missing.append("deliverables")
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

    async def generate(
        self,
        account_id: Optional[int],
        template_id: Optional[int],
        project_notes: Optional[str],
        deliverables: Optional[str],
    ) -> SowDocument:
        self._validate(account_id, project_notes, deliverables)

        account = await self.persistence.require_account(account_id)

        template = None
        if template_id is not None:
            template = await self.persistence.get_template(template_id)
            if template is None:
                logger.info("generate: template id=%d not found; continuing without it", template_id)

        prompt = build_prompt(
            account,
            project_notes,
            deliverables,
            template_content=template.content if template else None,
        )

        logger.info(
            "generate: requesting SOW for account id=%d (template=%s, prompt %d chars)",
            account.id,
            template.id if template else None,
            len(prompt),
        )
        payload = await self.completion_client.complete(prompt)
        content = extract_output_text(payload)

        return await self.persistence.create_document(
            account_id=account.id,
            template_id=template.id if template else None,
            project_notes=project_notes,
            deliverables=deliverables,
            content=content,
        )
