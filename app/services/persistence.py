"""
Persistence adapter over accounts, templates and generated statements of work.

Every public coroutine either returns ORM objects or raises one of the errors
from ``app.exceptions``; SQLAlchemy errors never leak to callers.

Cascades are applied here explicitly (and mirrored by the FK ``ON DELETE``
clauses):

- deleting an account deletes its documents
- deleting a template clears ``template_id`` on documents that used it
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions import InvalidInputError, NotFoundError, StorageFailureError
from app.models.database_models import Account, SowDocument, Template

logger = logging.getLogger(__name__)

_ACCOUNT_FIELDS = ("name", "company", "account_contact", "email", "phone", "address", "notes")


def _blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip() if isinstance(value, str) else value
    return value or None


class PersistenceAdapter:
    """CRUD for the three tables, bound to one request-scoped session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _execute(self, statement, action: str):
        try:
            return await self.db.execute(statement)
        except SQLAlchemyError as exc:
            logger.error("%s failed: %s", action, exc)
            raise StorageFailureError(f"Could not {action}") from exc

    async def _flush(self, action: str) -> None:
        try:
            await self.db.flush()
        except SQLAlchemyError as exc:
            logger.error("%s failed: %s", action, exc)
            raise StorageFailureError(f"Could not {action}") from exc

    async def commit(self) -> None:
        """Commit now, for callers with side effects that must follow a durable write."""
        try:
            await self.db.commit()
        except SQLAlchemyError as exc:
            logger.error("commit failed: %s", exc)
            raise StorageFailureError("Could not save changes") from exc

    @staticmethod
    def _document_query():
        return (
            select(SowDocument)
            .options(selectinload(SowDocument.account), selectinload(SowDocument.template))
            .execution_options(populate_existing=True)
        )

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    async def list_accounts(self) -> List[Account]:
        result = await self._execute(
            select(Account).order_by(Account.created_at.desc(), Account.id.desc()),
            "list accounts",
        )
        return list(result.scalars().all())

    async def get_account(self, account_id: int) -> Optional[Account]:
        result = await self._execute(
            select(Account).where(Account.id == account_id), "load account"
        )
        return result.scalar_one_or_none()

    async def require_account(self, account_id: int) -> Account:
        account = await self.get_account(account_id)
        if account is None:
            raise NotFoundError(f"Account {account_id} not found")
        return account

    @staticmethod
    def _account_values(data: Dict[str, Any]) -> Dict[str, Any]:
        values = {key: _blank_to_none(data.get(key)) for key in _ACCOUNT_FIELDS}
        if values["name"] is None:
            raise InvalidInputError("Account name is required")
        return values

    async def create_account(self, data: Dict[str, Any]) -> Account:
        account = Account(**self._account_values(data))
        self.db.add(account)
        await self._flush("create account")
        logger.info("Created account id=%d name=%r", account.id, account.name)
        return account

    async def update_account(self, account_id: int, data: Dict[str, Any]) -> Account:
        values = self._account_values(data)
        account = await self.require_account(account_id)
        for key, value in values.items():
            setattr(account, key, value)
        await self._flush("update account")
        logger.info("Updated account id=%d", account.id)
        return account

    async def delete_account(self, account_id: int) -> int:
        """Delete an account and its documents. Returns the number of documents removed."""
        await self.require_account(account_id)
        result = await self._execute(
            delete(SowDocument).where(SowDocument.account_id == account_id),
            "delete account documents",
        )
        await self._execute(delete(Account).where(Account.id == account_id), "delete account")
        removed = result.rowcount or 0
        logger.info("Deleted account id=%d with %d documents", account_id, removed)
        return removed

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------

    async def list_templates(self) -> List[Template]:
        result = await self._execute(
            select(Template).order_by(Template.uploaded_at.desc(), Template.id.desc()),
            "list templates",
        )
        return list(result.scalars().all())

    async def get_template(self, template_id: int) -> Optional[Template]:
        result = await self._execute(
            select(Template).where(Template.id == template_id), "load template"
        )
        return result.scalar_one_or_none()

    async def require_template(self, template_id: int) -> Template:
        template = await self.get_template(template_id)
        if template is None:
            raise NotFoundError(f"Template {template_id} not found")
        return template

    async def create_template(
        self,
        name: str,
        file_path: str,
        file_type: str,
        content: Optional[str] = None,
    ) -> Template:
        template = Template(name=name, file_path=file_path, file_type=file_type, content=content)
        self.db.add(template)
        await self._flush("create template")
        logger.info("Created template id=%d name=%r type=%s", template.id, name, file_type)
        return template

    async def delete_template(self, template_id: int) -> Template:
        """Delete a template row; documents that used it keep existing with no template."""
        template = await self.require_template(template_id)
        await self._execute(
            update(SowDocument)
            .where(SowDocument.template_id == template_id)
            .values(template_id=None),
            "detach template from documents",
        )
        await self._execute(delete(Template).where(Template.id == template_id), "delete template")
        logger.info("Deleted template id=%d", template_id)
        return template

    # ------------------------------------------------------------------
    # Statements of work
    # ------------------------------------------------------------------

    async def list_documents(self) -> List[SowDocument]:
        result = await self._execute(
            self._document_query().order_by(SowDocument.created_at.desc(), SowDocument.id.desc()),
            "list documents",
        )
        return list(result.scalars().all())

    async def list_documents_by_account(self, account_id: int) -> List[SowDocument]:
        await self.require_account(account_id)
        result = await self._execute(
            self._document_query()
            .where(SowDocument.account_id == account_id)
            .order_by(SowDocument.created_at.desc(), SowDocument.id.desc()),
            "list account documents",
        )
        return list(result.scalars().all())

    async def get_document(self, document_id: int) -> Optional[SowDocument]:
        result = await self._execute(
            self._document_query().where(SowDocument.id == document_id), "load document"
        )
        return result.scalar_one_or_none()

    async def require_document(self, document_id: int) -> SowDocument:
        document = await self.get_document(document_id)
        if document is None:
            raise NotFoundError(f"SOW {document_id} not found")
        return document

    async def create_document(
        self,
        account_id: int,
        template_id: Optional[int],
        project_notes: str,
        deliverables: str,
        content: str,
    ) -> SowDocument:
        """Insert a document and return it with account and template loaded."""
        await self.require_account(account_id)
        document = SowDocument(
            account_id=account_id,
            template_id=template_id,
            project_notes=project_notes,
            deliverables=deliverables,
            content=content,
        )
        self.db.add(document)
        await self._flush("create document")
        logger.info("Created SOW id=%d for account id=%d", document.id, account_id)
        return await self.require_document(document.id)

    async def delete_document(self, document_id: int) -> None:
        await self.require_document(document_id)
        await self._execute(delete(SowDocument).where(SowDocument.id == document_id), "delete document")
        logger.info("Deleted SOW id=%d", document_id)
