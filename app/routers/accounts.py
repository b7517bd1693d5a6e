"""
Account management endpoints.

GET    /           — list accounts, newest first
POST   /           — create account
GET    /{id}       — account detail
PUT    /{id}       — replace account fields
DELETE /{id}       — delete account and every SOW generated for it
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from app.dependencies.services import get_persistence
from app.models.schemas import AccountCreate, AccountResponse
from app.services.persistence import PersistenceAdapter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=List[AccountResponse])
async def list_accounts(
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> List[AccountResponse]:
    """List all accounts, newest first."""
    accounts = await persistence.list_accounts()
    return [AccountResponse.model_validate(a) for a in accounts]


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    body: AccountCreate,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> AccountResponse:
    """Create a new client account."""
    account = await persistence.create_account(body.model_dump())
    return AccountResponse.model_validate(account)


@router.get("/{account_id}", response_model=AccountResponse)
async def get_account(
    account_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> AccountResponse:
    account = await persistence.require_account(account_id)
    return AccountResponse.model_validate(account)


@router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: int,
    body: AccountCreate,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> AccountResponse:
    """Replace every editable field of an account."""
    account = await persistence.update_account(account_id, body.model_dump())
    return AccountResponse.model_validate(account)


@router.delete(
    "/{account_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
async def delete_account(
    account_id: int,
    persistence: PersistenceAdapter = Depends(get_persistence),
) -> None:
    """Delete an account; its statements of work are deleted with it."""
    await persistence.delete_account(account_id)
