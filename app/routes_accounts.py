# routes_accounts.py
"""
JSON routes behind the account form: create / read / update / delete accounts,
plus the per-account transaction list and manual balance adjustment.
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.deps import get_db
from app.schemas import (
    AccountCreate,
    AccountOut,
    AccountUpdate,
    BalanceAdjustment,
    CreatedOut,
    TransactionOut,
)
from app.services import accounts as account_service
from app.services import ledger

router = APIRouter(prefix="/api/accounts", tags=["accounts"])


@router.get("", response_model=List[AccountOut])
def list_accounts(db: Session = Depends(get_db)):
    return account_service.list_accounts(db)


@router.post("", response_model=CreatedOut, status_code=status.HTTP_201_CREATED)
def create_account(payload: AccountCreate, db: Session = Depends(get_db)):
    account_id = account_service.create_account(
        db,
        name=payload.name,
        initial_balance=payload.initial_balance,
        account_type=payload.account_type,
        currency=payload.currency,
        notes=payload.notes,
    )
    return {"id": account_id}


@router.get("/{account_id}", response_model=AccountOut)
def get_account(account_id: int, db: Session = Depends(get_db)):
    return account_service.get_account(db, account_id)


@router.patch("/{account_id}", response_model=AccountOut)
def update_account(account_id: int, payload: AccountUpdate, db: Session = Depends(get_db)):
    """
    Only the fields present in the request body are changed.
    """
    fields = payload.model_dump(exclude_unset=True)
    return account_service.update_account(db, account_id, **fields)


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(account_id: int, db: Session = Depends(get_db)):
    account_service.delete_account(db, account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{account_id}/adjust", response_model=AccountOut)
def adjust_balance(account_id: int, payload: BalanceAdjustment, db: Session = Depends(get_db)):
    return account_service.adjust_balance(db, account_id, payload.delta)


@router.get("/{account_id}/transactions", response_model=List[TransactionOut])
def account_transactions(account_id: int, db: Session = Depends(get_db)):
    return ledger.list_transactions_for_account(db, account_id)
