# routes_transactions.py
"""
Routes related to transactions: the JSON API used by the transaction form,
and the HTML transaction history page.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from app.deps import get_db, templates
from app.schemas import CreatedOut, TransactionIn, TransactionOut
from app.services import accounts as account_service
from app.services import ledger, reports

router = APIRouter()


# -------------------------------------------------------------------
# JSON API
# -------------------------------------------------------------------

@router.get("/api/transactions", response_model=List[TransactionOut])
def list_transactions(db: Session = Depends(get_db)):
    return ledger.list_all_transactions(db)


@router.post(
    "/api/transactions",
    response_model=CreatedOut,
    status_code=status.HTTP_201_CREATED,
)
def add_transaction(payload: TransactionIn, db: Session = Depends(get_db)):
    tx_id = ledger.add_transaction(
        db,
        amount=payload.amount,
        kind=payload.kind,
        category=payload.category,
        description=payload.description,
        date=payload.date,
        account_id=payload.account_id,
    )
    return {"id": tx_id}


@router.get("/api/transactions/{transaction_id}", response_model=TransactionOut)
def get_transaction(transaction_id: int, db: Session = Depends(get_db)):
    return ledger.get_transaction(db, transaction_id)


@router.put("/api/transactions/{transaction_id}", response_model=TransactionOut)
def update_transaction(transaction_id: int, payload: TransactionIn, db: Session = Depends(get_db)):
    return ledger.update_transaction(
        db,
        transaction_id,
        amount=payload.amount,
        kind=payload.kind,
        category=payload.category,
        description=payload.description,
        date=payload.date,
        account_id=payload.account_id,
    )


@router.delete("/api/transactions/{transaction_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_transaction(transaction_id: int, db: Session = Depends(get_db)):
    ledger.delete_transaction(db, transaction_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------------------------------------------------------------------
# HTML history page
# -------------------------------------------------------------------

@router.get("/transactions", response_class=HTMLResponse)
def transactions_page(
    request: Request,
    account_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Transaction history, newest first. With ?account_id=N only that
    account's transactions are listed (404 if the account does not exist).
    """
    if account_id is not None:
        selected = account_service.get_account(db, account_id)
        transactions = ledger.list_transactions_for_account(db, account_id)
    else:
        selected = None
        transactions = ledger.list_all_transactions(db)

    return templates.TemplateResponse(
        request,
        "transactions.html",
        {
            "transactions": transactions,
            "accounts": account_service.list_accounts(db),
            "selected_account": selected,
            "income_sum": reports.total_income(db, account_id),
            "expense_sum": reports.total_expense(db, account_id),
            "net_sum": reports.net_balance(db, account_id),
        },
    )
