# app/services/ledger.py
#
# Transaction Ledger
# Persists transactions and keeps every referenced account balance equal to
#   initial balance + sum(INCOME) - sum(EXPENSE)
# by pairing each row insert/update/delete with its balance adjustment inside
# one write unit.

import logging
from datetime import date as date_type, datetime
from decimal import Decimal
from typing import Any, List

from sqlalchemy.orm import Session, joinedload

from app.errors import NotFoundError, ValidationError
from app.services.accounts import apply_delta, get_account, to_money
from db import write_unit
from models import DATE_FORMAT, Transaction, TransactionKind

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Uncategorized"


# ---- Input normalization ----

def parse_kind(kind: Any) -> TransactionKind:
    """Accept a TransactionKind or its name in any case ("income", "EXPENSE")."""
    if isinstance(kind, TransactionKind):
        return kind
    try:
        return TransactionKind(str(kind or "").strip().upper())
    except ValueError:
        raise ValidationError(f"unknown transaction kind: {kind!r}", field="kind")


def parse_amount(amount: Any) -> Decimal:
    value = to_money(amount, "amount")
    if value <= 0:
        raise ValidationError("amount must be greater than zero", field="amount")
    return value


def parse_date(value: Any) -> datetime:
    """
    Accept a datetime, a date (midnight) or a string in one of:
    'YYYY-MM-DD HH:MM:SS', 'YYYY-MM-DD', ISO 8601.
    Sub-second precision is dropped, matching the on-disk format.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date_type):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str) and value.strip():
        s = value.strip()
        for fmt in (DATE_FORMAT, "%Y-%m-%d"):
            try:
                parsed = datetime.strptime(s, fmt)
                break
            except ValueError:
                continue
        else:
            try:
                parsed = datetime.fromisoformat(s)
            except ValueError:
                raise ValidationError(f"invalid date: {value!r}", field="date")
    else:
        raise ValidationError("date is required", field="date")

    # Stored without timezone
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None)
    return parsed.replace(microsecond=0)


def _category(value: Any) -> str:
    text = str(value or "").strip()
    return text or DEFAULT_CATEGORY


def _description(value: Any) -> str | None:
    text = str(value or "").strip()
    return text or None


# ---- Balance deltas ----

def signed_delta(kind: Any, amount: Decimal) -> Decimal:
    """Effect of a posted transaction on its account balance."""
    return amount if parse_kind(kind) is TransactionKind.INCOME else -amount


def reversal_delta(kind: Any, amount: Decimal) -> Decimal:
    """Adjustment that undoes a transaction's prior effect."""
    return -signed_delta(kind, amount)


# ---- Reads ----

def _base_query(db: Session):
    return db.query(Transaction).options(joinedload(Transaction.account))


def _newest_first(query):
    # Equal dates: most recently inserted first.
    return query.order_by(Transaction.date.desc(), Transaction.id.desc())


def get_transaction(db: Session, transaction_id: int) -> Transaction:
    """Fetch one transaction with its owning account loaded (for account_name)."""
    tx = _base_query(db).filter(Transaction.id == transaction_id).first()
    if tx is None:
        raise NotFoundError("Transaction", transaction_id)
    return tx


def list_transactions_for_account(db: Session, account_id: int) -> List[Transaction]:
    get_account(db, account_id)
    query = _base_query(db).filter(Transaction.account_id == account_id)
    return _newest_first(query).all()


def list_all_transactions(db: Session) -> List[Transaction]:
    return _newest_first(_base_query(db)).all()


# ---- Writes ----

def add_transaction(
    db: Session,
    amount: Any,
    kind: Any,
    category: str | None,
    description: str | None,
    date: Any,
    account_id: int,
) -> int:
    """
    Insert a transaction and post it to its account.

    Validation happens before anything is written. The insert and the
    balance adjustment commit together or not at all.
    """
    value = parse_amount(amount)
    tx_kind = parse_kind(kind)
    when = parse_date(date)
    get_account(db, account_id)

    tx = Transaction(
        amount=value,
        kind=tx_kind.value,
        category=_category(category),
        description=_description(description),
        date=when,
        account_id=account_id,
    )
    delta = signed_delta(tx_kind, value)

    with write_unit(db, "add_transaction"):
        db.add(tx)
        db.flush()
        tx_id = tx.id
        apply_delta(db, account_id, delta)

    logger.info(
        "added transaction id=%s %s %s to account id=%s (delta %+s)",
        tx_id, tx_kind.value, value, account_id, delta,
    )
    return tx_id


def update_transaction(
    db: Session,
    transaction_id: int,
    *,
    amount: Any,
    kind: Any,
    category: str | None,
    description: str | None,
    date: Any,
    account_id: int,
) -> Transaction:
    """
    Overwrite a transaction and re-balance the affected account(s).

    The old values are reversed and the new values applied:
    - same account: one adjustment of (reversal + forward)
    - account changed: reversal on the old account, forward on the new one
    """
    new_amount = parse_amount(amount)
    new_kind = parse_kind(kind)
    new_date = parse_date(date)

    with write_unit(db, "update_transaction"):
        tx = db.get(Transaction, transaction_id)
        if tx is None:
            raise NotFoundError("Transaction", transaction_id)
        get_account(db, account_id)

        old_account_id = tx.account_id
        reversal = reversal_delta(tx.kind, tx.amount)
        forward = signed_delta(new_kind, new_amount)

        if old_account_id == account_id:
            apply_delta(db, account_id, reversal + forward)
        else:
            apply_delta(db, old_account_id, reversal)
            apply_delta(db, account_id, forward)

        tx.amount = new_amount
        tx.kind = new_kind.value
        tx.category = _category(category)
        tx.description = _description(description)
        tx.date = new_date
        tx.account_id = account_id

    logger.info(
        "updated transaction id=%s: account %s -> %s, reversal %+s, forward %+s",
        transaction_id, old_account_id, account_id, reversal, forward,
    )
    db.expire_all()
    return get_transaction(db, transaction_id)


def delete_transaction(db: Session, transaction_id: int) -> None:
    """Reverse a transaction's effect on its account, then delete the row."""
    with write_unit(db, "delete_transaction"):
        tx = db.get(Transaction, transaction_id)
        if tx is None:
            raise NotFoundError("Transaction", transaction_id)
        reversal = reversal_delta(tx.kind, tx.amount)
        account_id = tx.account_id
        apply_delta(db, account_id, reversal)
        db.delete(tx)

    logger.info(
        "deleted transaction id=%s from account id=%s (delta %+s)",
        transaction_id, account_id, reversal,
    )
