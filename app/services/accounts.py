# app/services/accounts.py
#
# Account Repository
# Creates, reads, updates and deletes accounts, and owns the balance
# adjustment primitive the transaction ledger builds on.

import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, List

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from db import write_unit
from models import Account

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")

# Exclusive bound on any single amount or balance value a caller supplies
MONEY_LIMIT = Decimal(10) ** 12

# Fields a caller may change through update_account()
UPDATABLE_FIELDS = ("name", "account_type", "currency", "notes", "balance")


# ---- Value helpers ----

def to_money(value: Any, field: str = "amount") -> Decimal:
    """
    Convert a user-supplied number (Decimal, int, float or numeric string)
    into a Decimal rounded to cents.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number", field=field)
    try:
        money = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field} must be a number", field=field)
    if not money.is_finite():
        raise ValidationError(f"{field} must be a finite number", field=field)
    # Numeric(14, 2) leaves 12 integer digits; SQLite's REAL rounds anything wider.
    if abs(money) >= MONEY_LIMIT:
        raise ValidationError(f"{field} must be below {MONEY_LIMIT:,} in magnitude", field=field)
    try:
        return money.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValidationError(f"{field} must be a number", field=field)


def money_total(value: Any) -> Decimal:
    """Round an aggregate read back from the database (SUM, COALESCE) to cents."""
    return Decimal(str(value or 0)).quantize(CENTS, rounding=ROUND_HALF_UP)


def _required_text(value: Any, field: str) -> str:
    text = str(value or "").strip()
    if not text:
        raise ValidationError(f"{field} must not be empty", field=field)
    return text


def _optional_text(value: Any) -> str | None:
    text = str(value or "").strip()
    return text or None


# ---- CRUD ----

def create_account(
    db: Session,
    name: str,
    initial_balance: Any = 0,
    account_type: str | None = None,
    currency: str = "",
    notes: str | None = None,
) -> int:
    """
    Insert a new account and return its id.

    The initial balance is stored as given; there are no transactions yet.
    """
    account = Account(
        name=_required_text(name, "name"),
        balance=to_money(initial_balance, "initial_balance"),
        account_type=_optional_text(account_type),
        currency=_required_text(currency, "currency").upper(),
        notes=_optional_text(notes),
    )

    with write_unit(db, "create_account"):
        db.add(account)
        db.flush()
        account_id = account.id

    logger.info("created account id=%s name=%r balance=%s", account_id, account.name, account.balance)
    return account_id


def get_account(db: Session, account_id: int) -> Account:
    account = db.get(Account, account_id)
    if account is None:
        raise NotFoundError("Account", account_id)
    return account


def list_accounts(db: Session) -> List[Account]:
    """All accounts in creation order."""
    return db.query(Account).order_by(Account.id.asc()).all()


def update_account(db: Session, account_id: int, **fields: Any) -> Account:
    """
    Overwrite the supplied fields of an account.

    A direct balance edit bypasses the transaction ledger: it is not
    reconciled against posted transactions.
    """
    unknown = sorted(set(fields) - set(UPDATABLE_FIELDS))
    if unknown:
        raise ValidationError(f"unknown account fields: {', '.join(unknown)}", field=unknown[0])

    values: dict[str, Any] = {}
    if "name" in fields:
        values["name"] = _required_text(fields["name"], "name")
    if "currency" in fields:
        values["currency"] = _required_text(fields["currency"], "currency").upper()
    if "account_type" in fields:
        values["account_type"] = _optional_text(fields["account_type"])
    if "notes" in fields:
        values["notes"] = _optional_text(fields["notes"])
    if "balance" in fields:
        values["balance"] = to_money(fields["balance"], "balance")

    with write_unit(db, "update_account"):
        account = get_account(db, account_id)
        for key, value in values.items():
            setattr(account, key, value)

    logger.info("updated account id=%s fields=%s", account_id, sorted(values))
    return get_account(db, account_id)


def delete_account(db: Session, account_id: int) -> None:
    """Delete an account together with every transaction posted to it."""
    with write_unit(db, "delete_account"):
        account = get_account(db, account_id)
        # Loading the collection lets the ORM cascade delete each row in this unit.
        removed = len(account.transactions)
        db.delete(account)

    logger.info("deleted account id=%s with %s transaction(s)", account_id, removed)


# ---- Balance primitive ----

def apply_delta(db: Session, account_id: int, delta: Decimal) -> None:
    """
    balance += delta, as one SQL UPDATE.

    Does not commit: call it inside a write_unit() together with the row
    mutation it belongs to.
    """
    result = db.execute(
        update(Account)
        .where(Account.id == account_id)
        .values(balance=Account.balance + delta)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("Account", account_id)
    logger.debug("account id=%s balance %+s", account_id, delta)


def adjust_balance(db: Session, account_id: int, delta: Any) -> Account:
    """Standalone balance adjustment committed as its own unit."""
    amount = to_money(delta, "delta")
    with write_unit(db, "adjust_balance"):
        apply_delta(db, account_id, amount)

    logger.info("adjusted account id=%s by %s", account_id, amount)
    db.expire_all()
    return get_account(db, account_id)


def total_balance(db: Session) -> Decimal:
    """Sum of every account balance (0 when there are no accounts)."""
    total = db.query(func.coalesce(func.sum(Account.balance), 0)).scalar()
    return money_total(total)
