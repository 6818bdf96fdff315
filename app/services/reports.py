# app/services/reports.py
#
# Report Queries
# Read-only aggregates over posted transactions: income / expense totals
# (global or per account) and per-category breakdowns.

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, NamedTuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.services.accounts import money_total
from models import Transaction, TransactionKind


class CategoryTotal(NamedTuple):
    category: str
    total: Decimal


@dataclass
class LedgerReport:
    """Everything the report view shows for one account (or all accounts)."""

    account_id: int | None
    total_income: Decimal
    total_expense: Decimal
    net_balance: Decimal
    expenses_by_category: List[CategoryTotal] = field(default_factory=list)
    income_by_category: List[CategoryTotal] = field(default_factory=list)


def _sum_amounts(db: Session, kind: TransactionKind, account_id: int | None) -> Decimal:
    query = db.query(func.coalesce(func.sum(Transaction.amount), 0)).filter(
        Transaction.kind == kind.value
    )
    if account_id is not None:
        query = query.filter(Transaction.account_id == account_id)
    return money_total(query.scalar())


def total_income(db: Session, account_id: int | None = None) -> Decimal:
    """Sum of INCOME amounts, optionally for one account. 0 when nothing matches."""
    return _sum_amounts(db, TransactionKind.INCOME, account_id)


def total_expense(db: Session, account_id: int | None = None) -> Decimal:
    """Sum of EXPENSE amounts, optionally for one account. 0 when nothing matches."""
    return _sum_amounts(db, TransactionKind.EXPENSE, account_id)


def net_balance(db: Session, account_id: int | None = None) -> Decimal:
    return total_income(db, account_id) - total_expense(db, account_id)


def _by_category(db: Session, kind: TransactionKind) -> List[CategoryTotal]:
    total = func.sum(Transaction.amount)
    rows = (
        db.query(Transaction.category.label("category"), total.label("total"))
        .filter(Transaction.kind == kind.value)
        .group_by(Transaction.category)
        .order_by(total.desc(), Transaction.category.asc())
        .all()
    )
    return [CategoryTotal(r.category, money_total(r.total)) for r in rows]


def expenses_by_category(db: Session) -> List[CategoryTotal]:
    """One row per EXPENSE category, largest total first."""
    return _by_category(db, TransactionKind.EXPENSE)


def income_by_category(db: Session) -> List[CategoryTotal]:
    """One row per INCOME category, largest total first."""
    return _by_category(db, TransactionKind.INCOME)


def build_report(db: Session, account_id: int | None = None) -> LedgerReport:
    """
    Totals for the selected account (None = all accounts) plus the
    category breakdowns, which always span every account.
    """
    income = total_income(db, account_id)
    expense = total_expense(db, account_id)
    return LedgerReport(
        account_id=account_id,
        total_income=income,
        total_expense=expense,
        net_balance=income - expense,
        expenses_by_category=expenses_by_category(db),
        income_by_category=income_by_category(db),
    )
