# models.py
# Role: SQLAlchemy ORM models for the finance ledger domain.
#       Defines Account (with its eagerly maintained balance) and Transaction,
#       which always posts to exactly one account.

import enum

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects import sqlite
from sqlalchemy.orm import relationship

from db import Base

# Decimal money columns: 2 fractional digits, returned as decimal.Decimal
Money = Numeric(14, 2, asdecimal=True)

# Dates live on disk as "yyyy-MM-dd HH:mm:ss" text
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LedgerDateTime = DateTime().with_variant(
    sqlite.DATETIME(
        storage_format="%(year)04d-%(month)02d-%(day)02d %(hour)02d:%(minute)02d:%(second)02d",
        regexp=r"(\d+)-(\d+)-(\d+) (\d+):(\d+):(\d+)",
    ),
    "sqlite",
)


class TransactionKind(str, enum.Enum):
    """Direction of a transaction. The sign lives here, never in the amount."""

    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


class Account(Base):
    """
    ORM model representing one account (wallet, bank account, card...).

    `balance` is a derived quantity: the initial balance plus every posted
    INCOME minus every posted EXPENSE. The ledger service keeps it in sync.
    """

    __tablename__ = "accounts"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Display name, e.g. "Checking"
    name = Column(String, nullable=False)

    # Running balance in `currency`
    balance = Column(Money, nullable=False, default=0)

    # Free-text classification, e.g. "Savings", "Checking", "Cash"
    account_type = Column(String, nullable=True)

    # Currency code, e.g. "EUR", "USD", "IDR"
    currency = Column(String, nullable=False)

    # Optional free-text notes
    notes = Column(Text, nullable=True)

    transactions = relationship(
        "Transaction",
        back_populates="account",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Account {self.id} {self.name!r} {self.balance} {self.currency}>"


class Transaction(Base):
    """
    ORM model representing a single income or expense posted to an account.

    Amount is always positive; `kind` says whether it adds to or subtracts
    from the account balance.
    """

    __tablename__ = "transactions"

    # Primary key
    id = Column(Integer, primary_key=True, index=True)

    # Strictly positive amount
    amount = Column(Money, nullable=False)

    # "INCOME" or "EXPENSE" (column keeps the legacy name "type")
    kind = Column("type", String, nullable=False)

    # Grouping key for reports
    category = Column(String, nullable=False, default="Uncategorized")

    # Optional free-text description
    description = Column(Text, nullable=True)

    # Effective date chosen by the user (not the creation time)
    date = Column(LedgerDateTime, nullable=False, index=True)

    # Owning account
    account_id = Column(
        Integer,
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    account = relationship("Account", back_populates="transactions")

    @property
    def account_name(self) -> str | None:
        return self.account.name if self.account is not None else None

    @property
    def is_income(self) -> bool:
        return self.kind == TransactionKind.INCOME.value

    @property
    def is_expense(self) -> bool:
        return self.kind == TransactionKind.EXPENSE.value

    def __repr__(self) -> str:
        sign = "+" if self.is_income else "-"
        return f"<Transaction {self.id} {sign}{self.amount} ({self.category})>"
