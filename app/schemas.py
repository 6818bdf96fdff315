# app/schemas.py
# Role: Pydantic request/response models for the JSON API.
#       Only shape the payloads; all business validation stays in app/services.

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


# ---- Accounts ----

class AccountCreate(BaseModel):
    name: str
    initial_balance: Decimal = Decimal("0")
    account_type: Optional[str] = None
    currency: str
    notes: Optional[str] = None


class AccountUpdate(BaseModel):
    name: Optional[str] = None
    account_type: Optional[str] = None
    currency: Optional[str] = None
    notes: Optional[str] = None
    balance: Optional[Decimal] = None


class BalanceAdjustment(BaseModel):
    delta: Decimal


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    balance: Decimal
    account_type: Optional[str] = None
    currency: str
    notes: Optional[str] = None


# ---- Transactions ----

class TransactionIn(BaseModel):
    """Full set of editable fields, used for both create and overwrite."""

    amount: Decimal
    kind: str
    category: Optional[str] = None
    description: Optional[str] = None
    date: datetime
    account_id: int


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    amount: Decimal
    kind: str
    category: str
    description: Optional[str] = None
    date: datetime
    account_id: int
    account_name: Optional[str] = None


# ---- Reports ----

class CategoryTotalOut(BaseModel):
    category: str
    total: Decimal


class ReportOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    account_id: Optional[int] = None
    total_income: Decimal
    total_expense: Decimal
    net_balance: Decimal
    expenses_by_category: List[CategoryTotalOut]
    income_by_category: List[CategoryTotalOut]


class CreatedOut(BaseModel):
    id: int
