# app/deps.py
# Role: Shared application-level dependencies and globals.
#       Provides the Jinja2 templates loader (with the currency display filter)
#       and the standard SQLAlchemy database session dependency.

"""
Shared dependencies and globals for the finance ledger app.
"""

import os
from decimal import Decimal
from typing import Generator

from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from db import SessionLocal

# -------------------------------------------------------------------
# Templates
# -------------------------------------------------------------------

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

# Jinja2 templates loader (used by all HTML-rendering routes)
templates = Jinja2Templates(directory=TEMPLATES_DIR)


def format_currency(value, currency: str | None = None) -> str:
    """
    Presentational money formatting: thousands separator, 2 decimals,
    sign in front, currency code after. None renders as an empty string.
    """
    if value is None:
        return ""
    amount = Decimal(str(value))
    sign = "-" if amount < 0 else ""
    text = f"{sign}{abs(amount):,.2f}"
    return f"{text} {currency}" if currency else text


templates.env.filters["currency"] = format_currency

# -------------------------------------------------------------------
# Database dependency
# -------------------------------------------------------------------

def get_db() -> Generator[Session, None, None]:
    """
    FastAPI dependency that yields a database session and ensures it is closed.

    Typical usage in routes:
        db: Session = Depends(get_db)
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
