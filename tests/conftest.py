"""Root conftest — per-test SQLite ledger and API client."""

import os

# Importing app.main must never touch the developer's real database file.
os.environ.setdefault("FINANCE_DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

import models  # noqa: F401  (registers tables on Base.metadata)
from app.deps import get_db
from app.services import accounts, ledger
from db import Base, make_engine


@pytest.fixture
def engine(tmp_path):
    eng = make_engine(f"sqlite:///{tmp_path / 'ledger.db'}")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def checking(db):
    """The 'Checking' account from the reference scenario: 100.00 USD."""
    return accounts.create_account(db, "Checking", 100.0, "Checking", "USD", "")


@pytest.fixture
def savings(db):
    return accounts.create_account(db, "Savings", 500, "Savings", "USD", "rainy day")


@pytest.fixture
def post(db):
    """Shortcut for ledger.add_transaction with sensible defaults."""

    def _post(account_id, amount, kind="EXPENSE", category="Food", description="", date=None):
        return ledger.add_transaction(
            db,
            amount=amount,
            kind=kind,
            category=category,
            description=description,
            date=date or datetime(2024, 3, 1, 12, 0, 0),
            account_id=account_id,
        )

    return _post


@pytest.fixture
def client(session_factory):
    from app.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
