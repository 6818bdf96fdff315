# db.py
# Role: Database bootstrap for the finance ledger.
#       Defines the SQLite engine, SQLAlchemy session factory, and declarative Base.
#       Also provides write_unit(), the commit-or-rollback scope every ledger
#       mutation runs in.

"""
Database setup for the finance ledger.

- Uses SQLite database at: <project_root>/database/finance.db
  (override with FINANCE_DATABASE_URL)
- Ensures the 'database' folder exists.
- Turns on SQLite foreign keys for every connection so that
  transactions.account_id cascades on account delete.
"""

import logging
import os
import threading
from contextlib import contextmanager
from typing import Iterator

from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from app.errors import LedgerError, StorageError

load_dotenv()

logger = logging.getLogger(__name__)

# Base directory of the project (where this module lives)
BASE_DIR = os.path.dirname(os.path.abspath(__file__))

# Folder for SQLite DB (created on startup if missing)
DB_DIR = os.path.join(BASE_DIR, "database")
os.makedirs(DB_DIR, exist_ok=True)  # ensure folder exists

# Full path to the default SQLite database file
DB_PATH = os.path.join(DB_DIR, "finance.db")

# SQLAlchemy connection URL
DATABASE_URL = os.getenv("FINANCE_DATABASE_URL", f"sqlite:///{DB_PATH}")


def _env_truthy(name: str, default: str = "0") -> bool:
    v = os.getenv(name, default)
    return str(v).strip().lower() in ("1", "true", "yes", "y", "on")


def make_engine(url: str = DATABASE_URL) -> Engine:
    """
    Build an engine for the given URL.

    For SQLite, we need check_same_thread=False for FastAPI (threaded request handling).
    """
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(
        url,
        connect_args=connect_args,
        echo=_env_truthy("FINANCE_SQL_ECHO"),
    )


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ships with FK enforcement off; ON DELETE CASCADE needs it on.
    module = type(dbapi_connection).__module__
    if not module.startswith("sqlite3"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


engine = make_engine()

# Standard session factory used via dependency injection (see app/deps.py:get_db)
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

# Declarative base class for ORM models
Base = declarative_base()


# -------------------------------------------------------------------
# Atomic write scope
# -------------------------------------------------------------------

# One writer at a time inside this process.
_WRITE_LOCK = threading.RLock()


@contextmanager
def write_unit(db: Session, operation: str) -> Iterator[Session]:
    """
    Run a compound write (row mutation + balance adjustment) as one unit.

    Usage:
        with write_unit(db, "add_transaction"):
            db.add(tx)
            apply_delta(db, account_id, delta)

    Commits when the block exits cleanly. On any error the session is rolled
    back, so neither the row change nor the balance change is visible.
    Ledger errors propagate as-is; SQLAlchemy errors are wrapped in StorageError.
    """
    with _WRITE_LOCK:
        try:
            yield db
            db.commit()
        except LedgerError:
            db.rollback()
            raise
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error("%s rolled back: %r", operation, exc)
            raise StorageError(operation, str(exc)) from exc
        except Exception:
            db.rollback()
            logger.warning("%s rolled back after unexpected error", operation)
            raise
