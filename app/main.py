# main.py
# Role: Application entry point for the finance ledger.
#       Configures logging, creates database tables, registers the ledger
#       error handlers, and registers all route modules.

"""
Main FastAPI app for the personal finance ledger.

Here we only:
- set up logging
- create the FastAPI app
- create DB tables
- map LedgerError and malformed request payloads to JSON error responses
- include route modules
"""

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

import models  # noqa: F401  (registers tables on Base.metadata)
from db import Base, engine
from app.errors import LedgerError, ValidationError
from app.routes_root import router as root_router
from app.routes_accounts import router as accounts_router
from app.routes_transactions import router as transactions_router
from app.routes_dashboard import router as dashboard_router


# -------------------------------------------------------------------
# Logging
# -------------------------------------------------------------------

logging.basicConfig(
    level=getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# -------------------------------------------------------------------
# App & DB setup
# -------------------------------------------------------------------

# Create database tables (only if they don't exist yet).
# This is safe to run on startup for SQLite and development usage.
Base.metadata.create_all(bind=engine)

# FastAPI application instance
app = FastAPI(title="Finance Ledger")


@app.exception_handler(LedgerError)
async def ledger_error_handler(request: Request, exc: LedgerError):
    """Every typed ledger error becomes {"error": {...}} with its HTTP status."""
    log = logger.error if exc.http_status >= 500 else logger.info
    log("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _field_path(loc) -> str:
    # ("body", "amount") -> "amount"
    parts = [str(p) for p in loc]
    if parts and parts[0] in ("body", "query", "path"):
        parts = parts[1:]
    return ".".join(parts)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed payloads get the same 400 envelope as ValidationError."""
    errors = exc.errors()
    logger.info("VALIDATION_ERROR on %s: %s", request.url.path, errors)
    first = _field_path(errors[0]["loc"]) if errors else None
    body = ValidationError("Invalid request data", field=first or None).to_response()
    body["error"]["details"] = [
        {"field": _field_path(e["loc"]), "message": e["msg"], "type": e["type"]}
        for e in errors
    ]
    return JSONResponse(status_code=400, content=body)


# -------------------------------------------------------------------
# Include routers
# -------------------------------------------------------------------

# Root / landing routes and health check
app.include_router(root_router)

# Account form API
app.include_router(accounts_router)

# Transaction form API and history page
app.include_router(transactions_router)

# Dashboard (accounts, total balance, report) and report API
app.include_router(dashboard_router)
