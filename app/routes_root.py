# routes_root.py
"""
Root / basic endpoints (health, landing).
"""

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.deps import get_db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/")
def read_root():
    """
    Landing endpoint: the dashboard is the home screen.
    """
    return RedirectResponse(url="/dashboard", status_code=302)


@router.get("/health")
def health(db: Session = Depends(get_db)):
    """
    Liveness plus a trivial query against the ledger database.
    """
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("health check failed: %r", exc)
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "reason": "database_unavailable"},
        )
    return {"status": "ok"}
