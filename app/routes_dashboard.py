# app/routes_dashboard.py

from fastapi import APIRouter, Request, Depends, Query
from sqlalchemy.orm import Session

from .deps import templates, get_db
from app.schemas import CategoryTotalOut, ReportOut
from app.services import accounts as account_service
from app.services import reports

router = APIRouter()


def _report_for(db: Session, account_id: int | None) -> reports.LedgerReport:
    # An unknown account is a 404, not an empty report.
    if account_id is not None:
        account_service.get_account(db, account_id)
    return reports.build_report(db, account_id)


@router.get("/api/reports", response_model=ReportOut)
def report_api(
    account_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    report = _report_for(db, account_id)
    return ReportOut(
        account_id=report.account_id,
        total_income=report.total_income,
        total_expense=report.total_expense,
        net_balance=report.net_balance,
        expenses_by_category=[CategoryTotalOut(**row._asdict()) for row in report.expenses_by_category],
        income_by_category=[CategoryTotalOut(**row._asdict()) for row in report.income_by_category],
    )


@router.get("/dashboard")
def dashboard_page(
    request: Request,
    account_id: int | None = Query(None),
    db: Session = Depends(get_db),
):
    accounts = account_service.list_accounts(db)
    report = _report_for(db, account_id)

    # All-accounts total only makes sense in one currency
    currencies = {a.currency for a in accounts}
    display_currency = currencies.pop() if len(currencies) == 1 else None

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "accounts": accounts,
            "total_balance": account_service.total_balance(db),
            "display_currency": display_currency,
            "selected_account_id": account_id,
            "report": report,
        },
    )
