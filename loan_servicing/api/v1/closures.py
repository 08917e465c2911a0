"""/v1/daily-closures - end-of-day cash reports of a lender"""

import uuid
import logging
from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from loan_servicing.api.v1.schemas import (
    ClosureSummarySchema,
    DailyClosureByDateResponse,
    DailyClosureCreateRequest,
    DailyClosureListResponse,
    DailyClosureResponse,
    DueInstallmentSchema,
    DueInstallmentsResponse,
    ExpenseSchema,
)
from loan_servicing.api.dependencies import get_request_id, get_today
from loan_servicing.domain.closures import (
    collection_gap,
    expected_collection,
    expenses_by_category,
    installments_due_on,
    summarize_closures,
    validate_closure,
)
from loan_servicing.domain.exceptions import ClosureAlreadyExistsError, InvalidClosureError
from loan_servicing.domain.models import DailyClosure, DueInstallment, Expense
from loan_servicing.infrastructure.database.session import get_db
from loan_servicing.infrastructure.database.repositories import (
    DailyClosureRepository,
    LoanRepository,
    to_domain_closure,
    to_domain_loan,
)
from loan_servicing.infrastructure.observability.metrics import record_daily_closure
from loan_servicing.infrastructure.observability.logging import log_daily_closure_recorded

router = APIRouter()


def _closure_response(closure: DailyClosure) -> DailyClosureResponse:
    return DailyClosureResponse(
        closure_id=closure.closure_id,
        manager_id=closure.manager_id,
        closure_date=closure.closure_date,
        total_collected=closure.total_collected,
        total_expenses=closure.total_expenses,
        net_amount=closure.net_amount,
        notes=closure.notes,
        expenses=[
            ExpenseSchema(category=e.category, amount=e.amount, description=e.description)
            for e in closure.expenses
        ],
        expenses_by_category=expenses_by_category(closure.expenses),
    )


def _due_schemas(due: List[DueInstallment]) -> List[DueInstallmentSchema]:
    return [
        DueInstallmentSchema(
            loan_id=d.loan_id,
            client_id=d.client_id,
            tracking_code=d.tracking_code,
            installment_number=d.installment_number,
            due_date=d.due_date,
            amount=d.amount,
            paid_amount=d.paid_amount,
            outstanding_amount=d.outstanding_amount,
            status=d.status,
            days_overdue=d.days_overdue,
        )
        for d in due
    ]


def _installments_due(db: Session, manager_id: str, closure_date: date, today: date) -> List[DueInstallment]:
    loans = [to_domain_loan(r) for r in LoanRepository(db).get_loans_by_manager(manager_id)]
    return installments_due_on(loans, closure_date, today)


@router.post("/daily-closures", response_model=DailyClosureResponse, status_code=201)
def create_daily_closure(
    request_body: DailyClosureCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Close a lender's day.

    Stores the declared collection and expenses; net amount is collected
    minus expenses. A lender closes each date at most once.
    """
    request_id = get_request_id(request)
    expenses = [
        Expense(category=e.category, amount=e.amount, description=e.description)
        for e in request_body.expenses
    ]

    try:
        validate_closure(request_body.closure_date, request_body.total_collected, expenses, today)

        repo = DailyClosureRepository(db)
        if repo.get_closure_by_date(request_body.manager_id, request_body.closure_date) is not None:
            raise ClosureAlreadyExistsError(
                f"Manager {request_body.manager_id} already closed {request_body.closure_date}"
            )

        db_closure = repo.create_closure(
            manager_id=request_body.manager_id,
            closure_date=request_body.closure_date,
            total_collected=request_body.total_collected,
            expenses=expenses,
            notes=request_body.notes,
        )
        closure = to_domain_closure(db_closure)

        db.commit()

    except InvalidClosureError as e:
        db.rollback()
        logging.warning(f"Invalid daily closure: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ClosureAlreadyExistsError as e:
        db.rollback()
        raise HTTPException(status_code=409, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    response = _closure_response(closure)
    record_daily_closure(closure.net_amount, response.expenses_by_category)
    log_daily_closure_recorded(
        request_id,
        closure.closure_id,
        closure.manager_id,
        closure.closure_date.isoformat(),
        closure.total_collected,
        closure.total_expenses,
        closure.net_amount,
    )

    return response


@router.get("/daily-closures", response_model=DailyClosureListResponse)
def list_daily_closures(
    manager_id: str = Query(..., min_length=1, description="Lender identifier"),
    start_date: Optional[date] = Query(None, description="Inclusive lower bound"),
    end_date: Optional[date] = Query(None, description="Inclusive upper bound"),
    db: Session = Depends(get_db),
):
    """Closures in a date range, newest first, with collected/expense/net totals"""
    if start_date is not None and end_date is not None and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date must not be after end_date")

    records = DailyClosureRepository(db).get_closures_by_manager(manager_id, start_date, end_date)
    closures = [to_domain_closure(r) for r in records]
    summary = summarize_closures(closures)

    return DailyClosureListResponse(
        manager_id=manager_id,
        start_date=start_date,
        end_date=end_date,
        closures=[_closure_response(c) for c in closures],
        summary=ClosureSummarySchema(
            closure_count=summary.closure_count,
            total_collected=summary.total_collected,
            total_expenses=summary.total_expenses,
            net_amount=summary.net_amount,
            average_daily=summary.average_daily,
        ),
    )


@router.get("/daily-closures/date/{closure_date}", response_model=DailyClosureByDateResponse)
def get_daily_closure_by_date(
    closure_date: date,
    manager_id: str = Query(..., min_length=1, description="Lender identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    A day's closure, if any, next to the installments that fell due that day.

    collection_gap is expected minus declared collection, null until the day is closed.
    """
    record = DailyClosureRepository(db).get_closure_by_date(manager_id, closure_date)
    closure = to_domain_closure(record) if record is not None else None
    due = _installments_due(db, manager_id, closure_date, today)

    return DailyClosureByDateResponse(
        manager_id=manager_id,
        closure_date=closure_date,
        expected_amount=expected_collection(due),
        installments=_due_schemas(due),
        closure=_closure_response(closure) if closure is not None else None,
        collection_gap=collection_gap(due, closure),
    )


@router.get("/daily-closures/installments/{closure_date}", response_model=DueInstallmentsResponse)
def get_installments_due_on_date(
    closure_date: date,
    manager_id: str = Query(..., min_length=1, description="Lender identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Installments the lender expected to collect on closure_date"""
    due = _installments_due(db, manager_id, closure_date, today)
    return DueInstallmentsResponse(
        manager_id=manager_id,
        closure_date=closure_date,
        expected_amount=expected_collection(due),
        installments=_due_schemas(due),
    )


@router.get("/daily-closures/{closure_id}", response_model=DailyClosureResponse)
def get_daily_closure(closure_id: str, db: Session = Depends(get_db)):
    try:
        closure_uuid = uuid.UUID(closure_id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid closure ID format")

    record = DailyClosureRepository(db).get_closure_by_id(closure_uuid)
    if record is None:
        raise HTTPException(status_code=404, detail="Daily closure not found")

    return _closure_response(to_domain_closure(record))
