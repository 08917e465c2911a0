"""GET /v1/tracking/{tracking_code} - borrower self-service loan lookup"""

from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from loan_servicing.api.v1.schemas import TrackingInstallment, TrackingResponse
from loan_servicing.api.dependencies import get_today, get_tracking_cache
from loan_servicing.domain.portfolio import effective_installment_status, summarize_tracking
from loan_servicing.infrastructure.cache import TTLCache
from loan_servicing.infrastructure.database.session import get_db
from loan_servicing.infrastructure.database.repositories import LoanRepository, to_domain_loan
from loan_servicing.infrastructure.observability.metrics import tracking_cache_counter

router = APIRouter()


def _load_tracking(tracking_code: str, db: Session, today: date):
    """Return (client dni, response) for a tracking code, or None"""
    db_loan = LoanRepository(db).get_loan_by_tracking_code(tracking_code)
    if db_loan is None:
        return None

    loan = to_domain_loan(db_loan)
    summary = summarize_tracking(loan, today)
    response = TrackingResponse(
        tracking_code=loan.tracking_code,
        client_name=db_loan.client.full_name,
        status=summary.status,
        principal=loan.principal,
        total_amount=loan.total_amount,
        total_payments=summary.total_payments,
        remaining_payments=summary.remaining_payments,
        next_due_date=summary.next_due_date,
        paid_amount=summary.paid_amount,
        outstanding_amount=summary.outstanding_amount,
        installments=[
            TrackingInstallment(
                installment_number=inst.installment_number,
                due_date=inst.due_date,
                amount=inst.amount,
                status=effective_installment_status(inst, today),
                paid_date=inst.paid_date,
            )
            for inst in loan.installments
        ],
    )
    return db_loan.client.dni, response


@router.get("/tracking/{tracking_code}", response_model=TrackingResponse)
def track_loan(
    tracking_code: str,
    dni: str = Query(..., min_length=1, description="Borrower national ID"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    tracking_cache: TTLCache = Depends(get_tracking_cache),
):
    """
    Look up a loan by its tracking code.

    The borrower's DNI must match; a mismatch reads as not found so codes
    cannot be enumerated. Results are cached per tracking code until the TTL
    expires or a payment is recorded.
    """
    cached = tracking_cache.get(tracking_code)
    if cached is not None:
        tracking_cache_counter.labels(result="hit").inc()
    else:
        tracking_cache_counter.labels(result="miss").inc()
        cached = _load_tracking(tracking_code, db, today)
        if cached is not None:
            tracking_cache.set(tracking_code, cached)

    if cached is None or cached[0] != dni:
        raise HTTPException(status_code=404, detail="Loan not found")

    return cached[1]
