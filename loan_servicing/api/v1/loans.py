"""/v1/loans - loan origination, lookup and installment payments"""

import time
import uuid
import logging
from datetime import date
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from loan_servicing.api.v1.schemas import (
    InstallmentSchema,
    LoanCreateRequest,
    LoanListResponse,
    LoanResponse,
    PaymentRequest,
    PaymentResponse,
)
from loan_servicing.api.dependencies import get_request_id, get_today, get_tracking_cache
from loan_servicing.config import settings
from loan_servicing.domain.amortization import compute_schedule
from loan_servicing.domain.exceptions import (
    ClientNotFoundError,
    InstallmentNotFoundError,
    InvalidLoanTermsError,
    InvalidPaymentError,
    LoanNotFoundError,
)
from loan_servicing.domain.models import Installment, Loan, LoanTerms
from loan_servicing.domain.payments import apply_payment, ensure_loan_accepts_payments, resolve_loan_status
from loan_servicing.domain.portfolio import effective_installment_status
from loan_servicing.infrastructure.cache import TTLCache
from loan_servicing.infrastructure.database.session import get_db
from loan_servicing.infrastructure.database.repositories import (
    ClientRepository,
    LoanRepository,
    generate_tracking_code,
    to_domain_loan,
)
from loan_servicing.infrastructure.observability.metrics import (
    invalid_terms_counter,
    payments_recorded_counter,
    record_loan_created,
)
from loan_servicing.infrastructure.observability.logging import log_loan_created, log_payment_recorded

router = APIRouter()


def _parse_uuid(value: str, label: str) -> uuid.UUID:
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {label} ID format")


def _installment_schema(installment: Installment, today: date) -> InstallmentSchema:
    return InstallmentSchema(
        installment_number=installment.installment_number,
        due_date=installment.due_date,
        amount=installment.amount,
        paid_amount=installment.paid_amount,
        status=effective_installment_status(installment, today),
        paid_date=installment.paid_date,
    )


def _loan_response(loan: Loan, today: date) -> LoanResponse:
    return LoanResponse(
        loan_id=loan.loan_id,
        client_id=loan.client_id,
        manager_id=loan.manager_id,
        tracking_code=loan.tracking_code,
        principal=loan.principal,
        interest_rate_percent=loan.interest_rate_percent,
        total_amount=loan.total_amount,
        status=loan.status,
        installments=[_installment_schema(i, today) for i in loan.installments],
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(
    request_body: LoanCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Originate a loan for a client.

    Flow:
    1. Resolve the client (the loan inherits its manager)
    2. Compute totals and the monthly schedule
    3. Persist loan + one sub-loan per installment as ACTIVE
    """
    start_time = time.time()
    request_id = get_request_id(request)
    client_uuid = _parse_uuid(request_body.client_id, "client")

    try:
        client = ClientRepository(db).get_client_by_id(client_uuid)
        if client is None:
            raise ClientNotFoundError(f"Client {request_body.client_id} not found")

        result = compute_schedule(
            LoanTerms(
                principal=request_body.principal,
                interest_rate_percent=request_body.interest_rate_percent,
                installment_count=request_body.installment_count,
                start_date=request_body.start_date,
            )
        )

        loan_repo = LoanRepository(db)
        db_loan = loan_repo.create_loan(
            client=client,
            tracking_code=generate_tracking_code(settings.tracking_code_prefix, request_body.start_date),
            start_date=request_body.start_date,
            result=result,
        )
        loan = to_domain_loan(db_loan)

        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        record_loan_created(loan.principal)
        log_loan_created(
            request_id,
            loan.loan_id,
            loan.manager_id,
            loan.principal,
            loan.total_amount,
            len(loan.installments),
            duration_ms,
        )

        return _loan_response(loan, today)

    except ClientNotFoundError as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidLoanTermsError as e:
        db.rollback()
        invalid_terms_counter.labels(operation="loan").inc()
        logging.warning(f"Invalid loan terms: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/loans", response_model=LoanListResponse)
def list_loans(
    manager_id: str = Query(..., min_length=1, description="Lender identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    loans = [to_domain_loan(r) for r in LoanRepository(db).get_loans_by_manager(manager_id)]
    return LoanListResponse(manager_id=manager_id, loans=[_loan_response(loan, today) for loan in loans])


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(loan_id: str, db: Session = Depends(get_db), today: date = Depends(get_today)):
    """
    Retrieve a loan with its installment schedule.

    Unpaid installments past their due date are reported as OVERDUE.
    """
    db_loan = LoanRepository(db).get_loan_by_id(_parse_uuid(loan_id, "loan"))
    if not db_loan:
        raise HTTPException(status_code=404, detail="Loan not found")

    return _loan_response(to_domain_loan(db_loan), today)


@router.post("/loans/{loan_id}/installments/{installment_number}/payments", response_model=PaymentResponse)
def record_payment(
    loan_id: str,
    installment_number: int,
    request_body: PaymentRequest,
    request: Request,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
    tracking_cache: TTLCache = Depends(get_tracking_cache),
):
    """
    Record a full or partial payment against one installment.

    The loan moves to COMPLETED once every installment is paid.
    """
    request_id = get_request_id(request)
    loan_uuid = _parse_uuid(loan_id, "loan")

    try:
        loan_repo = LoanRepository(db)
        db_loan = loan_repo.get_loan_by_id(loan_uuid)
        if db_loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")

        loan = to_domain_loan(db_loan)
        ensure_loan_accepts_payments(loan)

        index = installment_number - 1
        if not 0 <= index < len(loan.installments):
            raise InstallmentNotFoundError(
                f"Loan {loan_id} has no installment {installment_number}"
            )

        paid_on = request_body.paid_on or today
        updated = apply_payment(loan.installments[index], request_body.amount, paid_on)
        loan.installments[index] = updated
        loan_repo.save_installment(db_loan, updated)

        loan_status = resolve_loan_status(loan)
        if loan_status != loan.status:
            loan_repo.update_status(db_loan, loan_status)

        db.commit()

    except (LoanNotFoundError, InstallmentNotFoundError) as e:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(e))

    except InvalidPaymentError as e:
        db.rollback()
        logging.warning(f"Payment rejected: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    tracking_cache.invalidate(loan.tracking_code)
    payments_recorded_counter.labels(installment_status=updated.status.value).inc()
    log_payment_recorded(
        request_id,
        loan.loan_id,
        installment_number,
        request_body.amount,
        updated.status.value,
        loan_status.value,
    )

    return PaymentResponse(
        loan_id=loan.loan_id,
        loan_status=loan_status,
        installment=_installment_schema(updated, today),
    )
