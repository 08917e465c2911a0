"""POST /v1/simulations/* - loan simulation without persistence"""

import logging
from fastapi import APIRouter, HTTPException, Request

from loan_servicing.api.v1.schemas import (
    LoanTermsRequest,
    RoundingRequest,
    RoundingResponse,
    RoundingSuggestion,
    ScheduleEntrySchema,
    ScheduleResponse,
)
from loan_servicing.api.dependencies import get_request_id
from loan_servicing.domain.amortization import (
    calculate_installment,
    compute_schedule,
    find_rounded_rate_down,
    find_rounded_rate_up,
    is_nice_round_number,
)
from loan_servicing.domain.exceptions import InvalidLoanTermsError
from loan_servicing.domain.models import LoanTerms
from loan_servicing.infrastructure.observability.metrics import invalid_terms_counter, record_rounding

router = APIRouter()


@router.post("/simulations/schedule", response_model=ScheduleResponse)
def simulate_schedule(request_body: LoanTermsRequest, request: Request):
    """
    Compute totals and the monthly payment schedule for proposed terms.

    Nothing is persisted; the loan creation form calls this as the user types.
    """
    try:
        result = compute_schedule(
            LoanTerms(
                principal=request_body.principal,
                interest_rate_percent=request_body.interest_rate_percent,
                installment_count=request_body.installment_count,
                start_date=request_body.start_date,
            )
        )
    except InvalidLoanTermsError as e:
        invalid_terms_counter.labels(operation="simulation").inc()
        logging.warning(f"Invalid loan terms: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    return ScheduleResponse(
        principal=result.principal,
        interest_rate_percent=result.interest_rate_percent,
        total_amount=result.total_amount,
        installment_amount=result.installment_amount,
        interest_amount=result.interest_amount,
        schedule=[
            ScheduleEntrySchema(
                installment_number=entry.installment_number,
                due_date=entry.due_date,
                amount=entry.amount,
                status=entry.status,
            )
            for entry in result.schedule
        ],
    )


@router.post("/simulations/rounding", response_model=RoundingResponse)
def suggest_rounding(request_body: RoundingRequest, request: Request):
    """
    Suggest interest rates that make the installment a round figure.

    round_down is null when no positive round installment exists below the
    current one.
    """
    try:
        current = calculate_installment(
            request_body.principal,
            request_body.interest_rate_percent,
            request_body.installment_count,
        )
        up = find_rounded_rate_up(
            request_body.principal,
            request_body.installment_count,
            request_body.interest_rate_percent,
        )
        down = find_rounded_rate_down(
            request_body.principal,
            request_body.installment_count,
            request_body.interest_rate_percent,
        )
    except InvalidLoanTermsError as e:
        invalid_terms_counter.labels(operation="rounding").inc()
        logging.warning(f"Invalid loan terms: {e}", extra={"request_id": get_request_id(request)})
        raise HTTPException(status_code=422, detail=str(e))

    record_rounding("up", found=True)
    record_rounding("down", found=down is not None)

    return RoundingResponse(
        current_installment=current,
        is_nice=is_nice_round_number(current),
        round_up=RoundingSuggestion(
            interest_rate_percent=up.interest_rate_percent,
            installment_amount=up.installment_amount,
            total_amount=up.total_amount,
        ),
        round_down=(
            RoundingSuggestion(
                interest_rate_percent=down.interest_rate_percent,
                installment_amount=down.installment_amount,
                total_amount=down.total_amount,
            )
            if down is not None
            else None
        ),
    )
