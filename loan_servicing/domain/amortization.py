"""Simple-interest amortization and installment rounding"""

import math
from typing import Optional

from loan_servicing.domain.exceptions import InvalidLoanTermsError
from loan_servicing.domain.models import (
    AmortizationResult,
    LoanTerms,
    PaymentScheduleEntry,
    RoundingResult,
)
from loan_servicing.utils.date_utils import add_months

# Thirty years of monthly installments
MAX_INSTALLMENTS = 360

# One cent: keeps the rounded target strictly away from the current installment
ROUNDING_EPSILON = 0.01

# (lower bound, increment) ordered from largest bound down
ROUNDING_INCREMENTS = (
    (10_000, 1_000),
    (5_000, 500),
    (1_000, 100),
    (500, 50),
    (100, 10),
)


def _validate_terms(principal: float, interest_rate_percent: float, installment_count: int) -> None:
    if isinstance(installment_count, bool) or not isinstance(installment_count, int):
        raise InvalidLoanTermsError(f"installment_count must be an integer, got {installment_count!r}")
    if installment_count < 1:
        raise InvalidLoanTermsError(f"installment_count must be at least 1, got {installment_count}")
    if installment_count > MAX_INSTALLMENTS:
        raise InvalidLoanTermsError(
            f"installment_count must be at most {MAX_INSTALLMENTS}, got {installment_count}"
        )
    if not math.isfinite(principal) or principal <= 0:
        raise InvalidLoanTermsError(f"principal must be a positive amount, got {principal}")
    if not math.isfinite(interest_rate_percent) or interest_rate_percent < 0:
        raise InvalidLoanTermsError(
            f"interest_rate_percent must be zero or positive, got {interest_rate_percent}"
        )


def calculate_installment(principal: float, interest_rate_percent: float, installment_count: int) -> float:
    """Installment amount under simple interest, after validating the terms"""
    _validate_terms(principal, interest_rate_percent, installment_count)
    total_amount = principal + principal * interest_rate_percent / 100
    return total_amount / installment_count


def compute_schedule(terms: LoanTerms) -> AmortizationResult:
    """
    Compute totals and the monthly payment schedule for a loan.

    Interest is simple (charged once on the principal) and every installment
    carries the same amount; no entry absorbs the division remainder.
    Entry i falls due i calendar months after the start date.

    Raises:
        InvalidLoanTermsError: principal <= 0, installment_count outside 1..MAX_INSTALLMENTS,
            negative rate, or a due date past the end of the calendar

    Example:
        100000 at 34% in 5 installments -> total 134000, installment 26800
    """
    _validate_terms(terms.principal, terms.interest_rate_percent, terms.installment_count)

    interest_amount = terms.principal * terms.interest_rate_percent / 100
    total_amount = terms.principal + interest_amount
    installment_amount = total_amount / terms.installment_count

    try:
        schedule = tuple(
            PaymentScheduleEntry(
                installment_number=number,
                due_date=add_months(terms.start_date, number),
                amount=installment_amount,
            )
            for number in range(1, terms.installment_count + 1)
        )
    except (ValueError, OverflowError) as e:
        raise InvalidLoanTermsError(
            f"start_date {terms.start_date} plus installment_count {terms.installment_count} "
            f"months falls outside the supported calendar"
        ) from e

    return AmortizationResult(
        principal=terms.principal,
        interest_rate_percent=terms.interest_rate_percent,
        total_amount=total_amount,
        installment_amount=installment_amount,
        interest_amount=interest_amount,
        schedule=schedule,
    )


def get_rounding_increment(installment_amount: float) -> float:
    """Step size that makes an installment of this magnitude look round"""
    for lower_bound, increment in ROUNDING_INCREMENTS:
        if installment_amount >= lower_bound:
            return increment
    return 1


def calculate_required_rate(base_amount: float, target_installment: float, installment_count: int) -> float:
    """Invert the simple-interest formula; never returns a negative rate"""
    total_needed = target_installment * installment_count
    return max(0.0, (total_needed / base_amount - 1) * 100)


def _rounding_result(base_amount: float, target_installment: float, installment_count: int) -> RoundingResult:
    return RoundingResult(
        interest_rate_percent=calculate_required_rate(base_amount, target_installment, installment_count),
        installment_amount=target_installment,
        total_amount=target_installment * installment_count,
    )


def find_rounded_rate_up(
    base_amount: float,
    installment_count: int,
    current_rate_percent: float,
) -> RoundingResult:
    """
    Find the rate that lifts the installment to the next round figure.

    $100,000 in 5 installments at 34%: 26,800 -> 27,000, which needs 35%.
    """
    current_installment = calculate_installment(base_amount, current_rate_percent, installment_count)
    increment = get_rounding_increment(current_installment)
    target = math.ceil((current_installment + ROUNDING_EPSILON) / increment) * increment
    return _rounding_result(base_amount, target, installment_count)


def find_rounded_rate_down(
    base_amount: float,
    installment_count: int,
    current_rate_percent: float,
) -> Optional[RoundingResult]:
    """
    Find the rate that lowers the installment to the previous round figure.

    Returns None when no positive round figure exists below the current one.
    """
    current_installment = calculate_installment(base_amount, current_rate_percent, installment_count)
    increment = get_rounding_increment(current_installment)
    target = math.floor((current_installment - ROUNDING_EPSILON) / increment) * increment
    if target <= 0:
        return None
    return _rounding_result(base_amount, target, installment_count)


def is_nice_round_number(amount: float, tolerance: float = 50) -> bool:
    """True when amount is within tolerance of a multiple of its rounding increment"""
    increment = get_rounding_increment(amount)
    rounded = round(amount / increment) * increment
    return abs(amount - rounded) <= tolerance
