"""Daily cash closures - what fell due, what was collected and what was spent"""

import math
from datetime import date
from typing import Dict, Iterable, List, Optional

from loan_servicing.domain.exceptions import InvalidClosureError
from loan_servicing.domain.models import (
    ClosureSummary,
    DailyClosure,
    DueInstallment,
    Expense,
    ExpenseCategory,
    InstallmentStatus,
    Loan,
    LoanStatus,
)
from loan_servicing.domain.payments import outstanding_amount
from loan_servicing.domain.portfolio import effective_installment_status
from loan_servicing.utils.date_utils import days_between

# Loans that never disbursed have nothing to collect
UNCOLLECTABLE_LOAN_STATUSES = {LoanStatus.PENDING, LoanStatus.REJECTED}


def total_expenses(expenses: Iterable[Expense]) -> float:
    return sum(expense.amount for expense in expenses)


def net_amount(total_collected: float, expenses: Iterable[Expense]) -> float:
    """Cash the lender keeps after the day's expenses"""
    return total_collected - total_expenses(expenses)


def validate_closure(
    closure_date: date,
    total_collected: float,
    expenses: Iterable[Expense],
    today: date,
) -> None:
    """
    Check a closure before it is recorded.

    Raises:
        InvalidClosureError: closure date in the future, negative or non-finite
            collected amount, or an expense that is not a positive amount
    """
    if closure_date > today:
        raise InvalidClosureError(f"closure_date {closure_date} is after today ({today})")
    if not math.isfinite(total_collected) or total_collected < 0:
        raise InvalidClosureError(f"total_collected must be zero or positive, got {total_collected}")
    for expense in expenses:
        if not math.isfinite(expense.amount) or expense.amount <= 0:
            raise InvalidClosureError(
                f"{expense.category.value} expense must be a positive amount, got {expense.amount}"
            )


def installments_due_on(loans: Iterable[Loan], closure_date: date, today: date) -> List[DueInstallment]:
    """Installments of disbursed loans that fall due on closure_date"""
    due = [
        DueInstallment(
            loan_id=loan.loan_id,
            client_id=loan.client_id,
            tracking_code=loan.tracking_code,
            installment_number=inst.installment_number,
            due_date=inst.due_date,
            amount=inst.amount,
            paid_amount=inst.paid_amount,
            outstanding_amount=outstanding_amount(inst) if inst.status != InstallmentStatus.PAID else 0.0,
            status=effective_installment_status(inst, today),
            days_overdue=_days_overdue(inst.status, inst.due_date, today),
        )
        for loan in loans
        if loan.status not in UNCOLLECTABLE_LOAN_STATUSES
        for inst in loan.installments
        if inst.due_date == closure_date
    ]
    return sorted(due, key=lambda d: (d.tracking_code, d.installment_number))


def _days_overdue(status: InstallmentStatus, due_date: date, today: date) -> int:
    if status == InstallmentStatus.PAID:
        return 0
    return max(0, days_between(due_date, today))


def expected_collection(due: Iterable[DueInstallment]) -> float:
    """Amount scheduled for collection on the day"""
    return sum(d.amount for d in due)


def collection_gap(due: Iterable[DueInstallment], closure: Optional[DailyClosure]) -> Optional[float]:
    """Expected minus declared collection; None until the day is closed"""
    if closure is None:
        return None
    return expected_collection(due) - closure.total_collected


def summarize_closures(closures: Iterable[DailyClosure]) -> ClosureSummary:
    closures = list(closures)
    collected = sum(c.total_collected for c in closures)
    expenses = sum(c.total_expenses for c in closures)
    net = sum(c.net_amount for c in closures)

    return ClosureSummary(
        closure_count=len(closures),
        total_collected=collected,
        total_expenses=expenses,
        net_amount=net,
        average_daily=net / len(closures) if closures else 0.0,
    )


def expenses_by_category(expenses: Iterable[Expense]) -> Dict[str, float]:
    """Expense totals keyed by category; categories without expenses are omitted"""
    totals: Dict[str, float] = {}
    for expense in expenses:
        key = ExpenseCategory(expense.category).value
        totals[key] = totals.get(key, 0.0) + expense.amount
    return totals
