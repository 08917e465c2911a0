"""Portfolio reporting - borrower tracking, collections worklist and aggregate stats"""

from datetime import date, timedelta
from typing import Iterable, List, Optional

from loan_servicing.domain.models import (
    Installment,
    InstallmentStatus,
    Loan,
    LoanStatus,
    LoanTracking,
    PortfolioStats,
    TrackingStatus,
    UpcomingInstallment,
    UrgencyLevel,
)
from loan_servicing.domain.payments import outstanding_amount
from loan_servicing.utils.date_utils import days_between

ACTIVE_LOAN_STATUSES = {LoanStatus.ACTIVE, LoanStatus.APPROVED}
SOON_THRESHOLD_DAYS = 2


def effective_installment_status(installment: Installment, today: date) -> InstallmentStatus:
    """Unpaid installments past their due date read as OVERDUE"""
    if installment.status in (InstallmentStatus.PENDING, InstallmentStatus.PARTIAL) and installment.due_date < today:
        return InstallmentStatus.OVERDUE
    return installment.status


def get_urgency_level(due_date: date, today: date) -> UrgencyLevel:
    days_left = days_between(today, due_date)
    if days_left < 0:
        return UrgencyLevel.OVERDUE
    if days_left == 0:
        return UrgencyLevel.TODAY
    if days_left <= SOON_THRESHOLD_DAYS:
        return UrgencyLevel.SOON
    return UrgencyLevel.FUTURE


def summarize_tracking(loan: Loan, today: date) -> LoanTracking:
    """
    Build the borrower's view of a loan from its installments.

    Status is COMPLETED when every installment is paid, OVERDUE when any
    unpaid installment is past due, ACTIVE otherwise.
    """
    unpaid = [i for i in loan.installments if i.status != InstallmentStatus.PAID]
    statuses = [effective_installment_status(i, today) for i in loan.installments]

    if loan.installments and not unpaid:
        status = TrackingStatus.COMPLETED
    elif InstallmentStatus.OVERDUE in statuses:
        status = TrackingStatus.OVERDUE
    else:
        status = TrackingStatus.ACTIVE

    next_due_date: Optional[date] = min((i.due_date for i in unpaid), default=None)

    return LoanTracking(
        tracking_code=loan.tracking_code,
        status=status,
        total_payments=len(loan.installments),
        remaining_payments=len(unpaid),
        next_due_date=next_due_date,
        paid_amount=sum(i.paid_amount for i in loan.installments),
        outstanding_amount=sum(outstanding_amount(i) for i in unpaid),
    )


def list_upcoming_installments(
    loans: Iterable[Loan],
    today: date,
    days_ahead: int = 7,
) -> List[UpcomingInstallment]:
    """Unpaid installments due by today + days_ahead (overdue included), earliest first"""
    horizon = today + timedelta(days=days_ahead)
    upcoming = [
        UpcomingInstallment(
            loan_id=loan.loan_id,
            client_id=loan.client_id,
            installment_number=inst.installment_number,
            due_date=inst.due_date,
            outstanding_amount=outstanding_amount(inst),
            urgency=get_urgency_level(inst.due_date, today),
        )
        for loan in loans
        if loan.status in ACTIVE_LOAN_STATUSES
        for inst in loan.installments
        if inst.status != InstallmentStatus.PAID and inst.due_date <= horizon
    ]
    return sorted(upcoming, key=lambda u: (u.due_date, u.loan_id, u.installment_number))


def calculate_portfolio_stats(loans: Iterable[Loan], today: date) -> PortfolioStats:
    """Aggregate lent, collected and overdue amounts over a set of loans"""
    loans = list(loans)

    total_lent = sum(loan.principal for loan in loans)
    total_to_collect = sum(loan.total_amount for loan in loans)
    total_collected = sum(i.paid_amount for loan in loans for i in loan.installments)

    # Overdue counts only money still owed, on loans still being serviced
    total_overdue = sum(
        outstanding_amount(i)
        for loan in loans
        if loan.status in ACTIVE_LOAN_STATUSES
        for i in loan.installments
        if effective_installment_status(i, today) == InstallmentStatus.OVERDUE
    )

    active = [loan for loan in loans if loan.status in ACTIVE_LOAN_STATUSES]
    loans_by_status = {status.value: 0 for status in LoanStatus}
    for loan in loans:
        loans_by_status[loan.status.value] += 1

    return PortfolioStats(
        loan_count=len(loans),
        active_loans=len(active),
        active_clients=len({loan.client_id for loan in active}),
        total_lent=total_lent,
        total_to_collect=total_to_collect,
        total_collected=total_collected,
        total_overdue=total_overdue,
        average_principal=total_lent / len(loans) if loans else 0.0,
        loans_by_status=loans_by_status,
    )
