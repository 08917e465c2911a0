"""GET /v1/portfolio/* - lender portfolio figures and collections worklist"""

from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from loan_servicing.api.v1.schemas import (
    PortfolioStatsResponse,
    UpcomingInstallmentSchema,
    UpcomingResponse,
)
from loan_servicing.api.dependencies import get_today
from loan_servicing.config import settings
from loan_servicing.domain.portfolio import calculate_portfolio_stats, list_upcoming_installments
from loan_servicing.infrastructure.database.session import get_db
from loan_servicing.infrastructure.database.repositories import LoanRepository, to_domain_loan

router = APIRouter()


@router.get("/portfolio/stats", response_model=PortfolioStatsResponse)
def get_portfolio_stats(
    manager_id: str = Query(..., min_length=1, description="Lender identifier"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """
    Aggregate a lender's portfolio.

    Returns:
        Amounts lent, to collect, collected and overdue, plus loan counts by status
    """
    loans = [to_domain_loan(r) for r in LoanRepository(db).get_loans_by_manager(manager_id)]
    stats = calculate_portfolio_stats(loans, today)

    return PortfolioStatsResponse(
        manager_id=manager_id,
        loan_count=stats.loan_count,
        active_loans=stats.active_loans,
        active_clients=stats.active_clients,
        total_lent=stats.total_lent,
        total_to_collect=stats.total_to_collect,
        total_collected=stats.total_collected,
        total_overdue=stats.total_overdue,
        average_principal=stats.average_principal,
        loans_by_status=stats.loans_by_status,
    )


@router.get("/portfolio/upcoming", response_model=UpcomingResponse)
def get_upcoming_installments(
    manager_id: str = Query(..., min_length=1, description="Lender identifier"),
    days_ahead: Optional[int] = Query(None, ge=0, le=90),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    """Unpaid installments due within days_ahead, overdue ones first"""
    horizon = settings.upcoming_days_ahead if days_ahead is None else days_ahead
    loans = [to_domain_loan(r) for r in LoanRepository(db).get_loans_by_manager(manager_id)]
    upcoming = list_upcoming_installments(loans, today, days_ahead=horizon)

    return UpcomingResponse(
        manager_id=manager_id,
        days_ahead=horizon,
        installments=[
            UpcomingInstallmentSchema(
                loan_id=u.loan_id,
                client_id=u.client_id,
                installment_number=u.installment_number,
                due_date=u.due_date,
                outstanding_amount=u.outstanding_amount,
                urgency=u.urgency,
            )
            for u in upcoming
        ],
    )
