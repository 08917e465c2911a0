"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, Field
from datetime import date
from typing import Dict, List, Optional

from loan_servicing.domain.amortization import MAX_INSTALLMENTS
from loan_servicing.domain.models import (
    ExpenseCategory,
    InstallmentStatus,
    LoanStatus,
    TrackingStatus,
    UrgencyLevel,
)


class LoanTermsRequest(BaseModel):
    """Loan terms submitted for simulation"""

    principal: float = Field(..., gt=0, description="Amount lent, excluding interest")
    interest_rate_percent: float = Field(..., ge=0, description="Simple interest, 5 means 5%")
    installment_count: int = Field(..., ge=1, le=MAX_INSTALLMENTS, description="Number of monthly installments")
    start_date: date = Field(..., description="First installment falls due one month after this date")


class ScheduleEntrySchema(BaseModel):
    """Single entry of a payment schedule"""

    installment_number: int
    due_date: date
    amount: float
    status: InstallmentStatus = InstallmentStatus.PENDING


class ScheduleResponse(BaseModel):
    """Response for POST /v1/simulations/schedule"""

    principal: float
    interest_rate_percent: float
    total_amount: float
    installment_amount: float
    interest_amount: float
    schedule: List[ScheduleEntrySchema]


class RoundingRequest(BaseModel):
    """Request body for POST /v1/simulations/rounding"""

    principal: float = Field(..., gt=0)
    interest_rate_percent: float = Field(..., ge=0)
    installment_count: int = Field(..., ge=1, le=MAX_INSTALLMENTS)


class RoundingSuggestion(BaseModel):
    interest_rate_percent: float
    installment_amount: float
    total_amount: float


class RoundingResponse(BaseModel):
    """Response for POST /v1/simulations/rounding"""

    current_installment: float
    is_nice: bool
    round_up: RoundingSuggestion
    round_down: Optional[RoundingSuggestion] = None


class ClientCreateRequest(BaseModel):
    """Request body for POST /v1/clients"""

    manager_id: str = Field(..., min_length=1, description="Lender that manages the client")
    full_name: str = Field(..., min_length=1)
    dni: str = Field(..., pattern=r"^\d+$", description="National ID, digits only")
    phone: Optional[str] = Field(None, pattern=r"^[\d\s\-\+\(\)]+$")
    email: Optional[str] = Field(None, pattern=r"\S+@\S+\.\S+")


class ClientResponse(BaseModel):
    client_id: str
    manager_id: str
    full_name: str
    dni: str
    phone: Optional[str] = None
    email: Optional[str] = None


class LoanCreateRequest(LoanTermsRequest):
    """Request body for POST /v1/loans"""

    client_id: str = Field(..., min_length=1)


class InstallmentSchema(BaseModel):
    """Single installment of a persisted loan"""

    installment_number: int
    due_date: date
    amount: float
    paid_amount: float
    status: InstallmentStatus
    paid_date: Optional[date] = None


class LoanResponse(BaseModel):
    """Loan with its installment schedule"""

    loan_id: str
    client_id: str
    manager_id: str
    tracking_code: str
    principal: float
    interest_rate_percent: float
    total_amount: float
    status: LoanStatus
    installments: List[InstallmentSchema]


class LoanListResponse(BaseModel):
    manager_id: str
    loans: List[LoanResponse]


class PaymentRequest(BaseModel):
    """Request body for recording an installment payment"""

    amount: float = Field(..., gt=0)
    paid_on: Optional[date] = Field(None, description="Defaults to today in the business timezone")


class PaymentResponse(BaseModel):
    loan_id: str
    loan_status: LoanStatus
    installment: InstallmentSchema


class TrackingInstallment(BaseModel):
    installment_number: int
    due_date: date
    amount: float
    status: InstallmentStatus
    paid_date: Optional[date] = None


class TrackingResponse(BaseModel):
    """Response for GET /v1/tracking/{tracking_code}"""

    tracking_code: str
    client_name: str
    status: TrackingStatus
    principal: float
    total_amount: float
    total_payments: int
    remaining_payments: int
    next_due_date: Optional[date] = None
    paid_amount: float
    outstanding_amount: float
    installments: List[TrackingInstallment]


class PortfolioStatsResponse(BaseModel):
    """Response for GET /v1/portfolio/stats"""

    manager_id: str
    loan_count: int
    active_loans: int
    active_clients: int
    total_lent: float
    total_to_collect: float
    total_collected: float
    total_overdue: float
    average_principal: float
    loans_by_status: Dict[str, int]


class UpcomingInstallmentSchema(BaseModel):
    loan_id: str
    client_id: str
    installment_number: int
    due_date: date
    outstanding_amount: float
    urgency: UrgencyLevel


class UpcomingResponse(BaseModel):
    """Response for GET /v1/portfolio/upcoming"""

    manager_id: str
    days_ahead: int
    installments: List[UpcomingInstallmentSchema]


class ExpenseRequest(BaseModel):
    category: ExpenseCategory
    amount: float = Field(..., gt=0)
    description: Optional[str] = Field(None, max_length=500)


class DailyClosureCreateRequest(BaseModel):
    """Request body for POST /v1/daily-closures"""

    manager_id: str = Field(..., min_length=1, description="Lender closing the day")
    closure_date: date
    total_collected: float = Field(..., ge=0, description="Cash collected during the day")
    expenses: List[ExpenseRequest] = Field(default_factory=list)
    notes: Optional[str] = Field(None, max_length=1000)


class ExpenseSchema(BaseModel):
    category: ExpenseCategory
    amount: float
    description: Optional[str] = None


class DailyClosureResponse(BaseModel):
    """Daily closure with its expenses"""

    closure_id: str
    manager_id: str
    closure_date: date
    total_collected: float
    total_expenses: float
    net_amount: float
    notes: Optional[str] = None
    expenses: List[ExpenseSchema]
    expenses_by_category: Dict[str, float]


class ClosureSummarySchema(BaseModel):
    closure_count: int
    total_collected: float
    total_expenses: float
    net_amount: float
    average_daily: float


class DailyClosureListResponse(BaseModel):
    """Response for GET /v1/daily-closures"""

    manager_id: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    closures: List[DailyClosureResponse]
    summary: ClosureSummarySchema


class DueInstallmentSchema(BaseModel):
    loan_id: str
    client_id: str
    tracking_code: str
    installment_number: int
    due_date: date
    amount: float
    paid_amount: float
    outstanding_amount: float
    status: InstallmentStatus
    days_overdue: int


class DueInstallmentsResponse(BaseModel):
    """Response for GET /v1/daily-closures/installments/{closure_date}"""

    manager_id: str
    closure_date: date
    expected_amount: float
    installments: List[DueInstallmentSchema]


class DailyClosureByDateResponse(DueInstallmentsResponse):
    """Response for GET /v1/daily-closures/date/{closure_date}"""

    closure: Optional[DailyClosureResponse] = None
    collection_gap: Optional[float] = None
