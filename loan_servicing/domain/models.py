"""Domain models - pure Python dataclasses representing loan servicing entities"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple


class InstallmentStatus(str, Enum):
    """Lifecycle of a single installment (sub-loan)"""

    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    OVERDUE = "OVERDUE"


class LoanStatus(str, Enum):
    """Lifecycle of a loan as stored by the servicing backend"""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    DEFAULTED = "DEFAULTED"


class TrackingStatus(str, Enum):
    """Borrower-facing loan status derived from installments"""

    ACTIVE = "ACTIVE"
    OVERDUE = "OVERDUE"
    COMPLETED = "COMPLETED"


class UrgencyLevel(str, Enum):
    """How close an unpaid installment is to (or past) its due date"""

    OVERDUE = "OVERDUE"
    TODAY = "TODAY"
    SOON = "SOON"
    FUTURE = "FUTURE"


class ExpenseCategory(str, Enum):
    """Kinds of field expense a lender declares when closing the day"""

    FUEL = "FUEL"
    CONSUMPTION = "CONSUMPTION"
    REPAIRS = "REPAIRS"
    OTHER = "OTHER"


@dataclass(frozen=True)
class LoanTerms:
    """Inputs to the amortization engine"""

    principal: float
    interest_rate_percent: float  # 5 means 5%
    installment_count: int
    start_date: date


@dataclass(frozen=True)
class PaymentScheduleEntry:
    """One scheduled repayment produced by the engine"""

    installment_number: int
    due_date: date
    amount: float
    status: InstallmentStatus = InstallmentStatus.PENDING


@dataclass(frozen=True)
class AmortizationResult:
    """Totals and schedule for a simple-interest loan"""

    principal: float
    interest_rate_percent: float
    total_amount: float
    installment_amount: float
    interest_amount: float
    schedule: Tuple[PaymentScheduleEntry, ...]


@dataclass(frozen=True)
class RoundingResult:
    """Interest rate that turns the installment into a round figure"""

    interest_rate_percent: float
    installment_amount: float
    total_amount: float


@dataclass
class Installment:
    """Persisted installment of a loan"""

    installment_number: int
    due_date: date
    amount: float
    status: InstallmentStatus = InstallmentStatus.PENDING
    paid_amount: float = 0.0
    paid_date: Optional[date] = None


@dataclass
class Loan:
    """Persisted loan with its installments"""

    loan_id: str
    client_id: str
    manager_id: str
    tracking_code: str
    principal: float
    interest_rate_percent: float
    total_amount: float
    status: LoanStatus
    installments: List[Installment] = field(default_factory=list)


@dataclass
class LoanTracking:
    """Self-service view of a loan for the borrower"""

    tracking_code: str
    status: TrackingStatus
    total_payments: int
    remaining_payments: int
    next_due_date: Optional[date]
    paid_amount: float
    outstanding_amount: float


@dataclass
class UpcomingInstallment:
    """Unpaid installment due soon, for the collections worklist"""

    loan_id: str
    client_id: str
    installment_number: int
    due_date: date
    outstanding_amount: float
    urgency: UrgencyLevel


@dataclass
class PortfolioStats:
    """Aggregated figures over a set of loans"""

    loan_count: int
    active_loans: int
    active_clients: int
    total_lent: float
    total_to_collect: float
    total_collected: float
    total_overdue: float
    average_principal: float
    loans_by_status: Dict[str, int]


@dataclass(frozen=True)
class Expense:
    """Single expense declared in a daily closure"""

    category: ExpenseCategory
    amount: float
    description: Optional[str] = None


@dataclass
class DailyClosure:
    """End-of-day cash report of a lender"""

    closure_id: str
    manager_id: str
    closure_date: date
    total_collected: float
    total_expenses: float
    net_amount: float  # total_collected - total_expenses
    expenses: List[Expense] = field(default_factory=list)
    notes: Optional[str] = None


@dataclass
class DueInstallment:
    """Installment falling due on a closure date"""

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


@dataclass
class ClosureSummary:
    """Totals over a range of daily closures"""

    closure_count: int
    total_collected: float
    total_expenses: float
    net_amount: float
    average_daily: float
