"""Data access layer for clients, loans, installments and daily closures"""

import uuid
from datetime import date
from typing import List, Optional
from sqlalchemy.orm import Session, selectinload
from loan_servicing.infrastructure.database.models import (
    ClientRecord,
    ClosureExpenseRecord,
    DailyClosureRecord,
    LoanRecord,
    SubLoanRecord,
)
from loan_servicing.domain.closures import net_amount, total_expenses
from loan_servicing.domain.models import (
    AmortizationResult,
    DailyClosure,
    Expense,
    ExpenseCategory,
    Installment,
    InstallmentStatus,
    Loan,
    LoanStatus,
)


def generate_tracking_code(prefix: str, start_date: date) -> str:
    """Borrower-facing loan reference, e.g. LN-2025-9F3A1C2B"""
    return f"{prefix}-{start_date.year}-{uuid.uuid4().hex[:8].upper()}"


def to_domain_loan(record: LoanRecord) -> Loan:
    """Map a loan row and its sub-loans to the domain record"""
    return Loan(
        loan_id=str(record.id),
        client_id=str(record.client_id),
        manager_id=record.manager_id,
        tracking_code=record.tracking_code,
        principal=record.principal,
        interest_rate_percent=record.interest_rate_percent,
        total_amount=record.total_amount,
        status=LoanStatus(record.status),
        installments=[
            Installment(
                installment_number=sub.installment_number,
                due_date=sub.due_date,
                amount=sub.amount,
                status=InstallmentStatus(sub.status),
                paid_amount=sub.paid_amount or 0.0,
                paid_date=sub.paid_date,
            )
            for sub in record.sub_loans
        ],
    )


def to_domain_closure(record: DailyClosureRecord) -> DailyClosure:
    return DailyClosure(
        closure_id=str(record.id),
        manager_id=record.manager_id,
        closure_date=record.closure_date,
        total_collected=record.total_collected,
        total_expenses=record.total_expenses,
        net_amount=record.net_amount,
        expenses=[
            Expense(
                category=ExpenseCategory(e.category),
                amount=e.amount,
                description=e.description,
            )
            for e in record.expenses
        ],
        notes=record.notes,
    )


class ClientRepository:
    """Repository for borrowers"""

    def __init__(self, db: Session):
        self.db = db

    def create_client(
        self,
        manager_id: str,
        full_name: str,
        dni: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
    ) -> ClientRecord:
        """Persist a new client"""
        db_client = ClientRecord(
            manager_id=manager_id,
            full_name=full_name,
            dni=dni,
            phone=phone,
            email=email,
        )
        self.db.add(db_client)
        self.db.flush()  # Get ID without committing
        return db_client

    def get_client_by_id(self, client_id: uuid.UUID) -> Optional[ClientRecord]:
        return self.db.get(ClientRecord, client_id)


class LoanRepository:
    """Repository for loans and their sub-loans"""

    def __init__(self, db: Session):
        self.db = db

    def create_loan(
        self,
        client: ClientRecord,
        tracking_code: str,
        start_date: date,
        result: AmortizationResult,
        status: LoanStatus = LoanStatus.ACTIVE,
    ) -> LoanRecord:
        """Create a loan with one sub-loan per schedule entry"""
        db_loan = LoanRecord(
            client_id=client.id,
            manager_id=client.manager_id,
            tracking_code=tracking_code,
            principal=result.principal,
            interest_rate_percent=result.interest_rate_percent,
            total_amount=result.total_amount,
            status=status.value,
            start_date=start_date,
        )
        self.db.add(db_loan)
        self.db.flush()

        for entry in result.schedule:
            db_loan.sub_loans.append(
                SubLoanRecord(
                    installment_number=entry.installment_number,
                    due_date=entry.due_date,
                    amount=entry.amount,
                    paid_amount=0.0,
                    status=entry.status.value,
                )
            )
        self.db.flush()

        return db_loan

    def get_loan_by_id(self, loan_id: uuid.UUID) -> Optional[LoanRecord]:
        """Fetch loan with sub-loans"""
        return (
            self.db.query(LoanRecord)
            .options(selectinload(LoanRecord.sub_loans))
            .filter(LoanRecord.id == loan_id)
            .first()
        )

    def get_loan_by_tracking_code(self, tracking_code: str) -> Optional[LoanRecord]:
        return (
            self.db.query(LoanRecord)
            .options(selectinload(LoanRecord.sub_loans), selectinload(LoanRecord.client))
            .filter(LoanRecord.tracking_code == tracking_code)
            .first()
        )

    def get_loans_by_manager(self, manager_id: str) -> List[LoanRecord]:
        """All loans of a lender, newest first"""
        return (
            self.db.query(LoanRecord)
            .options(selectinload(LoanRecord.sub_loans))
            .filter(LoanRecord.manager_id == manager_id)
            .order_by(LoanRecord.created_at.desc())
            .all()
        )

    def save_installment(self, db_loan: LoanRecord, installment: Installment) -> None:
        """Write an installment's payment state back to its sub-loan row"""
        for sub in db_loan.sub_loans:
            if sub.installment_number == installment.installment_number:
                sub.paid_amount = installment.paid_amount
                sub.paid_date = installment.paid_date
                sub.status = installment.status.value
                break
        self.db.flush()

    def update_status(self, db_loan: LoanRecord, status: LoanStatus) -> None:
        db_loan.status = status.value
        self.db.flush()


class DailyClosureRepository:
    """Repository for daily closures and their expense lines"""

    def __init__(self, db: Session):
        self.db = db

    def create_closure(
        self,
        manager_id: str,
        closure_date: date,
        total_collected: float,
        expenses: List[Expense],
        notes: Optional[str] = None,
    ) -> DailyClosureRecord:
        """Persist a closure with its expenses; totals are stored alongside"""
        db_closure = DailyClosureRecord(
            manager_id=manager_id,
            closure_date=closure_date,
            total_collected=total_collected,
            total_expenses=total_expenses(expenses),
            net_amount=net_amount(total_collected, expenses),
            notes=notes,
        )
        for position, expense in enumerate(expenses):
            db_closure.expenses.append(
                ClosureExpenseRecord(
                    position=position,
                    category=expense.category.value,
                    amount=expense.amount,
                    description=expense.description,
                )
            )
        self.db.add(db_closure)
        self.db.flush()
        return db_closure

    def get_closure_by_id(self, closure_id: uuid.UUID) -> Optional[DailyClosureRecord]:
        return (
            self.db.query(DailyClosureRecord)
            .options(selectinload(DailyClosureRecord.expenses))
            .filter(DailyClosureRecord.id == closure_id)
            .first()
        )

    def get_closure_by_date(self, manager_id: str, closure_date: date) -> Optional[DailyClosureRecord]:
        return (
            self.db.query(DailyClosureRecord)
            .options(selectinload(DailyClosureRecord.expenses))
            .filter(
                DailyClosureRecord.manager_id == manager_id,
                DailyClosureRecord.closure_date == closure_date,
            )
            .first()
        )

    def get_closures_by_manager(
        self,
        manager_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[DailyClosureRecord]:
        """Closures of a lender within an inclusive date range, newest first"""
        query = (
            self.db.query(DailyClosureRecord)
            .options(selectinload(DailyClosureRecord.expenses))
            .filter(DailyClosureRecord.manager_id == manager_id)
        )
        if start_date is not None:
            query = query.filter(DailyClosureRecord.closure_date >= start_date)
        if end_date is not None:
            query = query.filter(DailyClosureRecord.closure_date <= end_date)
        return query.order_by(DailyClosureRecord.closure_date.desc()).all()
