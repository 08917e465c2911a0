"""SQLAlchemy ORM models for clients, loans, installments and daily closures"""

import uuid
from sqlalchemy import Column, Date, DateTime, Float, ForeignKey, Integer, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class ClientRecord(Base):
    """Borrower managed by a lender"""

    __tablename__ = "clients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    manager_id = Column(Text, nullable=False, index=True)
    full_name = Column(Text, nullable=False)
    dni = Column(Text, nullable=False, index=True)
    phone = Column(Text, nullable=True)
    email = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loans = relationship("LoanRecord", back_populates="client")


class LoanRecord(Base):
    """Loan granted to a client, with simple-interest totals"""

    __tablename__ = "loans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("clients.id"), nullable=False, index=True)
    manager_id = Column(Text, nullable=False, index=True)
    tracking_code = Column(Text, nullable=False, unique=True)
    principal = Column(Float, nullable=False)
    interest_rate_percent = Column(Float, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(Text, nullable=False, default="ACTIVE")
    start_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    client = relationship("ClientRecord", back_populates="loans")
    sub_loans = relationship(
        "SubLoanRecord",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="SubLoanRecord.installment_number",
    )


class SubLoanRecord(Base):
    """Individual installment within a loan"""

    __tablename__ = "sub_loans"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    loan_id = Column(Uuid(as_uuid=True), ForeignKey("loans.id", ondelete="CASCADE"), nullable=False)
    installment_number = Column(Integer, nullable=False)
    due_date = Column(Date, nullable=False)
    amount = Column(Float, nullable=False)
    paid_amount = Column(Float, nullable=False, default=0.0)
    paid_date = Column(Date, nullable=True)
    status = Column(Text, nullable=False, default="PENDING")
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    loan = relationship("LoanRecord", back_populates="sub_loans")


class DailyClosureRecord(Base):
    """End-of-day cash report, one per lender and date"""

    __tablename__ = "daily_closures"
    __table_args__ = (UniqueConstraint("manager_id", "closure_date", name="uq_daily_closures_manager_date"),)

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    manager_id = Column(Text, nullable=False, index=True)
    closure_date = Column(Date, nullable=False, index=True)
    total_collected = Column(Float, nullable=False)
    total_expenses = Column(Float, nullable=False, default=0.0)
    net_amount = Column(Float, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    expenses = relationship(
        "ClosureExpenseRecord",
        back_populates="closure",
        cascade="all, delete-orphan",
        order_by="ClosureExpenseRecord.position",
    )


class ClosureExpenseRecord(Base):
    """Expense line of a daily closure"""

    __tablename__ = "closure_expenses"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    closure_id = Column(Uuid(as_uuid=True), ForeignKey("daily_closures.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    category = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    description = Column(Text, nullable=True)

    closure = relationship("DailyClosureRecord", back_populates="expenses")
