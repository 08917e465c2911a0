"""Installment payment recording"""

from dataclasses import replace
from datetime import date

from loan_servicing.domain.exceptions import InvalidPaymentError
from loan_servicing.domain.models import Installment, InstallmentStatus, Loan, LoanStatus

# Half a cent: amounts are floats, settlement is judged at currency precision
SETTLEMENT_TOLERANCE = 0.005

CLOSED_LOAN_STATUSES = {LoanStatus.COMPLETED, LoanStatus.REJECTED, LoanStatus.DEFAULTED}


def outstanding_amount(installment: Installment) -> float:
    """Amount still owed on an installment"""
    return max(0.0, installment.amount - installment.paid_amount)


def apply_payment(installment: Installment, amount: float, paid_on: date) -> Installment:
    """
    Apply a payment to an installment and return the updated installment.

    A payment that covers the outstanding amount settles the installment
    (PAID); a smaller one leaves it PARTIAL.

    Raises:
        InvalidPaymentError: non-positive amount, overpayment, or already paid
    """
    if installment.status == InstallmentStatus.PAID:
        raise InvalidPaymentError(f"Installment {installment.installment_number} is already paid")
    if amount <= 0:
        raise InvalidPaymentError(f"Payment amount must be positive, got {amount}")

    outstanding = outstanding_amount(installment)
    if amount > outstanding + SETTLEMENT_TOLERANCE:
        raise InvalidPaymentError(
            f"Payment of {amount:.2f} exceeds outstanding {outstanding:.2f} "
            f"on installment {installment.installment_number}"
        )

    paid_amount = installment.paid_amount + amount
    if paid_amount >= installment.amount - SETTLEMENT_TOLERANCE:
        return replace(
            installment,
            paid_amount=installment.amount,
            status=InstallmentStatus.PAID,
            paid_date=paid_on,
        )
    return replace(installment, paid_amount=paid_amount, status=InstallmentStatus.PARTIAL)


def ensure_loan_accepts_payments(loan: Loan) -> None:
    if loan.status in CLOSED_LOAN_STATUSES:
        raise InvalidPaymentError(f"Loan {loan.loan_id} is {loan.status.value} and accepts no payments")


def resolve_loan_status(loan: Loan) -> LoanStatus:
    """COMPLETED once every installment is paid, otherwise the current status"""
    if loan.installments and all(i.status == InstallmentStatus.PAID for i in loan.installments):
        return LoanStatus.COMPLETED
    return loan.status
