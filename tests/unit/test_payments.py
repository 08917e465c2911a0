"""Unit tests for installment payment recording"""

import pytest
from datetime import date
from loan_servicing.domain.exceptions import InvalidPaymentError
from loan_servicing.domain.models import Installment, InstallmentStatus, Loan, LoanStatus
from loan_servicing.domain.payments import (
    apply_payment,
    ensure_loan_accepts_payments,
    outstanding_amount,
    resolve_loan_status,
)


def make_installment(number=1, amount=26800.0, paid=0.0, status=InstallmentStatus.PENDING) -> Installment:
    return Installment(
        installment_number=number,
        due_date=date(2025, 2, 15),
        amount=amount,
        status=status,
        paid_amount=paid,
    )


def make_loan(installments, status=LoanStatus.ACTIVE) -> Loan:
    return Loan(
        loan_id="loan-1",
        client_id="client-1",
        manager_id="manager-1",
        tracking_code="LN-2025-ABCD1234",
        principal=100000,
        interest_rate_percent=34,
        total_amount=134000,
        status=status,
        installments=installments,
    )


def test_full_payment_settles_installment():
    installment = make_installment()
    updated = apply_payment(installment, 26800, date(2025, 2, 10))

    assert updated.status == InstallmentStatus.PAID
    assert updated.paid_amount == 26800
    assert updated.paid_date == date(2025, 2, 10)
    # Original is untouched
    assert installment.status == InstallmentStatus.PENDING
    assert installment.paid_amount == 0


def test_partial_payment_then_settlement():
    partial = apply_payment(make_installment(), 10000, date(2025, 2, 10))

    assert partial.status == InstallmentStatus.PARTIAL
    assert partial.paid_amount == 10000
    assert partial.paid_date is None
    assert outstanding_amount(partial) == 16800

    settled = apply_payment(partial, 16800, date(2025, 2, 14))
    assert settled.status == InstallmentStatus.PAID
    assert outstanding_amount(settled) == 0


def test_fractional_amount_settles_within_a_cent():
    """100 / 3 installments settle when the borrower pays the rounded figure"""
    updated = apply_payment(make_installment(amount=100 / 3), 33.33, date(2025, 2, 10))
    assert updated.status == InstallmentStatus.PAID


@pytest.mark.parametrize("amount", [0, -5])
def test_non_positive_payment_rejected(amount):
    with pytest.raises(InvalidPaymentError):
        apply_payment(make_installment(), amount, date(2025, 2, 10))


def test_overpayment_rejected():
    with pytest.raises(InvalidPaymentError, match="exceeds outstanding"):
        apply_payment(make_installment(paid=20000, status=InstallmentStatus.PARTIAL), 7000, date(2025, 2, 10))


def test_payment_on_paid_installment_rejected():
    paid = make_installment(paid=26800, status=InstallmentStatus.PAID)
    with pytest.raises(InvalidPaymentError, match="already paid"):
        apply_payment(paid, 1, date(2025, 2, 10))


def test_resolve_loan_status_completed_when_all_paid():
    loan = make_loan(
        [
            make_installment(1, paid=26800, status=InstallmentStatus.PAID),
            make_installment(2, paid=26800, status=InstallmentStatus.PAID),
        ]
    )
    assert resolve_loan_status(loan) == LoanStatus.COMPLETED


def test_resolve_loan_status_keeps_current_while_unpaid():
    loan = make_loan(
        [
            make_installment(1, paid=26800, status=InstallmentStatus.PAID),
            make_installment(2, paid=100, status=InstallmentStatus.PARTIAL),
        ]
    )
    assert resolve_loan_status(loan) == LoanStatus.ACTIVE


@pytest.mark.parametrize("status", [LoanStatus.COMPLETED, LoanStatus.REJECTED, LoanStatus.DEFAULTED])
def test_closed_loans_reject_payments(status):
    with pytest.raises(InvalidPaymentError):
        ensure_loan_accepts_payments(make_loan([make_installment()], status=status))


def test_active_loan_accepts_payments():
    ensure_loan_accepts_payments(make_loan([make_installment()]))
