"""Unit tests for daily cash closures"""

import math
import pytest
from datetime import date
from loan_servicing.domain.closures import (
    collection_gap,
    expected_collection,
    expenses_by_category,
    installments_due_on,
    net_amount,
    summarize_closures,
    total_expenses,
    validate_closure,
)
from loan_servicing.domain.exceptions import InvalidClosureError
from loan_servicing.domain.models import (
    DailyClosure,
    Expense,
    ExpenseCategory,
    Installment,
    InstallmentStatus,
    Loan,
    LoanStatus,
)

TODAY = date(2025, 3, 20)


def make_loan(loan_id, installments, status=LoanStatus.ACTIVE) -> Loan:
    return Loan(
        loan_id=loan_id,
        client_id=f"client-{loan_id}",
        manager_id="manager-1",
        tracking_code=f"LN-2025-{loan_id.upper()}",
        principal=1000,
        interest_rate_percent=20,
        total_amount=sum(i.amount for i in installments),
        status=status,
        installments=installments,
    )


def make_closure(closure_date, collected, expenses=()) -> DailyClosure:
    expenses = list(expenses)
    return DailyClosure(
        closure_id=f"closure-{closure_date.isoformat()}",
        manager_id="manager-1",
        closure_date=closure_date,
        total_collected=collected,
        total_expenses=total_expenses(expenses),
        net_amount=net_amount(collected, expenses),
        expenses=expenses,
    )


EXPENSES = [
    Expense(ExpenseCategory.FUEL, 1500.0, "Route north"),
    Expense(ExpenseCategory.CONSUMPTION, 800.0),
    Expense(ExpenseCategory.FUEL, 700.0),
    Expense(ExpenseCategory.REPAIRS, 2000.0, "Flat tyre"),
]


def test_net_amount_is_collected_minus_expenses():
    assert total_expenses(EXPENSES) == 5000.0
    assert net_amount(26800.0, EXPENSES) == 21800.0


def test_net_amount_without_expenses():
    assert net_amount(1200.0, []) == 1200.0


def test_net_amount_can_be_negative():
    assert net_amount(1000.0, EXPENSES) == -4000.0


def test_expenses_by_category_groups_and_omits_unused():
    assert expenses_by_category(EXPENSES) == {
        "FUEL": 2200.0,
        "CONSUMPTION": 800.0,
        "REPAIRS": 2000.0,
    }


def test_expenses_by_category_empty():
    assert expenses_by_category([]) == {}


def test_validate_closure_accepts_today_and_past():
    validate_closure(TODAY, 0.0, [], TODAY)
    validate_closure(date(2025, 3, 1), 1000.0, EXPENSES, TODAY)


@pytest.mark.parametrize(
    "closure_date,collected,expenses,match",
    [
        (date(2025, 3, 21), 1000.0, [], "closure_date"),
        (TODAY, -1.0, [], "total_collected"),
        (TODAY, math.nan, [], "total_collected"),
        (TODAY, 1000.0, [Expense(ExpenseCategory.OTHER, 0.0)], "OTHER"),
        (TODAY, 1000.0, [Expense(ExpenseCategory.FUEL, -50.0)], "FUEL"),
    ],
)
def test_validate_closure_rejects(closure_date, collected, expenses, match):
    with pytest.raises(InvalidClosureError, match=match):
        validate_closure(closure_date, collected, expenses, TODAY)


def test_installments_due_on_date():
    due_day = date(2025, 3, 15)
    loans = [
        make_loan(
            "b",
            [
                Installment(1, date(2025, 2, 15), 500.0, InstallmentStatus.PAID, 500.0, date(2025, 2, 15)),
                Installment(2, due_day, 500.0, InstallmentStatus.PARTIAL, 200.0),
            ],
        ),
        make_loan(
            "a",
            [Installment(1, due_day, 800.0, InstallmentStatus.PAID, 800.0, due_day)],
        ),
        make_loan(
            "c",
            [Installment(1, due_day, 300.0)],
            status=LoanStatus.REJECTED,
        ),
    ]

    due = installments_due_on(loans, due_day, TODAY)

    assert [(d.loan_id, d.installment_number) for d in due] == [("a", 1), ("b", 2)]
    paid, partial = due
    assert paid.status == InstallmentStatus.PAID
    assert paid.outstanding_amount == 0.0
    assert paid.days_overdue == 0
    assert partial.status == InstallmentStatus.OVERDUE
    assert partial.outstanding_amount == 300.0
    assert partial.days_overdue == 5
    assert expected_collection(due) == 1300.0


def test_installments_due_on_future_date_not_overdue():
    loans = [make_loan("a", [Installment(1, date(2025, 4, 15), 500.0)])]
    (due,) = installments_due_on(loans, date(2025, 4, 15), TODAY)
    assert due.status == InstallmentStatus.PENDING
    assert due.days_overdue == 0


def test_installments_due_on_date_without_schedule():
    loans = [make_loan("a", [Installment(1, date(2025, 4, 15), 500.0)])]
    due = installments_due_on(loans, date(2025, 4, 16), TODAY)
    assert due == []
    assert expected_collection(due) == 0


def test_collection_gap():
    loans = [make_loan("a", [Installment(1, TODAY, 1000.0), Installment(2, TODAY, 500.0)])]
    due = installments_due_on(loans, TODAY, TODAY)

    assert collection_gap(due, None) is None
    assert collection_gap(due, make_closure(TODAY, 1200.0)) == 300.0


def test_summarize_closures():
    closures = [
        make_closure(date(2025, 3, 18), 10000.0, [Expense(ExpenseCategory.FUEL, 1000.0)]),
        make_closure(date(2025, 3, 19), 5000.0),
        make_closure(date(2025, 3, 20), 3000.0, [Expense(ExpenseCategory.REPAIRS, 4000.0)]),
    ]

    summary = summarize_closures(closures)

    assert summary.closure_count == 3
    assert summary.total_collected == 18000.0
    assert summary.total_expenses == 5000.0
    assert summary.net_amount == 13000.0
    assert summary.average_daily == pytest.approx(13000.0 / 3)


def test_summarize_no_closures():
    summary = summarize_closures([])
    assert summary.closure_count == 0
    assert summary.net_amount == 0
    assert summary.average_daily == 0.0
