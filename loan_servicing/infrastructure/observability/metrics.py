"""Prometheus metrics for loan origination, rounding suggestions, collections and daily closures"""

from typing import Dict
from prometheus_client import Counter, Histogram

# Origination metrics
loans_created_counter = Counter(
    "loan_servicing_loans_created_total",
    "Loans created",
    ["bucket"],  # <10k, 10k-100k, 100k-1M, 1M+
)

invalid_terms_counter = Counter(
    "loan_servicing_invalid_terms_total",
    "Loan terms rejected by the amortization engine",
    ["operation"],  # simulation | rounding | loan
)

rounding_suggestions_counter = Counter(
    "loan_servicing_rounding_suggestions_total",
    "Installment rounding suggestions computed",
    ["direction", "outcome"],  # up | down ; found | none
)

# Collections metrics
payments_recorded_counter = Counter(
    "loan_servicing_payments_recorded_total",
    "Installment payments recorded",
    ["installment_status"],  # PARTIAL | PAID
)

tracking_cache_counter = Counter(
    "loan_servicing_tracking_cache_total",
    "Borrower tracking lookups by cache result",
    ["result"],  # hit | miss
)

daily_closures_counter = Counter(
    "loan_servicing_daily_closures_total",
    "Daily cash closures recorded",
    ["balance"],  # positive | zero | negative
)

closure_expenses_counter = Counter(
    "loan_servicing_closure_expenses_amount_total",
    "Expense amounts declared in daily closures",
    ["category"],
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_loan_created(principal: float) -> None:
    """Record origination, bucketed by principal for size distribution"""
    if principal < 10_000:
        bucket = "<10k"
    elif principal < 100_000:
        bucket = "10k-100k"
    elif principal < 1_000_000:
        bucket = "100k-1M"
    else:
        bucket = "1M+"

    loans_created_counter.labels(bucket=bucket).inc()


def record_rounding(direction: str, found: bool) -> None:
    rounding_suggestions_counter.labels(direction=direction, outcome="found" if found else "none").inc()


def record_daily_closure(net_amount: float, expenses_by_category: Dict[str, float]) -> None:
    """Record a closure by the sign of its net amount, plus its expense totals"""
    if net_amount > 0:
        balance = "positive"
    elif net_amount < 0:
        balance = "negative"
    else:
        balance = "zero"

    daily_closures_counter.labels(balance=balance).inc()
    for category, amount in expenses_by_category.items():
        closure_expenses_counter.labels(category=category).inc(amount)
