"""Loan underwriting: equity, limits, amortization and repayment."""

from prop_lending.underwriting.amortization import (
    add_months,
    generate_schedule,
    monthly_payment,
    monthly_rate,
    total_repayment,
)
from prop_lending.underwriting.equity import (
    available_equity,
    encumbered_amount,
    ensure_within_limit,
    loan_to_value,
    max_loan_amount,
    remaining_equity,
    suggested_loan_amount,
)
from prop_lending.underwriting.formatting import format_currency, format_percent
from prop_lending.underwriting.repayment import (
    RepaymentSummary,
    apply_payment,
    next_payment,
    paid_amount,
    remaining_payments,
    repayment_progress,
    summarize,
)

__all__ = [
    "RepaymentSummary",
    "add_months",
    "apply_payment",
    "available_equity",
    "encumbered_amount",
    "ensure_within_limit",
    "format_currency",
    "format_percent",
    "generate_schedule",
    "loan_to_value",
    "max_loan_amount",
    "monthly_payment",
    "monthly_rate",
    "next_payment",
    "paid_amount",
    "remaining_equity",
    "remaining_payments",
    "repayment_progress",
    "suggested_loan_amount",
    "summarize",
    "total_repayment",
]
