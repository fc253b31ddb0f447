"""Annuity payments and repayment schedule generation."""

import calendar
from datetime import date
from typing import Iterator

from prop_lending.models import PaymentStatus, ScheduledPayment
from prop_lending.underwriting.validation import require_positive, validate_rate, validate_term


def monthly_rate(annual_rate_percent: float) -> float:
    """Convert an annual percentage rate into a monthly fraction."""
    return validate_rate(annual_rate_percent) / 100 / 12


def monthly_payment(principal: float, annual_rate_percent: float, term_months: int) -> float:
    """Fixed monthly payment that retires ``principal`` over ``term_months``.

    Uses the annuity formula ``P * r * (1+r)^n / ((1+r)^n - 1)`` and falls back
    to straight-line ``P / n`` when the rate is zero.
    """
    principal = require_positive("principal", principal)
    n = validate_term(term_months)
    r = monthly_rate(annual_rate_percent)

    if r == 0:
        return principal / n

    growth = (1 + r) ** n
    return principal * r * growth / (growth - 1)


def total_repayment(principal: float, annual_rate_percent: float, term_months: int) -> float:
    """Sum of all scheduled payments over the life of the loan."""
    return monthly_payment(principal, annual_rate_percent, term_months) * term_months


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole calendar months, clamping to the month's last day."""
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_schedule(
    principal: float,
    annual_rate_percent: float,
    term_months: int,
    start_date: date,
) -> list[ScheduledPayment]:
    """Build the repayment schedule for a loan.

    Parameters
    ----------
    principal : float
        Amount borrowed.
    annual_rate_percent : float
        Annual interest rate in percent (3.5 for 3.5%).
    term_months : int
        Number of monthly payments.
    start_date : date
        Loan start; the first payment falls one month later.

    Returns
    -------
    list[ScheduledPayment]
        ``term_months`` pending entries with unrounded amounts.
    """
    payment = monthly_payment(principal, annual_rate_percent, term_months)
    return [
        ScheduledPayment(due_date=due, amount=payment, status=PaymentStatus.PENDING)
        for due in _due_dates(start_date, term_months)
    ]


def _due_dates(start_date: date, term_months: int) -> Iterator[date]:
    """Yield due dates anchored on ``start_date`` so month-end days do not drift."""
    for i in range(1, term_months + 1):
        yield add_months(start_date, i)
