"""Payment recording and derived repayment figures."""

from dataclasses import dataclass, replace
from datetime import date
from typing import Sequence

from prop_lending.exceptions import NoPendingPaymentError
from prop_lending.models import Loan, PaymentStatus, ScheduledPayment
from prop_lending.underwriting.validation import require_non_negative, require_positive


@dataclass
class RepaymentSummary:
    """Repayment figures derived from a loan's schedule."""

    loan_id: str
    principal: float
    paid_amount: float
    progress_percent: float
    remaining_payments: int
    next_payment: ScheduledPayment | None


def _next_pending_index(schedule: Sequence[ScheduledPayment]) -> int | None:
    pending = [i for i, entry in enumerate(schedule) if entry.status == PaymentStatus.PENDING]
    if not pending:
        return None
    return min(pending, key=lambda i: (schedule[i].due_date, i))


def apply_payment(
    schedule: Sequence[ScheduledPayment],
    amount_paid: float,
    paid_on: date | None = None,
) -> list[ScheduledPayment]:
    """Mark the earliest pending entry as paid.

    Payments always settle the next pending installment in due-date order;
    ``amount_paid`` is not compared with the scheduled amount. The input
    schedule is left untouched.

    Raises
    ------
    NoPendingPaymentError
        If every entry is already paid or overdue.
    """
    require_non_negative("amount paid", amount_paid)
    index = _next_pending_index(schedule)
    if index is None:
        raise NoPendingPaymentError("Repayment schedule has no pending payment")

    updated = list(schedule)
    updated[index] = replace(
        schedule[index],
        status=PaymentStatus.PAID,
        paid_date=paid_on or date.today(),
    )
    return updated


def next_payment(schedule: Sequence[ScheduledPayment]) -> ScheduledPayment | None:
    """Earliest pending entry, or None when nothing is pending."""
    index = _next_pending_index(schedule)
    return schedule[index] if index is not None else None


def paid_amount(schedule: Sequence[ScheduledPayment]) -> float:
    """Sum of scheduled amounts already paid."""
    return sum(entry.amount for entry in schedule if entry.status == PaymentStatus.PAID)


def remaining_payments(schedule: Sequence[ScheduledPayment]) -> int:
    """Number of pending entries."""
    return sum(1 for entry in schedule if entry.status == PaymentStatus.PENDING)


def repayment_progress(schedule: Sequence[ScheduledPayment], principal: float) -> float:
    """Paid amount as a percentage of the principal."""
    return paid_amount(schedule) / require_positive("principal", principal) * 100


def summarize(loan: Loan) -> RepaymentSummary:
    """Build a :class:`RepaymentSummary` for ``loan``."""
    schedule = loan.repayment_schedule
    return RepaymentSummary(
        loan_id=loan.loan_id,
        principal=loan.amount,
        paid_amount=paid_amount(schedule),
        progress_percent=repayment_progress(schedule, loan.amount),
        remaining_payments=remaining_payments(schedule),
        next_payment=next_payment(schedule),
    )
