"""Loan models for collateralized lending."""

from dataclasses import dataclass, field
from datetime import date, datetime

from prop_lending.models.enums import LoanStatus, PaymentStatus


@dataclass
class ScheduledPayment:
    """One entry of a loan repayment schedule."""

    due_date: date
    amount: float
    status: PaymentStatus = PaymentStatus.PENDING
    paid_date: date | None = None


@dataclass
class Loan:
    """Loan contract backed by a tokenized property."""

    loan_id: str
    borrower: str  # Wallet address
    property_id: str
    amount: float  # Principal
    interest_rate: float  # Annual percent (e.g., 3.5)
    term_months: int
    collateral_amount: float  # Additional crypto collateral
    loan_to_value: float  # Percent, fixed at creation
    status: LoanStatus = LoanStatus.PENDING
    token_id: str | None = None
    chain_loan_id: str | None = None  # Loan contract id, set on activation
    start_date: date | None = None  # Set on activation
    repayment_schedule: list[ScheduledPayment] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
