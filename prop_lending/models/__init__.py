"""Domain models for property-backed lending."""

from prop_lending.models.base import Event
from prop_lending.models.enums import (
    ENCUMBERING_LOAN_STATUSES,
    TERMINAL_LOAN_STATUSES,
    LoanStatus,
    PaymentStatus,
    PropertyStatus,
)
from prop_lending.models.loan import Loan, ScheduledPayment
from prop_lending.models.property import Property

__all__ = [
    "ENCUMBERING_LOAN_STATUSES",
    "TERMINAL_LOAN_STATUSES",
    "Event",
    "Loan",
    "LoanStatus",
    "PaymentStatus",
    "Property",
    "PropertyStatus",
    "ScheduledPayment",
]
