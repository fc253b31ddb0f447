"""Enumeration types for lending domain entities."""

from enum import Enum


class PropertyStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    TOKENIZED = "tokenized"


class LoanStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    ACTIVE = "active"
    REPAID = "repaid"
    DEFAULTED = "defaulted"

    @property
    def is_terminal(self) -> bool:
        """Terminal loans no longer encumber their property."""
        return self in TERMINAL_LOAN_STATUSES


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"


ENCUMBERING_LOAN_STATUSES = frozenset(
    {LoanStatus.PENDING, LoanStatus.APPROVED, LoanStatus.ACTIVE}
)
TERMINAL_LOAN_STATUSES = frozenset({LoanStatus.REPAID, LoanStatus.DEFAULTED})
