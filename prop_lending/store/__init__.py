"""Property and loan repositories."""

from prop_lending.store.base import LoanRepository, PropertyRepository
from prop_lending.store.memory import InMemoryLoanRepository, InMemoryPropertyRepository

__all__ = [
    "InMemoryLoanRepository",
    "InMemoryPropertyRepository",
    "LoanRepository",
    "PropertyRepository",
]
