"""Repository interfaces for properties and loans."""

from abc import ABC, abstractmethod
from datetime import date

from prop_lending.exceptions import EntityNotFoundError
from prop_lending.models import Loan, LoanStatus, Property, PropertyStatus, ScheduledPayment
from prop_lending.underwriting import encumbered_amount


class PropertyRepository(ABC):
    """Storage contract for :class:`Property` records."""

    @abstractmethod
    def get(self, property_id: str) -> Property | None:
        """Return the property or None."""

    @abstractmethod
    def list_all(self) -> list[Property]:
        """Return every property."""

    @abstractmethod
    def list_by_owner(self, owner: str) -> list[Property]:
        """Return properties owned by ``owner`` (case-insensitive address match)."""

    @abstractmethod
    def list_by_status(self, status: PropertyStatus) -> list[Property]:
        """Return properties in ``status``."""

    @abstractmethod
    def add(self, prop: Property) -> Property:
        """Persist a new property."""

    @abstractmethod
    def update_status(
        self,
        property_id: str,
        status: PropertyStatus,
        token_id: str | None = None,
    ) -> Property:
        """Change a property's status, recording ``token_id`` when given."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored properties."""

    def require(self, property_id: str) -> Property:
        """Return the property or raise :class:`EntityNotFoundError`."""
        prop = self.get(property_id)
        if prop is None:
            raise EntityNotFoundError(f"Property {property_id} not found")
        return prop


class LoanRepository(ABC):
    """Storage contract for :class:`Loan` records."""

    @abstractmethod
    def get(self, loan_id: str) -> Loan | None:
        """Return the loan or None."""

    @abstractmethod
    def list_all(self) -> list[Loan]:
        """Return every loan."""

    @abstractmethod
    def list_by_borrower(self, borrower: str) -> list[Loan]:
        """Return loans taken by ``borrower`` (case-insensitive address match)."""

    @abstractmethod
    def list_by_property(self, property_id: str) -> list[Loan]:
        """Return loans backed by ``property_id``."""

    @abstractmethod
    def add(self, loan: Loan) -> Loan:
        """Persist a new loan."""

    @abstractmethod
    def update_status(self, loan_id: str, status: LoanStatus) -> Loan:
        """Change a loan's status."""

    @abstractmethod
    def activate(
        self,
        loan_id: str,
        start_date: date,
        schedule: list[ScheduledPayment],
        chain_loan_id: str | None = None,
    ) -> Loan:
        """Mark a loan active with its start date and schedule in one write.

        Either every field is stored or none is.
        """

    @abstractmethod
    def update_schedule(self, loan_id: str, schedule: list[ScheduledPayment]) -> Loan:
        """Replace a loan's repayment schedule."""

    @abstractmethod
    def count(self) -> int:
        """Number of stored loans."""

    def encumbered_amount(self, property_id: str) -> float:
        """Outstanding principal held against ``property_id``."""
        return encumbered_amount(self.list_by_property(property_id))

    def require(self, loan_id: str) -> Loan:
        """Return the loan or raise :class:`EntityNotFoundError`."""
        loan = self.get(loan_id)
        if loan is None:
            raise EntityNotFoundError(f"Loan {loan_id} not found")
        return loan
