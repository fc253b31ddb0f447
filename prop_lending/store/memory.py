"""In-memory repositories used in tests and local development."""

from dataclasses import dataclass, field, replace
from datetime import date, datetime

from prop_lending.exceptions import (
    EntityNotFoundError,
    ReferentialIntegrityError,
    RepositoryError,
)
from prop_lending.models import Loan, LoanStatus, Property, PropertyStatus, ScheduledPayment
from prop_lending.store.base import LoanRepository, PropertyRepository


@dataclass
class InMemoryPropertyRepository(PropertyRepository):
    """Dictionary-backed property store with an owner index."""

    properties: dict[str, Property] = field(default_factory=dict)

    # Relationship indexes
    _owner_properties: dict[str, list[str]] = field(default_factory=dict)

    def get(self, property_id: str) -> Property | None:
        return self.properties.get(property_id)

    def list_all(self) -> list[Property]:
        return list(self.properties.values())

    def list_by_owner(self, owner: str) -> list[Property]:
        property_ids = self._owner_properties.get(owner.lower(), [])
        return [self.properties[pid] for pid in property_ids]

    def list_by_status(self, status: PropertyStatus) -> list[Property]:
        return [p for p in self.properties.values() if p.status == status]

    def add(self, prop: Property) -> Property:
        if prop.property_id in self.properties:
            raise RepositoryError(f"Property {prop.property_id} already exists")
        if prop.created_at is None:
            prop.created_at = datetime.now()

        self.properties[prop.property_id] = prop
        self._owner_properties.setdefault(prop.owner.lower(), []).append(prop.property_id)
        return prop

    def update_status(
        self,
        property_id: str,
        status: PropertyStatus,
        token_id: str | None = None,
    ) -> Property:
        current = self.properties.get(property_id)
        if current is None:
            raise EntityNotFoundError(f"Property {property_id} not found")

        updated = replace(
            current,
            status=status,
            token_id=token_id if token_id is not None else current.token_id,
            updated_at=datetime.now(),
        )
        self.properties[property_id] = updated
        return updated

    def count(self) -> int:
        return len(self.properties)


@dataclass
class InMemoryLoanRepository(LoanRepository):
    """Dictionary-backed loan store with borrower and property indexes.

    When ``property_repository`` is set, new loans must reference a stored
    property.
    """

    property_repository: PropertyRepository | None = None
    loans: dict[str, Loan] = field(default_factory=dict)

    # Relationship indexes
    _borrower_loans: dict[str, list[str]] = field(default_factory=dict)
    _property_loans: dict[str, list[str]] = field(default_factory=dict)

    def get(self, loan_id: str) -> Loan | None:
        return self.loans.get(loan_id)

    def list_all(self) -> list[Loan]:
        return list(self.loans.values())

    def list_by_borrower(self, borrower: str) -> list[Loan]:
        loan_ids = self._borrower_loans.get(borrower.lower(), [])
        return [self.loans[lid] for lid in loan_ids]

    def list_by_property(self, property_id: str) -> list[Loan]:
        loan_ids = self._property_loans.get(property_id, [])
        return [self.loans[lid] for lid in loan_ids]

    def add(self, loan: Loan) -> Loan:
        if loan.loan_id in self.loans:
            raise RepositoryError(f"Loan {loan.loan_id} already exists")
        if (
            self.property_repository is not None
            and self.property_repository.get(loan.property_id) is None
        ):
            raise ReferentialIntegrityError(f"Property {loan.property_id} not found")
        if loan.created_at is None:
            loan.created_at = datetime.now()

        self.loans[loan.loan_id] = loan
        self._borrower_loans.setdefault(loan.borrower.lower(), []).append(loan.loan_id)
        self._property_loans.setdefault(loan.property_id, []).append(loan.loan_id)
        return loan

    def update_status(self, loan_id: str, status: LoanStatus) -> Loan:
        current = self._require_stored(loan_id)
        updated = replace(current, status=status, updated_at=datetime.now())
        self.loans[loan_id] = updated
        return updated

    def activate(
        self,
        loan_id: str,
        start_date: date,
        schedule: list[ScheduledPayment],
        chain_loan_id: str | None = None,
    ) -> Loan:
        current = self._require_stored(loan_id)
        updated = replace(
            current,
            status=LoanStatus.ACTIVE,
            start_date=start_date,
            repayment_schedule=list(schedule),
            chain_loan_id=chain_loan_id if chain_loan_id is not None else current.chain_loan_id,
            updated_at=datetime.now(),
        )
        self.loans[loan_id] = updated
        return updated

    def update_schedule(self, loan_id: str, schedule: list[ScheduledPayment]) -> Loan:
        current = self._require_stored(loan_id)
        updated = replace(current, repayment_schedule=list(schedule), updated_at=datetime.now())
        self.loans[loan_id] = updated
        return updated

    def count(self) -> int:
        return len(self.loans)

    def _require_stored(self, loan_id: str) -> Loan:
        current = self.loans.get(loan_id)
        if current is None:
            raise EntityNotFoundError(f"Loan {loan_id} not found")
        return current
