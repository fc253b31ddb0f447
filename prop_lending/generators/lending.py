"""Property and loan generators for demos and load testing."""

import random
from datetime import date, datetime, timedelta
from typing import Iterator

from prop_lending.exceptions import InvalidInputError
from prop_lending.generators.base import BaseGenerator
from prop_lending.models import Loan, LoanStatus, PaymentStatus, Property, PropertyStatus
from prop_lending.underwriting import generate_schedule, loan_to_value


class PropertyGenerator(BaseGenerator):
    """Generate synthetic properties."""

    KINDS = ["Apartment", "House", "Townhouse", "Cabin", "Loft", "Villa"]

    def generate(
        self,
        owner: str | None = None,
        status: PropertyStatus | None = None,
    ) -> Property:
        """Generate a property.

        Parameters
        ----------
        owner : str | None
            Owner address; random when omitted.
        status : PropertyStatus | None
            Lifecycle status; random when omitted. Tokenized properties get a
            token id.

        Returns
        -------
        Property
            Generated property.
        """
        status = status or random.choice(list(PropertyStatus))
        city = self.fake.city()

        return Property(
            property_id=self.fake.uuid4(),
            owner=owner or self.wallet_address(),
            title=f"{city} {random.choice(self.KINDS)}",
            value=float(random.randint(150, 2000) * 1000),
            status=status,
            description=self.fake.sentence(nb_words=10),
            location=f"{self.fake.street_address()}, {city}, {self.fake.state_abbr()}",
            image_url=self.fake.image_url(),
            token_id=str(random.randint(1, 100000)) if status == PropertyStatus.TOKENIZED else None,
            created_at=datetime.now() - timedelta(days=random.randint(30, 730)),
        )

    def generate_batch(self, count: int, **kwargs) -> Iterator[Property]:
        """Generate ``count`` properties."""
        for _ in range(count):
            yield self.generate(**kwargs)


class LoanGenerator(BaseGenerator):
    """Generate synthetic loans against existing properties."""

    TERMS = [60, 120, 180, 240, 360]

    def generate_for_property(
        self,
        prop: Property,
        status: LoanStatus = LoanStatus.ACTIVE,
        borrower: str | None = None,
        max_amount: float | None = None,
    ) -> Loan:
        """Generate a loan backed by ``prop``.

        Parameters
        ----------
        prop : Property
            Collateral property.
        status : LoanStatus
            Loan status. Active and finished loans get a schedule with every
            installment due before today marked as paid.
        borrower : str | None
            Borrower address; defaults to the property owner.
        max_amount : float | None
            Upper bound for the principal, e.g. the remaining loan limit.

        Returns
        -------
        Loan
            Generated loan.

        Raises
        ------
        InvalidInputError
            If the limit leaves no room for a loan.
        """
        limit = prop.value * 0.7 if max_amount is None else min(max_amount, prop.value * 0.7)
        if limit <= 0:
            raise InvalidInputError(f"No loan room left on property {prop.property_id}")
        # Round to the nearest thousand without crossing the limit
        amount = float(min(round(limit * random.uniform(0.3, 1.0), -3) or limit, limit))
        interest_rate = round(random.uniform(2.5, 8.0), 2)
        term_months = random.choice(self.TERMS)

        start_date = None
        schedule = []
        if status in (LoanStatus.ACTIVE, LoanStatus.REPAID, LoanStatus.DEFAULTED):
            start_date = date.today() - timedelta(days=random.randint(60, 1500))
            schedule = generate_schedule(amount, interest_rate, term_months, start_date)
            today = date.today()
            for entry in schedule:
                if status == LoanStatus.REPAID or entry.due_date <= today:
                    entry.status = PaymentStatus.PAID
                    entry.paid_date = entry.due_date

        return Loan(
            loan_id=self.fake.uuid4(),
            borrower=borrower or prop.owner,
            property_id=prop.property_id,
            amount=amount,
            interest_rate=interest_rate,
            term_months=term_months,
            collateral_amount=round(amount * random.uniform(0.05, 0.15), 2),
            loan_to_value=loan_to_value(amount, prop.value),
            status=status,
            token_id=prop.token_id,
            start_date=start_date,
            repayment_schedule=schedule,
            created_at=datetime.now() - timedelta(days=random.randint(1, 60)),
        )
