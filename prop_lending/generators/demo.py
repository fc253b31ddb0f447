"""Fixed demonstration data and the seed step that loads it."""

import logging
from datetime import date, datetime

from prop_lending.models import Loan, LoanStatus, PaymentStatus, Property, PropertyStatus
from prop_lending.store import LoanRepository, PropertyRepository
from prop_lending.underwriting import generate_schedule

logger = logging.getLogger(__name__)


def demo_properties() -> list[Property]:
    """Three properties covering the tokenized, approved and pending states."""
    return [
        Property(
            property_id="prop1",
            owner="0x123",
            title="Downtown Apartment",
            description="A beautiful apartment in the heart of downtown",
            location="123 Main St, New York, NY",
            value=500000.0,
            image_url="https://images.unsplash.com/photo-1560448204-e02f11c3d0e2?w=800&auto=format&fit=crop",
            status=PropertyStatus.TOKENIZED,
            token_id="1",
            created_at=datetime(2023, 1, 15),
        ),
        Property(
            property_id="prop2",
            owner="0x123",
            title="Beach House",
            description="Stunning beach house with ocean views",
            location="456 Ocean Ave, Miami, FL",
            value=1200000.0,
            image_url="https://images.unsplash.com/photo-1512917774080-9991f1c4c750?w=800&auto=format&fit=crop",
            status=PropertyStatus.APPROVED,
            created_at=datetime(2023, 2, 20),
        ),
        Property(
            property_id="prop3",
            owner="0x456",
            title="Mountain Cabin",
            description="Cozy cabin in the mountains",
            location="789 Pine Rd, Aspen, CO",
            value=800000.0,
            image_url="https://images.unsplash.com/photo-1542718610-a1d656d1884c?w=800&auto=format&fit=crop",
            status=PropertyStatus.PENDING,
            created_at=datetime(2023, 3, 10),
        ),
    ]


def demo_loans() -> list[Loan]:
    """One active 30-year loan on ``prop1`` with its first two payments made."""
    start = date(2023, 2, 1)
    schedule = generate_schedule(300000.0, 3.5, 360, start)
    for entry in schedule[:2]:
        entry.status = PaymentStatus.PAID
        entry.paid_date = entry.due_date

    return [
        Loan(
            loan_id="loan1",
            borrower="0x123",
            property_id="prop1",
            token_id="1",
            amount=300000.0,
            interest_rate=3.5,
            term_months=360,
            collateral_amount=30000.0,
            loan_to_value=60.0,
            status=LoanStatus.ACTIVE,
            start_date=start,
            repayment_schedule=schedule,
            created_at=datetime(2023, 2, 1),
        )
    ]


def seed_if_empty(properties: PropertyRepository, loans: LoanRepository) -> dict[str, int]:
    """Load the demo data into empty repositories.

    Properties go first because loans reference them. Each repository is
    only seeded when it holds no records.

    Returns
    -------
    dict[str, int]
        Number of records inserted per entity.
    """
    inserted = {"properties": 0, "loans": 0}

    if properties.count() == 0:
        for prop in demo_properties():
            properties.add(prop)
            inserted["properties"] += 1
    else:
        logger.info("Properties already present, skipping demo properties")

    if loans.count() == 0:
        for loan in demo_loans():
            loans.add(loan)
            inserted["loans"] += 1
    else:
        logger.info("Loans already present, skipping demo loans")

    logger.info(
        "Demo data seeded: %d properties, %d loans",
        inserted["properties"],
        inserted["loans"],
    )
    return inserted
