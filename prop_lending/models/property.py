"""Property model for tokenized real estate."""

from dataclasses import dataclass
from datetime import datetime

from prop_lending.models.enums import PropertyStatus


@dataclass
class Property:
    """Real estate property registered for tokenization."""

    property_id: str
    owner: str  # Wallet address
    title: str
    value: float  # Appraised value
    status: PropertyStatus = PropertyStatus.PENDING
    description: str = ""
    location: str = ""
    image_url: str = ""
    token_id: str | None = None  # Set once tokenized
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_loan_eligible(self) -> bool:
        """Only tokenized properties can back a loan."""
        return self.status == PropertyStatus.TOKENIZED
