"""Pytest configuration and fixtures."""

from datetime import date
from typing import Callable

import pytest

from prop_lending.chain import (
    LOAN_CREATED_EVENT,
    TRANSFER_TOPIC,
    DecodedEvent,
    LoanContract,
    LogEntry,
    OnChainLoan,
    PaymentConfirmation,
    PropertyTokenContract,
    TransactionReceipt,
    TransactionSigner,
)
from prop_lending.models import Loan, LoanStatus, Property, PropertyStatus
from prop_lending.services import LendingService
from prop_lending.store import InMemoryLoanRepository, InMemoryPropertyRepository


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def start_date() -> date:
    """Fixed loan start date."""
    return date(2023, 2, 1)


@pytest.fixture
def tokenized_property() -> Property:
    """Tokenized property worth 500 000."""
    return Property(
        property_id="prop-test-001",
        owner="0xAbC0000000000000000000000000000000000001",
        title="Downtown Apartment",
        value=500000.0,
        status=PropertyStatus.TOKENIZED,
        token_id="1",
    )


def _make_loan(
    loan_id: str,
    amount: float,
    status: LoanStatus = LoanStatus.ACTIVE,
    property_id: str = "prop-test-001",
    borrower: str = "0xAbC0000000000000000000000000000000000001",
) -> Loan:
    """Build a loan with sensible defaults."""
    return Loan(
        loan_id=loan_id,
        borrower=borrower,
        property_id=property_id,
        amount=amount,
        interest_rate=3.5,
        term_months=360,
        collateral_amount=0.0,
        loan_to_value=amount / 500000.0 * 100,
        status=status,
    )


@pytest.fixture
def make_loan() -> Callable[..., Loan]:
    """Factory for loans against the test property."""
    return _make_loan


@pytest.fixture
def property_repo(tokenized_property: Property) -> InMemoryPropertyRepository:
    """Property repository holding the tokenized property."""
    repo = InMemoryPropertyRepository()
    repo.add(tokenized_property)
    return repo


@pytest.fixture
def loan_repo(property_repo: InMemoryPropertyRepository) -> InMemoryLoanRepository:
    """Empty loan repository checking property references."""
    return InMemoryLoanRepository(property_repository=property_repo)


@pytest.fixture
def service(
    property_repo: InMemoryPropertyRepository,
    loan_repo: InMemoryLoanRepository,
) -> LendingService:
    """Lending service over in-memory repositories."""
    return LendingService(property_repo, loan_repo)


# Stand-in signature topic for PropertyTokenized logs
TOKENIZED_TOPIC = "0x" + "ab" * 32
TOKEN_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
# Stand-in signature topic for LoanCreated logs
LOAN_CREATED_TOPIC = "0x" + "cd" * 32
LOAN_ADDRESS = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"


def address_topic(address: str) -> str:
    """Left-pad an address into a 32-byte topic."""
    return "0x" + address.lower().removeprefix("0x").rjust(64, "0")


def int_topic(value: int) -> str:
    """Encode an integer as a 32-byte topic."""
    return "0x" + format(value, "064x")


class FakeTokenContract(PropertyTokenContract):
    """In-memory ERC-721 contract that mints sequential token ids."""

    address = TOKEN_ADDRESS

    def __init__(self, emit_tokenized: bool = True, status: int = 1) -> None:
        self.emit_tokenized = emit_tokenized
        self.status = status
        self.next_token_id = 1
        self.owned: dict[str, list[int]] = {}
        self.property_ids: dict[int, str] = {}
        self.mints: list[tuple[str, str, int]] = []

    def mint(self, to: str, property_id: str, value_wei: int) -> TransactionReceipt:
        token_id = self.next_token_id
        self.next_token_id += 1
        self.owned.setdefault(to.lower(), []).append(token_id)
        self.property_ids[token_id] = property_id
        self.mints.append((to, property_id, value_wei))

        logs = [
            LogEntry(
                address=self.address,
                topics=[TRANSFER_TOPIC, int_topic(0), address_topic(to), int_topic(token_id)],
            )
        ]
        if self.emit_tokenized:
            logs.append(LogEntry(address=self.address, topics=[TOKENIZED_TOPIC, int_topic(token_id)]))
        return TransactionReceipt(tx_hash=f"0xmint{token_id}", logs=logs, status=self.status)

    def parse_log(self, log: LogEntry) -> DecodedEvent | None:
        if log.topics and log.topics[0] == TOKENIZED_TOPIC:
            return DecodedEvent(name="PropertyTokenized", args={"tokenId": int(log.topics[1], 16)})
        return None

    def balance_of(self, owner: str) -> int:
        return len(self.owned.get(owner.lower(), []))

    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        return self.owned[owner.lower()][index]

    def property_id_of(self, token_id: int) -> str:
        return self.property_ids[token_id]


class FakeSigner(TransactionSigner):
    """Signer that confirms every transfer and remembers it."""

    def __init__(self) -> None:
        self.payments: list[tuple[str, float]] = []

    def send_payment(self, destination: str, amount: float) -> PaymentConfirmation:
        self.payments.append((destination, amount))
        return PaymentConfirmation(
            tx_hash=f"0xpay{len(self.payments)}",
            destination=destination,
            amount=amount,
        )


@pytest.fixture
def token_contract() -> FakeTokenContract:
    """Fake property token contract."""
    return FakeTokenContract()


@pytest.fixture
def signer() -> FakeSigner:
    """Fake payment signer."""
    return FakeSigner()


class FakeLoanContract(LoanContract):
    """In-memory loan contract numbering loans from 1."""

    address = LOAN_ADDRESS

    def __init__(self, emit_created: bool = True, status: int = 1) -> None:
        self.emit_created = emit_created
        self.status = status
        self.next_loan_id = 1
        self.created: list[tuple[int, int, int, int, int]] = []
        self.repayments: list[tuple[str, int]] = []
        self.loans: dict[str, list[OnChainLoan]] = {}

    def create_loan(
        self,
        token_id: int,
        amount_wei: int,
        term_months: int,
        rate_bps: int,
        collateral_wei: int,
    ) -> TransactionReceipt:
        loan_id = self.next_loan_id
        self.next_loan_id += 1
        self.created.append((token_id, amount_wei, term_months, rate_bps, collateral_wei))

        logs = []
        if self.emit_created:
            logs.append(LogEntry(address=self.address, topics=[LOAN_CREATED_TOPIC, int_topic(loan_id)]))
        return TransactionReceipt(tx_hash=f"0xloan{loan_id}", logs=logs, status=self.status)

    def parse_log(self, log: LogEntry) -> DecodedEvent | None:
        if log.topics and log.topics[0] == LOAN_CREATED_TOPIC:
            return DecodedEvent(name=LOAN_CREATED_EVENT, args={"loanId": int(log.topics[1], 16)})
        return None

    def repay(self, loan_id: str, amount_wei: int) -> TransactionReceipt:
        self.repayments.append((loan_id, amount_wei))
        return TransactionReceipt(tx_hash=f"0xrepay{len(self.repayments)}", status=self.status)

    def loans_by_borrower(self, borrower: str) -> list[OnChainLoan]:
        return list(self.loans.get(borrower.lower(), []))


@pytest.fixture
def loan_contract() -> FakeLoanContract:
    """Fake loan contract."""
    return FakeLoanContract()
