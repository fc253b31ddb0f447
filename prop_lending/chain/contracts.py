"""Contracts the lending core expects from the wallet/chain integration."""

from abc import ABC, abstractmethod

from prop_lending.chain.types import (
    DecodedEvent,
    LogEntry,
    OnChainLoan,
    PaymentConfirmation,
    TransactionReceipt,
)

LOAN_CREATED_EVENT = "LoanCreated"


class PropertyTokenContract(ABC):
    """ERC-721 style property token contract."""

    address: str

    @abstractmethod
    def mint(self, to: str, property_id: str, value_wei: int) -> TransactionReceipt:
        """Mint a token for ``property_id`` to ``to`` and wait for the receipt."""

    @abstractmethod
    def parse_log(self, log: LogEntry) -> DecodedEvent | None:
        """Decode ``log`` against the contract ABI, or None if it does not match."""

    @abstractmethod
    def balance_of(self, owner: str) -> int:
        """Number of tokens held by ``owner``."""

    @abstractmethod
    def token_of_owner_by_index(self, owner: str, index: int) -> int:
        """Token id at ``index`` in ``owner``'s enumeration."""

    @abstractmethod
    def property_id_of(self, token_id: int) -> str:
        """Property id recorded for ``token_id``."""


class TransactionSigner(ABC):
    """Wallet capability used to send repayments."""

    @abstractmethod
    def send_payment(self, destination: str, amount: float) -> PaymentConfirmation:
        """Transfer ``amount`` to ``destination`` and return the confirmation."""


class LoanContract(ABC):
    """Loan contract holding collateral and recording repayments."""

    address: str

    @abstractmethod
    def create_loan(
        self,
        token_id: int,
        amount_wei: int,
        term_months: int,
        rate_bps: int,
        collateral_wei: int,
    ) -> TransactionReceipt:
        """Open a loan against ``token_id``, sending ``collateral_wei`` as the value."""

    @abstractmethod
    def parse_log(self, log: LogEntry) -> DecodedEvent | None:
        """Decode ``log`` against the contract ABI, or None if it does not match."""

    @abstractmethod
    def repay(self, loan_id: str, amount_wei: int) -> TransactionReceipt:
        """Send ``amount_wei`` against on-chain loan ``loan_id``."""

    @abstractmethod
    def loans_by_borrower(self, borrower: str) -> list[OnChainLoan]:
        """Loans the contract records for ``borrower``."""


def find_event(
    receipt: TransactionReceipt,
    contract: PropertyTokenContract | LoanContract,
    name: str,
) -> DecodedEvent | None:
    """First log in ``receipt`` that ``contract`` decodes as event ``name``."""
    for log in receipt.logs:
        event = contract.parse_log(log)
        if event is not None and event.name == name:
            return event
    return None
