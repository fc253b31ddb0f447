"""Value types for transaction receipts and decoded events."""

from dataclasses import dataclass, field
from typing import Any

from prop_lending.chain.units import basis_points_to_rate, from_wei


@dataclass
class LogEntry:
    """Raw log emitted by a contract during a transaction."""

    address: str  # Emitting contract
    topics: list[str]  # 0x-prefixed hex, topic 0 is the event signature
    data: str = "0x"


@dataclass
class DecodedEvent:
    """Event decoded against a contract ABI."""

    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransactionReceipt:
    """Mined transaction and its logs."""

    tx_hash: str
    logs: list[LogEntry] = field(default_factory=list)
    status: int = 1  # 1 success, 0 reverted
    block_number: int | None = None


@dataclass
class PaymentConfirmation:
    """Result of a signed value transfer."""

    tx_hash: str
    destination: str
    amount: float


@dataclass
class OnChainLoan:
    """Loan record as stored by the loan contract, in raw contract units."""

    loan_id: str
    borrower: str
    token_id: str
    amount_wei: int
    term_months: int
    rate_bps: int
    collateral_wei: int
    start_time: int = 0  # Unix seconds
    active: bool = False
    repaid: bool = False

    @property
    def amount(self) -> float:
        return from_wei(self.amount_wei)

    @property
    def collateral_amount(self) -> float:
        return from_wei(self.collateral_wei)

    @property
    def interest_rate(self) -> float:
        """Annual rate in percent."""
        return basis_points_to_rate(self.rate_bps)
