"""Chain-facing contracts, unit helpers and token id recovery."""

from prop_lending.chain.contracts import (
    LOAN_CREATED_EVENT,
    LoanContract,
    PropertyTokenContract,
    TransactionSigner,
    find_event,
)
from prop_lending.chain.token_recovery import (
    DEFAULT_STRATEGIES,
    TOKENIZED_EVENT,
    TRANSFER_TOPIC,
    OwnerEnumerationStrategy,
    RawTopicStrategy,
    RecoveryContext,
    TokenIdResolver,
    TokenIdStrategy,
    TokenizedEventStrategy,
    TransferEventStrategy,
)
from prop_lending.chain.types import (
    DecodedEvent,
    LogEntry,
    OnChainLoan,
    PaymentConfirmation,
    TransactionReceipt,
)
from prop_lending.chain.units import basis_points_to_rate, from_wei, rate_to_basis_points, to_wei

__all__ = [
    "DEFAULT_STRATEGIES",
    "LOAN_CREATED_EVENT",
    "TOKENIZED_EVENT",
    "TRANSFER_TOPIC",
    "DecodedEvent",
    "LoanContract",
    "LogEntry",
    "OnChainLoan",
    "OwnerEnumerationStrategy",
    "PaymentConfirmation",
    "PropertyTokenContract",
    "RawTopicStrategy",
    "RecoveryContext",
    "TokenIdResolver",
    "TokenIdStrategy",
    "TokenizedEventStrategy",
    "TransactionReceipt",
    "TransactionSigner",
    "TransferEventStrategy",
    "basis_points_to_rate",
    "find_event",
    "from_wei",
    "rate_to_basis_points",
    "to_wei",
]
