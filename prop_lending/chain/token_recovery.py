"""Recover the token id assigned by a mint transaction.

The direct answer is the ``PropertyTokenized`` event, but it is not always
decodable. :class:`TokenIdResolver` tries an ordered list of strategies and
takes the first one that returns a token id. Only the first strategy reads an
authoritative source; the rest are heuristics.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Sequence

from prop_lending.chain.contracts import PropertyTokenContract, find_event
from prop_lending.chain.types import TransactionReceipt
from prop_lending.exceptions import ChainError, TokenIdUndeterminableError
from prop_lending.logging import get_logger

logger = get_logger(__name__)

# keccak256("Transfer(address,address,uint256)")
TRANSFER_TOPIC = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"
TOKENIZED_EVENT = "PropertyTokenized"


@dataclass
class RecoveryContext:
    """Everything a strategy may inspect."""

    receipt: TransactionReceipt
    contract: PropertyTokenContract
    recipient: str
    property_id: str


def topic_to_int(topic: str) -> int:
    """Decode a 32-byte hex topic as an unsigned big integer."""
    return int(topic, 16)


def topic_matches_address(topic: str, address: str) -> bool:
    """Whether an indexed address topic refers to ``address``."""
    return topic.lower()[-40:] == address.lower().removeprefix("0x")[-40:]


class TokenIdStrategy(ABC):
    """One way of finding the minted token id."""

    name: str = "strategy"

    @abstractmethod
    def recover(self, ctx: RecoveryContext) -> str | None:
        """Return the token id, or None if this strategy cannot tell."""


class TokenizedEventStrategy(TokenIdStrategy):
    """Read ``tokenId`` from the contract's own ``PropertyTokenized`` event."""

    name = "tokenized_event"

    def recover(self, ctx: RecoveryContext) -> str | None:
        event = find_event(ctx.receipt, ctx.contract, TOKENIZED_EVENT)
        if event is None or event.args.get("tokenId") is None:
            return None
        return str(event.args["tokenId"])


class OwnerEnumerationStrategy(TokenIdStrategy):
    """Look through the recipient's tokens for one bound to the property.

    The most recently indexed token is checked first, then every owned token.
    """

    name = "owner_enumeration"

    def recover(self, ctx: RecoveryContext) -> str | None:
        balance = ctx.contract.balance_of(ctx.recipient)
        if balance <= 0:
            return None

        latest = ctx.contract.token_of_owner_by_index(ctx.recipient, balance - 1)
        if ctx.contract.property_id_of(latest) == ctx.property_id:
            return str(latest)

        for index in range(balance - 1):
            token_id = ctx.contract.token_of_owner_by_index(ctx.recipient, index)
            if ctx.contract.property_id_of(token_id) == ctx.property_id:
                return str(token_id)
        return None


class TransferEventStrategy(TokenIdStrategy):
    """Read the token id from an ERC-721 ``Transfer`` log addressed to the recipient."""

    name = "transfer_event"

    def recover(self, ctx: RecoveryContext) -> str | None:
        for log in ctx.receipt.logs:
            topics = log.topics
            if (
                len(topics) == 4
                and topics[0].lower() == TRANSFER_TOPIC
                and topic_matches_address(topics[2], ctx.recipient)
            ):
                return str(topic_to_int(topics[3]))
        return None


class RawTopicStrategy(TokenIdStrategy):
    """Decode the last topic of any log emitted by the token contract."""

    name = "raw_topic"

    def recover(self, ctx: RecoveryContext) -> str | None:
        contract_address = ctx.contract.address.lower()
        for log in ctx.receipt.logs:
            if log.address.lower() == contract_address and len(log.topics) > 1:
                return str(topic_to_int(log.topics[-1]))
        return None


DEFAULT_STRATEGIES: tuple[TokenIdStrategy, ...] = (
    TokenizedEventStrategy(),
    OwnerEnumerationStrategy(),
    TransferEventStrategy(),
    RawTopicStrategy(),
)


class TokenIdResolver:
    """Run token id strategies in order and return the first answer."""

    def __init__(self, strategies: Sequence[TokenIdStrategy] = DEFAULT_STRATEGIES) -> None:
        self.strategies = list(strategies)

    def resolve(
        self,
        receipt: TransactionReceipt,
        contract: PropertyTokenContract,
        recipient: str,
        property_id: str,
    ) -> str:
        """Determine the token id minted by ``receipt``.

        Raises
        ------
        TokenIdUndeterminableError
            When every strategy comes back empty.
        """
        ctx = RecoveryContext(
            receipt=receipt,
            contract=contract,
            recipient=recipient,
            property_id=property_id,
        )

        for strategy in self.strategies:
            try:
                token_id = strategy.recover(ctx)
            except (ChainError, ValueError) as e:
                logger.warning(
                    "Token id strategy %s failed for tx %s: %s",
                    strategy.name,
                    receipt.tx_hash,
                    e,
                    extra={"tx_hash": receipt.tx_hash, "strategy": strategy.name},
                )
                continue

            if token_id is not None:
                logger.info(
                    "Token id %s for property %s recovered via %s",
                    token_id,
                    property_id,
                    strategy.name,
                    extra={"property_id": property_id, "token_id": token_id, "strategy": strategy.name},
                )
                return token_id

            logger.debug("Token id strategy %s found nothing", strategy.name)

        raise TokenIdUndeterminableError(
            f"Could not determine token id for property {property_id} from tx {receipt.tx_hash}"
        )
