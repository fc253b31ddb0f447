"""Tests for minted token id recovery."""

import logging
from unittest.mock import MagicMock

import pytest

from prop_lending.chain import (
    TRANSFER_TOPIC,
    LogEntry,
    OwnerEnumerationStrategy,
    PropertyTokenContract,
    RawTopicStrategy,
    TokenIdResolver,
    TransactionReceipt,
    TransferEventStrategy,
)
from prop_lending.chain.token_recovery import topic_matches_address, topic_to_int
from prop_lending.exceptions import ChainError, TokenIdUndeterminableError

OWNER = "0xAbC0000000000000000000000000000000000001"
OTHER = "0xDeF0000000000000000000000000000000000002"
CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"


def address_topic(address: str) -> str:
    return "0x" + address.lower().removeprefix("0x").rjust(64, "0")


def int_topic(value: int) -> str:
    return "0x" + format(value, "064x")


def transfer_log(to: str, token_id: int, address: str = CONTRACT) -> LogEntry:
    return LogEntry(
        address=address,
        topics=[TRANSFER_TOPIC, int_topic(0), address_topic(to), int_topic(token_id)],
    )


@pytest.fixture
def silent_contract() -> MagicMock:
    """Contract that decodes nothing and reports no owned tokens."""
    contract = MagicMock(spec=PropertyTokenContract)
    contract.address = CONTRACT
    contract.parse_log.return_value = None
    contract.balance_of.return_value = 0
    return contract


class TestTopicHelpers:
    """Tests for topic decoding helpers."""

    def test_topic_to_int(self) -> None:
        assert topic_to_int(int_topic(42)) == 42

    def test_topic_matches_address_case_insensitive(self) -> None:
        assert topic_matches_address(address_topic(OWNER), OWNER.upper().replace("0X", "0x"))
        assert not topic_matches_address(address_topic(OWNER), OTHER)


class TestTokenIdResolver:
    """Tests for the ordered strategy chain."""

    def test_tokenized_event_first(self, token_contract, caplog: pytest.LogCaptureFixture) -> None:
        receipt = token_contract.mint(OWNER, "prop-1", 10**18)

        with caplog.at_level(logging.INFO, logger="prop_lending.chain.token_recovery"):
            token_id = TokenIdResolver().resolve(receipt, token_contract, OWNER, "prop-1")

        assert token_id == "1"
        assert "tokenized_event" in caplog.text

    def test_falls_back_to_owner_enumeration(
        self, token_contract, caplog: pytest.LogCaptureFixture
    ) -> None:
        token_contract.emit_tokenized = False
        receipt = token_contract.mint(OWNER, "prop-1", 10**18)

        with caplog.at_level(logging.INFO, logger="prop_lending.chain.token_recovery"):
            token_id = TokenIdResolver().resolve(receipt, token_contract, OWNER, "prop-1")

        assert token_id == "1"
        assert "owner_enumeration" in caplog.text

    def test_chain_error_skips_to_next_strategy(
        self, silent_contract: MagicMock, caplog: pytest.LogCaptureFixture
    ) -> None:
        silent_contract.balance_of.side_effect = ChainError("rpc unavailable")
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[transfer_log(OWNER, 7)])

        with caplog.at_level(logging.INFO, logger="prop_lending.chain.token_recovery"):
            token_id = TokenIdResolver().resolve(receipt, silent_contract, OWNER, "prop-1")

        assert token_id == "7"
        assert "owner_enumeration failed" in caplog.text
        assert "transfer_event" in caplog.text

    def test_raw_topic_last_resort(self, silent_contract: MagicMock) -> None:
        receipt = TransactionReceipt(
            tx_hash="0xabc",
            logs=[LogEntry(address=CONTRACT.lower(), topics=["0x" + "11" * 32, int_topic(9)])],
        )

        assert TokenIdResolver().resolve(receipt, silent_contract, OWNER, "prop-1") == "9"

    def test_all_strategies_fail(self, silent_contract: MagicMock) -> None:
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[])

        with pytest.raises(TokenIdUndeterminableError):
            TokenIdResolver().resolve(receipt, silent_contract, OWNER, "prop-1")

    def test_custom_strategy_order(self, silent_contract: MagicMock) -> None:
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[transfer_log(OWNER, 3)])
        resolver = TokenIdResolver([RawTopicStrategy()])

        assert resolver.resolve(receipt, silent_contract, OWNER, "prop-1") == "3"


class TestOwnerEnumerationStrategy:
    """Tests for OwnerEnumerationStrategy."""

    def test_finds_older_token(self, token_contract) -> None:
        token_contract.emit_tokenized = False
        token_contract.mint(OWNER, "prop-1", 1)
        token_contract.mint(OWNER, "prop-2", 1)
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[])

        resolver = TokenIdResolver([OwnerEnumerationStrategy()])

        assert resolver.resolve(receipt, token_contract, OWNER, "prop-1") == "1"
        assert resolver.resolve(receipt, token_contract, OWNER, "prop-2") == "2"

    def test_unknown_property(self, token_contract) -> None:
        token_contract.mint(OWNER, "prop-1", 1)
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[])

        with pytest.raises(TokenIdUndeterminableError):
            TokenIdResolver([OwnerEnumerationStrategy()]).resolve(
                receipt, token_contract, OWNER, "prop-9"
            )


class TestTransferEventStrategy:
    """Tests for TransferEventStrategy."""

    def test_ignores_other_recipient(self, silent_contract: MagicMock) -> None:
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[transfer_log(OTHER, 5)])

        with pytest.raises(TokenIdUndeterminableError):
            TokenIdResolver([TransferEventStrategy()]).resolve(
                receipt, silent_contract, OWNER, "prop-1"
            )

    def test_ignores_non_transfer_logs(self, silent_contract: MagicMock) -> None:
        log = LogEntry(
            address=CONTRACT,
            topics=["0x" + "22" * 32, int_topic(0), address_topic(OWNER), int_topic(5)],
        )
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[log])

        with pytest.raises(TokenIdUndeterminableError):
            TokenIdResolver([TransferEventStrategy()]).resolve(
                receipt, silent_contract, OWNER, "prop-1"
            )


class TestRawTopicStrategy:
    """Tests for RawTopicStrategy."""

    def test_ignores_other_contracts(self, silent_contract: MagicMock) -> None:
        receipt = TransactionReceipt(tx_hash="0xabc", logs=[transfer_log(OWNER, 5, address=OTHER)])

        with pytest.raises(TokenIdUndeterminableError):
            TokenIdResolver([RawTopicStrategy()]).resolve(receipt, silent_contract, OWNER, "prop-1")
