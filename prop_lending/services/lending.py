"""Property and loan lifecycle orchestration."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from prop_lending.chain import (
    LOAN_CREATED_EVENT,
    LoanContract,
    OnChainLoan,
    PropertyTokenContract,
    TokenIdResolver,
    TransactionSigner,
    find_event,
    rate_to_basis_points,
    to_wei,
)
from prop_lending.config import ChainConfig, LendingPolicyConfig
from prop_lending.exceptions import (
    ChainError,
    InvalidEntityStateError,
    InvalidInputError,
    NoPendingPaymentError,
)
from prop_lending.logging import get_logger
from prop_lending.models import (
    Event,
    Loan,
    LoanStatus,
    Property,
    PropertyStatus,
    ScheduledPayment,
)
from prop_lending.sinks import EventSink
from prop_lending.store import LoanRepository, PropertyRepository
from prop_lending.underwriting import (
    RepaymentSummary,
    apply_payment,
    ensure_within_limit,
    generate_schedule,
    loan_to_value,
    max_loan_amount,
    monthly_payment,
    next_payment,
    remaining_equity,
    suggested_loan_amount,
    summarize,
)
from prop_lending.underwriting.validation import (
    require_non_negative,
    require_positive,
    validate_rate,
    validate_term,
)

logger = get_logger(__name__)

PROPERTY_TRANSITIONS: dict[PropertyStatus, frozenset[PropertyStatus]] = {
    PropertyStatus.PENDING: frozenset({PropertyStatus.APPROVED, PropertyStatus.REJECTED}),
    PropertyStatus.APPROVED: frozenset({PropertyStatus.TOKENIZED}),
}

LOAN_TRANSITIONS: dict[LoanStatus, frozenset[LoanStatus]] = {
    LoanStatus.PENDING: frozenset({LoanStatus.APPROVED, LoanStatus.DEFAULTED}),
    LoanStatus.APPROVED: frozenset({LoanStatus.ACTIVE, LoanStatus.DEFAULTED}),
    LoanStatus.ACTIVE: frozenset({LoanStatus.REPAID, LoanStatus.DEFAULTED}),
}


@dataclass
class LoanQuote:
    """Projected figures shown before a loan request is submitted."""

    property_id: str
    property_value: float
    encumbered: float
    available_equity: float
    max_loan_amount: float
    suggested_amount: float
    requested_amount: float | None = None
    monthly_payment: float | None = None
    loan_to_value: float | None = None

    @property
    def can_apply(self) -> bool:
        """A request is only possible while some equity remains."""
        return self.max_loan_amount > 0

    @property
    def within_limit(self) -> bool:
        """Whether the requested amount would pass the equity check."""
        if self.requested_amount is None:
            return self.can_apply
        return 0 < self.requested_amount <= self.max_loan_amount


class LendingService:
    """Drive properties and loans through their lifecycles.

    Parameters
    ----------
    properties : PropertyRepository
        Property storage.
    loans : LoanRepository
        Loan storage; its encumbrance aggregate is the only source of
        outstanding balances.
    policy : LendingPolicyConfig | None
        LTV limits and rate ceiling.
    chain : ChainConfig | None
        Contract addresses and token decimals.
    sink : EventSink | None
        Receives an :class:`Event` for every state change.
    """

    SOURCE = "prop-lending"

    def __init__(
        self,
        properties: PropertyRepository,
        loans: LoanRepository,
        policy: LendingPolicyConfig | None = None,
        chain: ChainConfig | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self.properties = properties
        self.loans = loans
        self.policy = policy or LendingPolicyConfig()
        self.chain = chain or ChainConfig()
        self.sink = sink

    # Properties

    def register_property(
        self,
        owner: str,
        title: str,
        value: float,
        description: str = "",
        location: str = "",
        image_url: str = "",
    ) -> Property:
        """Register a property for review; it starts as ``pending``."""
        prop = Property(
            property_id=uuid.uuid4().hex,
            owner=owner,
            title=title,
            value=require_positive("property value", value),
            status=PropertyStatus.PENDING,
            description=description,
            location=location,
            image_url=image_url,
        )
        prop = self.properties.add(prop)
        logger.info(
            "Registered property %s for %s",
            prop.property_id,
            owner,
            extra={"property_id": prop.property_id},
        )
        self._publish(
            "properties",
            "property.registered",
            prop.property_id,
            {"owner": owner, "value": prop.value},
        )
        return prop

    def review_property(self, property_id: str, approve: bool) -> Property:
        """Approve or reject a pending property."""
        target = PropertyStatus.APPROVED if approve else PropertyStatus.REJECTED
        prop = self.properties.require(property_id)
        self._check_property_transition(prop, target)

        prop = self.properties.update_status(property_id, target)
        logger.info("Property %s %s", property_id, target.value, extra={"property_id": property_id})
        self._publish("properties", f"property.{target.value}", property_id, {})
        return prop

    def tokenize_property(
        self,
        property_id: str,
        contract: PropertyTokenContract,
        resolver: TokenIdResolver | None = None,
    ) -> Property:
        """Mint the ownership token for an approved property.

        Raises
        ------
        ChainError
            If the mint transaction reverted.
        TokenIdUndeterminableError
            If the minted token id cannot be recovered; the property is left
            ``approved`` for manual reconciliation.
        """
        prop = self.properties.require(property_id)
        self._check_property_transition(prop, PropertyStatus.TOKENIZED)

        receipt = contract.mint(
            prop.owner,
            prop.property_id,
            to_wei(prop.value, self.chain.token_decimals),
        )
        if receipt.status != 1:
            raise ChainError(f"Mint transaction {receipt.tx_hash} reverted")

        token_id = (resolver or TokenIdResolver()).resolve(
            receipt, contract, prop.owner, prop.property_id
        )
        prop = self.properties.update_status(property_id, PropertyStatus.TOKENIZED, token_id=token_id)
        logger.info(
            "Property %s tokenized as token %s",
            property_id,
            token_id,
            extra={"property_id": property_id, "token_id": token_id, "tx_hash": receipt.tx_hash},
        )
        self._publish(
            "properties",
            "property.tokenized",
            property_id,
            {"token_id": token_id, "tx_hash": receipt.tx_hash},
        )
        return prop

    def properties_for_owner(self, owner: str) -> list[Property]:
        """Properties registered by ``owner``."""
        return self.properties.list_by_owner(owner)

    # Underwriting

    def available_equity(self, property_id: str) -> float:
        """Unencumbered value of a property, from the loan repository's totals."""
        prop = self.properties.require(property_id)
        return remaining_equity(prop.value, self.loans.encumbered_amount(property_id))

    def quote(
        self,
        property_id: str,
        amount: float | None = None,
        interest_rate: float | None = None,
        term_months: int | None = None,
    ) -> LoanQuote:
        """Compute the figures a borrower sees before submitting a request."""
        prop = self.properties.require(property_id)
        encumbered = self.loans.encumbered_amount(property_id)
        equity = remaining_equity(prop.value, encumbered)
        maximum = max_loan_amount(equity, prop.value, self.policy.ltv_cap)

        quote = LoanQuote(
            property_id=property_id,
            property_value=prop.value,
            encumbered=encumbered,
            available_equity=equity,
            max_loan_amount=maximum,
            suggested_amount=suggested_loan_amount(maximum, prop.value, self.policy.suggested_ltv),
        )
        if (interest_rate is None) != (term_months is None):
            raise InvalidInputError("interest_rate and term_months must be given together")
        if amount is not None:
            quote.requested_amount = require_positive("loan amount", amount)
            quote.loan_to_value = loan_to_value(amount, prop.value)
            if interest_rate is not None and term_months is not None:
                validate_rate(interest_rate, self.policy.max_interest_rate)
                quote.monthly_payment = monthly_payment(amount, interest_rate, term_months)
        return quote

    # Loans

    def request_loan(
        self,
        borrower: str,
        property_id: str,
        amount: float,
        interest_rate: float,
        term_months: int,
        collateral_amount: float = 0.0,
    ) -> Loan:
        """Create a pending loan against a tokenized property.

        Raises
        ------
        InvalidEntityStateError
            If the property is not tokenized.
        InvalidInputError
            If amount, rate, term or collateral is out of range.
        EquityExceededError
            If ``amount`` is above the computed maximum. The request is
            rejected, never reduced.
        """
        prop = self.properties.require(property_id)
        if not prop.is_loan_eligible:
            raise InvalidEntityStateError(
                f"Property {property_id} is {prop.status.value}, only tokenized properties can back a loan"
            )

        require_positive("loan amount", amount)
        validate_rate(interest_rate, self.policy.max_interest_rate)
        validate_term(term_months)
        require_non_negative("collateral amount", collateral_amount)

        equity = remaining_equity(prop.value, self.loans.encumbered_amount(property_id))
        maximum = max_loan_amount(equity, prop.value, self.policy.ltv_cap)
        ensure_within_limit(amount, maximum)

        loan = Loan(
            loan_id=uuid.uuid4().hex,
            borrower=borrower,
            property_id=property_id,
            amount=float(amount),
            interest_rate=float(interest_rate),
            term_months=term_months,
            collateral_amount=float(collateral_amount),
            loan_to_value=loan_to_value(amount, prop.value),
            status=LoanStatus.PENDING,
            token_id=prop.token_id,
        )
        loan = self.loans.add(loan)
        logger.info(
            "Loan %s requested by %s: %.2f against property %s (max %.2f)",
            loan.loan_id,
            borrower,
            loan.amount,
            property_id,
            maximum,
            extra={"loan_id": loan.loan_id, "property_id": property_id},
        )
        self._publish(
            "loans",
            "loan.requested",
            loan.loan_id,
            {"property_id": property_id, "amount": loan.amount, "loan_to_value": loan.loan_to_value},
        )
        return loan

    def approve_loan(self, loan_id: str) -> Loan:
        """Move a pending loan to ``approved``."""
        return self._transition(loan_id, LoanStatus.APPROVED)

    def activate_loan(
        self,
        loan_id: str,
        start_date: date | None = None,
        contract: LoanContract | None = None,
    ) -> Loan:
        """Activate an approved loan and generate its repayment schedule.

        Status, start date, schedule and on-chain loan id are stored in a
        single repository write; if anything fails first the loan stays
        ``approved`` and activation can be retried.

        Parameters
        ----------
        loan_id : str
            Loan to activate.
        start_date : date | None
            Loan start; defaults to today.
        contract : LoanContract | None
            When given, the loan is opened on chain first, with the collateral
            sent as the transaction value, and the id from its ``LoanCreated``
            event is recorded.

        Raises
        ------
        ChainError
            If the contract call reverted or emitted no ``LoanCreated`` event.
        """
        loan = self.loans.require(loan_id)
        self._check_loan_transition(loan, LoanStatus.ACTIVE)

        start = start_date or date.today()
        schedule = generate_schedule(loan.amount, loan.interest_rate, loan.term_months, start)
        chain_loan_id = self._open_on_chain(loan, contract) if contract is not None else None

        loan = self.loans.activate(loan_id, start, schedule, chain_loan_id=chain_loan_id)
        logger.info(
            "Loan %s active from %s: %d payments of %.2f",
            loan_id,
            start.isoformat(),
            len(schedule),
            schedule[0].amount,
            extra={"loan_id": loan_id},
        )
        self._publish(
            "loans",
            "loan.active",
            loan_id,
            {
                "start_date": start,
                "payments": len(schedule),
                "payment_amount": schedule[0].amount,
                "chain_loan_id": loan.chain_loan_id,
            },
        )
        return loan

    def mark_repaid(self, loan_id: str) -> Loan:
        """Close an active loan, releasing its encumbrance."""
        return self._transition(loan_id, LoanStatus.REPAID)

    def mark_defaulted(self, loan_id: str) -> Loan:
        """Default a loan, releasing its encumbrance."""
        return self._transition(loan_id, LoanStatus.DEFAULTED)

    def record_payment(
        self,
        loan_id: str,
        signer: TransactionSigner,
        destination: str | None = None,
        paid_on: date | None = None,
    ) -> Loan:
        """Pay the next pending installment of an active loan.

        The scheduled amount is sent through ``signer``; the schedule is only
        updated once the transfer is confirmed.
        """

        def pay(due: ScheduledPayment) -> tuple[float, str]:
            confirmation = signer.send_payment(
                destination or self.chain.loan_contract_address, due.amount
            )
            return confirmation.amount, confirmation.tx_hash

        return self._settle_next_payment(loan_id, pay, paid_on)

    def repay_on_chain(
        self,
        loan_id: str,
        contract: LoanContract,
        paid_on: date | None = None,
    ) -> Loan:
        """Pay the next pending installment through the loan contract.

        Raises
        ------
        InvalidEntityStateError
            If the loan was activated without an on-chain loan id.
        ChainError
            If the repayment transaction reverted.
        """
        loan = self.loans.require(loan_id)
        if loan.chain_loan_id is None:
            raise InvalidEntityStateError(f"Loan {loan_id} has no on-chain loan id")
        chain_loan_id = loan.chain_loan_id

        def pay(due: ScheduledPayment) -> tuple[float, str]:
            receipt = contract.repay(chain_loan_id, to_wei(due.amount, self.chain.token_decimals))
            if receipt.status != 1:
                raise ChainError(f"Repayment transaction {receipt.tx_hash} reverted")
            return due.amount, receipt.tx_hash

        return self._settle_next_payment(loan_id, pay, paid_on)

    def loan_summary(self, loan_id: str) -> RepaymentSummary:
        """Paid amount, progress and next payment for a loan."""
        return summarize(self.loans.require(loan_id))

    def loans_for_borrower(self, borrower: str) -> list[Loan]:
        """Loans taken by ``borrower``."""
        return self.loans.list_by_borrower(borrower)

    def chain_loans_for_borrower(self, borrower: str, contract: LoanContract) -> list[OnChainLoan]:
        """Loans the loan contract records for ``borrower``."""
        loans = contract.loans_by_borrower(borrower)
        logger.debug("Loan contract reports %d loans for %s", len(loans), borrower)
        return loans

    # Helpers

    def _open_on_chain(self, loan: Loan, contract: LoanContract) -> str:
        if loan.token_id is None:
            raise InvalidEntityStateError(f"Loan {loan.loan_id} has no property token")

        decimals = self.chain.token_decimals
        receipt = contract.create_loan(
            int(loan.token_id),
            to_wei(loan.amount, decimals),
            loan.term_months,
            rate_to_basis_points(loan.interest_rate),
            to_wei(loan.collateral_amount, decimals),
        )
        if receipt.status != 1:
            raise ChainError(f"Loan creation transaction {receipt.tx_hash} reverted")

        event = find_event(receipt, contract, LOAN_CREATED_EVENT)
        if event is None or event.args.get("loanId") is None:
            raise ChainError(f"Loan creation failed: no {LOAN_CREATED_EVENT} event in {receipt.tx_hash}")
        return str(event.args["loanId"])

    def _settle_next_payment(
        self,
        loan_id: str,
        pay: Callable[[ScheduledPayment], tuple[float, str]],
        paid_on: date | None,
    ) -> Loan:
        loan = self.loans.require(loan_id)
        if loan.status != LoanStatus.ACTIVE:
            raise InvalidEntityStateError(f"Loan {loan_id} is {loan.status.value}, not active")

        due = next_payment(loan.repayment_schedule)
        if due is None:
            raise NoPendingPaymentError(f"Loan {loan_id} has no pending payment")

        amount, tx_hash = pay(due)
        schedule = apply_payment(loan.repayment_schedule, amount, paid_on)
        loan = self.loans.update_schedule(loan_id, schedule)

        logger.info(
            "Payment of %.2f recorded for loan %s (tx %s)",
            amount,
            loan_id,
            tx_hash,
            extra={"loan_id": loan_id, "tx_hash": tx_hash},
        )
        self._publish(
            "loans",
            "loan.payment_recorded",
            loan_id,
            {"amount": amount, "due_date": due.due_date, "tx_hash": tx_hash},
        )
        return loan

    def _transition(self, loan_id: str, target: LoanStatus) -> Loan:
        loan = self.loans.require(loan_id)
        self._check_loan_transition(loan, target)
        loan = self.loans.update_status(loan_id, target)
        logger.info("Loan %s %s", loan_id, target.value, extra={"loan_id": loan_id})
        self._publish("loans", f"loan.{target.value}", loan_id, {"property_id": loan.property_id})
        return loan

    @staticmethod
    def _check_loan_transition(loan: Loan, target: LoanStatus) -> None:
        if target not in LOAN_TRANSITIONS.get(loan.status, frozenset()):
            raise InvalidEntityStateError(
                f"Loan {loan.loan_id} cannot move from {loan.status.value} to {target.value}"
            )

    @staticmethod
    def _check_property_transition(prop: Property, target: PropertyStatus) -> None:
        if target not in PROPERTY_TRANSITIONS.get(prop.status, frozenset()):
            raise InvalidEntityStateError(
                f"Property {prop.property_id} cannot move from {prop.status.value} to {target.value}"
            )

    def _publish(self, topic: str, event_type: str, subject: str, data: dict[str, Any]) -> None:
        if self.sink is None:
            return
        event = Event(
            event_id=uuid.uuid4().hex,
            event_type=event_type,
            event_time=datetime.now(timezone.utc),
            source=self.SOURCE,
            subject=subject,
            data=data,
        )
        self.sink.send(topic, event)
