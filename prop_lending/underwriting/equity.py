"""Available equity and loan limits for a property."""

from typing import Iterable

from prop_lending.exceptions import EquityExceededError, InvalidInputError
from prop_lending.models import ENCUMBERING_LOAN_STATUSES, Loan
from prop_lending.underwriting.validation import require_non_negative, require_positive


def encumbered_amount(loans: Iterable[Loan]) -> float:
    """Sum the principal of loans that still hold a claim on their property.

    Repaid and defaulted loans release their encumbrance.
    """
    return sum(loan.amount for loan in loans if loan.status in ENCUMBERING_LOAN_STATUSES)


def available_equity(property_value: float, existing_loans: Iterable[Loan]) -> float:
    """Compute the unencumbered portion of a property's value.

    Parameters
    ----------
    property_value : float
        Appraised property value, must be positive.
    existing_loans : Iterable[Loan]
        Loans referencing the property, in any status.

    Returns
    -------
    float
        ``property_value - encumbered``, floored at zero.
    """
    return remaining_equity(property_value, encumbered_amount(existing_loans))


def remaining_equity(property_value: float, encumbered: float) -> float:
    """Equity left once ``encumbered`` is subtracted, never negative."""
    value = require_positive("property value", property_value)
    return max(value - require_non_negative("encumbered amount", encumbered), 0.0)


def max_loan_amount(
    available_equity: float,
    property_value: float,
    ltv_cap: float = 0.8,
) -> float:
    """Largest loan a property can back.

    Two ceilings apply: the equity left after prior loans, and the LTV cap on
    the total property value. The effective maximum is the lower of the two.

    Parameters
    ----------
    available_equity : float
        Result of :func:`available_equity`.
    property_value : float
        Appraised property value.
    ltv_cap : float
        Loan-to-value ceiling as a fraction (0.8 for 80%).

    Returns
    -------
    float
        Maximum loan amount; 0 when no equity remains.
    """
    value = require_positive("property value", property_value)
    if not 0 < ltv_cap <= 1:
        raise InvalidInputError(f"ltv_cap must be in (0, 1], got {ltv_cap}")
    if available_equity <= 0:
        return 0.0
    return min(available_equity, ltv_cap * value)


def suggested_loan_amount(
    max_amount: float,
    property_value: float,
    suggested_ltv: float = 0.7,
) -> float:
    """Amount offered by default on a new loan application."""
    value = require_positive("property value", property_value)
    return max(min(max_amount, suggested_ltv * value), 0.0)


def loan_to_value(amount: float, property_value: float) -> float:
    """Loan-to-value ratio as a percentage."""
    value = require_positive("property value", property_value)
    return require_non_negative("loan amount", amount) / value * 100


def ensure_within_limit(requested: float, maximum: float) -> float:
    """Reject a request above ``maximum``; never clamp it.

    Raises
    ------
    EquityExceededError
        Carrying both the requested amount and the computed maximum.
    """
    amount = require_positive("loan amount", requested)
    if amount > maximum:
        raise EquityExceededError(amount, max(maximum, 0.0))
    return amount
