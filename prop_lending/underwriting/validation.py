"""Input guards shared by the underwriting functions."""

import math

from prop_lending.exceptions import InvalidInputError


def require_positive(name: str, value: float) -> float:
    """Return ``value`` as float, rejecting NaN, infinity and values <= 0."""
    number = _as_finite(name, value)
    if number <= 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")
    return number


def require_non_negative(name: str, value: float) -> float:
    """Return ``value`` as float, rejecting NaN, infinity and negatives."""
    number = _as_finite(name, value)
    if number < 0:
        raise InvalidInputError(f"{name} must not be negative, got {value}")
    return number


def validate_rate(annual_rate_percent: float, max_rate: float = 100.0) -> float:
    """Validate an annual interest rate expressed in percent."""
    rate = _as_finite("interest rate", annual_rate_percent)
    if not 0 <= rate <= max_rate:
        raise InvalidInputError(
            f"interest rate must be between 0 and {max_rate}, got {annual_rate_percent}"
        )
    return rate


def validate_term(term_months: int) -> int:
    """Validate a loan term in whole months."""
    if isinstance(term_months, bool) or not isinstance(term_months, int):
        raise InvalidInputError(f"term must be a whole number of months, got {term_months!r}")
    if term_months <= 0:
        raise InvalidInputError(f"term must be positive, got {term_months}")
    return term_months


def _as_finite(name: str, value: float) -> float:
    if isinstance(value, bool):
        raise InvalidInputError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e
    if not math.isfinite(number):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return number
