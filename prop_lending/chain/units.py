"""Unit conversions between display amounts and on-chain integers."""

from decimal import Decimal, ROUND_FLOOR

from prop_lending.exceptions import InvalidInputError

DEFAULT_DECIMALS = 18


def to_wei(amount: float, decimals: int = DEFAULT_DECIMALS) -> int:
    """Scale ``amount`` to the token's smallest unit.

    The decimal string of the float is used so ``0.1`` becomes exactly
    ``10**17`` wei.
    """
    value = Decimal(str(amount))
    if not value.is_finite() or value < 0:
        raise InvalidInputError(f"amount must be a non-negative number, got {amount}")
    return int((value * (Decimal(10) ** decimals)).to_integral_value(rounding=ROUND_FLOOR))


def from_wei(value: int, decimals: int = DEFAULT_DECIMALS) -> float:
    """Convert an on-chain integer back to a display amount."""
    return float(Decimal(value) / (Decimal(10) ** decimals))


def rate_to_basis_points(annual_rate_percent: float) -> int:
    """Encode a percentage rate for the loan contract (3.5% becomes 350)."""
    return int((Decimal(str(annual_rate_percent)) * 100).to_integral_value(rounding=ROUND_FLOOR))


def basis_points_to_rate(basis_points: int) -> float:
    """Decode a contract rate back into percent."""
    return basis_points / 100
