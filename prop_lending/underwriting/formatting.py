"""Presentation helpers. Rounding happens here and nowhere else."""


def format_currency(amount: float, decimals: int = 0, symbol: str = "$") -> str:
    """Format ``amount`` with thousands separators, e.g. ``$1,347``."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount):,.{decimals}f}"


def format_percent(value: float, decimals: int = 1) -> str:
    """Format a percentage value, e.g. ``60.0%``."""
    return f"{value:.{decimals}f}%"
