"""Application services."""

from prop_lending.services.lending import LendingService, LoanQuote

__all__ = ["LendingService", "LoanQuote"]
