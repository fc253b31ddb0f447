"""Custom exception hierarchy for prop-lending."""


class LendingError(Exception):
    """Base exception for all prop-lending errors."""


class InvalidInputError(LendingError, ValueError):
    """Raised when a monetary amount, rate or term is out of range."""


class EquityExceededError(LendingError):
    """Raised when a requested loan amount exceeds the computed maximum."""

    def __init__(self, requested: float, maximum: float) -> None:
        self.requested = requested
        self.maximum = maximum
        super().__init__(
            f"Requested loan amount {requested:.2f} exceeds available maximum {maximum:.2f}"
        )


class EntityNotFoundError(LendingError):
    """Raised when a referenced entity does not exist."""


class ReferentialIntegrityError(EntityNotFoundError):
    """Raised when a loan references a property that does not exist."""


class InvalidEntityStateError(LendingError):
    """Raised when an entity is in an invalid state for the operation."""


class NoPendingPaymentError(InvalidEntityStateError):
    """Raised when a payment is recorded against a fully paid schedule."""


class ChainError(LendingError):
    """Raised when a contract or signer call fails."""


class TokenIdUndeterminableError(ChainError):
    """Raised when no recovery strategy could determine a minted token id."""


class ConfigurationError(LendingError):
    """Raised when configuration is invalid or missing."""


class RepositoryError(LendingError):
    """Raised when a repository backend operation fails."""


class SinkError(LendingError):
    """Raised when a sink operation fails."""
