"""Application exception classes."""


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""


class MarketAPIError(Exception):
    """Raised when a market API request fails for any reason."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class MarketLookupError(Exception):
    """Raised when an action targets a market id missing from local state."""


class FormValidationError(Exception):
    """Raised when create-form input cannot be normalized."""


class TokenStoreError(Exception):
    """Raised when the persisted token store cannot be read or written."""


class JournalError(Exception):
    """Raised when writing to journal files fails."""
