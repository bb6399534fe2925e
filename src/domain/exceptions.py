"""
Exception types for the mail domain.

Recoverable failures (duplicates, invalid addresses at message level) are
reported through OperationResult; these exceptions cover construction
failures and misconfiguration.
"""


class MailError(Exception):
    """Base class for mail domain errors."""
    pass


class InvalidAddressError(MailError, ValueError):
    """Raised when an email address fails validation."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"{address} is not a valid email address")


class ConfigurationError(MailError):
    """Raised when a message or adapter is missing required configuration."""
    pass
