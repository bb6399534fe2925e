"""
Result types for mail composition.

These make success/failure handling explicit for operations that can be
refused without it being a programming error (duplicate entries, invalid
addresses supplied at message level).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class FailureKind(Enum):
    """Why an operation was refused."""
    INVALID_ADDRESS = "invalid_address"
    DUPLICATE_ENTRY = "duplicate_entry"


@dataclass(frozen=True)
class OperationResult:
    """
    Result of a composition operation.

    Truthy exactly when the operation succeeded, so callers can write
    ``if not recipients.add(r): ...``.

    Attributes:
        success: Whether the operation succeeded
        value: The object that was stored (if succeeded)
        failure: Failure category (if refused)
        error_message: Human-readable reason (if refused)
    """
    success: bool
    value: Any = None
    failure: Optional[FailureKind] = None
    error_message: Optional[str] = None

    @classmethod
    def ok(cls, value: Any = None) -> "OperationResult":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, failure: FailureKind, error_message: str) -> "OperationResult":
        return cls(success=False, failure=failure, error_message=error_message)

    @property
    def is_duplicate(self) -> bool:
        return self.failure is FailureKind.DUPLICATE_ENTRY

    @property
    def is_invalid_address(self) -> bool:
        return self.failure is FailureKind.INVALID_ADDRESS

    def __bool__(self) -> bool:
        return self.success

    def __repr__(self) -> str:
        """Human-readable representation for logging."""
        if self.success:
            return f"OperationResult(success=True, value={self.value!r})"
        else:
            return (
                f"OperationResult(success=False, failure={self.failure.value}, "
                f"error={self.error_message})"
            )
