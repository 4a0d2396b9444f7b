"""Exception types raised by loreweaver.

Every failure aborts the current turn and reaches the caller as one of
these types. Nothing in the package retries.
"""

from __future__ import annotations

from typing import Any, Optional


class LoreweaverError(Exception):
    """Base exception for all loreweaver errors."""

    pass


class BadConfigError(LoreweaverError):
    """Raised when configuration is invalid, e.g. a context window override
    larger than the selected model supports."""

    pass


class BudgetExhaustedError(LoreweaverError):
    """Raised when the token budget left for a completion is not positive."""

    def __init__(self, message: str, available: int = 0):
        super().__init__(message)
        self.available = available


class CompletionFailedError(LoreweaverError):
    """Raised when the completion provider fails or returns no content."""

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class InvalidRoleError(LoreweaverError):
    """Raised when a message carries a role outside the known set."""

    def __init__(self, role: Any):
        super().__init__(f"Invalid message role: {role!r}")
        self.role = role


class StorageFailedError(LoreweaverError):
    """Raised when fetching or saving a fragment fails."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(message)
        self.key = key
