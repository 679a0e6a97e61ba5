"""
Base exception classes shared by the settlement and marketplace packages.

Every error raised on purpose by this project carries a human message, a
machine-readable error code and a details dict that goes straight into
structured log context.

Exception Hierarchy:
    BaseApplicationError (base)
    ├── ConflictError - Another worker or record got there first
    └── ExternalServiceError - Stripe or Mirakl call failed

Usage:
    from core.exceptions import BaseApplicationError

    try:
        processor.process(transfer_id)
    except BaseApplicationError as e:
        logger.error(e.message, extra=e.to_dict())
        raise
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


class BaseApplicationError(Exception):
    """
    Root of the project's exception hierarchy.

    Attributes:
        message: Human-readable description (what ends up in status reasons)
        error_code: Stable code, defaults to the class's default_error_code
        details: Identifiers and values useful when reading the logs
    """

    default_error_code: str = "APPLICATION_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.error_code = error_code or self.default_error_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """
        Log-friendly representation.

        The message is exposed as "error" so the dict can be passed as
        logging ``extra`` without clashing with LogRecord.message.

        Example:
            {
                "error": "Transfer 3f2c... was already created",
                "error_code": "TRANSFER_ALREADY_CREATED",
                "details": {"transfer_id": "3f2c..."}
            }
        """
        result: dict[str, Any] = {
            "error": self.message,
            "error_code": self.error_code,
        }
        if self.details:
            result["details"] = self.details
        return result

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, "
            f"error_code={self.error_code!r}, details={self.details!r})"
        )


class ConflictError(BaseApplicationError):
    """
    The operation lost a race or collides with existing state.

    Used for lock acquisition timeouts around account mapping creation.
    """

    default_error_code: str = "CONFLICT"


class ExternalServiceError(BaseApplicationError):
    """
    A third-party API (Stripe, Mirakl) failed or answered with an error.

    The raw response, when there is one, belongs in ``details``.
    """

    default_error_code: str = "EXTERNAL_SERVICE_ERROR"
