"""
Mirakl API exceptions.

Usage:
    from marketplace.exceptions import MarketplaceAPIError

    try:
        client.update_shop_custom_field(shop_id, code, url)
    except MarketplaceAPIError as e:
        logger.error("Mirakl call failed", extra={"status_code": e.status_code})
        raise
"""

from __future__ import annotations

from typing import Any

from core.exceptions import ExternalServiceError


class MarketplaceAPIError(ExternalServiceError):
    """
    Raised when a Mirakl API call fails.

    Attributes:
        status_code: HTTP status returned by Mirakl, None for transport
            failures (timeout, connection refused)
    """

    default_error_code: str = "MARKETPLACE_API_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code
