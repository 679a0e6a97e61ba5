"""
External service adapters for the settlements app.

Usage:
    from settlements.adapters import StripeAdapter, TransferResult
"""

from settlements.adapters.stripe_adapter import (
    AccountResult,
    LinkResult,
    StripeAdapter,
    TransferResult,
    stringify_metadata,
)

__all__ = [
    "AccountResult",
    "LinkResult",
    "StripeAdapter",
    "TransferResult",
    "stringify_metadata",
]
