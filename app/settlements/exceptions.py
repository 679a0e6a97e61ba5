"""
Settlement-specific exceptions.

This module provides the exception hierarchy for transfer processing and
seller onboarding, covering domain invariants, Stripe errors and
concurrency control.

Exception Hierarchy:
    SettlementError (base for settlement domain)
    ├── TransferInvariantError - Fatal precondition violations (never recovered)
    └── SettlementProcessingError - Payment platform failures
        └── StripeError - Base for all Stripe errors
            ├── StripeCardDeclinedError - Card declined (permanent)
            ├── StripeInsufficientFundsError - Insufficient funds (permanent)
            ├── StripeInvalidAccountError - Invalid Stripe account (permanent)
            ├── StripeInvalidRequestError - Invalid request params (permanent)
            ├── StripeRateLimitError - Rate limited (transient)
            └── StripeAPIUnavailableError - API unavailable (transient)

    LockAcquisitionError - Distributed lock timeout (inherits ConflictError)

Usage:
    from settlements.exceptions import StripeError, TransferInvariantError

    try:
        result = strategy.execute(transfer, metadata)
    except StripeError as e:
        transfer.mark_failed(e.message)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Settlement Domain Exceptions
# =============================================================================


class SettlementError(BaseApplicationError):
    """
    Base exception for all settlement operations.

    All settlement-specific exceptions inherit from this class,
    which itself inherits from BaseApplicationError for
    consistent error payloads.
    """

    default_error_code: str = "SETTLEMENT_ERROR"


class TransferInvariantError(SettlementError):
    """
    Raised when a transfer violates a processing precondition.

    These are internal invariant violations, not recoverable payment
    failures. They are never caught by the transfer processor and
    propagate to the message dispatcher.

    Use for:
    - Transfer record does not exist
    - Transfer was already created on Stripe
    - Amount or currency missing
    - Missing account mapping or Stripe account id
    - Product order missing from the Mirakl response

    Example:
        if transfer.status == TransferStatus.CREATED:
            raise TransferInvariantError(
                f"Transfer {transfer.id} was already created",
                error_code="TRANSFER_ALREADY_CREATED",
                details={"transfer_id": str(transfer.id)},
            )
    """

    default_error_code: str = "TRANSFER_INVARIANT_VIOLATED"


class SettlementProcessingError(SettlementError):
    """
    Raised when the payment platform rejects or fails an operation.
    """

    default_error_code: str = "SETTLEMENT_PROCESSING_ERROR"


# =============================================================================
# Stripe-Specific Exceptions
# =============================================================================


class StripeError(SettlementProcessingError):
    """
    A Stripe call was rejected or could not be made.

    Attributes:
        stripe_code: Code reported by Stripe (balance_insufficient, ...)
        decline_code: Decline reason for charges on a connected account
        is_retryable: True when the same call may succeed later

    The human message is available as ``message``; it is what ends up
    in a failed transfer's status reason.
    """

    default_error_code: str = "STRIPE_ERROR"
    is_retryable: bool = False

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        decline_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        if decline_code:
            details["decline_code"] = decline_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code
        self.decline_code = decline_code


# -----------------------------------------------------------------------------
# Permanent Errors (do not retry)
# -----------------------------------------------------------------------------


class StripeCardDeclinedError(StripeError):
    """Stripe declined the debit of a connected account (seller to platform)."""

    default_error_code: str = "CARD_DECLINED"
    is_retryable: bool = False


class StripeInsufficientFundsError(StripeError):
    """
    Insufficient funds on the payment source.

    For seller-to-platform transfers this usually means the connected
    account balance cannot cover the debit.
    """

    default_error_code: str = "INSUFFICIENT_FUNDS"
    is_retryable: bool = False


class StripeInvalidAccountError(StripeError):
    """
    The seller's connected account is unknown, restricted or not
    onboarded yet. The seller has to finish onboarding before the
    transfer can be reprocessed.
    """

    default_error_code: str = "INVALID_STRIPE_ACCOUNT"
    is_retryable: bool = False


class StripeInvalidRequestError(StripeError):
    """
    Stripe refused the parameters; resending them as is will fail again.

    Typical causes:
    - Unknown transfer id for a reversal
    - Reversal amount larger than the remaining transfer amount
    - Invalid amount or currency
    """

    default_error_code: str = "INVALID_STRIPE_REQUEST"
    is_retryable: bool = False


# -----------------------------------------------------------------------------
# Transient Errors (safe to retry with backoff)
# -----------------------------------------------------------------------------


class StripeRateLimitError(StripeError):
    """
    Rate limited by Stripe API.
    """

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """
    Stripe could not be reached or answered with a 5xx.
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


# =============================================================================
# Concurrency Control Exceptions
# =============================================================================


class LockAcquisitionError(ConflictError):
    """
    Another worker holds a DistributedLock past our wait timeout.

    Example:
        with DistributedLock(f"account_mapping:shop:{shop.id}", timeout=10):
            create_account_mapping(shop)
        # raises LockAcquisitionError if another worker holds it for 10s
    """

    default_error_code: str = "LOCK_ACQUISITION_FAILED"


# =============================================================================
# Exports
# =============================================================================

__all__ = [
    # Settlement domain
    "SettlementError",
    "TransferInvariantError",
    "SettlementProcessingError",
    # Stripe-specific
    "StripeError",
    "StripeCardDeclinedError",
    "StripeInsufficientFundsError",
    "StripeInvalidAccountError",
    "StripeInvalidRequestError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
    # Concurrency control
    "LockAcquisitionError",
]
