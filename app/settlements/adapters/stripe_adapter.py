"""
Stripe API adapter for settlement and onboarding operations.

All Stripe calls made by the settlement services go through StripeAdapter
so they share timeouts, error translation and logging.

Features:
- Configurable timeout on all API calls
- Stripe SDK errors translated to the settlements.exceptions hierarchy
- Structured logging with timing metrics

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)

Usage:
    from settlements.adapters import StripeAdapter

    result = StripeAdapter.create_transfer(
        currency="eur",
        amount=1000,
        destination_account="acct_123",
        idempotency_key="ORDER-42-A",
        metadata={"marketplaceId": "ORDER-42-A", "miraklShopId": 2001},
    )
    print(result.id)  # tr_xxx
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings

from settlements.exceptions import (
    StripeAPIUnavailableError,
    StripeCardDeclinedError,
    StripeError,
    StripeInsufficientFundsError,
    StripeInvalidAccountError,
    StripeInvalidRequestError,
    StripeRateLimitError,
)

# =============================================================================
# Data Types
# =============================================================================


@dataclass
class TransferResult:
    """
    Result of a money movement on Stripe.

    The id prefix depends on the operation: tr_ for transfers, py_ for
    connected account debits, trr_ for reversals.
    """

    id: str
    amount: int
    currency: str
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class AccountResult:
    """
    Result from Stripe Account operations.

    Attributes:
        id: Account ID (acct_xxx)
        payouts_enabled: Whether Stripe lets the account receive payouts
        charges_enabled: Whether Stripe lets the account accept charges
        disabled_reason: requirements.disabled_reason, if any
        metadata: Attached metadata
        raw_response: Full Stripe response dict
    """

    id: str
    payouts_enabled: bool = False
    charges_enabled: bool = False
    disabled_reason: str | None = None
    metadata: dict[str, str] = field(default_factory=dict)
    raw_response: dict[str, Any] = field(default_factory=dict)


@dataclass
class LinkResult:
    """Login link or account onboarding link."""

    url: str


def stringify_metadata(metadata: dict[str, Any] | None) -> dict[str, str]:
    """
    Stripe metadata values are strings. None values are dropped.
    """
    return {
        str(key): str(value)
        for key, value in (metadata or {}).items()
        if value is not None
    }


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are classmethods; no instance state is kept, so the class
    itself is passed around as the payment client and tests can replace
    it with a Mock.
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _configure_stripe() -> None:
        """Configure Stripe client with API key and timeout."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @classmethod
    def _call(
        cls,
        log_context: dict[str, Any],
        operation: Callable[[], Any],
        level: int = logging.INFO,
    ) -> Any:
        """
        Run one Stripe SDK call with timing logs and error translation.
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        start_time = time.time()
        logger.log(level, "Starting Stripe operation", extra=log_context)

        try:
            response = operation()
        except stripe.StripeError as e:
            duration_ms = (time.time() - start_time) * 1000
            cls._handle_stripe_error(e, log_context, duration_ms)
            raise

        duration_ms = (time.time() - start_time) * 1000
        logger.log(
            level,
            "Stripe operation completed",
            extra={
                **log_context,
                "stripe_object_id": getattr(response, "id", None),
                "duration_ms": duration_ms,
            },
        )
        return response

    # =========================================================================
    # Transfers
    # =========================================================================

    @classmethod
    def create_transfer(
        cls,
        currency: str,
        amount: int,
        destination_account: str,
        idempotency_key: str | None,
        metadata: dict[str, Any] | None = None,
    ) -> TransferResult:
        """
        Move funds from the platform balance to a connected account.

        Args:
            currency: ISO currency code
            amount: Amount in minor units
            destination_account: Stripe Connect account ID (acct_xxx)
            idempotency_key: Stripe deduplicates retries carrying the same key
            metadata: Metadata attached to the transfer

        Returns:
            TransferResult with the tr_xxx id

        Raises:
            StripeInvalidAccountError: Invalid destination account
            StripeError: Any other Stripe failure
        """
        log_context = {
            "operation": "create_transfer",
            "amount": amount,
            "currency": currency,
            "destination_account": destination_account,
            "idempotency_key": idempotency_key,
        }

        params: dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "destination": destination_account,
            "metadata": stringify_metadata(metadata),
        }
        if idempotency_key:
            params["idempotency_key"] = idempotency_key

        transfer = cls._call(log_context, lambda: stripe.Transfer.create(**params))
        return cls._to_transfer_result(transfer)

    @classmethod
    def create_transfer_from_connected_account(
        cls,
        currency: str,
        amount: int,
        source_account: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransferResult:
        """
        Debit a connected account in favour of the platform.

        Stripe models this as a charge whose source is the connected
        account. No idempotency key is sent.

        Returns:
            TransferResult with the py_xxx id of the account debit
        """
        log_context = {
            "operation": "create_transfer_from_connected_account",
            "amount": amount,
            "currency": currency,
            "source_account": source_account,
        }

        charge = cls._call(
            log_context,
            lambda: stripe.Charge.create(
                amount=amount,
                currency=currency,
                source=source_account,
                metadata=stringify_metadata(metadata),
            ),
        )
        return cls._to_transfer_result(charge)

    @classmethod
    def reverse_transfer(
        cls,
        amount: int,
        transfer_id: str,
        metadata: dict[str, Any] | None = None,
    ) -> TransferResult:
        """
        Reverse (part of) a transfer previously created on Stripe.

        Args:
            amount: Amount to reverse in minor units
            transfer_id: Original transfer id (tr_xxx)
            metadata: Metadata attached to the reversal

        Returns:
            TransferResult with the trr_xxx id

        Raises:
            StripeInvalidRequestError: Unknown transfer or amount too large
        """
        log_context = {
            "operation": "reverse_transfer",
            "amount": amount,
            "transfer_id": transfer_id,
        }

        reversal = cls._call(
            log_context,
            lambda: stripe.Transfer.create_reversal(
                transfer_id,
                amount=amount,
                metadata=stringify_metadata(metadata),
            ),
        )
        return cls._to_transfer_result(reversal)

    # =========================================================================
    # Connected Accounts
    # =========================================================================

    @classmethod
    def create_account(
        cls,
        shop_id: int,
        details: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AccountResult:
        """
        Create an Express connected account for a marketplace shop.

        Args:
            shop_id: Mirakl shop id (logged only)
            details: Prefill parameters (business_type, business_profile...)
            metadata: Account metadata

        Returns:
            AccountResult for the new account
        """
        log_context = {
            "operation": "create_account",
            "marketplace_shop_id": shop_id,
        }

        params: dict[str, Any] = {
            **(details or {}),
            "type": "express",
            "metadata": stringify_metadata(metadata),
        }

        account = cls._call(log_context, lambda: stripe.Account.create(**params))
        return cls._to_account_result(account)

    @classmethod
    def retrieve_account(cls, account_id: str) -> AccountResult:
        """Fetch a connected account."""
        log_context = {
            "operation": "retrieve_account",
            "account_id": account_id,
        }

        account = cls._call(
            log_context,
            lambda: stripe.Account.retrieve(account_id),
            level=logging.DEBUG,
        )
        return cls._to_account_result(account)

    @classmethod
    def update_account(
        cls,
        account_id: str,
        patch: dict[str, Any] | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AccountResult:
        """
        Update a connected account.

        Args:
            account_id: Stripe account id
            patch: Account parameters to change (may be empty)
            metadata: Metadata keys to set on the account
        """
        log_context = {
            "operation": "update_account",
            "account_id": account_id,
            "fields": sorted((patch or {}).keys()),
        }

        params: dict[str, Any] = dict(patch or {})
        if metadata:
            params["metadata"] = stringify_metadata(metadata)

        account = cls._call(
            log_context, lambda: stripe.Account.modify(account_id, **params)
        )
        return cls._to_account_result(account)

    @classmethod
    def create_login_link(cls, account_id: str) -> LinkResult:
        """Create a single-use Express dashboard login link."""
        log_context = {
            "operation": "create_login_link",
            "account_id": account_id,
        }

        link = cls._call(
            log_context, lambda: stripe.Account.create_login_link(account_id)
        )
        return LinkResult(url=link.url)

    @classmethod
    def create_account_link(
        cls,
        account_id: str,
        refresh_url: str,
        return_url: str,
    ) -> LinkResult:
        """
        Create an onboarding link for a connected account.

        Args:
            account_id: Stripe account id
            refresh_url: Called by Stripe when the link has expired
            return_url: Where the seller lands after onboarding
        """
        log_context = {
            "operation": "create_account_link",
            "account_id": account_id,
            "refresh_url": refresh_url,
        }

        link = cls._call(
            log_context,
            lambda: stripe.AccountLink.create(
                account=account_id,
                refresh_url=refresh_url,
                return_url=return_url,
                type="account_onboarding",
            ),
        )
        return LinkResult(url=link.url)

    # =========================================================================
    # Response mapping
    # =========================================================================

    @staticmethod
    def _to_transfer_result(obj: Any) -> TransferResult:
        return TransferResult(
            id=obj.id,
            amount=obj.amount,
            currency=obj.currency,
            metadata=dict(obj.metadata or {}),
            raw_response=obj.to_dict(),
        )

    @staticmethod
    def _to_account_result(account: Any) -> AccountResult:
        requirements = getattr(account, "requirements", None)
        disabled_reason = (
            getattr(requirements, "disabled_reason", None) if requirements else None
        )
        return AccountResult(
            id=account.id,
            payouts_enabled=bool(getattr(account, "payouts_enabled", False)),
            charges_enabled=bool(getattr(account, "charges_enabled", False)),
            disabled_reason=disabled_reason,
            metadata=dict(getattr(account, "metadata", None) or {}),
            raw_response=account.to_dict(),
        )

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: stripe.StripeError,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        The domain exception keeps Stripe's human message (without the
        request id prefix) and its machine-readable code.

        Raises:
            StripeCardDeclinedError: Card or source was declined
            StripeInsufficientFundsError: Insufficient funds
            StripeInvalidAccountError: Invalid Connect account
            StripeInvalidRequestError: Invalid request parameters
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: Network or Stripe server error
            StripeError: Any other Stripe error
        """
        logger = cls.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}
        message = error.user_message or str(error)
        code = error.code

        if isinstance(error, stripe.CardError):
            decline_code = getattr(error, "decline_code", None)
            logger.warning(
                "Card error from Stripe",
                extra={**log_context, "stripe_code": code, "decline_code": decline_code},
            )

            if code == "insufficient_funds" or decline_code == "insufficient_funds":
                raise StripeInsufficientFundsError(
                    message,
                    stripe_code=code,
                    decline_code=decline_code,
                ) from error

            raise StripeCardDeclinedError(
                message,
                stripe_code=code,
                decline_code=decline_code,
            ) from error

        elif isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": code},
            )

            if code == "balance_insufficient":
                raise StripeInsufficientFundsError(message, stripe_code=code) from error

            if code == "account_invalid":
                raise StripeInvalidAccountError(message, stripe_code=code) from error

            raise StripeInvalidRequestError(message, stripe_code=code) from error

        elif isinstance(error, stripe.RateLimitError):
            logger.warning("Rate limited by Stripe", extra=log_context)
            raise StripeRateLimitError(
                message,
                stripe_code=code or "rate_limit",
            ) from error

        elif isinstance(error, stripe.APIConnectionError):
            logger.error(
                "Connection error to Stripe",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                message,
                stripe_code=code or "api_connection_error",
            ) from error

        elif isinstance(error, stripe.APIError):
            logger.error(
                "Stripe API error",
                extra=log_context,
                exc_info=True,
            )
            raise StripeAPIUnavailableError(
                message,
                stripe_code=code or "api_error",
            ) from error

        elif isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeInvalidRequestError(
                message,
                stripe_code=code or "authentication_error",
            ) from error

        logger.error(
            f"Unexpected error from Stripe: {type(error).__name__}",
            extra={**log_context, "stripe_code": code},
            exc_info=True,
        )
        raise StripeError(message, stripe_code=code) from error


__all__ = [
    "AccountResult",
    "LinkResult",
    "StripeAdapter",
    "TransferResult",
    "stringify_metadata",
]
