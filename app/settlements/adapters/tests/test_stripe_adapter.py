"""
Tests for Stripe adapter.

Tests cover:
- Error translation for each exception type
- Transfers, account debits and reversals
- Connected account operations and links
- Metadata stringification
- Configuration from settings
"""

import pytest
import stripe
from django.test import override_settings

from settlements.adapters import (
    AccountResult,
    LinkResult,
    StripeAdapter,
    TransferResult,
    stringify_metadata,
)
from settlements.exceptions import (
    StripeAPIUnavailableError,
    StripeCardDeclinedError,
    StripeError,
    StripeInsufficientFundsError,
    StripeInvalidAccountError,
    StripeInvalidRequestError,
    StripeRateLimitError,
)


def create_transfer():
    return StripeAdapter.create_transfer(
        currency="eur",
        amount=1000,
        destination_account="acct_dest",
        idempotency_key="ORDER-1-A",
        metadata={"marketplaceId": "ORDER-1-A"},
    )


# =============================================================================
# Error Translation Tests
# =============================================================================


class TestStripeAdapterErrorTranslation:
    """Tests for Stripe error translation to domain exceptions."""

    def test_card_declined_error(self, mock_stripe_transfer, card_error):
        """Should translate CardError to StripeCardDeclinedError."""
        mock_stripe_transfer.create.side_effect = card_error()

        with pytest.raises(StripeCardDeclinedError) as exc_info:
            create_transfer()

        assert exc_info.value.message == "Your card was declined."
        assert exc_info.value.stripe_code == "card_declined"
        assert exc_info.value.decline_code == "generic_decline"
        assert exc_info.value.is_retryable is False

    def test_insufficient_funds_error(self, mock_stripe_charge, card_error):
        """Should translate insufficient funds to StripeInsufficientFundsError."""
        mock_stripe_charge.create.side_effect = card_error(
            message="Insufficient funds.", decline_code="insufficient_funds"
        )

        with pytest.raises(StripeInsufficientFundsError) as exc_info:
            StripeAdapter.create_transfer_from_connected_account(
                currency="eur", amount=500, source_account="acct_src"
            )

        assert exc_info.value.decline_code == "insufficient_funds"

    def test_balance_insufficient_error(
        self, mock_stripe_transfer, invalid_request_error
    ):
        """Platform balance too low is reported as insufficient funds."""
        mock_stripe_transfer.create.side_effect = invalid_request_error(
            message="Insufficient available balance.",
            param=None,
            code="balance_insufficient",
        )

        with pytest.raises(StripeInsufficientFundsError) as exc_info:
            create_transfer()

        assert exc_info.value.stripe_code == "balance_insufficient"

    def test_invalid_request_error(self, mock_stripe_transfer, invalid_request_error):
        """Should translate InvalidRequestError to StripeInvalidRequestError."""
        mock_stripe_transfer.create_reversal.side_effect = invalid_request_error()

        with pytest.raises(StripeInvalidRequestError) as exc_info:
            StripeAdapter.reverse_transfer(500, "tr_missing", {})

        assert exc_info.value.stripe_code == "resource_missing"
        assert exc_info.value.message == "No such transfer: 'tr_missing'"
        assert exc_info.value.is_retryable is False

    def test_invalid_account_error(self, mock_stripe_transfer, invalid_request_error):
        """Should translate account-related InvalidRequestError to StripeInvalidAccountError."""
        mock_stripe_transfer.create.side_effect = invalid_request_error(
            message="No such destination: acct_invalid",
            param="destination",
            code="account_invalid",
        )

        with pytest.raises(StripeInvalidAccountError):
            create_transfer()

    def test_message_mentioning_account_is_invalid_request(
        self, mock_stripe_transfer, invalid_request_error
    ):
        """Only the account_invalid code means the account itself is at fault."""
        mock_stripe_transfer.create.side_effect = invalid_request_error(
            message="Amount must be at least 1 for the destination account currency.",
            param="amount",
            code="amount_too_small",
        )

        with pytest.raises(StripeInvalidRequestError) as exc_info:
            create_transfer()

        assert not isinstance(exc_info.value, StripeInvalidAccountError)
        assert exc_info.value.stripe_code == "amount_too_small"

    def test_rate_limit_error(self, mock_stripe_transfer, rate_limit_error):
        """Should translate RateLimitError to StripeRateLimitError."""
        mock_stripe_transfer.create.side_effect = rate_limit_error

        with pytest.raises(StripeRateLimitError) as exc_info:
            create_transfer()

        assert exc_info.value.is_retryable is True
        assert exc_info.value.stripe_code == "rate_limit"

    def test_api_connection_error(self, mock_stripe_transfer, api_connection_error):
        """Should translate APIConnectionError to StripeAPIUnavailableError."""
        mock_stripe_transfer.create.side_effect = api_connection_error

        with pytest.raises(StripeAPIUnavailableError) as exc_info:
            create_transfer()

        assert exc_info.value.is_retryable is True
        assert exc_info.value.stripe_code == "api_connection_error"

    def test_api_error(self, mock_stripe_transfer, api_error):
        """Should translate APIError to StripeAPIUnavailableError."""
        mock_stripe_transfer.create.side_effect = api_error

        with pytest.raises(StripeAPIUnavailableError):
            create_transfer()

    def test_authentication_error(self, mock_stripe_transfer, authentication_error):
        """Should translate AuthenticationError to StripeInvalidRequestError."""
        mock_stripe_transfer.create.side_effect = authentication_error

        with pytest.raises(StripeInvalidRequestError) as exc_info:
            create_transfer()

        assert exc_info.value.stripe_code == "authentication_error"

    def test_other_stripe_error(self, mock_stripe_account):
        """Unmapped Stripe errors become a plain StripeError."""
        mock_stripe_account.retrieve.side_effect = stripe.PermissionError(
            "The provided key does not have access to account 'acct_x'."
        )

        with pytest.raises(StripeError) as exc_info:
            StripeAdapter.retrieve_account("acct_x")

        assert type(exc_info.value) is StripeError

    def test_non_stripe_error_propagates(self, mock_stripe_transfer):
        """Errors that are not from Stripe are not translated."""
        mock_stripe_transfer.create.side_effect = ValueError("boom")

        with pytest.raises(ValueError, match="boom"):
            create_transfer()


# =============================================================================
# Money Movement Tests
# =============================================================================


class TestStripeAdapterCreateTransfer:
    """Tests for platform to seller transfers."""

    def test_create_transfer_success(self, mock_stripe_transfer):
        """Should create a transfer with idempotency key and string metadata."""
        result = StripeAdapter.create_transfer(
            currency="eur",
            amount=1000,
            destination_account="acct_dest",
            idempotency_key="ORDER-1-A",
            metadata={"marketplaceId": "ORDER-1-A", "miraklShopId": 2001},
        )

        assert isinstance(result, TransferResult)
        assert result.id == "tr_test123456"
        assert result.amount == 1000
        mock_stripe_transfer.create.assert_called_once_with(
            amount=1000,
            currency="eur",
            destination="acct_dest",
            metadata={"marketplaceId": "ORDER-1-A", "miraklShopId": "2001"},
            idempotency_key="ORDER-1-A",
        )

    def test_create_transfer_without_idempotency_key(self, mock_stripe_transfer):
        """Should omit the idempotency key when there is none."""
        StripeAdapter.create_transfer(
            currency="eur",
            amount=1000,
            destination_account="acct_dest",
            idempotency_key=None,
        )

        call_kwargs = mock_stripe_transfer.create.call_args.kwargs
        assert "idempotency_key" not in call_kwargs


class TestStripeAdapterCreateTransferFromConnectedAccount:
    """Tests for seller to platform debits."""

    def test_debit_connected_account(self, mock_stripe_charge):
        """Should charge the connected account as source."""
        result = StripeAdapter.create_transfer_from_connected_account(
            currency="eur",
            amount=900,
            source_account="acct_src",
            metadata={"marketplaceId": "2001", "miraklShopId": 2001},
        )

        assert result.id == "py_test123456"
        mock_stripe_charge.create.assert_called_once_with(
            amount=900,
            currency="eur",
            source="acct_src",
            metadata={"marketplaceId": "2001", "miraklShopId": "2001"},
        )
        assert "idempotency_key" not in mock_stripe_charge.create.call_args.kwargs


class TestStripeAdapterReverseTransfer:
    """Tests for transfer reversals."""

    def test_reverse_transfer(self, mock_stripe_transfer):
        """Should create a reversal on the original transfer."""
        result = StripeAdapter.reverse_transfer(
            amount=500,
            transfer_id="tx_9",
            metadata={"marketplaceId": "ORDER-9"},
        )

        assert result.id == "trr_test123456"
        mock_stripe_transfer.create_reversal.assert_called_once_with(
            "tx_9",
            amount=500,
            metadata={"marketplaceId": "ORDER-9"},
        )


# =============================================================================
# Connected Account Tests
# =============================================================================


class TestStripeAdapterAccounts:
    """Tests for connected account operations."""

    def test_create_account(self, mock_stripe_account):
        """Should create an Express account with prefill details and metadata."""
        details = {
            "business_type": "company",
            "business_profile": {"name": "Shop"},
        }

        result = StripeAdapter.create_account(
            shop_id=2001,
            details=details,
            metadata={"miraklShopId": 2001},
        )

        assert isinstance(result, AccountResult)
        assert result.id == "acct_test123456"
        assert result.payouts_enabled is False
        assert result.disabled_reason == "requirements.past_due"
        mock_stripe_account.create.assert_called_once_with(
            business_type="company",
            business_profile={"name": "Shop"},
            type="express",
            metadata={"miraklShopId": "2001"},
        )

    def test_retrieve_account(self, mock_stripe_account, mock_account):
        """Should map flags and requirements."""
        mock_stripe_account.retrieve.return_value = mock_account(
            id="acct_ok",
            payouts_enabled=True,
            charges_enabled=True,
            disabled_reason=None,
        )

        result = StripeAdapter.retrieve_account("acct_ok")

        assert result.id == "acct_ok"
        assert result.payouts_enabled is True
        assert result.charges_enabled is True
        assert result.disabled_reason is None
        mock_stripe_account.retrieve.assert_called_once_with("acct_ok")

    def test_update_account_metadata_only(self, mock_stripe_account):
        """Should send only metadata when the patch is empty."""
        StripeAdapter.update_account("acct_1", {}, {"miraklShopId": 7, "empty": None})

        mock_stripe_account.modify.assert_called_once_with(
            "acct_1", metadata={"miraklShopId": "7"}
        )

    def test_create_login_link(self, mock_stripe_account):
        """Should return the login link URL."""
        result = StripeAdapter.create_login_link("acct_1")

        assert result == LinkResult(url="https://connect.stripe.com/express/login")
        mock_stripe_account.create_login_link.assert_called_once_with("acct_1")

    def test_create_account_link(self, mock_stripe_account_link):
        """Should request an onboarding link."""
        result = StripeAdapter.create_account_link(
            "acct_1",
            refresh_url="https://example.com/onboarding/refresh/abc/",
            return_url="https://example.com/done",
        )

        assert result.url == "https://connect.stripe.com/setup/e/acct_x"
        mock_stripe_account_link.create.assert_called_once_with(
            account="acct_1",
            refresh_url="https://example.com/onboarding/refresh/abc/",
            return_url="https://example.com/done",
            type="account_onboarding",
        )


# =============================================================================
# Helpers & Configuration
# =============================================================================


class TestStringifyMetadata:
    def test_values_are_strings_and_none_dropped(self):
        assert stringify_metadata({"a": 1, "b": None, "c": "x"}) == {
            "a": "1",
            "c": "x",
        }

    def test_none_metadata(self):
        assert stringify_metadata(None) == {}


class TestStripeAdapterConfiguration:
    """Tests for Stripe adapter configuration."""

    @override_settings(STRIPE_SECRET_KEY="sk_test_custom")
    def test_uses_settings_api_key(self, mock_stripe_transfer):
        """Should use API key from settings."""
        create_transfer()

        assert stripe.api_key == "sk_test_custom"

    @override_settings(STRIPE_API_TIMEOUT_SECONDS=30)
    def test_uses_settings_timeout(self, mock_stripe_transfer, mock_stripe_http_client):
        """Should use timeout from settings."""
        create_transfer()

        mock_stripe_http_client.assert_called_with(timeout=30)
