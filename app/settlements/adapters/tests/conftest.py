"""
Pytest fixtures for Stripe adapter tests.

Sections:
    - Mock Stripe Objects
    - Mock Stripe Error Fixtures
    - Mock Stripe API Fixtures
"""

from typing import Any
from unittest.mock import patch

import pytest
import stripe


# =============================================================================
# Mock Stripe Objects
# =============================================================================


class MockStripeObject(dict):
    """
    Dict with attribute access, like stripe.StripeObject.

    Nested dicts come back as MockStripeObject so chained attribute
    access (account.requirements.disabled_reason) works.
    """

    def __getattr__(self, name: str) -> Any:
        try:
            value = self[name]
        except KeyError:
            raise AttributeError(name) from None
        if isinstance(value, dict) and not isinstance(value, MockStripeObject):
            return MockStripeObject(value)
        return value

    def to_dict(self) -> dict[str, Any]:
        return dict(self)


@pytest.fixture
def mock_transfer():
    """Create a mock Transfer / Charge / TransferReversal response."""

    def _create(
        id: str = "tr_test123456",
        amount: int = 1000,
        currency: str = "eur",
        metadata: dict | None = None,
        object: str = "transfer",
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": object,
                "amount": amount,
                "currency": currency,
                "metadata": metadata or {},
            }
        )

    return _create


@pytest.fixture
def mock_account():
    """Create a mock Account response."""

    def _create(
        id: str = "acct_test123456",
        payouts_enabled: bool = False,
        charges_enabled: bool = False,
        disabled_reason: str | None = "requirements.past_due",
        metadata: dict | None = None,
    ) -> MockStripeObject:
        return MockStripeObject(
            {
                "id": id,
                "object": "account",
                "type": "express",
                "payouts_enabled": payouts_enabled,
                "charges_enabled": charges_enabled,
                "requirements": {"disabled_reason": disabled_reason},
                "metadata": metadata or {},
            }
        )

    return _create


# =============================================================================
# Mock Stripe Error Fixtures
# =============================================================================


@pytest.fixture
def card_error():
    """Create a Stripe CardError."""

    def _create(
        message: str = "Your card was declined.",
        code: str = "card_declined",
        decline_code: str | None = "generic_decline",
    ) -> stripe.CardError:
        error = stripe.CardError(message, None, code)
        error.decline_code = decline_code
        return error

    return _create


@pytest.fixture
def invalid_request_error():
    """Create a Stripe InvalidRequestError."""

    def _create(
        message: str = "No such transfer: 'tr_missing'",
        param: str | None = "id",
        code: str = "resource_missing",
    ) -> stripe.InvalidRequestError:
        return stripe.InvalidRequestError(message, param, code=code)

    return _create


@pytest.fixture
def rate_limit_error():
    """Create a Stripe RateLimitError."""
    return stripe.RateLimitError("Too many requests hit the API too quickly.")


@pytest.fixture
def api_connection_error():
    """Create a Stripe APIConnectionError."""
    return stripe.APIConnectionError("Could not connect to Stripe.")


@pytest.fixture
def api_error():
    """Create a Stripe APIError."""
    return stripe.APIError("Something went wrong on Stripe's end.")


@pytest.fixture
def authentication_error():
    """Create a Stripe AuthenticationError."""
    return stripe.AuthenticationError("Invalid API Key provided.")


# =============================================================================
# Mock Stripe API Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def mock_stripe_http_client():
    """Keep the adapter from building a real HTTP client."""
    with patch("stripe.RequestsClient") as mock:
        yield mock


@pytest.fixture
def mock_stripe_transfer(mock_transfer):
    """Mock stripe.Transfer API."""
    with patch("stripe.Transfer") as mock:
        mock.create.return_value = mock_transfer()
        mock.create_reversal.return_value = mock_transfer(
            id="trr_test123456", object="transfer_reversal"
        )
        yield mock


@pytest.fixture
def mock_stripe_charge(mock_transfer):
    """Mock stripe.Charge API."""
    with patch("stripe.Charge") as mock:
        mock.create.return_value = mock_transfer(id="py_test123456", object="charge")
        yield mock


@pytest.fixture
def mock_stripe_account(mock_account):
    """Mock stripe.Account API."""
    with patch("stripe.Account") as mock:
        mock.create.return_value = mock_account()
        mock.retrieve.return_value = mock_account()
        mock.modify.return_value = mock_account()
        mock.create_login_link.return_value = MockStripeObject(
            {"object": "login_link", "url": "https://connect.stripe.com/express/login"}
        )
        yield mock


@pytest.fixture
def mock_stripe_account_link():
    """Mock stripe.AccountLink API."""
    with patch("stripe.AccountLink") as mock:
        mock.create.return_value = MockStripeObject(
            {"object": "account_link", "url": "https://connect.stripe.com/setup/e/acct_x"}
        )
        yield mock
