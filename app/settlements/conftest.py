"""
Pytest fixtures shared by all settlement tests.

Fixtures cover account mappings, transfers in each state, Mirakl
records and mock collaborators for the settlement services.

Usage:
    def test_process(pending_transfer, mock_stripe_adapter):
        processor = TransferProcessor(stripe_adapter=mock_stripe_adapter)
        processor.process(pending_transfer.id)
"""

from decimal import Decimal
from unittest.mock import MagicMock, Mock

import pytest

from marketplace.types import Order, Shop
from settlements.adapters import AccountResult, LinkResult, TransferResult
from settlements.state_machines import TransferStatus, TransferType
from settlements.tests.factories import AccountMappingFactory, TransferFactory


# =============================================================================
# Account Mapping Fixtures
# =============================================================================


@pytest.fixture
def account_mapping(db):
    """Mapping for shop 2001 with Stripe account acct_1."""
    return AccountMappingFactory(marketplace_shop_id=2001, stripe_account_id="acct_1")


# =============================================================================
# Transfer Fixtures
# =============================================================================


@pytest.fixture
def pending_transfer(db, account_mapping):
    """Pending product order transfer of 10.00 EUR to acct_1."""
    return TransferFactory(
        type=TransferType.PRODUCT_ORDER,
        marketplace_id="42",
        transaction_id="tx_42",
        amount=1000,
        currency="EUR",
        account_mapping=account_mapping,
    )


@pytest.fixture
def created_transfer(db, account_mapping):
    """Transfer that already reached Stripe."""
    return TransferFactory(
        account_mapping=account_mapping,
        status=TransferStatus.CREATED,
        stripe_transfer_id="tr_existing",
    )


@pytest.fixture
def failed_transfer(db, account_mapping):
    """Transfer whose previous attempt failed."""
    return TransferFactory(
        type=TransferType.SERVICE_ORDER,
        account_mapping=account_mapping,
        status=TransferStatus.FAILED,
        status_reason="Insufficient available balance.",
    )


@pytest.fixture
def refund_transfer(db):
    """Refund reversing tx_9, with no account mapping."""
    return TransferFactory(
        type=TransferType.REFUND,
        marketplace_id="ORDER-9",
        transaction_id="tx_9",
        amount=500,
        account_mapping=None,
    )


# =============================================================================
# Mirakl Fixtures
# =============================================================================


@pytest.fixture
def shop():
    """Professional Mirakl shop with full contact information."""
    return Shop(
        id=2001,
        name="Acme Outdoor",
        is_professional=True,
        web_site="https://acme.example.com",
        email="support@acme.example.com",
        phone="+33102030405",
        additional_fields={},
        attributes={
            "shop_id": 2001,
            "shop_name": "Acme Outdoor",
            "is_professional": True,
            "contact_informations": {"email": "support@acme.example.com"},
        },
    )


@pytest.fixture
def order():
    """Order with taxes 50, shipping taxes 10 and commission 30."""
    return Order(
        id="42",
        tax_amount=Decimal("50"),
        shipping_tax_amount=Decimal("10"),
        operator_commission=Decimal("30"),
    )


# =============================================================================
# Mock Collaborators
# =============================================================================


@pytest.fixture
def mock_stripe_adapter():
    """
    Mock StripeAdapter class.

    Every money movement succeeds with a predictable id, accounts come
    back enabled.
    """
    adapter = Mock()
    adapter.create_transfer.return_value = TransferResult(
        id="tr_new", amount=1000, currency="eur"
    )
    adapter.create_transfer_from_connected_account.return_value = TransferResult(
        id="py_new", amount=1000, currency="eur"
    )
    adapter.reverse_transfer.return_value = TransferResult(
        id="trr_new", amount=500, currency="eur"
    )
    adapter.create_account.return_value = AccountResult(
        id="acct_new",
        payouts_enabled=False,
        charges_enabled=False,
        disabled_reason="requirements.past_due",
    )
    adapter.retrieve_account.return_value = AccountResult(
        id="acct_1", payouts_enabled=True, charges_enabled=True
    )
    adapter.update_account.return_value = AccountResult(id="acct_1")
    adapter.create_login_link.return_value = LinkResult(
        url="https://connect.stripe.com/express/login/abc"
    )
    adapter.create_account_link.return_value = LinkResult(
        url="https://connect.stripe.com/setup/e/acct_1/xyz"
    )
    return adapter


@pytest.fixture
def mock_marketplace_client(order):
    """Mock MiraklClient returning the ``order`` fixture for order 42."""
    client = MagicMock()
    client.list_orders_by_id.return_value = {order.id: order}
    return client


@pytest.fixture
def mock_redis(mocker):
    """
    Mock Redis client for distributed lock tests.

    Every SET NX succeeds and every release deletes the key.
    """
    mock_client = mocker.MagicMock()
    mock_client.set.return_value = True
    mock_client.eval.return_value = 1

    mocker.patch(
        "settlements.locks.get_redis_connection",
        return_value=mock_client,
    )
    return mock_client
