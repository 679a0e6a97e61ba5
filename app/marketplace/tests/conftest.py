"""
Pytest fixtures for Mirakl client tests.
"""

import pytest

from marketplace.client import MiraklClient

MIRAKL_URL = "https://mirakl.example.test"


@pytest.fixture
def mirakl_client():
    """Client pointed at a fake Mirakl host; requests are mocked with respx."""
    mirakl = MiraklClient(base_url=MIRAKL_URL, api_key="op-key", timeout=5)
    yield mirakl
    mirakl.close()


@pytest.fixture
def order_payload():
    """Order with two lines: taxes 30 + 20, shipping taxes 6 + 4."""
    return {
        "order_id": "42",
        "total_commission": 30.0,
        "order_lines": [
            {
                "order_line_id": "42-1",
                "taxes": [{"code": "VAT", "amount": 30.0}],
                "shipping_taxes": [{"code": "VAT", "amount": 6.0}],
            },
            {
                "order_line_id": "42-2",
                "taxes": [{"code": "VAT", "amount": 20.0}],
                "shipping_taxes": [{"code": "VAT", "amount": 4.0}],
            },
        ],
    }


@pytest.fixture
def shop_payload():
    """Shop with contact information and two custom fields."""
    return {
        "shop_id": 2001,
        "shop_name": "Acme Outdoor",
        "is_professional": True,
        "contact_informations": {
            "email": "support@acme.example.com",
            "phone": "",
            "web_site": "https://acme.example.com",
        },
        "shop_additional_fields": [
            {"code": "stripe-url", "type": "STRING", "value": "https://old-link"},
            {"code": "stripe-ignored", "type": "BOOLEAN", "value": "true"},
        ],
    }
