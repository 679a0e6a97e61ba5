"""
Mirakl marketplace integration.

This package is a plain library (not a Django app): an httpx client for
the Mirakl operator API and typed records for the shops and orders it
returns.

Usage:
    from marketplace.client import MiraklClient

    client = MiraklClient.from_settings()
    orders = client.list_orders_by_id(["ORDER-42-A"])
    client.update_shop_custom_field(2001, "stripe-url", "https://...")
"""
