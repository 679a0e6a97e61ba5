"""
HTTP client for the Mirakl operator API.

Only the calls the settlement services need are implemented:
- Order lookup for product order transfer metadata
- Shop lookup
- Shop custom field update (onboarding and login links)

Configuration (via settings):
- MIRAKL_API_URL: Base URL of the Mirakl instance
- MIRAKL_API_KEY: Operator API key
- MIRAKL_API_TIMEOUT_SECONDS: Request timeout (default: 10)

Usage:
    from marketplace.client import MiraklClient

    client = MiraklClient.from_settings()
    try:
        orders = client.list_orders_by_id(["ORDER-42-A"])
    finally:
        client.close()
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable
from typing import Any

import httpx
from django.conf import settings

from marketplace.exceptions import MarketplaceAPIError
from marketplace.types import Order, Shop

logger = logging.getLogger(__name__)


class MiraklClient:
    """Synchronous Mirakl API client."""

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        http: httpx.Client | None = None,
    ) -> None:
        self.http = http or httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers={
                "Authorization": api_key,
                "Accept": "application/json",
            },
        )

    @classmethod
    def from_settings(cls) -> MiraklClient:
        return cls(
            base_url=settings.MIRAKL_API_URL,
            api_key=settings.MIRAKL_API_KEY,
            timeout=getattr(settings, "MIRAKL_API_TIMEOUT_SECONDS", 10),
        )

    def close(self) -> None:
        self.http.close()

    def __enter__(self) -> MiraklClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def call(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Perform a request and return the decoded JSON body.

        Raises:
            MarketplaceAPIError: On transport failure or HTTP status >= 400
        """
        log_context = {"method": method, "path": path}
        start_time = time.time()

        try:
            response = self.http.request(method, path, params=params, json=json)
        except httpx.TimeoutException as exc:
            logger.error("Mirakl request timed out", extra=log_context)
            raise MarketplaceAPIError(
                f"Request to {path} timed out",
                error_code="MARKETPLACE_TIMEOUT",
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("Mirakl connection failed", extra=log_context, exc_info=True)
            raise MarketplaceAPIError(
                f"Could not reach Mirakl: {exc}",
                error_code="MARKETPLACE_CONNECTION_FAILED",
            ) from exc

        duration_ms = (time.time() - start_time) * 1000
        log_context = {
            **log_context,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        }

        if response.status_code >= 400:
            logger.error("Mirakl request failed", extra=log_context)
            raise MarketplaceAPIError(
                f"Mirakl returned {response.status_code} for {method} {path}",
                status_code=response.status_code,
                details={"body": response.text[:1024]},
            )

        logger.debug("Mirakl request completed", extra=log_context)
        if not response.content:
            return {}
        return response.json()

    # =========================================================================
    # Orders
    # =========================================================================

    def list_orders_by_id(self, order_ids: Iterable[str]) -> dict[str, Order]:
        """
        Fetch orders by id.

        Returns:
            Orders keyed by order id. Ids Mirakl does not know are absent.
        """
        order_ids = [str(order_id) for order_id in order_ids]
        if not order_ids:
            return {}

        body = self.call(
            "GET",
            "/api/orders",
            params={"order_ids": ",".join(order_ids), "paginate": "false"},
        )
        orders = (Order.from_api(item) for item in body.get("orders", []))
        return {order.id: order for order in orders}

    # =========================================================================
    # Shops
    # =========================================================================

    def list_shops_by_id(self, shop_ids: Iterable[int]) -> dict[int, Shop]:
        """Fetch shops by id, keyed by shop id."""
        shop_ids = [str(shop_id) for shop_id in shop_ids]
        if not shop_ids:
            return {}

        body = self.call(
            "GET",
            "/api/shops",
            params={"shop_ids": ",".join(shop_ids), "paginate": "false"},
        )
        shops = (Shop.from_api(item) for item in body.get("shops", []))
        return {shop.id: shop for shop in shops}

    def update_shop_custom_field(self, shop_id: int, code: str, value: str) -> None:
        """Set one custom field on a shop."""
        self.call(
            "PUT",
            "/api/shops",
            json={
                "shops": [
                    {
                        "shop_id": shop_id,
                        "shop_additional_fields": [{"code": code, "value": value}],
                    }
                ]
            },
        )
        logger.info(
            "Updated Mirakl shop custom field",
            extra={"marketplace_shop_id": shop_id, "field_code": code},
        )
