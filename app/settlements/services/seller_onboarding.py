"""
Seller onboarding: links Mirakl shops to Stripe connected accounts.

Responsibilities:
- Resolve the AccountMapping of a shop, creating the Stripe Express
  account on first sight and syncing its metadata afterwards
- Flag shops as ignored for settlement
- Publish Stripe login and onboarding links to a shop custom field

Payment and marketplace errors are not caught here: callers need an
immediate result and decide themselves how to react.

Configuration (via settings, overridable per instance):
- STRIPE_ONBOARDING_REDIRECT_URL: Where sellers land after onboarding
- STRIPE_PREFILL_ONBOARDING: Prefill account details from the shop profile
- MIRAKL_CUSTOM_FIELD_CODE: Shop custom field receiving the links
- MIRAKL_IGNORED_SHOP_FIELD_CODE: Shop custom field flagging ignored shops
- STRIPE_ACCOUNT_METADATA: {shop attribute: Stripe metadata key} mapping
- BASE_URL: Absolute origin used to build the onboarding refresh URL

Usage:
    from settlements.services import SellerOnboardingService

    with SellerOnboardingService() as service:
        mapping = service.get_account_mapping_from_shop(shop)
        if not mapping.payout_enabled:
            service.add_onboarding_link_to_shop(shop.id, mapping)
"""

from __future__ import annotations

import json
import logging
import secrets
from typing import TYPE_CHECKING, Any

from django.conf import settings
from django.urls import reverse

from settlements.adapters import StripeAdapter
from settlements.locks import DistributedLock
from settlements.models import AccountMapping

if TYPE_CHECKING:
    from marketplace.client import MiraklClient
    from marketplace.types import Shop


# 128-bit token, hex encoded
ONBOARDING_TOKEN_BYTES = 16


class SellerOnboardingService:
    """
    Resolves account mappings and issues Stripe onboarding artifacts.

    Every constructor argument left to None is read from settings. A Mirakl
    client built from settings is owned by the service: use it as a context
    manager, or call close(), to release its connection pool.
    """

    def __init__(
        self,
        stripe_adapter: type | None = None,
        marketplace_client: MiraklClient | None = None,
        redirect_onboarding_url: str | None = None,
        prefill_onboarding: bool | None = None,
        custom_field_code: str | None = None,
        ignored_shop_field_code: str | None = None,
        account_metadata: dict[str, str] | str | None = None,
        base_url: str | None = None,
        logger: logging.Logger | None = None,
    ):
        self.stripe = stripe_adapter or StripeAdapter
        self._marketplace_client = marketplace_client
        self._owns_marketplace_client = False
        self.redirect_onboarding_url = _or_setting(
            redirect_onboarding_url, "STRIPE_ONBOARDING_REDIRECT_URL"
        )
        self.prefill_onboarding = bool(
            _or_setting(prefill_onboarding, "STRIPE_PREFILL_ONBOARDING")
        )
        self.custom_field_code = _or_setting(
            custom_field_code, "MIRAKL_CUSTOM_FIELD_CODE"
        )
        self.ignored_shop_field_code = _or_setting(
            ignored_shop_field_code, "MIRAKL_IGNORED_SHOP_FIELD_CODE"
        )
        self.account_metadata = _parse_metadata_mapping(
            _or_setting(account_metadata, "STRIPE_ACCOUNT_METADATA")
        )
        self.base_url = _or_setting(base_url, "BASE_URL")
        self.logger = logger or logging.getLogger(__name__)

    @property
    def marketplace_client(self) -> MiraklClient:
        if self._marketplace_client is None:
            from marketplace.client import MiraklClient

            self._marketplace_client = MiraklClient.from_settings()
            self._owns_marketplace_client = True
        return self._marketplace_client

    def close(self) -> None:
        """Close the Mirakl client if this instance built it."""
        if self._owns_marketplace_client:
            self._marketplace_client.close()
            self._marketplace_client = None
            self._owns_marketplace_client = False

    def __enter__(self) -> SellerOnboardingService:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # =========================================================================
    # Account Mapping
    # =========================================================================

    def get_account_mapping_from_shop(self, shop: Shop) -> AccountMapping:
        """
        Return the shop's account mapping, creating it if needed.

        A new mapping means a new Stripe Express account. Creation is
        serialized per shop with a Redis lock and the lookup is repeated
        once the lock is held, so concurrent calls for the same shop
        create one account. An existing mapping only gets its Stripe
        metadata refreshed; local flags are left as they are.

        Raises:
            StripeError: Stripe rejected a call
            LockAcquisitionError: Another worker holds the shop lock
        """
        mapping = AccountMapping.objects.get_for_shop(shop.id)
        if mapping is None:
            with DistributedLock.for_shop(shop.id):
                mapping = AccountMapping.objects.get_for_shop(shop.id)
                if mapping is None:
                    return self._create_account_mapping(shop)

        account = self.stripe.retrieve_account(mapping.stripe_account_id)
        if account is not None and account.id:
            self.stripe.update_account(
                account.id, {}, self.get_additional_metadata(shop)
            )
        return mapping

    def _create_account_mapping(self, shop: Shop) -> AccountMapping:
        metadata = {
            **self.get_additional_metadata(shop),
            "miraklShopId": shop.id,
        }
        account = self.stripe.create_account(
            shop.id, self.get_prefill_details(shop), metadata
        )

        mapping = AccountMapping.objects.create(
            marketplace_shop_id=shop.id,
            stripe_account_id=account.id,
            payout_enabled=account.payouts_enabled,
            payin_enabled=account.charges_enabled,
            disabled_reason=account.disabled_reason,
        )
        self.logger.info(
            "Created Stripe account for shop",
            extra={
                "marketplace_shop_id": shop.id,
                "stripe_account_id": account.id,
            },
        )
        return mapping

    def update_account_mapping_ignored(
        self, mapping: AccountMapping, ignored: bool
    ) -> None:
        mapping.ignored = ignored
        mapping.save(update_fields=["ignored", "updated_at"])

    def get_prefill_details(self, shop: Shop) -> dict[str, Any]:
        """
        Stripe account parameters prefilled from the shop profile.

        Empty when prefilling is disabled. Missing profile values are not
        sent, and the support phone is only sent when non-empty.
        """
        if not self.prefill_onboarding:
            return {}

        business_profile = {
            key: value
            for key, value in (
                ("name", shop.name),
                ("url", shop.web_site),
                ("support_email", shop.email),
            )
            if value is not None
        }
        if shop.phone:
            business_profile["support_phone"] = shop.phone

        return {
            "business_type": "company" if shop.is_professional else "individual",
            "business_profile": business_profile,
        }

    def get_additional_metadata(self, shop: Shop) -> dict[str, Any]:
        """Shop attributes renamed per STRIPE_ACCOUNT_METADATA; absent ones skipped."""
        return {
            metadata_key: shop.attribute(shop_key)
            for shop_key, metadata_key in self.account_metadata.items()
            if shop.has_attribute(shop_key)
        }

    # =========================================================================
    # Shop custom fields
    # =========================================================================

    def get_custom_field_value(self, shop: Shop) -> str | None:
        """Current link stored on the shop."""
        return shop.custom_field_value(self.custom_field_code)

    def is_shop_ignored(self, shop: Shop) -> bool:
        return shop.custom_field_value(self.ignored_shop_field_code) == "true"

    # =========================================================================
    # Links
    # =========================================================================

    def add_login_link_to_shop(self, shop_id: int, mapping: AccountMapping) -> str:
        """
        Publish a fresh Express dashboard login link on the shop.

        Login links are single use, so nothing is stored locally.

        Returns:
            The login link URL
        """
        url = self.stripe.create_login_link(mapping.stripe_account_id).url
        self.marketplace_client.update_shop_custom_field(
            shop_id, self.custom_field_code, url
        )
        return url

    def add_onboarding_link_to_shop(
        self, shop_id: int, mapping: AccountMapping
    ) -> str:
        """
        Publish a fresh onboarding link on the shop.

        The mapping's onboarding token is created on the first call and
        reused afterwards, so every link ever issued for the shop points at
        the same refresh URL. The mapping is only saved when the token is new.

        Returns:
            The onboarding link URL
        """
        has_token = mapping.onboarding_token is not None
        token = mapping.onboarding_token or secrets.token_hex(ONBOARDING_TOKEN_BYTES)

        url = self.stripe.create_account_link(
            mapping.stripe_account_id,
            refresh_url=self.get_refresh_url(token),
            return_url=self.redirect_onboarding_url,
        ).url
        self.marketplace_client.update_shop_custom_field(
            shop_id, self.custom_field_code, url
        )

        if not has_token:
            mapping.assign_onboarding_token(token)
            mapping.save(update_fields=["onboarding_token", "updated_at"])

        return url

    def get_refresh_url(self, token: str) -> str:
        """Absolute URL of the onboarding refresh view for a token."""
        path = reverse("settlements:onboarding_refresh", kwargs={"token": token})
        return f"{self.base_url.rstrip('/')}{path}"


def _or_setting(value: Any, setting_name: str) -> Any:
    if value is not None:
        return value
    return getattr(settings, setting_name)


def _parse_metadata_mapping(value: dict[str, str] | str | None) -> dict[str, str]:
    if not value:
        return {}
    if isinstance(value, str):
        value = json.loads(value)
    return {str(key): str(target) for key, target in value.items()}
