"""
AccountMapping model linking Mirakl shops to Stripe connected accounts.

Each Mirakl shop has at most one AccountMapping. The mapping is created the
first time the shop is resolved (which also creates the Stripe account) and
is only updated afterwards, never deleted.

Usage:
    from settlements.models import AccountMapping

    mapping = AccountMapping.objects.get_for_shop(2001)
    if mapping is not None and not mapping.ignored:
        ...

    # Bulk lookup for a batch of shops
    mappings = AccountMapping.objects.for_shop_ids([2001, 2002])
"""

from __future__ import annotations

from collections.abc import Iterable

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedModelMixin
from core.models import BaseModel
from settlements.exceptions import SettlementError


class AccountMappingQuerySet(models.QuerySet):
    """Lookups used by the onboarding service and the refresh view."""

    def for_shop_ids(self, shop_ids: Iterable[int]) -> AccountMappingQuerySet:
        return self.filter(marketplace_shop_id__in=list(shop_ids))

    def get_for_shop(self, shop_id: int) -> AccountMapping | None:
        return self.filter(marketplace_shop_id=shop_id).first()

    def get_by_onboarding_token(self, token: str) -> AccountMapping | None:
        if not token:
            return None
        return self.filter(onboarding_token=token).first()


class AccountMapping(UUIDPrimaryKeyMixin, VersionedModelMixin, BaseModel):
    """
    Persisted link between a Mirakl shop id and its Stripe account id.

    Fields:
        marketplace_shop_id: Mirakl shop id (unique)
        stripe_account_id: Stripe connected account id (acct_xxx)
        payout_enabled: Mirrors the Stripe account's payouts_enabled flag
        payin_enabled: Mirrors the Stripe account's charges_enabled flag
        disabled_reason: Stripe requirements.disabled_reason, if any
        ignored: Seller explicitly excluded from settlement
        onboarding_token: Token embedded in the onboarding refresh URL
        version: Optimistic locking version field

    Note:
        The unique constraint on marketplace_shop_id is the last line of
        defence against two workers creating a mapping for the same shop;
        the onboarding service also serializes creation with a Redis lock.
    """

    marketplace_shop_id = models.PositiveBigIntegerField(
        unique=True,
        help_text="Mirakl shop id",
    )

    stripe_account_id = models.CharField(
        max_length=255,
        unique=True,
        help_text="Stripe Account ID (acct_xxx)",
    )

    payout_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled payouts for this account",
    )

    payin_enabled = models.BooleanField(
        default=False,
        help_text="Whether Stripe has enabled charges for this account",
    )

    disabled_reason = models.TextField(
        null=True,
        blank=True,
        help_text="Reason reported by Stripe when the account is disabled",
    )

    ignored = models.BooleanField(
        default=False,
        help_text="Shop is excluded from transfer creation",
    )

    onboarding_token = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        unique=True,
        help_text="Token used in the onboarding refresh URL (set once)",
    )

    objects = AccountMappingQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Account Mapping"
        verbose_name_plural = "Account Mappings"

    def __str__(self) -> str:
        """Return string representation with shop and Stripe ids."""
        return f"AccountMapping({self.marketplace_shop_id}, {self.stripe_account_id})"

    def assign_onboarding_token(self, token: str) -> None:
        """
        Set the onboarding token.

        The token is part of every onboarding link ever sent to the
        seller, so it is never replaced once set.

        Raises:
            SettlementError: If a different token is already set
        """
        if self.onboarding_token is not None and self.onboarding_token != token:
            raise SettlementError(
                f"Account mapping for shop {self.marketplace_shop_id} "
                "already has an onboarding token",
                error_code="ONBOARDING_TOKEN_ALREADY_SET",
                details={"marketplace_shop_id": self.marketplace_shop_id},
            )
        self.onboarding_token = token
