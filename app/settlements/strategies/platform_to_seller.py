"""
Platform to seller transfer strategy.

Used for product orders, service orders and extra credits: the platform
pays the seller's connected account from its own balance.

The transaction id is sent as Stripe idempotency key, so a redelivered
instruction for the same transfer does not move money twice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from settlements.strategies.base import ConnectedAccountStrategy

if TYPE_CHECKING:
    from settlements.adapters import TransferResult
    from settlements.models import Transfer


class PlatformToSellerTransferStrategy(ConnectedAccountStrategy):
    """Create a Stripe transfer to the seller's connected account."""

    def execute(
        self,
        transfer: Transfer,
        metadata: dict[str, Any],
    ) -> TransferResult:
        mapping = self.get_account_mapping(transfer)

        return self.stripe.create_transfer(
            currency=transfer.currency,
            amount=transfer.amount,
            destination_account=mapping.stripe_account_id,
            idempotency_key=transfer.transaction_id,
            metadata=self.with_shop_id(metadata, mapping),
        )
