"""
Seller to platform transfer strategy.

Used for subscriptions and extra invoices: the seller's connected account
is debited in favour of the platform.

Stripe takes no idempotency key for this call. A redelivered instruction
that arrives before the transfer status was saved can debit twice.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from settlements.strategies.base import ConnectedAccountStrategy

if TYPE_CHECKING:
    from settlements.adapters import TransferResult
    from settlements.models import Transfer


class SellerToPlatformTransferStrategy(ConnectedAccountStrategy):
    """Debit the seller's connected account."""

    def execute(
        self,
        transfer: Transfer,
        metadata: dict[str, Any],
    ) -> TransferResult:
        mapping = self.get_account_mapping(transfer)

        return self.stripe.create_transfer_from_connected_account(
            currency=transfer.currency,
            amount=transfer.amount,
            source_account=mapping.stripe_account_id,
            metadata=self.with_shop_id(metadata, mapping),
        )
