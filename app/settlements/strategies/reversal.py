"""
Transfer reversal strategy for refunds.

A refund reverses a transfer that was already created on Stripe. The
original Stripe transfer id is stored in the refund's transaction_id.
No account mapping is looked up: the reversal goes back to wherever the
original transfer went.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from settlements.exceptions import TransferInvariantError
from settlements.strategies.base import TransferStrategy

if TYPE_CHECKING:
    from settlements.adapters import TransferResult
    from settlements.models import Transfer


class TransferReversalStrategy(TransferStrategy):
    """Reverse the transfer referenced by transaction_id."""

    def execute(
        self,
        transfer: Transfer,
        metadata: dict[str, Any],
    ) -> TransferResult:
        if not transfer.transaction_id:
            raise TransferInvariantError(
                f"Refund {transfer.id} has no transfer to reverse",
                error_code="REFUND_TRANSACTION_MISSING",
                details={"transfer_id": str(transfer.id)},
            )

        return self.stripe.reverse_transfer(
            amount=transfer.amount,
            transfer_id=transfer.transaction_id,
            metadata=metadata,
        )
