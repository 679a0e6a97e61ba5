"""
Abstract base strategy for transfer execution.

Each strategy turns a Transfer into exactly one Stripe call. The transfer
processor picks the strategy from the transfer type, hands it the record
and the metadata built so far, and records whatever comes back.

Usage:
    class MyStrategy(TransferStrategy):
        def execute(self, transfer, metadata):
            return self.stripe.create_transfer(...)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from settlements.adapters import StripeAdapter
from settlements.exceptions import TransferInvariantError

if TYPE_CHECKING:
    from settlements.adapters import TransferResult
    from settlements.models import AccountMapping, Transfer


class TransferStrategy(ABC):
    """
    Abstract base class for transfer strategies.

    Strategies are stateless apart from the injected Stripe adapter, and
    never save the transfer: persisting the outcome is the processor's job.
    """

    def __init__(self, stripe_adapter: type | None = None):
        """
        Args:
            stripe_adapter: Optional Stripe adapter class for dependency
                injection. Defaults to StripeAdapter.
        """
        self.stripe = stripe_adapter or StripeAdapter

    @abstractmethod
    def execute(
        self,
        transfer: Transfer,
        metadata: dict[str, Any],
    ) -> TransferResult | None:
        """
        Perform the Stripe call for this transfer.

        Args:
            transfer: Transfer being processed (amount and currency are set)
            metadata: Metadata built by the processor; not modified

        Returns:
            Stripe result carrying the new object id

        Raises:
            TransferInvariantError: If the transfer lacks what the call needs
            StripeError: If Stripe rejects the call
        """


class ConnectedAccountStrategy(TransferStrategy):
    """
    Base for strategies that move money to or from a seller's account.
    """

    def get_account_mapping(self, transfer: Transfer) -> AccountMapping:
        """
        Return the transfer's account mapping.

        Raises:
            TransferInvariantError: If there is no mapping or it has no
                Stripe account id
        """
        mapping = transfer.account_mapping
        if mapping is None:
            raise TransferInvariantError(
                f"Transfer {transfer.id} has no account mapping",
                error_code="ACCOUNT_MAPPING_MISSING",
                details={"transfer_id": str(transfer.id), "type": transfer.type},
            )
        if not mapping.stripe_account_id:
            raise TransferInvariantError(
                f"Account mapping for shop {mapping.marketplace_shop_id} "
                "has no Stripe account",
                error_code="STRIPE_ACCOUNT_MISSING",
                details={
                    "transfer_id": str(transfer.id),
                    "marketplace_shop_id": mapping.marketplace_shop_id,
                },
            )
        return mapping

    @staticmethod
    def with_shop_id(
        metadata: dict[str, Any], mapping: AccountMapping
    ) -> dict[str, Any]:
        return {**metadata, "miraklShopId": mapping.marketplace_shop_id}
