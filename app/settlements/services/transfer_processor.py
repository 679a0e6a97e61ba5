"""
Transfer processor: turns one "process this transfer" instruction into
exactly one Stripe call.

Flow:
1. Lock the transfer row and check its preconditions
2. Build the metadata ({"marketplaceId": ...}, plus Mirakl order totals
   for product orders)
3. Dispatch to the strategy for the transfer type
4. Record CREATED or FAILED and save once

Error Handling:
    - StripeError: recorded on the transfer (FAILED + status_reason),
      logged, not re-raised
    - TransferInvariantError, MarketplaceAPIError, database errors:
      propagate to the caller (the Celery task), nothing is saved

Usage:
    from settlements.services import TransferProcessor

    with TransferProcessor() as processor:
        transfer = processor.process(transfer_id)
    print(transfer.status, transfer.stripe_transfer_id)
"""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING, Any

from django.db import transaction

from settlements.adapters import StripeAdapter
from settlements.exceptions import StripeError, TransferInvariantError
from settlements.models import Transfer
from settlements.state_machines import TransferType
from settlements.strategies import get_strategy

if TYPE_CHECKING:
    from marketplace.client import MiraklClient


# Metadata keys added to product order transfers
ORDER_TAX_AMOUNT = "ORDER_TAX_AMOUNT"
SHIPPING_TAX_AMOUNT = "SHIPPING_TAX_AMOUNT"
COMMISSION_FEES = "COMMISSION_FEES"


class TransferProcessor:
    """
    Processes a single Transfer.

    The transfer row is loaded with select_for_update inside a transaction,
    so two deliveries of the same id never process it concurrently: the
    second one waits, then sees CREATED and is rejected, or sees FAILED and
    processes again.

    Args:
        stripe_adapter: Stripe adapter class (default: StripeAdapter)
        marketplace_client: Mirakl client; built from settings on first use
            and closed by close() (or on leaving a with block)
        logger: Logger for failure reports (default: module logger)
    """

    def __init__(
        self,
        stripe_adapter: type | None = None,
        marketplace_client: MiraklClient | None = None,
        logger: logging.Logger | None = None,
    ):
        self.stripe = stripe_adapter or StripeAdapter
        self._marketplace_client = marketplace_client
        self._owns_marketplace_client = False
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

    def __enter__(self) -> TransferProcessor:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def process(self, transfer_id: uuid.UUID | str) -> Transfer:
        """
        Process a transfer and persist the outcome.

        Args:
            transfer_id: Internal id of the transfer

        Returns:
            The saved transfer (CREATED, FAILED, or unchanged when the
            type has no strategy)

        Raises:
            TransferInvariantError: Transfer missing, already created,
                without amount/currency, or missing what its type needs
            MarketplaceAPIError: Order lookup failed
        """
        with transaction.atomic():
            transfer = self._load(transfer_id)
            self._check_preconditions(transfer)

            metadata = self._build_metadata(transfer)
            strategy = get_strategy(transfer.type, stripe_adapter=self.stripe)

            if strategy is None:
                self.logger.warning(
                    "No strategy for transfer type",
                    extra={"transfer_id": str(transfer.id), "type": transfer.type},
                )
            else:
                try:
                    result = strategy.execute(transfer, metadata)
                except StripeError as e:
                    self._record_failure(transfer, e)
                else:
                    if result is not None and result.id:
                        transfer.mark_created(result.id)

            transfer.save()

        return transfer

    # =========================================================================
    # Steps
    # =========================================================================

    @staticmethod
    def _load(transfer_id: uuid.UUID | str) -> Transfer:
        transfer = (
            Transfer.objects.select_related("account_mapping")
            .select_for_update(of=("self",))
            .filter(pk=transfer_id)
            .first()
        )
        if transfer is None:
            raise TransferInvariantError(
                f"Transfer {transfer_id} not found",
                error_code="TRANSFER_NOT_FOUND",
                details={"transfer_id": str(transfer_id)},
            )
        return transfer

    @staticmethod
    def _check_preconditions(transfer: Transfer) -> None:
        if transfer.is_created:
            raise TransferInvariantError(
                f"Transfer {transfer.id} was already created",
                error_code="TRANSFER_ALREADY_CREATED",
                details={
                    "transfer_id": str(transfer.id),
                    "stripe_transfer_id": transfer.stripe_transfer_id,
                },
            )
        if transfer.amount is None or not transfer.currency:
            raise TransferInvariantError(
                f"Transfer {transfer.id} has no amount or currency",
                error_code="TRANSFER_AMOUNT_MISSING",
                details={
                    "transfer_id": str(transfer.id),
                    "amount": transfer.amount,
                    "currency": transfer.currency,
                },
            )

    def _build_metadata(self, transfer: Transfer) -> dict[str, Any]:
        metadata: dict[str, Any] = {"marketplaceId": transfer.marketplace_id}

        if transfer.type == TransferType.PRODUCT_ORDER:
            orders = self.marketplace_client.list_orders_by_id(
                [transfer.marketplace_id]
            )
            order = orders.get(str(transfer.marketplace_id))
            if order is None:
                raise TransferInvariantError(
                    f"Mirakl order {transfer.marketplace_id} not found",
                    error_code="MARKETPLACE_ORDER_MISSING",
                    details={
                        "transfer_id": str(transfer.id),
                        "marketplace_id": transfer.marketplace_id,
                    },
                )
            metadata.update(
                {
                    ORDER_TAX_AMOUNT: order.tax_amount,
                    SHIPPING_TAX_AMOUNT: order.shipping_tax_amount,
                    COMMISSION_FEES: order.operator_commission,
                }
            )

        return metadata

    def _record_failure(self, transfer: Transfer, error: StripeError) -> None:
        self.logger.error(
            f"Could not create Stripe transfer: {error.message}.",
            extra={
                "marketplace_id": transfer.marketplace_id,
                "stripe_transfer_id": transfer.stripe_transfer_id,
                "transaction_id": transfer.transaction_id,
                "amount": transfer.amount,
                "stripe_code": error.stripe_code,
                "is_retryable": error.is_retryable,
            },
        )
        transfer.mark_failed(error.message)
