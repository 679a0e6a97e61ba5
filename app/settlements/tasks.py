"""
Celery tasks for settlement processing.

process_transfer is the handler of the inbound "process this transfer"
instruction. It does not retry on its own: Stripe failures are recorded
on the transfer by the processor, and any other error propagates so the
broker's redelivery policy applies (acks_late).

Usage:
    from settlements.tasks import process_transfer

    process_transfer.delay(str(transfer.id))
"""

from __future__ import annotations

import logging
from uuid import UUID

from celery import shared_task

from settlements.exceptions import TransferInvariantError
from settlements.services import TransferProcessor

logger = logging.getLogger(__name__)


@shared_task(bind=True, acks_late=True)
def process_transfer(self, transfer_id: str) -> dict:
    """
    Process one Transfer.

    Args:
        transfer_id: UUID of the Transfer to process

    Returns:
        Dict with the resulting transfer status

    Raises:
        TransferInvariantError: Transfer cannot be processed (logged)
        MarketplaceAPIError: Mirakl order lookup failed
    """
    if isinstance(transfer_id, str):
        transfer_id = UUID(transfer_id)

    logger.info(
        "Processing transfer",
        extra={"transfer_id": str(transfer_id), "task_id": self.request.id},
    )

    try:
        with TransferProcessor() as processor:
            transfer = processor.process(transfer_id)
    except TransferInvariantError as e:
        logger.error(
            "Transfer rejected",
            extra={"transfer_id": str(transfer_id), **e.to_dict()},
        )
        raise

    logger.info(
        "Transfer processed",
        extra={
            "transfer_id": str(transfer.id),
            "status": transfer.status,
            "stripe_transfer_id": transfer.stripe_transfer_id,
        },
    )

    return {
        "status": transfer.status,
        "transfer_id": str(transfer.id),
        "stripe_transfer_id": transfer.stripe_transfer_id,
        "status_reason": transfer.status_reason,
    }
