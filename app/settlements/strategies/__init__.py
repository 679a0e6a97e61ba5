"""
Transfer strategies, one per direction of money movement.

STRATEGIES maps every TransferType to the strategy that executes it:

    PRODUCT_ORDER, SERVICE_ORDER, EXTRA_CREDITS -> PlatformToSellerTransferStrategy
    SUBSCRIPTION, EXTRA_INVOICES                -> SellerToPlatformTransferStrategy
    REFUND                                      -> TransferReversalStrategy

Usage:
    from settlements.strategies import get_strategy

    strategy = get_strategy(transfer.type)
    result = strategy.execute(transfer, {"marketplaceId": transfer.marketplace_id})
"""

from __future__ import annotations

from settlements.state_machines import TransferType
from settlements.strategies.base import ConnectedAccountStrategy, TransferStrategy
from settlements.strategies.platform_to_seller import PlatformToSellerTransferStrategy
from settlements.strategies.reversal import TransferReversalStrategy
from settlements.strategies.seller_to_platform import SellerToPlatformTransferStrategy

STRATEGIES: dict[str, type[TransferStrategy]] = {
    TransferType.PRODUCT_ORDER: PlatformToSellerTransferStrategy,
    TransferType.SERVICE_ORDER: PlatformToSellerTransferStrategy,
    TransferType.EXTRA_CREDITS: PlatformToSellerTransferStrategy,
    TransferType.SUBSCRIPTION: SellerToPlatformTransferStrategy,
    TransferType.EXTRA_INVOICES: SellerToPlatformTransferStrategy,
    TransferType.REFUND: TransferReversalStrategy,
}


def get_strategy(
    transfer_type: str, stripe_adapter: type | None = None
) -> TransferStrategy | None:
    """
    Build the strategy for a transfer type.

    Returns None for a type with no strategy.
    """
    strategy_class = STRATEGIES.get(transfer_type)
    if strategy_class is None:
        return None
    return strategy_class(stripe_adapter=stripe_adapter)


__all__ = [
    "ConnectedAccountStrategy",
    "PlatformToSellerTransferStrategy",
    "STRATEGIES",
    "SellerToPlatformTransferStrategy",
    "TransferReversalStrategy",
    "TransferStrategy",
    "get_strategy",
]
