"""
Settlement services.

Usage:
    from settlements.services import SellerOnboardingService, TransferProcessor
"""

from settlements.services.seller_onboarding import SellerOnboardingService
from settlements.services.transfer_processor import TransferProcessor

__all__ = [
    "SellerOnboardingService",
    "TransferProcessor",
]
