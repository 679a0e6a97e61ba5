"""
Settlement domain models.

This module contains all settlement-related models:
- AccountMapping: Link between a Mirakl shop and its Stripe connected account
- Transfer: One money movement on Stripe for a marketplace financial event
"""

from settlements.models.account_mapping import AccountMapping
from settlements.models.transfer import STATUS_REASON_MAX_LENGTH, Transfer

__all__ = [
    "AccountMapping",
    "STATUS_REASON_MAX_LENGTH",
    "Transfer",
]
