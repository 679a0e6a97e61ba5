"""
State machine enums for settlement models.

This module defines the enums used by settlement models with django-fsm.
"""

from settlements.state_machines.states import TransferStatus, TransferType

__all__ = [
    "TransferStatus",
    "TransferType",
]
