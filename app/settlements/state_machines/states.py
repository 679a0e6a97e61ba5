"""
State enums for settlement models.

These are Django TextChoices for database storage and admin integration.

Transfer States:
    pending → created
    pending → failed → created (manual reprocessing)
    failed → failed (reprocessing failed again)

CREATED is terminal: a transfer that reached it is never processed again.
"""

from django.db import models


class TransferStatus(models.TextChoices):
    """
    States for the Transfer model lifecycle.

    Terminal states: CREATED

    State Flow:
        PENDING → CREATED
        PENDING → FAILED
        FAILED → CREATED / FAILED (reprocessing)
    """

    PENDING = "pending", "Pending"
    CREATED = "created", "Created"
    FAILED = "failed", "Failed"


class TransferType(models.TextChoices):
    """
    Kind of marketplace financial event a Transfer settles.

    Determines which Stripe operation a transfer is dispatched to:
    - PRODUCT_ORDER, SERVICE_ORDER, EXTRA_CREDITS: platform pays the seller
    - SUBSCRIPTION, EXTRA_INVOICES: seller pays the platform
    - REFUND: reversal of a transfer that was already created
    """

    PRODUCT_ORDER = "product_order", "Product Order"
    SERVICE_ORDER = "service_order", "Service Order"
    EXTRA_CREDITS = "extra_credits", "Extra Credits"
    SUBSCRIPTION = "subscription", "Subscription"
    EXTRA_INVOICES = "extra_invoices", "Extra Invoices"
    REFUND = "refund", "Refund"


__all__ = [
    "TransferStatus",
    "TransferType",
]
