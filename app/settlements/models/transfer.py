"""
Transfer model for money movements on Stripe.

A Transfer is created in PENDING state by an upstream producer for one
Mirakl financial event (product order payout, subscription fee, refund...).
The transfer processor then turns it into exactly one Stripe call and
records the outcome.

Usage:
    from settlements.models import Transfer
    from settlements.state_machines import TransferType

    transfer = Transfer.objects.create(
        type=TransferType.PRODUCT_ORDER,
        marketplace_id="ORDER-42-A",
        transaction_id="ORDER-42-A",
        amount=1000,
        currency="eur",
        account_mapping=mapping,
    )

    # State transitions using django-fsm
    transfer.mark_created("tr_123")
    transfer.save()
"""

from __future__ import annotations

from django.db import models

from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin, VersionedModelMixin
from core.models import BaseModel

from settlements.state_machines import TransferStatus, TransferType

STATUS_REASON_MAX_LENGTH = 1024


class Transfer(UUIDPrimaryKeyMixin, VersionedModelMixin, BaseModel):
    """
    Represents one money movement on Stripe.

    State Flow:
        PENDING -> CREATED
        PENDING -> FAILED
        FAILED -> CREATED / FAILED (reprocessing)

    Fields:
        type: Kind of marketplace event being settled
        marketplace_id: Mirakl order or shop reference
        transaction_id: Idempotency key, or original transfer id for refunds
        stripe_transfer_id: Stripe id, set only once the transfer is CREATED
        amount: Amount in minor currency units
        currency: ISO 4217 currency code
        status: Current FSM state
        status_reason: Failure reason, set only when FAILED
        account_mapping: Seller account (required for every type but REFUND)
        version: Optimistic locking version

    Note:
        stripe_transfer_id is non-null exactly when status is CREATED,
        and status_reason is non-null only when status is FAILED.
    """

    # ==========================================================================
    # Identity
    # ==========================================================================

    type = models.CharField(
        max_length=20,
        choices=TransferType.choices,
        db_index=True,
        help_text="Kind of marketplace event this transfer settles",
    )

    marketplace_id = models.CharField(
        max_length=255,
        db_index=True,
        help_text="Mirakl order or shop reference",
    )

    transaction_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        db_index=True,
        help_text="Idempotency key, or the original Stripe transfer id for refunds",
    )

    stripe_transfer_id = models.CharField(
        max_length=255,
        null=True,
        blank=True,
        unique=True,
        help_text="Stripe object id returned on success (tr_xxx, py_xxx, trr_xxx)",
    )

    # ==========================================================================
    # Amount & Currency
    # ==========================================================================

    amount = models.PositiveBigIntegerField(
        null=True,
        blank=True,
        help_text="Amount in smallest currency unit (e.g., cents)",
    )

    currency = models.CharField(
        max_length=3,
        null=True,
        blank=True,
        help_text="ISO 4217 currency code",
    )

    # ==========================================================================
    # State
    # ==========================================================================

    status = FSMField(
        default=TransferStatus.PENDING,
        choices=TransferStatus.choices,
        db_index=True,
        protected=True,
        help_text="Current state of the transfer (managed by FSM)",
    )

    status_reason = models.CharField(
        max_length=STATUS_REASON_MAX_LENGTH,
        null=True,
        blank=True,
        help_text="Why the last processing attempt failed",
    )

    # ==========================================================================
    # Relationships
    # ==========================================================================

    account_mapping = models.ForeignKey(
        "settlements.AccountMapping",
        on_delete=models.PROTECT,
        related_name="transfers",
        null=True,
        blank=True,
        help_text="Seller account involved. Null for refunds.",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Transfer"
        verbose_name_plural = "Transfers"
        indexes = [
            models.Index(fields=["type", "status"], name="transfer_type_status_idx"),
        ]

    def __str__(self) -> str:
        """Return string representation with ID, type, status and amount."""
        return f"Transfer({self.id}, {self.type}, {self.status}, {self.amount} {self.currency})"

    # ==========================================================================
    # State Transitions (django-fsm)
    # ==========================================================================

    @transition(
        field=status,
        source=[TransferStatus.PENDING, TransferStatus.FAILED],
        target=TransferStatus.CREATED,
    )
    def mark_created(self, stripe_transfer_id: str):
        """
        Record a successful Stripe call.

        Transition: PENDING/FAILED -> CREATED
        """
        self.stripe_transfer_id = stripe_transfer_id
        self.status_reason = None

    @transition(
        field=status,
        source=[TransferStatus.PENDING, TransferStatus.FAILED],
        target=TransferStatus.FAILED,
    )
    def mark_failed(self, reason: str):
        """
        Record a failed Stripe call.

        Transition: PENDING/FAILED -> FAILED

        The reason is truncated to fit the column. stripe_transfer_id is
        left as it is.
        """
        self.status_reason = reason[:STATUS_REASON_MAX_LENGTH]

    # ==========================================================================
    # Properties
    # ==========================================================================

    @property
    def is_created(self) -> bool:
        return self.status == TransferStatus.CREATED

    @property
    def can_reprocess(self) -> bool:
        """Failed transfers can be sent through the processor again."""
        return self.status == TransferStatus.FAILED
