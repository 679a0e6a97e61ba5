"""
Settlement admin configuration.

Transfers and account mappings are created by the settlement services,
so the admin is for inspection. Failed transfers can be sent back to
the processor with the "Reprocess" action.
"""

from django.contrib import admin

from settlements.models import AccountMapping, Transfer
from settlements.tasks import process_transfer

__all__ = [
    "AccountMappingAdmin",
    "TransferAdmin",
]

# Currencies Stripe expresses without minor units
ZERO_DECIMAL_CURRENCIES = frozenset(
    {
        "BIF",
        "CLP",
        "DJF",
        "GNF",
        "JPY",
        "KMF",
        "KRW",
        "MGA",
        "PYG",
        "RWF",
        "UGX",
        "VND",
        "VUV",
        "XAF",
        "XOF",
        "XPF",
    }
)


@admin.register(AccountMapping)
class AccountMappingAdmin(admin.ModelAdmin):
    """
    Admin configuration for AccountMapping.

    Only the ignored flag is editable; everything else mirrors Stripe.
    """

    list_display = [
        "marketplace_shop_id",
        "stripe_account_id",
        "payout_enabled",
        "payin_enabled",
        "ignored",
        "created_at",
    ]
    list_filter = ["payout_enabled", "payin_enabled", "ignored"]
    search_fields = ["=marketplace_shop_id", "stripe_account_id"]
    readonly_fields = [
        "id",
        "marketplace_shop_id",
        "stripe_account_id",
        "payout_enabled",
        "payin_enabled",
        "disabled_reason",
        "onboarding_token",
        "created_at",
        "updated_at",
        "version",
    ]
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "marketplace_shop_id", "stripe_account_id", "ignored"),
            },
        ),
        (
            "Stripe status",
            {
                "fields": ("payout_enabled", "payin_enabled", "disabled_reason"),
            },
        ),
        (
            "Onboarding",
            {
                "fields": ("onboarding_token", "version"),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
            },
        ),
    )

    def has_add_permission(self, request) -> bool:
        """Mappings are created with their Stripe account, not by hand."""
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        return False


@admin.register(Transfer)
class TransferAdmin(admin.ModelAdmin):
    """
    Admin configuration for Transfer.

    Status is managed by the FSM and never edited here.
    """

    list_display = [
        "id",
        "type",
        "marketplace_id",
        "amount_display",
        "status",
        "stripe_transfer_id",
        "created_at",
    ]
    list_filter = ["status", "type", "currency"]
    search_fields = [
        "=id",
        "marketplace_id",
        "transaction_id",
        "stripe_transfer_id",
        "=account_mapping__marketplace_shop_id",
    ]
    readonly_fields = [
        "id",
        "type",
        "marketplace_id",
        "transaction_id",
        "stripe_transfer_id",
        "amount",
        "currency",
        "status",
        "status_reason",
        "account_mapping",
        "created_at",
        "updated_at",
        "version",
    ]
    list_select_related = ["account_mapping"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    actions = ["reprocess_failed"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "type", "status", "status_reason"),
            },
        ),
        (
            "References",
            {
                "fields": (
                    "marketplace_id",
                    "transaction_id",
                    "stripe_transfer_id",
                    "account_mapping",
                ),
            },
        ),
        (
            "Amount",
            {
                "fields": ("amount", "currency"),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at", "version"),
            },
        ),
    )

    def amount_display(self, obj: Transfer) -> str:
        """Display the amount in major units."""
        if obj.amount is None:
            return "-"
        currency = (obj.currency or "").upper()
        if currency in ZERO_DECIMAL_CURRENCIES:
            return f"{obj.amount} {currency}"
        return f"{obj.amount / 100:.2f} {currency}"

    amount_display.short_description = "Amount"

    @admin.action(description="Reprocess selected failed transfers")
    def reprocess_failed(self, request, queryset):
        """Queue failed transfers for processing; other states are skipped."""
        transfer_ids = [transfer.id for transfer in queryset if transfer.can_reprocess]
        for transfer_id in transfer_ids:
            process_transfer.delay(str(transfer_id))
        self.message_user(request, f"Queued {len(transfer_ids)} transfers for reprocessing.")

    def has_add_permission(self, request) -> bool:
        """Transfers are created by the upstream producer."""
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for transfers (audit trail)."""
        return False
