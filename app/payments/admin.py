"""
Payment admin configuration.

Transactions and callback events are audit records: status changes go
through the service layer, so the admin only reads them (plus clearing the
review flag). Merchants are managed here.
"""

from django.contrib import admin, messages

from payments.models import (
    CallbackEvent,
    Merchant,
    MerchantPaymentLedger,
    PaymentTransaction,
)

__all__ = [
    "CallbackEventAdmin",
    "MerchantAdmin",
    "MerchantPaymentLedgerAdmin",
    "PaymentTransactionAdmin",
]


@admin.register(Merchant)
class MerchantAdmin(admin.ModelAdmin):
    list_display = ["merchant_id", "name", "status", "created_at"]
    list_filter = ["status"]
    search_fields = ["merchant_id", "name"]
    readonly_fields = ["id", "created_at", "updated_at"]
    ordering = ["merchant_id"]


@admin.register(PaymentTransaction)
class PaymentTransactionAdmin(admin.ModelAdmin):
    """
    Admin configuration for PaymentTransaction.

    Provides visibility into transaction states and gateway metadata.
    The status field is FSM-protected and never editable here.
    """

    list_display = [
        "txnid",
        "status",
        "amount",
        "merchant_display",
        "hash_verified",
        "flagged_for_review",
        "created_at",
        "updated_at",
    ]
    list_filter = ["status", "hash_verified", "flagged_for_review", "created_at"]
    search_fields = ["txnid", "email", "gateway_txn_id", "bank_ref_num"]
    readonly_fields = [
        "id",
        "txnid",
        "status",
        "amount",
        "udfs",
        "productinfo",
        "firstname",
        "email",
        "phone",
        "hash",
        "hash_verified",
        "gateway_txn_id",
        "access_key",
        "bank_ref_num",
        "bank_code",
        "bank_name",
        "issuing_bank",
        "card_type",
        "payment_mode",
        "payment_source",
        "auth_code",
        "error_message",
        "raw_response",
        "version",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]
    actions = ["clear_review_flag"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "txnid", "status", "amount", "flagged_for_review"),
            },
        ),
        (
            "Customer",
            {
                "fields": ("productinfo", "firstname", "email", "phone", "udfs"),
            },
        ),
        (
            "Authentication",
            {
                "fields": ("hash", "hash_verified"),
                "classes": ("collapse",),
            },
        ),
        (
            "Gateway",
            {
                "fields": (
                    "gateway_txn_id",
                    "access_key",
                    "bank_ref_num",
                    "bank_code",
                    "bank_name",
                    "issuing_bank",
                    "card_type",
                    "payment_mode",
                    "payment_source",
                    "auth_code",
                    "error_message",
                ),
            },
        ),
        (
            "Raw Response",
            {
                "fields": ("raw_response",),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at", "version"),
            },
        ),
    )

    def merchant_display(self, obj: PaymentTransaction) -> str:
        return obj.merchant_id or "-"

    merchant_display.short_description = "Merchant"

    @admin.action(description="Clear review flag")
    def clear_review_flag(self, request, queryset):
        updated = queryset.filter(flagged_for_review=True).update(flagged_for_review=False)
        self.message_user(request, f"Cleared review flag on {updated} transaction(s).", messages.SUCCESS)

    def has_add_permission(self, request) -> bool:
        """Transactions are created by initiation and callbacks only."""
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for transactions (audit trail)."""
        return False


@admin.register(CallbackEvent)
class CallbackEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for CallbackEvent.

    Callback events are immutable once received.
    """

    list_display = [
        "id",
        "txnid",
        "channel",
        "gateway_status",
        "hash_verified",
        "hash_layout",
        "status",
        "resulting_status",
        "created_at",
    ]
    list_filter = ["channel", "status", "hash_verified", "created_at"]
    search_fields = ["id", "txnid"]
    readonly_fields = [
        "id",
        "txnid",
        "channel",
        "gateway_status",
        "hash_verified",
        "hash_layout",
        "status",
        "resulting_status",
        "processed_at",
        "error_message",
        "payload",
        "created_at",
        "updated_at",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_add_permission(self, request) -> bool:
        return False

    def has_change_permission(self, request, obj=None) -> bool:
        return False

    def has_delete_permission(self, request, obj=None) -> bool:
        """Disable delete for callback events (audit trail)."""
        return False


@admin.register(MerchantPaymentLedger)
class MerchantPaymentLedgerAdmin(admin.ModelAdmin):
    list_display = [
        "txnid",
        "merchant",
        "order_id",
        "amount",
        "status",
        "settlement_status",
        "created_at",
    ]
    list_filter = ["status", "settlement_status", "merchant"]
    search_fields = ["txnid", "order_id", "merchant__merchant_id"]
    readonly_fields = [
        "id",
        "merchant",
        "txnid",
        "order_id",
        "amount",
        "status",
        "payment_mode",
        "bank_ref_num",
        "gateway_txn_id",
        "created_at",
        "updated_at",
    ]
    ordering = ["-created_at"]

    def has_add_permission(self, request) -> bool:
        return False
