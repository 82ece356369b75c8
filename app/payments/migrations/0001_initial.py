import uuid

import django.db.models.deletion
import django_fsm
from django.db import migrations, models

import payments.models.transaction


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Merchant",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "merchant_id",
                    models.CharField(
                        help_text="Public merchant identifier, sent to the gateway as udf1",
                        max_length=64,
                        unique=True,
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                (
                    "salt",
                    models.CharField(
                        help_text="Shared secret used as the last field of both hash directions",
                        max_length=255,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("ACTIVE", "Active"), ("INACTIVE", "Inactive")],
                        db_index=True,
                        default="ACTIVE",
                        max_length=10,
                    ),
                ),
            ],
            options={
                "verbose_name": "Merchant",
                "verbose_name_plural": "Merchants",
                "ordering": ["merchant_id"],
            },
        ),
        migrations.CreateModel(
            name="PaymentTransaction",
            fields=[
                (
                    "version",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Version for optimistic locking - incremented on each save",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "txnid",
                    models.CharField(
                        help_text="Transaction ID shared with the gateway (unique, immutable)",
                        max_length=64,
                        unique=True,
                    ),
                ),
                (
                    "udfs",
                    models.JSONField(
                        default=payments.models.transaction.empty_udfs,
                        help_text="User-defined fields udf1..udf10 (udf1 = merchant, udf2 = order)",
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Payment amount; empty only when a callback carried an unreadable amount",
                        max_digits=12,
                        null=True,
                    ),
                ),
                ("productinfo", models.CharField(blank=True, default="", max_length=255)),
                ("firstname", models.CharField(blank=True, default="", max_length=150)),
                ("email", models.CharField(blank=True, default="", max_length=254)),
                ("phone", models.CharField(blank=True, default="", max_length=20)),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("INITIATED", "Initiated"),
                            ("PROCESSING", "Processing"),
                            ("SUCCESS", "Success"),
                            ("FAILED", "Failed"),
                            ("HASH_MISMATCH", "Hash Mismatch"),
                        ],
                        db_index=True,
                        default="INITIATED",
                        help_text="Current status of the transaction (managed by FSM)",
                        max_length=50,
                        protected=True,
                    ),
                ),
                (
                    "hash",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Forward digest sent at initiation, or the digest received on callback",
                        max_length=256,
                    ),
                ),
                (
                    "hash_verified",
                    models.BooleanField(
                        default=False,
                        help_text="Whether the last callback's digest authenticated",
                    ),
                ),
                (
                    "flagged_for_review",
                    models.BooleanField(
                        db_index=True,
                        default=False,
                        help_text="Hash mismatch or conflicting gateway outcomes; needs manual review",
                    ),
                ),
                (
                    "gateway_txn_id",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Gateway's own transaction id (easepayid)",
                        max_length=100,
                    ),
                ),
                (
                    "access_key",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Access key returned by the gateway at initiation",
                        max_length=255,
                    ),
                ),
                ("bank_ref_num", models.CharField(blank=True, default="", max_length=100)),
                ("bank_code", models.CharField(blank=True, default="", max_length=50)),
                ("bank_name", models.CharField(blank=True, default="", max_length=150)),
                ("issuing_bank", models.CharField(blank=True, default="", max_length=150)),
                ("card_type", models.CharField(blank=True, default="", max_length=50)),
                ("payment_mode", models.CharField(blank=True, default="", max_length=50)),
                ("payment_source", models.CharField(blank=True, default="", max_length=100)),
                ("auth_code", models.CharField(blank=True, default="", max_length=100)),
                (
                    "error_message",
                    models.TextField(
                        blank=True,
                        default="",
                        help_text="Gateway error text, or the reconciliation annotation",
                    ),
                ),
                (
                    "raw_response",
                    models.JSONField(
                        blank=True,
                        default=dict,
                        help_text="Last gateway payload, empty values removed (audit only)",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        db_index=True,
                        help_text="When the row was first written; never changes",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(help_text="When the row was last written"),
                ),
            ],
            options={
                "verbose_name": "Payment Transaction",
                "verbose_name_plural": "Payment Transactions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["status", "created_at"],
                        name="payments_pa_status_8c1f2e_idx",
                    )
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gte", 0), ("amount__isnull", True), _connector="OR"),
                        name="payment_transaction_amount_not_negative",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="CallbackEvent",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("txnid", models.CharField(blank=True, db_index=True, max_length=64)),
                (
                    "channel",
                    models.CharField(
                        choices=[
                            ("webhook", "Webhook"),
                            ("redirect_success", "Redirect (success page)"),
                            ("redirect_failure", "Redirect (failure page)"),
                        ],
                        db_index=True,
                        max_length=20,
                    ),
                ),
                ("gateway_status", models.CharField(blank=True, default="", max_length=50)),
                ("hash_verified", models.BooleanField(default=False)),
                (
                    "hash_layout",
                    models.CharField(
                        blank=True,
                        choices=[("standard", "10 UDF slots"), ("legacy", "5 UDF slots (legacy)")],
                        default="",
                        help_text="Reverse-hash layout that matched; empty on mismatch",
                        max_length=10,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("received", "Received"),
                            ("processed", "Processed"),
                            ("failed", "Failed"),
                        ],
                        db_index=True,
                        default="received",
                        max_length=10,
                    ),
                ),
                ("resulting_status", models.CharField(blank=True, default="", max_length=20)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, default="")),
                ("payload", models.JSONField(default=dict)),
            ],
            options={
                "verbose_name": "Callback Event",
                "verbose_name_plural": "Callback Events",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["txnid", "created_at"],
                        name="payments_ca_txnid_5b7d1a_idx",
                    )
                ],
            },
        ),
        migrations.CreateModel(
            name="MerchantPaymentLedger",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for this record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("txnid", models.CharField(db_index=True, max_length=64)),
                ("order_id", models.CharField(blank=True, default="", max_length=100)),
                (
                    "amount",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("INITIATED", "Initiated"),
                            ("PROCESSING", "Processing"),
                            ("SUCCESS", "Success"),
                            ("FAILED", "Failed"),
                            ("HASH_MISMATCH", "Hash Mismatch"),
                        ],
                        max_length=20,
                    ),
                ),
                ("payment_mode", models.CharField(blank=True, default="", max_length=50)),
                ("bank_ref_num", models.CharField(blank=True, default="", max_length=100)),
                ("gateway_txn_id", models.CharField(blank=True, default="", max_length=100)),
                (
                    "settlement_status",
                    models.CharField(
                        choices=[("PENDING", "Pending"), ("SETTLED", "Settled")],
                        db_index=True,
                        default="PENDING",
                        max_length=10,
                    ),
                ),
                ("notes", models.TextField(blank=True, default="")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="ledger_entries",
                        to="payments.merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "Merchant Ledger Entry",
                "verbose_name_plural": "Merchant Ledger Entries",
                "ordering": ["-created_at"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("merchant", "txnid"),
                        name="unique_ledger_entry_per_merchant_txn",
                    )
                ],
            },
        ),
    ]
