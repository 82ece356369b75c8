"""
Seed the merchants used by local development and the sandbox gateway.

Existing merchants with the same merchant_id are left untouched.
"""

from django.db import migrations

SEED_MERCHANTS = [
    ("M123", "Test Merchant", "secret_salt_key_123", "ACTIVE"),
    ("M456", "Production Merchant", "prod_salt_key_456", "ACTIVE"),
    ("M789", "Inactive Merchant", "inactive_salt_key_789", "INACTIVE"),
]


def seed_merchants(apps, schema_editor):
    Merchant = apps.get_model("payments", "Merchant")

    for merchant_id, name, salt, status in SEED_MERCHANTS:
        Merchant.objects.get_or_create(
            merchant_id=merchant_id,
            defaults={"name": name, "salt": salt, "status": status},
        )


def remove_merchants(apps, schema_editor):
    Merchant = apps.get_model("payments", "Merchant")

    Merchant.objects.filter(
        merchant_id__in=[merchant_id for merchant_id, *_ in SEED_MERCHANTS],
        ledger_entries__isnull=True,
    ).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0002_add_stale_transaction_sweep_schedule"),
    ]

    operations = [
        migrations.RunPython(seed_merchants, remove_merchants),
    ]
