"""
Add celery-beat schedule for the stale-transaction reconciliation sweep.

This migration creates the periodic task schedule for the
sweep_stale_transactions task, which runs every hour and fails
transactions the gateway never confirmed.
"""

from django.db import migrations

TASK_NAME = "Sweep Stale Payment Transactions"


def create_periodic_task(apps, schema_editor):
    """Create the periodic task for the reconciliation sweep."""
    IntervalSchedule = apps.get_model("django_celery_beat", "IntervalSchedule")
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    schedule, _ = IntervalSchedule.objects.get_or_create(
        every=1,
        period="hours",
    )

    PeriodicTask.objects.get_or_create(
        name=TASK_NAME,
        defaults={
            "task": "payments.tasks.sweep_stale_transactions",
            "interval": schedule,
            "enabled": True,
            "description": (
                "Marks INITIATED/PROCESSING transactions older than "
                "RECONCILIATION_STALE_MINUTES as FAILED."
            ),
        },
    )


def remove_periodic_task(apps, schema_editor):
    """Remove the periodic task on migration rollback."""
    PeriodicTask = apps.get_model("django_celery_beat", "PeriodicTask")

    PeriodicTask.objects.filter(name=TASK_NAME).delete()


class Migration(migrations.Migration):
    dependencies = [
        ("payments", "0001_initial"),
        ("django_celery_beat", "0019_alter_periodictasks_options"),
    ]

    operations = [
        migrations.RunPython(create_periodic_task, remove_periodic_task),
    ]
