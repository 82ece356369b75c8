"""
Celery configuration for the payment broker.

Celery runs the periodic work of the project. The only scheduled job is the
stale-transaction reconciliation sweep; its schedule lives in the database
(django-celery-beat DatabaseScheduler) and is created by a payments data
migration, so operators can change the interval from the admin.

Usage:
    # Worker and beat, from app/
    celery -A config worker -l info
    celery -A config beat -l info

    # Run one sweep by hand
    from payments.tasks import sweep_stale_transactions
    sweep_stale_transactions.delay()

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
