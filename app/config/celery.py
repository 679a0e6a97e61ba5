"""
Celery configuration for the settlement connector.

Redis is used as both the message broker and result backend. Tasks are
auto-discovered from the installed Django apps (settlements.tasks).

Usage:
    from settlements.tasks import process_transfer

    process_transfer.delay(str(transfer.id))

For more information, see:
https://docs.celeryq.dev/en/stable/django/first-steps-with-django.html
"""

import os

from celery import Celery

# Set the default Django settings module for the Celery worker
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("config")

# All Celery settings are prefixed with CELERY_ in settings.py
app.config_from_object("django.conf:settings", namespace="CELERY")

app.autodiscover_tasks()
