"""
Celery application for the merchandising backend.

DJANGO_SETTINGS_MODULE is set before the app is created so Celery reads the
Django settings (``CELERY_`` prefix), including the outbox relay schedule.
"""

import os

from celery import Celery

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

app = Celery("merchandising")

app.config_from_object("django.conf:settings", namespace="CELERY")

# Finds tasks.py in every installed app (core.relay_outbox_events)
app.autodiscover_tasks()
