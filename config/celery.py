"""
Stockroom — Celery Application

Workers and beat read their configuration from Django settings
(CELERY_* keys) and discover tasks.py in every installed app.

@file config/celery.py
"""

import os

from celery import Celery

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.development')

app = Celery('stockroom')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()
