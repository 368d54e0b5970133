"""
Celery configuration for Taskboard.
"""
import os
from celery import Celery
from celery.schedules import crontab

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

app = Celery('config')
app.config_from_object('django.conf:settings', namespace='CELERY')
app.autodiscover_tasks()

# Celery Beat Schedule
app.conf.beat_schedule = {
    'reconcile-memberships': {
        'task': 'apps.organizations.tasks.reconcile_memberships',
        'schedule': crontab(minute='15'),  # Hourly
    },
}
