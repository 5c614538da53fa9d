# Celery is a distributed task queue for running background jobs
#
# - Recompute draft payslips from approved work logs (nightly)
# - Log reminders for overdue lead follow-ups (every 15 minutes)
#
# Start worker: celery -A config worker -l info
# Start beat: celery -A config beat -l info
# ==============================================================================

import os
from celery import Celery
from celery.schedules import crontab

# Set the default Django settings module for Celery
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings')

# 'peoplecrm' is the app name (appears in logs and monitoring)
app = Celery('peoplecrm')

# All settings prefixed with 'CELERY_' will be used
# Example: CELERY_BROKER_URL, CELERY_RESULT_BACKEND
app.config_from_object('django.conf:settings', namespace='CELERY')

# Looks for tasks.py file in each installed app (apps/payroll/tasks.py, apps/leads/tasks.py)
app.autodiscover_tasks()


# CELERY BEAT SCHEDULE (Periodic Tasks)
app.conf.beat_schedule = {
    # Pick up work logs approved during the day
    'refresh-draft-payslips': {
        'task': 'apps.payroll.tasks.refresh_draft_payslips',
        'schedule': crontab(hour=2, minute=30),  # Every day at 2:30 AM
    },
    # Overdue follow-ups show up in the lead's activity log
    'send-follow-up-reminders': {
        'task': 'apps.leads.tasks.send_follow_up_reminders',
        'schedule': crontab(minute='*/15'),  # Every 15 minutes
    },
}


# CELERY TASK ANNOTATIONS
app.conf.task_annotations = {
    'apps.payroll.tasks.refresh_draft_payslips': {
        'time_limit': 600,  # 10 minutes
        'soft_time_limit': 540,  # 9 minutes
    },
}
