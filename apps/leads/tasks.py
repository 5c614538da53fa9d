import logging

from celery import shared_task
from django.utils import timezone

from .models import Activity, FollowUp

logger = logging.getLogger(__name__)


@shared_task
def send_follow_up_reminders():
    """Log one reminder activity for every overdue follow-up"""
    now = timezone.now()
    follow_ups = FollowUp.objects.filter(
        status='pending',
        due_at__lte=now,
        reminder_sent_at__isnull=True,
    ).select_related('lead')

    reminders_sent = 0

    for follow_up in follow_ups:
        Activity.objects.create(
            lead=follow_up.lead,
            user=None,
            activity_type='follow_up_reminder',
            description=f'Follow-up overdue for lead "{follow_up.lead.company_name}": {follow_up.description[:100]}'
        )
        follow_up.reminder_sent_at = now
        follow_up.save(update_fields=['reminder_sent_at', 'updated_at'])
        reminders_sent += 1

    if reminders_sent:
        logger.info(f"{reminders_sent} follow-up reminders logged")
    return f'{reminders_sent} follow-up reminders sent.'
