"""
Lead Task Tests
===============

Test Coverage:
1. send_follow_up_reminders - overdue follow-ups logged once, future and completed ones skipped

Run tests:
    python manage.py test apps.leads.tests.test_tasks --settings=config.settings_test
"""

from datetime import timedelta

from django.test import TestCase
from django.utils import timezone

from apps.leads.models import Activity, FollowUp
from apps.leads.tasks import send_follow_up_reminders
from .test_models import LeadTestMixin


class SendFollowUpRemindersTaskTest(LeadTestMixin, TestCase):

    def make_follow_up(self, due_at, **kwargs):
        return FollowUp.objects.create(company=self.company, lead=self.lead, description='Call back',
                                       due_at=due_at, **kwargs)

    def test_overdue_follow_up_logged_once(self):
        """
        Test: one overdue follow-up, task runs twice

        Expected: a single reminder activity
        """
        follow_up = self.make_follow_up(timezone.now() - timedelta(hours=2))

        self.assertEqual(send_follow_up_reminders(), '1 follow-up reminders sent.')
        self.assertEqual(send_follow_up_reminders(), '0 follow-up reminders sent.')

        follow_up.refresh_from_db()
        self.assertIsNotNone(follow_up.reminder_sent_at)
        self.assertEqual(Activity.objects.filter(lead=self.lead, activity_type='follow_up_reminder').count(), 1)

    def test_future_and_completed_skipped(self):
        self.make_follow_up(timezone.now() + timedelta(days=1))
        self.make_follow_up(timezone.now() - timedelta(days=1), status='completed')

        self.assertEqual(send_follow_up_reminders(), '0 follow-up reminders sent.')
