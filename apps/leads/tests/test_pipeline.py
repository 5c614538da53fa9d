"""
Pipeline Engine Tests
=====================

Test Coverage:
1. transition_lead_stage - move, no-op, stale state, foreign stage, db failure
2. compute_stage_metrics - cold start, counts, dwell time, conversion, date range
3. compute_pipeline_summary
4. PipelineBoard / PendingMove - local move, confirm, rollback

Run tests:
    python manage.py test apps.leads.tests.test_pipeline --settings=config.settings_test
"""

from datetime import date, datetime, timedelta, timezone as dt_timezone
from unittest.mock import patch

from django.core.exceptions import ValidationError
from django.db import DatabaseError
from django.test import SimpleTestCase, TestCase

from apps.core.exceptions import PersistenceError, StaleStateError
from apps.core.models import Company
from apps.leads.models import Lead, LeadStage, StageHistory
from apps.leads.pipeline import (
    PipelineBoard,
    compute_pipeline_summary,
    compute_stage_metrics,
    format_dwell_time,
    transition_lead_stage,
)
from .test_models import LeadTestMixin

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=dt_timezone.utc)


class FormatDwellTimeTest(SimpleTestCase):

    def test_no_samples(self):
        self.assertEqual(format_dwell_time(None), 'N/A')

    def test_hours_below_one_day(self):
        self.assertEqual(format_dwell_time(timedelta(hours=5, minutes=59)), '5 hours')
        self.assertEqual(format_dwell_time(timedelta(minutes=30)), '0 hours')

    def test_whole_days(self):
        self.assertEqual(format_dwell_time(timedelta(days=2, hours=23)), '2 days')
        self.assertEqual(format_dwell_time(timedelta(days=1)), '1 days')


class TransitionLeadStageTest(LeadTestMixin, TestCase):

    def test_move(self):
        history = transition_lead_stage(self.company, self.lead.pk, self.new.pk, self.contacted.pk,
                                        actor=self.user, notes='Called back')

        self.lead.refresh_from_db()
        self.assertEqual(self.lead.current_stage, self.contacted)
        self.assertEqual(history.from_stage, self.new)
        self.assertEqual(history.to_stage, self.contacted)
        self.assertEqual(history.changed_by, self.user)
        self.assertEqual(history.notes, 'Called back')
        self.assertEqual(history.company, self.company)

    def test_same_stage_is_noop(self):
        result = transition_lead_stage(self.company, self.lead.pk, self.new.pk, self.new.pk, actor=self.user)

        self.assertIsNone(result)
        self.assertFalse(StageHistory.objects.exists())

    def test_stale_from_stage(self):
        """
        Test: Drag made against a stage the lead already left

        Expected: StaleStateError, no history row, lead unchanged
        """
        with self.assertRaises(StaleStateError):
            transition_lead_stage(self.company, self.lead.pk, self.contacted.pk, self.qualified.pk, actor=self.user)

        self.lead.refresh_from_db()
        self.assertEqual(self.lead.current_stage, self.new)
        self.assertFalse(StageHistory.objects.exists())

    def test_stage_of_other_company_rejected(self):
        other = Company.objects.create(name='Other Co', slug='other')
        foreign_stage = LeadStage.objects.create(company=other, name='Won', order_index=5)

        with self.assertRaises(ValidationError):
            transition_lead_stage(self.company, self.lead.pk, self.new.pk, foreign_stage.pk)

        self.lead.refresh_from_db()
        self.assertEqual(self.lead.current_stage, self.new)
        self.assertFalse(StageHistory.objects.exists())

    def test_lead_of_other_company_not_found(self):
        other = Company.objects.create(name='Other Co', slug='other')

        with self.assertRaises(Lead.DoesNotExist):
            transition_lead_stage(other, self.lead.pk, self.new.pk, self.contacted.pk)

    def test_database_error_surfaces_as_persistence_error(self):
        with patch('apps.leads.pipeline.StageHistory.objects.create', side_effect=DatabaseError('disk full')):
            with self.assertRaises(PersistenceError) as ctx:
                transition_lead_stage(self.company, self.lead.pk, self.new.pk, self.contacted.pk)

        self.assertIsInstance(ctx.exception.__cause__, DatabaseError)
        # lead update rolled back together with the failed insert
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.current_stage, self.new)

    def test_string_ids_accepted(self):
        history = transition_lead_stage(self.company, str(self.lead.pk), str(self.new.pk), str(self.contacted.pk))
        self.assertEqual(history.to_stage, self.contacted)


class ComputeStageMetricsTest(LeadTestMixin, TestCase):

    def _history(self, lead, from_stage, to_stage, changed_at):
        StageHistory.objects.create(company=self.company, lead=lead, from_stage=from_stage,
                                    to_stage=to_stage, changed_at=changed_at)
        Lead.objects.filter(pk=lead.pk).update(current_stage=to_stage)

    def _build_history(self):
        """
        A: New -> Contacted after 2 days -> Qualified after 1 more day
        B: New -> Contacted after 6 hours
        C: stays in New
        """
        lead_a = self.lead
        lead_b = self.make_lead('Berg Bau', 'Lena Berg')
        lead_c = self.make_lead('Cello Media', 'Tim Roth')
        Lead.objects.filter(company=self.company).update(created_at=T0)

        self._history(lead_a, self.new, self.contacted, T0 + timedelta(days=2))
        self._history(lead_a, self.contacted, self.qualified, T0 + timedelta(days=3))
        self._history(lead_b, self.new, self.contacted, T0 + timedelta(hours=6))
        return lead_a, lead_b, lead_c

    def test_empty_company(self):
        empty = Company.objects.create(name='Empty Co', slug='empty')
        self.assertEqual(compute_stage_metrics(empty), [])

    def test_leads_without_history(self):
        self.assertEqual(compute_stage_metrics(self.company), [])

    def test_metrics(self):
        self._build_history()

        metrics = compute_stage_metrics(self.company)

        self.assertEqual([m.stage_name for m in metrics], ['New', 'Contacted', 'Qualified'])

        new, contacted, qualified = metrics
        self.assertEqual([new.stage_count, contacted.stage_count, qualified.stage_count], [1, 1, 1])

        # 3 entered, 2 advanced; mean of 2 days and 6 hours
        self.assertEqual(new.conversion_rate, 67)
        self.assertEqual(new.avg_time_in_stage, '1 days')

        self.assertEqual(contacted.conversion_rate, 50)
        self.assertEqual(contacted.avg_time_in_stage, '1 days')

        self.assertEqual(qualified.conversion_rate, 0)
        self.assertEqual(qualified.avg_time_in_stage, 'N/A')

    def test_moving_back_is_not_advancing(self):
        self._history(self.lead, self.new, self.contacted, T0 + timedelta(hours=1))
        self._history(self.lead, self.contacted, self.new, T0 + timedelta(hours=4))
        Lead.objects.filter(pk=self.lead.pk).update(created_at=T0)

        contacted = compute_stage_metrics(self.company)[1]

        self.assertEqual(contacted.conversion_rate, 0)
        self.assertEqual(contacted.avg_time_in_stage, '3 hours')

    def test_date_range(self):
        self._build_history()

        metrics = compute_stage_metrics(self.company, (date(2026, 3, 4), None))

        new, contacted, qualified = metrics
        self.assertEqual(new.avg_time_in_stage, 'N/A')
        self.assertEqual(new.conversion_rate, 0)
        self.assertEqual(contacted.conversion_rate, 0)
        self.assertEqual(qualified.conversion_rate, 0)
        # current state, not limited by the range
        self.assertEqual(new.stage_count, 1)

    def test_date_range_without_history(self):
        self._build_history()
        self.assertEqual(compute_stage_metrics(self.company, (date(2026, 4, 1), date(2026, 4, 30))), [])

    def test_other_company_history_ignored(self):
        self._build_history()
        other = Company.objects.create(name='Other Co', slug='other')
        self.assertEqual(compute_stage_metrics(other), [])


class ComputePipelineSummaryTest(LeadTestMixin, TestCase):

    def test_empty_company(self):
        empty = Company.objects.create(name='Empty Co', slug='empty')
        summary = compute_pipeline_summary(empty)

        self.assertEqual(summary.total_leads, 0)
        self.assertEqual(summary.conversion_rate, 0)
        self.assertEqual(summary.avg_time_to_qualify, 'N/A')

    def test_summary(self):
        qualified_lead = self.make_lead('Berg Bau', 'Lena Berg', status='qualified')
        self.make_lead('Cello Media', 'Tim Roth', is_converted=True)
        self.make_lead('Delta Druck', 'Ute Lang')
        Lead.objects.filter(pk=qualified_lead.pk).update(created_at=T0, qualified_at=T0 + timedelta(days=2))

        summary = compute_pipeline_summary(self.company)

        self.assertEqual(summary.total_leads, 4)
        self.assertEqual(summary.total_qualified, 1)
        self.assertEqual(summary.conversion_rate, 25)
        self.assertEqual(summary.avg_time_to_qualify, '2 days')


class PipelineBoardTest(LeadTestMixin, TestCase):

    def test_columns_in_stage_order(self):
        board = PipelineBoard(self.company)

        self.assertEqual([stage.name for stage in board.stages], ['New', 'Contacted', 'Qualified'])
        self.assertEqual(board.lead_ids(self.new.pk), [self.lead.pk])
        self.assertEqual(board.lead_ids(self.contacted.pk), [])

    def test_filters(self):
        self.make_lead('Berg Bau', 'Lena Berg', status='contacted')

        self.assertEqual(len(PipelineBoard(self.company, search='berg').lead_ids(self.new.pk)), 1)
        self.assertEqual(len(PipelineBoard(self.company, search='vogel').lead_ids(self.new.pk)), 1)
        self.assertEqual(len(PipelineBoard(self.company, statuses=['new', 'contacted']).lead_ids(self.new.pk)), 2)
        self.assertEqual(len(PipelineBoard(self.company, statuses=['qualified']).lead_ids(self.new.pk)), 0)

    def test_move_and_confirm(self):
        board = PipelineBoard(self.company)

        pending = board.move(self.lead.pk, self.new.pk, self.contacted.pk, notes='Intro call')
        # shown before it is saved
        self.assertEqual(board.lead_ids(self.contacted.pk), [self.lead.pk])
        self.assertFalse(StageHistory.objects.exists())

        history = pending.confirm()

        self.assertEqual(history.to_stage, self.contacted)
        self.lead.refresh_from_db()
        self.assertEqual(self.lead.current_stage, self.contacted)

    def test_failed_confirm_reloads_board(self):
        """
        Test: Another user moved the lead in the meantime

        Expected: StaleStateError re-raised, board shows the stored stage
        """
        board = PipelineBoard(self.company)
        pending = board.move(self.lead.pk, self.new.pk, self.contacted.pk)

        transition_lead_stage(self.company, self.lead.pk, self.new.pk, self.qualified.pk)

        with self.assertRaises(StaleStateError):
            pending.confirm()

        self.assertEqual(board.lead_ids(self.contacted.pk), [])
        self.assertEqual(board.lead_ids(self.qualified.pk), [self.lead.pk])
