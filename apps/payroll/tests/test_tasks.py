from datetime import date, time
from decimal import Decimal
from unittest.mock import patch

from django.test import TestCase

from apps.payroll.models import Payslip, WorkLog
from apps.payroll.tasks import refresh_draft_payslips
from .test_models import PayrollTestMixin


class RefreshDraftPayslipsTaskTest(PayrollTestMixin, TestCase):

    def test_updates_draft_payslips(self):
        payslip = self.make_payslip(base_salary=Decimal('4400.00'), total_overtime=Decimal('0.00'))
        self.make_work_log(date(2026, 3, 2))

        result = refresh_draft_payslips()

        self.assertEqual(result, '1 draft payslips updated, 0 skipped.')
        payslip.refresh_from_db()
        self.assertEqual(payslip.total_overtime, Decimal('75.00'))
        self.assertEqual(payslip.net_salary, Decimal('4525.00'))

    def test_approved_payslips_untouched(self):
        payslip = self.make_payslip(base_salary=Decimal('4400.00'), total_overtime=Decimal('0.00'))
        payslip.transition_to('approved')
        self.make_work_log(date(2026, 3, 2))

        result = refresh_draft_payslips(company_id=self.company.pk)

        self.assertEqual(result, '0 draft payslips updated, 0 skipped.')
        payslip.refresh_from_db()
        self.assertEqual(payslip.total_overtime, Decimal('0.00'))

    def test_broken_work_log_skips_payslip(self):
        self.make_payslip(base_salary=Decimal('4400.00'))
        log = self.make_work_log(date(2026, 3, 2))
        # bypass model validation to store an impossible entry
        WorkLog.objects.filter(pk=log.pk).update(start_time=time(20, 0), end_time=time(8, 0))

        result = refresh_draft_payslips()

        self.assertEqual(result, '0 draft payslips updated, 1 skipped.')
        self.assertEqual(Payslip.objects.get().total_overtime, Decimal('75.00'))

    def test_payslip_paid_during_run_is_skipped(self):
        """
        Test: a draft payslip is marked paid after the task read it

        Expected: that payslip is skipped and left as paid, the others
        are still refreshed
        """
        march = self.make_payslip(base_salary=Decimal('4400.00'), total_overtime=Decimal('0.00'))
        april = self.make_payslip(
            base_salary=Decimal('4400.00'),
            total_overtime=Decimal('0.00'),
            period_start=date(2026, 4, 1),
            period_end=date(2026, 4, 30),
        )
        self.make_work_log(date(2026, 3, 2))
        self.make_work_log(date(2026, 4, 1))

        original_refresh = Payslip.refresh_overtime

        def refresh_and_pay_march(payslip, work_logs=None):
            if payslip.pk == march.pk:
                Payslip.objects.filter(pk=march.pk).update(status='paid')
            return original_refresh(payslip, work_logs)

        with patch.object(Payslip, 'refresh_overtime', refresh_and_pay_march):
            result = refresh_draft_payslips()

        self.assertEqual(result, '1 draft payslips updated, 1 skipped.')
        march.refresh_from_db()
        april.refresh_from_db()
        self.assertEqual(march.status, 'paid')
        self.assertEqual(march.total_overtime, Decimal('0.00'))
        self.assertEqual(april.total_overtime, Decimal('75.00'))
