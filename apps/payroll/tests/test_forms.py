from datetime import date
from decimal import Decimal

from django.test import TestCase

from apps.core.models import Company
from apps.payroll.forms import PayslipForm, WorkLogForm
from apps.payroll.models import Employee
from .test_models import PayrollTestMixin


class PayslipFormTest(PayrollTestMixin, TestCase):

    def _data(self, **overrides):
        data = {
            'contract': self.contract.pk,
            'period_start': '2026-03-01',
            'period_end': '2026-03-31',
            'base_salary': '1000',
            'total_allowances': '100',
            'total_overtime': '75',
            'total_deductions': '50',
            'payment_date': '2026-04-01',
        }
        data.update(overrides)
        return data

    def test_net_salary_computed(self):
        form = PayslipForm(data=self._data(), company=self.company)

        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['net_salary'], Decimal('1125.00'))

        payslip = form.save()
        self.assertEqual(payslip.company, self.company)
        self.assertEqual(payslip.net_salary, Decimal('1125.00'))

    def test_empty_amounts_count_as_zero(self):
        form = PayslipForm(
            data=self._data(total_allowances='', total_overtime='', total_deductions=''),
            company=self.company
        )

        self.assertTrue(form.is_valid(), form.errors)
        self.assertEqual(form.cleaned_data['net_salary'], Decimal('1000.00'))

    def test_negative_deduction_rejected(self):
        form = PayslipForm(data=self._data(total_deductions='-10'), company=self.company)

        self.assertFalse(form.is_valid())
        self.assertIn('total_deductions', form.errors)

    def test_period_end_before_start_rejected(self):
        form = PayslipForm(data=self._data(period_end='2026-02-01'), company=self.company)

        self.assertFalse(form.is_valid())
        self.assertIn('period_end', form.errors)

    def test_contract_of_other_company_rejected(self):
        other = Company.objects.create(name='Other Co', slug='other')
        form = PayslipForm(data=self._data(), company=other)

        self.assertFalse(form.is_valid())
        self.assertIn('contract', form.errors)

    def test_paid_payslip_not_editable(self):
        payslip = self.make_payslip()
        payslip.transition_to('approved')
        payslip.transition_to('paid')

        form = PayslipForm(data=self._data(base_salary='5000'), instance=payslip, company=self.company)

        self.assertFalse(form.is_valid())
        self.assertIn('__all__', form.errors)


class WorkLogFormTest(PayrollTestMixin, TestCase):

    def _data(self, **overrides):
        data = {
            'employee': self.employee.pk,
            'schedule_type': self.overtime_type.pk,
            'date': '2026-03-02',
            'start_time': '09:00',
            'end_time': '19:00',
            'break_duration_minutes': '30',
            'notes': '',
        }
        data.update(overrides)
        return data

    def test_valid(self):
        form = WorkLogForm(data=self._data(), company=self.company)

        self.assertTrue(form.is_valid(), form.errors)
        log = form.save()
        self.assertEqual(log.company, self.company)
        self.assertEqual(log.status, 'pending')

    def test_end_before_start_rejected(self):
        form = WorkLogForm(data=self._data(start_time='19:00', end_time='09:00'), company=self.company)
        self.assertFalse(form.is_valid())

    def test_employee_of_other_company_rejected(self):
        other = Company.objects.create(name='Other Co', slug='other')
        stranger = Employee.objects.create(company=other, given_name='Eva', surname='Maier')

        form = WorkLogForm(data=self._data(employee=stranger.pk), company=self.company)

        self.assertFalse(form.is_valid())
        self.assertIn('employee', form.errors)

    def test_reviewed_log_locked(self):
        log = self.make_work_log(date(2026, 3, 2))

        form = WorkLogForm(data=self._data(end_time='20:00'), instance=log, company=self.company)

        self.assertFalse(form.is_valid())
