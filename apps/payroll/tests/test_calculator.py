"""
Payroll Calculator Tests
========================

Pure function tests, no database needed.

Test Coverage:
1. working_minutes - shift length, breaks, invalid times
2. compute_overtime - multiplier, standard day, status filter, rounding
3. compute_net_salary - formula and input validation
4. compute_overtime_and_net - contract driven totals, malformed contract settings
5. hourly_rate - input validation

Run tests:
    python manage.py test apps.payroll.tests.test_calculator --settings=config.settings_test
"""

from datetime import time
from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import SimpleTestCase

from apps.payroll import calculator


def _entry(start, end, break_minutes=0, multiplier='1.5', status='approved'):
    return {
        'start_time': start,
        'end_time': end,
        'break_duration_minutes': break_minutes,
        'schedule_type_multiplier': Decimal(multiplier),
        'status': status,
    }


class WorkingMinutesTest(SimpleTestCase):

    def test_shift_without_break(self):
        self.assertEqual(calculator.working_minutes('09:00', '19:00', 0), Decimal('600'))

    def test_break_is_subtracted(self):
        self.assertEqual(calculator.working_minutes(time(9, 0), time(18, 0), 60), Decimal('480'))

    def test_seconds_are_kept(self):
        self.assertEqual(calculator.working_minutes('09:00:00', '09:00:30', 0), Decimal('0.5'))

    def test_end_before_start_rejected(self):
        """
        Test: Overnight/negative durations are not supported

        Expected: ValidationError with code end_before_start
        """
        with self.assertRaises(ValidationError) as ctx:
            calculator.working_minutes('18:00', '09:00', 0)
        self.assertEqual(ctx.exception.code, 'end_before_start')

    def test_equal_start_and_end_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.working_minutes('09:00', '09:00', 0)

    def test_break_longer_than_shift_rejected(self):
        with self.assertRaises(ValidationError) as ctx:
            calculator.working_minutes('09:00', '10:00', 90)
        self.assertEqual(ctx.exception.code, 'break_too_long')

    def test_malformed_time_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.working_minutes('nine', '18:00', 0)


class ComputeOvertimeTest(SimpleTestCase):

    def test_overtime_with_multiplier(self):
        """
        Test: 10h shift, 1.5x, base 4400 over 22 days x 8h

        Expected: hourly rate 25 -> 2h * 25 * 1.5 = 75.00
        """
        total = calculator.compute_overtime([_entry('09:00', '19:00')], Decimal('4400'))
        self.assertEqual(total, Decimal('75.00'))

    def test_standard_day_has_no_overtime(self):
        total = calculator.compute_overtime([_entry('09:00', '17:00')], Decimal('4400'))
        self.assertEqual(total, Decimal('0.00'))

    def test_only_approved_entries_count(self):
        entries = [
            _entry('09:00', '19:00'),
            _entry('09:00', '19:00', status='pending'),
            _entry('09:00', '19:00', status='rejected'),
        ]
        self.assertEqual(calculator.compute_overtime(entries, Decimal('4400')), Decimal('75.00'))

    def test_empty_period(self):
        self.assertEqual(calculator.compute_overtime([], Decimal('4400')), Decimal('0.00'))

    def test_total_is_rounded_to_cents(self):
        # 1000 / 176 = 5.6818... per hour, one overtime hour at 1.0x
        total = calculator.compute_overtime([_entry('09:00', '18:00', multiplier='1')], Decimal('1000'))
        self.assertEqual(total, Decimal('5.68'))

    def test_custom_standard_day(self):
        # 10h standard day: a 10h shift has no overtime
        total = calculator.compute_overtime([_entry('09:00', '19:00')], Decimal('4400'), 22, 10)
        self.assertEqual(total, Decimal('0.00'))

    def test_zero_multiplier_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.compute_overtime([_entry('09:00', '19:00', multiplier='0')], Decimal('4400'))


class ComputeNetSalaryTest(SimpleTestCase):

    def test_formula(self):
        net = calculator.compute_net_salary(Decimal('1000'), Decimal('100'), Decimal('75'), Decimal('50'))
        self.assertEqual(net, Decimal('1125.00'))

    def test_empty_values_count_as_zero(self):
        self.assertEqual(calculator.compute_net_salary('1000', '', None, ''), Decimal('1000.00'))

    def test_half_cent_rounds_up(self):
        self.assertEqual(calculator.compute_net_salary('0.005'), Decimal('0.01'))

    def test_negative_amount_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.compute_net_salary('1000', '-5')

    def test_non_numeric_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.compute_net_salary('abc')


class ComputeOvertimeAndNetTest(SimpleTestCase):

    def test_totals_from_contract(self):
        contract = {
            'base_salary': Decimal('4400'),
            'working_days_per_month': 22,
            'standard_working_hours_per_day': 8,
        }
        totals = calculator.compute_overtime_and_net(
            [_entry('09:00', '19:00')], contract, Decimal('100'), Decimal('50')
        )
        self.assertEqual(totals.total_overtime, Decimal('75.00'))
        self.assertEqual(totals.net_salary, Decimal('4525.00'))

    def test_missing_base_salary_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.compute_overtime_and_net([], {'base_salary': None})

    def test_zero_working_days_rejected(self):
        """
        Test: contract with working_days_per_month = 0

        Expected: ValidationError, no silent fallback to 22 days
        """
        contract = {'base_salary': Decimal('4400'), 'working_days_per_month': 0}
        with self.assertRaises(ValidationError) as ctx:
            calculator.compute_overtime_and_net([_entry('09:00', '19:00')], contract)
        self.assertEqual(ctx.exception.code, 'zero')

    def test_zero_hours_rejected_without_entries(self):
        contract = {'base_salary': Decimal('4400'), 'standard_working_hours_per_day': 0}
        with self.assertRaises(ValidationError):
            calculator.compute_overtime_and_net([], contract)

    def test_missing_settings_use_defaults(self):
        totals = calculator.compute_overtime_and_net([_entry('09:00', '19:00')], {'base_salary': Decimal('4400')})
        self.assertEqual(totals.total_overtime, Decimal('75.00'))


class HourlyRateTest(SimpleTestCase):

    def test_rate(self):
        self.assertEqual(calculator.hourly_rate(Decimal('4400'), 22, 8), Decimal('25'))

    def test_non_numeric_days_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.hourly_rate(Decimal('4400'), 'many', 8)

    def test_negative_hours_rejected(self):
        with self.assertRaises(ValidationError):
            calculator.hourly_rate(Decimal('4400'), 22, -8)
