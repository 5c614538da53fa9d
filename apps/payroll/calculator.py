"""
Overtime & Payroll Calculator
=============================

Pure functions used by the payslip form, the payslip model and the nightly
refresh task. Nothing here touches the database.

Per approved work log entry:

    working_minutes  = (end_time - start_time) - break_duration_minutes
    overtime_minutes = max(0, working_minutes - standard_daily_minutes)
    hourly_rate      = base_salary / (working_days_per_month * hours_per_day)
    overtime_pay     = overtime_minutes / 60 * hourly_rate * multiplier

    net_salary = base_salary + allowances + overtime - deductions

Example (8h standard day, 22 working days):
    10h shift, no break, 1.5x multiplier, base salary 4400
    hourly rate 4400 / 176 = 25 -> 2h * 25 * 1.5 = 75.00
"""

from collections.abc import Mapping
from datetime import datetime, time
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import NamedTuple

from django.core.exceptions import ValidationError

STANDARD_HOURS_PER_DAY = 8
STANDARD_DAILY_MINUTES = STANDARD_HOURS_PER_DAY * 60
WORKING_DAYS_PER_MONTH = 22

CENTS = Decimal('0.01')
ZERO = Decimal('0')

TIME_FORMATS = ('%H:%M:%S', '%H:%M')


class PayrollTotals(NamedTuple):
    total_overtime: Decimal
    net_salary: Decimal


def to_decimal(value, field, allow_zero=True, allow_negative=False):
    """
    Convert a form/model value to Decimal or raise ValidationError

    Empty strings and None count as zero (unset form fields).
    """
    if value is None or value == '':
        value = ZERO
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise ValidationError(f'{field} must be a number', code='invalid')

    if not number.is_finite():
        raise ValidationError(f'{field} must be a finite number', code='invalid')
    if number < 0 and not allow_negative:
        raise ValidationError(f'{field} cannot be negative', code='negative')
    if number == 0 and not allow_zero:
        raise ValidationError(f'{field} must be greater than zero', code='zero')
    return number


def quantize_money(amount):
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def _to_time(value, field):
    if isinstance(value, datetime):
        return value.time()
    if isinstance(value, time):
        return value
    if isinstance(value, str):
        for fmt in TIME_FORMATS:
            try:
                return datetime.strptime(value.strip(), fmt).time()
            except ValueError:
                continue
    raise ValidationError(f'{field} must be a time (HH:MM)', code='invalid')


def _seconds_since_midnight(value):
    return value.hour * 3600 + value.minute * 60 + value.second


def working_minutes(start_time, end_time, break_minutes=0):
    """
    Minutes actually worked in one entry

    Raises:
        ValidationError: end_time is not after start_time, or the break is
            longer than the shift
    """
    start = _to_time(start_time, 'Start time')
    end = _to_time(end_time, 'End time')
    break_minutes = to_decimal(break_minutes, 'Break duration')

    span = Decimal(_seconds_since_midnight(end) - _seconds_since_midnight(start)) / 60
    if span <= 0:
        raise ValidationError('End time must be after start time', code='end_before_start')

    worked = span - break_minutes
    if worked < 0:
        raise ValidationError('Break duration is longer than the shift', code='break_too_long')
    return worked


def overtime_minutes(minutes_worked, standard_daily_minutes=STANDARD_DAILY_MINUTES):
    return max(ZERO, Decimal(minutes_worked) - standard_daily_minutes)


def hourly_rate(base_salary, working_days_per_month=WORKING_DAYS_PER_MONTH, hours_per_day=STANDARD_HOURS_PER_DAY):
    base_salary = to_decimal(base_salary, 'Base salary', allow_zero=False)
    working_days_per_month = to_decimal(working_days_per_month, 'Working days per month', allow_zero=False)
    hours_per_day = to_decimal(hours_per_day, 'Hours per day', allow_zero=False)
    return base_salary / (working_days_per_month * hours_per_day)


def _entry_value(entry, field):
    if isinstance(entry, Mapping):
        return entry.get(field)
    return getattr(entry, field, None)


def entry_overtime_pay(entry, base_salary, working_days_per_month=WORKING_DAYS_PER_MONTH,
                       hours_per_day=STANDARD_HOURS_PER_DAY):
    """
    Overtime pay for a single work log entry, unrounded

    entry needs start_time, end_time, break_duration_minutes and
    schedule_type_multiplier (a WorkLog instance or a mapping).
    Status is not checked here; see compute_overtime().
    """
    multiplier = to_decimal(_entry_value(entry, 'schedule_type_multiplier'), 'Multiplier', allow_zero=False)
    minutes = working_minutes(
        _entry_value(entry, 'start_time'),
        _entry_value(entry, 'end_time'),
        _entry_value(entry, 'break_duration_minutes'),
    )

    extra = overtime_minutes(minutes, standard_daily_minutes=hours_per_day * 60)
    if extra == 0:
        return ZERO

    rate = hourly_rate(base_salary, working_days_per_month, hours_per_day)
    return extra / 60 * rate * multiplier


def compute_overtime(work_logs, base_salary, working_days_per_month=WORKING_DAYS_PER_MONTH,
                     hours_per_day=STANDARD_HOURS_PER_DAY):
    """Total overtime pay of the approved entries, rounded to cents"""
    total = ZERO
    for entry in work_logs:
        if _entry_value(entry, 'status') != 'approved':
            continue
        total += entry_overtime_pay(entry, base_salary, working_days_per_month, hours_per_day)
    return quantize_money(total)


def compute_net_salary(base_salary, total_allowances=ZERO, total_overtime=ZERO, total_deductions=ZERO):
    base_salary = to_decimal(base_salary, 'Base salary')
    total_allowances = to_decimal(total_allowances, 'Total allowances')
    total_overtime = to_decimal(total_overtime, 'Total overtime')
    total_deductions = to_decimal(total_deductions, 'Total deductions')
    return quantize_money(base_salary + total_allowances + total_overtime - total_deductions)


def _contract_number(contract, field, default, label):
    """Contract setting; the default applies only when it is missing"""
    value = _entry_value(contract, field)
    if value is None:
        return default
    return to_decimal(value, label, allow_zero=False)


def compute_overtime_and_net(work_logs, contract, total_allowances=ZERO, total_deductions=ZERO):
    """
    Overtime and net salary for a payslip period

    Args:
        work_logs: entries of the period; only 'approved' ones count
        contract: EmployeeContract (or any object with base_salary,
            working_days_per_month, standard_working_hours_per_day)
        total_allowances, total_deductions: current form values

    Returns:
        PayrollTotals(total_overtime, net_salary)

    Raises:
        ValidationError: on any malformed input; nothing is computed
            partially
    """
    base_salary = to_decimal(_entry_value(contract, 'base_salary'), 'Base salary', allow_zero=False)
    working_days = _contract_number(contract, 'working_days_per_month', WORKING_DAYS_PER_MONTH, 'Working days per month')
    hours_per_day = _contract_number(contract, 'standard_working_hours_per_day', STANDARD_HOURS_PER_DAY, 'Hours per day')

    total_overtime = compute_overtime(work_logs, base_salary, working_days, hours_per_day)
    net_salary = compute_net_salary(base_salary, total_allowances, total_overtime, total_deductions)
    return PayrollTotals(total_overtime, net_salary)
