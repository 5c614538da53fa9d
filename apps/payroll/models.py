import calendar
import logging
from datetime import date, timedelta
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from apps.core.exceptions import InvalidTransitionError
from apps.core.models import Company, Department
from . import calculator
from .status import ensure_payslip_transition, ensure_work_log_transition, PAYSLIP_PAID

logger = logging.getLogger(__name__)


def default_hours_per_day():
    return getattr(settings, 'PAYROLL_STANDARD_HOURS_PER_DAY', calculator.STANDARD_HOURS_PER_DAY)


def default_working_days_per_month():
    return getattr(settings, 'PAYROLL_WORKING_DAYS_PER_MONTH', calculator.WORKING_DAYS_PER_MONTH)


def month_period(year, month):
    """(first day, last day, first day of next month) of a calendar month"""
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    return first, last, last + timedelta(days=1)


class Employee(models.Model):

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='employees')
    user = models.OneToOneField(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='employee',
                                help_text='Login account of this employee (optional)')
    department = models.ForeignKey(Department, on_delete=models.SET_NULL, null=True, blank=True, related_name='employees')
    given_name = models.CharField(max_length=100)
    surname = models.CharField(max_length=100)
    email = models.EmailField(blank=True)
    hire_date = models.DateField(null=True, blank=True)
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Employee'
        verbose_name_plural = 'Employees'
        ordering = ['surname', 'given_name']

    def __str__(self):
        return self.get_full_name()

    def get_full_name(self):
        return f"{self.given_name} {self.surname}".strip()


class WorkScheduleType(models.Model):
    """Kind of shift (regular, night, weekend, holiday) and its pay multiplier"""

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='work_schedule_types')
    name = models.CharField(max_length=100, help_text='e.g. Regular, Night shift, Public holiday')
    multiplier = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('1.00'),
                                     help_text='Rate factor applied to the hourly rate (1.5 = time and a half)')
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        verbose_name = 'Work Schedule Type'
        verbose_name_plural = 'Work Schedule Types'
        ordering = ['name']
        unique_together = ['company', 'name']

    def __str__(self):
        return f"{self.name} ({self.multiplier}x)"

    def clean(self):
        if self.multiplier is not None and self.multiplier <= 0:
            raise ValidationError({'multiplier': 'Multiplier must be greater than zero'})


class EmployeeContract(models.Model):

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='employee_contracts')
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='contracts')
    position = models.CharField(max_length=150, blank=True)
    start_date = models.DateField()
    end_date = models.DateField(null=True, blank=True, help_text='Empty for open-ended contracts')
    base_salary = models.DecimalField(max_digits=12, decimal_places=2, help_text='Gross monthly salary')
    currency = models.CharField(max_length=3, default='EUR')
    standard_working_hours_per_day = models.PositiveSmallIntegerField(default=default_hours_per_day)
    working_days_per_month = models.PositiveSmallIntegerField(default=default_working_days_per_month,
                                                              help_text='Used to derive the hourly rate')
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Employee Contract'
        verbose_name_plural = 'Employee Contracts'
        ordering = ['-start_date']

    def __str__(self):
        return f"{self.employee} - {self.position or 'Contract'} ({self.start_date})"

    @property
    def hourly_rate(self):
        return calculator.hourly_rate(self.base_salary, self.working_days_per_month, self.standard_working_hours_per_day)

    def clean(self):
        errors = {}
        if self.base_salary is not None and self.base_salary <= 0:
            errors['base_salary'] = 'Base salary must be greater than zero'
        if self.end_date and self.start_date and self.end_date < self.start_date:
            errors['end_date'] = 'End date cannot be before start date'
        if errors:
            raise ValidationError(errors)


class WorkLog(models.Model):

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='work_logs')
    employee = models.ForeignKey(Employee, on_delete=models.CASCADE, related_name='work_logs')
    schedule_type = models.ForeignKey(WorkScheduleType, on_delete=models.PROTECT, related_name='work_logs')
    date = models.DateField(db_index=True)
    start_time = models.TimeField()
    end_time = models.TimeField()
    break_duration_minutes = models.PositiveIntegerField(default=60)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='pending', db_index=True)
    notes = models.TextField(blank=True)

    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='reviewed_work_logs')
    approved_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Work Log'
        verbose_name_plural = 'Work Logs'
        ordering = ['date', 'start_time']
        indexes = [
            models.Index(fields=['employee', 'date'], name='payroll_worklog_emp_date_idx'),
        ]

    def __str__(self):
        return f"{self.employee} {self.date} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @property
    def schedule_type_multiplier(self):
        return self.schedule_type.multiplier

    @property
    def working_minutes(self):
        return calculator.working_minutes(self.start_time, self.end_time, self.break_duration_minutes)

    def overtime_hours(self, hours_per_day=calculator.STANDARD_HOURS_PER_DAY):
        extra = calculator.overtime_minutes(self.working_minutes, standard_daily_minutes=hours_per_day * 60)
        return (extra / 60).quantize(Decimal('0.1'))

    def clean(self):
        if self.start_time and self.end_time:
            calculator.working_minutes(self.start_time, self.end_time, self.break_duration_minutes)
        if self.schedule_type_id and self.company_id and self.schedule_type.company_id != self.company_id:
            raise ValidationError({'schedule_type': 'Schedule type belongs to another company'})

    def _review(self, status, user):
        ensure_work_log_transition(self.status, status)
        self.status = status
        self.approved_by = user
        self.approved_at = timezone.now()
        self.save(update_fields=['status', 'approved_by', 'approved_at', 'updated_at'])
        logger.info(f"Work log {self.pk} {status} by user {getattr(user, 'pk', None)}")

    def approve(self, user):
        self._review('approved', user)

    def reject(self, user):
        self._review('rejected', user)


class Payslip(models.Model):

    STATUS_CHOICES = [
        ('draft', 'Draft'),
        ('approved', 'Approved'),
        ('paid', 'Paid'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='payslips')
    contract = models.ForeignKey(EmployeeContract, on_delete=models.PROTECT, related_name='payslips')
    period_start = models.DateField()
    period_end = models.DateField()
    base_salary = models.DecimalField(max_digits=12, decimal_places=2)
    total_allowances = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_overtime = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total_deductions = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    net_salary = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'),
                                     help_text='Always base + allowances + overtime - deductions')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='draft', db_index=True)
    payment_date = models.DateField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Payslip'
        verbose_name_plural = 'Payslips'
        ordering = ['-period_start']
        unique_together = ['contract', 'period_start']

    def __str__(self):
        return f"{self.contract.employee} {self.period_start:%Y-%m} ({self.get_status_display()})"

    @classmethod
    def build_for_month(cls, contract, year, month):
        """
        Unsaved draft for one calendar month: period bounds, base salary
        from the contract, payment on the 1st of the next month and
        overtime from the approved work logs of the period.
        """
        period_start, period_end, payment_date = month_period(year, month)
        payslip = cls(
            company=contract.company,
            contract=contract,
            period_start=period_start,
            period_end=period_end,
            base_salary=contract.base_salary,
            payment_date=payment_date,
        )
        payslip.refresh_overtime()
        return payslip

    @property
    def is_editable(self):
        return self.status != PAYSLIP_PAID

    def work_logs_for_period(self):
        return WorkLog.objects.filter(
            employee_id=self.contract.employee_id,
            date__gte=self.period_start,
            date__lte=self.period_end,
        ).select_related('schedule_type').order_by('date', 'start_time')

    def recalculate_net_salary(self):
        self.net_salary = calculator.compute_net_salary(
            self.base_salary, self.total_allowances, self.total_overtime, self.total_deductions
        )
        return self.net_salary

    def refresh_overtime(self, work_logs=None):
        """Recompute total_overtime (and net salary) from approved work logs"""
        if work_logs is None:
            work_logs = self.work_logs_for_period()
        self.total_overtime = calculator.compute_overtime(
            work_logs,
            self.base_salary,
            self.contract.working_days_per_month,
            self.contract.standard_working_hours_per_day,
        )
        self.recalculate_net_salary()
        return self.total_overtime

    def transition_to(self, target):
        """
        Move to another status and persist it

        Returns:
            bool: False for an allowed no-op (same status)

        Raises:
            InvalidTransitionError: not allowed by the status rules
        """
        ensure_payslip_transition(self.status, target)
        if target == self.status:
            return False

        old_status = self.status
        old_payment_date = self.payment_date
        self.status = target
        if target == PAYSLIP_PAID and not self.payment_date:
            self.payment_date = timezone.localdate()
        try:
            self.save()
        except Exception:
            self.status = old_status
            self.payment_date = old_payment_date
            raise
        logger.info(f"Payslip {self.pk} status changed from {old_status} to {target}")
        return True

    def save(self, *args, **kwargs):
        if self.pk:
            stored_status = Payslip.objects.filter(pk=self.pk).values_list('status', flat=True).first()
            if stored_status == PAYSLIP_PAID:
                raise InvalidTransitionError(stored_status, self.status, subject='paid payslip')

        self.recalculate_net_salary()
        update_fields = kwargs.get('update_fields')
        if update_fields is not None and 'net_salary' not in update_fields:
            kwargs['update_fields'] = list(update_fields) + ['net_salary']
        super().save(*args, **kwargs)
