from django import forms
from django.core.exceptions import ValidationError

from . import calculator
from .models import EmployeeContract, Payslip, WorkLog, WorkScheduleType


class WorkLogForm(forms.ModelForm):
    class Meta:
        model = WorkLog
        fields = ['employee', 'schedule_type', 'date', 'start_time', 'end_time', 'break_duration_minutes', 'notes']
        widgets = {
            'date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'start_time': forms.TimeInput(attrs={'class': 'form-control', 'type': 'time'}),
            'end_time': forms.TimeInput(attrs={'class': 'form-control', 'type': 'time'}),
            'break_duration_minutes': forms.NumberInput(attrs={'class': 'form-control', 'min': 0}),
            'notes': forms.Textarea(attrs={'class': 'form-control', 'rows': 3}),
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company')
        super().__init__(*args, **kwargs)
        self.instance.company = self.company

        self.fields['employee'].queryset = self.company.employees.filter(is_active=True)
        self.fields['schedule_type'].queryset = WorkScheduleType.objects.filter(company=self.company, is_active=True)

        if not self.instance.pk:
            self.fields['start_time'].initial = '09:00'
            self.fields['end_time'].initial = '18:00'

        # Reviewed entries are locked
        if self.instance.pk and self.instance.status != 'pending':
            for field in self.fields.values():
                field.disabled = True

    def clean(self):
        cleaned_data = super().clean()
        if self.instance.pk and self.instance.status != 'pending':
            raise ValidationError('Only pending work logs can be edited')

        start_time = cleaned_data.get('start_time')
        end_time = cleaned_data.get('end_time')
        if start_time and end_time:
            calculator.working_minutes(start_time, end_time, cleaned_data.get('break_duration_minutes') or 0)
        return cleaned_data


class PayslipForm(forms.ModelForm):
    """
    Payslip editor. net_salary is not an input: it is recomputed from the
    four amount fields every time the form is cleaned.
    """

    class Meta:
        model = Payslip
        fields = ['contract', 'period_start', 'period_end', 'base_salary', 'total_allowances',
                  'total_overtime', 'total_deductions', 'payment_date']
        widgets = {
            'period_start': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'period_end': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'payment_date': forms.DateInput(attrs={'class': 'form-control', 'type': 'date'}),
            'base_salary': forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'}),
            'total_allowances': forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'}),
            'total_overtime': forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'}),
            'total_deductions': forms.NumberInput(attrs={'class': 'form-control', 'step': '0.01'}),
        }

    def __init__(self, *args, **kwargs):
        self.company = kwargs.pop('company')
        super().__init__(*args, **kwargs)
        self.instance.company = self.company
        self.fields['contract'].queryset = EmployeeContract.objects.filter(company=self.company).select_related('employee')

        for name in ('total_allowances', 'total_overtime', 'total_deductions'):
            self.fields[name].required = False

        if self.instance.pk and not self.instance.is_editable:
            for field in self.fields.values():
                field.disabled = True

    def clean_base_salary(self):
        return calculator.to_decimal(self.cleaned_data.get('base_salary'), 'Base salary', allow_zero=False)

    def clean_total_allowances(self):
        return calculator.to_decimal(self.cleaned_data.get('total_allowances'), 'Total allowances')

    def clean_total_overtime(self):
        return calculator.to_decimal(self.cleaned_data.get('total_overtime'), 'Total overtime')

    def clean_total_deductions(self):
        return calculator.to_decimal(self.cleaned_data.get('total_deductions'), 'Total deductions')

    def clean(self):
        cleaned_data = super().clean()

        if self.instance.pk and not self.instance.is_editable:
            raise ValidationError('Paid payslips cannot be modified')

        period_start = cleaned_data.get('period_start')
        period_end = cleaned_data.get('period_end')
        if period_start and period_end and period_end < period_start:
            self.add_error('period_end', 'Period end cannot be before period start')

        if not self.errors:
            cleaned_data['net_salary'] = calculator.compute_net_salary(
                cleaned_data['base_salary'],
                cleaned_data['total_allowances'],
                cleaned_data['total_overtime'],
                cleaned_data['total_deductions'],
            )
        return cleaned_data

    def save(self, commit=True):
        payslip = super().save(commit=False)
        payslip.net_salary = self.cleaned_data['net_salary']
        if commit:
            payslip.save()
        return payslip
