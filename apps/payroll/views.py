import logging
from datetime import datetime

from django.contrib.auth.decorators import login_required
from django.core.exceptions import ValidationError
from django.http import HttpResponse, JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_POST
import openpyxl
from openpyxl.styles import Font, PatternFill

from apps.accounts.decorators import admin_required, company_required
from apps.core.exceptions import InvalidTransitionError
from apps.core.utils import get_user_company
from .forms import PayslipForm
from .models import EmployeeContract, Payslip, WorkLog, month_period
from .status import allowed_payslip_targets

logger = logging.getLogger(__name__)


def _parse_month(value):
    """'YYYYMM' -> (year, month); raises ValidationError"""
    try:
        parsed = datetime.strptime(value or '', '%Y%m')
    except ValueError:
        raise ValidationError('month must use the YYYYMM format')
    return parsed.year, parsed.month


def _parse_id(value, field):
    """Positive integer id from a query string; raises ValidationError"""
    try:
        pk = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'{field} must be a numeric id')
    if pk <= 0:
        raise ValidationError(f'{field} must be a numeric id')
    return pk


def _money(value):
    return f"{value:.2f}"


def _payslip_data(payslip):
    return {
        'id': payslip.id,
        'contract': payslip.contract_id,
        'employee': payslip.contract.employee.get_full_name(),
        'period_start': payslip.period_start.isoformat(),
        'period_end': payslip.period_end.isoformat(),
        'base_salary': _money(payslip.base_salary),
        'total_allowances': _money(payslip.total_allowances),
        'total_overtime': _money(payslip.total_overtime),
        'total_deductions': _money(payslip.total_deductions),
        'net_salary': _money(payslip.net_salary),
        'status': payslip.status,
        'status_display': payslip.get_status_display(),
        'allowed_statuses': allowed_payslip_targets(payslip.status),
        'payment_date': payslip.payment_date.isoformat() if payslip.payment_date else None,
        'is_editable': payslip.is_editable,
    }


def _work_log_rows(work_logs, hours_per_day):
    rows = []
    for log in work_logs:
        try:
            overtime_hours = f"{log.overtime_hours(hours_per_day):.1f}"
        except ValidationError:
            overtime_hours = None
        rows.append({
            'id': log.id,
            'date': log.date.isoformat(),
            'start_time': log.start_time.strftime('%H:%M'),
            'end_time': log.end_time.strftime('%H:%M'),
            'break_duration_minutes': log.break_duration_minutes,
            'schedule_type': log.schedule_type.name,
            'multiplier': str(log.schedule_type.multiplier),
            'status': log.status,
            'overtime_hours': overtime_hours,
        })
    return rows


@login_required
@company_required
@require_GET
def payslip_preview_view(request):
    """
    Draft values for a new payslip: ?contract=<id>&month=YYYYMM
    Nothing is saved.
    """
    company = get_user_company(request)
    try:
        contract_id = _parse_id(request.GET.get('contract'), 'contract')
    except ValidationError as e:
        return JsonResponse({'success': False, 'error': e.messages[0]}, status=400)

    contract = get_object_or_404(
        EmployeeContract.objects.select_related('employee', 'company'),
        pk=contract_id,
        company=company
    )

    try:
        year, month = _parse_month(request.GET.get('month'))
        payslip = Payslip.build_for_month(contract, year, month)
    except ValidationError as e:
        return JsonResponse({'success': False, 'error': e.messages[0]}, status=400)

    work_logs = payslip.work_logs_for_period()
    data = _payslip_data(payslip)
    data['work_logs'] = _work_log_rows(work_logs, contract.standard_working_hours_per_day)

    return JsonResponse({'success': True, 'payslip': data})


@login_required
@company_required
@admin_required
@require_POST
def payslip_save_view(request, pk=None):
    company = get_user_company(request)
    instance = get_object_or_404(Payslip, pk=pk, company=company) if pk else None

    form = PayslipForm(request.POST, instance=instance, company=company)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors.get_json_data()}, status=400)

    try:
        payslip = form.save()
    except InvalidTransitionError as e:
        # Paid concurrently between load and save
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    logger.info(f"Payslip {payslip.pk} saved by user {request.user.pk}")
    return JsonResponse({'success': True, 'payslip': _payslip_data(payslip)}, status=200 if pk else 201)


@login_required
@company_required
@admin_required
@require_POST
def payslip_change_status_view(request, pk):
    company = get_user_company(request)
    payslip = get_object_or_404(Payslip.objects.select_related('contract__employee'), pk=pk, company=company)
    new_status = request.POST.get('status')

    try:
        payslip.transition_to(new_status)
    except InvalidTransitionError as e:
        logger.warning(f"Rejected payslip status change for {payslip.pk}: {e}")
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    return JsonResponse({'success': True, 'payslip': _payslip_data(payslip)})


@login_required
@company_required
@admin_required
@require_POST
def work_log_review_view(request, pk, decision):
    company = get_user_company(request)
    work_log = get_object_or_404(WorkLog, pk=pk, company=company)

    try:
        if decision == 'approve':
            work_log.approve(request.user)
        else:
            work_log.reject(request.user)
    except InvalidTransitionError as e:
        return JsonResponse({'success': False, 'error': str(e)}, status=400)

    return JsonResponse({
        'success': True,
        'status': work_log.status,
        'approved_by': request.user.get_full_name(),
        'approved_at': work_log.approved_at.isoformat(),
    })


@login_required
@company_required
@require_GET
def payslip_export_view(request):
    """Excel export of all payslips of one month: ?month=YYYYMM"""
    company = get_user_company(request)

    try:
        year, month = _parse_month(request.GET.get('month'))
    except ValidationError as e:
        return JsonResponse({'success': False, 'error': e.messages[0]}, status=400)

    period_start, period_end, _next = month_period(year, month)
    payslips = Payslip.objects.filter(
        company=company,
        period_start__gte=period_start,
        period_start__lte=period_end
    ).select_related('contract__employee').order_by('contract__employee__surname')

    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = f"Payslips {year}-{month:02d}"

    headers = [
        'ID', 'Employee', 'Period Start', 'Period End', 'Base Salary', 'Allowances',
        'Overtime', 'Deductions', 'Net Salary', 'Currency', 'Status', 'Payment Date'
    ]

    for col, header in enumerate(headers, start=1):
        cell = ws.cell(row=1, column=col, value=header)
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color="667eea", end_color="667eea", fill_type="solid")

    for row, payslip in enumerate(payslips, start=2):
        ws.cell(row=row, column=1, value=payslip.id)
        ws.cell(row=row, column=2, value=payslip.contract.employee.get_full_name())
        ws.cell(row=row, column=3, value=payslip.period_start)
        ws.cell(row=row, column=4, value=payslip.period_end)
        ws.cell(row=row, column=5, value=payslip.base_salary)
        ws.cell(row=row, column=6, value=payslip.total_allowances)
        ws.cell(row=row, column=7, value=payslip.total_overtime)
        ws.cell(row=row, column=8, value=payslip.total_deductions)
        ws.cell(row=row, column=9, value=payslip.net_salary)
        ws.cell(row=row, column=10, value=payslip.contract.currency)
        ws.cell(row=row, column=11, value=payslip.get_status_display())
        ws.cell(row=row, column=12, value=payslip.payment_date)

    for col in ws.columns:
        max_length = max(len(str(cell.value)) if cell.value is not None else 0 for cell in col)
        ws.column_dimensions[col[0].column_letter].width = min(max_length + 2, 50)

    response = HttpResponse(
        content_type='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
    )
    response['Content-Disposition'] = f'attachment; filename="payslips_{year}{month:02d}_{timezone.now().strftime("%Y%m%d_%H%M%S")}.xlsx"'
    wb.save(response)

    return response
