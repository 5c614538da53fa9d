from django.contrib import admin
from django.utils.html import format_html
from apps.core.exceptions import InvalidTransitionError
from .models import Employee, EmployeeContract, Payslip, WorkLog, WorkScheduleType


@admin.register(Employee)
class EmployeeAdmin(admin.ModelAdmin):
    list_display = ['id', 'given_name', 'surname', 'company', 'department', 'is_active']
    list_filter = ['company', 'department', 'is_active']
    search_fields = ['given_name', 'surname', 'email']
    list_select_related = ['company', 'department']


@admin.register(WorkScheduleType)
class WorkScheduleTypeAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'multiplier', 'is_active']
    list_filter = ['company', 'is_active']


@admin.register(EmployeeContract)
class EmployeeContractAdmin(admin.ModelAdmin):
    list_display = ['employee', 'position', 'start_date', 'end_date', 'base_salary', 'currency', 'is_active']
    list_filter = ['company', 'is_active', 'currency']
    search_fields = ['employee__given_name', 'employee__surname', 'position']
    list_select_related = ['employee']


@admin.register(WorkLog)
class WorkLogAdmin(admin.ModelAdmin):
    list_display = ['employee', 'date', 'start_time', 'end_time', 'break_duration_minutes', 'schedule_type', 'status_badge']
    list_filter = ['company', 'status', 'schedule_type', 'date']
    search_fields = ['employee__given_name', 'employee__surname', 'notes']
    date_hierarchy = 'date'
    readonly_fields = ['approved_by', 'approved_at', 'created_at', 'updated_at']
    list_select_related = ['employee', 'schedule_type']
    actions = ['approve_selected', 'reject_selected']

    def status_badge(self, obj):
        colors = {
            'pending': '#ffc107',
            'approved': '#28a745',
            'rejected': '#dc3545',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def _review_selected(self, request, queryset, decision):
        done = 0
        for work_log in queryset.filter(status='pending'):
            getattr(work_log, decision)(request.user)
            done += 1
        self.message_user(request, f'{done} work logs {decision}d')

    def approve_selected(self, request, queryset):
        self._review_selected(request, queryset, 'approve')
    approve_selected.short_description = 'Approve selected pending work logs'

    def reject_selected(self, request, queryset):
        self._review_selected(request, queryset, 'reject')
    reject_selected.short_description = 'Reject selected pending work logs'


@admin.register(Payslip)
class PayslipAdmin(admin.ModelAdmin):
    list_display = ['id', 'contract', 'period_start', 'period_end', 'net_salary', 'status', 'payment_date']
    list_filter = ['company', 'status', 'period_start']
    readonly_fields = ['net_salary', 'created_at', 'updated_at']
    list_select_related = ['contract__employee']
    actions = ['approve_selected', 'mark_paid']

    def has_change_permission(self, request, obj=None):
        if obj is not None and not obj.is_editable:
            return False
        return super().has_change_permission(request, obj)

    def _transition_selected(self, request, queryset, target):
        done = 0
        for payslip in queryset:
            try:
                payslip.transition_to(target)
                done += 1
            except InvalidTransitionError as e:
                self.message_user(request, str(e), level='warning')
        self.message_user(request, f'{done} payslips moved to "{target}"')

    def approve_selected(self, request, queryset):
        self._transition_selected(request, queryset, 'approved')
    approve_selected.short_description = 'Approve selected payslips'

    def mark_paid(self, request, queryset):
        self._transition_selected(request, queryset, 'paid')
    mark_paid.short_description = 'Mark selected payslips as paid'
