from django.contrib import admin
from django.utils.html import format_html

from .models import Activity, FollowUp, Lead, LeadSource, LeadStage, StageHistory


@admin.register(LeadSource)
class LeadSourceAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'order', 'is_active']
    list_filter = ['company', 'is_active']
    search_fields = ['name']
    ordering = ['company', 'order', 'name']


@admin.register(LeadStage)
class LeadStageAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'order_index', 'color_badge', 'leads_count', 'is_active']
    list_filter = ['company', 'is_active']
    search_fields = ['name']
    prepopulated_fields = {'slug': ('name',)}
    ordering = ['company', 'order_index', 'name']

    def color_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            obj.color,
            obj.color
        )
    color_badge.short_description = 'Color'

    def leads_count(self, obj):
        return obj.leads.count()
    leads_count.short_description = 'Leads'


class StageHistoryInline(admin.TabularInline):

    model = StageHistory
    fk_name = 'lead'
    extra = 0  # History rows are only written by the pipeline
    readonly_fields = ['changed_at', 'from_stage', 'to_stage', 'changed_by', 'notes']
    fields = ['changed_at', 'from_stage', 'to_stage', 'changed_by', 'notes']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('from_stage', 'to_stage', 'changed_by')


class ActivityInline(admin.TabularInline):

    model = Activity
    extra = 0  # Logged through the API
    readonly_fields = ['user', 'activity_type', 'subject', 'description', 'created_at']
    fields = ['created_at', 'user', 'activity_type', 'subject', 'description']
    classes = ['collapse']
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


class FollowUpInline(admin.TabularInline):

    model = FollowUp
    fk_name = 'lead'
    extra = 0
    fields = ['due_at', 'description', 'priority', 'assigned_to', 'status', 'completed_at']
    readonly_fields = ['completed_at']
    classes = ['collapse']

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Lead)
class LeadAdmin(admin.ModelAdmin):

    list_display = [
        'id',
        'company_name',
        'contact_name',
        'stage_badge',
        'status_badge',
        'assigned_to_display',
        'is_converted',
        'created_at',
    ]

    list_filter = [
        'company',
        'current_stage',
        'status',
        'is_converted',
        'created_at',
    ]

    search_fields = [
        'company_name',
        'contact_name',
        'contact_email',
        'notes',
    ]

    ordering = ['-created_at']
    list_per_page = 50
    date_hierarchy = 'created_at'

    fieldsets = [
        ('Prospect', {
            'fields': ['company', 'company_name', 'industry', 'website']
        }),
        ('Contact', {
            'fields': ['contact_name', 'contact_title', 'contact_email', 'contact_phone']
        }),
        ('Pipeline', {
            'fields': ['source', 'current_stage', 'status', 'assigned_to']
        }),
        ('Conversion', {
            'fields': ['is_converted', 'converted_at', 'qualified_at'],
        }),
        ('Additional Info', {
            'fields': ['notes', 'tags'],
            'classes': ['collapse'],
        }),
        ('Timestamps', {
            'fields': ['created_at', 'updated_at'],
            'classes': ['collapse'],
        }),
    ]

    readonly_fields = ['converted_at', 'qualified_at', 'created_at', 'updated_at']
    inlines = [StageHistoryInline, FollowUpInline, ActivityInline]

    def get_readonly_fields(self, request, obj=None):
        # Stage moves must go through the pipeline so they get a history row
        if obj:
            return self.readonly_fields + ['current_stage']
        return self.readonly_fields

    def stage_badge(self, obj):
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            obj.current_stage.color,
            obj.current_stage.name
        )
    stage_badge.short_description = 'Stage'

    def status_badge(self, obj):
        colors = {
            'new': '#17a2b8',
            'contacted': '#ffc107',
            'qualified': '#28a745',
            'unqualified': '#dc3545',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.status, '#6c757d'),
            obj.get_status_display()
        )
    status_badge.short_description = 'Status'

    def assigned_to_display(self, obj):
        if obj.assigned_to:
            return obj.assigned_to.get_full_name()
        return format_html('<span style="color: #999;">Unassigned</span>')
    assigned_to_display.short_description = 'Assigned To'

    actions = ['mark_as_contacted', 'mark_as_qualified', 'mark_as_unqualified', 'mark_as_converted']

    def _change_status(self, request, queryset, new_status):
        count = 0
        for lead in queryset:
            if lead.change_status(new_status, request.user):
                count += 1
        self.message_user(request, f'Updated {count} leads to "{dict(Lead.STATUS_CHOICES)[new_status]}"')

    def mark_as_contacted(self, request, queryset):
        self._change_status(request, queryset, 'contacted')
    mark_as_contacted.short_description = 'Mark as "Contacted"'

    def mark_as_qualified(self, request, queryset):
        self._change_status(request, queryset, 'qualified')
    mark_as_qualified.short_description = 'Mark as "Qualified"'

    def mark_as_unqualified(self, request, queryset):
        self._change_status(request, queryset, 'unqualified')
    mark_as_unqualified.short_description = 'Mark as "Unqualified"'

    def mark_as_converted(self, request, queryset):
        count = sum(1 for lead in queryset if lead.mark_converted(request.user))
        self.message_user(request, f'Converted {count} leads')
    mark_as_converted.short_description = 'Mark as converted'

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('company', 'source', 'current_stage', 'assigned_to')


@admin.register(StageHistory)
class StageHistoryAdmin(admin.ModelAdmin):
    list_display = ['id', 'lead', 'from_stage', 'to_stage', 'changed_by', 'changed_at']
    list_filter = ['company', 'to_stage', 'changed_at']
    search_fields = ['lead__company_name', 'notes']
    ordering = ['-changed_at']
    readonly_fields = ['company', 'lead', 'from_stage', 'to_stage', 'changed_by', 'notes', 'changed_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('lead', 'from_stage', 'to_stage', 'changed_by')


@admin.register(Activity)
class ActivityAdmin(admin.ModelAdmin):
    list_display = ['id', 'lead', 'user', 'activity_type', 'subject', 'activity_date', 'created_at']
    list_filter = ['activity_type', 'created_at']
    search_fields = ['subject', 'description', 'lead__company_name']
    ordering = ['-created_at']
    list_per_page = 100
    readonly_fields = ['lead', 'user', 'activity_type', 'subject', 'description', 'activity_date',
                       'duration_minutes', 'status', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def get_queryset(self, request):
        qs = super().get_queryset(request)
        return qs.select_related('lead', 'user')


@admin.register(FollowUp)
class FollowUpAdmin(admin.ModelAdmin):
    list_display = ['id', 'lead', 'description', 'due_at', 'priority_badge', 'assigned_to', 'status_badge']
    list_filter = ['company', 'status', 'priority']
    search_fields = ['description', 'lead__company_name']
    ordering = ['due_at']
    readonly_fields = ['company', 'created_by', 'completed_at', 'reminder_sent_at', 'created_at', 'updated_at']
    list_select_related = ['lead', 'assigned_to']
    actions = ['mark_completed']

    def has_add_permission(self, request):
        return False

    def priority_badge(self, obj):
        colors = {
            'low': '#6c757d',
            'medium': '#ffc107',
            'high': '#dc3545',
        }
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors.get(obj.priority, '#6c757d'),
            obj.get_priority_display()
        )
    priority_badge.short_description = 'Priority'

    def status_badge(self, obj):
        colors = {
            'pending': '#17a2b8',
            'overdue': '#dc3545',
            'completed': '#28a745',
        }
        status = obj.display_status
        return format_html(
            '<span style="background-color: {}; color: white; padding: 3px 8px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            colors[status],
            status.title()
        )
    status_badge.short_description = 'Status'

    def mark_completed(self, request, queryset):
        completed = sum(1 for follow_up in queryset.select_related('lead') if follow_up.complete(request.user))
        self.message_user(request, f'{completed} follow-up(s) marked as completed.')
    mark_completed.short_description = 'Mark selected follow-ups as completed'
