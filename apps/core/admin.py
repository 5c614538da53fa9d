from django.contrib import admin
from django.utils.html import format_html
from .models import Company, Department


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):

    list_display = [
        'name',
        'contact_info',
        'status_badge',
        'users_count',
        'created_at'
    ]
    list_filter = ['is_active', 'created_at']
    search_fields = ['name', 'email', 'phone']
    prepopulated_fields = {'slug': ('name',)}
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Basic Information', {
            'fields': ('name', 'slug', 'description')
        }),
        ('Contact Information', {
            'fields': ('phone', 'email', 'address')
        }),
        ('Settings', {
            'fields': ('currency', 'timezone')
        }),
        ('Status', {
            'fields': ('is_active',)
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',)
        }),
    )

    def contact_info(self, obj):
        if not (obj.phone or obj.email):
            return '-'
        return format_html('<div style="line-height: 1.5;">{}<br>{}</div>', obj.phone, obj.email)

    contact_info.short_description = 'Contact'

    def status_badge(self, obj):
        color, label = ('#28a745', 'Active') if obj.is_active else ('#dc3545', 'Inactive')
        return format_html(
            '<span style="background-color: {}; color: white; '
            'padding: 3px 10px; border-radius: 3px; font-size: 11px;">{}</span>',
            color, label
        )

    status_badge.short_description = 'Status'

    def users_count(self, obj):
        return obj.get_active_users_count()

    users_count.short_description = 'Active Users'


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'company', 'parent_department', 'is_active', 'created_at']
    list_filter = ['company', 'is_active']
    search_fields = ['name', 'description']
    readonly_fields = ['created_at', 'updated_at']
    list_select_related = ['company', 'parent_department']
