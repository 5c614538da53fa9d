from django import forms
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import UserChangeForm as BaseUserChangeForm
from django.contrib.auth.forms import UserCreationForm as BaseUserCreationForm
from django.utils.translation import gettext_lazy as _
from django.utils.html import format_html
from .models import User


class UserCreationForm(BaseUserCreationForm):
    class Meta:
        model = User
        fields = ('email',)
        field_classes = {'email': forms.EmailField}


class UserChangeForm(BaseUserChangeForm):
    class Meta:
        model = User
        fields = '__all__'


# CUSTOM USER ADMIN
@admin.register(User)
class UserAdmin(BaseUserAdmin):
    form = UserChangeForm
    add_form = UserCreationForm

    list_display = (
        'email',
        'get_full_name_display',
        'company',
        'role_badge',
        'is_active',
        'date_joined',
    )
    list_display_links = ('email', 'get_full_name_display')
    list_filter = ('role', 'is_active', 'is_staff', 'is_superuser', 'company')
    search_fields = ('email', 'first_name', 'last_name', 'company__name')
    ordering = ('-date_joined',)
    list_per_page = 25
    list_select_related = ('company',)

    fieldsets = (
        (_('Login Credentials'), {
            'fields': ('email', 'password'),
            'classes': ('wide',),
        }),
        (_('Personal Information'), {
            'fields': ('first_name', 'last_name'),
        }),
        (_('Company & Role'), {
            'fields': ('company', 'role'),
            'description': _('Company association and user role (admin or agent)')
        }),
        (_('Permissions'), {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
            'classes': ('collapse',),
        }),
        (_('Important dates'), {
            'fields': ('date_joined', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    # Fields shown when creating NEW user
    add_fieldsets = (
        (_('Login Credentials'), {
            'fields': ('email', 'password1', 'password2'),
            'classes': ('wide',),
        }),
        (_('Company & Role'), {
            'fields': ('company', 'role'),
        }),
    )

    readonly_fields = ('date_joined', 'last_login')

    def get_full_name_display(self, obj):
        return obj.get_full_name()

    get_full_name_display.short_description = _('Full Name')
    get_full_name_display.admin_order_field = 'first_name'

    def role_badge(self, obj):
        color = '#28a745' if obj.role == 'admin' else '#007bff'
        return format_html(
            '<span style="background: {}; color: white; padding: 3px 10px; '
            'border-radius: 3px; font-size: 11px;">{}</span>',
            color, obj.get_role_display()
        )

    role_badge.short_description = _('Role')
    role_badge.admin_order_field = 'role'

    def has_delete_permission(self, request, obj=None):
        if obj and obj == request.user:
            return False  # Cannot delete yourself
        return super().has_delete_permission(request, obj)


admin.site.site_header = _('HR & CRM Administration')
admin.site.site_title = _('HR & CRM')
admin.site.index_title = _('Administration')
