from django.core.exceptions import ValidationError
from django.db import models
from django.utils.text import slugify
from django.utils.translation import gettext_lazy as _


class Company(models.Model):
    """Tenant. Every business record belongs to exactly one company."""

    # Basic Information
    name = models.CharField(max_length=200, unique=True, help_text="Company name")
    slug = models.SlugField(max_length=200, unique=True, help_text="URL-friendly name (auto-generated)")
    description = models.TextField(blank=True, help_text="Brief description about the company")

    # Contact Information
    phone = models.CharField(max_length=17, blank=True, help_text="Contact phone number")
    email = models.EmailField(blank=True, help_text="Contact email")
    address = models.TextField(blank=True, help_text="Physical address")

    # Settings
    currency = models.CharField(max_length=3, default='EUR', help_text="Default currency for contracts (ISO 4217)")
    timezone = models.CharField(max_length=50, default='UTC', help_text="Company timezone")

    # Status
    is_active = models.BooleanField(default=True, help_text="Is company active?")

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Company"
        verbose_name_plural = "Companies"
        ordering = ['-created_at']

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):

        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def get_active_users_count(self):

        return self.users.filter(is_active=True).count()


class Department(models.Model):

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='departments', help_text="Which company owns this department")
    name = models.CharField(max_length=150, help_text="Department name (e.g. Sales, Engineering)")
    parent_department = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children',
                                          help_text="Parent department (empty for top-level departments)")
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    # Timestamps
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Department"
        verbose_name_plural = "Departments"
        ordering = ['name']
        indexes = [
            models.Index(fields=['company', 'parent_department'], name='core_dept_company_parent_idx'),
        ]

    def __str__(self):
        return self.name

    def get_ancestors(self):
        """
        Walk up the parent chain, nearest parent first.
        Stops if the chain loops back on itself.
        """
        ancestors = []
        seen = {self.pk}
        node = self.parent_department
        while node is not None and node.pk not in seen:
            ancestors.append(node)
            seen.add(node.pk)
            node = node.parent_department
        return ancestors

    def clean(self):
        parent = self.parent_department
        if parent is None:
            return

        if self.pk and parent.pk == self.pk:
            raise ValidationError({'parent_department': _('A department cannot be its own parent.')})

        if parent.company_id != self.company_id:
            raise ValidationError({'parent_department': _('Parent department belongs to another company.')})

        if self.pk and any(ancestor.pk == self.pk for ancestor in parent.get_ancestors()):
            raise ValidationError({'parent_department': _('A department cannot be moved under one of its own sub-departments.')})
