from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from django.utils.text import slugify
from taggit.managers import TaggableManager

from apps.core.models import Company


class LeadSource(models.Model):

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='lead_sources')
    name = models.CharField(max_length=100, help_text="Source name (e.g. Website, Referral, Trade fair)")
    icon = models.CharField(max_length=50, blank=True, help_text="FontAwesome icon class (e.g. fas fa-globe)")
    color = models.CharField(max_length=7, default='#667eea', help_text="Hex color code for UI display")
    is_active = models.BooleanField(default=True)
    order = models.PositiveIntegerField(default=0, help_text="Display order (lower numbers appear first)")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Lead Source"
        verbose_name_plural = "Lead Sources"
        ordering = ['order', 'name']
        unique_together = ['company', 'name']

    def __str__(self):
        return self.name


class LeadStage(models.Model):
    """One column of a company's sales pipeline"""

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='lead_stages')
    name = models.CharField(max_length=100, help_text="Stage name (e.g. Contacted, Proposal)")
    slug = models.SlugField(max_length=100, help_text="URL-friendly name (auto-generated)")
    color = models.CharField(max_length=7, default='#667eea', help_text="Hex color code for UI display")
    order_index = models.PositiveIntegerField(default=0, help_text="Position in the pipeline (lower numbers = left)")
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "Lead Stage"
        verbose_name_plural = "Lead Stages"
        ordering = ['order_index', 'name']
        unique_together = ['company', 'name']
        indexes = [
            models.Index(fields=['company', 'order_index'], name='leads_stage_company_order_idx'),
        ]

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)


class Lead(models.Model):

    STATUS_CHOICES = [
        ('new', 'New'),
        ('contacted', 'Contacted'),
        ('qualified', 'Qualified'),
        ('unqualified', 'Unqualified'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='leads', help_text='Which company owns this lead')

    # Prospect
    company_name = models.CharField(max_length=200, help_text="Prospect's company name")
    industry = models.CharField(max_length=100, blank=True)
    website = models.URLField(blank=True)

    # Contact person
    contact_name = models.CharField(max_length=200)
    contact_title = models.CharField(max_length=100, blank=True)
    contact_email = models.EmailField(blank=True)
    contact_phone = models.CharField(max_length=30, blank=True, help_text='Phone number in international format')

    # Pipeline
    source = models.ForeignKey(LeadSource, on_delete=models.PROTECT, null=True, blank=True, related_name='leads',
                               help_text='Where did this lead come from?')
    current_stage = models.ForeignKey(LeadStage, on_delete=models.PROTECT, related_name='leads',
                                      help_text='Current stage in the pipeline')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='new', db_index=True)
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='assigned_leads', help_text='Which user is responsible for this lead')

    notes = models.TextField(blank=True, help_text='General notes about this lead')
    tags = TaggableManager(blank=True)

    is_converted = models.BooleanField(default=False)
    converted_at = models.DateTimeField(null=True, blank=True)
    qualified_at = models.DateTimeField(null=True, blank=True, help_text='First time the lead reached "qualified"')

    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Lead'
        verbose_name_plural = 'Leads'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['company', 'status'], name='leads_lead_company_status_idx'),
            models.Index(fields=['company', 'current_stage'], name='leads_lead_company_stage_idx'),
        ]

    def __str__(self):
        return f"{self.company_name} ({self.contact_name}) - {self.get_status_display()}"

    def get_initials(self):
        """Avatar letters: 'Nordwind Logistics' -> 'NL'"""
        parts = self.company_name.split()
        if len(parts) >= 2:
            return f"{parts[0][0]}{parts[1][0]}".upper()
        elif len(parts) == 1:
            return parts[0][0].upper()
        return "?"

    def clean(self):
        errors = {}
        if self.current_stage_id and self.company_id and self.current_stage.company_id != self.company_id:
            errors['current_stage'] = 'Stage belongs to another company'
        if self.source_id and self.company_id and self.source.company_id != self.company_id:
            errors['source'] = 'Source belongs to another company'
        if errors:
            raise ValidationError(errors)

    def change_status(self, new_status, user=None):
        if new_status not in dict(self.STATUS_CHOICES):
            raise ValidationError({'status': f'Unknown status "{new_status}"'})

        old_status = self.status
        if old_status == new_status:
            return False

        self.status = new_status
        update_fields = ['status', 'updated_at']
        if new_status == 'qualified' and not self.qualified_at:
            self.qualified_at = timezone.now()
            update_fields.append('qualified_at')
        self.save(update_fields=update_fields)

        status_display = dict(self.STATUS_CHOICES)
        Activity.objects.create(
            lead=self,
            user=user,
            activity_type='status_changed',
            description=f'Status changed from "{status_display[old_status]}" to "{status_display[new_status]}"'
        )
        return True

    def mark_converted(self, user=None):
        if self.is_converted:
            return False

        self.is_converted = True
        self.converted_at = timezone.now()
        self.save(update_fields=['is_converted', 'converted_at', 'updated_at'])

        Activity.objects.create(
            lead=self,
            user=user,
            activity_type='converted',
            description='Lead converted to client'
        )
        return True

    def log_activity(self, activity_type, user=None, subject='', description='', activity_date=None,
                     duration_minutes=None, status='completed'):
        """
        Record a call, email, meeting, note or task done by a user

        Raises:
            ValidationError: unknown or system-only activity type
        """
        if activity_type not in Activity.MANUAL_TYPES:
            raise ValidationError({'activity_type': f'"{activity_type}" cannot be logged manually'})

        activity = Activity(
            lead=self,
            user=user,
            activity_type=activity_type,
            subject=subject,
            description=description or subject,
            activity_date=activity_date or timezone.now(),
            duration_minutes=duration_minutes,
            status=status,
        )
        activity.full_clean()
        activity.save()
        return activity

    def schedule_follow_up(self, description, due_at, user=None, assigned_to=None, priority='medium'):
        """
        Raises:
            ValidationError: due date in the past, or assignee of another company
        """
        if due_at < timezone.now():
            raise ValidationError({'due_at': 'Follow-up date cannot be in the past'})
        if assigned_to is not None and assigned_to.company_id != self.company_id:
            raise ValidationError({'assigned_to': 'User belongs to another company'})

        follow_up = FollowUp(
            company=self.company,
            lead=self,
            description=description,
            due_at=due_at,
            priority=priority,
            assigned_to=assigned_to,
            created_by=user,
        )
        follow_up.full_clean()
        follow_up.save()

        Activity.objects.create(
            lead=self,
            user=user,
            activity_type='follow_up_scheduled',
            description=f'Follow-up scheduled: {timezone.localtime(due_at).strftime("%Y-%m-%d %H:%M")}'
        )
        return follow_up

    def get_activities(self):
        return self.activities.all().select_related('user').order_by('-created_at')


class StageHistory(models.Model):
    """
    One pipeline move of a lead. Rows are only appended, together with the
    lead's current_stage update (see pipeline.transition_lead_stage).
    """

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='stage_history')
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='stage_history')
    from_stage = models.ForeignKey(LeadStage, on_delete=models.PROTECT, null=True, blank=True, related_name='exits')
    to_stage = models.ForeignKey(LeadStage, on_delete=models.PROTECT, related_name='entries')
    changed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='stage_changes')
    notes = models.TextField(blank=True)
    changed_at = models.DateTimeField(default=timezone.now, db_index=True)

    class Meta:
        verbose_name = 'Stage History'
        verbose_name_plural = 'Stage History'
        ordering = ['changed_at', 'id']
        indexes = [
            models.Index(fields=['company', 'changed_at'], name='leads_history_company_idx'),
            models.Index(fields=['lead', 'changed_at'], name='leads_history_lead_idx'),
        ]

    def __str__(self):
        from_name = self.from_stage.name if self.from_stage else '-'
        return f"{self.lead.company_name}: {from_name} -> {self.to_stage.name}"


class Activity(models.Model):

    ACTIVITY_TYPE_CHOICES = [
        # Written by the system
        ('created', 'Created'),
        ('status_changed', 'Status Changed'),
        ('converted', 'Converted'),
        ('follow_up_scheduled', 'Follow-up Scheduled'),
        ('follow_up_completed', 'Follow-up Completed'),
        ('follow_up_reminder', 'Follow-up Reminder'),
        # Logged by users
        ('note_added', 'Note Added'),
        ('email_sent', 'Email Sent'),
        ('call_logged', 'Call Logged'),
        ('meeting_held', 'Meeting Held'),
        ('task_done', 'Task'),
    ]
    MANUAL_TYPES = ['note_added', 'email_sent', 'call_logged', 'meeting_held', 'task_done']

    STATUS_CHOICES = [
        ('planned', 'Planned'),
        ('completed', 'Completed'),
        ('cancelled', 'Cancelled'),
    ]

    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='activities')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                             related_name='lead_activities', help_text='Who performed this action')
    activity_type = models.CharField(max_length=30, choices=ACTIVITY_TYPE_CHOICES)
    subject = models.CharField(max_length=200, blank=True, help_text='Short title, e.g. "Intro call"')
    description = models.TextField(help_text='Human-readable description of what happened')
    activity_date = models.DateTimeField(default=timezone.now, help_text='When the call/meeting/email took place')
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed')
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = 'Activity'
        verbose_name_plural = 'Activities'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['lead', '-created_at'], name='leads_activity_lead_idx'),
        ]

    def __str__(self):
        user_name = self.user.get_full_name() if self.user else 'System'
        return f"{user_name}: {self.description}"

    @property
    def is_manual(self):
        return self.activity_type in self.MANUAL_TYPES


class FollowUp(models.Model):
    """A scheduled next step for a lead (call back, send an offer, ...)"""

    PRIORITY_CHOICES = [
        ('low', 'Low'),
        ('medium', 'Medium'),
        ('high', 'High'),
    ]
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
    ]

    company = models.ForeignKey(Company, on_delete=models.CASCADE, related_name='lead_follow_ups')
    lead = models.ForeignKey(Lead, on_delete=models.CASCADE, related_name='follow_ups')
    description = models.TextField(help_text='What needs to happen')
    due_at = models.DateTimeField(help_text='When it is due')
    priority = models.CharField(max_length=10, choices=PRIORITY_CHOICES, default='medium')
    assigned_to = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                    related_name='assigned_follow_ups', help_text='Who should do it')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True,
                                   related_name='created_follow_ups')
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    completed_at = models.DateTimeField(null=True, blank=True)
    reminder_sent_at = models.DateTimeField(null=True, blank=True, help_text='Set once the overdue reminder was logged')

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = 'Follow-up'
        verbose_name_plural = 'Follow-ups'
        ordering = ['due_at', 'id']
        indexes = [
            models.Index(fields=['company', 'status', 'due_at'], name='leads_followup_due_idx'),
            models.Index(fields=['lead', 'due_at'], name='leads_followup_lead_idx'),
        ]

    def __str__(self):
        return f"{self.lead.company_name}: {self.description[:50]}"

    @property
    def is_overdue(self):
        return self.status == 'pending' and self.due_at < timezone.now()

    @property
    def display_status(self):
        """'overdue' is derived, never stored"""
        return 'overdue' if self.is_overdue else self.status

    def complete(self, user=None):
        if self.status == 'completed':
            return False

        self.status = 'completed'
        self.completed_at = timezone.now()
        self.save(update_fields=['status', 'completed_at', 'updated_at'])

        Activity.objects.create(
            lead=self.lead,
            user=user,
            activity_type='follow_up_completed',
            description=f'Follow-up completed: {self.description[:100]}'
        )
        return True
