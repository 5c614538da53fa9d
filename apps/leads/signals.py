from django.db.models.signals import post_save
from django.dispatch import receiver
from .models import Lead, Activity


@receiver(post_save, sender=Lead)
def create_lead_activity(sender, instance, created, **kwargs):

    # Only run for newly created leads (not updates)
    if created:
        Activity.objects.create(
            lead=instance,
            user=None,  # System-generated (no specific user)
            activity_type='created',
            description=f'Lead created in stage "{instance.current_stage.name}"'
        )
