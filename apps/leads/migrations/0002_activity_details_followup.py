import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
        ('leads', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.AlterField(
            model_name='activity',
            name='activity_type',
            field=models.CharField(choices=[('created', 'Created'), ('status_changed', 'Status Changed'), ('converted', 'Converted'), ('follow_up_scheduled', 'Follow-up Scheduled'), ('follow_up_completed', 'Follow-up Completed'), ('follow_up_reminder', 'Follow-up Reminder'), ('note_added', 'Note Added'), ('email_sent', 'Email Sent'), ('call_logged', 'Call Logged'), ('meeting_held', 'Meeting Held'), ('task_done', 'Task')], max_length=30),
        ),
        migrations.AddField(
            model_name='activity',
            name='subject',
            field=models.CharField(blank=True, help_text='Short title, e.g. "Intro call"', max_length=200),
        ),
        migrations.AddField(
            model_name='activity',
            name='activity_date',
            field=models.DateTimeField(default=django.utils.timezone.now, help_text='When the call/meeting/email took place'),
        ),
        migrations.AddField(
            model_name='activity',
            name='duration_minutes',
            field=models.PositiveIntegerField(blank=True, null=True),
        ),
        migrations.AddField(
            model_name='activity',
            name='status',
            field=models.CharField(choices=[('planned', 'Planned'), ('completed', 'Completed'), ('cancelled', 'Cancelled')], default='completed', max_length=20),
        ),
        migrations.CreateModel(
            name='FollowUp',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('description', models.TextField(help_text='What needs to happen')),
                ('due_at', models.DateTimeField(help_text='When it is due')),
                ('priority', models.CharField(choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=10)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('completed', 'Completed')], default='pending', max_length=20)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('reminder_sent_at', models.DateTimeField(blank=True, help_text='Set once the overdue reminder was logged', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lead_follow_ups', to='core.company')),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='follow_ups', to='leads.lead')),
                ('assigned_to', models.ForeignKey(blank=True, help_text='Who should do it', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_follow_ups', to=settings.AUTH_USER_MODEL)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_follow_ups', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Follow-up',
                'verbose_name_plural': 'Follow-ups',
                'ordering': ['due_at', 'id'],
                'indexes': [
                    models.Index(fields=['company', 'status', 'due_at'], name='leads_followup_due_idx'),
                    models.Index(fields=['lead', 'due_at'], name='leads_followup_lead_idx'),
                ],
            },
        ),
    ]
