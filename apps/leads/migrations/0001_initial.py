import django.db.models.deletion
import django.utils.timezone
import taggit.managers
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        ('taggit', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='LeadSource',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Source name (e.g. Website, Referral, Trade fair)', max_length=100)),
                ('icon', models.CharField(blank=True, help_text='FontAwesome icon class (e.g. fas fa-globe)', max_length=50)),
                ('color', models.CharField(default='#667eea', help_text='Hex color code for UI display', max_length=7)),
                ('is_active', models.BooleanField(default=True)),
                ('order', models.PositiveIntegerField(default=0, help_text='Display order (lower numbers appear first)')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lead_sources', to='core.company')),
            ],
            options={
                'verbose_name': 'Lead Source',
                'verbose_name_plural': 'Lead Sources',
                'ordering': ['order', 'name'],
                'unique_together': {('company', 'name')},
            },
        ),
        migrations.CreateModel(
            name='LeadStage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Stage name (e.g. Contacted, Proposal)', max_length=100)),
                ('slug', models.SlugField(help_text='URL-friendly name (auto-generated)', max_length=100)),
                ('color', models.CharField(default='#667eea', help_text='Hex color code for UI display', max_length=7)),
                ('order_index', models.PositiveIntegerField(default=0, help_text='Position in the pipeline (lower numbers = left)')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='lead_stages', to='core.company')),
            ],
            options={
                'verbose_name': 'Lead Stage',
                'verbose_name_plural': 'Lead Stages',
                'ordering': ['order_index', 'name'],
                'unique_together': {('company', 'name')},
                'indexes': [models.Index(fields=['company', 'order_index'], name='leads_stage_company_order_idx')],
            },
        ),
        migrations.CreateModel(
            name='Lead',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_name', models.CharField(help_text="Prospect's company name", max_length=200)),
                ('industry', models.CharField(blank=True, max_length=100)),
                ('website', models.URLField(blank=True)),
                ('contact_name', models.CharField(max_length=200)),
                ('contact_title', models.CharField(blank=True, max_length=100)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('contact_phone', models.CharField(blank=True, help_text='Phone number in international format', max_length=30)),
                ('status', models.CharField(choices=[('new', 'New'), ('contacted', 'Contacted'), ('qualified', 'Qualified'), ('unqualified', 'Unqualified')], db_index=True, default='new', max_length=20)),
                ('notes', models.TextField(blank=True, help_text='General notes about this lead')),
                ('is_converted', models.BooleanField(default=False)),
                ('converted_at', models.DateTimeField(blank=True, null=True)),
                ('qualified_at', models.DateTimeField(blank=True, help_text='First time the lead reached "qualified"', null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('assigned_to', models.ForeignKey(blank=True, help_text='Which user is responsible for this lead', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_leads', to=settings.AUTH_USER_MODEL)),
                ('company', models.ForeignKey(help_text='Which company owns this lead', on_delete=django.db.models.deletion.CASCADE, related_name='leads', to='core.company')),
                ('current_stage', models.ForeignKey(help_text='Current stage in the pipeline', on_delete=django.db.models.deletion.PROTECT, related_name='leads', to='leads.leadstage')),
                ('source', models.ForeignKey(blank=True, help_text='Where did this lead come from?', null=True, on_delete=django.db.models.deletion.PROTECT, related_name='leads', to='leads.leadsource')),
                ('tags', taggit.managers.TaggableManager(blank=True, help_text='A comma-separated list of tags.', through='taggit.TaggedItem', to='taggit.Tag', verbose_name='Tags')),
            ],
            options={
                'verbose_name': 'Lead',
                'verbose_name_plural': 'Leads',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['company', 'status'], name='leads_lead_company_status_idx'),
                    models.Index(fields=['company', 'current_stage'], name='leads_lead_company_stage_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StageHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notes', models.TextField(blank=True)),
                ('changed_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('changed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stage_changes', to=settings.AUTH_USER_MODEL)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stage_history', to='core.company')),
                ('from_stage', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='exits', to='leads.leadstage')),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='stage_history', to='leads.lead')),
                ('to_stage', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='entries', to='leads.leadstage')),
            ],
            options={
                'verbose_name': 'Stage History',
                'verbose_name_plural': 'Stage History',
                'ordering': ['changed_at', 'id'],
                'indexes': [
                    models.Index(fields=['company', 'changed_at'], name='leads_history_company_idx'),
                    models.Index(fields=['lead', 'changed_at'], name='leads_history_lead_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Activity',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('activity_type', models.CharField(choices=[('created', 'Created'), ('status_changed', 'Status Changed'), ('converted', 'Converted')], max_length=30)),
                ('description', models.TextField(help_text='Human-readable description of what happened')),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('lead', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activities', to='leads.lead')),
                ('user', models.ForeignKey(blank=True, help_text='Who performed this action', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='lead_activities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Activity',
                'verbose_name_plural': 'Activities',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['lead', '-created_at'], name='leads_activity_lead_idx')],
            },
        ),
    ]
