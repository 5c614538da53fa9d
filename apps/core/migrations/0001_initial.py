import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Company',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Company name', max_length=200, unique=True)),
                ('slug', models.SlugField(help_text='URL-friendly name (auto-generated)', max_length=200, unique=True)),
                ('description', models.TextField(blank=True, help_text='Brief description about the company')),
                ('phone', models.CharField(blank=True, help_text='Contact phone number', max_length=17)),
                ('email', models.EmailField(blank=True, help_text='Contact email', max_length=254)),
                ('address', models.TextField(blank=True, help_text='Physical address')),
                ('currency', models.CharField(default='EUR', help_text='Default currency for contracts (ISO 4217)', max_length=3)),
                ('timezone', models.CharField(default='UTC', help_text='Company timezone', max_length=50)),
                ('is_active', models.BooleanField(default=True, help_text='Is company active?')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Company',
                'verbose_name_plural': 'Companies',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Department name (e.g. Sales, Engineering)', max_length=150)),
                ('description', models.TextField(blank=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(help_text='Which company owns this department', on_delete=django.db.models.deletion.CASCADE, related_name='departments', to='core.company')),
                ('parent_department', models.ForeignKey(blank=True, help_text='Parent department (empty for top-level departments)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='core.department')),
            ],
            options={
                'verbose_name': 'Department',
                'verbose_name_plural': 'Departments',
                'ordering': ['name'],
                'indexes': [models.Index(fields=['company', 'parent_department'], name='core_dept_company_parent_idx')],
            },
        ),
    ]
