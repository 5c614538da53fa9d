"""
Department View Tests
=====================

Test Coverage:
1. department_options_view - indented options, active filter, access control
2. department_save_view - create, update, validation errors, admin only
3. DepartmentForm - parent choices exclude the edited subtree

Run tests:
    python manage.py test apps.core.tests.test_views --settings=config.settings_test
"""

from django.test import TestCase
from django.urls import reverse

from apps.accounts.models import User
from apps.core.forms import DepartmentForm
from apps.core.models import Company, Department


class DepartmentTestMixin:

    def setUp(self):
        self.company = Company.objects.create(name='Acme Ltd', slug='acme')
        self.admin = User.objects.create_user(
            email='hr@acme.com',
            password='testpass123',
            first_name='Anna',
            last_name='Berg',
            company=self.company,
            role='admin'
        )
        self.agent = User.objects.create_user(
            email='agent@acme.com',
            password='testpass123',
            company=self.company,
            role='agent'
        )

        self.engineering = Department.objects.create(company=self.company, name='Engineering')
        self.backend = Department.objects.create(company=self.company, name='Backend', parent_department=self.engineering)
        self.archive = Department.objects.create(company=self.company, name='Archive', is_active=False)

        self.client.login(email='hr@acme.com', password='testpass123')


class DepartmentOptionsViewTest(DepartmentTestMixin, TestCase):

    def test_options(self):
        response = self.client.get(reverse('core:department_options'))

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            [row['display_name'] for row in response.json()['departments']],
            ['Archive', 'Engineering', '— Backend']
        )

    def test_active_only(self):
        response = self.client.get(reverse('core:department_options'), {'active': '1'})

        names = [row['display_name'] for row in response.json()['departments']]
        self.assertNotIn('Archive', names)

    def test_other_company_hidden(self):
        other = Company.objects.create(name='Other Co', slug='other')
        Department.objects.create(company=other, name='Finance')

        response = self.client.get(reverse('core:department_options'))

        names = [row['display_name'] for row in response.json()['departments']]
        self.assertNotIn('Finance', names)

    def test_post_not_allowed(self):
        response = self.client.post(reverse('core:department_options'))
        self.assertEqual(response.status_code, 405)

    def test_requires_company(self):
        User.objects.create_user(email='loner@test.com', password='testpass123')
        self.client.login(email='loner@test.com', password='testpass123')

        response = self.client.get(reverse('core:department_options'))

        self.assertEqual(response.status_code, 403)


class DepartmentSaveViewTest(DepartmentTestMixin, TestCase):

    def test_create(self):
        response = self.client.post(reverse('core:department_create'), {
            'name': 'Payments',
            'parent_department': self.backend.pk,
            'is_active': 'on',
        })

        self.assertEqual(response.status_code, 201)
        department = Department.objects.get(name='Payments')
        self.assertEqual(department.company, self.company)
        self.assertEqual(department.parent_department, self.backend)

    def test_update(self):
        response = self.client.post(reverse('core:department_update', args=[self.backend.pk]), {
            'name': 'Platform',
            'parent_department': '',
            'is_active': 'on',
        })

        self.assertEqual(response.status_code, 200)
        self.backend.refresh_from_db()
        self.assertEqual(self.backend.name, 'Platform')
        self.assertIsNone(self.backend.parent_department)

    def test_descendant_parent_rejected(self):
        """
        Test: Engineering moved under its own child

        Expected: 400, tree unchanged
        """
        response = self.client.post(reverse('core:department_update', args=[self.engineering.pk]), {
            'name': 'Engineering',
            'parent_department': self.backend.pk,
            'is_active': 'on',
        })

        self.assertEqual(response.status_code, 400)
        self.assertIn('parent_department', response.json()['errors'])
        self.engineering.refresh_from_db()
        self.assertIsNone(self.engineering.parent_department)

    def test_missing_name(self):
        response = self.client.post(reverse('core:department_create'), {'name': ''})

        self.assertEqual(response.status_code, 400)
        self.assertIn('name', response.json()['errors'])

    def test_other_company_department_404(self):
        other = Company.objects.create(name='Other Co', slug='other')
        foreign = Department.objects.create(company=other, name='Finance')

        response = self.client.post(reverse('core:department_update', args=[foreign.pk]), {'name': 'Mine'})

        self.assertEqual(response.status_code, 404)

    def test_agent_denied(self):
        self.client.login(email='agent@acme.com', password='testpass123')

        response = self.client.post(reverse('core:department_create'), {'name': 'Sales'})

        self.assertEqual(response.status_code, 403)
        self.assertFalse(Department.objects.filter(name='Sales').exists())


class DepartmentFormTest(DepartmentTestMixin, TestCase):

    def test_parent_choices_skip_own_subtree(self):
        form = DepartmentForm(instance=self.engineering, company=self.company)

        choice_ids = [value for value, _label in form.fields['parent_department'].choices]
        self.assertEqual(choice_ids, ['', self.archive.pk])

    def test_new_department_sees_whole_tree(self):
        form = DepartmentForm(company=self.company)

        labels = [label for _value, label in form.fields['parent_department'].choices]
        self.assertEqual(labels, ['No parent (top level)', 'Archive', 'Engineering', '— Backend'])
