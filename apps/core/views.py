import logging

from django.contrib.auth.decorators import login_required
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_POST

from apps.accounts.decorators import admin_required, company_required
from .exceptions import HierarchyCycleError
from .forms import DepartmentForm
from .hierarchy import format_department_hierarchy
from .models import Department
from .utils import get_user_company

logger = logging.getLogger(__name__)


@login_required
@company_required
@require_GET
def department_options_view(request):
    company = get_user_company(request)
    departments = Department.objects.filter(company=company)

    if request.GET.get('active') == '1':
        departments = departments.filter(is_active=True)

    try:
        options = format_department_hierarchy(departments.values('id', 'name', 'parent_department_id'))
    except HierarchyCycleError as e:
        logger.error(f"Department tree of company {company.pk} is malformed: {e.messages[0]}")
        return JsonResponse({'success': False, 'error': e.messages[0]}, status=500)

    return JsonResponse({'success': True, 'departments': options})


@login_required
@company_required
@admin_required
@require_POST
def department_save_view(request, pk=None):
    company = get_user_company(request)
    instance = get_object_or_404(Department, pk=pk, company=company) if pk else None

    form = DepartmentForm(request.POST, instance=instance, company=company)
    if not form.is_valid():
        return JsonResponse({'success': False, 'errors': form.errors.get_json_data()}, status=400)

    department = form.save()
    logger.info(f"Department {department.pk} saved by user {request.user.pk}")

    return JsonResponse({
        'success': True,
        'department': {
            'id': department.id,
            'name': department.name,
            'parent_department_id': department.parent_department_id,
        },
    }, status=200 if pk else 201)
