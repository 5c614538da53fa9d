"""
Tenant helpers
"""
from apps.core.models import Company


def get_user_company(request):
    """
    Get the company for the current user:
    - Superuser: from session (selected company)
    - Regular users: from user.company

    The result is passed explicitly into every service call; nothing
    stores it globally.

    Returns:
        Company object or None
    """
    if not request.user.is_authenticated:
        return None

    # Superuser can select any company
    if request.user.is_superuser:
        company_id = request.session.get('selected_company_id')
        if company_id:
            try:
                return Company.objects.get(pk=company_id)
            except Company.DoesNotExist:
                # Company deleted - clear session
                request.session.pop('selected_company_id', None)
                return None
        return request.user.company

    # Regular users use their company
    return request.user.company
