# Decorators in this file:
# 1. company_required - User must belong to a company (tenant)
# 2. admin_required - Only admins can access
#
# The views behind these decorators answer with JSON, so a denied request
# gets a JSON error body instead of a redirect.
# ==============================================================================

from functools import wraps
from django.http import JsonResponse
from django.utils.translation import gettext as _


def _denied(message, status):
    return JsonResponse({'success': False, 'error': message}, status=status)


# COMPANY-BASED DECORATORS
def company_required(view_func):
    """
    Checks:
    1. User is authenticated
    2. User has company assigned (superusers may pick one via session)

    Why needed?
    - Multi-tenancy requires company context
    - Every service call receives the company explicitly
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _denied(_('Please login to continue.'), 401)

        if request.user.company or (request.user.is_superuser and request.session.get('selected_company_id')):
            return view_func(request, *args, **kwargs)

        return _denied(_('You must be assigned to a company to access this page.'), 403)

    return wrapper


# ROLE-BASED DECORATORS
def admin_required(view_func):
    """
    Decorator: Only admins can access this view

    Checks:
    1. User is authenticated (logged in)
    2. User role is 'admin' OR is superuser
    """

    @wraps(view_func)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return _denied(_('Please login to continue.'), 401)

        if request.user.is_admin():
            return view_func(request, *args, **kwargs)

        return _denied(_('Admin access required'), 403)

    return wrapper
