from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

# Main URL Configuration
# Routes all requests to appropriate apps

urlpatterns = [
    path('admin/', admin.site.urls),
    path('core/', include('apps.core.urls')),
    path('payroll/', include('apps.payroll.urls')),
    path('api/leads/', include('apps.leads.urls')),
]

if settings.DEBUG:
    # Static files (admin CSS, JS)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
