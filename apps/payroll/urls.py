from django.urls import path
from . import views

app_name = 'payroll'

urlpatterns = [
    path('payslips/preview/', views.payslip_preview_view, name='payslip_preview'),
    path('payslips/save/', views.payslip_save_view, name='payslip_create'),
    path('payslips/<int:pk>/save/', views.payslip_save_view, name='payslip_update'),
    path('payslips/<int:pk>/status/', views.payslip_change_status_view, name='payslip_change_status'),
    path('payslips/export/', views.payslip_export_view, name='payslip_export'),
    path('work-logs/<int:pk>/approve/', views.work_log_review_view, {'decision': 'approve'}, name='work_log_approve'),
    path('work-logs/<int:pk>/reject/', views.work_log_review_view, {'decision': 'reject'}, name='work_log_reject'),
]
