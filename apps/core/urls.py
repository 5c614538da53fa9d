from django.urls import path
from . import views


app_name = 'core'

urlpatterns = [
    path('departments/options/', views.department_options_view, name='department_options'),
    path('departments/save/', views.department_save_view, name='department_create'),
    path('departments/<int:pk>/save/', views.department_save_view, name='department_update'),
]
