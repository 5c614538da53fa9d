from django.urls import path
from . import api

app_name = 'leads'

urlpatterns = [
    path('pipeline/', api.PipelineBoardView.as_view(), name='pipeline_board'),
    path('pipeline/move/', api.PipelineMoveView.as_view(), name='pipeline_move'),
    path('pipeline/metrics/', api.PipelineMetricsView.as_view(), name='pipeline_metrics'),
    path('pipeline/summary/', api.PipelineSummaryView.as_view(), name='pipeline_summary'),
    path('<int:pk>/history/', api.LeadHistoryView.as_view(), name='lead_history'),
    path('<int:pk>/activities/', api.LeadActivityView.as_view(), name='lead_activities'),
    path('<int:pk>/follow-ups/', api.LeadFollowUpView.as_view(), name='lead_follow_ups'),
    path('follow-ups/<int:pk>/complete/', api.FollowUpCompleteView.as_view(), name='follow_up_complete'),
]
