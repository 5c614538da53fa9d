"""
Pipeline API (Django REST Framework)

    GET  pipeline/                board: stages in order with their leads
                                  (?search=, ?status=new,contacted)
    POST pipeline/move/           lead, from_stage, to_stage, notes
    GET  pipeline/metrics/        per-stage metrics (?date_from=&date_to=)
    GET  pipeline/summary/        headline numbers
    GET  <pk>/history/            stage history of one lead
    GET  <pk>/activities/         activity log (?type=call_logged,email_sent)
    POST <pk>/activities/         log a call, email, meeting, note or task
    GET  <pk>/follow-ups/         follow-ups by due date (?status=overdue)
    POST <pk>/follow-ups/         schedule a follow-up
    POST follow-ups/<pk>/complete/
"""

import logging

from django.core.exceptions import ValidationError
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.permissions import BasePermission, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from apps.accounts.models import User
from apps.core.exceptions import PersistenceError, StaleStateError
from apps.core.utils import get_user_company
from .models import FollowUp, Lead
from .pipeline import PipelineBoard, compute_pipeline_summary, compute_stage_metrics
from .serializers import (
    ActivityCreateSerializer,
    ActivitySerializer,
    FollowUpCreateSerializer,
    FollowUpSerializer,
    MetricsQuerySerializer,
    PipelineSummarySerializer,
    StageColumnSerializer,
    StageHistorySerializer,
    StageMetricsSerializer,
    StageMoveSerializer,
)

logger = logging.getLogger(__name__)


class HasCompany(BasePermission):
    message = 'You must be assigned to a company to access this page.'

    def has_permission(self, request, view):
        return get_user_company(request) is not None


class CompanyAPIView(APIView):
    permission_classes = [IsAuthenticated, HasCompany]

    def initial(self, request, *args, **kwargs):
        super().initial(request, *args, **kwargs)
        self.company = get_user_company(request)


def _error(message, http_status, **extra):
    return Response({'success': False, 'error': message, **extra}, status=http_status)


class PipelineBoardView(CompanyAPIView):

    def get(self, request):
        statuses = [value for value in request.query_params.get('status', '').split(',') if value]
        board = PipelineBoard(self.company, search=request.query_params.get('search', ''), statuses=statuses)

        serializer = StageColumnSerializer(board.stages, many=True, context={'columns': board.columns})
        return Response({'success': True, 'stages': serializer.data})


class PipelineMoveView(CompanyAPIView):
    """
    Save a drag and drop move. The client has already moved the card; a
    rejected move answers with the reloaded board under 'stages'.
    """

    def post(self, request):
        serializer = StageMoveSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        board = PipelineBoard(self.company)
        pending = board.move(data['lead'], data['from_stage'], data['to_stage'], actor=request.user, notes=data['notes'])

        try:
            history = pending.confirm()
        except Lead.DoesNotExist:
            return self._rejected(board, 'Lead not found', status.HTTP_404_NOT_FOUND)
        except StaleStateError as e:
            logger.warning(f"Stale pipeline move by user {request.user.pk}: {e}")
            return self._rejected(board, str(e), status.HTTP_409_CONFLICT,
                                  current_stage=self._current_stage(data['lead']))
        except ValidationError as e:
            return self._rejected(board, e.messages[0], status.HTTP_400_BAD_REQUEST)
        except PersistenceError as e:
            return self._rejected(board, str(e), status.HTTP_503_SERVICE_UNAVAILABLE)

        return Response({
            'success': True,
            'moved': history is not None,
            'history': StageHistorySerializer(history).data if history else None,
        })

    def _rejected(self, board, message, http_status, **extra):
        stages = StageColumnSerializer(board.stages, many=True, context={'columns': board.columns}).data
        return _error(message, http_status, stages=stages, **extra)

    def _current_stage(self, lead_id):
        return Lead.objects.filter(pk=lead_id, company=self.company).values_list('current_stage_id', flat=True).first()


class PipelineMetricsView(CompanyAPIView):

    def get(self, request):
        query = MetricsQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        date_from = query.validated_data.get('date_from')
        date_to = query.validated_data.get('date_to')
        date_range = (date_from, date_to) if date_from or date_to else None

        metrics = compute_stage_metrics(self.company, date_range)
        return Response({
            'success': True,
            'metrics': StageMetricsSerializer([m._asdict() for m in metrics], many=True).data,
        })


class PipelineSummaryView(CompanyAPIView):

    def get(self, request):
        summary = compute_pipeline_summary(self.company)
        return Response({'success': True, 'summary': PipelineSummarySerializer(summary._asdict()).data})


class LeadHistoryView(CompanyAPIView):

    def get(self, request, pk):
        lead = get_object_or_404(Lead, pk=pk, company=self.company)
        history = lead.stage_history.select_related('from_stage', 'to_stage', 'changed_by').order_by('changed_at', 'id')
        return Response({'success': True, 'history': StageHistorySerializer(history, many=True).data})


class LeadActivityView(CompanyAPIView):
    """
    GET:  activity log of one lead, newest first (?type=call_logged,email_sent)
    POST: log a call, email, meeting, note or task
    """

    def get(self, request, pk):
        lead = get_object_or_404(Lead, pk=pk, company=self.company)
        activities = lead.get_activities()

        types = [value for value in request.query_params.get('type', '').split(',') if value]
        if types:
            activities = activities.filter(activity_type__in=types)

        return Response({'success': True, 'activities': ActivitySerializer(activities, many=True).data})

    def post(self, request, pk):
        lead = get_object_or_404(Lead, pk=pk, company=self.company)
        serializer = ActivityCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            activity = lead.log_activity(user=request.user, **serializer.validated_data)
        except ValidationError as e:
            return _error(e.messages[0], status.HTTP_400_BAD_REQUEST)

        logger.info(f"Activity {activity.activity_type} logged on lead {lead.pk} by user {request.user.pk}")
        return Response({'success': True, 'activity': ActivitySerializer(activity).data}, status=status.HTTP_201_CREATED)


class LeadFollowUpView(CompanyAPIView):
    """
    GET:  follow-ups of one lead by due date (?status=pending|completed|overdue)
    POST: schedule a follow-up
    """

    def get(self, request, pk):
        lead = get_object_or_404(Lead, pk=pk, company=self.company)
        follow_ups = lead.follow_ups.select_related('assigned_to')

        wanted = request.query_params.get('status')
        if wanted:
            follow_ups = [follow_up for follow_up in follow_ups if follow_up.display_status == wanted]

        return Response({'success': True, 'follow_ups': FollowUpSerializer(follow_ups, many=True).data})

    def post(self, request, pk):
        lead = get_object_or_404(Lead, pk=pk, company=self.company)
        serializer = FollowUpCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        assigned_to = None
        if data.get('assigned_to') is not None:
            assigned_to = User.objects.filter(pk=data['assigned_to'], company=self.company, is_active=True).first()
            if assigned_to is None:
                return _error('Assignee not found in this company', status.HTTP_400_BAD_REQUEST)

        try:
            follow_up = lead.schedule_follow_up(
                data['description'], data['due_at'], user=request.user,
                assigned_to=assigned_to, priority=data['priority']
            )
        except ValidationError as e:
            return _error(e.messages[0], status.HTTP_400_BAD_REQUEST)

        logger.info(f"Follow-up {follow_up.pk} scheduled on lead {lead.pk} by user {request.user.pk}")
        return Response({'success': True, 'follow_up': FollowUpSerializer(follow_up).data}, status=status.HTTP_201_CREATED)


class FollowUpCompleteView(CompanyAPIView):

    def post(self, request, pk):
        follow_up = get_object_or_404(FollowUp.objects.select_related('lead'), pk=pk, company=self.company)
        completed = follow_up.complete(request.user)
        return Response({'success': True, 'completed': completed, 'follow_up': FollowUpSerializer(follow_up).data})
