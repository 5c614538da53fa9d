from rest_framework import serializers

from .models import Activity, FollowUp, Lead, LeadStage, StageHistory


def _user_data(user):
    if not user:
        return None
    return {'id': user.pk, 'name': user.get_full_name(), 'initials': user.get_initials()}


class BoardLeadSerializer(serializers.ModelSerializer):
    initials = serializers.CharField(source='get_initials', read_only=True)
    assigned_to = serializers.SerializerMethodField()
    tags = serializers.SerializerMethodField()

    class Meta:
        model = Lead
        fields = ['id', 'company_name', 'contact_name', 'initials', 'status', 'is_converted', 'assigned_to', 'tags']

    def get_assigned_to(self, obj):
        return _user_data(obj.assigned_to)

    def get_tags(self, obj):
        return sorted(tag.name for tag in obj.tags.all())


class StageColumnSerializer(serializers.ModelSerializer):
    leads = serializers.SerializerMethodField()

    class Meta:
        model = LeadStage
        fields = ['id', 'name', 'slug', 'color', 'order_index', 'leads']

    def get_leads(self, obj):
        columns = self.context.get('columns', {})
        return BoardLeadSerializer(columns.get(obj.pk, []), many=True).data


class StageMoveSerializer(serializers.Serializer):
    lead = serializers.IntegerField()
    from_stage = serializers.IntegerField()
    to_stage = serializers.IntegerField()
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class StageHistorySerializer(serializers.ModelSerializer):
    from_stage = serializers.SerializerMethodField()
    to_stage = serializers.CharField(source='to_stage.name', read_only=True)
    changed_by = serializers.SerializerMethodField()

    class Meta:
        model = StageHistory
        fields = ['id', 'lead', 'from_stage', 'from_stage_id', 'to_stage', 'to_stage_id', 'changed_by', 'notes', 'changed_at']

    def get_from_stage(self, obj):
        return obj.from_stage.name if obj.from_stage else None

    def get_changed_by(self, obj):
        return obj.changed_by.get_full_name() if obj.changed_by else None


class StageMetricsSerializer(serializers.Serializer):
    stage_id = serializers.IntegerField()
    stage_name = serializers.CharField()
    stage_count = serializers.IntegerField()
    avg_time_in_stage = serializers.CharField()
    conversion_rate = serializers.IntegerField()


class PipelineSummarySerializer(serializers.Serializer):
    total_leads = serializers.IntegerField()
    total_qualified = serializers.IntegerField()
    conversion_rate = serializers.IntegerField()
    avg_time_to_qualify = serializers.CharField()


class MetricsQuerySerializer(serializers.Serializer):
    date_from = serializers.DateField(required=False)
    date_to = serializers.DateField(required=False)

    def validate(self, attrs):
        date_from = attrs.get('date_from')
        date_to = attrs.get('date_to')
        if date_from and date_to and date_to < date_from:
            raise serializers.ValidationError({'date_to': 'date_to cannot be before date_from'})
        return attrs


class ActivitySerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    activity_type_display = serializers.CharField(source='get_activity_type_display', read_only=True)

    class Meta:
        model = Activity
        fields = ['id', 'activity_type', 'activity_type_display', 'subject', 'description', 'activity_date',
                  'duration_minutes', 'status', 'is_manual', 'user', 'created_at']

    def get_user(self, obj):
        return _user_data(obj.user)


class ActivityCreateSerializer(serializers.Serializer):
    activity_type = serializers.ChoiceField(choices=Activity.MANUAL_TYPES)
    subject = serializers.CharField(max_length=200, required=False, allow_blank=True, default='')
    description = serializers.CharField(required=False, allow_blank=True, default='')
    activity_date = serializers.DateTimeField(required=False)
    duration_minutes = serializers.IntegerField(required=False, min_value=1)
    status = serializers.ChoiceField(choices=[value for value, _label in Activity.STATUS_CHOICES], default='completed')

    def validate(self, attrs):
        if not attrs.get('subject') and not attrs.get('description'):
            raise serializers.ValidationError({'subject': 'Enter a subject or a description'})
        return attrs


class FollowUpSerializer(serializers.ModelSerializer):
    status = serializers.CharField(source='display_status', read_only=True)
    assigned_to = serializers.SerializerMethodField()

    class Meta:
        model = FollowUp
        fields = ['id', 'lead', 'description', 'due_at', 'priority', 'status', 'assigned_to', 'completed_at', 'created_at']

    def get_assigned_to(self, obj):
        return _user_data(obj.assigned_to)


class FollowUpCreateSerializer(serializers.Serializer):
    description = serializers.CharField()
    due_at = serializers.DateTimeField()
    priority = serializers.ChoiceField(choices=[value for value, _label in FollowUp.PRIORITY_CHOICES], default='medium')
    assigned_to = serializers.IntegerField(required=False)
