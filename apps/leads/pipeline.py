"""
Lead Pipeline Stage Engine
==========================

Moves leads between pipeline stages and derives per-stage metrics from the
stage history.

Stage move (transition_lead_stage):
    - from == to is a no-op: nothing is written, None is returned
    - the lead row is locked; if its stored stage is not from_stage_id the
      caller acted on stale data -> StaleStateError, nothing written
    - lead.current_stage update and the StageHistory row are written in one
      transaction
    - database failures surface as PersistenceError (never retried)

Stage metrics (compute_stage_metrics), per stage in pipeline order:
    stage_count        leads currently in the stage
    avg_time_in_stage  mean time between entering the stage and the next
                       move of the same lead ("N days" / "N hours" / "N/A")
    conversion_rate    leads that moved from the stage to a later stage,
                       as a percentage of leads that entered it

    A lead enters its first stage when it is created; every history row is
    an entry into to_stage.
"""

import logging
from collections import defaultdict
from decimal import Decimal, ROUND_HALF_UP
from typing import NamedTuple

from django.core.exceptions import ValidationError
from django.db import DatabaseError, transaction
from django.db.models import Count
from django.utils import timezone

from apps.core.exceptions import PersistenceError, StaleStateError
from .models import Lead, LeadStage, StageHistory

logger = logging.getLogger(__name__)

NOT_AVAILABLE = 'N/A'
SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 24 * SECONDS_PER_HOUR


class StageMetrics(NamedTuple):
    stage_id: int
    stage_name: str
    stage_count: int
    avg_time_in_stage: str
    conversion_rate: int


class PipelineSummary(NamedTuple):
    total_leads: int
    total_qualified: int
    conversion_rate: int
    avg_time_to_qualify: str


def _same_id(a, b):
    return str(a) == str(b)


def _percentage(part, whole):
    if not whole:
        return 0
    return int((Decimal(part) * 100 / Decimal(whole)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


def format_dwell_time(duration):
    """Whole days from one day up, whole hours below; "N/A" without samples"""
    if duration is None:
        return NOT_AVAILABLE
    seconds = max(0, duration.total_seconds())
    if seconds >= SECONDS_PER_DAY:
        return f"{int(seconds // SECONDS_PER_DAY)} days"
    return f"{int(seconds // SECONDS_PER_HOUR)} hours"


def _mean(durations):
    if not durations:
        return None
    return sum(durations[1:], durations[0]) / len(durations)


def transition_lead_stage(company, lead_id, from_stage_id, to_stage_id, actor=None, notes=''):
    """
    Move a lead to another pipeline stage

    Returns:
        StageHistory: the appended history row, or None for a no-op move

    Raises:
        Lead.DoesNotExist: no such lead in this company
        StaleStateError: the lead is no longer in from_stage_id
        ValidationError: to_stage_id is not a stage of this company
        PersistenceError: the database rejected the write
    """
    if _same_id(from_stage_id, to_stage_id):
        return None

    try:
        with transaction.atomic():
            lead = Lead.objects.select_for_update().get(pk=lead_id, company=company)

            if not _same_id(lead.current_stage_id, from_stage_id):
                raise StaleStateError(
                    f'Lead {lead.pk} is in stage {lead.current_stage_id}, not {from_stage_id}. Reload and retry.'
                )

            try:
                target = LeadStage.objects.get(pk=to_stage_id, company=company)
            except (LeadStage.DoesNotExist, ValueError):
                raise ValidationError(f'Unknown pipeline stage "{to_stage_id}"', code='invalid_stage')

            previous_stage_id = lead.current_stage_id
            lead.current_stage = target
            lead.save(update_fields=['current_stage', 'updated_at'])

            history = StageHistory.objects.create(
                company=company,
                lead=lead,
                from_stage_id=previous_stage_id,
                to_stage=target,
                changed_by=actor,
                notes=notes or '',
            )
    except DatabaseError as exc:
        logger.error(f"Stage change of lead {lead_id} failed: {exc}")
        raise PersistenceError(f'Could not save the stage change of lead {lead_id}') from exc

    logger.info(
        f"Lead {lead_id} moved from stage {from_stage_id} to {to_stage_id} by user {getattr(actor, 'pk', None)}"
    )
    return history


def _stage_entries(company):
    """
    ({lead_id: [(stage_id, entered_at), ...]}, {lead_id: [history row, ...]}),
    both in chronological order
    """
    history_by_lead = defaultdict(list)
    for row in (StageHistory.objects.filter(company=company)
                .order_by('lead_id', 'changed_at', 'id')
                .values('lead_id', 'from_stage_id', 'to_stage_id', 'changed_at')):
        history_by_lead[row['lead_id']].append(row)

    entries = {}
    for lead in Lead.objects.filter(company=company).values('id', 'current_stage_id', 'created_at'):
        rows = history_by_lead.get(lead['id'], [])
        first_stage_id = rows[0]['from_stage_id'] if rows else lead['current_stage_id']

        lead_entries = []
        if first_stage_id is not None:
            lead_entries.append((first_stage_id, lead['created_at']))
        lead_entries.extend((row['to_stage_id'], row['changed_at']) for row in rows)
        entries[lead['id']] = lead_entries

    return entries, history_by_lead


def _in_range(moment, date_range):
    if not date_range:
        return True
    date_from, date_to = date_range
    day = timezone.localtime(moment).date()
    if date_from and day < date_from:
        return False
    if date_to and day > date_to:
        return False
    return True


def compute_stage_metrics(company, date_range=None):
    """
    Per-stage metrics of a company, in pipeline order

    Args:
        company: tenant
        date_range: optional (date_from, date_to) of datetime.date, both
            inclusive, either may be None. Only stage entries inside the
            range are counted; stage_count is always the current state.

    Returns:
        list[StageMetrics]; empty when the company has no stage history
        (in the range)
    """
    entries, history_by_lead = _stage_entries(company)

    has_history = any(
        _in_range(row['changed_at'], date_range)
        for rows in history_by_lead.values()
        for row in rows
    )
    if not has_history:
        return []

    stages = list(LeadStage.objects.filter(company=company).order_by('order_index', 'name'))
    order = {stage.pk: stage.order_index for stage in stages}

    entered = defaultdict(set)
    advanced = defaultdict(set)
    dwell = defaultdict(list)

    for lead_id, lead_entries in entries.items():
        for index, (stage_id, entered_at) in enumerate(lead_entries):
            if not _in_range(entered_at, date_range):
                continue
            entered[stage_id].add(lead_id)

            if index + 1 < len(lead_entries):
                next_stage_id, left_at = lead_entries[index + 1]
                dwell[stage_id].append(left_at - entered_at)
                if order.get(next_stage_id, -1) > order.get(stage_id, -1):
                    advanced[stage_id].add(lead_id)

    current_counts = dict(
        Lead.objects.filter(company=company)
        .order_by()
        .values_list('current_stage_id')
        .annotate(total=Count('id'))
    )

    return [
        StageMetrics(
            stage_id=stage.pk,
            stage_name=stage.name,
            stage_count=current_counts.get(stage.pk, 0),
            avg_time_in_stage=format_dwell_time(_mean(dwell[stage.pk])),
            conversion_rate=_percentage(len(advanced[stage.pk]), len(entered[stage.pk])),
        )
        for stage in stages
    ]


def compute_pipeline_summary(company):
    """Headline numbers of the pipeline page"""
    leads = Lead.objects.filter(company=company)

    total_leads = leads.count()
    total_qualified = leads.filter(status='qualified').count()
    total_converted = leads.filter(is_converted=True).count()

    qualify_times = [
        qualified_at - created_at
        for created_at, qualified_at in leads.filter(qualified_at__isnull=False).values_list('created_at', 'qualified_at')
    ]

    return PipelineSummary(
        total_leads=total_leads,
        total_qualified=total_qualified,
        conversion_rate=_percentage(total_converted, total_leads),
        avg_time_to_qualify=format_dwell_time(_mean(qualify_times)),
    )


class PendingMove:
    """A move already shown on the board but not yet saved"""

    def __init__(self, board, lead_id, from_stage_id, to_stage_id, actor=None, notes=''):
        self.board = board
        self.lead_id = lead_id
        self.from_stage_id = from_stage_id
        self.to_stage_id = to_stage_id
        self.actor = actor
        self.notes = notes

    def confirm(self):
        """
        Save the move. On any failure the board is reloaded from the
        database before the error is re-raised.
        """
        try:
            return transition_lead_stage(
                self.board.company, self.lead_id, self.from_stage_id, self.to_stage_id,
                actor=self.actor, notes=self.notes
            )
        except Exception:
            self.rollback()
            raise

    def rollback(self):
        self.board.reload()


class PipelineBoard:
    """
    Kanban view of a company's pipeline: stages in order, each with its leads.

    Moves are applied locally first (move) and saved afterwards
    (PendingMove.confirm). A failed save reloads the whole board.
    """

    def __init__(self, company, search='', statuses=None):
        self.company = company
        self.search = (search or '').strip().lower()
        self.statuses = set(statuses or [])
        self.stages = []
        self.columns = {}
        self.reload()

    def _matches(self, lead):
        if self.statuses and lead.status not in self.statuses:
            return False
        if not self.search:
            return True
        return self.search in lead.company_name.lower() or self.search in lead.contact_name.lower()

    def reload(self):
        self.stages = list(
            LeadStage.objects.filter(company=self.company, is_active=True).order_by('order_index', 'name')
        )
        self.columns = {stage.pk: [] for stage in self.stages}

        leads = (Lead.objects.filter(company=self.company, current_stage__in=self.stages)
                 .select_related('assigned_to')
                 .order_by('-updated_at', '-id'))
        for lead in leads:
            if self._matches(lead):
                self.columns[lead.current_stage_id].append(lead)

    def lead_ids(self, stage_id):
        return [lead.pk for lead in self.columns.get(stage_id, [])]

    def move(self, lead_id, from_stage_id, to_stage_id, actor=None, notes=''):
        source = self.columns.get(from_stage_id)
        target = self.columns.get(to_stage_id)

        if source is not None and target is not None and from_stage_id != to_stage_id:
            for index, lead in enumerate(source):
                if _same_id(lead.pk, lead_id):
                    target.insert(0, source.pop(index))
                    break

        return PendingMove(self, lead_id, from_stage_id, to_stage_id, actor=actor, notes=notes)
