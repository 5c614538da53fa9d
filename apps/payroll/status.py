"""
Payslip and work log status rules

Payslips only move forward: draft -> approved -> paid. Paid is terminal,
so a paid payslip can't be edited or moved anywhere (not even to "paid").
Staying in draft or approved is an allowed no-op.
"""

from apps.core.exceptions import InvalidTransitionError

PAYSLIP_DRAFT = 'draft'
PAYSLIP_APPROVED = 'approved'
PAYSLIP_PAID = 'paid'

PAYSLIP_STATUS_TRANSITIONS = {
    PAYSLIP_DRAFT: (PAYSLIP_APPROVED,),
    PAYSLIP_APPROVED: (PAYSLIP_PAID,),
    PAYSLIP_PAID: (),
}

# Approvers decide once; decided entries stay as they are
WORK_LOG_STATUS_TRANSITIONS = {
    'pending': ('approved', 'rejected'),
    'approved': (),
    'rejected': (),
}


def can_transition_payslip_status(current, target):
    if current not in PAYSLIP_STATUS_TRANSITIONS or target not in PAYSLIP_STATUS_TRANSITIONS:
        return False
    if current == PAYSLIP_PAID:
        return False
    return current == target or target in PAYSLIP_STATUS_TRANSITIONS[current]


def ensure_payslip_transition(current, target):
    if not can_transition_payslip_status(current, target):
        raise InvalidTransitionError(current, target, subject='payslip status')


def allowed_payslip_targets(current):
    """Statuses a payslip select control should enable, current one included"""
    return [status for status in PAYSLIP_STATUS_TRANSITIONS if can_transition_payslip_status(current, status)]


def ensure_work_log_transition(current, target):
    if target not in WORK_LOG_STATUS_TRANSITIONS.get(current, ()):
        raise InvalidTransitionError(current, target, subject='work log status')
