import logging

from celery import shared_task
from django.core.exceptions import ValidationError

from apps.core.exceptions import InvalidTransitionError
from .models import Payslip

logger = logging.getLogger(__name__)


@shared_task
def refresh_draft_payslips(company_id=None):
    """Recompute overtime and net salary of draft payslips from approved work logs"""
    payslips = Payslip.objects.filter(status='draft').select_related('contract')
    if company_id is not None:
        payslips = payslips.filter(company_id=company_id)

    updated = 0
    failed = 0

    for payslip in payslips:
        old_overtime = payslip.total_overtime
        try:
            payslip.refresh_overtime()
            if payslip.total_overtime == old_overtime:
                continue
            payslip.save(update_fields=['total_overtime', 'net_salary', 'updated_at'])
        except ValidationError as e:
            # One broken work log shouldn't block the other payslips
            logger.warning(f"Skipping payslip {payslip.pk}: {e.messages[0]}")
            failed += 1
            continue
        except InvalidTransitionError as e:
            # Paid while the task was running
            logger.warning(f"Skipping payslip {payslip.pk}: {e}")
            failed += 1
            continue

        updated += 1

    return f'{updated} draft payslips updated, {failed} skipped.'
