from django.test import SimpleTestCase

from apps.core.exceptions import InvalidTransitionError
from apps.payroll.status import (
    allowed_payslip_targets,
    can_transition_payslip_status,
    ensure_payslip_transition,
    ensure_work_log_transition,
)


class PayslipStatusTest(SimpleTestCase):

    def test_forward_transitions(self):
        self.assertTrue(can_transition_payslip_status('draft', 'approved'))
        self.assertTrue(can_transition_payslip_status('approved', 'paid'))

    def test_same_status_allowed_until_paid(self):
        self.assertTrue(can_transition_payslip_status('draft', 'draft'))
        self.assertTrue(can_transition_payslip_status('approved', 'approved'))
        self.assertFalse(can_transition_payslip_status('paid', 'paid'))

    def test_no_skipping_or_going_back(self):
        self.assertFalse(can_transition_payslip_status('draft', 'paid'))
        self.assertFalse(can_transition_payslip_status('approved', 'draft'))
        self.assertFalse(can_transition_payslip_status('paid', 'draft'))
        self.assertFalse(can_transition_payslip_status('paid', 'approved'))

    def test_unknown_status(self):
        self.assertFalse(can_transition_payslip_status('draft', 'cancelled'))
        self.assertFalse(can_transition_payslip_status('unknown', 'draft'))

    def test_allowed_targets(self):
        self.assertEqual(allowed_payslip_targets('draft'), ['draft', 'approved'])
        self.assertEqual(allowed_payslip_targets('approved'), ['approved', 'paid'])
        self.assertEqual(allowed_payslip_targets('paid'), [])

    def test_ensure_raises_with_details(self):
        with self.assertRaises(InvalidTransitionError) as ctx:
            ensure_payslip_transition('paid', 'draft')
        self.assertEqual(ctx.exception.source, 'paid')
        self.assertEqual(ctx.exception.target, 'draft')
        self.assertIn('paid', str(ctx.exception))


class WorkLogStatusTest(SimpleTestCase):

    def test_pending_can_be_decided(self):
        ensure_work_log_transition('pending', 'approved')
        ensure_work_log_transition('pending', 'rejected')

    def test_decided_is_final(self):
        with self.assertRaises(InvalidTransitionError):
            ensure_work_log_transition('approved', 'rejected')
        with self.assertRaises(InvalidTransitionError):
            ensure_work_log_transition('rejected', 'approved')
