"""
Shared error types
==================

Raised by the payroll and pipeline services and caught at the view layer,
where they are turned into JSON error responses.

Bad numeric/date input uses Django's own ValidationError so it works with
forms and model.full_clean() out of the box.
"""

from django.core.exceptions import ValidationError


class CRMError(Exception):
    """Base class for domain errors that are not validation errors"""


class InvalidTransitionError(CRMError):
    """A status change that the state machine does not allow"""

    def __init__(self, source, target, subject='status'):
        self.source = source
        self.target = target
        self.subject = subject
        super().__init__(f'Cannot change {subject} from "{source}" to "{target}"')


class StaleStateError(CRMError):
    """
    The caller acted on outdated data (e.g. a pipeline drag made against
    a stage the lead already left). Reload and retry.
    """


class PersistenceError(CRMError):
    """
    A database failure surfaced to the caller.
    The original exception is always available as __cause__.
    """


class HierarchyCycleError(ValidationError):
    """Department tree contains a cycle"""

    def __init__(self, department_ids):
        self.department_ids = sorted(department_ids, key=str)
        ids = ', '.join(str(pk) for pk in self.department_ids)
        super().__init__(f'Department hierarchy contains a cycle (departments: {ids})', code='cycle')
