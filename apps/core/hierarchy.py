"""
Department hierarchy formatting
===============================

Flattens a company's department tree into an ordered, indented list for
select controls:

    Engineering
    — Backend
    —— Payments
    — Frontend
    Sales

Departments are first loaded into a flat map keyed by id, then walked
depth-first from the roots with a visited set, so a malformed tree
(a cycle in parent_department) fails fast instead of recursing forever.
"""

from collections.abc import Mapping

from .exceptions import HierarchyCycleError

INDENT_MARKER = '—'


def _read(department, field):
    if isinstance(department, Mapping):
        return department.get(field)
    return getattr(department, field)


def format_department_hierarchy(departments, indent_marker=INDENT_MARKER):
    """
    Flatten departments into pre-order display rows

    Args:
        departments: iterable of Department instances or mappings with
            'id', 'name' and 'parent_department_id'
        indent_marker: repeated once per level in front of nested names

    Returns:
        list of dicts: {'id', 'display_name', 'level'}, parents before
        children, siblings ordered by name

    Raises:
        HierarchyCycleError: some departments can't be reached from a root
    """
    by_id = {}
    for department in departments:
        by_id[_read(department, 'id')] = department

    children = {}
    roots = []
    for pk, department in by_id.items():
        parent_id = _read(department, 'parent_department_id')
        # Unknown parent (filtered out or another company) -> show at top level
        if parent_id is None or parent_id not in by_id:
            roots.append(pk)
        else:
            children.setdefault(parent_id, []).append(pk)

    def sort_key(pk):
        return (_read(by_id[pk], 'name') or '').lower(), str(pk)

    result = []
    visited = set()
    # (id, level) pairs; reversed pushes keep sibling order on pop
    stack = [(pk, 0) for pk in sorted(roots, key=sort_key, reverse=True)]

    while stack:
        pk, level = stack.pop()
        if pk in visited:
            raise HierarchyCycleError([pk])
        visited.add(pk)

        name = _read(by_id[pk], 'name')
        prefix = indent_marker * level
        result.append({
            'id': pk,
            'display_name': f'{prefix} {name}' if level > 0 else name,
            'level': level,
        })

        for child_pk in sorted(children.get(pk, []), key=sort_key, reverse=True):
            stack.append((child_pk, level + 1))

    unreachable = set(by_id) - visited
    if unreachable:
        raise HierarchyCycleError(unreachable)

    return result


def department_choices(company, exclude=None, indent_marker=INDENT_MARKER):
    """
    (id, display_name) pairs for a company's departments, ready for a
    ChoiceField. Pass exclude=<department> to hide it and its subtree
    (a department can't become a child of itself).
    """
    from .models import Department

    departments = Department.objects.filter(company=company).values('id', 'name', 'parent_department_id')
    rows = format_department_hierarchy(departments, indent_marker=indent_marker)

    if exclude is None or exclude.pk is None:
        return [(row['id'], row['display_name']) for row in rows]

    choices = []
    skip_below = None
    for row in rows:
        if skip_below is not None and row['level'] > skip_below:
            continue
        skip_below = None
        if row['id'] == exclude.pk:
            skip_below = row['level']
            continue
        choices.append((row['id'], row['display_name']))
    return choices
