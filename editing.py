"""
Hand edits on an existing assignment: toggling one cell and locking days.
"""
from typing import AbstractSet, FrozenSet, Iterable
import logging

from models import Assignment, ToggleOutcome, ToggleResult, copy_assignment
from streaks import has_excess_four_plus_runs

logger = logging.getLogger(__name__)


def toggle_assignment(assignment: Assignment, employee_id: int, day: int, days_in_month: int,
                      locked_days: AbstractSet[int] = frozenset()) -> ToggleResult:
    """
    Flip whether an employee works a day.

    Removing is always allowed. Adding is rejected when it would give the
    employee a second four-day window. Locked days reject every toggle. The
    input assignment is never modified; rejected toggles hand it back as is.
    """
    if day in locked_days:
        logger.warning("Toggle of employee %d on locked day %d rejected", employee_id, day)
        return ToggleResult(assignment=assignment, outcome=ToggleOutcome.REJECTED_LOCKED)

    updated = copy_assignment(assignment)
    working = updated.setdefault(day, set())

    if employee_id in working:
        working.discard(employee_id)
        return ToggleResult(assignment=updated, outcome=ToggleOutcome.REMOVED)

    working.add(employee_id)
    if has_excess_four_plus_runs(updated, employee_id, days_in_month):
        logger.warning("Toggle of employee %d on day %d rejected: consecutive-day limit", employee_id, day)
        return ToggleResult(assignment=assignment, outcome=ToggleOutcome.REJECTED_STREAK)
    return ToggleResult(assignment=updated, outcome=ToggleOutcome.ADDED)


def toggle_lock(locked_days: Iterable[int], day: int) -> FrozenSet[int]:
    """Lock an unlocked day or unlock a locked one."""
    return frozenset(locked_days) ^ {day}


def set_lock(locked_days: Iterable[int], day: int, locked: bool) -> FrozenSet[int]:
    current = frozenset(locked_days)
    if locked:
        return current | {day}
    return current - {day}
