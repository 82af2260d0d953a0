"""
Consecutive working-day analysis.

The policy tolerates one run of four consecutive working days per month.
Runs are decomposed into overlapping 4-day windows, so a six-day run counts as
three windows and breaks the policy on its own.
"""
from typing import Dict, Iterable, List, Set, Tuple

from models import Assignment

FOUR_PLUS_RUN_LENGTH = 4
MAX_FOUR_PLUS_WINDOWS = 1


def is_working(assignment: Assignment, employee_id: int, day: int) -> bool:
    return employee_id in assignment.get(day, ())


def count_working_days(assignment: Assignment, employee_id: int) -> int:
    """Number of days the employee works in the assignment."""
    return sum(1 for ids in assignment.values() if employee_id in ids)


def _windows_ending_at(end: int, run_length: int) -> List[Tuple[int, int]]:
    """All 4-day windows of the run that finishes on `end`, oldest first."""
    first_end = end - run_length + FOUR_PLUS_RUN_LENGTH
    return [(e - FOUR_PLUS_RUN_LENGTH + 1, e) for e in range(first_end, end + 1)]


def find_four_plus_runs(assignment: Assignment, employee_id: int,
                        days_in_month: int) -> List[Tuple[int, int]]:
    """
    Return every inclusive (start, end) 4-day window of unbroken work.

    A run of length L >= 4 yields L - 3 windows. A run reaching the last day of
    the month is closed as if a rest day followed.
    """
    windows = []
    consecutive = 0
    for day in range(1, days_in_month + 1):
        if is_working(assignment, employee_id, day):
            consecutive += 1
            continue
        if consecutive >= FOUR_PLUS_RUN_LENGTH:
            windows.extend(_windows_ending_at(day - 1, consecutive))
        consecutive = 0

    if consecutive >= FOUR_PLUS_RUN_LENGTH:
        windows.extend(_windows_ending_at(days_in_month, consecutive))
    return windows


def count_four_plus_runs(assignment: Assignment, employee_id: int, days_in_month: int) -> int:
    return len(find_four_plus_runs(assignment, employee_id, days_in_month))


def has_excess_four_plus_runs(assignment: Assignment, employee_id: int, days_in_month: int) -> bool:
    """True when the employee has more 4-day windows than the policy allows."""
    return count_four_plus_runs(assignment, employee_id, days_in_month) > MAX_FOUR_PLUS_WINDOWS


def highlight_days(assignment: Assignment, employee_ids: Iterable[int],
                   days_in_month: int) -> Dict[int, Set[int]]:
    """
    Map each employee in violation to the days covered by their windows.
    Employees within policy are left out.
    """
    result = {}
    for employee_id in employee_ids:
        windows = find_four_plus_runs(assignment, employee_id, days_in_month)
        if len(windows) <= MAX_FOUR_PLUS_WINDOWS:
            continue
        days = set()
        for start, end in windows:
            days.update(range(start, end + 1))
        result[employee_id] = days
    return result
