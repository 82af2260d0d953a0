"""
Greedy allocation engine for the monthly shift roster.

Two passes: a day-by-day fill that spreads work evenly while respecting the
consecutive-day policy, then a per-employee pass that gives back days until
each rest quota is met.
"""
from typing import Dict, Iterable, List, Optional, Set
import logging
import time

from models import (
    Assignment, Employee, ScheduleConfig, ScheduleResult,
    MIN_WEEKEND_REST_DAYS, is_weekend
)
from streaks import count_working_days, has_excess_four_plus_runs
from validation import check_schedule, compute_employee_stats

logger = logging.getLogger(__name__)


def _worked_before(assignment: Assignment, employee_id: int, day: int) -> int:
    """Days worked before `day`; later seeded days do not count as load yet."""
    return sum(1 for d in range(1, day) if employee_id in assignment.get(d, ()))


def _weekend_rest_so_far(config: ScheduleConfig, assignment: Assignment, employee_id: int, day: int) -> int:
    return sum(
        1 for d in config.get_weekend_days()
        if d < day and employee_id not in assignment.get(d, ())
    )


def _candidate_key(config: ScheduleConfig, assignment: Assignment, day: int):
    """Sort key for the candidate pool of one day (ascending = preferred)."""
    d = config.date_of(day)
    weekend = config.weekend_rest_priority and is_weekend(config.year, config.month, day)

    def key(e: Employee):
        worked = _worked_before(assignment, e.id, day)
        needs_weekend_rest = 0
        if weekend and _weekend_rest_so_far(config, assignment, e.id, day) < MIN_WEEKEND_REST_DAYS:
            needs_weekend_rest = 1
        return (
            worked,
            needs_weekend_rest,
            1 if e.is_requested_off(d) else 0,
            e.required_rest_days,
        )

    return key


def _fill_day(config: ScheduleConfig, assignment: Assignment, day: int) -> None:
    """Place mandatory staff, then fill the remaining slots greedily."""
    d = config.date_of(day)
    placed = assignment.setdefault(day, set())

    mandatory = [e for e in config.employees if e.is_mandatory(d)]
    placed.update(e.id for e in mandatory)

    remaining = config.target_for(day) - len(mandatory)
    if remaining <= 0:
        return

    candidates = [
        e for e in config.employees
        if e.id not in placed and not e.is_absolute_off(d)
    ]
    candidates.sort(key=_candidate_key(config, assignment, day))

    filled = 0
    for e in candidates:
        if filled >= remaining:
            break
        placed.add(e.id)
        if has_excess_four_plus_runs(assignment, e.id, config.days_in_month):
            placed.discard(e.id)
            logger.debug("Day %d: skipped employee %d (consecutive-day limit)", day, e.id)
            continue
        filled += 1

    if filled < remaining:
        logger.debug("Day %d: %d of %d open slots filled", day, filled, remaining)


def _rebalance_rest(config: ScheduleConfig, assignment: Assignment, locked: Set[int]) -> None:
    """Remove employees from adjustable days until their rest quota is met."""
    total_days = config.days_in_month
    for e in config.employees:
        worked = count_working_days(assignment, e.id)
        actual_rest = total_days - worked
        if actual_rest >= e.required_rest_days:
            continue
        deficit = e.required_rest_days - actual_rest

        adjustable = [
            day for day in config.get_all_days()
            if e.id in assignment.get(day, ())
            and day not in locked
            and not e.is_mandatory(config.date_of(day))
        ]
        # requested days off first, then the busiest days
        adjustable.sort(key=lambda day: (
            0 if e.is_requested_off(config.date_of(day)) else 1,
            -len(assignment[day]),
            day,
        ))

        released = adjustable[:min(deficit, len(adjustable))]
        for day in released:
            assignment[day].discard(e.id)
        if len(released) < deficit:
            logger.info("Employee %d keeps a rest deficit of %d day(s)", e.id, deficit - len(released))


def generate_assignment(config: ScheduleConfig, previous: Optional[Assignment] = None,
                        locked_days: Optional[Iterable[int]] = None) -> Assignment:
    """
    Build a fresh assignment for the configured month.

    Locked days keep their content from `previous` verbatim (or stay empty).
    The function never raises on an unreachable target; shortfalls are left for
    the diagnostics to report.
    """
    locked = set(locked_days or ())
    previous = previous or {}
    assignment: Assignment = {day: set() for day in config.get_all_days()}

    # Seed locked days and mandatory work first so every streak check sees them.
    for day in config.get_all_days():
        if day in locked:
            assignment[day] = set(previous.get(day, ()))
            continue
        d = config.date_of(day)
        assignment[day].update(e.id for e in config.employees if e.is_mandatory(d))

    for day in config.get_all_days():
        if day in locked:
            continue
        _fill_day(config, assignment, day)

    _rebalance_rest(config, assignment, locked)
    return assignment


def solve_schedule(config: ScheduleConfig, previous: Optional[Assignment] = None,
                   locked_days: Optional[Iterable[int]] = None) -> ScheduleResult:
    """Generate an assignment and attach statistics and findings."""
    start_time = time.time()
    locked = set(locked_days or ())

    assignment = generate_assignment(config, previous, locked)
    result = ScheduleResult(
        assignments=assignment,
        employee_stats=compute_employee_stats(config, assignment),
        findings=check_schedule(config, assignment),
        locked_days=locked,
        solve_time_seconds=time.time() - start_time,
    )

    logger.info(
        "Generated %04d-%02d for %d employee(s): %d locked day(s), %d finding(s) in %.3fs",
        config.year, config.month, len(config.employees), len(locked),
        len(result.findings), result.solve_time_seconds,
    )
    return result


def assignment_to_names(config: ScheduleConfig, assignment: Assignment) -> Dict[int, List[str]]:
    """Resolve ids to names per day; ids missing from the roster are dropped."""
    names = {e.id: e.name for e in config.employees}
    return {
        day: [names[i] for i in sorted(ids) if i in names]
        for day, ids in sorted(assignment.items())
    }
