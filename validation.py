"""
Validation and diagnostics for schedule configurations and assignments.
Provides pre-generation sanity checks and advisory findings on finished rosters.
"""
from typing import Dict, List, Tuple

from models import (
    Assignment, EmployeeStats, Finding, FindingCategory, ScheduleConfig,
    MIN_WEEKEND_REST_DAYS, DateCategory
)
from streaks import count_four_plus_runs


def validate_config(config: ScheduleConfig) -> Tuple[bool, List[str]]:
    """
    Validate schedule configuration before generating.
    Returns (is_valid, list_of_error_messages).

    The engine itself tolerates every input; this is for callers that want to
    reject bad input at their boundary.
    """
    errors = []

    # 1. Month range
    if not 1 <= config.month <= 12:
        errors.append(f"Invalid month {config.month}. Month must be between 1 and 12.")
        return False, errors

    total_days = config.days_in_month

    # 2. Targets
    if config.default_target < 0:
        errors.append(f"Default staffing target must not be negative (got {config.default_target}).")
    for day, target in sorted(config.daily_targets.items()):
        if not 1 <= day <= total_days:
            errors.append(f"Staffing override for day {day} is outside {config.year}-{config.month:02d}.")
        elif target < 0:
            errors.append(f"Staffing target for day {day} must not be negative (got {target}).")

    # 3. Duplicate employee ids
    ids = config.employee_ids()
    if len(ids) != len(set(ids)):
        errors.append("Duplicate employee ids found. Each employee must have a unique id.")

    # 4. Per-employee constraints
    for e in config.employees:
        if e.required_rest_days < 0:
            errors.append(f"Employee '{e.name}' has a negative rest quota ({e.required_rest_days}).")
        elif e.required_rest_days > total_days:
            errors.append(
                f"Employee '{e.name}' requires {e.required_rest_days} rest days "
                f"but the month only has {total_days}."
            )

        overlap = (e.absolute_off & e.requested_off) | (e.absolute_off & e.mandatory_work) \
            | (e.requested_off & e.mandatory_work)
        for d in sorted(overlap):
            errors.append(f"Employee '{e.name}' has {d.isoformat()} in more than one category.")

        outside = [
            d for d in e.absolute_off | e.requested_off | e.mandatory_work
            if (d.year, d.month) != (config.year, config.month)
        ]
        if outside:
            errors.append(
                f"Employee '{e.name}' has {len(outside)} constraint date(s) outside "
                f"{config.year}-{config.month:02d}; they are ignored for this month."
            )

    return len(errors) == 0, errors


def compute_theoretical_bounds(config: ScheduleConfig) -> dict:
    """
    Compare demanded slots with the person-days the roster can supply.
    Useful for debugging and for explaining shortfalls.
    """
    total_days = config.days_in_month
    all_days = config.get_all_days()

    demanded = sum(max(0, config.target_for(d)) for d in all_days)
    mandatory_load = 0
    available = 0
    for e in config.employees:
        blocked = sum(1 for d in all_days if e.is_absolute_off(config.date_of(d)))
        mandatory = sum(1 for d in all_days if e.is_mandatory(config.date_of(d)))
        mandatory_load += mandatory
        # work is capped by the rest quota, but mandatory days are never given back
        capacity = min(total_days - blocked, max(mandatory, total_days - e.required_rest_days))
        available += max(0, capacity)

    return {
        'days_in_month': total_days,
        'num_employees': len(config.employees),
        'demanded_slots': demanded,
        'available_person_days': available,
        'mandatory_slots': mandatory_load,
        'slot_gap': demanded - available,
        'target_reachable': available >= demanded,
    }


def compute_employee_stats(config: ScheduleConfig, assignment: Assignment) -> Dict[int, EmployeeStats]:
    """Per-employee work, rest and request statistics over an assignment."""
    total_days = config.days_in_month
    weekend_days = config.get_weekend_days()
    all_days = config.get_all_days()

    stats = {}
    for e in config.employees:
        s = EmployeeStats(employee_id=e.id, name=e.name, required_rest_days=e.required_rest_days)
        s.worked_days = sum(1 for d in all_days if e.id in assignment.get(d, ()))
        s.rest_days = total_days - s.worked_days
        s.weekend_rest_days = sum(1 for d in weekend_days if e.id not in assignment.get(d, ()))

        for d in all_days:
            if e.category_of(config.date_of(d)) is DateCategory.REQUESTED_OFF:
                s.requested_total += 1
                if e.id not in assignment.get(d, ()):
                    s.requested_honored += 1

        s.four_plus_windows = count_four_plus_runs(assignment, e.id, total_days)
        stats[e.id] = s
    return stats


def check_schedule(config: ScheduleConfig, assignment: Assignment,
                   min_weekend_rest: int = MIN_WEEKEND_REST_DAYS) -> List[Finding]:
    """
    Advisory findings for a finished assignment, employees first, then days.
    Nothing here blocks generation or editing.
    """
    findings = []
    stats = compute_employee_stats(config, assignment)

    for e in config.employees:
        s = stats[e.id]
        if s.rest_days < s.required_rest_days:
            findings.append(Finding(
                category=FindingCategory.REST_SHORTFALL,
                employee_id=e.id,
                magnitude=s.rest_shortfall,
                message=f"[{e.name}] has {s.rest_days} rest day(s), {s.required_rest_days} required",
                suggestion="Turn one of their non-mandatory working days into a rest day.",
            ))
        if s.weekend_rest_days < min_weekend_rest:
            findings.append(Finding(
                category=FindingCategory.WEEKEND_SHORTFALL,
                employee_id=e.id,
                magnitude=min_weekend_rest - s.weekend_rest_days,
                message=f"[{e.name}] only has {s.weekend_rest_days} weekend day(s) off",
                suggestion="Switch one of their Saturday or Sunday shifts to a rest day.",
            ))
        if s.four_plus_windows > 1:
            findings.append(Finding(
                category=FindingCategory.CONSECUTIVE_EXCESS,
                employee_id=e.id,
                magnitude=s.four_plus_windows,
                message=f"[{e.name}] has {s.four_plus_windows} four-day working windows",
                suggestion="Insert a rest day to break up their longest run.",
            ))

    for day in config.get_all_days():
        needed = config.target_for(day)
        assigned = len(assignment.get(day, ()))
        if assigned < needed:
            findings.append(Finding(
                category=FindingCategory.UNDER_STAFFED,
                day=day,
                magnitude=needed - assigned,
                message=f"Day {day}: {assigned} working, {needed} needed (short by {needed - assigned})",
                suggestion="Move a staff member with spare capacity onto this day.",
            ))
        elif assigned > needed:
            findings.append(Finding(
                category=FindingCategory.OVER_STAFFED,
                day=day,
                magnitude=assigned - needed,
                message=f"Day {day}: {assigned} working, {needed} needed (over by {assigned - needed})",
                suggestion="Give one person the day off to reduce cost.",
            ))

    return findings


def format_findings(findings: List[Finding]) -> List[str]:
    """Render findings as message / suggestion line pairs."""
    lines = []
    for f in findings:
        lines.append(f.message)
        if f.suggestion:
            lines.append(f"-> Suggestion: {f.suggestion}")
    return lines
