import sys
from datetime import date
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from models import Employee, ScheduleConfig  # noqa: E402


@pytest.fixture
def two_person_config():
    """September 2026 (30 days) with the starter roster of two."""
    return ScheduleConfig(
        year=2026,
        month=9,
        employees=[
            Employee(id=1, name="Sato", required_rest_days=8),
            Employee(id=2, name="Tanaka", required_rest_days=10),
        ],
        default_target=3,
    )


@pytest.fixture
def team_config():
    """A five-person team in March 2026 with a mix of constraints."""
    employees = [Employee(id=i, name=f"Staff {i}", required_rest_days=9) for i in range(1, 6)]
    employees[0].absolute_off.update({date(2026, 3, 2), date(2026, 3, 3)})
    employees[1].requested_off.update({date(2026, 3, 7), date(2026, 3, 8)})
    employees[2].mandatory_work.update({date(2026, 3, 5), date(2026, 3, 14)})
    employees[3].required_rest_days = 12
    return ScheduleConfig(year=2026, month=3, employees=employees, default_target=3,
                          daily_targets={1: 2, 15: 4})


def make_assignment(days_in_month, schedule):
    """Build an assignment from {employee_id: iterable of days}."""
    assignment = {d: set() for d in range(1, days_in_month + 1)}
    for employee_id, days in schedule.items():
        for d in days:
            assignment[d].add(employee_id)
    return assignment
