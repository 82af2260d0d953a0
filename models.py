"""
Data models for the monthly shift scheduling system.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum, IntEnum
from typing import Dict, List, Optional, Set, Tuple
import calendar


class Weekday(IntEnum):
    """Day of week, numbered like date.weekday() (Monday=0, Sunday=6)."""
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


WEEKDAY_SHORT = ['Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat', 'Sun']
WEEKEND_DAYS = {Weekday.SATURDAY, Weekday.SUNDAY}

DEFAULT_TARGET = 3
DEFAULT_REQUIRED_REST_DAYS = 8
MIN_WEEKEND_REST_DAYS = 2

# day -> ids of the employees working that day
Assignment = Dict[int, Set[int]]


# ==================== CALENDAR ====================

def days_in_month(year: int, month: int) -> int:
    """Last day number of the given month."""
    return calendar.monthrange(year, month)[1]


def weekday_of(year: int, month: int, day: int) -> Weekday:
    """Weekday of a date, Monday=0 through Sunday=6 (as date.weekday())."""
    return Weekday(date(year, month, day).weekday())


def is_weekend(year: int, month: int, day: int) -> bool:
    return weekday_of(year, month, day) in WEEKEND_DAYS


def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def next_month(year: int, month: int) -> Tuple[int, int]:
    if month == 12:
        return year + 1, 1
    return year, month + 1


# ==================== EMPLOYEES ====================

class DateCategory(Enum):
    """Per-date constraint an employee can carry."""
    ABSOLUTE_OFF = 'absolute'
    REQUESTED_OFF = 'requested'
    MANDATORY_WORK = 'mandatory'


@dataclass
class Employee:
    """Represents an employee with their monthly constraints."""
    id: int
    name: str
    required_rest_days: int = DEFAULT_REQUIRED_REST_DAYS
    absolute_off: Set[date] = field(default_factory=set)     # never scheduled
    requested_off: Set[date] = field(default_factory=set)    # preferably not scheduled
    mandatory_work: Set[date] = field(default_factory=set)   # always scheduled

    def _dates_for(self, category: DateCategory) -> Set[date]:
        if category is DateCategory.ABSOLUTE_OFF:
            return self.absolute_off
        if category is DateCategory.REQUESTED_OFF:
            return self.requested_off
        return self.mandatory_work

    def category_of(self, d: date) -> Optional[DateCategory]:
        """Return the category the date currently belongs to, if any."""
        for category in DateCategory:
            if d in self._dates_for(category):
                return category
        return None

    def set_category(self, d: date, category: Optional[DateCategory]) -> None:
        """
        Put a date into exactly one category, evicting it from the others.
        Passing None clears the date from all three sets.
        """
        for other in DateCategory:
            self._dates_for(other).discard(d)
        if category is not None:
            self._dates_for(category).add(d)

    def toggle_category(self, d: date, category: DateCategory) -> Optional[DateCategory]:
        """
        Clear the date if it already carries this category, otherwise set it.
        Returns the resulting category of the date.
        """
        if self.category_of(d) is category:
            self.set_category(d, None)
        else:
            self.set_category(d, category)
        return self.category_of(d)

    def is_absolute_off(self, d: date) -> bool:
        return d in self.absolute_off

    def is_requested_off(self, d: date) -> bool:
        return d in self.requested_off

    def is_mandatory(self, d: date) -> bool:
        return d in self.mandatory_work

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            'id': self.id,
            'name': self.name,
            'required_rest_days': self.required_rest_days,
            'absolute_off': sorted(d.isoformat() for d in self.absolute_off),
            'requested_off': sorted(d.isoformat() for d in self.requested_off),
            'mandatory_work': sorted(d.isoformat() for d in self.mandatory_work),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Employee':
        """Create from dictionary. Later categories win if a date is listed twice."""
        emp = cls(
            id=int(data['id']),
            name=data.get('name', f"Staff {data['id']}"),
            required_rest_days=int(data.get('required_rest_days', DEFAULT_REQUIRED_REST_DAYS)),
        )
        for key, category in (('absolute_off', DateCategory.ABSOLUTE_OFF),
                              ('requested_off', DateCategory.REQUESTED_OFF),
                              ('mandatory_work', DateCategory.MANDATORY_WORK)):
            for s in data.get(key, []):
                emp.set_category(date.fromisoformat(s), category)
        return emp


# ==================== CONFIG ====================

@dataclass
class ScheduleConfig:
    """Configuration for schedule generation."""
    year: int
    month: int
    employees: List[Employee] = field(default_factory=list)
    default_target: int = DEFAULT_TARGET
    daily_targets: Dict[int, int] = field(default_factory=dict)  # day -> target override
    weekend_rest_priority: bool = False

    @property
    def days_in_month(self) -> int:
        return days_in_month(self.year, self.month)

    def get_all_days(self) -> List[int]:
        """Get all day numbers of the month."""
        return list(range(1, self.days_in_month + 1))

    def date_of(self, day: int) -> date:
        return date(self.year, self.month, day)

    def target_for(self, day: int) -> int:
        """Staffing target for a day: explicit override, else the default."""
        return self.daily_targets.get(day, self.default_target)

    def get_weekend_days(self) -> List[int]:
        """Get all Saturday and Sunday day numbers."""
        return [d for d in self.get_all_days() if is_weekend(self.year, self.month, d)]

    def get_employee_by_id(self, employee_id: int) -> Optional[Employee]:
        """Find employee by id."""
        for e in self.employees:
            if e.id == employee_id:
                return e
        return None

    def employee_ids(self) -> List[int]:
        return [e.id for e in self.employees]

    def add_employee(self, name: Optional[str] = None,
                     required_rest_days: int = DEFAULT_REQUIRED_REST_DAYS) -> Employee:
        """Append a new employee with empty constraint sets and the next free id."""
        new_id = max((e.id for e in self.employees), default=0) + 1
        emp = Employee(id=new_id, name=name or f"Staff {new_id}",
                       required_rest_days=required_rest_days)
        self.employees.append(emp)
        return emp

    def remove_employee(self, employee_id: int) -> bool:
        """Drop an employee from the roster. Existing assignments are left alone."""
        before = len(self.employees)
        self.employees = [e for e in self.employees if e.id != employee_id]
        return len(self.employees) != before

    def update_employee(self, employee_id: int, **fields) -> Optional[Employee]:
        """Update name or rest quota of an employee."""
        emp = self.get_employee_by_id(employee_id)
        if emp is None:
            return None
        for key in ('name', 'required_rest_days'):
            if key in fields:
                setattr(emp, key, fields[key])
        return emp

    def to_dict(self) -> dict:
        return {
            'year': self.year,
            'month': self.month,
            'employees': [e.to_dict() for e in self.employees],
            'default_target': self.default_target,
            'daily_targets': {str(d): t for d, t in sorted(self.daily_targets.items())},
            'weekend_rest_priority': self.weekend_rest_priority,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'ScheduleConfig':
        return cls(
            year=int(data['year']),
            month=int(data['month']),
            employees=[Employee.from_dict(e) for e in data.get('employees', [])],
            default_target=int(data.get('default_target', DEFAULT_TARGET)),
            daily_targets={int(d): int(t) for d, t in data.get('daily_targets', {}).items()},
            weekend_rest_priority=bool(data.get('weekend_rest_priority', False)),
        )


# ==================== RESULTS ====================

@dataclass
class EmployeeStats:
    """Statistics for a single employee over one assignment."""
    employee_id: int
    name: str
    worked_days: int = 0
    rest_days: int = 0
    required_rest_days: int = 0
    weekend_rest_days: int = 0
    requested_total: int = 0
    requested_honored: int = 0
    four_plus_windows: int = 0

    @property
    def rest_shortfall(self) -> int:
        return max(0, self.required_rest_days - self.rest_days)

    @property
    def request_fulfillment_rate(self) -> float:
        """Honored requests as a percentage; 100 when nothing was requested."""
        if self.requested_total == 0:
            return 100.0
        return 100.0 * self.requested_honored / self.requested_total


class FindingCategory(Enum):
    REST_SHORTFALL = 'rest-shortfall'
    WEEKEND_SHORTFALL = 'weekend-shortfall'
    UNDER_STAFFED = 'under-staffed'
    OVER_STAFFED = 'over-staffed'
    CONSECUTIVE_EXCESS = 'consecutive-excess'


@dataclass
class Finding:
    """One advisory diagnostic about a finished assignment."""
    category: FindingCategory
    magnitude: int
    message: str
    day: Optional[int] = None
    employee_id: Optional[int] = None
    suggestion: str = ""


@dataclass
class ScheduleResult:
    """Result of schedule generation."""
    assignments: Assignment = field(default_factory=dict)
    employee_stats: Dict[int, EmployeeStats] = field(default_factory=dict)
    findings: List[Finding] = field(default_factory=list)
    locked_days: Set[int] = field(default_factory=set)
    solve_time_seconds: float = 0.0

    def headcount(self, day: int) -> int:
        return len(self.assignments.get(day, ()))

    def get_fairness_spread(self) -> Tuple[int, int, int]:
        """Get (min, max, spread) of worked days across employees."""
        values = [s.worked_days for s in self.employee_stats.values()]
        if not values:
            return (0, 0, 0)
        return (min(values), max(values), max(values) - min(values))


class ToggleOutcome(Enum):
    ADDED = 'added'
    REMOVED = 'removed'
    REJECTED_STREAK = 'rejected-streak'
    REJECTED_LOCKED = 'rejected-locked'


@dataclass
class ToggleResult:
    """Outcome of toggling one employee on one day."""
    assignment: Assignment
    outcome: ToggleOutcome

    @property
    def accepted(self) -> bool:
        return self.outcome in (ToggleOutcome.ADDED, ToggleOutcome.REMOVED)


def copy_assignment(assignment: Optional[Assignment]) -> Assignment:
    """Deep-copy an assignment so callers never share the per-day sets."""
    if not assignment:
        return {}
    return {day: set(ids) for day, ids in assignment.items()}
