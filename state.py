"""
Planner state threaded explicitly between calls, plus JSON snapshots of it.
"""
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Set, Union
import json
import logging

from models import (
    Assignment, Employee, Finding, ScheduleConfig, ToggleResult,
    DEFAULT_TARGET, next_month, previous_month
)
from editing import set_lock, toggle_assignment, toggle_lock
from solver import generate_assignment
from streaks import highlight_days
from validation import check_schedule

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1


def default_roster() -> List[Employee]:
    """Two-person starter roster."""
    return [
        Employee(id=1, name="Sato", required_rest_days=8),
        Employee(id=2, name="Tanaka", required_rest_days=10),
    ]


@dataclass
class PlannerState:
    """Everything a planning session needs; owned by the caller."""
    config: ScheduleConfig
    assignment: Optional[Assignment] = None
    locked_days: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def default(cls, today: Optional[date] = None) -> 'PlannerState':
        today = today or date.today()
        config = ScheduleConfig(year=today.year, month=today.month,
                                employees=default_roster(), default_target=DEFAULT_TARGET)
        return cls(config=config)

    def reset(self, today: Optional[date] = None) -> None:
        fresh = PlannerState.default(today)
        self.config = fresh.config
        self.assignment = None
        self.locked_days = frozenset()

    def generate(self) -> Assignment:
        """Regenerate the month, keeping locked days as they are."""
        self.assignment = generate_assignment(self.config, self.assignment, self.locked_days)
        return self.assignment

    def toggle(self, employee_id: int, day: int) -> Optional[ToggleResult]:
        """Toggle one cell. Returns None when nothing has been generated yet."""
        if self.assignment is None:
            return None
        result = toggle_assignment(self.assignment, employee_id, day,
                                   self.config.days_in_month, self.locked_days)
        self.assignment = result.assignment
        return result

    def toggle_lock(self, day: int) -> bool:
        self.locked_days = toggle_lock(self.locked_days, day)
        return day in self.locked_days

    def set_lock(self, day: int, locked: bool) -> None:
        self.locked_days = set_lock(self.locked_days, day, locked)

    def findings(self) -> List[Finding]:
        if self.assignment is None:
            return []
        return check_schedule(self.config, self.assignment)

    def highlights(self) -> Dict[int, Set[int]]:
        if self.assignment is None:
            return {}
        return highlight_days(self.assignment, self.config.employee_ids(), self.config.days_in_month)

    def _change_month(self, year: int, month: int) -> None:
        self.config.year, self.config.month = year, month
        self.assignment = None
        self.locked_days = frozenset()

    def go_to_previous_month(self) -> None:
        self._change_month(*previous_month(self.config.year, self.config.month))

    def go_to_next_month(self) -> None:
        self._change_month(*next_month(self.config.year, self.config.month))

    def to_dict(self) -> dict:
        assignment = None
        if self.assignment is not None:
            assignment = {str(day): sorted(ids) for day, ids in sorted(self.assignment.items())}
        return {
            'version': SNAPSHOT_VERSION,
            'config': self.config.to_dict(),
            'assignment': assignment,
            'locked_days': sorted(self.locked_days),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PlannerState':
        assignment = data.get('assignment')
        if assignment is not None:
            assignment = {int(day): set(ids) for day, ids in assignment.items()}
        return cls(
            config=ScheduleConfig.from_dict(data['config']),
            assignment=assignment,
            locked_days=frozenset(int(d) for d in data.get('locked_days', [])),
        )


def save_state(state: PlannerState, path: Union[str, Path]) -> None:
    """Write a snapshot atomically (temp file, then replace)."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(json.dumps(state.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)
    finally:
        tmp.unlink(missing_ok=True)
    logger.info("Saved planner snapshot to %s", path)


def load_state(path: Union[str, Path], default: Optional[PlannerState] = None) -> PlannerState:
    """
    Read a snapshot. Missing, empty or unreadable files give the default state
    (a fresh one when no default is passed).
    """
    path = Path(path)
    fallback = default if default is not None else PlannerState.default()
    if not path.exists():
        return fallback
    try:
        raw = path.read_text(encoding="utf-8").strip()
        if not raw:
            return fallback
        return PlannerState.from_dict(json.loads(raw))
    except (OSError, ValueError, KeyError, TypeError) as e:
        logger.error("Failed to parse planner snapshot %s: %s", path, e)
        return fallback
