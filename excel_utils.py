"""
Excel import/export utilities for monthly schedules and rosters.
"""
import pandas as pd
from datetime import date
from typing import List, Optional, Tuple
import io
import logging

from models import (
    DateCategory, Employee, ScheduleConfig, ScheduleResult,
    DEFAULT_REQUIRED_REST_DAYS, WEEKDAY_SHORT, weekday_of
)
from solver import assignment_to_names

logger = logging.getLogger(__name__)

CATEGORY_LABELS = {
    DateCategory.ABSOLUTE_OFF: 'absolute',
    DateCategory.REQUESTED_OFF: 'requested',
    DateCategory.MANDATORY_WORK: 'mandatory',
}
LABEL_TO_CATEGORY = {label: category for category, label in CATEGORY_LABELS.items()}


def _daily_frame(result: ScheduleResult, config: ScheduleConfig) -> pd.DataFrame:
    names = assignment_to_names(config, result.assignments)
    rows = []
    for day in config.get_all_days():
        working = names.get(day, [])
        rows.append({
            'Date': config.date_of(day).strftime('%Y-%m-%d'),
            'Day': WEEKDAY_SHORT[weekday_of(config.year, config.month, day)],
            'Target': config.target_for(day),
            'Assigned': len(working),
            'Employees': ', '.join(working),
            'Locked': day in result.locked_days,
        })
    return pd.DataFrame(rows)


def _calendar_frame(result: ScheduleResult, config: ScheduleConfig) -> pd.DataFrame:
    """Employees as rows, days as columns; W marks a working day."""
    columns = []
    for day in config.get_all_days():
        label = f"{day} {WEEKDAY_SHORT[weekday_of(config.year, config.month, day)]}"
        if day in result.locked_days:
            label += " (L)"
        columns.append(label)

    rows = []
    for e in config.employees:
        row = {'Employee': e.name}
        for day, label in zip(config.get_all_days(), columns):
            row[label] = 'W' if e.id in result.assignments.get(day, ()) else ''
        rows.append(row)
    return pd.DataFrame(rows, columns=['Employee'] + columns)


def _stats_frame(result: ScheduleResult) -> pd.DataFrame:
    rows = []
    for s in result.employee_stats.values():
        rows.append({
            'Employee': s.name,
            'Worked Days': s.worked_days,
            'Rest Days': s.rest_days,
            'Required Rest Days': s.required_rest_days,
            'Rest Shortfall': s.rest_shortfall,
            'Weekend Rest Days': s.weekend_rest_days,
            'Requests Honored': f"{s.requested_honored}/{s.requested_total}",
            'Request Fulfillment (%)': round(s.request_fulfillment_rate, 1),
            'Four-Day Windows': s.four_plus_windows,
        })
    return pd.DataFrame(rows)


def _findings_frame(result: ScheduleResult) -> pd.DataFrame:
    rows = [{
        'Category': f.category.value,
        'Day': f.day,
        'Employee ID': f.employee_id,
        'Magnitude': f.magnitude,
        'Message': f.message,
        'Suggestion': f.suggestion,
    } for f in result.findings]
    return pd.DataFrame(rows, columns=['Category', 'Day', 'Employee ID', 'Magnitude', 'Message', 'Suggestion'])


def _write_schedule(writer: pd.ExcelWriter, result: ScheduleResult, config: ScheduleConfig) -> None:
    _daily_frame(result, config).to_excel(writer, sheet_name='Daily Schedule', index=False)
    _calendar_frame(result, config).to_excel(writer, sheet_name='Calendar View', index=False)
    if result.employee_stats:
        _stats_frame(result).to_excel(writer, sheet_name='Statistics', index=False)
    _findings_frame(result).to_excel(writer, sheet_name='Findings', index=False)


def export_schedule_to_excel(result: ScheduleResult, config: ScheduleConfig, path: str) -> None:
    """
    Export schedule to Excel with multiple sheets:
    - Daily schedule (one row per day)
    - Calendar view (employee x day grid)
    - Employee statistics
    - Findings
    """
    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        _write_schedule(writer, result, config)
    logger.info("Exported %04d-%02d schedule to %s", config.year, config.month, path)


def export_schedule_to_bytes(result: ScheduleResult, config: ScheduleConfig) -> bytes:
    """Export schedule to Excel and return the workbook as bytes (for downloads)."""
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine='openpyxl') as writer:
        _write_schedule(writer, result, config)
    return buffer.getvalue()


def create_template_excel(path: str) -> None:
    """Create a template Excel file for importing a roster."""
    with pd.ExcelWriter(path, engine='openpyxl') as writer:
        employees_df = pd.DataFrame({
            'ID': [1, 2, 3],
            'Name': ['Alice', 'Bob', 'Charlie'],
            'Required Rest Days': [8, 10, 8],
        })
        employees_df.to_excel(writer, sheet_name='Employees', index=False)

        constraints_df = pd.DataFrame({
            'Employee ID': [1, 2, 3],
            'Date': ['2026-01-05', '2026-01-10', '2026-01-15'],
            'Category': ['absolute', 'requested', 'mandatory'],
        })
        constraints_df.to_excel(writer, sheet_name='Constraints', index=False)

        instructions_df = pd.DataFrame({
            'Instructions': [
                'Employees sheet: one row per employee with a unique numeric ID',
                'Required Rest Days: minimum number of days off in the month',
                'Constraints sheet: one row per employee and date (YYYY-MM-DD)',
                'Category: absolute (never work), requested (prefer off), mandatory (always work)',
                'A date can only carry one category per employee; the last row wins',
            ]
        })
        instructions_df.to_excel(writer, sheet_name='Instructions', index=False)


def _parse_date(val) -> Optional[date]:
    """Accept pandas Timestamps, datetimes, ISO strings or DD/MM/YYYY."""
    if pd.isna(val):
        return None
    if hasattr(val, 'date'):
        return val.date()
    if isinstance(val, date):
        return val
    s = str(val).strip()[:10]
    try:
        return date.fromisoformat(s)
    except ValueError:
        pass
    parts = s.split('/')
    if len(parts) == 3 and all(p.isdigit() for p in parts):
        try:
            return date(int(parts[2]), int(parts[1]), int(parts[0]))
        except ValueError:
            return None
    return None


def import_roster_from_excel(path) -> Tuple[List[Employee], Optional[str]]:
    """
    Import a roster from the Excel template.
    Returns (employees, error_message); error_message is None on success.
    """
    try:
        df_emp = pd.read_excel(path, sheet_name='Employees')
    except Exception as e:
        return [], f"Error reading Excel file: {e}"

    employees = []
    by_id = {}
    for _, row in df_emp.iterrows():
        if pd.isna(row.get('ID')):
            continue
        try:
            emp_id = int(row['ID'])
        except (TypeError, ValueError):
            return [], f"Invalid employee ID '{row['ID']}' in Employees sheet."
        if emp_id in by_id:
            return [], f"Duplicate employee ID {emp_id} in Employees sheet."
        name = str(row.get('Name', '')).strip()
        if not name or name == 'nan':
            name = f"Staff {emp_id}"
        rest = row.get('Required Rest Days')
        try:
            rest = DEFAULT_REQUIRED_REST_DAYS if pd.isna(rest) else int(rest)
        except (TypeError, ValueError):
            return [], f"Invalid rest days '{rest}' for employee {emp_id}."
        emp = Employee(id=emp_id, name=name, required_rest_days=rest)
        employees.append(emp)
        by_id[emp_id] = emp

    try:
        df_con = pd.read_excel(path, sheet_name='Constraints')
    except ValueError:
        # Constraints sheet is optional
        return employees, None

    for _, row in df_con.iterrows():
        if pd.isna(row.get('Employee ID')):
            continue
        try:
            emp = by_id.get(int(row['Employee ID']))
        except (TypeError, ValueError):
            return [], f"Invalid employee ID '{row['Employee ID']}' in Constraints sheet."
        category = LABEL_TO_CATEGORY.get(str(row.get('Category', '')).strip().lower())
        d = _parse_date(row.get('Date'))
        if emp is None or category is None or d is None:
            logger.warning("Skipping constraint row %s", row.to_dict())
            continue
        emp.set_category(d, category)

    return employees, None
