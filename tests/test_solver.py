from datetime import date

from models import DateCategory, Employee, ScheduleConfig
from solver import _rebalance_rest, assignment_to_names, generate_assignment, solve_schedule
from streaks import count_working_days, find_four_plus_runs


def _assert_hard_constraints(config, assignment):
    for e in config.employees:
        for day in config.get_all_days():
            d = config.date_of(day)
            if e.is_absolute_off(d):
                assert e.id not in assignment[day]
            if e.is_mandatory(d):
                assert e.id in assignment[day]
        assert len(find_four_plus_runs(assignment, e.id, config.days_in_month)) < 2


def test_two_person_month_meets_rest_quotas(two_person_config):
    assignment = generate_assignment(two_person_config)

    assert sorted(assignment) == list(range(1, 31))
    assert all(len(ids) <= 2 for ids in assignment.values())
    for e in two_person_config.employees:
        rest = 30 - count_working_days(assignment, e.id)
        assert rest >= e.required_rest_days
    _assert_hard_constraints(two_person_config, assignment)


def test_team_month_respects_hard_constraints(team_config):
    assignment = generate_assignment(team_config)

    _assert_hard_constraints(team_config, assignment)
    assert all(len(assignment[day]) <= team_config.target_for(day) for day in team_config.get_all_days())


def test_mandatory_day_is_kept_even_over_target_and_quota():
    emp = Employee(id=1, name="A", required_rest_days=31)
    emp.set_category(date(2026, 3, 5), DateCategory.ABSOLUTE_OFF)
    emp.set_category(date(2026, 3, 5), DateCategory.MANDATORY_WORK)
    config = ScheduleConfig(year=2026, month=3, employees=[emp], default_target=1,
                            daily_targets={5: 0})

    assignment = generate_assignment(config)

    assert assignment[5] == {1}
    assert count_working_days(assignment, 1) == 1


def test_absolute_day_off_is_never_assigned():
    a = Employee(id=1, name="A", required_rest_days=0)
    a.absolute_off.add(date(2026, 3, 10))
    config = ScheduleConfig(year=2026, month=3, employees=[a], default_target=1)

    assignment = generate_assignment(config)

    assert 1 not in assignment[10]


def test_requested_day_off_sorts_candidate_later():
    a = Employee(id=1, name="A", required_rest_days=0)
    b = Employee(id=2, name="B", required_rest_days=0)
    a.requested_off.add(date(2026, 3, 1))
    config = ScheduleConfig(year=2026, month=3, employees=[a, b], default_target=1)

    assignment = generate_assignment(config)

    assert assignment[1] == {2}


def test_larger_rest_quota_sorts_candidate_later():
    a = Employee(id=1, name="A", required_rest_days=10)
    b = Employee(id=2, name="B", required_rest_days=5)
    config = ScheduleConfig(year=2026, month=3, employees=[a, b], default_target=1)

    assignment = generate_assignment(config)

    assert assignment[1] == {2}


def test_load_is_spread_evenly():
    employees = [Employee(id=i, name=f"S{i}", required_rest_days=0) for i in (1, 2)]
    config = ScheduleConfig(year=2026, month=3, employees=employees, default_target=1)

    assignment = generate_assignment(config)

    worked = [count_working_days(assignment, e.id) for e in employees]
    assert abs(worked[0] - worked[1]) <= 1
    assert all(len(ids) == 1 for ids in assignment.values())


def test_rebalance_gives_back_requested_days_first():
    emp = Employee(id=1, name="A", required_rest_days=10)
    emp.requested_off.add(date(2026, 3, 10))
    config = ScheduleConfig(year=2026, month=3, employees=[emp], default_target=1)

    assignment = generate_assignment(config)

    # the fill pass works 24 days (runs of three after the first four-day run);
    # the deficit of three is taken from day 10, then days 1 and 2
    assert count_working_days(assignment, 1) == 21
    assert 1 not in assignment[10]
    assert 1 not in assignment[1]
    assert 1 not in assignment[2]
    assert 1 in assignment[3]


def test_rebalance_prefers_busiest_days():
    a = Employee(id=1, name="A", required_rest_days=29)
    b = Employee(id=2, name="B", required_rest_days=0)
    config = ScheduleConfig(year=2026, month=3, employees=[a, b])
    assignment = {day: set() for day in config.get_all_days()}
    assignment[1] = {1}
    assignment[2] = {1, 2}
    assignment[3] = {1}

    _rebalance_rest(config, assignment, locked=set())

    assert assignment[2] == {2}
    assert assignment[1] == {1}
    assert assignment[3] == {1}


def test_rebalance_skips_mandatory_and_locked_days():
    a = Employee(id=1, name="A", required_rest_days=31)
    a.mandatory_work.add(date(2026, 3, 1))
    config = ScheduleConfig(year=2026, month=3, employees=[a])
    assignment = {day: set() for day in config.get_all_days()}
    for day in (1, 2, 3):
        assignment[day].add(1)

    _rebalance_rest(config, assignment, locked={2})

    assert assignment[1] == {1}
    assert assignment[2] == {1}
    assert assignment[3] == set()


def test_regenerating_fully_locked_month_is_identity(team_config):
    first = generate_assignment(team_config)

    again = generate_assignment(team_config, previous=first, locked_days=team_config.get_all_days())

    assert again == first
    assert again is not first


def test_locked_days_keep_prior_content(team_config):
    previous = {10: {1, 2, 3, 4, 5}}

    assignment = generate_assignment(team_config, previous=previous, locked_days={10, 11})

    assert assignment[10] == {1, 2, 3, 4, 5}
    assert assignment[11] == set()
    assert previous == {10: {1, 2, 3, 4, 5}}


def test_empty_roster_produces_empty_days():
    config = ScheduleConfig(year=2026, month=2)

    result = solve_schedule(config)

    assert result.assignments == {day: set() for day in range(1, 29)}
    assert len(result.findings) == 28


def test_weekend_rest_priority_keeps_hard_constraints(team_config):
    team_config.weekend_rest_priority = True

    assignment = generate_assignment(team_config)

    _assert_hard_constraints(team_config, assignment)


def test_later_mandatory_day_does_not_count_as_load_yet():
    a = Employee(id=1, name="A", required_rest_days=0)
    b = Employee(id=2, name="B", required_rest_days=0)
    a.mandatory_work.add(date(2026, 3, 30))
    config = ScheduleConfig(year=2026, month=3, employees=[a, b], default_target=0,
                            daily_targets={1: 1})

    assignment = generate_assignment(config)

    # neither has worked before day 1, so roster order decides
    assert assignment[1] == {1}
    assert assignment[30] == {1}


def _weekend_history_config(weekend_rest_priority):
    # March 2026: days 1 (Sun) and 7 (Sat) are the weekend days before Sunday the 8th
    employees = [Employee(id=i, name=f"S{i}", required_rest_days=0) for i in (1, 2)]
    config = ScheduleConfig(year=2026, month=3, employees=employees, default_target=1,
                            weekend_rest_priority=weekend_rest_priority)
    previous = {1: {1}, 2: {2}, 3: {2}, 4: {1}, 5: set(), 6: {2}, 7: {1}}
    return config, previous


def test_weekend_rest_priority_breaks_load_tie():
    config, previous = _weekend_history_config(weekend_rest_priority=True)

    assignment = generate_assignment(config, previous=previous, locked_days=range(1, 8))

    # both worked three days; employee 1 has had no weekend rest so far
    assert assignment[8] == {2}


def test_weekend_rest_ignored_without_priority():
    config, previous = _weekend_history_config(weekend_rest_priority=False)

    assignment = generate_assignment(config, previous=previous, locked_days=range(1, 8))

    assert assignment[8] == {1}


def test_solve_schedule_attaches_stats(team_config):
    result = solve_schedule(team_config, locked_days={3})

    assert set(result.employee_stats) == {1, 2, 3, 4, 5}
    assert result.locked_days == {3}
    assert result.solve_time_seconds >= 0
    for s in result.employee_stats.values():
        assert s.worked_days + s.rest_days == 31
    low, high, spread = result.get_fairness_spread()
    assert spread == high - low


def test_assignment_to_names_drops_removed_employees(two_person_config):
    assignment = {1: {1, 2, 99}}

    assert assignment_to_names(two_person_config, assignment) == {1: ["Sato", "Tanaka"]}
