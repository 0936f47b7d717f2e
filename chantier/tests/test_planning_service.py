# chantier/tests/test_planning_service.py
from datetime import date

import pytest

from chantier.db.enums import BarState, MoveDirection, Priority, TaskStatus, TimeScale
from chantier.errors import FormValidationError
from chantier.schemas.entities import Task
from chantier.schemas.forms import TaskForm, parse_form
from chantier.services.planning_service import (
    MAX_GANTT_UNITS,
    PlanningService,
    build_gantt,
    sort_tasks,
    time_units,
)


def task(tid, start, end, **kwargs):
    return Task(id=tid, title=tid, project_id="p1", start_date=start, end_date=end, **kwargs)


def test_sort_by_priority_then_end_date():
    tasks = [
        task("a", "2024-01-01", "2024-03-01", priority=Priority.low),
        task("b", "2024-01-01", "2024-02-01"),
        task("c", "2024-01-01", "2024-01-15"),
        task("d", "2024-01-01", "2024-05-01", priority=Priority.urgent),
    ]
    assert [t.id for t in sort_tasks(tasks)] == ["d", "c", "b", "a"]


def test_create_computes_duration(repos, clock):
    form = parse_form(TaskForm, {
        "title": "Coffrage", "projectId": "p1", "startDate": "2024-01-01", "endDate": "2024-01-11",
    })
    created = PlanningService(repos, clock=clock).create(form)
    assert created.duration == 10
    assert created.progress == 0
    assert created.status == TaskStatus.pending

    same_day = parse_form(TaskForm, {
        "title": "Réunion", "projectId": "p1", "startDate": "2024-01-05", "endDate": "2024-01-05",
    })
    assert PlanningService(repos, clock=clock).create(same_day).duration == 1


def test_form_rejects_end_before_start_and_bad_progress():
    with pytest.raises(FormValidationError):
        parse_form(TaskForm, {"title": "X", "projectId": "p1", "startDate": "2024-02-01", "endDate": "2024-01-01"})
    with pytest.raises(FormValidationError):
        parse_form(TaskForm, {
            "title": "X", "projectId": "p1", "startDate": "2024-01-01", "endDate": "2024-01-02", "progress": 120,
        })


def test_status_and_progress(seeded, clock):
    planning = PlanningService(seeded, clock=clock)
    assert planning.set_status("t2", TaskStatus.done).status == TaskStatus.done
    assert planning.set_progress("t1", 55).progress == 55
    with pytest.raises(FormValidationError) as excinfo:
        planning.set_progress("t1", 101)
    assert excinfo.value.errors[0]["field"] == "progress"
    assert seeded.tasks.get("t1").progress == 55


def test_move_swaps_priority_with_neighbour(seeded, clock):
    planning = PlanningService(seeded, clock=clock)
    assert [t.id for t in planning.list_tasks()] == ["t2", "t1", "t3"]

    view = planning.move_task("t1", MoveDirection.up)
    assert [t.id for t in view] == ["t1", "t2", "t3"]
    assert seeded.tasks.get("t1").priority == Priority.urgent
    assert seeded.tasks.get("t2").priority == Priority.normal


def test_move_at_edges_is_a_no_op(seeded, clock):
    planning = PlanningService(seeded, clock=clock)
    assert [t.id for t in planning.move_task("t2", MoveDirection.up)] == ["t2", "t1", "t3"]
    assert [t.id for t in planning.move_task("t3", MoveDirection.down)] == ["t2", "t1", "t3"]
    assert [t.id for t in planning.move_task("missing", MoveDirection.up)] == ["t2", "t1", "t3"]
    assert seeded.tasks.get("t2").priority == Priority.urgent


def test_move_within_filtered_view(seeded, clock):
    planning = PlanningService(seeded, clock=clock)
    view = planning.move_task("t1", MoveDirection.down, project_id="p1")
    assert [t.id for t in view] == ["t2", "t1"]  # 视图内已经在最后
    assert seeded.tasks.get("t3").priority == Priority.low


def test_overdue_and_deadline(seeded, clock):
    planning = PlanningService(seeded, clock=clock)
    t1, t2, t3 = (seeded.tasks.get(i) for i in ("t1", "t2", "t3"))
    assert planning.is_overdue(t2) is True
    assert planning.is_overdue(t1) is False
    assert planning.days_until_deadline(t2) == -5
    assert planning.days_until_deadline(t1) == 10
    # 已完成的不算逾期
    assert planning.is_overdue(t3, date(2025, 1, 1)) is False


def test_month_gantt(seeded, clock):
    chart = PlanningService(seeded, clock=clock).gantt(TimeScale.month)
    assert chart.units == [date(2023, 12, 1), date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]

    bars = {b.task_id: b for b in chart.bars}
    assert (bars["t2"].start_index, bars["t2"].end_index) == (0, 1)
    assert bars["t2"].left == 0
    assert bars["t2"].width == 50
    assert bars["t2"].state == BarState.overdue
    assert (bars["t3"].start_index, bars["t3"].end_index) == (2, 3)
    assert bars["t3"].left == 50
    assert bars["t3"].state == BarState.done
    assert bars["t1"].state == BarState.in_progress


def test_day_gantt_keeps_minimum_width():
    tasks = [task("long", "2024-01-01", "2024-03-30"), task("short", "2024-01-01", "2024-01-01")]
    chart = build_gantt(tasks, TimeScale.day, date(2024, 1, 1))
    assert len(chart.units) == 90
    short = chart.bars[1]
    assert short.width == 2.0
    assert short.state == BarState.pending


def test_axis_is_capped():
    units = time_units(date(2020, 1, 1), date(2024, 1, 1), TimeScale.day)
    assert len(units) == MAX_GANTT_UNITS
    assert build_gantt([], TimeScale.year, date(2024, 1, 1)).bars == []
