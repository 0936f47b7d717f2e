# chantier/services/planning_service.py
from datetime import date, datetime, timedelta
from typing import Callable, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from chantier.db.enums import BarState, MoveDirection, Priority, TaskStatus, TimeScale
from chantier.errors import FormValidationError
from chantier.logger import get_logger
from chantier.schemas.base import utcnow
from chantier.schemas.entities import Task
from chantier.schemas.forms import TaskForm
from chantier.services.lookup_service import LookupService
from chantier.store.repository import Repositories

logger = get_logger(__name__)

MAX_GANTT_UNITS = 100
MIN_BAR_WIDTH = 2.0  # %


def sort_tasks(tasks: List[Task]) -> List[Task]:
    """Priority rank (urgent < normal < low), then earliest end date first."""
    return sorted(tasks, key=lambda t: (t.priority.rank, t.end_date))


def is_overdue(task: Task, today: date) -> bool:
    return task.end_date < today and task.status != TaskStatus.done


def bar_state(task: Task, today: date) -> BarState:
    if task.status == TaskStatus.done:
        return BarState.done
    if is_overdue(task, today):
        return BarState.overdue
    if task.status == TaskStatus.in_progress:
        return BarState.in_progress
    return BarState.pending


# =========
# 甘特图时间轴
# =========
def truncate(day: date, scale: TimeScale) -> date:
    if scale == TimeScale.day:
        return day
    if scale == TimeScale.month:
        return day.replace(day=1)
    if scale == TimeScale.year:
        return date(day.year, 1, 1)
    raise ValueError(f"Unhandled time scale: {scale}")


def next_unit(day: date, scale: TimeScale) -> date:
    if scale == TimeScale.day:
        return day + timedelta(days=1)
    if scale == TimeScale.month:
        return date(day.year + day.month // 12, day.month % 12 + 1, 1)
    if scale == TimeScale.year:
        return date(day.year + 1, 1, 1)
    raise ValueError(f"Unhandled time scale: {scale}")


def time_units(start: date, end: date, scale: TimeScale) -> List[date]:
    """Unit start dates from truncated ``start`` through ``end``, at most MAX_GANTT_UNITS."""
    units = []
    current = truncate(start, scale)
    while current <= end and len(units) < MAX_GANTT_UNITS:
        units.append(current)
        current = next_unit(current, scale)
    return units


class GanttBar(BaseModel):
    model_config = ConfigDict(frozen=True)

    task_id: str
    title: str
    start_index: int
    end_index: int
    left: float   # %
    width: float  # %
    progress: int
    state: BarState


class GanttChart(BaseModel):
    model_config = ConfigDict(frozen=True)

    scale: TimeScale
    units: List[date] = Field(default_factory=list)
    bars: List[GanttBar] = Field(default_factory=list)


def build_gantt(tasks: List[Task], scale: TimeScale, today: date) -> GanttChart:
    """
    Place each task on a discrete time axis.
    :param tasks: tasks in display order
    A task outside the (capped) axis keeps the default first/last unit.
    """
    if not tasks:
        return GanttChart(scale=scale)

    units = time_units(
        min(t.start_date for t in tasks),
        max(t.end_date for t in tasks),
        scale,
    )
    total = len(units)
    bars = []
    for task in tasks:
        start_index, end_index = 0, total - 1
        for i, unit_start in enumerate(units):
            unit_end = next_unit(unit_start, scale)
            if unit_start <= task.start_date < unit_end:
                start_index = i
            if unit_start <= task.end_date < unit_end:
                end_index = i
        width = (end_index - start_index + 1) / total * 100
        bars.append(GanttBar(
            task_id=task.id,
            title=task.title,
            start_index=start_index,
            end_index=end_index,
            left=round(start_index / total * 100, 4),
            width=round(max(width, MIN_BAR_WIDTH), 4),
            progress=task.progress,
            state=bar_state(task, today),
        ))
    return GanttChart(scale=scale, units=units, bars=bars)


class PlanningService:
    """
    Task planning. Display-only: tasks are ordered by priority and end date,
    dependencies are advisory and never enforced.
    """

    def __init__(
        self,
        repos: Repositories,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repos = repos
        self.clock = clock
        self.lookup = LookupService(repos)

    def _today(self) -> date:
        return self.clock().date()

    # =========
    # CRUD
    # =========
    def create(self, form: TaskForm) -> Task:
        values = form.model_dump()
        values["duration"] = values["duration"] or self._duration(form)
        task = Task(id=str(uuid4()), created_at=self.clock(), **values)
        self.repos.tasks.create(task)
        logger.info(f"Task created: {task.id} '{task.title}'")
        return task

    def update(self, task_id: str, form: TaskForm) -> Task:
        values = form.model_dump()
        values["duration"] = values["duration"] or self._duration(form)
        task = self.repos.tasks.update(task_id, **values)
        logger.info(f"Task updated: {task_id}")
        return task

    @staticmethod
    def _duration(form: TaskForm) -> int:
        return max((form.end_date - form.start_date).days, 1)

    def delete(self, task_id: str) -> bool:
        deleted = self.repos.tasks.delete(task_id)
        if deleted:
            logger.info(f"Task deleted: {task_id}")
        return deleted

    def set_status(self, task_id: str, status: TaskStatus) -> Task:
        task = self.repos.tasks.update(task_id, status=status)
        logger.info(f"Task {task_id} status -> {status.value}")
        return task

    def set_progress(self, task_id: str, progress: int) -> Task:
        if not 0 <= progress <= 100:
            raise FormValidationError(
                "Invalid or missing fields: progress",
                [{"field": "progress", "message": f"Progress must be between 0 and 100, got {progress}"}],
            )
        return self.repos.tasks.update(task_id, progress=progress)

    # =========
    # 查询 / 排序
    # =========
    def list_tasks(
        self,
        *,
        priority: Optional[Priority] = None,
        project_id: Optional[str] = None,
        status: Optional[TaskStatus] = None,
    ) -> List[Task]:
        tasks = self.repos.tasks.filter(
            lambda t: (priority is None or t.priority == priority)
            and (not project_id or t.project_id == project_id)
            and (status is None or t.status == status)
        )
        return sort_tasks(tasks)

    def move_task(
        self,
        task_id: str,
        direction: MoveDirection,
        *,
        priority: Optional[Priority] = None,
        project_id: Optional[str] = None,
        status: Optional[TaskStatus] = None,
    ) -> List[Task]:
        """
        "Move" a task in the filtered, sorted view by swapping its priority
        value with the neighbour's, then re-sort.

        Neighbours with the same priority leave the order unchanged. Moving
        past either end, or an id outside the view, is a no-op.
        :return: the re-sorted view
        """
        view = self.list_tasks(priority=priority, project_id=project_id, status=status)
        index = next((i for i, t in enumerate(view) if t.id == task_id), None)
        if index is None:
            return view
        neighbour_index = index - 1 if direction == MoveDirection.up else index + 1
        if not 0 <= neighbour_index < len(view):
            return view

        task, neighbour = view[index], view[neighbour_index]
        self.repos.tasks.update(task.id, priority=neighbour.priority)
        self.repos.tasks.update(neighbour.id, priority=task.priority)
        logger.info(
            f"Task {task.id} moved {direction.value}: priority {task.priority.value} <-> "
            f"{neighbour.priority.value} with {neighbour.id}"
        )
        return self.list_tasks(priority=priority, project_id=project_id, status=status)

    def is_overdue(self, task: Task, today: Optional[date] = None) -> bool:
        return is_overdue(task, today or self._today())

    def days_until_deadline(self, task: Task, today: Optional[date] = None) -> int:
        """Negative once the end date has passed."""
        return (task.end_date - (today or self._today())).days

    def gantt(self, scale: TimeScale, tasks: Optional[List[Task]] = None) -> GanttChart:
        tasks = self.list_tasks() if tasks is None else tasks
        return build_gantt(tasks, scale, self._today())

    def describe(self, task: Task) -> dict:
        return {
            **task.to_record(),
            "projectName": self.lookup.project_name(task.project_id),
            "overdue": self.is_overdue(task),
            "daysUntilDeadline": self.days_until_deadline(task),
        }
