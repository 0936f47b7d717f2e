# chantier/routes/planning.py
from flask import Blueprint, Response

from chantier.errors import NotFoundError
from chantier.routes.common import attachment, get_repos, merged, ok, payload, query, service
from chantier.schemas.forms import (
    GanttForm,
    MoveTaskForm,
    TaskForm,
    TaskProgressForm,
    TaskQuery,
    TaskStatusForm,
    parse_form,
)
from chantier.services.export_service import ExportService
from chantier.services.planning_service import PlanningService

planning_bp = Blueprint("planning", __name__, url_prefix="/api/tasks")

EXCEL_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@planning_bp.route("", methods=["GET"])
def list_tasks():
    filters = parse_form(TaskQuery, query())
    planning = service(PlanningService)
    return ok([planning.describe(t) for t in planning.list_tasks(**filters.model_dump())])


@planning_bp.route("", methods=["POST"])
def create_task():
    form = parse_form(TaskForm, payload())
    return ok(service(PlanningService).create(form), 201)


@planning_bp.route("/<task_id>", methods=["GET"])
def get_task(task_id):
    return ok(service(PlanningService).describe(get_repos().tasks.require(task_id)))


@planning_bp.route("/<task_id>", methods=["PUT", "PATCH"])
def update_task(task_id):
    task = get_repos().tasks.require(task_id)
    changes = payload()
    values = merged(task, changes)
    # 改了日期但没给工期时重新计算
    dates_changed = {"startDate", "endDate", "start_date", "end_date"} & changes.keys()
    if "duration" not in changes and (dates_changed or not task.duration):
        values["duration"] = None
    form = parse_form(TaskForm, values)
    return ok(service(PlanningService).update(task_id, form))


@planning_bp.route("/<task_id>", methods=["DELETE"])
def delete_task(task_id):
    if not service(PlanningService).delete(task_id):
        raise NotFoundError("Task", task_id)
    return ok({"id": task_id})


@planning_bp.route("/<task_id>/status", methods=["POST"])
def set_status(task_id):
    form = parse_form(TaskStatusForm, payload())
    return ok(service(PlanningService).set_status(task_id, form.status))


@planning_bp.route("/<task_id>/progress", methods=["POST"])
def set_progress(task_id):
    form = parse_form(TaskProgressForm, payload())
    return ok(service(PlanningService).set_progress(task_id, form.progress))


@planning_bp.route("/<task_id>/move", methods=["POST"])
def move_task(task_id):
    """Swap priority with the neighbour in the filtered view; returns the re-sorted view."""
    form = parse_form(MoveTaskForm, payload())
    planning = service(PlanningService)
    view = planning.move_task(task_id, **form.model_dump())
    return ok([planning.describe(t) for t in view])


@planning_bp.route("/gantt", methods=["GET"])
def gantt():
    form = parse_form(GanttForm, query())
    planning = service(PlanningService)
    tasks = planning.list_tasks(priority=form.priority, project_id=form.project_id, status=form.status)
    return ok(planning.gantt(form.scale, tasks))


# =========
# 导出
# =========
def _filtered_tasks():
    filters = parse_form(TaskQuery, query())
    return service(PlanningService).list_tasks(**filters.model_dump())


@planning_bp.route("/export.csv", methods=["GET"])
def export_csv():
    content = service(ExportService).tasks_csv(_filtered_tasks())
    return Response(
        content.encode("utf-8"),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=planning_export.csv"},
    )


@planning_bp.route("/export.xlsx", methods=["GET"])
def export_excel():
    content = service(ExportService).tasks_excel(_filtered_tasks())
    return attachment(content, EXCEL_MIMETYPE, "planning_export.xlsx")
