# chantier/routes/projects.py
from flask import Blueprint

from chantier.errors import NotFoundError
from chantier.routes.common import get_repos, merged, ok, payload, service
from chantier.schemas.forms import ApartmentForm, BlockForm, ProjectForm, parse_form
from chantier.services.lookup_service import LookupService
from chantier.services.project_service import ProjectService

projects_bp = Blueprint("projects", __name__, url_prefix="/api")


# =========
# 项目
# =========
@projects_bp.route("/projects", methods=["GET"])
def list_projects():
    return ok(service(ProjectService).list_projects())


@projects_bp.route("/projects", methods=["POST"])
def create_project():
    form = parse_form(ProjectForm, payload())
    return ok(service(ProjectService).create_project(form), 201)


@projects_bp.route("/projects/<project_id>", methods=["GET"])
def get_project(project_id):
    return ok(service(ProjectService).get_project(project_id))


@projects_bp.route("/projects/<project_id>", methods=["PUT", "PATCH"])
def update_project(project_id):
    projects = service(ProjectService)
    form = parse_form(ProjectForm, merged(projects.get_project(project_id), payload()))
    return ok(projects.update_project(project_id, form))


@projects_bp.route("/projects/<project_id>", methods=["DELETE"])
def delete_project(project_id):
    if not service(ProjectService).delete_project(project_id):
        raise NotFoundError("Project", project_id)
    return ok({"id": project_id})


@projects_bp.route("/projects/<project_id>/summary", methods=["GET"])
def project_summary(project_id):
    return ok(service(ProjectService).project_summary(project_id))


@projects_bp.route("/dashboard", methods=["GET"])
def dashboard():
    return ok(service(ProjectService).dashboard())


# =========
# 楼栋
# =========
@projects_bp.route("/projects/<project_id>/blocks", methods=["GET"])
def list_blocks(project_id):
    return ok(service(ProjectService).blocks_of(project_id))


@projects_bp.route("/blocks", methods=["POST"])
def create_block():
    form = parse_form(BlockForm, payload())
    return ok(service(ProjectService).create_block(form), 201)


@projects_bp.route("/blocks/<block_id>", methods=["PUT", "PATCH"])
def update_block(block_id):
    block = get_repos().blocks.require(block_id)
    form = parse_form(BlockForm, merged(block, payload()))
    return ok(service(ProjectService).update_block(block_id, form))


@projects_bp.route("/blocks/<block_id>", methods=["DELETE"])
def delete_block(block_id):
    if not service(ProjectService).delete_block(block_id):
        raise NotFoundError("Block", block_id)
    return ok({"id": block_id})


# =========
# 房间
# =========
@projects_bp.route("/blocks/<block_id>/apartments", methods=["GET"])
def list_apartments(block_id):
    lookup = LookupService(get_repos())
    apartments = service(ProjectService).apartments_of(block_id)
    return ok([
        {**a.to_record(), "blockName": lookup.block_name(a.block_id), "projectName": lookup.project_name(a.project_id)}
        for a in apartments
    ])


@projects_bp.route("/apartments", methods=["POST"])
def create_apartment():
    form = parse_form(ApartmentForm, payload())
    return ok(service(ProjectService).create_apartment(form), 201)


@projects_bp.route("/apartments/<apartment_id>", methods=["PUT", "PATCH"])
def update_apartment(apartment_id):
    apartment = get_repos().apartments.require(apartment_id)
    form = parse_form(ApartmentForm, merged(apartment, payload()))
    return ok(service(ProjectService).update_apartment(apartment_id, form))


@projects_bp.route("/apartments/<apartment_id>", methods=["DELETE"])
def delete_apartment(apartment_id):
    if not service(ProjectService).delete_apartment(apartment_id):
        raise NotFoundError("Apartment", apartment_id)
    return ok({"id": apartment_id})
