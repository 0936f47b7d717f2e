# chantier/routes/catalog.py
from flask import Blueprint, request

from chantier.errors import NotFoundError
from chantier.routes.common import get_repos, merged, ok, payload, service
from chantier.schemas.forms import CategoryForm, ContractorForm, parse_form
from chantier.services.catalog_service import CatalogService

catalog_bp = Blueprint("catalog", __name__, url_prefix="/api")


# =========
# 工种
# =========
@catalog_bp.route("/categories", methods=["GET"])
def list_categories():
    return ok(service(CatalogService).list_categories())


@catalog_bp.route("/categories", methods=["POST"])
def create_category():
    form = parse_form(CategoryForm, payload())
    return ok(service(CatalogService).create_category(form), 201)


@catalog_bp.route("/categories/<category_id>", methods=["PUT", "PATCH"])
def update_category(category_id):
    category = get_repos().categories.require(category_id)
    form = parse_form(CategoryForm, merged(category, payload()))
    return ok(service(CatalogService).update_category(category_id, form))


@catalog_bp.route("/categories/<category_id>", methods=["DELETE"])
def delete_category(category_id):
    if not service(CatalogService).delete_category(category_id):
        raise NotFoundError("Category", category_id)
    return ok({"id": category_id})


# =========
# 分包商
# =========
@catalog_bp.route("/contractors", methods=["GET"])
def list_contractors():
    catalog = service(CatalogService)
    project_id = request.args.get("projectId") or request.args.get("project_id")
    return ok([catalog.describe(c) for c in catalog.list_contractors(project_id)])


@catalog_bp.route("/contractors", methods=["POST"])
def create_contractor():
    form = parse_form(ContractorForm, payload())
    return ok(service(CatalogService).create_contractor(form), 201)


@catalog_bp.route("/contractors/<contractor_id>", methods=["PUT", "PATCH"])
def update_contractor(contractor_id):
    contractor = get_repos().contractors.require(contractor_id)
    form = parse_form(ContractorForm, merged(contractor, payload()))
    return ok(service(CatalogService).update_contractor(contractor_id, form))


@catalog_bp.route("/contractors/<contractor_id>", methods=["DELETE"])
def delete_contractor(contractor_id):
    if not service(CatalogService).delete_contractor(contractor_id):
        raise NotFoundError("Contractor", contractor_id)
    return ok({"id": contractor_id})
