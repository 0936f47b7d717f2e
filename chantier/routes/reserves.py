# chantier/routes/reserves.py
from flask import Blueprint, Response

from chantier.errors import NotFoundError
from chantier.routes.common import (
    attachment,
    get_repos,
    merged,
    ok,
    payload,
    pdf_language,
    query,
    service,
)
from chantier.schemas.forms import (
    ReserveExportQuery,
    ReserveForm,
    ReserveQuery,
    ResolveForm,
    parse_form,
)
from chantier.services.document_service import DocumentService
from chantier.services.export_service import ExportService
from chantier.services.filter_service import FilterSelection, FilterService
from chantier.services.reserve_service import ReserveService

reserves_bp = Blueprint("reserves", __name__, url_prefix="/api/reserves")


@reserves_bp.route("", methods=["GET"])
def list_reserves():
    filters = parse_form(ReserveQuery, query())
    reserves = service(ReserveService)
    return ok(reserves.describe_all(reserves.list(**filters.model_dump())))


@reserves_bp.route("/pending", methods=["GET"])
def pending_reserves():
    reserves = service(ReserveService)
    today = reserves.clock().date()
    pending = reserves.pending_resolution()
    return ok([
        {**view, "daysSinceCreation": reserves.days_since_creation(r, today)}
        for r, view in zip(pending, reserves.describe_all(pending))
    ])


@reserves_bp.route("/filters", methods=["GET"])
def filter_options():
    """Valid projects / categories / contractors for the current selection."""
    selection = parse_form(ReserveExportQuery, query())
    options = service(FilterService).options(FilterSelection(**selection.model_dump()))
    return ok(options)


@reserves_bp.route("", methods=["POST"])
def create_reserve():
    form = parse_form(ReserveForm, payload())
    return ok(service(ReserveService).create(form), 201)


@reserves_bp.route("/<reserve_id>", methods=["GET"])
def get_reserve(reserve_id):
    reserves = service(ReserveService)
    return ok(reserves.describe(get_repos().reserves.require(reserve_id)))


@reserves_bp.route("/<reserve_id>", methods=["PUT", "PATCH"])
def update_reserve(reserve_id):
    reserve = get_repos().reserves.require(reserve_id)
    form = parse_form(ReserveForm, merged(reserve, payload()))
    return ok(service(ReserveService).update(reserve_id, form))


@reserves_bp.route("/<reserve_id>", methods=["DELETE"])
def delete_reserve(reserve_id):
    if not service(ReserveService).delete(reserve_id):
        raise NotFoundError("Reserve", reserve_id)
    return ok({"id": reserve_id})


@reserves_bp.route("/<reserve_id>/take-charge", methods=["POST"])
def take_charge(reserve_id):
    return ok(service(ReserveService).take_charge(reserve_id))


@reserves_bp.route("/<reserve_id>/resolve", methods=["POST"])
def resolve(reserve_id):
    form = parse_form(ResolveForm, payload())
    return ok(service(ReserveService).resolve(reserve_id, form.notes))


@reserves_bp.route("/export.csv", methods=["GET"])
def export_csv():
    filters = parse_form(ReserveExportQuery, query())
    content = service(ExportService).reserves_csv(**filters.model_dump())
    return Response(
        content.encode("utf-8"),
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=reserves_export.csv"},
    )


# =========
# PV / QR
# =========
@reserves_bp.route("/<reserve_id>/qr", methods=["GET"])
def reserve_qr(reserve_id):
    reserve = get_repos().reserves.require(reserve_id)
    pv_number = service(ReserveService).reserve_pv_number(reserve)
    return ok(service(DocumentService).reserve_qr_payload(reserve, pv_number))


@reserves_bp.route("/<reserve_id>/pdf", methods=["GET"])
def reserve_pdf(reserve_id):
    reserve = get_repos().reserves.require(reserve_id)
    pv_number = service(ReserveService).reserve_pv_number(reserve)
    documents = service(DocumentService, language=pdf_language())
    content = documents.pv_pdf(documents.reserve_document(reserve, pv_number))
    return attachment(content, "application/pdf", f"{pv_number}.pdf")


@reserves_bp.route("/<reserve_id>/qr.png", methods=["GET"])
def reserve_qr_png(reserve_id):
    reserve = get_repos().reserves.require(reserve_id)
    pv_number = service(ReserveService).reserve_pv_number(reserve)
    documents = service(DocumentService)
    content = documents.qr_png(documents.reserve_qr_payload(reserve, pv_number))
    return Response(content, mimetype="image/png")
