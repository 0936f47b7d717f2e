# chantier/routes/receptions.py
from flask import Blueprint, Response

from chantier.errors import NotFoundError
from chantier.routes.common import attachment, get_repos, ok, payload, pdf_language, service
from chantier.schemas.forms import ReceptionEditForm, ReceptionForm, SelectionChangeForm, parse_form
from chantier.services import pv_generator
from chantier.services.document_service import DocumentService
from chantier.services.filter_service import FilterSelection, FilterService
from chantier.services.reception_service import ReceptionService

receptions_bp = Blueprint("receptions", __name__, url_prefix="/api/receptions")


@receptions_bp.route("", methods=["GET"])
def list_receptions():
    receptions = service(ReceptionService)
    return ok([receptions.describe(r) for r in receptions.list()])


@receptions_bp.route("/options", methods=["POST"])
def selection_options():
    """
    Apply one change to the reception form selection and return the
    resulting selection with every option list.
    """
    form = parse_form(SelectionChangeForm, payload())
    filters = service(FilterService)
    selection = FilterSelection(
        project_id=form.project_id,
        block_ids=form.block_ids,
        category_id=form.category_id,
        contractor_id=form.contractor_id,
    )
    value = form.value if form.value not in ("", "all") else None
    if form.changed == "project":
        selection = filters.on_project_change(selection, value)
    elif form.changed == "category":
        selection = filters.on_category_change(selection, value)
    elif form.changed == "contractor":
        selection = filters.on_contractor_change(selection, value)
    return ok({
        "selection": {
            "projectId": selection.project_id,
            "blockIds": selection.block_ids,
            "categoryId": selection.category_id,
            "contractorId": selection.contractor_id,
        },
        "options": filters.options(selection),
    })


@receptions_bp.route("/preview", methods=["POST"])
def preview():
    """PV text and facts for a selection, without storing anything."""
    form = parse_form(ReceptionForm, payload())
    receptions = service(ReceptionService)
    data = receptions.build_pv(form)
    return ok({
        "pvNumber": data.pv_number,
        "scenario": data.facts.scenario.value,
        "hasReserves": data.facts.has_reserves,
        "reserveCount": data.facts.reserve_count,
        "urgentCount": data.facts.urgent_count,
        "isOnTime": data.facts.is_on_time,
        "delayDays": data.facts.delay_days,
        "pvContent": pv_generator.render_pv(data, generated_at=receptions.clock()),
    })


@receptions_bp.route("", methods=["POST"])
def create_reception():
    form = parse_form(ReceptionForm, payload())
    receptions = service(ReceptionService)
    return ok(receptions.describe(receptions.create(form)), 201)


@receptions_bp.route("/<reception_id>", methods=["GET"])
def get_reception(reception_id):
    receptions = service(ReceptionService)
    return ok(receptions.describe(receptions.get(reception_id)))


@receptions_bp.route("/<reception_id>", methods=["PUT", "PATCH"])
def update_reception(reception_id):
    form = parse_form(ReceptionEditForm, payload())
    return ok(service(ReceptionService).update_responsible_parties(reception_id, form.responsible_parties))


@receptions_bp.route("/<reception_id>", methods=["DELETE"])
def delete_reception(reception_id):
    if not service(ReceptionService).delete(reception_id):
        raise NotFoundError("Reception", reception_id)
    return ok({"id": reception_id})


# =========
# PV / QR
# =========
@receptions_bp.route("/<reception_id>/pdf", methods=["GET"])
def reception_pdf(reception_id):
    reception = get_repos().receptions.require(reception_id)
    documents = service(DocumentService, language=pdf_language())
    content = documents.pv_pdf(documents.reception_document(reception))
    return attachment(content, "application/pdf", f"{reception.pv_number}.pdf")


@receptions_bp.route("/<reception_id>/qr", methods=["GET"])
def reception_qr(reception_id):
    return ok(service(ReceptionService).qr_payload(reception_id))


@receptions_bp.route("/<reception_id>/qr.png", methods=["GET"])
def reception_qr_png(reception_id):
    reception = get_repos().receptions.require(reception_id)
    documents = service(DocumentService)
    return Response(documents.qr_png(documents.reception_qr_payload(reception)), mimetype="image/png")
