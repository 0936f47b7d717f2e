# chantier/routes/search.py
from flask import Blueprint, request

from chantier.routes.common import ok, service
from chantier.services.search_service import MAX_SUGGESTIONS, SearchService

search_bp = Blueprint("search", __name__, url_prefix="/api")


@search_bp.route("/search", methods=["GET"])
def search():
    limit = request.args.get("limit", MAX_SUGGESTIONS, type=int)
    return ok(service(SearchService).suggest(request.args.get("q", ""), limit=max(limit, 1)))
