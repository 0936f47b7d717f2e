# chantier/routes/common.py
"""Helpers shared by the JSON blueprints: service wiring, payload parsing, ApiResult responses."""
import inspect
import io
from typing import Any, Dict, Optional

from flask import current_app, jsonify, request, send_file
from pydantic import BaseModel

from chantier.schemas.api_result import ApiResult
from chantier.services.document_service import PDF_LABELS
from chantier.store.repository import Repositories

PDF_LANGUAGES = {language.value for language in PDF_LABELS}

EXTENSION_KEY = "chantier"


def get_repos() -> Repositories:
    return current_app.extensions[EXTENSION_KEY]["repos"]


def get_clock():
    return current_app.extensions[EXTENSION_KEY]["clock"]


def service(cls, **kwargs):
    """Instantiate a service over the app's repositories (and clock when it takes one)."""
    if "clock" in inspect.signature(cls.__init__).parameters:
        kwargs.setdefault("clock", get_clock())
    return cls(get_repos(), **kwargs)


def payload() -> Dict[str, Any]:
    """JSON body, or form fields for classic form posts."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    return data if isinstance(data, dict) else {}


def query() -> Dict[str, Any]:
    return request.args.to_dict()


def _plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        to_record = getattr(value, "to_record", None)
        return to_record() if to_record else value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def _warning() -> Optional[str]:
    warnings = get_repos().store.pop_warnings()
    return "; ".join(warnings) if warnings else None


def ok(data: Any = None, status: int = 200):
    """Success envelope; storage failures of this request become the ``warning`` field."""
    result = ApiResult(ok=True, data=_plain(data), warning=_warning())
    return jsonify(result.model_dump(mode="json")), status


def fail(error_type, message: str, status: int, data: Optional[Any] = None):
    result = ApiResult(
        ok=False,
        error_type=error_type,
        error_message=message,
        data=_plain(data),
        warning=_warning(),
    )
    return jsonify(result.model_dump(mode="json")), status


def merged(entity: BaseModel, changes: Dict[str, Any]) -> Dict[str, Any]:
    """Stored values overlaid with a partial update (camelCase keys take precedence over field names)."""
    return {**entity.model_dump(), **changes}


def attachment(content: bytes, mimetype: str, filename: str):
    return send_file(io.BytesIO(content), mimetype=mimetype, as_attachment=True, download_name=filename)


def pdf_language() -> str:
    """Interface language when PDF labels exist for it, else PDF_LANGUAGE."""
    language = get_repos().settings.get().language.value
    if language in PDF_LANGUAGES:
        return language
    return current_app.config.get("PDF_LANGUAGE", "fr")
