# chantier/errors.py
from typing import Any, Dict, List, Optional

from chantier.schemas.error_type import ErrorType


class ChantierError(Exception):
    """Base class; every subclass carries the ErrorType and HTTP status it maps to."""

    error_type = ErrorType.SYSTEM_ERROR
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class FormValidationError(ChantierError):
    error_type = ErrorType.VALIDATION_ERROR
    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(ChantierError):
    error_type = ErrorType.NOT_FOUND
    status_code = 404

    def __init__(self, entity: str, entity_id: str):
        super().__init__(f"{entity} not found: {entity_id}")
        self.entity = entity
        self.entity_id = entity_id


class BackupFormatError(ChantierError):
    error_type = ErrorType.INPUT_ERROR
    status_code = 400


class ConfirmationError(ChantierError):
    error_type = ErrorType.INPUT_ERROR
    status_code = 400


class StorageError(ChantierError):
    error_type = ErrorType.PERSISTENCE_ERROR


class StorageQuotaExceeded(StorageError):
    pass


class DocumentGenerationError(ChantierError):
    error_type = ErrorType.DOCUMENT_ERROR


class StorageUnavailable(StorageError):
    """A write that depends on the stored value was refused because that value could not be read."""

    status_code = 503
