"""Domain errors shared by services and the HTTP layer."""

from typing import Any, Dict, Optional


class RentFlowError(Exception):
    """Base class for errors that are reported back to the caller."""

    status_code = 400
    error = "Error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(RentFlowError):
    """Missing or invalid input (no present workers, negative amount, ...)."""

    status_code = 400
    error = "Validation Error"


class NotFoundError(RentFlowError):
    """Referenced order, worker, product or client does not exist."""

    status_code = 404
    error = "Not Found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} {entity_id} not found", {"entity": entity, "id": entity_id})


class StateError(RentFlowError):
    """Illegal order status transition."""

    status_code = 409
    error = "State Error"


class ConflictError(RentFlowError):
    """The record was changed by a concurrent request."""

    status_code = 409
    error = "Conflict"


class PermissionDeniedError(RentFlowError):
    status_code = 403
    error = "Permission Denied"
