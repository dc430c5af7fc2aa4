"""Custom exceptions for django-workorders.

Every error carries the HTTP status the JSON views answer with and a
machine-readable ``code``. Failed operations never leave partial writes.
"""

from django.core.exceptions import ObjectDoesNotExist, PermissionDenied


class WorkOrderError(Exception):
    """Base exception for work-order errors."""

    status_code = 500
    code = "workorder_error"

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code}


class ValidationError(WorkOrderError):
    """Raised for malformed or missing input (reason, GPS, photo, enum value)."""

    status_code = 400
    code = "validation_error"

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)

    def to_dict(self) -> dict:
        data = super().to_dict()
        if self.field:
            data["field"] = self.field
        return data


class InvalidTransition(WorkOrderError):
    """Raised when the target status is not reachable from the current one."""

    status_code = 409
    code = "invalid_transition"

    def __init__(self, from_state: str, to_state: str, reason: str = None):
        self.from_state = from_state
        self.to_state = to_state
        self.reason = reason or f"Cannot transition from '{from_state}' to '{to_state}'"
        super().__init__(self.reason)

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["from"] = self.from_state
        data["to"] = self.to_state
        return data


class Forbidden(WorkOrderError, PermissionDenied):
    """Raised when the actor's role may not perform the requested move."""

    status_code = 403
    code = "forbidden"

    def __init__(self, role: str, action: str):
        self.role = role
        self.action = action
        super().__init__(f"Role '{role}' is not authorized for '{action}'")


class NotFound(WorkOrderError, ObjectDoesNotExist):
    """Raised when a referenced job, dependency or unit entry does not exist."""

    status_code = 404
    code = "not_found"

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")


class HandlerLoadError(WorkOrderError):
    """Raised when a configured dotted-path callable cannot be loaded."""

    code = "handler_load_error"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot load handler '{path}': {reason}")


class ImmutableRecord(WorkOrderError):
    """Raised when code tries to modify an append-only row."""

    status_code = 409
    code = "immutable_record"
