"""
Service-layer exception hierarchy.

Services raise these; the app-level handlers registered in
``gearguard.blueprints.register_error_handlers`` turn them into JSON
responses with a consistent status code:

    ValidationError        422
    NotFoundError          404
    PermissionDenied       403
    ConflictError          409
    StoreUnavailableError  503

Usage:
    from gearguard.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Equipment", resource_id=42)
    raise ValidationError("type is invalid", details={"type": "..."})
"""


class NotFoundError(Exception):
    """Raised when a requested resource (or a referenced one) does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Equipment", "MaintenanceRequest").
        resource_id: The PK that was looked up.
    """

    def __init__(self, resource: str, resource_id: int | str | None = None) -> None:
        self.resource = resource
        self.resource_id = resource_id
        msg = f"{resource}"
        if resource_id is not None:
            msg += f" id={resource_id}"
        msg += " not found"
        super().__init__(msg)


class ValidationError(Exception):
    """Raised when input is malformed or violates a business rule.

    Always raised before anything is written to the store.

    Args:
        message: Human-readable explanation of what failed.
        details: Optional field-level breakdown; keys are field names.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message)


class ConflictError(Exception):
    """Raised when an operation would duplicate a unique value.

    Args:
        resource: Model name.
        field: The unique field that would be duplicated.
        value: The conflicting value.
    """

    def __init__(self, resource: str, field: str, value: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        msg = f"{resource} with {field}={value!r} already exists"
        super().__init__(msg)


class PermissionDenied(Exception):
    """Raised when the acting user's role does not allow the operation."""

    def __init__(self, user_id: int | None, required_role: str, operation: str | None = None) -> None:
        self.user_id = user_id
        self.required_role = required_role
        self.operation = operation
        msg = f"User {user_id} lacks role '{required_role}'"
        if operation:
            msg += f" for {operation}"
        super().__init__(msg)


class StoreUnavailableError(Exception):
    """Raised on write paths when the backing database cannot be reached."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Store unavailable during {operation}")
