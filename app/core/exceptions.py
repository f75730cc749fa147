"""
Platform-wide exception hierarchy.

Services raise these; the application factory registers one handler per
type and maps it to a JSON error response with a consistent status code.

Usage:
    from app.core.exceptions import NotFoundError, ValidationError

    raise NotFoundError(resource="Task", resource_id=42)
    raise ValidationError("Deliverable must have a URL", details={"url": "required"})
"""


class NotFoundError(Exception):
    """Raised when a referenced task, comment, group or node does not exist.

    Args:
        resource: Human-readable entity name (e.g. "Task", "Comment").
        resource_id: The key that was looked up. Included in logs and message.
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
    """Raised when input is missing or malformed (empty URL, bad index,
    empty comment, malformed prefix) or a transition is refused.

    Maps to HTTP 400.

    Args:
        message: Human-readable explanation, safe to show to end users.
        details: Optional field-level breakdown for structured API responses.
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class DuplicateError(Exception):
    """Raised when a sibling already uses the same (normalised) name.

    Maps to HTTP 400 with a domain-specific message, not a generic
    validation error.
    """

    def __init__(self, resource: str, field: str, value: str | None = None, message: str | None = None) -> None:
        self.resource = resource
        self.field = field
        self.value = value
        super().__init__(message or f"{resource} with {field}={value!r} already exists")


class ReplicationError(Exception):
    """Raised when a period cannot be replicated (e.g. no other nodes). HTTP 400."""

