# yatra/core/exceptions.py
"""
Application exceptions.

Services raise these; the handlers in ``yatra.core.error_handlers`` turn them
into JSON responses:

    YatraError (base)            -> 500
    ├── RequestValidationFailed  -> 400
    ├── NotFoundError            -> 404
    ├── ConflictError            -> 409
    └── StorageUnavailable       -> 503
"""
from typing import Any, Dict, List, Optional


class YatraError(Exception):
    """Base class for application errors.

    ``message`` is safe to return to the client, ``context`` is only logged.
    """
    status_code: int = 500

    def __init__(self, message: str = "An unexpected error occurred", context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(YatraError):
    status_code = 404

    def __init__(self, resource: str = "resource", resource_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ConflictError(YatraError):
    """The resource exists but is not in a state that allows the operation."""
    status_code = 409


class StorageUnavailable(YatraError):
    """The document store could not be reached or an atomic operation failed.

    For the booking-number counter the outcome of a timed out increment is
    unknown: the number may or may not have been consumed server-side.
    """
    status_code = 503

    def __init__(self, message: str = "Storage is temporarily unavailable", context: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, context=context)


class RequestValidationFailed(YatraError):
    """Request data did not match its schema. ``errors`` holds ``{"field", "message"}`` items."""
    status_code = 400

    def __init__(self, errors: List[Dict[str, str]], message: str = "Validation failed"):
        super().__init__(message=message, context={"errors": errors})
        self.errors = errors
