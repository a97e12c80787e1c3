"""Service-layer error kinds.

Services raise these; the API layer turns them into the error envelope
(see ``common.exceptions.api_exception_handler``). Every error carries a
machine-readable ``kind``, a human message, and optional ``details``.
"""


class ServiceError(Exception):
    kind = "internal"
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: str | None = None, *, details: dict | None = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)


class InvalidArgument(ServiceError):
    kind = "invalid_argument"
    status_code = 400
    default_message = "Invalid argument"


class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404
    default_message = "Not found"


class PreconditionFailed(ServiceError):
    kind = "precondition_failed"
    status_code = 409
    default_message = "Precondition failed"


class PermissionDenied(ServiceError):
    kind = "permission_denied"
    status_code = 403
    default_message = "Permission denied"


class AlreadyExists(ServiceError):
    kind = "already_exists"
    status_code = 409
    default_message = "Already exists"


class Internal(ServiceError):
    pass


def require(value, message: str, *, field: str | None = None):
    """Raise InvalidArgument when a required value is missing or blank."""
    if value is None or (isinstance(value, str) and not value.strip()):
        raise InvalidArgument(message, details={"field": field} if field else None)
    return value
