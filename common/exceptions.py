"""DRF exception handler producing the error envelope."""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import ServiceError
from .responses import error_body

logger = logging.getLogger("deerlab.api")

_KIND_BY_STATUS = {
    status.HTTP_400_BAD_REQUEST: "invalid_argument",
    status.HTTP_401_UNAUTHORIZED: "permission_denied",
    status.HTTP_403_FORBIDDEN: "permission_denied",
    status.HTTP_404_NOT_FOUND: "not_found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "invalid_argument",
    status.HTTP_409_CONFLICT: "precondition_failed",
    status.HTTP_415_UNSUPPORTED_MEDIA_TYPE: "invalid_argument",
    status.HTTP_429_TOO_MANY_REQUESTS: "throttled",
}


def api_exception_handler(exc, context):
    request = context.get("request")
    view = context.get("view")
    if isinstance(exc, ServiceError):
        log = logger.error if exc.status_code >= 500 else logger.warning
        log(
            "api.service_error",
            extra={
                "event": "api.service_error",
                "kind": exc.kind,
                "error_message": exc.message,
                "view": type(view).__name__ if view else None,
            },
        )
        return Response(
            error_body(exc.kind, exc.message, exc.details, request=request),
            status=exc.status_code,
        )

    response = exception_handler(exc, context)
    if response is None:
        return None

    kind = _KIND_BY_STATUS.get(response.status_code, "internal")
    if isinstance(exc, exceptions.ValidationError):
        message = "Invalid input."
        details = response.data
    else:
        data = response.data if isinstance(response.data, dict) else {}
        message = str(data.get("detail", "")) or "Request failed."
        details = {key: value for key, value in data.items() if key != "detail"}
    response.data = error_body(kind, message, details, request=request)
    return response
