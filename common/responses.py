"""Standard response envelope for mutation endpoints.

Success: ``{"success": true, "data": {...}, "meta": {...}}``
Failure: ``{"success": false, "error": {"kind", "message", "details"}, "meta": {...}}``
"""

import uuid

from django.conf import settings
from django.utils import timezone
from rest_framework.response import Response


def request_id_for(request) -> str:
    if request is not None:
        header = request.headers.get("X-Request-ID")
        if header:
            return header[:64]
        cached = getattr(request, "_envelope_request_id", None)
        if cached:
            return cached
    rid = uuid.uuid4().hex
    if request is not None:
        request._envelope_request_id = rid
    return rid


def envelope_meta(request=None) -> dict:
    return {
        "timestamp": timezone.now().isoformat(),
        "request_id": request_id_for(request),
        "version": getattr(settings, "API_VERSION", "1.0.0"),
    }


def success_response(data, *, request=None, status: int = 200) -> Response:
    return Response({"success": True, "data": data, "meta": envelope_meta(request)}, status=status)


def error_body(kind: str, message: str, details=None, *, request=None) -> dict:
    return {
        "success": False,
        "error": {"kind": kind, "message": message, "details": details or {}},
        "meta": envelope_meta(request),
    }
