import logging

logger = logging.getLogger("auth")


def client_ip(request) -> str | None:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR")


def log_auth_event(action: str, request, user=None, status: str = "success", extra: dict | None = None):
    """Emit ``auth.<action>`` with the caller's ip, outcome and employee identity."""
    context = {"event": f"auth.{action}", "ip": client_ip(request), "status": status}
    if user is not None and getattr(user, "is_authenticated", False):
        context.update(user_id=user.pk, employee_id=user.employee_id)
    if extra:
        context.update(extra)
    level = logging.INFO if status == "success" else logging.WARNING
    logger.log(level, context["event"], extra=context)
