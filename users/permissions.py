"""Identity/permission gate for write endpoints."""

from rest_framework.permissions import SAFE_METHODS, BasePermission


class Capability:
    ALL = "all"
    CATALOG = "catalog"
    INVENTORY = "inventory"
    PURCHASING = "purchasing"
    PRODUCTION = "production"
    TIME = "time"
    PERSONNEL = "personnel"


DEFAULT_ROLES = [
    {
        "name": "admin",
        "display_name": "系統管理員",
        "description": "Full access",
        "permissions": [Capability.ALL],
        "color": "#dc2626",
    },
    {
        "name": "foreman",
        "display_name": "生產領班",
        "description": "Production and work orders",
        "permissions": [Capability.PRODUCTION],
        "color": "#2563eb",
    },
    {
        "name": "timekeeper",
        "display_name": "計時人員",
        "description": "Time records",
        "permissions": [Capability.TIME],
        "color": "#16a34a",
    },
]


class HasRolePermission(BasePermission):
    """Allow reads to any authenticated user; writes need ``view.required_permission``.

    Views may set ``required_permission`` to a string or to a dict keyed by
    HTTP method.
    """

    message = "You do not have permission to perform this action."

    def has_permission(self, request, view):
        user = request.user
        if not user or not user.is_authenticated:
            return False
        if request.method in SAFE_METHODS:
            return True
        required = getattr(view, "required_permission", None)
        if isinstance(required, dict):
            required = required.get(request.method)
        if not required:
            return True
        return user.has_capability(required)
