"""Personnel and role models.

``User`` extends Django's ``AbstractUser`` with an employee id (used to sign
in), a display name, a status flag, and a ``Role`` whose permission list
drives ``users.permissions.HasRolePermission``.
"""

from common.choices import ActiveInactive
from common.models import TimeStampedModel
from django.contrib.auth.models import AbstractUser
from django.db import models


class Role(TimeStampedModel):
    """Named bundle of capability strings (e.g. ``["production", "time"]``)."""

    name = models.CharField(max_length=50, unique=True)
    display_name = models.CharField(max_length=100)
    description = models.TextField(blank=True)
    permissions = models.JSONField(default=list)
    color = models.CharField(max_length=16, default="#6b7280")
    is_default = models.BooleanField(default=False)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.display_name or self.name


class User(AbstractUser):
    """Personnel account.

    Fields:
    - employee_id: unique sign-in identifier; mirrored into ``username``.
    - name: display name recorded on audit records.
    - status: active/inactive; inactive users cannot sign in.
    - role: optional role granting capabilities.
    """

    STATUS_ACTIVE = ActiveInactive.ACTIVE
    STATUS_INACTIVE = ActiveInactive.INACTIVE

    employee_id = models.CharField(max_length=32, unique=True, null=True, blank=True)
    name = models.CharField(max_length=100, blank=True)
    phone = models.CharField(max_length=32, blank=True)
    role = models.ForeignKey(Role, null=True, blank=True, on_delete=models.PROTECT, related_name="users")
    status = models.CharField(max_length=16, choices=ActiveInactive.choices, default=STATUS_ACTIVE)

    def save(self, *args, **kwargs):
        if self.employee_id:
            self.employee_id = self.employee_id.strip()
        if self.phone:
            self.phone = self.phone.strip()
        self.is_active = self.status == self.STATUS_ACTIVE
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "status" in update_fields:
            kwargs["update_fields"] = set(update_fields) | {"is_active"}
        super().save(*args, **kwargs)

    @property
    def capabilities(self) -> set[str]:
        if self.role_id is None:
            return set()
        return set(self.role.permissions or [])

    def has_capability(self, capability: str) -> bool:
        if self.is_superuser:
            return True
        granted = self.capabilities
        return "all" in granted or "*" in granted or capability in granted

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.name or self.username} ({self.employee_id or '-'})"
