"""Personnel and role services.

Module-level functions with keyword-only arguments, raising
``common.errors`` kinds that the API layer renders.
"""

import logging

from common.choices import ActiveInactive
from common.errors import AlreadyExists, InvalidArgument, NotFound, PreconditionFailed, require
from django.contrib.auth.password_validation import validate_password
from django.core.exceptions import ValidationError
from django.db import transaction

from .models import Role, User
from .permissions import DEFAULT_ROLES

logger = logging.getLogger("auth")

PERSONNEL_FIELDS = ("name", "employee_id", "phone", "status")


def _get_user(user_id) -> User:
    try:
        return User.objects.select_for_update().get(pk=user_id)
    except (User.DoesNotExist, ValueError, TypeError):
        raise NotFound("User not found")


def _get_role(role_id) -> Role:
    try:
        return Role.objects.get(pk=role_id)
    except (Role.DoesNotExist, ValueError, TypeError):
        raise NotFound("Role not found")


def _check_password(password: str, user: User):
    try:
        validate_password(password, user=user)
    except ValidationError as exc:
        raise InvalidArgument("Password is too weak", details={"password": list(exc.messages)})


@transaction.atomic
def create_personnel(
    *,
    name: str,
    employee_id: str,
    password: str,
    phone: str = "",
    role_id=None,
    status: str = ActiveInactive.ACTIVE,
) -> User:
    require(name, "name is required", field="name")
    require(employee_id, "employee_id is required", field="employee_id")
    require(password, "password is required", field="password")
    employee_id = employee_id.strip()
    if User.objects.filter(employee_id=employee_id).exists() or User.objects.filter(username=employee_id).exists():
        raise AlreadyExists(f"Employee id {employee_id} is already in use", details={"field": "employee_id"})

    user = User(username=employee_id, employee_id=employee_id, name=name.strip(), phone=phone or "", status=status)
    if role_id is not None:
        user.role = _get_role(role_id)
    _check_password(password, user)
    user.set_password(password)
    user.save()
    logger.info("personnel.created", extra={"event": "personnel.created", "user_id": user.pk, "employee_id": employee_id})
    return user


@transaction.atomic
def update_personnel(*, user_id, password: str | None = None, role_id=..., **fields) -> User:
    user = _get_user(user_id)
    unknown = set(fields) - set(PERSONNEL_FIELDS)
    if unknown:
        raise InvalidArgument(f"Unknown fields: {', '.join(sorted(unknown))}")

    employee_id = fields.get("employee_id")
    if employee_id is not None:
        employee_id = require(employee_id, "employee_id cannot be blank", field="employee_id").strip()
        clash = User.objects.filter(employee_id=employee_id).exclude(pk=user.pk).exists()
        if clash:
            raise AlreadyExists(f"Employee id {employee_id} is already in use", details={"field": "employee_id"})
        fields["employee_id"] = employee_id
        user.username = employee_id

    for key, value in fields.items():
        setattr(user, key, value)
    if role_id is not ...:
        user.role = _get_role(role_id) if role_id is not None else None
    if password:
        _check_password(password, user)
        user.set_password(password)
    user.save()
    logger.info("personnel.updated", extra={"event": "personnel.updated", "user_id": user.pk})
    return user


@transaction.atomic
def delete_personnel(*, user_id, actor) -> None:
    user = _get_user(user_id)
    if user.pk == actor.pk:
        raise PreconditionFailed("You cannot delete your own account")
    user.delete()
    logger.info("personnel.deleted", extra={"event": "personnel.deleted", "user_id": user_id, "actor_id": actor.pk})


@transaction.atomic
def set_user_status(*, user_id, status: str, actor) -> User:
    if status not in ActiveInactive.values:
        raise InvalidArgument("status must be active or inactive", details={"field": "status"})
    user = _get_user(user_id)
    if user.pk == actor.pk and status == ActiveInactive.INACTIVE:
        raise PreconditionFailed("You cannot deactivate your own account")
    user.status = status
    user.save(update_fields=["status"])
    logger.info(
        "personnel.status_changed",
        extra={"event": "personnel.status_changed", "user_id": user.pk, "status": status, "actor_id": actor.pk},
    )
    return user


@transaction.atomic
def create_role(*, name: str, display_name: str = "", description: str = "", permissions=None, color: str = "") -> Role:
    name = require(name, "name is required", field="name").strip()
    if Role.objects.filter(name=name).exists():
        raise AlreadyExists(f"Role {name} already exists", details={"field": "name"})
    role = Role.objects.create(
        name=name,
        display_name=display_name or name,
        description=description,
        permissions=list(permissions or []),
        color=color or "#6b7280",
    )
    return role


@transaction.atomic
def update_role(*, role_id, **fields) -> Role:
    role = _get_role(role_id)
    name = fields.get("name")
    if name is not None:
        name = require(name, "name cannot be blank", field="name").strip()
        if Role.objects.filter(name=name).exclude(pk=role.pk).exists():
            raise AlreadyExists(f"Role {name} already exists", details={"field": "name"})
        fields["name"] = name
    for key in ("name", "display_name", "description", "permissions", "color"):
        if key in fields:
            setattr(role, key, fields[key])
    role.save()
    return role


@transaction.atomic
def delete_role(*, role_id) -> None:
    role = _get_role(role_id)
    assigned = role.users.count()
    if assigned:
        raise PreconditionFailed(
            f"Role {role.name} is assigned to {assigned} user(s)", details={"assigned_users": assigned}
        )
    role.delete()


@transaction.atomic
def assign_role(*, user_id, role_id) -> User:
    user = _get_user(user_id)
    user.role = _get_role(role_id) if role_id is not None else None
    user.save(update_fields=["role"])
    logger.info("personnel.role_assigned", extra={"event": "personnel.role_assigned", "user_id": user.pk, "role_id": role_id})
    return user


@transaction.atomic
def initialize_default_roles() -> list[Role]:
    """Create the default roles when no role exists yet; returns the created roles."""
    if Role.objects.exists():
        return []
    return [Role.objects.create(is_default=True, **fields) for fields in DEFAULT_ROLES]
