"""Supplier services."""

import logging

from common.errors import AlreadyExists, NotFound, PreconditionFailed, require
from django.contrib.auth import get_user_model
from django.db import transaction

from .models import Supplier

logger = logging.getLogger("deerlab.catalog")

SUPPLIER_FIELDS = ("name", "products", "contact_window", "contact_method", "notes")


def _get_supplier(supplier_id) -> Supplier:
    try:
        return Supplier.objects.select_for_update().get(pk=supplier_id)
    except (Supplier.DoesNotExist, ValueError, TypeError):
        raise NotFound("Supplier not found")


def _liaison(liaison_person_id):
    if liaison_person_id is None:
        return None
    User = get_user_model()
    try:
        return User.objects.get(pk=liaison_person_id)
    except User.DoesNotExist:
        raise NotFound("Liaison person not found")


def _ensure_unique_name(name: str, *, exclude_id=None):
    qs = Supplier.objects.filter(name__iexact=name)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise AlreadyExists(f"Supplier {name} already exists", details={"field": "name"})


@transaction.atomic
def create_supplier(*, name: str, liaison_person_id=None, **fields) -> Supplier:
    name = require(name, "name is required", field="name").strip()
    _ensure_unique_name(name)
    supplier = Supplier.objects.create(
        name=name,
        liaison_person=_liaison(liaison_person_id),
        **{key: value for key, value in fields.items() if key in SUPPLIER_FIELDS},
    )
    logger.info("supplier.created", extra={"event": "supplier.created", "supplier_id": supplier.pk})
    return supplier


@transaction.atomic
def update_supplier(*, supplier_id, **fields) -> Supplier:
    supplier = _get_supplier(supplier_id)
    if "name" in fields:
        name = require(fields["name"], "name cannot be blank", field="name").strip()
        _ensure_unique_name(name, exclude_id=supplier.pk)
        fields["name"] = name
    if "liaison_person_id" in fields:
        supplier.liaison_person = _liaison(fields.pop("liaison_person_id"))
    for key, value in fields.items():
        if key in SUPPLIER_FIELDS:
            setattr(supplier, key, value)
    supplier.save()
    return supplier


@transaction.atomic
def delete_supplier(*, supplier_id) -> None:
    supplier = _get_supplier(supplier_id)
    order_count = supplier.purchase_orders.count()
    if order_count:
        raise PreconditionFailed(
            f"Supplier {supplier.name} has {order_count} purchase order(s)",
            details={"purchase_orders": order_count},
        )
    supplier.delete()
    logger.info("supplier.deleted", extra={"event": "supplier.deleted", "supplier_id": supplier_id})
