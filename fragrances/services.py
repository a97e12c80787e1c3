"""Fragrance services."""

import logging

from common.choices import FragranceStatus, ItemType, RelatedDocType
from common.errors import AlreadyExists, NotFound, PreconditionFailed, require
from common.identity import Operator
from common.numbers import round3, validate_percentage, validate_price, validate_stock
from django.db import transaction
from django.db.models import Count
from django.utils import timezone
from inventory.selectors import item_code_in_use
from inventory.services import set_stock_from_edit
from purchasing.selectors import open_purchase_order_codes
from suppliers.models import Supplier
from workorders.selectors import open_work_order_codes

from .calculations import calculate_pg_vg_ratios
from .models import Fragrance

logger = logging.getLogger("deerlab.catalog")

PLAIN_FIELDS = ("fragrance_type", "fragrance_status", "unit", "description", "notes")


def _supplier(supplier_id):
    if supplier_id is None:
        return None
    try:
        return Supplier.objects.get(pk=supplier_id)
    except Supplier.DoesNotExist:
        raise NotFound("Supplier not found")


def _ensure_unique_code(code: str, *, exclude_id=None):
    exclude = (ItemType.FRAGRANCE, exclude_id) if exclude_id is not None else None
    if item_code_in_use(code, exclude=exclude):
        raise AlreadyExists(f"Code {code} is already in use", details={"field": "code"})


def _ratios(percentage, pg_ratio=None, vg_ratio=None):
    pct = validate_percentage(percentage)
    if pg_ratio is None and vg_ratio is None:
        pg, vg = calculate_pg_vg_ratios(pct)
    else:
        default_pg, default_vg = calculate_pg_vg_ratios(pct)
        pg = validate_percentage(pg_ratio, "pg_ratio") if pg_ratio is not None else default_pg
        vg = validate_percentage(vg_ratio, "vg_ratio") if vg_ratio is not None else default_vg
    return pct, pg, vg


@transaction.atomic
def create_fragrance(
    *,
    code: str,
    name: str,
    percentage=0,
    pg_ratio=None,
    vg_ratio=None,
    supplier_id=None,
    current_stock=0,
    safety_stock_level=0,
    cost_per_unit=0,
    unit: str = "KG",
    **fields,
) -> Fragrance:
    code = require(code, "code is required", field="code").strip()
    name = require(name, "name is required", field="name").strip()
    _ensure_unique_code(code)
    pct, pg, vg = _ratios(percentage, pg_ratio, vg_ratio)
    fragrance = Fragrance.objects.create(
        code=code,
        name=name,
        percentage=pct,
        pg_ratio=pg,
        vg_ratio=vg,
        supplier=_supplier(supplier_id),
        current_stock=validate_stock(current_stock),
        safety_stock_level=validate_stock(safety_stock_level, "safety_stock_level"),
        cost_per_unit=validate_price(cost_per_unit),
        unit=unit or "KG",
        **{key: value for key, value in fields.items() if key in PLAIN_FIELDS and value},
    )
    logger.info("fragrance.created", extra={"event": "fragrance.created", "fragrance_id": fragrance.pk, "code": code})
    return fragrance


@transaction.atomic
def _update_fragrance_fields(*, fragrance_id, **fields) -> Fragrance:
    try:
        fragrance = Fragrance.objects.select_for_update().get(pk=fragrance_id)
    except Fragrance.DoesNotExist:
        raise NotFound("Fragrance not found")

    changed = set()
    if "code" in fields:
        code = require(fields["code"], "code cannot be blank", field="code").strip()
        if code != fragrance.code:
            _ensure_unique_code(code, exclude_id=fragrance.pk)
            fragrance.code = code
            changed.add("code")
    if "name" in fields:
        fragrance.name = require(fields["name"], "name cannot be blank", field="name").strip()
        changed.add("name")
    for key in PLAIN_FIELDS:
        if key in fields:
            setattr(fragrance, key, fields[key])
            changed.add(key)
    if {"percentage", "pg_ratio", "vg_ratio"} & set(fields):
        pct, pg, vg = _ratios(
            fields.get("percentage", fragrance.percentage),
            fields.get("pg_ratio"),
            fields.get("vg_ratio"),
        )
        fragrance.percentage, fragrance.pg_ratio, fragrance.vg_ratio = pct, pg, vg
        changed.update({"percentage", "pg_ratio", "vg_ratio"})
    if "safety_stock_level" in fields:
        fragrance.safety_stock_level = validate_stock(fields["safety_stock_level"], "safety_stock_level")
        changed.add("safety_stock_level")
    if "cost_per_unit" in fields:
        fragrance.cost_per_unit = validate_price(fields["cost_per_unit"])
        changed.add("cost_per_unit")
    if "supplier_id" in fields:
        fragrance.supplier = _supplier(fields["supplier_id"])
        changed.add("supplier")

    if changed:
        fragrance.save(update_fields=sorted(changed | {"updated_at"}))
    return fragrance


def update_fragrance(*, fragrance_id, operator: Operator, remarks: str = "", **fields) -> Fragrance:
    """Update a fragrance; a changed ``current_stock`` is recorded as a manual adjustment.

    The stock edit commits in its own stock transaction once the other
    fields are saved; no row lock is held across its retries.
    """
    new_stock = fields.pop("current_stock", None)
    if new_stock is not None:
        new_stock = validate_stock(new_stock)
    fragrance = _update_fragrance_fields(fragrance_id=fragrance_id, **fields)
    if new_stock is not None and new_stock != round3(fragrance.current_stock):
        set_stock_from_edit(
            item_type=ItemType.FRAGRANCE,
            item_id=fragrance.pk,
            new_stock=new_stock,
            operator=operator,
            related_doc_type=RelatedDocType.FRAGRANCE_EDIT,
            remarks=remarks,
        )
        fragrance.refresh_from_db()
    return fragrance


@transaction.atomic
def delete_fragrance(*, fragrance_id) -> None:
    try:
        fragrance = Fragrance.objects.select_for_update().get(pk=fragrance_id)
    except Fragrance.DoesNotExist:
        raise NotFound("Fragrance not found")
    products = list(fragrance.products.values_list("code", flat=True))
    purchase_orders = open_purchase_order_codes(ItemType.FRAGRANCE, fragrance.pk)
    work_orders = open_work_order_codes(ItemType.FRAGRANCE, fragrance.pk)
    if products or purchase_orders or work_orders:
        raise PreconditionFailed(
            f"Fragrance {fragrance.code} is still in use",
            details={"products": products, "purchase_orders": purchase_orders, "work_orders": work_orders},
        )
    fragrance.delete()
    logger.info("fragrance.deleted", extra={"event": "fragrance.deleted", "fragrance_id": fragrance_id})


def _status_for_usage(fragrance: Fragrance, count: int) -> str:
    if fragrance.fragrance_status == FragranceStatus.DISCARDED:
        return fragrance.fragrance_status
    return FragranceStatus.ACTIVE if count else FragranceStatus.STANDBY


@transaction.atomic
def sync_fragrance_usage(*, fragrance_ids, assigned_id=None) -> list[int]:
    """Recount the products using each fragrance and derive its status.

    A fragrance used by any product becomes active, an unused one standby;
    discarded fragrances keep their status. ``assigned_id`` marks the
    fragrance a product was just assigned to. Returns the ids whose row
    changed. Stock versions are left untouched.
    """
    ids = {pk for pk in fragrance_ids if pk is not None}
    if not ids:
        return []
    now = timezone.now()
    changed = []
    for fragrance in Fragrance.objects.filter(pk__in=ids).annotate(product_total=Count("products")):
        updates = {}
        if fragrance.usage_count != fragrance.product_total:
            updates["usage_count"] = fragrance.product_total
        status = _status_for_usage(fragrance, fragrance.product_total)
        if status != fragrance.fragrance_status:
            updates["fragrance_status"] = status
        if fragrance.pk == assigned_id:
            updates["last_used_at"] = now
        if updates:
            Fragrance.objects.filter(pk=fragrance.pk).update(**updates)
            changed.append(fragrance.pk)
    if changed:
        logger.info(
            "fragrance.usage_synced",
            extra={"event": "fragrance.usage_synced", "fragrance_ids": sorted(changed)},
        )
    return sorted(changed)


def sync_all_fragrance_usage() -> list[int]:
    ids = Fragrance.objects.exclude(fragrance_status=FragranceStatus.DISCARDED).values_list("pk", flat=True)
    return sync_fragrance_usage(fragrance_ids=list(ids))
