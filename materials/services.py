"""Material services: categories, create/update/delete with generated codes."""

import logging

from common.choices import ItemType, RelatedDocType
from common.errors import AlreadyExists, InvalidArgument, NotFound, PreconditionFailed, require
from common.identity import Operator
from common.numbers import round3, validate_price, validate_stock
from django.db import IntegrityError, transaction
from inventory.selectors import item_code_in_use
from inventory.services import set_stock_from_edit
from purchasing.selectors import open_purchase_order_codes
from suppliers.models import Supplier
from workorders.selectors import open_work_order_codes

from .codes import (
    MAX_ATTEMPTS,
    generate_unique_material_code,
    random_category_code,
    random_subcategory_code,
    recode_for_category,
)
from .models import Material, MaterialCategory, MaterialSubCategory

logger = logging.getLogger("deerlab.catalog")


def get_or_create_category(name: str) -> MaterialCategory:
    name = require(name, "category name is required", field="category").strip()
    category = MaterialCategory.objects.filter(name=name).first()
    if category is not None:
        return category
    for _ in range(MAX_ATTEMPTS):
        code = random_category_code()
        if MaterialCategory.objects.filter(code=code).exists():
            continue
        try:
            with transaction.atomic():
                return MaterialCategory.objects.create(name=name, code=code)
        except IntegrityError:
            # Lost a race on name or code; re-check the name before retrying.
            category = MaterialCategory.objects.filter(name=name).first()
            if category is not None:
                return category
    raise PreconditionFailed("Could not allocate a category code")


def get_or_create_subcategory(category: MaterialCategory, name: str) -> MaterialSubCategory:
    name = require(name, "subcategory name is required", field="subcategory").strip()
    subcategory = category.subcategories.filter(name=name).first()
    if subcategory is not None:
        return subcategory
    for _ in range(MAX_ATTEMPTS):
        code = random_subcategory_code()
        if category.subcategories.filter(code=code).exists():
            continue
        try:
            with transaction.atomic():
                return MaterialSubCategory.objects.create(category=category, name=name, code=code)
        except IntegrityError:
            subcategory = category.subcategories.filter(name=name).first()
            if subcategory is not None:
                return subcategory
    raise PreconditionFailed("Could not allocate a subcategory code")


def _resolve_categories(category_name, subcategory_name):
    if not category_name:
        if subcategory_name:
            raise InvalidArgument("subcategory requires a category", details={"field": "category"})
        return None, None
    category = get_or_create_category(category_name)
    subcategory = get_or_create_subcategory(category, subcategory_name) if subcategory_name else None
    return category, subcategory


def _supplier(supplier_id):
    if supplier_id is None:
        return None
    try:
        return Supplier.objects.get(pk=supplier_id)
    except Supplier.DoesNotExist:
        raise NotFound("Supplier not found")


def _ensure_unique_name(name: str, *, exclude_id=None):
    qs = Material.objects.filter(name__iexact=name)
    if exclude_id is not None:
        qs = qs.exclude(pk=exclude_id)
    if qs.exists():
        raise AlreadyExists(f"Material {name} already exists", details={"field": "name"})


def _ensure_unique_code(code: str, *, exclude_id=None):
    exclude = (ItemType.MATERIAL, exclude_id) if exclude_id is not None else None
    if item_code_in_use(code, exclude=exclude):
        raise AlreadyExists(f"Code {code} is already in use", details={"field": "code"})


@transaction.atomic
def create_material(
    *,
    name: str,
    category: str = "",
    subcategory: str = "",
    code: str = "",
    supplier_id=None,
    current_stock=0,
    safety_stock_level=0,
    cost_per_unit=0,
    unit: str = "KG",
    specs: str = "",
    notes: str = "",
) -> Material:
    name = require(name, "name is required", field="name").strip()
    _ensure_unique_name(name)
    category_obj, subcategory_obj = _resolve_categories(category, subcategory)

    if code:
        code = code.strip().upper()
        _ensure_unique_code(code)
    else:
        code = generate_unique_material_code(
            category_obj.code if category_obj else None,
            subcategory_obj.code if subcategory_obj else None,
            exists=item_code_in_use,
        )

    material = Material.objects.create(
        code=code,
        name=name,
        category=category_obj,
        subcategory=subcategory_obj,
        supplier=_supplier(supplier_id),
        current_stock=validate_stock(current_stock),
        safety_stock_level=validate_stock(safety_stock_level, "safety_stock_level"),
        cost_per_unit=validate_price(cost_per_unit),
        unit=unit or "KG",
        specs=specs,
        notes=notes,
    )
    logger.info(
        "material.created",
        extra={"event": "material.created", "material_id": material.pk, "code": material.code},
    )
    return material


@transaction.atomic
def _update_material_fields(*, material_id, **fields) -> Material:
    try:
        material = Material.objects.select_for_update().select_related("category", "subcategory").get(pk=material_id)
    except Material.DoesNotExist:
        raise NotFound("Material not found")

    changed = set()
    if "name" in fields:
        name = require(fields["name"], "name cannot be blank", field="name").strip()
        _ensure_unique_name(name, exclude_id=material.pk)
        material.name = name
        changed.add("name")
    for key in ("unit", "specs", "notes"):
        if key in fields:
            setattr(material, key, fields[key])
            changed.add(key)
    if "safety_stock_level" in fields:
        material.safety_stock_level = validate_stock(fields["safety_stock_level"], "safety_stock_level")
        changed.add("safety_stock_level")
    if "cost_per_unit" in fields:
        material.cost_per_unit = validate_price(fields["cost_per_unit"])
        changed.add("cost_per_unit")
    if "supplier_id" in fields:
        material.supplier = _supplier(fields["supplier_id"])
        changed.add("supplier")

    if "category" in fields or "subcategory" in fields:
        category_obj, subcategory_obj = _resolve_categories(
            fields.get("category", material.category.name if material.category else ""),
            fields.get("subcategory", material.subcategory.name if material.subcategory else ""),
        )
        if (category_obj, subcategory_obj) != (material.category, material.subcategory):
            material.category, material.subcategory = category_obj, subcategory_obj
            changed.update({"category", "subcategory"})
            if not fields.get("code"):
                new_code = recode_for_category(
                    material.code,
                    category_obj.code if category_obj else None,
                    subcategory_obj.code if subcategory_obj else None,
                )
                if new_code != material.code:
                    _ensure_unique_code(new_code, exclude_id=material.pk)
                    material.code = new_code
                    changed.add("code")

    if fields.get("code"):
        code = fields["code"].strip().upper()
        if code != material.code:
            _ensure_unique_code(code, exclude_id=material.pk)
            material.code = code
            changed.add("code")

    if changed:
        material.save(update_fields=sorted(changed | {"updated_at"}))
    logger.info(
        "material.updated",
        extra={"event": "material.updated", "material_id": material.pk, "fields": sorted(changed)},
    )
    return material


def update_material(*, material_id, operator: Operator, remarks: str = "", **fields) -> Material:
    """Update a material; a changed ``current_stock`` is recorded as a manual adjustment.

    The stock edit commits in its own stock transaction once the other
    fields are saved; no row lock is held across its retries.
    """
    new_stock = fields.pop("current_stock", None)
    if new_stock is not None:
        new_stock = validate_stock(new_stock)
    material = _update_material_fields(material_id=material_id, **fields)
    if new_stock is not None and new_stock != round3(material.current_stock):
        set_stock_from_edit(
            item_type=ItemType.MATERIAL,
            item_id=material.pk,
            new_stock=new_stock,
            operator=operator,
            related_doc_type=RelatedDocType.MATERIAL_EDIT,
            remarks=remarks,
        )
        material.refresh_from_db()
    return material


@transaction.atomic
def delete_material(*, material_id) -> None:
    try:
        material = Material.objects.select_for_update().get(pk=material_id)
    except Material.DoesNotExist:
        raise NotFound("Material not found")
    purchase_orders = open_purchase_order_codes(ItemType.MATERIAL, material.pk)
    work_orders = open_work_order_codes(ItemType.MATERIAL, material.pk)
    if purchase_orders or work_orders:
        raise PreconditionFailed(
            f"Material {material.code} is referenced by open orders",
            details={"purchase_orders": purchase_orders, "work_orders": work_orders},
        )
    material.delete()
    logger.info("material.deleted", extra={"event": "material.deleted", "material_id": material_id})
