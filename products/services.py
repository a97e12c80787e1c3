"""Product type, product series and product services."""

import logging

from common.errors import AlreadyExists, InvalidArgument, NotFound, PreconditionFailed, require
from common.numbers import validate_stock
from django.db import transaction
from fragrances.models import Fragrance
from fragrances.services import sync_fragrance_usage
from materials.models import Material
from workorders.selectors import open_work_order_codes_for_product

from .codes import compose_product_code, generate_product_number
from .models import Product, ProductSeries, ProductType

logger = logging.getLogger("deerlab.catalog")

DEFAULT_PRODUCT_TYPES = [
    {"code": "BOT", "name": "罐裝油(BOT)", "color": "#8b5cf6"},
    {"code": "OMP", "name": "一代棉芯煙彈(OMP)", "color": "#2563eb"},
    {"code": "OTP", "name": "一代陶瓷芯煙彈(OTP)", "color": "#16a34a"},
    {"code": "FTP", "name": "五代陶瓷芯煙彈(FTP)", "color": "#ea580c"},
    {"code": "ETC", "name": "其他(ETC)", "color": "#6b7280"},
]


def _get_product_type(type_id) -> ProductType:
    try:
        return ProductType.objects.get(pk=type_id)
    except (ProductType.DoesNotExist, ValueError, TypeError):
        raise NotFound("Product type not found")


def _active_type_code(value) -> str:
    code = require(value, "product_type is required", field="product_type").strip().upper()
    if not ProductType.objects.filter(code=code, is_active=True).exists():
        raise InvalidArgument(f"Unknown product type {code}", details={"field": "product_type"})
    return code


@transaction.atomic
def create_product_type(
    *, name: str, code: str, color: str = "", description: str = "", is_active: bool = True
) -> ProductType:
    name = require(name, "name is required", field="name").strip()
    code = require(code, "code is required", field="code").strip().upper()
    if ProductType.objects.filter(name=name).exists():
        raise AlreadyExists(f"Product type {name} already exists", details={"field": "name"})
    if ProductType.objects.filter(code=code).exists():
        raise AlreadyExists(f"Product type code {code} already exists", details={"field": "code"})
    product_type = ProductType.objects.create(
        name=name,
        code=code,
        description=description,
        is_active=is_active,
        **({"color": color} if color else {}),
    )
    logger.info("product_type.created", extra={"event": "product_type.created", "code": code})
    return product_type


@transaction.atomic
def update_product_type(*, type_id, **fields) -> ProductType:
    """Update a product type. The code is fixed while any series uses it."""
    product_type = _get_product_type(type_id)
    if "name" in fields:
        name = require(fields["name"], "name cannot be blank", field="name").strip()
        if ProductType.objects.filter(name=name).exclude(pk=product_type.pk).exists():
            raise AlreadyExists(f"Product type {name} already exists", details={"field": "name"})
        product_type.name = name
    if "code" in fields:
        code = require(fields["code"], "code cannot be blank", field="code").strip().upper()
        if code != product_type.code:
            if ProductType.objects.filter(code=code).exists():
                raise AlreadyExists(f"Product type code {code} already exists", details={"field": "code"})
            series = ProductSeries.objects.filter(product_type=product_type.code).count()
            if series:
                raise PreconditionFailed(
                    f"Product type {product_type.code} is used by {series} series", details={"series": series}
                )
            product_type.code = code
    for key in ("color", "description", "is_active"):
        if key in fields:
            setattr(product_type, key, fields[key])
    product_type.save()
    return product_type


@transaction.atomic
def delete_product_type(*, type_id) -> None:
    product_type = _get_product_type(type_id)
    series = list(ProductSeries.objects.filter(product_type=product_type.code).values_list("code", flat=True))
    if series:
        raise PreconditionFailed(
            f"Product type {product_type.code} is still used by series", details={"series": series}
        )
    product_type.delete()
    logger.info("product_type.deleted", extra={"event": "product_type.deleted", "code": product_type.code})


@transaction.atomic
def initialize_default_product_types() -> list[ProductType]:
    """Create the default product types when none exist yet; returns the created types."""
    if ProductType.objects.exists():
        return []
    return [ProductType.objects.create(**fields) for fields in DEFAULT_PRODUCT_TYPES]


def _get_series(series_id) -> ProductSeries:
    try:
        return ProductSeries.objects.get(pk=series_id)
    except (ProductSeries.DoesNotExist, ValueError, TypeError):
        raise NotFound("Product series not found")


def _get_fragrance(fragrance_id):
    if fragrance_id is None:
        return None
    try:
        return Fragrance.objects.get(pk=fragrance_id)
    except Fragrance.DoesNotExist:
        raise NotFound("Fragrance not found")


def _get_materials(material_ids) -> list:
    ids = list(dict.fromkeys(material_ids or []))
    materials = list(Material.objects.filter(pk__in=ids))
    missing = sorted(set(ids) - {material.pk for material in materials})
    if missing:
        raise NotFound("Some materials could not be found", details={"material_ids": missing})
    return materials


@transaction.atomic
def create_series(*, name: str, code: str, product_type: str, description: str = "") -> ProductSeries:
    name = require(name, "name is required", field="name").strip()
    code = require(code, "code is required", field="code").strip().upper()
    if ProductSeries.objects.filter(name=name).exists():
        raise AlreadyExists(f"Series {name} already exists", details={"field": "name"})
    if ProductSeries.objects.filter(code=code).exists():
        raise AlreadyExists(f"Series code {code} already exists", details={"field": "code"})
    product_type = _active_type_code(product_type)
    return ProductSeries.objects.create(name=name, code=code, product_type=product_type, description=description)


@transaction.atomic
def update_series(*, series_id, **fields) -> ProductSeries:
    series = _get_series(series_id)
    if "name" in fields:
        name = require(fields["name"], "name cannot be blank", field="name").strip()
        if ProductSeries.objects.filter(name=name).exclude(pk=series.pk).exists():
            raise AlreadyExists(f"Series {name} already exists", details={"field": "name"})
        series.name = name
    if "code" in fields:
        code = require(fields["code"], "code cannot be blank", field="code").strip().upper()
        if ProductSeries.objects.filter(code=code).exclude(pk=series.pk).exists():
            raise AlreadyExists(f"Series code {code} already exists", details={"field": "code"})
        series.code = code
    if "product_type" in fields:
        series.product_type = _active_type_code(fields["product_type"])
    if "description" in fields:
        series.description = fields["description"]
    series.save()
    return series


@transaction.atomic
def delete_series(*, series_id) -> None:
    series = _get_series(series_id)
    count = series.products.count()
    if count:
        raise PreconditionFailed(f"Series {series.code} still has {count} product(s)", details={"products": count})
    series.delete()


@transaction.atomic
def create_product(
    *,
    name: str,
    series_id,
    fragrance_id=None,
    specific_material_ids=None,
    nicotine_mg=0,
    target_production=1,
    status: str = "",
    notes: str = "",
) -> Product:
    name = require(name, "name is required", field="name").strip()
    series = ProductSeries.objects.select_for_update().filter(pk=series_id).first()
    if series is None:
        raise NotFound("Product series not found")
    fragrance = _get_fragrance(fragrance_id)
    materials = _get_materials(specific_material_ids)

    number = generate_product_number(exists=lambda value: series.products.filter(product_number=value).exists())
    product = Product.objects.create(
        series=series,
        name=name,
        product_number=number,
        code=compose_product_code(series.product_type, series.code, number),
        fragrance=fragrance,
        nicotine_mg=validate_stock(nicotine_mg, "nicotine_mg"),
        target_production=validate_stock(target_production, "target_production"),
        notes=notes,
        **({"status": status} if status else {}),
    )
    product.specific_materials.set(materials)
    if fragrance is not None:
        sync_fragrance_usage(fragrance_ids=[fragrance.pk], assigned_id=fragrance.pk)
    logger.info("product.created", extra={"event": "product.created", "product_id": product.pk, "code": product.code})
    return product


@transaction.atomic
def update_product(*, product_id, **fields) -> Product:
    try:
        product = Product.objects.select_for_update().select_related("series").get(pk=product_id)
    except Product.DoesNotExist:
        raise NotFound("Product not found")
    previous_fragrance_id = product.fragrance_id

    if "name" in fields:
        product.name = require(fields["name"], "name cannot be blank", field="name").strip()
    if fields.get("series_id") is not None and fields["series_id"] != product.series_id:
        series = _get_series(fields["series_id"])
        if series.products.filter(product_number=product.product_number).exists():
            raise AlreadyExists(
                f"Product number {product.product_number} is already used in series {series.code}",
                details={"field": "series_id"},
            )
        product.series = series
        product.code = compose_product_code(series.product_type, series.code, product.product_number)
    if "fragrance_id" in fields:
        product.fragrance = _get_fragrance(fields["fragrance_id"])
    for key in ("nicotine_mg", "target_production"):
        if key in fields:
            setattr(product, key, validate_stock(fields[key], key))
    if "status" in fields:
        product.status = require(fields["status"], "status cannot be blank", field="status")
    if "notes" in fields:
        product.notes = fields["notes"]
    product.save()
    if "specific_material_ids" in fields:
        product.specific_materials.set(_get_materials(fields["specific_material_ids"]))
    if product.fragrance_id != previous_fragrance_id:
        logger.info(
            "product.fragrance_changed",
            extra={
                "event": "product.fragrance_changed",
                "product_id": product.pk,
                "from_fragrance_id": previous_fragrance_id,
                "to_fragrance_id": product.fragrance_id,
            },
        )
        sync_fragrance_usage(
            fragrance_ids=[previous_fragrance_id, product.fragrance_id], assigned_id=product.fragrance_id
        )
    return product


@transaction.atomic
def delete_product(*, product_id) -> None:
    try:
        product = Product.objects.select_for_update().get(pk=product_id)
    except Product.DoesNotExist:
        raise NotFound("Product not found")
    work_orders = open_work_order_codes_for_product(product.pk)
    if work_orders:
        raise PreconditionFailed(
            f"Product {product.code} has open work orders", details={"work_orders": work_orders}
        )
    product.delete()
    sync_fragrance_usage(fragrance_ids=[product.fragrance_id])
    logger.info("product.deleted", extra={"event": "product.deleted", "product_id": product_id})
