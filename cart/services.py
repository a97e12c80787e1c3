"""Shared purchase cart services.

Lines are keyed by item and supplier: adding an item already in the cart
for the same supplier raises its quantity instead of adding a second line.
Checkout turns the lines into one draft purchase order per supplier.
"""

import logging
from decimal import Decimal

from common.errors import AlreadyExists, InvalidArgument, NotFound, PreconditionFailed
from common.numbers import round3
from django.db import transaction
from inventory.store import item_model
from purchasing.services import create_purchase_orders
from suppliers.models import Supplier

from .models import CartItem

logger = logging.getLogger("deerlab.purchasing")


def _positive(value, field: str = "quantity") -> Decimal:
    amount = round3(value, field)
    if amount <= 0:
        raise InvalidArgument(f"{field} must be greater than zero", details={"field": field})
    return amount


def _get_item(item_type: str, item_id):
    try:
        model = item_model(item_type)
    except ValueError:
        raise InvalidArgument(f"Unknown item type: {item_type}", details={"field": "item_type"})
    item = model.objects.select_related("supplier").filter(pk=item_id).first()
    if item is None:
        raise NotFound(f"{item_type} {item_id} not found", details={"item_id": item_id})
    return item


def _get_supplier(supplier_id):
    supplier = Supplier.objects.filter(pk=supplier_id).first()
    if supplier is None:
        raise NotFound("Supplier not found", details={"supplier_id": supplier_id})
    return supplier


def _get_line(cart_item_id) -> CartItem:
    line = CartItem.objects.select_for_update().filter(pk=cart_item_id).first()
    if line is None:
        raise NotFound("Cart item not found")
    return line


@transaction.atomic
def add_cart_item(
    *, item_type: str, item_id, quantity, supplier_id=None, notes: str = "", added_by=None
) -> CartItem:
    """Add an item to the cart, ordered from ``supplier_id`` or the item's own supplier."""
    item = _get_item(item_type, item_id)
    supplier = _get_supplier(supplier_id) if supplier_id is not None else item.supplier
    amount = _positive(quantity)

    line = CartItem.objects.select_for_update().filter(item_type=item_type, item_id=item.pk, supplier=supplier).first()
    if line is not None:
        line.quantity = round3(line.quantity + amount, "quantity")
        if notes:
            line.notes = notes
        line.save(update_fields=["quantity", "notes", "updated_at"])
        event = "cart.item_merged"
    else:
        line = CartItem.objects.create(
            item_type=item_type,
            item_id=item.pk,
            code=item.code,
            name=item.name,
            unit=item.unit,
            supplier=supplier,
            quantity=amount,
            notes=notes,
            added_by=added_by,
        )
        event = "cart.item_added"
    logger.info(
        event,
        extra={
            "event": event,
            "cart_item_id": line.pk,
            "code": line.code,
            "quantity": str(line.quantity),
            "user_id": getattr(added_by, "pk", None),
        },
    )
    return line


@transaction.atomic
def update_cart_item(*, cart_item_id, **fields) -> CartItem:
    line = _get_line(cart_item_id)
    if "quantity" in fields:
        line.quantity = _positive(fields["quantity"])
    if "notes" in fields:
        line.notes = fields["notes"]
    if "supplier_id" in fields:
        supplier = _get_supplier(fields["supplier_id"]) if fields["supplier_id"] is not None else None
        clash = CartItem.objects.filter(item_type=line.item_type, item_id=line.item_id, supplier=supplier)
        if clash.exclude(pk=line.pk).exists():
            raise AlreadyExists(
                f"{line.code} is already in the cart for this supplier", details={"field": "supplier_id"}
            )
        line.supplier = supplier
    line.save()
    return line


@transaction.atomic
def remove_cart_item(*, cart_item_id) -> None:
    line = _get_line(cart_item_id)
    line.delete()
    logger.info("cart.item_removed", extra={"event": "cart.item_removed", "cart_item_id": cart_item_id})


@transaction.atomic
def clear_cart() -> int:
    count, _ = CartItem.objects.all().delete()
    logger.info("cart.cleared", extra={"event": "cart.cleared", "removed": count})
    return count


@transaction.atomic
def checkout_cart(*, cart_item_ids=None, created_by=None, notes: str = "") -> list:
    """Create draft purchase orders from the cart and remove the ordered lines.

    Without ``cart_item_ids`` the whole cart is checked out. Every line must
    have a supplier; lines are grouped into one order per supplier.
    """
    qs = CartItem.objects.select_for_update().order_by("id")
    if cart_item_ids is not None:
        ids = list(dict.fromkeys(cart_item_ids))
        qs = qs.filter(pk__in=ids)
    lines = list(qs)
    if cart_item_ids is not None:
        missing = sorted(set(ids) - {line.pk for line in lines})
        if missing:
            raise NotFound("Some cart items could not be found", details={"cart_item_ids": missing})
    if not lines:
        raise PreconditionFailed("The cart is empty")
    unassigned = [line.code for line in lines if line.supplier_id is None]
    if unassigned:
        raise PreconditionFailed("Some cart items have no supplier", details={"codes": unassigned})

    grouped: dict[int, list] = {}
    for line in lines:
        grouped.setdefault(line.supplier_id, []).append(
            {"item_type": line.item_type, "item_id": line.item_id, "quantity": line.quantity}
        )
    orders = create_purchase_orders(
        suppliers=[{"supplier_id": supplier_id, "items": items} for supplier_id, items in grouped.items()],
        created_by=created_by,
        notes=notes,
    )
    CartItem.objects.filter(pk__in=[line.pk for line in lines]).delete()
    logger.info(
        "cart.checked_out",
        extra={
            "event": "cart.checked_out",
            "lines": len(lines),
            "codes": [order.code for order in orders],
            "user_id": getattr(created_by, "pk", None),
        },
    )
    return orders
