"""Purchase order services.

Receiving is the one path that adds stock from a purchase order; it runs
through ``inventory.protocol.apply_stock_update`` so the stock levels,
movements, audit record and the order's ``已收貨`` transition commit
together or not at all.
"""

import logging
from decimal import Decimal

from common.choices import ChangeReason, ItemType, MovementType, PurchaseOrderStatus, RelatedDocType, StockDirection
from common.codes import next_daily_code
from common.errors import InvalidArgument, NotFound, PreconditionFailed
from common.identity import Operator
from common.numbers import round3, to_decimal, validate_percentage, validate_price
from django.db import transaction
from django.db.models import F
from inventory.protocol import CausingDocument, StockChange, StockOperation, apply_stock_update
from inventory.resolution import ItemReference, resolve_item_references
from inventory.store import default_store, item_model
from suppliers.models import Supplier

from .models import PurchaseOrder, PurchaseOrderItem

logger = logging.getLogger("deerlab.purchasing")

# Transitions allowed through the status endpoint; 已收貨 is reached only by receiving.
ALLOWED_TRANSITIONS = {
    PurchaseOrderStatus.DRAFT: {PurchaseOrderStatus.ORDERED, PurchaseOrderStatus.CANCELLED},
    PurchaseOrderStatus.ORDERED: {PurchaseOrderStatus.CANCELLED},
}


def _positive(value, field: str) -> Decimal:
    amount = round3(to_decimal(value, field))
    if amount <= 0:
        raise InvalidArgument(f"{field} must be greater than zero", details={"field": field})
    return amount


def _build_line(entry: dict) -> PurchaseOrderItem:
    item_type = entry["item_type"]
    if item_type not in ItemType.values:
        raise InvalidArgument(f"Unknown item type: {item_type}", details={"field": "item_type"})
    item = item_model(item_type).objects.filter(pk=entry["item_id"]).first()
    if item is None:
        raise NotFound(f"{item_type} {entry['item_id']} not found", details={"item_id": entry["item_id"]})
    line = PurchaseOrderItem(
        item_type=item_type,
        item_id=item.pk,
        code=item.code,
        name=item.name,
        unit=item.unit,
        quantity=_positive(entry["quantity"], "quantity"),
        cost_per_unit=validate_price(entry.get("cost_per_unit", item.cost_per_unit)),
    )
    if entry.get("product_capacity_kg") is not None:
        line.product_capacity_kg = round3(entry["product_capacity_kg"])
        line.fragrance_percentage = validate_percentage(entry.get("fragrance_percentage") or 0, "fragrance_percentage")
    return line


@transaction.atomic
def create_purchase_orders(*, suppliers, created_by=None, notes: str = "") -> list[PurchaseOrder]:
    """Create one draft purchase order per supplier entry."""
    if not suppliers:
        raise InvalidArgument("At least one supplier with items is required", details={"field": "suppliers"})

    orders = []
    for entry in suppliers:
        supplier = Supplier.objects.filter(pk=entry["supplier_id"]).first()
        if supplier is None:
            raise NotFound("Supplier not found", details={"supplier_id": entry["supplier_id"]})
        if not entry.get("items"):
            raise InvalidArgument(f"No items for supplier {supplier.name}", details={"supplier_id": supplier.pk})
        lines = [_build_line(item) for item in entry["items"]]

        order = PurchaseOrder.objects.create(
            code=next_daily_code("PO"),
            supplier=supplier,
            notes=entry.get("notes") or notes,
            created_by=created_by,
        )
        for line in lines:
            line.purchase_order = order
        PurchaseOrderItem.objects.bulk_create(lines)
        orders.append(order)

    logger.info(
        "purchase_order.created",
        extra={
            "event": "purchase_order.created",
            "codes": [order.code for order in orders],
            "user_id": getattr(created_by, "pk", None),
        },
    )
    return orders


@transaction.atomic
def update_purchase_order_status(*, purchase_order_id, new_status: str, operator: Operator) -> PurchaseOrder:
    try:
        order = PurchaseOrder.objects.select_for_update().get(pk=purchase_order_id)
    except PurchaseOrder.DoesNotExist:
        raise NotFound("Purchase order not found")
    if new_status == PurchaseOrderStatus.RECEIVED:
        raise InvalidArgument("Use the receive endpoint to mark an order as received", details={"field": "status"})
    if new_status not in ALLOWED_TRANSITIONS.get(order.status, set()):
        raise PreconditionFailed(
            f"Cannot move {order.code} from {order.status} to {new_status}",
            details={"status": order.status, "requested": new_status},
        )
    previous = order.status
    PurchaseOrder.objects.filter(pk=order.pk).update(status=new_status, version=F("version") + 1)
    order.refresh_from_db()
    logger.info(
        "purchase_order.status_changed",
        extra={
            "event": "purchase_order.status_changed",
            "code": order.code,
            "from": previous,
            "to": new_status,
            "operator_id": operator.id,
        },
    )
    return order


def _requested_receipts(order: PurchaseOrder, items):
    """Pair each receipt entry with its order line (or None) and a positive quantity."""
    lines = {line.pk: line for line in order.items.all()}
    if items is None:
        return [(line, round3(line.quantity), None) for line in lines.values()]

    receipts = []
    for entry in items:
        quantity = round3(to_decimal(entry.get("received_quantity"), "received_quantity"))
        if quantity <= 0:
            continue
        line = None
        if entry.get("line_id") is not None:
            line = lines.get(entry["line_id"])
            if line is None:
                raise InvalidArgument(
                    f"Line {entry['line_id']} is not part of {order.code}", details={"line_id": entry["line_id"]}
                )
        receipts.append((line, quantity, entry))
    return receipts


def receive_purchase_order(
    *,
    purchase_order_id,
    operator: Operator,
    items=None,
    remarks: str = "",
    store=None,
) -> dict:
    """Receive an ordered purchase order into stock.

    ``items`` lists ``{line_id | item_ref_path + code, received_quantity}``
    entries; when omitted every line is received at its ordered quantity.
    Unresolvable items abort the whole receipt before anything is written.
    """
    store = store or default_store()
    order = PurchaseOrder.objects.filter(pk=purchase_order_id).first()
    if order is None:
        raise NotFound("Purchase order not found")
    if order.status != PurchaseOrderStatus.ORDERED:
        raise PreconditionFailed(
            f"{order.code} is {order.status}; only ordered purchase orders can be received",
            details={"status": order.status, "expected": [PurchaseOrderStatus.ORDERED]},
        )

    receipts = _requested_receipts(order, items)
    if not receipts:
        raise InvalidArgument("No items with a positive received quantity", details={"field": "items"})

    refs = []
    for index, (line, _, entry) in enumerate(receipts):
        if line is not None:
            refs.append(
                ItemReference(
                    key=str(index),
                    item_type=line.item_type,
                    item_id=line.item_id,
                    path=line.item_ref_path,
                    code=line.code,
                )
            )
        else:
            refs.append(
                ItemReference(
                    key=str(index),
                    item_type=entry.get("item_type"),
                    item_id=entry.get("item_id"),
                    path=entry.get("item_ref_path", ""),
                    code=entry.get("code", ""),
                )
            )
    resolution = resolve_item_references(refs, store=store)
    if resolution.failed:
        raise NotFound("Some items could not be found", details={"failed_items": resolution.failed})

    changes = []
    stamped = {}
    for index, (line, quantity, _) in enumerate(receipts):
        item_type, item_id = resolution.target(str(index))
        changes.append(
            StockChange(
                item_type=item_type,
                item_id=item_id,
                quantity=quantity,
                direction=StockDirection.ADD,
                reason=f"Received on {order.code}",
            )
        )
        if line is not None:
            stamped[line.pk] = stamped.get(line.pk, Decimal("0")) + quantity

    document = CausingDocument(
        doc_type=RelatedDocType.PURCHASE_ORDER,
        doc_id=order.pk,
        expected_statuses=(PurchaseOrderStatus.ORDERED,),
        terminal_status=PurchaseOrderStatus.RECEIVED,
        timestamp_field="received_at",
        metadata={
            "received_by": operator.name,
            "received_by_operator_id": operator.id,
            "lines": [{"line_id": pk, "received_quantity": qty} for pk, qty in stamped.items()],
        },
    )
    operation = StockOperation(
        movement_type=MovementType.PURCHASE_INBOUND,
        change_reason=ChangeReason.PURCHASE,
        operator=operator,
        remarks=remarks or f"Received purchase order {order.code}",
        document=document,
    )
    result = apply_stock_update(operation, changes, store=store)
    logger.info(
        "purchase_order.received",
        extra={
            "event": "purchase_order.received",
            "code": order.code,
            "items": len(result.mutated),
            "operator_id": operator.id,
        },
    )
    data = result.as_dict()
    data["code"] = order.code
    data["message"] = f"Purchase order {order.code} received; {result.message.lower()}"
    return data
