"""Work order services.

Completion subtracts the consumed materials and fragrance from stock and
moves the order to ``完工`` in a single stock transaction. Subtraction is
clamped at zero unless ``INVENTORY_CLAMP_NEGATIVE_STOCK`` is off.
"""

import logging
from datetime import datetime
from decimal import Decimal

from common.choices import ChangeReason, ItemType, MovementType, RelatedDocType, StockDirection, WorkOrderStatus
from common.codes import next_daily_code
from common.errors import InvalidArgument, NotFound, PreconditionFailed
from common.identity import Operator
from common.numbers import round3, to_decimal, validate_stock
from django.contrib.auth import get_user_model
from django.db import transaction
from django.db.models import F
from django.utils import timezone
from fragrances.calculations import calculate_production_amounts
from fragrances.models import Fragrance
from inventory.protocol import CausingDocument, StockChange, StockOperation, apply_stock_update
from inventory.resolution import ItemReference, resolve_item_references
from inventory.store import default_store, item_model
from products.models import Product

from .models import BillOfMaterialsLine, TimeEntry, WorkOrder

logger = logging.getLogger("deerlab.workorders")

COMPLETABLE_STATUSES = (WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.FORECAST)
UNDELETABLE_STATUSES = (WorkOrderStatus.IN_PROGRESS, WorkOrderStatus.COMPLETED)
UPDATABLE_FIELDS = ("status", "qc_status", "actual_quantity", "target_quantity", "notes")
# Once finished, an order only moves forward to 入庫.
SETTLED_TRANSITIONS = {
    WorkOrderStatus.COMPLETED: {WorkOrderStatus.STOCKED},
    WorkOrderStatus.STOCKED: set(),
}


def _get_order(work_order_id, *, lock=False) -> WorkOrder:
    qs = WorkOrder.objects.select_for_update() if lock else WorkOrder.objects.all()
    try:
        return qs.get(pk=work_order_id)
    except WorkOrder.DoesNotExist:
        raise NotFound("Work order not found")


def _product_snapshot(product: Product, fragrance, nicotine_mg) -> dict:
    return {
        "code": product.code,
        "name": product.name,
        "series_name": product.series.name if product.series_id else "",
        "fragrance_code": fragrance.code if fragrance else "",
        "fragrance_name": fragrance.name if fragrance else "",
        "nicotine_mg": str(round3(nicotine_mg if nicotine_mg is not None else product.nicotine_mg)),
    }


def _bom_lines(bom_items, *, target, fragrance) -> list[BillOfMaterialsLine]:
    if bom_items is None:
        if fragrance is None:
            return []
        amounts = calculate_production_amounts(target, fragrance.percentage)
        bom_items = [
            {
                "item_type": ItemType.FRAGRANCE,
                "item_id": fragrance.pk,
                "quantity": amounts["fragrance"],
                "category": "fragrance",
            }
        ]

    lines = []
    for entry in bom_items:
        item = item_model(entry["item_type"]).objects.filter(pk=entry["item_id"]).first()
        if item is None:
            logger.warning(
                "work_order.bom_item_missing",
                extra={"event": "work_order.bom_item_missing", "item_type": entry["item_type"], "item_id": entry["item_id"]},
            )
            continue
        ratio = entry.get("ratio")
        if ratio is None and entry["item_type"] == ItemType.FRAGRANCE:
            ratio = item.percentage
        lines.append(
            BillOfMaterialsLine(
                item_type=entry["item_type"],
                item_id=item.pk,
                code=item.code,
                name=item.name,
                unit=entry.get("unit") or item.unit,
                category=entry.get("category") or ("fragrance" if entry["item_type"] == ItemType.FRAGRANCE else "common"),
                quantity=validate_stock(entry["quantity"], "quantity"),
                ratio=ratio,
            )
        )
    return lines


@transaction.atomic
def create_work_order(
    *,
    product_id,
    target_quantity,
    created_by=None,
    fragrance_id=None,
    nicotine_mg=None,
    bom_items=None,
    notes: str = "",
) -> WorkOrder:
    """Create an unconfirmed work order with a product snapshot and bill of materials.

    Without ``bom_items`` the bill of materials holds the fragrance amount
    for the target quantity. Listed items that no longer exist are skipped.
    """
    target = round3(to_decimal(target_quantity, "target_quantity"))
    if target <= 0:
        raise InvalidArgument("target_quantity must be greater than zero", details={"field": "target_quantity"})
    product = Product.objects.select_related("series", "fragrance").filter(pk=product_id).first()
    if product is None:
        raise NotFound("Product not found")

    fragrance = product.fragrance
    if fragrance_id is not None:
        fragrance = Fragrance.objects.filter(pk=fragrance_id).first() or fragrance

    lines = _bom_lines(bom_items, target=target, fragrance=fragrance)
    order = WorkOrder.objects.create(
        code=next_daily_code("WO"),
        product=product,
        product_snapshot=_product_snapshot(product, fragrance, nicotine_mg),
        target_quantity=target,
        notes=notes,
        created_by=created_by,
    )
    for line in lines:
        line.work_order = order
    BillOfMaterialsLine.objects.bulk_create(lines)
    logger.info(
        "work_order.created",
        extra={"event": "work_order.created", "code": order.code, "bom_lines": len(lines)},
    )
    return order


@transaction.atomic
def update_work_order(*, work_order_id, operator: Operator, **fields) -> WorkOrder:
    unknown = set(fields) - set(UPDATABLE_FIELDS)
    if unknown:
        raise InvalidArgument(f"Unknown fields: {', '.join(sorted(unknown))}")
    if fields.get("status") == WorkOrderStatus.COMPLETED:
        raise InvalidArgument("Use the complete endpoint to finish a work order", details={"field": "status"})

    order = _get_order(work_order_id, lock=True)
    new_status = fields.get("status")
    if new_status and new_status != order.status and order.status in SETTLED_TRANSITIONS:
        if new_status not in SETTLED_TRANSITIONS[order.status]:
            raise PreconditionFailed(
                f"Cannot move {order.code} from {order.status} to {new_status}",
                details={"status": order.status, "requested": new_status},
            )
    changes = {}
    for key, value in fields.items():
        if key == "target_quantity":
            value = round3(to_decimal(value, key))
            if value <= 0:
                raise InvalidArgument("target_quantity must be greater than zero", details={"field": key})
        elif key == "actual_quantity":
            value = validate_stock(value, key)
        changes[key] = value
    if not changes:
        return order

    WorkOrder.objects.filter(pk=order.pk).update(version=F("version") + 1, updated_at=timezone.now(), **changes)
    order.refresh_from_db()
    logger.info(
        "work_order.updated",
        extra={"event": "work_order.updated", "code": order.code, "fields": sorted(changes), "operator_id": operator.id},
    )
    return order


@transaction.atomic
def add_time_entry(*, work_order_id, personnel_id, work_date, start_time, end_time, notes: str = "", created_by=None) -> TimeEntry:
    order = _get_order(work_order_id)
    personnel = get_user_model().objects.filter(pk=personnel_id).first()
    if personnel is None:
        raise NotFound("Personnel not found")

    start = datetime.combine(work_date, start_time)
    end = datetime.combine(work_date, end_time)
    if end <= start:
        raise InvalidArgument("end_time must be later than start_time", details={"field": "end_time"})
    hours = round3(Decimal((end - start).total_seconds()) / Decimal(3600))

    return TimeEntry.objects.create(
        work_order=order,
        personnel=personnel,
        personnel_name=personnel.name or personnel.get_username(),
        work_date=work_date,
        start_time=start_time,
        end_time=end_time,
        duration_hours=hours,
        notes=notes,
        created_by=created_by,
    )


@transaction.atomic
def delete_work_order(*, work_order_id) -> int:
    """Delete a work order and its time entries; returns the number of entries removed."""
    order = _get_order(work_order_id, lock=True)
    if order.status in UNDELETABLE_STATUSES:
        raise PreconditionFailed(f"Cannot delete a work order in status {order.status}", details={"status": order.status})
    entries = order.time_entries.count()
    order.delete()
    logger.info("work_order.deleted", extra={"event": "work_order.deleted", "code": order.code, "time_entries": entries})
    return entries


def complete_work_order(
    *,
    work_order_id,
    actual_quantity,
    consumed_materials,
    operator: Operator,
    remarks: str = "",
    store=None,
) -> dict:
    """Finish a work order and subtract what it consumed.

    ``consumed_materials`` entries are ``{item_type, item_id, consumed_quantity}``;
    entries with a non-positive quantity are skipped. Any item that cannot be
    found aborts the completion before stock is touched.
    """
    store = store or default_store()
    actual = validate_stock(actual_quantity, "actual_quantity")
    if not consumed_materials:
        raise InvalidArgument("consumed_materials must not be empty", details={"field": "consumed_materials"})

    order = WorkOrder.objects.filter(pk=work_order_id).first()
    if order is None:
        raise NotFound("Work order not found")
    if order.status not in COMPLETABLE_STATUSES:
        raise PreconditionFailed(
            f"{order.code} is {order.status}; cannot complete",
            details={"status": order.status, "expected": list(COMPLETABLE_STATUSES)},
        )

    codes = {(line.item_type, line.item_id): line.code for line in order.bom_lines.all()}
    consumed = []
    for entry in consumed_materials:
        quantity = round3(to_decimal(entry.get("consumed_quantity", 0), "consumed_quantity"))
        if quantity <= 0:
            logger.warning(
                "work_order.consumption_skipped",
                extra={"event": "work_order.consumption_skipped", "code": order.code, "item_id": entry.get("item_id")},
            )
            continue
        consumed.append((entry, quantity))

    refs = [
        ItemReference(
            key=str(index),
            item_type=entry["item_type"],
            item_id=entry["item_id"],
            code=entry.get("code") or codes.get((entry["item_type"], entry["item_id"]), ""),
        )
        for index, (entry, _) in enumerate(consumed)
    ]
    resolution = resolve_item_references(refs, store=store)
    if resolution.failed:
        raise NotFound("Some items could not be found", details={"failed_items": resolution.failed})

    changes = []
    used = {}
    for index, (entry, quantity) in enumerate(consumed):
        item_type, item_id = resolution.target(str(index))
        changes.append(
            StockChange(
                item_type=item_type,
                item_id=item_id,
                quantity=quantity,
                direction=StockDirection.SUBTRACT,
                reason=f"Consumed by {order.code}",
            )
        )
        key = (entry["item_type"], entry["item_id"])
        used[key] = used.get(key, Decimal("0")) + quantity

    document = CausingDocument(
        doc_type=RelatedDocType.WORK_ORDER,
        doc_id=order.pk,
        expected_statuses=COMPLETABLE_STATUSES,
        terminal_status=WorkOrderStatus.COMPLETED,
        timestamp_field="completed_at",
        metadata={
            "actual_quantity": actual,
            "completed_by": operator.name,
            "completed_by_operator_id": operator.id,
            "lines": [
                {"item_type": item_type, "item_id": item_id, "used_quantity": quantity}
                for (item_type, item_id), quantity in used.items()
            ],
        },
    )
    operation = StockOperation(
        movement_type=MovementType.WORKORDER,
        change_reason=ChangeReason.WORKORDER,
        operator=operator,
        remarks=remarks or f"Work order {order.code} completed",
        document=document,
    )
    result = apply_stock_update(operation, changes, store=store)
    logger.info(
        "work_order.completed",
        extra={
            "event": "work_order.completed",
            "code": order.code,
            "actual_quantity": str(actual),
            "items": len(result.mutated),
            "operator_id": operator.id,
        },
    )
    data = result.as_dict()
    data["code"] = order.code
    data["message"] = f"Work order {order.code} completed; {result.message.lower()}"
    return data
