"""Inventory services: manual adjustments, batch updates, stocktake, remarks.

All stock changes go through ``inventory.protocol.apply_stock_update``.
Single-item operations are strict (a missing item aborts); batch operations
are lenient and report ``successful`` and ``failed`` entries side by side.
"""

import logging
import uuid

from common.choices import ChangeReason, MovementType, RelatedDocType, StockDirection
from common.errors import InvalidArgument, NotFound
from common.identity import Operator
from common.numbers import round3, validate_stock
from django.db import transaction
from django.utils import timezone

from .models import InventoryRecord
from .protocol import StockChange, StockOperation, apply_stock_update
from .records import MissingItemPolicy
from .resolution import ItemReference, resolve_item_references
from .store import default_store

logger = logging.getLogger("deerlab.inventory")


def adjust_stock(
    *,
    item_type: str,
    item_id: int,
    quantity_change,
    operator: Operator,
    reason: str = "",
    remarks: str = "",
    store=None,
):
    """Apply a signed manual adjustment to one item."""
    amount = round3(quantity_change, "quantity_change")
    if amount == 0:
        raise InvalidArgument("quantity_change must not be zero", details={"field": "quantity_change"})
    change = StockChange(
        item_type=item_type,
        item_id=item_id,
        quantity=abs(amount),
        direction=StockDirection.ADD if amount > 0 else StockDirection.SUBTRACT,
        reason=reason,
    )
    operation = StockOperation(
        movement_type=MovementType.MANUAL_ADJUST,
        change_reason=ChangeReason.MANUAL_ADJUSTMENT,
        operator=operator,
        remarks=remarks or reason,
        related_doc_type=RelatedDocType.MANUAL_ADJUST,
        related_doc_id=f"{item_type}/{item_id}",
    )
    return apply_stock_update(operation, [change], store=store)


def set_stock_from_edit(
    *,
    item_type: str,
    item_id: int,
    new_stock,
    operator: Operator,
    related_doc_type: str,
    remarks: str = "",
    store=None,
):
    """Route a stock value typed into an edit form through the protocol."""
    target = validate_stock(new_stock)
    change = StockChange(
        item_type=item_type,
        item_id=item_id,
        quantity=target,
        direction=StockDirection.SET,
        reason="Edited stock level",
    )
    operation = StockOperation(
        movement_type=MovementType.MANUAL_ADJUST,
        change_reason=ChangeReason.MANUAL_ADJUSTMENT,
        operator=operator,
        remarks=remarks or "Stock level changed from the edit form",
        related_doc_type=related_doc_type,
        related_doc_id=str(item_id),
    )
    return apply_stock_update(operation, [change], store=store)


def _batch_set(
    entries,
    *,
    quantity_key: str,
    movement_type: str,
    change_reason: str,
    related_doc_type: str,
    operator: Operator,
    remarks: str,
    store,
):
    """Set absolute stock levels for a batch, tolerating unresolvable items."""
    store = store or default_store()
    if not entries:
        raise InvalidArgument("At least one item is required")

    refs = []
    for index, entry in enumerate(entries):
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

    changes = []
    duplicates = []
    seen = set()
    for index, entry in enumerate(entries):
        key = str(index)
        if key not in resolution:
            continue
        item_type, item_id = resolution.target(key)
        target = (str(item_type), int(item_id))
        if target in seen:
            # The first entry for an item wins; later ones are reported.
            duplicates.append(
                {
                    "key": key,
                    "item_type": item_type,
                    "item_id": item_id,
                    "code": entry.get("code", ""),
                    "error": "Item listed more than once",
                }
            )
            continue
        seen.add(target)
        changes.append(
            StockChange(
                item_type=item_type,
                item_id=item_id,
                quantity=validate_stock(entry[quantity_key], quantity_key),
                direction=StockDirection.SET,
                reason=entry.get("reason", ""),
            )
        )

    failed = [dict(item) for item in resolution.failed] + duplicates
    batch_id = uuid.uuid4().hex[:12]
    successful = []
    record_id = None
    if changes:
        result = apply_stock_update(
            StockOperation(
                movement_type=movement_type,
                change_reason=change_reason,
                operator=operator,
                remarks=remarks,
                related_doc_type=related_doc_type,
                related_doc_id=batch_id,
                missing_items=MissingItemPolicy.LENIENT,
            ),
            changes,
            store=store,
        )
        failed.extend(result.failed)
        record_id = result.record_id
        for line in result.lines:
            successful.append(
                {
                    "item_type": line.item_type,
                    "item_id": line.item_id,
                    "item_code": line.item_code,
                    "item_name": line.item_name,
                    "quantity_before": line.quantity_before,
                    "new_stock": line.quantity_after,
                    "quantity_change": line.quantity_change,
                    "changed": line.changed,
                }
            )

    return {
        "batch_id": batch_id,
        "successful": successful,
        "failed": failed,
        "record_id": record_id,
        "summary": {
            "total": len(entries),
            "successful": len(successful),
            "failed": len(failed),
            "changed": sum(1 for item in successful if item["changed"]),
        },
    }


def quick_update_inventory(*, updates, operator: Operator, remarks: str = "", store=None) -> dict:
    """Set new stock levels for several items at once."""
    return _batch_set(
        updates,
        quantity_key="new_stock",
        movement_type=MovementType.QUICK_UPDATE,
        change_reason=ChangeReason.QUICK_UPDATE,
        related_doc_type=RelatedDocType.QUICK_UPDATE,
        operator=operator,
        remarks=remarks or "Quick inventory update",
        store=store,
    )


def perform_stocktake(*, counts, operator: Operator, remarks: str = "", store=None) -> dict:
    """Reconcile recorded stock with physically counted quantities."""
    result = _batch_set(
        counts,
        quantity_key="counted_stock",
        movement_type=MovementType.STOCKTAKE,
        change_reason=ChangeReason.STOCKTAKE,
        related_doc_type=RelatedDocType.STOCKTAKE,
        operator=operator,
        remarks=remarks or "Stocktake",
        store=store,
    )
    for item in result["successful"]:
        item["variance"] = item["quantity_change"]
    return result


@transaction.atomic
def update_record_remarks(*, record_id: int, remarks: str, operator: Operator) -> InventoryRecord:
    try:
        record = InventoryRecord.objects.select_for_update().get(pk=record_id)
    except InventoryRecord.DoesNotExist:
        raise NotFound("Inventory record not found")
    record.remarks = remarks
    record.remarks_updated_at = timezone.now()
    record.save(update_fields=["remarks", "remarks_updated_at"])
    logger.info(
        "record.remarks_updated",
        extra={"event": "record.remarks_updated", "record_id": record.pk, "operator_id": operator.id},
    )
    return record


# EOF
