"""Transactional stock-update protocol.

Every code path that changes ``current_stock`` goes through
``apply_stock_update``. One call is one logical operation:

1. re-read the causing document (if any) and check its status
2. read every referenced item
3. abort on missing items (strict) or set them aside (lenient)
4. compute new stock levels (rounded, clamped or rejected on shortfall)
5. write stock levels
6. write one movement per changed item
7. write one audit record when at least one item changed
8. move the causing document to its terminal status

Steps 1-4 only read and 5-8 only write. The body may be re-run from the top
by the store when a concurrent writer wins, so it has no side effects outside
the transaction it is handed.
"""

import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from decimal import Decimal

from common.choices import StockDirection
from common.errors import InvalidArgument, NotFound, PreconditionFailed
from common.identity import Operator
from common.numbers import round3
from django.utils import timezone

from .records import (
    ClampPolicy,
    MissingItemPolicy,
    build_audit_record,
    build_movements,
    compute_line,
    default_clamp_policy,
)
from .store import default_store

logger = logging.getLogger("deerlab.inventory")


@dataclass(frozen=True)
class StockChange:
    item_type: str
    item_id: int
    quantity: Decimal
    direction: str = StockDirection.ADD
    reason: str = ""


@dataclass(frozen=True)
class CausingDocument:
    """The purchase order or work order whose transition triggers the update.

    ``metadata`` holds column updates stamped alongside the status; the
    current time is added under ``timestamp_field``. A ``lines`` entry is
    handed to the document model's ``stamp_lines``.
    """

    doc_type: str
    doc_id: int
    expected_statuses: tuple
    terminal_status: str
    timestamp_field: str = ""
    metadata: dict = field(default_factory=dict)


@dataclass(frozen=True)
class StockOperation:
    movement_type: str
    change_reason: str
    operator: Operator
    remarks: str = ""
    document: CausingDocument | None = None
    related_doc_type: str = ""
    related_doc_id: str = ""
    missing_items: MissingItemPolicy = MissingItemPolicy.STRICT
    clamp: ClampPolicy | None = None

    @property
    def reference(self) -> tuple[str, str]:
        if self.document is not None:
            return self.document.doc_type, str(self.document.doc_id)
        return self.related_doc_type, str(self.related_doc_id or "")


@dataclass
class StockUpdateResult:
    causing_doc_id: str
    lines: list
    failed: list
    record_id: int | None
    document_code: str = ""

    @property
    def mutated(self) -> list:
        return [line for line in self.lines if line.changed]

    @property
    def message(self) -> str:
        count = len(self.mutated)
        text = f"Updated stock for {count} item{'s' if count != 1 else ''}"
        if self.failed:
            text += f"; {len(self.failed)} failed"
        return text

    def as_dict(self) -> dict:
        return {
            "causing_doc_id": self.causing_doc_id,
            "items_mutated": [
                {
                    "item_id": line.item_id,
                    "item_type": line.item_type,
                    "item_code": line.item_code,
                    "item_name": line.item_name,
                    "quantity_change": line.quantity_change,
                    "new_stock": line.quantity_after,
                }
                for line in self.mutated
            ],
            "failed": self.failed,
            "record_id": self.record_id,
            "message": self.message,
        }


def coalesce_changes(changes) -> list[StockChange]:
    """Merge repeated references to one item into a single net change."""
    grouped: "OrderedDict[tuple[str, int], list[StockChange]]" = OrderedDict()
    for change in changes:
        grouped.setdefault((str(change.item_type), int(change.item_id)), []).append(change)

    merged = []
    for (item_type, item_id), group in grouped.items():
        if len(group) == 1:
            merged.append(group[0])
            continue
        if any(change.direction == StockDirection.SET for change in group):
            raise InvalidArgument(
                "Conflicting target stock for one item",
                details={"item_type": item_type, "item_id": item_id},
            )
        net = Decimal("0")
        for change in group:
            amount = round3(change.quantity)
            net += amount if change.direction == StockDirection.ADD else -amount
        reasons = [change.reason for change in group if change.reason]
        merged.append(
            StockChange(
                item_type=item_type,
                item_id=item_id,
                quantity=abs(net),
                direction=StockDirection.ADD if net >= 0 else StockDirection.SUBTRACT,
                reason="; ".join(dict.fromkeys(reasons)),
            )
        )
    return merged


def apply_stock_update(operation: StockOperation, changes, *, store=None) -> StockUpdateResult:
    store = store or default_store()
    changes = coalesce_changes(changes)
    if not changes and operation.document is None:
        raise InvalidArgument("No stock changes supplied")
    clamp = operation.clamp or default_clamp_policy()
    related_doc_type, related_doc_id = operation.reference

    def body(txn):
        now = timezone.now()
        document = None

        # Read phase
        causing = operation.document
        if causing is not None:
            document = txn.get_document(causing.doc_type, causing.doc_id)
            if document is None:
                raise NotFound(f"{causing.doc_type} {causing.doc_id} not found")
            if document.status not in causing.expected_statuses:
                raise PreconditionFailed(
                    f"{document.code} is {document.status}; expected one of {', '.join(causing.expected_statuses)}",
                    details={"status": document.status, "expected": list(causing.expected_statuses)},
                )

        snapshots = []
        failed = []
        for change in changes:
            snapshot = txn.get_item(change.item_type, change.item_id)
            if snapshot is None:
                failed.append({"item_type": change.item_type, "item_id": change.item_id, "error": "Item not found"})
            else:
                snapshots.append((change, snapshot))

        if failed and operation.missing_items == MissingItemPolicy.STRICT:
            raise NotFound("Some items could not be found", details={"failed_items": failed})

        lines = [
            compute_line(snapshot, quantity=change.quantity, direction=change.direction, reason=change.reason, clamp=clamp)
            for change, snapshot in snapshots
        ]
        changed = [line for line in lines if line.changed]

        # Write phase
        for line in changed:
            txn.set_item_stock(line.item_type, line.item_id, line.quantity_after, now)

        for draft in build_movements(
            changed,
            movement_type=operation.movement_type,
            related_doc_type=related_doc_type,
            related_doc_id=related_doc_id,
            operator=operation.operator,
            timestamp=now,
        ):
            txn.append_movement(draft)

        record_id = None
        record = build_audit_record(
            changed,
            change_reason=operation.change_reason,
            operator=operation.operator,
            remarks=operation.remarks,
            related_doc_type=related_doc_type,
            related_doc_id=related_doc_id,
            timestamp=now,
        )
        if record is not None:
            record_id = txn.append_audit_record(record)

        if document is not None:
            metadata = {**causing.metadata, "updated_at": now}
            if causing.timestamp_field:
                metadata[causing.timestamp_field] = now
            txn.update_document_status(document.doc_type, document.doc_id, causing.terminal_status, metadata)

        return StockUpdateResult(
            causing_doc_id=related_doc_id,
            lines=lines,
            failed=failed,
            record_id=record_id,
            document_code=document.code if document else "",
        )

    result = store.run_transaction(body)
    logger.info(
        "stock.committed",
        extra={
            "event": "stock.committed",
            "movement_type": operation.movement_type,
            "related_doc_type": related_doc_type,
            "related_doc_id": related_doc_id,
            "items_mutated": len(result.mutated),
            "items_failed": len(result.failed),
            "record_id": result.record_id,
            "operator_id": operation.operator.id,
        },
    )
    return result
