"""Pure builders for stock lines, movements and audit records.

No I/O happens here. ``compute_line`` decides the new stock level exactly
once (rounded, clamped); movements and audit details reuse that value.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from common.choices import StockDirection
from common.errors import PreconditionFailed
from common.identity import Operator
from common.numbers import ZERO, round3
from django.conf import settings


class ClampPolicy(str, Enum):
    """What to do when a change would take stock below zero."""

    CLAMP = "clamp"  # floor at zero
    REJECT = "reject"  # fail the whole operation


class MissingItemPolicy(str, Enum):
    STRICT = "strict"  # any missing item aborts before writing
    LENIENT = "lenient"  # missing items are reported, the rest proceed


def default_clamp_policy() -> ClampPolicy:
    if getattr(settings, "INVENTORY_CLAMP_NEGATIVE_STOCK", True):
        return ClampPolicy.CLAMP
    return ClampPolicy.REJECT


@dataclass(frozen=True)
class StockLine:
    item_type: str
    item_id: int
    item_code: str
    item_name: str
    unit: str
    direction: str
    requested: Decimal
    quantity_before: Decimal
    quantity_after: Decimal
    reason: str = ""
    clamped: bool = False

    @property
    def quantity_change(self) -> Decimal:
        return self.quantity_after - self.quantity_before

    @property
    def changed(self) -> bool:
        return self.quantity_change != 0


@dataclass(frozen=True)
class MovementDraft:
    item_type: str
    item_id: int
    item_code: str
    movement_type: str
    quantity: Decimal
    quantity_before: Decimal
    quantity_after: Decimal
    related_doc_type: str
    related_doc_id: str
    operator_id: str
    operator_name: str
    reason: str
    created_at: datetime


@dataclass(frozen=True)
class RecordDraft:
    change_reason: str
    operator_id: str
    operator_name: str
    remarks: str
    related_doc_type: str
    related_doc_id: str
    created_at: datetime
    details: list = field(default_factory=list)


def compute_line(item, *, quantity, direction: str, reason: str = "", clamp: ClampPolicy = ClampPolicy.CLAMP) -> StockLine:
    """Compute the new stock level for one item.

    ``item`` is any object exposing item_type, item_id, code, name, unit and
    current_stock. Both operands are rounded to three decimals, then the
    result is rounded and, on shortfall, clamped at zero or rejected.
    """
    before = round3(item.current_stock)
    amount = round3(quantity, "quantity")
    if direction == StockDirection.ADD:
        raw = before + amount
    elif direction == StockDirection.SUBTRACT:
        raw = before - amount
    elif direction == StockDirection.SET:
        raw = amount
    else:
        raise ValueError(f"Unknown stock direction: {direction}")

    clamped = False
    if raw < 0:
        if clamp == ClampPolicy.REJECT:
            raise PreconditionFailed(
                f"Insufficient stock for {item.code}",
                details={
                    "item_type": item.item_type,
                    "item_id": item.item_id,
                    "item_code": item.code,
                    "current_stock": str(before),
                    "requested": str(amount),
                },
            )
        after = ZERO
        clamped = True
    else:
        after = round3(raw, "current_stock")

    return StockLine(
        item_type=item.item_type,
        item_id=item.item_id,
        item_code=item.code,
        item_name=item.name,
        unit=item.unit,
        direction=direction,
        requested=amount,
        quantity_before=before,
        quantity_after=after,
        reason=reason,
        clamped=clamped,
    )


def build_movement(
    line: StockLine,
    *,
    movement_type: str,
    related_doc_type: str,
    related_doc_id: str,
    operator: Operator,
    timestamp: datetime,
) -> MovementDraft:
    return MovementDraft(
        item_type=line.item_type,
        item_id=line.item_id,
        item_code=line.item_code,
        movement_type=movement_type,
        quantity=line.quantity_change,
        quantity_before=line.quantity_before,
        quantity_after=line.quantity_after,
        related_doc_type=related_doc_type,
        related_doc_id=str(related_doc_id),
        operator_id=operator.id,
        operator_name=operator.name,
        reason=line.reason,
        created_at=timestamp,
    )


def build_movements(lines, **metadata) -> list[MovementDraft]:
    """One movement per changed line; unchanged lines produce none."""
    return [build_movement(line, **metadata) for line in lines if line.changed]


def line_detail(line: StockLine) -> dict:
    return {
        "item_type": line.item_type,
        "item_id": line.item_id,
        "item_code": line.item_code,
        "item_name": line.item_name,
        "unit": line.unit,
        "quantity_before": str(line.quantity_before),
        "quantity_after": str(line.quantity_after),
        "quantity_change": str(line.quantity_change),
        "reason": line.reason,
        "clamped": line.clamped,
    }


def build_audit_record(
    lines,
    *,
    change_reason: str,
    operator: Operator,
    remarks: str = "",
    related_doc_type: str = "",
    related_doc_id: str = "",
    timestamp: datetime,
) -> RecordDraft | None:
    """Summarize the changed lines of one operation, or None when nothing changed."""
    changed = [line for line in lines if line.changed]
    if not changed:
        return None
    return RecordDraft(
        change_reason=change_reason,
        operator_id=operator.id,
        operator_name=operator.name,
        remarks=remarks,
        related_doc_type=related_doc_type,
        related_doc_id=str(related_doc_id),
        created_at=timestamp,
        details=[line_detail(line) for line in changed],
    )
