from decimal import Decimal
from types import SimpleNamespace

import pytest
from common.choices import StockDirection
from common.errors import PreconditionFailed
from common.identity import Operator
from django.utils import timezone
from inventory.records import ClampPolicy, build_audit_record, build_movements, compute_line

OPERATOR = Operator(id="7", name="Tester")


def _item(stock, code="MAT001"):
    return SimpleNamespace(
        item_type="material", item_id=1, code=code, name="Glycerin", unit="KG", current_stock=Decimal(stock)
    )


def test_add_rounds_operands_and_result():
    line = compute_line(_item("0.1"), quantity=Decimal("0.2"), direction=StockDirection.ADD)
    assert line.quantity_after == Decimal("0.300")
    assert line.quantity_change == Decimal("0.200")


def test_operands_rounded_before_arithmetic():
    # 1.0004 + 0.0004 would be 1.0008 -> 1.001 if only the result were rounded
    line = compute_line(_item("1.0004"), quantity=Decimal("0.0004"), direction=StockDirection.ADD)
    assert line.quantity_before == Decimal("1.000")
    assert line.quantity_after == Decimal("1.000")
    assert not line.changed


def test_half_up_rounding():
    line = compute_line(_item("0"), quantity=Decimal("1.0005"), direction=StockDirection.SET)
    assert line.quantity_after == Decimal("1.001")


def test_subtract_clamps_at_zero():
    line = compute_line(_item("2"), quantity=Decimal("5"), direction=StockDirection.SUBTRACT)
    assert line.quantity_after == Decimal("0")
    assert line.quantity_change == Decimal("-2")
    assert line.clamped is True


def test_subtract_reject_policy_raises():
    with pytest.raises(PreconditionFailed) as exc:
        compute_line(_item("2"), quantity=Decimal("5"), direction=StockDirection.SUBTRACT, clamp=ClampPolicy.REJECT)
    assert exc.value.details["item_code"] == "MAT001"


def test_unknown_direction_raises():
    with pytest.raises(ValueError):
        compute_line(_item("2"), quantity=1, direction="multiply")


def test_movements_skip_unchanged_lines():
    now = timezone.now()
    changed = compute_line(_item("2"), quantity=1, direction=StockDirection.ADD)
    same = compute_line(_item("3", code="MAT002"), quantity=3, direction=StockDirection.SET)
    drafts = build_movements(
        [changed, same],
        movement_type="manual_adjust",
        related_doc_type="manual_adjust",
        related_doc_id=5,
        operator=OPERATOR,
        timestamp=now,
    )
    assert len(drafts) == 1
    assert drafts[0].quantity == Decimal("1")
    assert drafts[0].quantity_after == Decimal("3")
    assert drafts[0].related_doc_id == "5"
    assert drafts[0].operator_name == "Tester"


def test_audit_record_none_when_nothing_changed():
    same = compute_line(_item("3"), quantity=3, direction=StockDirection.SET)
    assert (
        build_audit_record([same], change_reason="stocktake", operator=OPERATOR, timestamp=timezone.now()) is None
    )


def test_audit_record_details_are_serializable_strings():
    line = compute_line(_item("2"), quantity=Decimal("0.5"), direction=StockDirection.SUBTRACT)
    record = build_audit_record([line], change_reason="manual_adjustment", operator=OPERATOR, timestamp=timezone.now())
    assert record.details == [
        {
            "item_type": "material",
            "item_id": 1,
            "item_code": "MAT001",
            "item_name": "Glycerin",
            "unit": "KG",
            "quantity_before": "2.000",
            "quantity_after": "1.500",
            "quantity_change": "-0.500",
            "reason": "",
            "clamped": False,
        }
    ]
