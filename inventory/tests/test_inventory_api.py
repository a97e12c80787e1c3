from decimal import Decimal

import pytest
from common.choices import ChangeReason, ItemType
from fragrances.tests.factories import FragranceFactory
from inventory.models import ImmutableRecordError, InventoryRecord, StockMovement
from materials.tests.factories import MaterialFactory
from users.permissions import Capability
from users.tests.factories import UserFactory, client_for, user_with


@pytest.mark.django_db
def test_adjust_requires_inventory_capability():
    material = MaterialFactory()
    client = client_for(UserFactory())
    resp = client.post(
        "/api/v1/inventory/adjust/",
        {"item_type": "material", "item_id": material.pk, "quantity_change": 1},
        format="json",
    )
    assert resp.status_code == 403
    assert resp.json()["error"]["kind"] == "permission_denied"


@pytest.mark.django_db
def test_adjust_requires_authentication(client):
    resp = client.post("/api/v1/inventory/adjust/", {}, content_type="application/json")
    assert resp.status_code == 401


@pytest.mark.django_db
def test_adjust_records_operator():
    material = MaterialFactory(current_stock=Decimal("3"))
    user = user_with(Capability.INVENTORY, name="Amy")
    client = client_for(user)

    resp = client.post(
        "/api/v1/inventory/adjust/",
        {"item_type": "material", "item_id": material.pk, "quantity_change": "-1.25", "reason": "Spill"},
        format="json",
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["data"]["record_id"] is not None
    material.refresh_from_db()
    assert material.current_stock == Decimal("1.75")
    record = InventoryRecord.objects.get()
    assert record.operator_id == str(user.pk)
    assert record.operator_name == "Amy"
    assert record.change_reason == ChangeReason.MANUAL_ADJUSTMENT
    assert record.remarks == "Spill"


@pytest.mark.django_db
def test_adjust_unknown_item_is_not_found():
    client = client_for(user_with(Capability.INVENTORY))
    resp = client.post(
        "/api/v1/inventory/adjust/",
        {"item_type": "fragrance", "item_id": 999, "quantity_change": 1},
        format="json",
    )
    assert resp.status_code == 404
    assert resp.json()["error"]["kind"] == "not_found"


@pytest.mark.django_db
def test_adjust_rejects_unknown_fields():
    material = MaterialFactory()
    client = client_for(user_with(Capability.INVENTORY))
    resp = client.post(
        "/api/v1/inventory/adjust/",
        {"item_type": "material", "item_id": material.pk, "quantity_change": 1, "force": True},
        format="json",
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["error"]["kind"] == "invalid_argument"


@pytest.mark.django_db
def test_adjust_rejects_quantity_wider_than_stock_column():
    material = MaterialFactory(current_stock=Decimal("1"))
    client = client_for(user_with(Capability.INVENTORY))
    resp = client.post(
        "/api/v1/inventory/adjust/",
        {"item_type": "material", "item_id": material.pk, "quantity_change": "1e30"},
        format="json",
    )
    assert resp.status_code == 400
    body = resp.json()
    assert body["error"]["kind"] == "invalid_argument"
    material.refresh_from_db()
    assert material.current_stock == Decimal("1")
    assert not StockMovement.objects.exists()
    assert body["error"]["message"] == "Invalid input."
    assert "force" in body["error"]["details"]


@pytest.mark.django_db
def test_adjust_zero_change_is_invalid():
    material = MaterialFactory()
    client = client_for(user_with(Capability.INVENTORY))
    resp = client.post(
        "/api/v1/inventory/adjust/",
        {"item_type": "material", "item_id": material.pk, "quantity_change": "0.0001"},
        format="json",
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["details"] == {"field": "quantity_change"}


@pytest.mark.django_db
def test_quick_update_endpoint_mixes_success_and_failure():
    material = MaterialFactory(current_stock=Decimal("1"))
    fragrance = FragranceFactory(current_stock=Decimal("1"))
    client = client_for(user_with(Capability.INVENTORY))

    resp = client.post(
        "/api/v1/inventory/quick-update/",
        {
            "updates": [
                {"item_ref_path": f"materials/{material.pk}", "new_stock": 8},
                {"code": fragrance.code, "new_stock": "2.5"},
                {"item_type": "material", "item_id": 4242, "new_stock": 1},
            ],
            "remarks": "Monday count",
        },
        format="json",
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["summary"] == {"total": 3, "successful": 2, "failed": 1, "changed": 2}
    fragrance.refresh_from_db()
    assert fragrance.current_stock == Decimal("2.5")
    record = InventoryRecord.objects.get(pk=data["record_id"])
    assert record.change_reason == ChangeReason.QUICK_UPDATE
    assert record.remarks == "Monday count"
    assert record.item_count == 2


@pytest.mark.django_db
def test_quick_update_line_needs_a_target():
    client = client_for(user_with(Capability.INVENTORY))
    resp = client.post("/api/v1/inventory/quick-update/", {"updates": [{"new_stock": 1}]}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_quick_update_rejects_negative_stock():
    material = MaterialFactory()
    client = client_for(user_with(Capability.INVENTORY))
    resp = client.post(
        "/api/v1/inventory/quick-update/",
        {"updates": [{"item_type": "material", "item_id": material.pk, "new_stock": -1}]},
        format="json",
    )
    assert resp.status_code == 400


@pytest.mark.django_db
def test_stocktake_reports_variance_and_skips_matching_counts():
    counted = MaterialFactory(current_stock=Decimal("10"))
    matching = MaterialFactory(current_stock=Decimal("4"))
    client = client_for(user_with(Capability.INVENTORY))

    resp = client.post(
        "/api/v1/inventory/stocktake/",
        {
            "counts": [
                {"item_type": "material", "item_id": counted.pk, "counted_stock": "9.5"},
                {"item_type": "material", "item_id": matching.pk, "counted_stock": 4},
            ]
        },
        format="json",
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    variances = {row["item_id"]: Decimal(str(row["variance"])) for row in data["successful"]}
    assert variances == {counted.pk: Decimal("-0.5"), matching.pk: Decimal("0")}
    assert data["summary"]["changed"] == 1
    assert StockMovement.objects.count() == 1
    record = InventoryRecord.objects.get()
    assert record.change_reason == ChangeReason.STOCKTAKE
    assert record.item_count == 1


@pytest.mark.django_db
def test_record_remarks_are_the_only_editable_field():
    material = MaterialFactory(current_stock=Decimal("1"))
    client = client_for(user_with(Capability.INVENTORY))
    client.post(
        "/api/v1/inventory/adjust/",
        {"item_type": "material", "item_id": material.pk, "quantity_change": 1},
        format="json",
    )
    record = InventoryRecord.objects.get()

    resp = client.patch(f"/api/v1/inventory/records/{record.pk}/remarks/", {"remarks": "Checked"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["data"]["remarks"] == "Checked"
    record.refresh_from_db()
    assert record.remarks_updated_at is not None

    record.operator_name = "Someone else"
    with pytest.raises(ImmutableRecordError):
        record.save()
    with pytest.raises(ImmutableRecordError):
        record.delete()
    with pytest.raises(ImmutableRecordError):
        StockMovement.objects.get().delete()


@pytest.mark.django_db
def test_record_remarks_rejects_other_fields():
    client = client_for(user_with(Capability.INVENTORY))
    resp = client.patch("/api/v1/inventory/records/1/remarks/", {"remarks": "x", "details": []}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_movement_and_record_lists_filter():
    material = MaterialFactory(current_stock=Decimal("1"))
    other = MaterialFactory(current_stock=Decimal("1"))
    client = client_for(user_with(Capability.INVENTORY))
    for item in (material, other):
        client.post(
            "/api/v1/inventory/adjust/",
            {"item_type": "material", "item_id": item.pk, "quantity_change": 1},
            format="json",
        )

    resp = client.get(f"/api/v1/inventory/movements/?item_type=material&item_id={material.pk}")
    assert resp.status_code == 200
    rows = resp.json()["results"]
    assert [row["item_code"] for row in rows] == [material.code]

    resp = client.get("/api/v1/inventory/records/?change_reason=manual_adjustment")
    assert resp.json()["count"] == 2


@pytest.mark.django_db
def test_overview_and_low_stock():
    MaterialFactory(current_stock=Decimal("2"), safety_stock_level=Decimal("5"), cost_per_unit=Decimal("1"))
    FragranceFactory(current_stock=Decimal("1"), safety_stock_level=Decimal("0"), cost_per_unit=Decimal("10"))
    client = client_for(UserFactory())

    overview = client.get("/api/v1/inventory/overview/").json()["data"]
    assert overview["total_items"] == 2
    assert overview["low_stock_count"] == 1
    assert Decimal(str(overview["total_value"])) == Decimal("12.00")

    rows = client.get("/api/v1/inventory/low-stock/?item_type=material").json()["data"]
    assert len(rows) == 1
    assert Decimal(str(rows[0]["shortage"])) == Decimal("3")

    resp = client.get("/api/v1/inventory/low-stock/?item_type=product")
    assert resp.status_code == 400
    assert ItemType.MATERIAL in overview["by_type"]


# EOF
