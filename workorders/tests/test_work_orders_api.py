from decimal import Decimal

import pytest
from common.choices import ChangeReason, ItemType, WorkOrderStatus
from django.utils import timezone
from fragrances.tests.factories import FragranceFactory
from inventory.models import InventoryRecord, StockMovement
from materials.tests.factories import MaterialFactory
from products.tests.factories import ProductFactory
from users.permissions import Capability
from users.tests.factories import UserFactory, client_for, user_with
from workorders.models import TimeEntry, WorkOrder
from workorders.tests.factories import BillOfMaterialsLineFactory, WorkOrderFactory


@pytest.fixture
def foreman_client():
    return client_for(user_with(Capability.PRODUCTION, name="Foreman"))


@pytest.mark.django_db
def test_create_defaults_bom_to_fragrance_amount(foreman_client):
    product = ProductFactory(fragrance=FragranceFactory(percentage=Decimal("12")))

    resp = foreman_client.post(
        "/api/v1/work-orders/", {"product_id": product.pk, "target_quantity": 50}, format="json"
    )

    assert resp.status_code == 201
    data = resp.json()["data"]
    today = timezone.localdate().strftime("%Y%m%d")
    assert data["code"] == f"WO-{today}-001"
    assert data["status"] == WorkOrderStatus.UNCONFIRMED
    assert data["product_snapshot"]["code"] == product.code
    bom = data["bom_lines"]
    assert len(bom) == 1
    assert bom[0]["item_id"] == product.fragrance_id
    assert Decimal(bom[0]["quantity"]) == Decimal("6")


@pytest.mark.django_db
def test_create_with_explicit_bom_skips_missing_items(foreman_client):
    product = ProductFactory()
    material = MaterialFactory()

    resp = foreman_client.post(
        "/api/v1/work-orders/",
        {
            "product_id": product.pk,
            "target_quantity": 10,
            "bom_items": [
                {"item_type": "material", "item_id": material.pk, "quantity": 10, "category": "common"},
                {"item_type": "material", "item_id": 9999, "quantity": 1},
            ],
        },
        format="json",
    )

    assert resp.status_code == 201
    order = WorkOrder.objects.get()
    assert [line.code for line in order.bom_lines.all()] == [material.code]


@pytest.mark.django_db
def test_create_requires_positive_target(foreman_client):
    product = ProductFactory()
    resp = foreman_client.post("/api/v1/work-orders/", {"product_id": product.pk, "target_quantity": 0}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_create_for_unknown_product(foreman_client):
    resp = foreman_client.post("/api/v1/work-orders/", {"product_id": 404, "target_quantity": 1}, format="json")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_update_fields_and_refuse_completed_status(foreman_client):
    order = WorkOrderFactory(status=WorkOrderStatus.UNCONFIRMED)
    url = f"/api/v1/work-orders/{order.pk}/"

    resp = foreman_client.patch(url, {"status": WorkOrderStatus.FORECAST, "qc_status": "檢驗中"}, format="json")
    assert resp.status_code == 200
    order.refresh_from_db()
    assert order.status == WorkOrderStatus.FORECAST
    assert order.version == 1

    resp = foreman_client.patch(url, {"status": WorkOrderStatus.COMPLETED}, format="json")
    assert resp.status_code == 400

    resp = foreman_client.patch(url, {"product_id": 1}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_time_entry_needs_time_capability(foreman_client):
    order = WorkOrderFactory()
    worker = UserFactory(name="Hsu")
    payload = {"personnel_id": worker.pk, "work_date": "2025-03-01", "start_time": "08:00", "end_time": "12:20"}

    resp = foreman_client.post(f"/api/v1/work-orders/{order.pk}/time-entries/", payload, format="json")
    assert resp.status_code == 403

    client = client_for(user_with(Capability.TIME))
    resp = client.post(f"/api/v1/work-orders/{order.pk}/time-entries/", payload, format="json")
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["personnel_name"] == "Hsu"
    assert Decimal(data["duration_hours"]) == Decimal("4.333")

    detail = foreman_client.get(f"/api/v1/work-orders/{order.pk}/").json()
    assert Decimal(detail["total_hours"]) == Decimal("4.333")


@pytest.mark.django_db
def test_time_entry_end_before_start_is_invalid():
    order = WorkOrderFactory()
    client = client_for(user_with(Capability.TIME))
    resp = client.post(
        f"/api/v1/work-orders/{order.pk}/time-entries/",
        {"personnel_id": UserFactory().pk, "work_date": "2025-03-01", "start_time": "12:00", "end_time": "08:00"},
        format="json",
    )
    assert resp.status_code == 400


@pytest.mark.django_db
def test_delete_removes_time_entries(foreman_client):
    order = WorkOrderFactory(status=WorkOrderStatus.FORECAST)
    TimeEntry.objects.create(
        work_order=order,
        personnel_name="A",
        work_date="2025-03-01",
        start_time="08:00",
        end_time="09:00",
        duration_hours=Decimal("1"),
    )
    resp = foreman_client.delete(f"/api/v1/work-orders/{order.pk}/")
    assert resp.status_code == 200
    assert resp.json()["data"]["time_entries_deleted"] == 1
    assert not TimeEntry.objects.exists()


@pytest.mark.django_db
def test_delete_refused_in_progress(foreman_client):
    order = WorkOrderFactory(status=WorkOrderStatus.IN_PROGRESS)
    assert foreman_client.delete(f"/api/v1/work-orders/{order.pk}/").status_code == 409


@pytest.mark.django_db
def test_complete_endpoint(foreman_client):
    fragrance = FragranceFactory(current_stock=Decimal("10"))
    bottle = MaterialFactory(current_stock=Decimal("100"))
    order = WorkOrderFactory(status=WorkOrderStatus.FORECAST)
    BillOfMaterialsLineFactory(work_order=order, item=fragrance)

    resp = foreman_client.post(
        f"/api/v1/work-orders/{order.pk}/complete/",
        {
            "actual_quantity": "49.5",
            "consumed_materials": [
                {"item_type": "fragrance", "item_id": fragrance.pk, "consumed_quantity": "2.5"},
                {"item_type": "material", "item_id": bottle.pk, "consumed_quantity": 50},
            ],
            "remarks": "Batch A",
        },
        format="json",
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["code"] == order.code
    assert len(data["items_mutated"]) == 2
    fragrance.refresh_from_db()
    bottle.refresh_from_db()
    assert fragrance.current_stock == Decimal("7.5")
    assert bottle.current_stock == Decimal("50")
    order.refresh_from_db()
    assert order.status == WorkOrderStatus.COMPLETED
    assert order.completed_by == "Foreman"
    assert order.completed_at is not None
    assert order.actual_quantity == Decimal("49.5")
    record = InventoryRecord.objects.get()
    assert record.change_reason == ChangeReason.WORKORDER
    assert record.related_doc_id == str(order.pk)
    assert StockMovement.objects.filter(item_type=ItemType.MATERIAL, quantity=Decimal("-50")).exists()

    again = foreman_client.post(
        f"/api/v1/work-orders/{order.pk}/complete/",
        {"actual_quantity": 1, "consumed_materials": [{"item_type": "material", "item_id": bottle.pk, "consumed_quantity": 1}]},
        format="json",
    )
    assert again.status_code == 409
    bottle.refresh_from_db()
    assert bottle.current_stock == Decimal("50")


@pytest.mark.django_db
def test_complete_requires_consumption(foreman_client):
    order = WorkOrderFactory()
    resp = foreman_client.post(
        f"/api/v1/work-orders/{order.pk}/complete/", {"actual_quantity": 1, "consumed_materials": []}, format="json"
    )
    assert resp.status_code == 400
    order.refresh_from_db()
    assert order.status == WorkOrderStatus.IN_PROGRESS


@pytest.mark.django_db
def test_complete_unconfirmed_order_is_refused(foreman_client):
    material = MaterialFactory()
    order = WorkOrderFactory(status=WorkOrderStatus.UNCONFIRMED)
    resp = foreman_client.post(
        f"/api/v1/work-orders/{order.pk}/complete/",
        {"actual_quantity": 1, "consumed_materials": [{"item_type": "material", "item_id": material.pk, "consumed_quantity": 1}]},
        format="json",
    )
    assert resp.status_code == 409
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_list_filters_by_status(foreman_client):
    WorkOrderFactory(status=WorkOrderStatus.FORECAST)
    done = WorkOrderFactory(status=WorkOrderStatus.COMPLETED)
    resp = foreman_client.get("/api/v1/work-orders/", {"status": WorkOrderStatus.COMPLETED})
    assert [row["id"] for row in resp.json()["results"]] == [done.pk]


@pytest.mark.django_db
def test_completed_order_cannot_be_reopened(foreman_client):
    material = MaterialFactory(current_stock=Decimal("10"))
    order = WorkOrderFactory(status=WorkOrderStatus.IN_PROGRESS)
    url = f"/api/v1/work-orders/{order.pk}/"
    payload = {"actual_quantity": 1, "consumed_materials": [{"item_type": "material", "item_id": material.pk, "consumed_quantity": 3}]}

    assert foreman_client.post(f"{url}complete/", payload, format="json").status_code == 200

    resp = foreman_client.patch(url, {"status": WorkOrderStatus.IN_PROGRESS}, format="json")
    assert resp.status_code == 409
    assert resp.json()["error"]["kind"] == "precondition_failed"
    assert foreman_client.post(f"{url}complete/", payload, format="json").status_code == 409

    material.refresh_from_db()
    order.refresh_from_db()
    assert material.current_stock == Decimal("7")
    assert order.status == WorkOrderStatus.COMPLETED
    assert StockMovement.objects.count() == 1

    resp = foreman_client.patch(url, {"status": WorkOrderStatus.STOCKED, "qc_status": "檢驗合格"}, format="json")
    assert resp.status_code == 200
    order.refresh_from_db()
    assert order.status == WorkOrderStatus.STOCKED
    assert foreman_client.patch(url, {"status": WorkOrderStatus.FORECAST}, format="json").status_code == 409
