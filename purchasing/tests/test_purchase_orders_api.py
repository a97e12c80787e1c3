from decimal import Decimal

import pytest
from common.choices import PurchaseOrderStatus
from django.utils import timezone
from fragrances.tests.factories import FragranceFactory
from inventory.models import InventoryRecord, StockMovement
from materials.models import Material
from materials.tests.factories import MaterialFactory
from purchasing.models import PurchaseOrder
from purchasing.tests.factories import PurchaseOrderFactory, PurchaseOrderItemFactory
from suppliers.tests.factories import SupplierFactory
from users.permissions import Capability
from users.tests.factories import UserFactory, client_for, user_with


@pytest.fixture
def buyer():
    return user_with(Capability.PURCHASING, name="Buyer")


@pytest.fixture
def buyer_client(buyer):
    return client_for(buyer)


@pytest.mark.django_db
def test_create_one_order_per_supplier(buyer_client, buyer):
    first, second = SupplierFactory(), SupplierFactory()
    material = MaterialFactory(cost_per_unit=Decimal("3"))
    fragrance = FragranceFactory()

    resp = buyer_client.post(
        "/api/v1/purchase-orders/",
        {
            "suppliers": [
                {"supplier_id": first.pk, "items": [{"item_type": "material", "item_id": material.pk, "quantity": 10}]},
                {
                    "supplier_id": second.pk,
                    "items": [
                        {
                            "item_type": "fragrance",
                            "item_id": fragrance.pk,
                            "quantity": "5.5",
                            "product_capacity_kg": 50,
                            "fragrance_percentage": 11,
                        }
                    ],
                },
            ],
            "notes": "Weekly",
        },
        format="json",
    )

    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["count"] == 2
    today = timezone.localdate().strftime("%Y%m%d")
    codes = [order["code"] for order in data["orders"]]
    assert codes == [f"PO-{today}-001", f"PO-{today}-002"]
    order = PurchaseOrder.objects.get(code=codes[0])
    assert order.status == PurchaseOrderStatus.DRAFT
    assert order.created_by == buyer
    line = order.items.get()
    assert line.code == material.code
    assert line.cost_per_unit == Decimal("3")
    assert data["orders"][0]["items"][0]["item_ref_path"] == f"materials/{material.pk}"


@pytest.mark.django_db
def test_create_with_missing_item_creates_nothing(buyer_client):
    supplier = SupplierFactory()
    resp = buyer_client.post(
        "/api/v1/purchase-orders/",
        {"suppliers": [{"supplier_id": supplier.pk, "items": [{"item_type": "material", "item_id": 999, "quantity": 1}]}]},
        format="json",
    )
    assert resp.status_code == 404
    assert not PurchaseOrder.objects.exists()


@pytest.mark.django_db
def test_create_rejects_non_positive_quantity(buyer_client):
    supplier = SupplierFactory()
    material = MaterialFactory()
    resp = buyer_client.post(
        "/api/v1/purchase-orders/",
        {"suppliers": [{"supplier_id": supplier.pk, "items": [{"item_type": "material", "item_id": material.pk, "quantity": 0}]}]},
        format="json",
    )
    assert resp.status_code == 400


@pytest.mark.django_db
def test_purchasing_capability_required():
    client = client_for(UserFactory())
    order = PurchaseOrderFactory(status=PurchaseOrderStatus.DRAFT)
    assert client.get(f"/api/v1/purchase-orders/{order.pk}/").status_code == 200
    resp = client.post(f"/api/v1/purchase-orders/{order.pk}/status/", {"status": "已訂購"}, format="json")
    assert resp.status_code == 403


@pytest.mark.django_db
def test_status_transitions(buyer_client):
    order = PurchaseOrderFactory(status=PurchaseOrderStatus.DRAFT)
    url = f"/api/v1/purchase-orders/{order.pk}/status/"

    resp = buyer_client.post(url, {"status": PurchaseOrderStatus.ORDERED}, format="json")
    assert resp.status_code == 200
    assert resp.json()["data"]["status"] == PurchaseOrderStatus.ORDERED

    resp = buyer_client.post(url, {"status": PurchaseOrderStatus.RECEIVED}, format="json")
    assert resp.status_code == 400

    resp = buyer_client.post(url, {"status": PurchaseOrderStatus.DRAFT}, format="json")
    assert resp.status_code == 409

    resp = buyer_client.post(url, {"status": PurchaseOrderStatus.CANCELLED}, format="json")
    assert resp.status_code == 200
    order.refresh_from_db()
    assert order.version == 2


@pytest.mark.django_db
def test_receive_endpoint_partial_quantities(buyer_client):
    material = MaterialFactory(current_stock=Decimal("1"))
    fragrance = FragranceFactory(current_stock=Decimal("0"))
    order = PurchaseOrderFactory()
    line = PurchaseOrderItemFactory(purchase_order=order, item=material, quantity=Decimal("10"))
    skipped = PurchaseOrderItemFactory(purchase_order=order, item=fragrance, quantity=Decimal("2"))

    resp = buyer_client.post(
        f"/api/v1/purchase-orders/{order.pk}/receive/",
        {
            "items": [
                {"line_id": line.pk, "received_quantity": "9.9996"},
                {"line_id": skipped.pk, "received_quantity": 0},
            ],
            "remarks": "Short shipped",
        },
        format="json",
    )

    assert resp.status_code == 200
    data = resp.json()["data"]
    assert data["code"] == order.code
    assert len(data["items_mutated"]) == 1
    material.refresh_from_db()
    fragrance.refresh_from_db()
    line.refresh_from_db()
    skipped.refresh_from_db()
    assert material.current_stock == Decimal("11")
    assert fragrance.current_stock == Decimal("0")
    assert line.received_quantity == Decimal("10")
    assert skipped.received_quantity is None
    record = InventoryRecord.objects.get()
    assert record.remarks == "Short shipped"
    assert record.operator_name == "Buyer"

    order.refresh_from_db()
    assert order.status == PurchaseOrderStatus.RECEIVED


@pytest.mark.django_db
def test_receive_unknown_line_is_invalid(buyer_client):
    line = PurchaseOrderItemFactory()
    resp = buyer_client.post(
        f"/api/v1/purchase-orders/{line.purchase_order_id}/receive/",
        {"items": [{"line_id": line.pk + 100, "received_quantity": 1}]},
        format="json",
    )
    assert resp.status_code == 400
    assert not StockMovement.objects.exists()


@pytest.mark.django_db
def test_receive_draft_order_is_refused(buyer_client):
    line = PurchaseOrderItemFactory(purchase_order__status=PurchaseOrderStatus.DRAFT)
    resp = buyer_client.post(f"/api/v1/purchase-orders/{line.purchase_order_id}/receive/", {}, format="json")
    assert resp.status_code == 409
    assert resp.json()["error"]["details"]["status"] == PurchaseOrderStatus.DRAFT


@pytest.mark.django_db
def test_receive_missing_item_reports_failures(buyer_client):
    line = PurchaseOrderItemFactory()
    material_id = line.item_id
    Material.objects.filter(pk=material_id).delete()
    resp = buyer_client.post(f"/api/v1/purchase-orders/{line.purchase_order_id}/receive/", {}, format="json")
    assert resp.status_code == 404
    failed = resp.json()["error"]["details"]["failed_items"]
    assert failed[0]["item_id"] == material_id


@pytest.mark.django_db
def test_list_filters_by_status(buyer_client):
    PurchaseOrderFactory(status=PurchaseOrderStatus.DRAFT)
    ordered = PurchaseOrderFactory(status=PurchaseOrderStatus.ORDERED)
    resp = buyer_client.get("/api/v1/purchase-orders/", {"status": PurchaseOrderStatus.ORDERED})
    assert [row["id"] for row in resp.json()["results"]] == [ordered.pk]
