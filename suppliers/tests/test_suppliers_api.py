import pytest
from purchasing.tests.factories import PurchaseOrderFactory
from suppliers.models import Supplier
from suppliers.tests.factories import SupplierFactory
from users.permissions import Capability
from users.tests.factories import UserFactory, client_for, user_with


@pytest.fixture
def catalog_client():
    return client_for(user_with(Capability.CATALOG))


@pytest.mark.django_db
def test_create_supplier_with_liaison(catalog_client):
    liaison = UserFactory(name="Wang")
    resp = catalog_client.post(
        "/api/v1/suppliers/",
        {"name": " Acme Oils ", "products": "PG, VG", "liaison_person_id": liaison.pk},
        format="json",
    )
    assert resp.status_code == 201
    data = resp.json()["data"]
    assert data["name"] == "Acme Oils"
    assert data["liaison_person_name"] == "Wang"


@pytest.mark.django_db
def test_duplicate_name_is_refused(catalog_client):
    SupplierFactory(name="Acme")
    resp = catalog_client.post("/api/v1/suppliers/", {"name": "acme"}, format="json")
    assert resp.status_code == 409


@pytest.mark.django_db
def test_unknown_liaison_is_not_found(catalog_client):
    resp = catalog_client.post("/api/v1/suppliers/", {"name": "Acme", "liaison_person_id": 999}, format="json")
    assert resp.status_code == 404


@pytest.mark.django_db
def test_list_search_and_read_without_capability():
    SupplierFactory(name="Blue Bottle")
    SupplierFactory(name="Red Caps")
    client = client_for(UserFactory())
    resp = client.get("/api/v1/suppliers/?q=blue")
    assert resp.status_code == 200
    assert [row["name"] for row in resp.json()["results"]] == ["Blue Bottle"]
    assert client.post("/api/v1/suppliers/", {"name": "X"}, format="json").status_code == 403


@pytest.mark.django_db
def test_update_and_delete(catalog_client):
    supplier = SupplierFactory()
    resp = catalog_client.patch(f"/api/v1/suppliers/{supplier.pk}/", {"notes": "Net 30"}, format="json")
    assert resp.status_code == 200
    assert resp.json()["data"]["notes"] == "Net 30"

    resp = catalog_client.delete(f"/api/v1/suppliers/{supplier.pk}/")
    assert resp.status_code == 200
    assert not Supplier.objects.filter(pk=supplier.pk).exists()
    assert catalog_client.get(f"/api/v1/suppliers/{supplier.pk}/").status_code == 404


@pytest.mark.django_db
def test_delete_refused_while_purchase_orders_exist(catalog_client):
    order = PurchaseOrderFactory()
    resp = catalog_client.delete(f"/api/v1/suppliers/{order.supplier_id}/")
    assert resp.status_code == 409
    assert resp.json()["error"]["kind"] == "precondition_failed"
