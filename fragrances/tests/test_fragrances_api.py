from decimal import Decimal

import pytest
from common.choices import FragranceStatus, RelatedDocType
from fragrances.models import Fragrance
from fragrances.tests.factories import FragranceFactory
from inventory.models import StockMovement
from materials.tests.factories import MaterialFactory
from products.tests.factories import ProductFactory
from users.permissions import Capability
from users.tests.factories import UserFactory, client_for, user_with


@pytest.fixture
def catalog_client():
    return client_for(user_with(Capability.CATALOG))


@pytest.mark.django_db
def test_create_computes_ratios(catalog_client):
    resp = catalog_client.post(
        "/api/v1/fragrances/",
        {"code": "FR-100", "name": "Mango", "percentage": 20, "fragrance_type": "棉芯"},
        format="json",
    )
    assert resp.status_code == 201
    fragrance = Fragrance.objects.get(code="FR-100")
    assert fragrance.pg_ratio == Decimal("40")
    assert fragrance.vg_ratio == Decimal("40")
    assert fragrance.fragrance_type == "棉芯"


@pytest.mark.django_db
def test_explicit_ratios_are_kept(catalog_client):
    resp = catalog_client.post(
        "/api/v1/fragrances/",
        {"code": "FR-101", "name": "Lime", "percentage": 20, "pg_ratio": 30, "vg_ratio": 50},
        format="json",
    )
    assert resp.status_code == 201
    fragrance = Fragrance.objects.get(code="FR-101")
    assert (fragrance.pg_ratio, fragrance.vg_ratio) == (Decimal("30"), Decimal("50"))


@pytest.mark.django_db
def test_code_is_required_and_unique_across_types(catalog_client):
    assert catalog_client.post("/api/v1/fragrances/", {"name": "No code"}, format="json").status_code == 400
    MaterialFactory(code="DUP01")
    resp = catalog_client.post("/api/v1/fragrances/", {"code": "DUP01", "name": "Dup"}, format="json")
    assert resp.status_code == 409


@pytest.mark.django_db
def test_percentage_out_of_range_is_invalid(catalog_client):
    resp = catalog_client.post("/api/v1/fragrances/", {"code": "F1", "name": "F", "percentage": 120}, format="json")
    assert resp.status_code == 400


@pytest.mark.django_db
def test_stock_edit_is_recorded(catalog_client):
    fragrance = FragranceFactory(current_stock=Decimal("5"))
    resp = catalog_client.patch(f"/api/v1/fragrances/{fragrance.pk}/", {"current_stock": "6.5"}, format="json")
    assert resp.status_code == 200
    movement = StockMovement.objects.get()
    assert movement.quantity == Decimal("1.5")
    assert movement.related_doc_type == RelatedDocType.FRAGRANCE_EDIT


@pytest.mark.django_db
def test_changing_percentage_recomputes_ratios(catalog_client):
    fragrance = FragranceFactory(percentage=Decimal("10"))
    resp = catalog_client.patch(f"/api/v1/fragrances/{fragrance.pk}/", {"percentage": 70}, format="json")
    assert resp.status_code == 200
    fragrance.refresh_from_db()
    assert (fragrance.pg_ratio, fragrance.vg_ratio) == (Decimal("0"), Decimal("30"))


@pytest.mark.django_db
def test_list_filters(catalog_client):
    FragranceFactory(name="Peach", fragrance_status="備用")
    FragranceFactory(name="Plum", fragrance_status="啟用")
    resp = catalog_client.get("/api/v1/fragrances/", {"fragrance_status": "備用"})
    assert [row["name"] for row in resp.json()["results"]] == ["Peach"]
    resp = catalog_client.get("/api/v1/fragrances/?q=plu")
    assert [row["name"] for row in resp.json()["results"]] == ["Plum"]


@pytest.mark.django_db
def test_delete_refused_while_products_use_it(catalog_client):
    product = ProductFactory()
    resp = catalog_client.delete(f"/api/v1/fragrances/{product.fragrance_id}/")
    assert resp.status_code == 409
    assert resp.json()["error"]["details"]["products"] == [product.code]


@pytest.mark.django_db
def test_delete_unused_fragrance(catalog_client):
    fragrance = FragranceFactory()
    assert catalog_client.delete(f"/api/v1/fragrances/{fragrance.pk}/").status_code == 200
    assert catalog_client.get(f"/api/v1/fragrances/{fragrance.pk}/").status_code == 404


@pytest.mark.django_db
def test_ratio_calculator_for_any_user():
    client = client_for(UserFactory())
    resp = client.post("/api/v1/fragrances/ratios/", {"percentage": 10, "total": 50}, format="json")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert Decimal(str(data["pg_ratio"])) == Decimal("50")
    assert Decimal(str(data["amounts"]["fragrance"])) == Decimal("5")


@pytest.mark.django_db
def test_usage_sync_recounts_products(catalog_client):
    used = FragranceFactory(fragrance_status=FragranceStatus.STANDBY)
    ProductFactory(fragrance=used)
    ProductFactory(fragrance=used)
    idle = FragranceFactory(fragrance_status=FragranceStatus.ACTIVE)
    discarded = FragranceFactory(fragrance_status=FragranceStatus.DISCARDED)
    ProductFactory(fragrance=discarded)
    versions = {fragrance.pk: fragrance.version for fragrance in (used, idle)}

    resp = catalog_client.post("/api/v1/fragrances/sync-usage/")

    assert resp.status_code == 200
    assert resp.json()["data"]["fragrance_ids"] == sorted([used.pk, idle.pk])
    used.refresh_from_db()
    idle.refresh_from_db()
    discarded.refresh_from_db()
    assert (used.fragrance_status, used.usage_count) == (FragranceStatus.ACTIVE, 2)
    assert (idle.fragrance_status, idle.usage_count) == (FragranceStatus.STANDBY, 0)
    assert (discarded.fragrance_status, discarded.usage_count) == (FragranceStatus.DISCARDED, 0)
    assert {used.pk: used.version, idle.pk: idle.version} == versions


@pytest.mark.django_db
def test_usage_sync_needs_catalog_permission():
    resp = client_for(UserFactory()).post("/api/v1/fragrances/sync-usage/")
    assert resp.status_code == 403
