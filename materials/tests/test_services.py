from decimal import Decimal

import pytest
from common.errors import InvalidArgument
from common.identity import Operator
from django.db import connection
from inventory.models import StockMovement
from materials import services
from materials.tests.factories import MaterialFactory

OPERATOR = Operator(id="1", name="Tester")


@pytest.mark.django_db
def test_stock_edit_runs_after_field_transaction(monkeypatch):
    material = MaterialFactory(current_stock=Decimal("10"))
    outer_depth = len(connection.atomic_blocks)
    depths = []
    original = services.set_stock_from_edit

    def recording(**kwargs):
        depths.append(len(connection.atomic_blocks))
        return original(**kwargs)

    monkeypatch.setattr(services, "set_stock_from_edit", recording)

    updated = services.update_material(material_id=material.pk, operator=OPERATOR, notes="recount", current_stock=4)

    assert depths == [outer_depth]
    assert updated.notes == "recount"
    assert updated.current_stock == Decimal("4")
    assert StockMovement.objects.get().quantity == Decimal("-6")


@pytest.mark.django_db
def test_invalid_stock_is_rejected_before_fields_are_saved():
    material = MaterialFactory(notes="old", current_stock=Decimal("10"))

    with pytest.raises(InvalidArgument):
        services.update_material(material_id=material.pk, operator=OPERATOR, notes="new", current_stock=-1)

    material.refresh_from_db()
    assert material.notes == "old"
    assert material.current_stock == Decimal("10")
    assert not StockMovement.objects.exists()
