from decimal import Decimal

import factory
from common.choices import ItemType, PurchaseOrderStatus
from factory.django import DjangoModelFactory
from purchasing.models import PurchaseOrder, PurchaseOrderItem


class PurchaseOrderFactory(DjangoModelFactory):
    class Meta:
        model = PurchaseOrder

    code = factory.Sequence(lambda n: f"PO-20250101-{n + 1:03d}")
    supplier = factory.SubFactory("suppliers.tests.factories.SupplierFactory")
    status = PurchaseOrderStatus.ORDERED


class PurchaseOrderItemFactory(DjangoModelFactory):
    """Line for an existing item; pass ``item=`` to snapshot it."""

    class Meta:
        model = PurchaseOrderItem
        exclude = ("item",)

    purchase_order = factory.SubFactory(PurchaseOrderFactory)
    item = factory.SubFactory("materials.tests.factories.MaterialFactory")
    item_type = factory.LazyAttribute(lambda o: o.item.item_type or ItemType.MATERIAL)
    item_id = factory.LazyAttribute(lambda o: o.item.pk)
    code = factory.LazyAttribute(lambda o: o.item.code)
    name = factory.LazyAttribute(lambda o: o.item.name)
    unit = factory.LazyAttribute(lambda o: o.item.unit)
    quantity = Decimal("10")
    cost_per_unit = Decimal("2")
