from decimal import Decimal

import factory
from cart.models import CartItem
from common.choices import ItemType
from factory.django import DjangoModelFactory


class CartItemFactory(DjangoModelFactory):
    """Cart line for an existing item; pass ``item=`` to snapshot it."""

    class Meta:
        model = CartItem
        exclude = ("item",)

    item = factory.SubFactory("materials.tests.factories.MaterialFactory")
    item_type = factory.LazyAttribute(lambda o: o.item.item_type or ItemType.MATERIAL)
    item_id = factory.LazyAttribute(lambda o: o.item.pk)
    code = factory.LazyAttribute(lambda o: o.item.code)
    name = factory.LazyAttribute(lambda o: o.item.name)
    unit = factory.LazyAttribute(lambda o: o.item.unit)
    supplier = factory.SubFactory("suppliers.tests.factories.SupplierFactory")
    quantity = Decimal("5")
