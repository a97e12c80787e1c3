import factory
from factory.django import DjangoModelFactory
from suppliers.models import Supplier


class SupplierFactory(DjangoModelFactory):
    class Meta:
        model = Supplier

    name = factory.Sequence(lambda n: f"Supplier {n}")
    products = "Bottles, caps"
    contact_method = "phone"
