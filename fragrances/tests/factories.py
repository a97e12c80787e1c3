from decimal import Decimal

import factory
from factory.django import DjangoModelFactory
from fragrances.models import Fragrance


class FragranceFactory(DjangoModelFactory):
    class Meta:
        model = Fragrance

    code = factory.Sequence(lambda n: f"FRAG{n:02d}")
    name = factory.Sequence(lambda n: f"Fragrance {n}")
    percentage = Decimal("10")
    pg_ratio = Decimal("50")
    vg_ratio = Decimal("40")
    current_stock = Decimal("5")
    unit = "KG"
