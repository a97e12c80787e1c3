from decimal import Decimal

import factory
from factory.django import DjangoModelFactory
from materials.models import Material, MaterialCategory, MaterialSubCategory


class MaterialCategoryFactory(DjangoModelFactory):
    class Meta:
        model = MaterialCategory

    code = factory.Sequence(lambda n: f"{chr(65 + n // 26 % 26)}{chr(65 + n % 26)}")
    name = factory.Sequence(lambda n: f"Category {n}")


class MaterialSubCategoryFactory(DjangoModelFactory):
    class Meta:
        model = MaterialSubCategory

    category = factory.SubFactory(MaterialCategoryFactory)
    code = factory.Sequence(lambda n: f"{n % 1000:03d}")
    name = factory.Sequence(lambda n: f"Subcategory {n}")


class MaterialFactory(DjangoModelFactory):
    class Meta:
        model = Material

    code = factory.Sequence(lambda n: f"MAT{n:03d}")
    name = factory.Sequence(lambda n: f"Material {n}")
    current_stock = Decimal("10")
    safety_stock_level = Decimal("0")
    cost_per_unit = Decimal("1.5")
    unit = "KG"
