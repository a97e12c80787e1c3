import factory
from factory.django import DjangoModelFactory
from products.models import Product, ProductSeries, ProductType


class ProductTypeFactory(DjangoModelFactory):
    class Meta:
        model = ProductType
        django_get_or_create = ("code",)

    code = factory.Sequence(lambda n: f"T{n:02d}")
    name = factory.LazyAttribute(lambda o: f"Type {o.code}")


class ProductSeriesFactory(DjangoModelFactory):
    class Meta:
        model = ProductSeries

    name = factory.Sequence(lambda n: f"Series {n}")
    code = factory.Sequence(lambda n: f"S{n:02d}")
    product_type = "BOT"


class ProductFactory(DjangoModelFactory):
    class Meta:
        model = Product

    series = factory.SubFactory(ProductSeriesFactory)
    name = factory.Sequence(lambda n: f"Product {n}")
    product_number = factory.Sequence(lambda n: f"{1000 + n % 9000}")
    code = factory.LazyAttribute(lambda o: f"{o.series.product_type}-{o.series.code}-{o.product_number}")
    fragrance = factory.SubFactory("fragrances.tests.factories.FragranceFactory")
