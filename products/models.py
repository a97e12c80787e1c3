"""Product types, product series and products."""

from common.choices import ProductStatus
from common.models import TimeStampedModel
from django.db import models


class ProductType(TimeStampedModel):
    """A product category whose code prefixes every product code of its series."""

    name = models.CharField(max_length=60, unique=True)
    code = models.CharField(max_length=8, unique=True)
    color = models.CharField(max_length=16, default="#6b7280")
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)

    class Meta:
        ordering = ["code"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name


class ProductSeries(TimeStampedModel):
    name = models.CharField(max_length=120, unique=True)
    code = models.CharField(max_length=16, unique=True)
    product_type = models.CharField(max_length=8, default="ETC")
    description = models.TextField(blank=True)

    class Meta:
        ordering = ["code"]
        verbose_name_plural = "product series"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code} {self.name}"


class Product(TimeStampedModel):
    series = models.ForeignKey(ProductSeries, on_delete=models.PROTECT, related_name="products")
    name = models.CharField(max_length=120)
    code = models.CharField(max_length=32, unique=True)
    product_number = models.CharField(max_length=4)
    fragrance = models.ForeignKey(
        "fragrances.Fragrance",
        null=True,
        blank=True,
        on_delete=models.PROTECT,
        related_name="products",
    )
    specific_materials = models.ManyToManyField("materials.Material", blank=True, related_name="products")
    nicotine_mg = models.DecimalField(max_digits=8, decimal_places=3, default=0)
    target_production = models.DecimalField(max_digits=14, decimal_places=3, default=1)
    status = models.CharField(max_length=16, choices=ProductStatus.choices, default=ProductStatus.ACTIVE)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["code"]
        constraints = [
            models.UniqueConstraint(fields=["series", "product_number"], name="product_number_unique_per_series"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code} {self.name}"
