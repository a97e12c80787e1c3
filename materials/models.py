"""Raw materials and their two-level categorization.

Material codes are ``<category code><subcategory code><4 random digits>``,
e.g. ``AB0421234``; see ``materials.codes``.
"""

from common.choices import ItemType
from common.models import TimeStampedModel
from django.db import models
from inventory.models import StockableItem


class MaterialCategory(TimeStampedModel):
    code = models.CharField(max_length=2, unique=True)  # two uppercase letters
    name = models.CharField(max_length=60, unique=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "material categories"

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code} {self.name}"


class MaterialSubCategory(TimeStampedModel):
    category = models.ForeignKey(MaterialCategory, on_delete=models.CASCADE, related_name="subcategories")
    code = models.CharField(max_length=3)  # three digits
    name = models.CharField(max_length=60)

    class Meta:
        ordering = ["category__name", "name"]
        verbose_name_plural = "material subcategories"
        constraints = [
            models.UniqueConstraint(fields=["category", "name"], name="unique_subcategory_name_per_category"),
            models.UniqueConstraint(fields=["category", "code"], name="unique_subcategory_code_per_category"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.category.code}{self.code} {self.name}"


class Material(StockableItem):
    item_type = ItemType.MATERIAL

    category = models.ForeignKey(
        MaterialCategory, null=True, blank=True, on_delete=models.PROTECT, related_name="materials"
    )
    subcategory = models.ForeignKey(
        MaterialSubCategory, null=True, blank=True, on_delete=models.PROTECT, related_name="materials"
    )
    supplier = models.ForeignKey(
        "suppliers.Supplier", null=True, blank=True, on_delete=models.SET_NULL, related_name="materials"
    )
    specs = models.CharField(max_length=200, blank=True)
    notes = models.TextField(blank=True)

    class Meta(StockableItem.Meta):
        ordering = ["code"]
        indexes = [
            models.Index(fields=["name"]),
        ]
