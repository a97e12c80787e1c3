"""Shared purchase cart.

There is one cart for the whole workshop: every line is visible to every
purchasing user until it is checked out into purchase orders.
"""

from common.choices import ItemType
from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class CartItem(TimeStampedModel):
    """A material or fragrance waiting to be ordered from a supplier."""

    item_type = models.CharField(max_length=16, choices=ItemType.choices)
    item_id = models.PositiveBigIntegerField()
    code = models.CharField(max_length=32)
    name = models.CharField(max_length=120)
    unit = models.CharField(max_length=16, blank=True)
    supplier = models.ForeignKey(
        "suppliers.Supplier", null=True, blank=True, on_delete=models.CASCADE, related_name="cart_items"
    )
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    notes = models.TextField(blank=True)
    added_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, null=True, blank=True, on_delete=models.SET_NULL, related_name="cart_items"
    )

    class Meta:
        ordering = ["id"]
        constraints = [
            models.UniqueConstraint(fields=["item_type", "item_id", "supplier"], name="unique_cart_line"),
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="cart_quantity_positive"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"CartItem#{self.id} {self.code} x {self.quantity}"
