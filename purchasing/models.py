"""Purchase orders and their line items."""

from common.choices import ItemType, PurchaseOrderStatus
from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class PurchaseOrder(TimeStampedModel):
    code = models.CharField(max_length=32, unique=True)
    supplier = models.ForeignKey("suppliers.Supplier", on_delete=models.PROTECT, related_name="purchase_orders")
    status = models.CharField(max_length=8, choices=PurchaseOrderStatus.choices, default=PurchaseOrderStatus.DRAFT)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="purchase_orders_created",
    )
    received_at = models.DateTimeField(null=True, blank=True)
    received_by = models.CharField(max_length=100, blank=True)
    received_by_operator_id = models.CharField(max_length=64, blank=True)
    version = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["status"])]

    def __str__(self) -> str:  # pragma: no cover
        return self.code

    @classmethod
    def stamp_lines(cls, pk, lines):
        """Record received quantities on the order's line items."""
        for line in lines:
            PurchaseOrderItem.objects.filter(purchase_order_id=pk, pk=line["line_id"]).update(
                received_quantity=line["received_quantity"]
            )


class PurchaseOrderItem(models.Model):
    purchase_order = models.ForeignKey(PurchaseOrder, on_delete=models.CASCADE, related_name="items")
    item_type = models.CharField(max_length=16, choices=ItemType.choices)
    # Plain id so the line survives deletion of the item it was ordered for.
    item_id = models.BigIntegerField()
    code = models.CharField(max_length=32)
    name = models.CharField(max_length=120)
    unit = models.CharField(max_length=16, blank=True)
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    cost_per_unit = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    product_capacity_kg = models.DecimalField(max_digits=14, decimal_places=3, null=True, blank=True)
    fragrance_percentage = models.DecimalField(max_digits=6, decimal_places=3, null=True, blank=True)
    received_quantity = models.DecimalField(max_digits=14, decimal_places=3, null=True, blank=True)

    class Meta:
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(condition=models.Q(quantity__gt=0), name="po_item_quantity_positive"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code} x {self.quantity}"

    @property
    def item_ref_path(self) -> str:
        return f"{self.item_type}s/{self.item_id}"
