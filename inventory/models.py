"""Inventory models.

``StockableItem`` is the abstract base for materials and fragrances. Stock
levels on those rows change only through ``inventory.protocol``; every change
leaves one ``StockMovement`` per item and one ``InventoryRecord`` per
logical operation.
"""

from common.choices import ChangeReason, ItemType, MovementType
from common.models import TimeStampedModel
from django.db import models
from django.utils import timezone


class ImmutableRecordError(Exception):
    pass


class StockableItem(TimeStampedModel):
    item_type = ""

    code = models.CharField(max_length=32, unique=True)
    name = models.CharField(max_length=120)
    current_stock = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    safety_stock_level = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    cost_per_unit = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    unit = models.CharField(max_length=16, default="KG")
    last_stock_update = models.DateTimeField(null=True, blank=True)
    # Compare-and-swap token; bumped on every stock write.
    version = models.PositiveIntegerField(default=0)

    class Meta:
        abstract = True
        constraints = [
            models.CheckConstraint(
                name="%(app_label)s_%(class)s_stock_non_negative",
                condition=models.Q(current_stock__gte=0),
            ),
        ]

    @property
    def is_low_stock(self) -> bool:
        return self.safety_stock_level > 0 and self.current_stock <= self.safety_stock_level

    @property
    def shortage(self):
        return max(self.safety_stock_level - self.current_stock, 0)

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code} {self.name} ({self.current_stock} {self.unit})"


class StockMovement(models.Model):
    """One signed stock delta for one item. Append-only."""

    TYPE_CHOICES = MovementType.choices

    item_type = models.CharField(max_length=16, choices=ItemType.choices)
    item_id = models.BigIntegerField()
    item_code = models.CharField(max_length=32)
    movement_type = models.CharField(max_length=24, choices=TYPE_CHOICES)
    quantity = models.DecimalField(max_digits=14, decimal_places=3)  # signed
    quantity_before = models.DecimalField(max_digits=14, decimal_places=3)
    quantity_after = models.DecimalField(max_digits=14, decimal_places=3)
    related_doc_type = models.CharField(max_length=32, blank=True)
    related_doc_id = models.CharField(max_length=64, blank=True)
    operator_id = models.CharField(max_length=64, blank=True)
    operator_name = models.CharField(max_length=120, blank=True)
    reason = models.CharField(max_length=255, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at", "-id"]
        constraints = [
            models.CheckConstraint(name="movement_non_zero", condition=~models.Q(quantity=0)),
            models.CheckConstraint(name="movement_after_non_negative", condition=models.Q(quantity_after__gte=0)),
        ]
        indexes = [
            models.Index(fields=["item_type", "item_id"]),
            models.Index(fields=["related_doc_type", "related_doc_id"]),
            models.Index(fields=["movement_type"]),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            raise ImmutableRecordError("Stock movements cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError("Stock movements cannot be deleted")

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.movement_type} {self.quantity} for {self.item_type}:{self.item_id}"


class InventoryRecord(models.Model):
    """Audit batch summarizing every line changed by one logical operation.

    Only ``remarks`` may be edited after creation, through
    ``inventory.services.update_record_remarks``.
    """

    EDITABLE_FIELDS = frozenset({"remarks", "remarks_updated_at"})

    change_reason = models.CharField(max_length=32, choices=ChangeReason.choices)
    operator_id = models.CharField(max_length=64, blank=True)
    operator_name = models.CharField(max_length=120, blank=True)
    remarks = models.TextField(blank=True)
    related_doc_type = models.CharField(max_length=32, blank=True)
    related_doc_id = models.CharField(max_length=64, blank=True)
    details = models.JSONField(default=list)
    created_at = models.DateTimeField(default=timezone.now)
    remarks_updated_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [
            models.Index(fields=["related_doc_type", "related_doc_id"]),
            models.Index(fields=["change_reason"]),
        ]

    def save(self, *args, **kwargs):
        if not self._state.adding:
            update_fields = kwargs.get("update_fields")
            if not update_fields or not set(update_fields) <= self.EDITABLE_FIELDS:
                raise ImmutableRecordError("Inventory records are immutable except for remarks")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise ImmutableRecordError("Inventory records cannot be deleted")

    @property
    def item_count(self) -> int:
        return len(self.details or [])

    def __str__(self) -> str:  # pragma: no cover
        return f"Record<{self.change_reason}> {self.related_doc_type}:{self.related_doc_id}"


# EOF
