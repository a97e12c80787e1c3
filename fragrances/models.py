"""Fragrance concentrates tracked as stock."""

from common.choices import FragranceStatus, FragranceType, ItemType
from django.db import models
from inventory.models import StockableItem


class Fragrance(StockableItem):
    item_type = ItemType.FRAGRANCE

    fragrance_type = models.CharField(max_length=16, choices=FragranceType.choices, default=FragranceType.COTTON)
    fragrance_status = models.CharField(
        max_length=16, choices=FragranceStatus.choices, default=FragranceStatus.STANDBY
    )
    supplier = models.ForeignKey(
        "suppliers.Supplier", null=True, blank=True, on_delete=models.SET_NULL, related_name="fragrances"
    )
    percentage = models.DecimalField(max_digits=6, decimal_places=3, default=0)
    pg_ratio = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    vg_ratio = models.DecimalField(max_digits=6, decimal_places=2, default=0)
    description = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    usage_count = models.PositiveIntegerField(default=0)
    last_used_at = models.DateTimeField(null=True, blank=True)

    class Meta(StockableItem.Meta):
        ordering = ["code"]
        indexes = [
            models.Index(fields=["fragrance_status"]),
        ]
