"""Work orders, their bill of materials and time entries."""

from common.choices import ItemType, QcStatus, WorkOrderStatus
from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class WorkOrder(TimeStampedModel):
    code = models.CharField(max_length=32, unique=True)
    product = models.ForeignKey(
        "products.Product",
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="work_orders",
    )
    product_snapshot = models.JSONField(default=dict, blank=True)
    target_quantity = models.DecimalField(max_digits=14, decimal_places=3)
    actual_quantity = models.DecimalField(max_digits=14, decimal_places=3, default=0)
    status = models.CharField(max_length=8, choices=WorkOrderStatus.choices, default=WorkOrderStatus.UNCONFIRMED)
    qc_status = models.CharField(max_length=8, choices=QcStatus.choices, default=QcStatus.PENDING)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="work_orders_created",
    )
    completed_at = models.DateTimeField(null=True, blank=True)
    completed_by = models.CharField(max_length=100, blank=True)
    completed_by_operator_id = models.CharField(max_length=64, blank=True)
    version = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["-created_at", "-id"]
        indexes = [models.Index(fields=["status"])]
        constraints = [
            models.CheckConstraint(condition=models.Q(target_quantity__gt=0), name="work_order_target_positive"),
            models.CheckConstraint(condition=models.Q(actual_quantity__gte=0), name="work_order_actual_non_negative"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return self.code

    @classmethod
    def stamp_lines(cls, pk, lines):
        """Record used quantities on the bill of materials."""
        for line in lines:
            BillOfMaterialsLine.objects.filter(
                work_order_id=pk,
                item_type=line["item_type"],
                item_id=line["item_id"],
            ).update(used_quantity=line["used_quantity"])


class BillOfMaterialsLine(models.Model):
    CATEGORY_CHOICES = [
        ("fragrance", "Fragrance"),
        ("pg", "PG"),
        ("vg", "VG"),
        ("nicotine", "Nicotine"),
        ("specific", "Product specific"),
        ("common", "Common"),
    ]

    work_order = models.ForeignKey(WorkOrder, on_delete=models.CASCADE, related_name="bom_lines")
    item_type = models.CharField(max_length=16, choices=ItemType.choices)
    item_id = models.BigIntegerField()
    code = models.CharField(max_length=32)
    name = models.CharField(max_length=120)
    unit = models.CharField(max_length=16, blank=True)
    category = models.CharField(max_length=16, choices=CATEGORY_CHOICES, default="common")
    quantity = models.DecimalField(max_digits=14, decimal_places=3)
    used_quantity = models.DecimalField(max_digits=14, decimal_places=3, null=True, blank=True)
    ratio = models.DecimalField(max_digits=8, decimal_places=3, null=True, blank=True)

    class Meta:
        ordering = ["id"]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code} x {self.quantity}"


class TimeEntry(TimeStampedModel):
    work_order = models.ForeignKey(WorkOrder, on_delete=models.CASCADE, related_name="time_entries")
    personnel = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        on_delete=models.SET_NULL,
        related_name="time_entries",
    )
    personnel_name = models.CharField(max_length=100)
    work_date = models.DateField()
    start_time = models.TimeField()
    end_time = models.TimeField()
    duration_hours = models.DecimalField(max_digits=6, decimal_places=3)
    notes = models.TextField(blank=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="+",
    )

    class Meta:
        ordering = ["work_date", "start_time"]
        verbose_name_plural = "time entries"
