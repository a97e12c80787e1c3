"""Abstract base models and shared counters."""

from django.db import models


class TimeStampedModel(models.Model):
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True


class SequenceCounter(models.Model):
    """Per-prefix, per-day counter backing document codes like ``PO-20250101-001``."""

    prefix = models.CharField(max_length=8)
    day = models.DateField()
    value = models.PositiveIntegerField(default=0)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["prefix", "day"], name="unique_counter_prefix_day"),
        ]

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.prefix}@{self.day}={self.value}"
