"""Supplier directory."""

from common.models import TimeStampedModel
from django.conf import settings
from django.db import models


class Supplier(TimeStampedModel):
    name = models.CharField(max_length=120, unique=True)
    products = models.TextField(blank=True, help_text="What this supplier provides")
    contact_window = models.CharField(max_length=120, blank=True)
    contact_method = models.CharField(max_length=120, blank=True)
    liaison_person = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name="liaison_suppliers",
    )
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["name"]

    def __str__(self) -> str:  # pragma: no cover
        return self.name
