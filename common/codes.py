"""Sequential daily document codes."""

from django.db import transaction
from django.utils import timezone

from .models import SequenceCounter


@transaction.atomic
def next_daily_code(prefix: str, *, day=None) -> str:
    """Allocate the next ``<prefix>-YYYYMMDD-NNN`` code for the given day."""
    day = day or timezone.localdate()
    counter, _ = SequenceCounter.objects.select_for_update().get_or_create(prefix=prefix, day=day)
    counter.value = int(counter.value) + 1
    counter.save(update_fields=["value"])
    return f"{prefix}-{day:%Y%m%d}-{counter.value:03d}"
