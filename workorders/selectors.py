from common.choices import WorkOrderStatus

from .models import WorkOrder

CLOSED_STATUSES = (WorkOrderStatus.COMPLETED, WorkOrderStatus.STOCKED)


def _open():
    return WorkOrder.objects.exclude(status__in=CLOSED_STATUSES)


def open_work_order_codes(item_type: str, item_id: int) -> list[str]:
    """Codes of work orders not yet completed whose bill of materials uses the item."""
    return list(
        _open()
        .filter(bom_lines__item_type=item_type, bom_lines__item_id=item_id)
        .order_by("code")
        .values_list("code", flat=True)
        .distinct()
    )


def open_work_order_codes_for_product(product_id: int) -> list[str]:
    return list(_open().filter(product_id=product_id).order_by("code").values_list("code", flat=True))
