from common.choices import PurchaseOrderStatus

from .models import PurchaseOrder

OPEN_STATUSES = (PurchaseOrderStatus.DRAFT, PurchaseOrderStatus.ORDERED)


def open_purchase_order_codes(item_type: str, item_id: int) -> list[str]:
    """Codes of draft or ordered purchase orders that include the item."""
    return list(
        PurchaseOrder.objects.filter(
            status__in=OPEN_STATUSES,
            items__item_type=item_type,
            items__item_id=item_id,
        )
        .order_by("code")
        .values_list("code", flat=True)
        .distinct()
    )
