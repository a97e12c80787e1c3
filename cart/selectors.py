from .models import CartItem


def cart_items(*, supplier_id=None):
    qs = CartItem.objects.select_related("supplier", "added_by").order_by("id")
    if supplier_id is not None:
        qs = qs.filter(supplier_id=supplier_id)
    return qs
