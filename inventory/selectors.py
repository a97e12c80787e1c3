"""Read-side queries for inventory dashboards."""

from decimal import Decimal

from common.choices import ItemType
from common.numbers import round3
from django.db.models import DecimalField, ExpressionWrapper, F, Sum

from .store import ITEM_MODELS, item_model


def _low_stock(qs):
    return qs.filter(safety_stock_level__gt=0, current_stock__lte=F("safety_stock_level"))


def inventory_overview() -> dict:
    """Counts, stock value and low-stock counts per item type."""
    value_expr = ExpressionWrapper(
        F("current_stock") * F("cost_per_unit"),
        output_field=DecimalField(max_digits=28, decimal_places=6),
    )
    sections = {}
    total_value = Decimal("0")
    for item_type in ITEM_MODELS:
        qs = item_model(item_type).objects.all()
        value = qs.aggregate(total=Sum(value_expr))["total"] or Decimal("0")
        sections[str(item_type)] = {
            "count": qs.count(),
            "total_value": value.quantize(Decimal("0.01")),
            "low_stock_count": _low_stock(qs).count(),
        }
        total_value += value
    return {
        "total_items": sum(section["count"] for section in sections.values()),
        "total_value": total_value.quantize(Decimal("0.01")),
        "low_stock_count": sum(section["low_stock_count"] for section in sections.values()),
        "by_type": sections,
    }


def low_stock_items(item_type: str | None = None) -> list[dict]:
    """Items at or below their safety level, largest shortage first."""
    types = [item_type] if item_type else list(ITEM_MODELS)
    rows = []
    for type_name in types:
        for item in _low_stock(item_model(type_name).objects.all()):
            rows.append(
                {
                    "item_type": str(ItemType(type_name)),
                    "item_id": item.pk,
                    "code": item.code,
                    "name": item.name,
                    "unit": item.unit,
                    "current_stock": item.current_stock,
                    "safety_stock_level": item.safety_stock_level,
                    "shortage": round3(item.safety_stock_level - item.current_stock),
                }
            )
    rows.sort(key=lambda row: (-row["shortage"], row["code"]))
    return rows


def item_code_in_use(code: str, *, exclude: tuple | None = None) -> bool:
    """Whether any stockable item already uses ``code`` (codes are unique across types)."""
    for item_type in ITEM_MODELS:
        qs = item_model(item_type).objects.filter(code__iexact=code)
        if exclude is not None and exclude[0] == item_type:
            qs = qs.exclude(pk=exclude[1])
        if qs.exists():
            return True
    return False


# EOF
