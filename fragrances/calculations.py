"""Fragrance formulation arithmetic.

Up to 60% fragrance, PG tops the mix up to 60% and VG is a fixed 40%.
Above 60%, PG is 0 and VG fills the remainder.
"""

from decimal import ROUND_HALF_UP, Decimal

from common.numbers import validate_percentage

PG_CEILING = Decimal("60")
HUNDRED = Decimal("100")
TWO_PLACES = Decimal("0.01")


def _round2(value: Decimal) -> Decimal:
    return value.quantize(TWO_PLACES, rounding=ROUND_HALF_UP)


def calculate_pg_vg_ratios(percentage) -> tuple[Decimal, Decimal]:
    """Return ``(pg_ratio, vg_ratio)`` for a fragrance percentage."""
    pct = validate_percentage(percentage)
    if pct <= PG_CEILING:
        return _round2(PG_CEILING - pct), Decimal("40.00")
    return Decimal("0.00"), _round2(HUNDRED - pct)


def calculate_production_amounts(total, percentage) -> dict:
    """Split a production quantity into fragrance, PG and VG amounts."""
    total = Decimal(str(total))
    pct = validate_percentage(percentage)
    pg, vg = calculate_pg_vg_ratios(pct)
    fragrance_amount = _round2(total * pct / HUNDRED)
    pg_amount = _round2(total * pg / HUNDRED)
    vg_amount = _round2(total * vg / HUNDRED)
    return {
        "fragrance": fragrance_amount,
        "pg": pg_amount,
        "vg": vg_amount,
        "total": _round2(fragrance_amount + pg_amount + vg_amount),
    }
