"""Numeric policy for stock quantities and prices.

Quantities are decimals normalized to at most three fractional digits
(half-up) at every boundary: operands before arithmetic and results after.
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .errors import InvalidArgument

QUANTUM = Decimal("0.001")
ZERO = Decimal("0.000")
# Widest value the 14-digit, 3-place stock columns hold.
MAX_QUANTITY = Decimal("99999999999.999")


def to_decimal(value, field: str = "value") -> Decimal:
    if isinstance(value, Decimal):
        result = value
    else:
        if isinstance(value, bool) or value is None:
            raise InvalidArgument(f"{field} must be a number", details={"field": field})
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidArgument(f"{field} must be a number", details={"field": field})
    if not result.is_finite():
        raise InvalidArgument(f"{field} must be a finite number", details={"field": field})
    return result


def round3(value, field: str = "value") -> Decimal:
    """Normalize a quantity to three decimal places.

    Magnitudes beyond ``MAX_QUANTITY`` raise ``InvalidArgument``.
    """
    try:
        amount = to_decimal(value, field).quantize(QUANTUM, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        amount = None
    if amount is None or abs(amount) > MAX_QUANTITY:
        raise InvalidArgument(f"{field} is out of range", details={"field": field, "max": str(MAX_QUANTITY)})
    return amount


def validate_stock(value, field: str = "current_stock") -> Decimal:
    amount = round3(value, field)
    if amount < 0:
        raise InvalidArgument(f"{field} cannot be negative", details={"field": field})
    return amount


def validate_percentage(value, field: str = "percentage") -> Decimal:
    amount = round3(value, field)
    if amount < 0 or amount > 100:
        raise InvalidArgument(f"{field} must be between 0 and 100", details={"field": field})
    return amount


def validate_price(value, field: str = "cost_per_unit") -> Decimal:
    amount = round3(value, field)
    if amount < 0:
        raise InvalidArgument(f"{field} cannot be negative", details={"field": field})
    return amount
