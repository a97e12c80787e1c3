from decimal import Decimal

import pytest
from common.errors import InvalidArgument
from fragrances.calculations import calculate_pg_vg_ratios, calculate_production_amounts


@pytest.mark.parametrize(
    "percentage,expected",
    [
        (0, (Decimal("60.00"), Decimal("40.00"))),
        (15, (Decimal("45.00"), Decimal("40.00"))),
        ("12.345", (Decimal("47.66"), Decimal("40.00"))),
        (60, (Decimal("0.00"), Decimal("40.00"))),
        (75, (Decimal("0.00"), Decimal("25.00"))),
        (100, (Decimal("0.00"), Decimal("0.00"))),
    ],
)
def test_pg_vg_ratios(percentage, expected):
    assert calculate_pg_vg_ratios(percentage) == expected


def test_percentage_out_of_range():
    with pytest.raises(InvalidArgument):
        calculate_pg_vg_ratios(101)
    with pytest.raises(InvalidArgument):
        calculate_pg_vg_ratios(-1)


def test_production_amounts_split_total():
    amounts = calculate_production_amounts(50, 10)
    assert amounts == {
        "fragrance": Decimal("5.00"),
        "pg": Decimal("25.00"),
        "vg": Decimal("20.00"),
        "total": Decimal("50.00"),
    }
