from decimal import Decimal
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError
from fragrances.tests.factories import FragranceFactory
from materials.tests.factories import MaterialFactory


@pytest.mark.django_db
def test_lists_low_stock_items():
    short = MaterialFactory(current_stock=Decimal("1"), safety_stock_level=Decimal("4"))
    MaterialFactory(current_stock=Decimal("9"), safety_stock_level=Decimal("4"))
    FragranceFactory(current_stock=Decimal("0"), safety_stock_level=Decimal("0"))

    out = StringIO()
    call_command("low_stock_report", stdout=out)

    output = out.getvalue()
    assert short.code in output
    assert "Low-stock items: 1" in output


@pytest.mark.django_db
def test_fail_on_shortage():
    MaterialFactory(current_stock=Decimal("1"), safety_stock_level=Decimal("4"))
    with pytest.raises(CommandError):
        call_command("low_stock_report", "--fail-on-shortage", stdout=StringIO())


@pytest.mark.django_db
def test_filters_by_type():
    MaterialFactory(current_stock=Decimal("1"), safety_stock_level=Decimal("4"))
    out = StringIO()
    call_command("low_stock_report", "--type", "fragrance", "--fail-on-shortage", stdout=out)
    assert "Low-stock items: 0" in out.getvalue()
