import pytest
from common.errors import Internal
from products.codes import compose_product_code, generate_product_number


def test_compose_product_code():
    assert compose_product_code("BOT", "MG", "1234") == "BOT-MG-1234"
    assert compose_product_code("", "MG", "1234") == "ETC-MG-1234"


def test_generate_skips_numbers_in_use():
    seen = []

    def exists(number):
        seen.append(number)
        return len(seen) < 3

    number = generate_product_number(exists=exists)
    assert number == seen[-1]
    assert len(number) == 4
    assert 1000 <= int(number) <= 9999


def test_generate_gives_up():
    with pytest.raises(Internal):
        generate_product_number(exists=lambda number: True)
