import random

from common.errors import Internal

MAX_ATTEMPTS = 100


def random_product_number() -> str:
    return str(random.randint(1000, 9999))


def compose_product_code(product_type: str, series_code: str, product_number: str) -> str:
    return f"{product_type or 'ETC'}-{series_code}-{product_number}"


def generate_product_number(*, exists) -> str:
    """Pick a 4-digit number for which ``exists(number)`` is false."""
    for _ in range(MAX_ATTEMPTS):
        number = random_product_number()
        if not exists(number):
            return number
    raise Internal("Could not allocate a unique product number")
