"""Material code generation.

A code is nine characters: two letters from the main category, three digits
from the subcategory, and four random digits. Moving a material to another
category keeps its random part.
"""

import random
import string
import time

CODE_LENGTH = 9
MAX_ATTEMPTS = 10


def random_category_code() -> str:
    return "".join(random.choices(string.ascii_uppercase, k=2))


def random_subcategory_code() -> str:
    return "".join(random.choices(string.digits, k=3))


def random_part() -> str:
    return "".join(random.choices(string.digits, k=4))


def compose_material_code(category_code: str | None, subcategory_code: str | None, suffix: str | None = None) -> str:
    prefix = (category_code or "XX")[:2].upper()
    middle = (subcategory_code or "000").zfill(3)[:3]
    return f"{prefix}{middle}{suffix or random_part()}"


def parse_material_code(code: str) -> tuple[str, str, str]:
    """Split a code into (category, subcategory, random) parts."""
    return code[:2], code[2:5], code[5:9]


def recode_for_category(old_code: str, category_code: str | None, subcategory_code: str | None) -> str:
    if old_code and len(old_code) == CODE_LENGTH:
        _, _, suffix = parse_material_code(old_code)
        return compose_material_code(category_code, subcategory_code, suffix)
    return compose_material_code(category_code, subcategory_code)


def generate_unique_material_code(category_code, subcategory_code, *, exists) -> str:
    """Try random suffixes; fall back to a time-derived suffix."""
    for _ in range(MAX_ATTEMPTS):
        code = compose_material_code(category_code, subcategory_code)
        if not exists(code):
            return code
    stamp = str(int(time.time() * 1000))[-6:]
    return compose_material_code(category_code, subcategory_code, stamp[:4])
