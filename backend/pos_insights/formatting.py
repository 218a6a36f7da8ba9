"""
Number helpers for insight messages.

Currency figures are grouped the Indonesian way (1.234.567,5) regardless of
message language; metadata always keeps the raw numbers.
"""

import math
from decimal import Decimal, ROUND_HALF_UP


def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for positives, like the POS client did."""
    return int(math.floor(value + 0.5))


def format_number(value, max_fraction_digits: int = 3) -> str:
    """id-ID grouping: '.' for thousands, ',' for decimals."""
    quantum = Decimal(1).scaleb(-max_fraction_digits)
    number = Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if number < 0 else ""
    number = abs(number)

    integer_part, _, fraction_part = f"{number:f}".partition(".")
    fraction_part = fraction_part.rstrip("0")

    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)

    text = ".".join(groups)
    if fraction_part:
        text = f"{text},{fraction_part}"
    if text == "0":
        sign = ""
    return f"{sign}{text}"


def format_currency(value) -> str:
    return f"Rp {format_number(value)}"
