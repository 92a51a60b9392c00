from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable


def round_money(value: float) -> float:
    """Round to cents, half-up"""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def sum_money(values: Iterable[float]) -> float:
    return round_money(sum(float(v or 0) for v in values))
