"""
Money helpers for delivery pricing.

All currency arithmetic runs on Decimal to avoid floating point drift.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[int, float, str, Decimal]

ZERO = Decimal("0")

def to_decimal(value: Number) -> Decimal:
    """숫자 값을 Decimal로 변환합니다 (float는 문자열을 거쳐 변환)."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TypeError("bool은 금액으로 사용할 수 없습니다")
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)

def round_half_up(value: Number) -> Decimal:
    """가장 가까운 정수로 반올림합니다 (0.5는 올림)."""
    return to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP)

def to_wire_number(value: Decimal) -> Union[int, float]:
    """JSON 직렬화를 위해 Decimal을 int 또는 float로 변환합니다."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)
