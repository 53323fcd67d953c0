from decimal import Decimal, ROUND_HALF_UP, InvalidOperation


def to_decimal(value) -> Decimal:
    """int/float/str/Decimal → Decimal (float는 str 경유로 이진 오차 제거)"""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValueError(f"not a number: {value!r}")


def round_half_up(value, places: int = 1) -> float:
    """소수점 places 자리 반올림 (0.05 → 0.1, 은행가 반올림 아님)"""
    exponent = Decimal(1).scaleb(-places)
    return float(to_decimal(value).quantize(exponent, rounding=ROUND_HALF_UP))
