"""
Derived rates. A zero denominator always yields 0, never NaN or inf.

Rounding: display rates use one decimal, progress bars whole numbers,
money averages two decimals.
"""

DISPLAY_PRECISION = 1
PROGRESS_PRECISION = 0
MONEY_PRECISION = 2


def ratio(numerator: float, denominator: float) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def percentage(numerator: float, denominator: float, precision: int = DISPLAY_PRECISION) -> float:
    value = round(ratio(numerator, denominator) * 100, precision)
    if precision == PROGRESS_PRECISION:
        return int(value)
    return value


def average_per_entity(total: float, entity_count: int, precision: int = MONEY_PRECISION) -> float:
    return round(ratio(total, entity_count), precision)
