from __future__ import annotations

import math

from hr_reporting.services.rates import (
    PROGRESS_PRECISION,
    average_per_entity,
    percentage,
    ratio,
)


class TestRates:
    def test_zero_denominator_is_zero(self) -> None:
        assert ratio(5, 0) == 0.0
        assert percentage(5, 0) == 0.0
        assert average_per_entity(1000, 0) == 0.0
        assert not math.isnan(percentage(0, 0))

    def test_percentage_one_decimal(self) -> None:
        assert percentage(6, 10) == 60.0
        assert percentage(1, 3) == 33.3

    def test_progress_precision_is_integer(self) -> None:
        value = percentage(2, 3, PROGRESS_PRECISION)
        assert value == 67
        assert isinstance(value, int)

    def test_average_two_decimals(self) -> None:
        assert average_per_entity(1000, 3) == 333.33
