"""
Time Scaling Module for CPU Scheduling Simulator

The engines only ever count whole ticks. Fractional inputs (an arrival at
0.25, a burst of 1.5) are multiplied by a power of ten so that every value
becomes an integer, the simulation runs on those integers, and the results
are divided back. This keeps completion checks exact: remaining time hits
zero instead of drifting around 1e-16.

Precision is capped (two decimal places by default); anything finer is
rounded to the nearest 0.01.

Author: Student
Date: October 2026
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable
import math

from config import DEFAULT_MAX_DECIMAL_PLACES


def count_decimals(value: float) -> int:
    """
    Count the decimal places actually used by a number.

    Integral values (including 3.0) use none; non-finite values are treated
    as integral.
    """
    if not math.isfinite(value) or float(value).is_integer():
        return 0
    exponent = Decimal(repr(float(value))).as_tuple().exponent
    return max(0, -exponent)


def compute_scale(values: Iterable[float], cap_decimals: int = DEFAULT_MAX_DECIMAL_PLACES) -> int:
    """
    Compute the power of ten that turns every value into an integer.

    Args:
        values: All numeric inputs of one simulation
        cap_decimals: Maximum decimal places honoured

    Returns:
        10 ** min(max decimals used, cap_decimals)
    """
    max_dp = max((count_decimals(v) for v in values), default=0)
    return 10 ** min(max_dp, cap_decimals)


def scale_to_int(value: float, scale: int) -> int:
    """Scale a value to integer ticks, rounding halves up."""
    return int(math.floor(value * scale + 0.5))


def unscale(value: float, scale: int) -> float:
    """Convert ticks back to the caller's time unit."""
    return value / scale


@dataclass(frozen=True)
class TimeScale:
    """
    A fixed conversion between caller time and integer ticks.

    Attributes:
        scale: Ticks per caller time unit (1, 10 or 100 with the default cap)
    """
    scale: int = 1

    @classmethod
    def from_values(cls, values: Iterable[float],
                    cap_decimals: int = DEFAULT_MAX_DECIMAL_PLACES) -> 'TimeScale':
        return cls(compute_scale(values, cap_decimals))

    @property
    def is_identity(self) -> bool:
        """True when all inputs were already integral."""
        return self.scale == 1

    def to_ticks(self, value: float) -> int:
        return scale_to_int(value, self.scale)

    def arrival_ticks(self, value: float) -> int:
        """Arrivals never become negative after rounding."""
        return max(0, self.to_ticks(value))

    def duration_ticks(self, value: float) -> int:
        """Bursts and quanta always last at least one tick."""
        return max(1, self.to_ticks(value))

    def cost_ticks(self, value: float) -> int:
        """Context switch costs may be zero."""
        return max(0, self.to_ticks(value))

    def to_time(self, ticks: float) -> float:
        return unscale(ticks, self.scale)
