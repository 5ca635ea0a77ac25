"""
Numeric Comparator Configuration

Define how numeric leaves of baseline vs candidate outputs should be compared.
to_rule() turns a configuration into a comparison rule for equal()/diff().
"""

import math
from numbers import Real

from .options import comparer, filter_values


class ComparatorConfig:
    """Configuration for numeric tolerance comparison."""

    # DEFAULT: Strict (for exact-match values like counts)
    numeric_tolerance = 0
    tolerance_mode = "relative"  # "relative" or "absolute"
    percentage_scale = None  # None (auto-detect), "ratio_0_1" or "percent_0_100"

    def __init__(self, numeric_tolerance=None, tolerance_mode=None, percentage_scale=None):
        if numeric_tolerance is not None:
            self.numeric_tolerance = numeric_tolerance
        if tolerance_mode is not None:
            if tolerance_mode not in ("relative", "absolute"):
                raise ValueError(f"tolerance_mode must be 'relative' or 'absolute', got {tolerance_mode!r}")
            self.tolerance_mode = tolerance_mode
        if percentage_scale is not None:
            self.percentage_scale = percentage_scale

    @classmethod
    def for_count_metrics(cls):
        """
        Config for exact-match values (counts, inventory, IDs).
        No tolerance: 0% drift allowed.
        """
        return cls(numeric_tolerance=0.0)

    @classmethod
    def for_profit_metrics(cls):
        """
        Config for profit/revenue values.
        Allow small rounding errors (1 cent per $100).
        """
        return cls(numeric_tolerance=0.0001)  # 0.01% drift

    @classmethod
    def for_aggregation_metrics(cls):
        """Config for COUNT/SUM/MEAN aggregations: 0.5% drift."""
        return cls(numeric_tolerance=0.005)

    @classmethod
    def for_percentage_metrics(cls):
        """
        Config for percentage/ratio values.
        Allow 1 percentage point absolute drift (not relative).

        For 0-1 scale (ratios): 0.01 absolute tolerance
        For 0-100 scale (percentages): 1.0 absolute tolerance
        """
        return cls(numeric_tolerance=1.0, tolerance_mode="absolute")

    @classmethod
    def preset(cls, name: str):
        """Look up a preset by short name: count, profit, aggregation, percentage."""
        presets = {
            'count': cls.for_count_metrics,
            'profit': cls.for_profit_metrics,
            'aggregation': cls.for_aggregation_metrics,
            'percentage': cls.for_percentage_metrics,
        }
        if name not in presets:
            raise ValueError(f"unknown tolerance preset {name!r}; expected one of {sorted(presets)}")
        return presets[name]()

    def effective_tolerance(self, x: float, y: float) -> float:
        """Absolute-mode tolerance after percentage scale detection."""
        if self.percentage_scale == "ratio_0_1":
            return self.numeric_tolerance / 100.0
        if self.percentage_scale == "percent_0_100":
            return self.numeric_tolerance
        # Auto-detect: values in 0-1.5 are ratios, 1 point = 0.01
        if max(abs(x), abs(y)) <= 1.5:
            return self.numeric_tolerance / 100.0
        return self.numeric_tolerance

    def within_tolerance(self, x, y) -> bool:
        """Symmetric tolerance check between two finite real numbers (int and float mix)."""
        x, y = float(x), float(y)
        if self.tolerance_mode == "absolute":
            tol = self.effective_tolerance(x, y)
            diff = abs(x - y)
            # small epsilon for floating-point comparison
            return diff < tol or abs(diff - tol) < 1e-9
        base = max(abs(x), abs(y))
        if base == 0:
            return True
        return abs(x - y) / base <= self.numeric_tolerance

    def to_rule(self):
        """Rule applying within_tolerance to every pair of finite real numbers, wherever they sit."""
        return filter_values(_finite_numbers, comparer(self.within_tolerance))

    def to_dict(self) -> dict:
        """Export config as dict for API responses."""
        return {
            'numeric_tolerance': self.numeric_tolerance,
            'tolerance_mode': self.tolerance_mode,
            'percentage_scale': self.percentage_scale
        }


def _finite_numbers(x, y) -> bool:
    for v in (x, y):
        if isinstance(v, bool) or not isinstance(v, Real) or not math.isfinite(v):
            return False
    return True
