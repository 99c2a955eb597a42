"""Robust statistics over complexity scores: percentiles and IQR fences."""

from typing import Dict, List, Sequence, Tuple

import numpy as np


class RobustStatistics:
    """Robust statistical methods resistant to outliers."""

    @staticmethod
    def iqr_bounds(values: Sequence[float], multiplier: float = 1.5) -> Tuple[float, float]:
        """
        Tukey fences: (Q1 - k*IQR, Q3 + k*IQR).

        Args:
            values: Non-empty sequence of values
            multiplier: IQR multiplier (default 1.5)

        Returns:
            (lower_bound, upper_bound)
        """
        q1 = float(np.percentile(values, 25))
        q3 = float(np.percentile(values, 75))
        iqr = q3 - q1
        return q1 - multiplier * iqr, q3 + multiplier * iqr

    @staticmethod
    def high_outliers(values: Sequence[float], multiplier: float = 1.5) -> List[bool]:
        """
        Flag values above the upper Tukey fence.

        Fewer than four values never produce outliers, and neither does
        a sample with zero spread.
        """
        if len(values) < 4:
            return [False] * len(values)
        _, upper = RobustStatistics.iqr_bounds(values, multiplier)
        if float(np.ptp(values)) == 0.0:
            return [False] * len(values)
        return [x > upper for x in values]

    @staticmethod
    def percentile_summary(values: Sequence[float]) -> Dict[str, float]:
        """p50/p90/max of a sample, rounded to 2 decimals; zeros when empty."""
        if len(values) == 0:
            return {"p50": 0.0, "p90": 0.0, "max": 0.0}
        arr = np.asarray(values, dtype=float)
        return {
            "p50": round(float(np.percentile(arr, 50)), 2),
            "p90": round(float(np.percentile(arr, 90)), 2),
            "max": round(float(arr.max()), 2),
        }
