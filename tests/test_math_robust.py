"""Tests for routelens.math.robust."""

import numpy as np

from routelens.math import RobustStatistics


class TestIqrBounds:
    def test_known_values(self):
        lower, upper = RobustStatistics.iqr_bounds([1.0, 2.0, 3.0, 4.0, 5.0])
        # q1 = 2, q3 = 4, iqr = 2
        assert lower == -1.0
        assert upper == 7.0

    def test_numpy_input(self):
        lower, upper = RobustStatistics.iqr_bounds(np.array([1.0, 1.0, 1.0, 1.0]))
        assert lower == upper == 1.0


class TestHighOutliers:
    def test_single_outlier(self):
        assert RobustStatistics.high_outliers([1.0, 1.2, 0.9, 1.1, 50.0]) == [False, False, False, False, True]

    def test_small_samples_never_flag(self):
        assert RobustStatistics.high_outliers([1.0, 100.0, 1000.0]) == [False, False, False]

    def test_constant_sample(self):
        assert RobustStatistics.high_outliers([3.0] * 6) == [False] * 6


class TestPercentileSummary:
    def test_empty(self):
        assert RobustStatistics.percentile_summary([]) == {"p50": 0.0, "p90": 0.0, "max": 0.0}

    def test_values(self):
        summary = RobustStatistics.percentile_summary([1.0, 2.0, 3.0, 4.0, 10.0])
        assert summary["p50"] == 3.0
        assert summary["max"] == 10.0
        assert 4.0 < summary["p90"] < 10.0
