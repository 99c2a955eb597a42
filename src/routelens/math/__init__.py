"""Statistical helpers."""

from .robust import RobustStatistics

__all__ = ["RobustStatistics"]
