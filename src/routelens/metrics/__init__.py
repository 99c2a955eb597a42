"""Metric trees, analysis results, and the aggregator."""

from .result import AnalysisResult, Finding, Severity, merge_all, merge_results
from .tree import Node, Scalar, StringSet, counter, counters, members, merge

__all__ = [
    "AnalysisResult",
    "Finding",
    "Severity",
    "merge_all",
    "merge_results",
    "Node",
    "Scalar",
    "StringSet",
    "counter",
    "counters",
    "members",
    "merge",
]
