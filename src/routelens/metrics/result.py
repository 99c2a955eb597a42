"""Analysis results and the aggregator that merges them.

``merge_results`` is the only way partial results are combined. Metrics
merge per the MetricTree rules; findings, recommendations and route
records are concatenated in order, never deduplicated.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, cast

from ..routing.models import RouteRecord
from .tree import EMPTY, Node, from_plain, merge, to_plain


class Severity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Finding:
    """A single observation emitted during analysis.

    Equality ignores ``details`` so findings can be compared across runs.
    """

    severity: Severity
    category: str
    message: str
    file: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "severity": self.severity.value,
            "category": self.category,
            "message": self.message,
            "file": self.file,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Finding":
        return cls(
            severity=Severity(data["severity"]),
            category=data["category"],
            message=data["message"],
            file=data.get("file"),
            details=dict(data.get("details") or {}),
        )


@dataclass
class AnalysisResult:
    """Metrics, findings, recommendations and route records of one analysis."""

    metrics: Node = EMPTY
    findings: List[Finding] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    routes: List[RouteRecord] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metrics": to_plain(self.metrics),
            "findings": [f.to_dict() for f in self.findings],
            "recommendations": list(self.recommendations),
            "routes": [r.to_dict() for r in self.routes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnalysisResult":
        metrics = from_plain(data.get("metrics") or {})
        if not isinstance(metrics, Node):
            raise TypeError("metrics must be a mapping")
        return cls(
            metrics=metrics,
            findings=[Finding.from_dict(f) for f in data.get("findings", [])],
            recommendations=list(data.get("recommendations", [])),
            routes=[RouteRecord.from_dict(r) for r in data.get("routes", [])],
        )


def merge_results(target: AnalysisResult, source: AnalysisResult) -> AnalysisResult:
    """Merge ``source`` into a new result that starts from ``target``."""
    return AnalysisResult(
        metrics=cast(Node, merge(target.metrics, source.metrics)),
        findings=target.findings + source.findings,
        recommendations=target.recommendations + source.recommendations,
        routes=target.routes + source.routes,
    )


def merge_all(results: Iterable[Optional[AnalysisResult]]) -> AnalysisResult:
    """Left fold of ``merge_results``; ``None`` entries are skipped."""
    total = AnalysisResult()
    for result in results:
        if result is not None:
            total = merge_results(total, result)
    return total
