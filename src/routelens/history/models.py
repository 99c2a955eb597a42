"""History entries and change sets between two analysis results."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from ..metrics.result import AnalysisResult, Finding
from ..snapshot.models import Snapshot


@dataclass
class HistoryEntry:
    """One persisted analysis result, keyed by analysis type and snapshot."""

    key: str
    analysis_type: str
    snapshot: Snapshot
    result: AnalysisResult
    timestamp: str  # ISO-8601, UTC

    @property
    def created_at(self) -> datetime:
        return datetime.fromisoformat(self.timestamp)

    def age_seconds(self, now: datetime) -> float:
        return (now - self.created_at).total_seconds()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "analysis_type": self.analysis_type,
            "timestamp": self.timestamp,
            "snapshot": self.snapshot.to_dict(),
            "result": self.result.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HistoryEntry":
        return cls(
            key=data["key"],
            analysis_type=data["analysis_type"],
            snapshot=Snapshot.from_dict(data["snapshot"]),
            result=AnalysisResult.from_dict(data["result"]),
            timestamp=data["timestamp"],
        )


@dataclass
class MetricChange:
    """Change in a single scalar metric between two results."""

    previous: float
    current: float
    delta: float  # current - previous
    trend: str  # "better" | "worse" | "neutral"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous": self.previous,
            "current": self.current,
            "delta": self.delta,
            "trend": self.trend,
        }


@dataclass
class SetChange:
    """Members added to or removed from a set metric."""

    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"added": list(self.added), "removed": list(self.removed)}


Change = Union[MetricChange, SetChange]


@dataclass
class ChangeSet:
    """Everything that differs between a previous result and the current one."""

    previous_timestamp: Optional[str] = None
    metrics: Dict[str, Change] = field(default_factory=dict)
    new_findings: List[Finding] = field(default_factory=list)
    resolved_findings: List[Finding] = field(default_factory=list)
    new_recommendations: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.metrics or self.new_findings or self.resolved_findings or self.new_recommendations
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous_timestamp": self.previous_timestamp,
            "metrics": {path: change.to_dict() for path, change in self.metrics.items()},
            "new_findings": [f.to_dict() for f in self.new_findings],
            "resolved_findings": [f.to_dict() for f in self.resolved_findings],
            "new_recommendations": list(self.new_recommendations),
        }
