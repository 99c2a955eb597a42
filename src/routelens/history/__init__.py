"""Analysis history: persisted results, validity windows and change sets."""

from .diff import classify_trend, diff_results
from .models import ChangeSet, HistoryEntry, MetricChange, SetChange
from .store import HistoryStore, derive_key

__all__ = [
    "ChangeSet",
    "HistoryEntry",
    "HistoryStore",
    "MetricChange",
    "SetChange",
    "classify_trend",
    "derive_key",
    "diff_results",
]
