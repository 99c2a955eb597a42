"""Exception hierarchy for routelens."""

from .analysis import (
    AnalysisError,
    ClassificationError,
    FileAccessError,
    ManifestError,
    MetricShapeError,
    ProjectError,
)
from .base import RouteLensError
from .config import (
    ConfigurationError,
    InvalidConfigError,
    InvalidPathError,
)
from .history import HistoryError

__all__ = [
    "RouteLensError",
    "AnalysisError",
    "FileAccessError",
    "ManifestError",
    "ProjectError",
    "ClassificationError",
    "MetricShapeError",
    "ConfigurationError",
    "InvalidPathError",
    "InvalidConfigError",
    "HistoryError",
]
