"""Analysis-related exceptions: file access, manifests, classification."""

from pathlib import Path
from typing import Optional

from .base import RouteLensError


class AnalysisError(RouteLensError):
    """Base class for analysis-related errors."""
    pass


class FileAccessError(AnalysisError):
    """Raised when a file or directory cannot be accessed or read."""

    def __init__(self, filepath: Path, reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ManifestError(AnalysisError):
    """Raised when the dependency manifest is missing or malformed."""

    def __init__(self, manifest_path: Path, reason: str):
        super().__init__(
            f"Invalid dependency manifest: {manifest_path}",
            details={"manifest": str(manifest_path), "reason": reason},
        )
        self.manifest_path = manifest_path
        self.reason = reason


class ProjectError(AnalysisError):
    """Raised when a directory does not look like a routable project."""

    def __init__(self, root: Path, reason: str):
        super().__init__(
            f"Not an analyzable project: {root}",
            details={"root": str(root), "reason": reason},
        )
        self.root = root
        self.reason = reason


class ClassificationError(AnalysisError):
    """Raised when a heuristic fails on a file's content."""

    def __init__(self, heuristic: str, reason: str, filepath: Optional[str] = None):
        details = {"heuristic": heuristic, "reason": reason}
        if filepath:
            details["filepath"] = filepath
        super().__init__(f"Heuristic '{heuristic}' failed", details=details)
        self.heuristic = heuristic
        self.reason = reason
        self.filepath = filepath


class MetricShapeError(AnalysisError):
    """Raised when two metric trees disagree on the shape of a leaf."""

    def __init__(self, path: str, left: str, right: str):
        super().__init__(
            f"Cannot merge metric '{path}'",
            details={"path": path, "left": left, "right": right},
        )
        self.path = path
        self.left = left
        self.right = right
