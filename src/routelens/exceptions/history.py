"""History store exceptions."""

from pathlib import Path

from .base import RouteLensError


class HistoryError(RouteLensError):
    """Raised when a persisted history entry cannot be used.

    The history store never lets this escape a lookup: a corrupt or
    unreadable entry is reported as a cache miss.
    """

    def __init__(self, entry_path: Path, reason: str):
        super().__init__(
            f"Unusable history entry: {entry_path}",
            details={"entry": str(entry_path), "reason": reason},
        )
        self.entry_path = entry_path
        self.reason = reason
