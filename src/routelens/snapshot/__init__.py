"""Content snapshots used to decide whether re-analysis is needed."""

from .capture import hash_file, take_snapshot
from .models import Snapshot

__all__ = ["Snapshot", "hash_file", "take_snapshot"]
