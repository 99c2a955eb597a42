"""Persistent store of analysis results keyed by snapshot content.

One JSON file per entry under ``history_dir``, named ``{key}.json`` where
the key is ``{analysis_type}_{sha256 of the snapshot content}``. The full
digest is used and the stored fingerprint is checked on every read, so an
unrelated snapshot can never be returned for a key.

Every failure on the read path (missing directory, unreadable or corrupt
file, key collision, expired entry) is a miss, never an error.
"""

import hashlib
import json
import os
import tempfile
import threading
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List, Optional

from ..exceptions import HistoryError
from ..logging_config import get_logger
from ..metrics.result import AnalysisResult
from ..snapshot.models import Snapshot
from .models import HistoryEntry

logger = get_logger(__name__)


def derive_key(analysis_type: str, snapshot: Snapshot) -> str:
    digest = hashlib.sha256(snapshot.content_key().encode()).hexdigest()
    return f"{analysis_type}_{digest}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class HistoryStore:
    """Analysis results by (analysis type, snapshot), with a validity window.

    Args:
        history_dir: Directory holding the entry files (created on first save)
        validity_hours: Per analysis type validity window
        default_validity_hours: Window for types not in ``validity_hours``
    """

    def __init__(
        self,
        history_dir: Path,
        validity_hours: Optional[Dict[str, float]] = None,
        default_validity_hours: float = 24.0,
    ):
        self.history_dir = Path(history_dir)
        self.validity_hours = dict(validity_hours or {})
        self.default_validity_hours = default_validity_hours
        self._memory: Dict[str, HistoryEntry] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._guard = threading.Lock()

    def validity_seconds(self, analysis_type: str) -> float:
        return self.validity_hours.get(analysis_type, self.default_validity_hours) * 3600

    def entry_path(self, key: str) -> Path:
        return self.history_dir / f"{key}.json"

    def lookup(
        self,
        analysis_type: str,
        snapshot: Snapshot,
        now: Optional[datetime] = None,
    ) -> Optional[HistoryEntry]:
        """Return a fresh entry for this snapshot, or None."""
        now = now or _utcnow()
        key = derive_key(analysis_type, snapshot)

        with self._guard:
            entry = self._memory.get(key)
        if entry is None:
            path = self.entry_path(key)
            if not path.is_file():
                logger.debug(f"History miss: {key[:24]}...")
                return None
            try:
                entry = self._load(path)
            except HistoryError as e:
                logger.warning(f"Ignoring history entry: {e}")
                return None
            with self._guard:
                self._memory.setdefault(key, entry)

        if (
            entry.analysis_type != analysis_type
            or entry.snapshot.fingerprint != snapshot.fingerprint
            or entry.snapshot.config_hash != snapshot.config_hash
        ):
            logger.warning(f"History key collision for {key[:24]}..., treating as miss")
            return None

        age = entry.age_seconds(now)
        if age > self.validity_seconds(analysis_type):
            logger.debug(f"History entry {key[:24]}... expired ({age:.0f}s old)")
            return None

        logger.debug(f"History hit: {key[:24]}...")
        return entry

    def save(
        self,
        analysis_type: str,
        snapshot: Snapshot,
        result: AnalysisResult,
        now: Optional[datetime] = None,
    ) -> HistoryEntry:
        """Persist a result; a later save for the same key replaces it."""
        key = derive_key(analysis_type, snapshot)
        entry = HistoryEntry(
            key=key,
            analysis_type=analysis_type,
            snapshot=snapshot,
            result=result,
            timestamp=(now or _utcnow()).isoformat(),
        )

        with self._key_lock(key):
            self.history_dir.mkdir(parents=True, exist_ok=True)
            self._write_atomic(self.entry_path(key), entry.to_dict())
            with self._guard:
                self._memory[key] = entry

        logger.debug(f"History saved: {key[:24]}...")
        return entry

    def latest(self, analysis_type: str, exclude_key: Optional[str] = None) -> Optional[HistoryEntry]:
        """Most recent entry of a type, regardless of snapshot or age."""
        best: Optional[HistoryEntry] = None
        for entry in self.entries(analysis_type):
            if entry.key == exclude_key:
                continue
            if best is None or entry.created_at > best.created_at:
                best = entry
        return best

    def entries(self, analysis_type: Optional[str] = None) -> List[HistoryEntry]:
        """All readable entries, optionally of one type; corrupt files are skipped."""
        found: Dict[str, HistoryEntry] = {}
        if self.history_dir.is_dir():
            pattern = f"{analysis_type}_*.json" if analysis_type else "*.json"
            for path in sorted(self.history_dir.glob(pattern)):
                try:
                    entry = self._load(path)
                except HistoryError as e:
                    logger.warning(f"Ignoring history entry: {e}")
                    continue
                found[entry.key] = entry
        with self._guard:
            for key, entry in self._memory.items():
                if analysis_type is None or entry.analysis_type == analysis_type:
                    found[key] = entry
        if analysis_type is not None:
            return [e for e in found.values() if e.analysis_type == analysis_type]
        return list(found.values())

    def prune(self, max_age_days: float, now: Optional[datetime] = None) -> int:
        """Delete entries older than ``max_age_days``; returns how many were removed."""
        now = now or _utcnow()
        cutoff = now - timedelta(days=max_age_days)
        removed = 0

        if not self.history_dir.is_dir():
            return 0

        for path in sorted(self.history_dir.glob("*.json")):
            try:
                entry = self._load(path)
            except HistoryError as e:
                logger.warning(f"Skipping during prune: {e}")
                continue
            if entry.created_at >= cutoff:
                continue
            with self._key_lock(entry.key):
                try:
                    path.unlink()
                except FileNotFoundError:
                    pass
                with self._guard:
                    self._memory.pop(entry.key, None)
            removed += 1

        logger.info(f"Pruned {removed} history entries older than {max_age_days} days")
        return removed

    # ── Private helpers ──────────────────────────────────────────────

    def _key_lock(self, key: str) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault(key, threading.Lock())

    def _load(self, path: Path) -> HistoryEntry:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise HistoryError(path, f"Cannot read: {e}")
        except json.JSONDecodeError as e:
            raise HistoryError(path, f"Corrupt JSON: {e.msg}")
        try:
            entry = HistoryEntry.from_dict(data)
            created_at = entry.created_at
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise HistoryError(path, f"Malformed entry: {e}")
        if created_at.tzinfo is None:
            raise HistoryError(path, "Timestamp has no timezone")
        return entry

    def _write_atomic(self, path: Path, data: dict) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
