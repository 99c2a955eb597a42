"""JSON report writer: one file per analysis run under the logs directory."""

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Optional

from .. import __version__

if TYPE_CHECKING:
    from ..analysis.engine import AnalysisOutcome


def report_filename(analysis_type: str, when: Optional[datetime] = None) -> str:
    when = when or datetime.now(timezone.utc)
    return f"{when.strftime('%Y%m%d-%H%M%S')}_{analysis_type}.json"


def build_report(outcome: "AnalysisOutcome") -> Dict[str, Any]:
    """JSON-serializable view of an outcome."""
    snapshot = outcome.snapshot
    return {
        "tool_version": __version__,
        "analysis_type": outcome.analysis_type,
        "generated_at": outcome.timestamp,
        "from_history": outcome.from_history,
        "snapshot": {
            "fingerprint": snapshot.fingerprint,
            "files": snapshot.file_count,
            "taken_at": snapshot.taken_at,
            "root": snapshot.root,
        },
        "result": outcome.result.to_dict(),
        "changes": outcome.changes.to_dict() if outcome.changes is not None else None,
    }


def write_report(
    logs_dir: Path,
    analysis_type: str,
    outcome: "AnalysisOutcome",
    when: Optional[datetime] = None,
) -> Path:
    """Write ``{logs_dir}/{YYYYmmdd-HHMMSS}_{type}.json`` and return its path.

    Raises:
        OSError: If the directory or file cannot be written
    """
    logs_dir = Path(logs_dir)
    logs_dir.mkdir(parents=True, exist_ok=True)
    path = logs_dir / report_filename(analysis_type, when)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(build_report(outcome), f, indent=2)
    return path
