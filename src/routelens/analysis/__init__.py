"""Project discovery and analysis steps.

The engine lives in ``routelens.analysis.engine`` and is re-exported from
the top-level package; importing it here would make snapshot capture and
project discovery depend on each other at import time.
"""

from .project import (
    ProjectInfo,
    RouteRoot,
    discover_roots,
    find_middleware,
    find_next_config,
    inspect_project,
    load_manifest,
    major_version,
)

__all__ = [
    "ProjectInfo",
    "RouteRoot",
    "discover_roots",
    "find_middleware",
    "find_next_config",
    "inspect_project",
    "load_manifest",
    "major_version",
]
