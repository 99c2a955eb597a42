"""Skip rules shared by the walker and the snapshot engine.

Both must agree on which files are visited, otherwise a snapshot could
stay unchanged while classified content changes. That includes symlinked
directories: a directory whose identity matches one of its ancestors is a
loop and is not entered.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Tuple

from ..config import AnalysisConfig

DirIdentity = Tuple[int, int]


def is_hidden(name: str) -> bool:
    return name.startswith(".")


def is_private(name: str, private_prefix: str) -> bool:
    return bool(private_prefix) and name.startswith(private_prefix)


def should_skip_dir(name: str, config: AnalysisConfig) -> bool:
    """Directories that are never traversed."""
    if name == "node_modules":
        return True
    if is_hidden(name) and not config.allow_hidden_files:
        return True
    return is_private(name, config.private_prefix)


def should_skip_file(name: str, config: AnalysisConfig) -> bool:
    """Files that are never read."""
    if is_hidden(name) and not config.allow_hidden_files:
        return True
    if is_private(name, config.private_prefix):
        return True
    return not has_source_extension(name, config.source_extensions)


def dir_identity(path: Path) -> DirIdentity:
    """(st_dev, st_ino) of a directory, following symlinks; raises OSError."""
    st = os.stat(path)
    return st.st_dev, st.st_ino


def has_source_extension(name: str, extensions: Iterable[str]) -> bool:
    return any(name.endswith(ext) and len(name) > len(ext) for ext in extensions)


def relative_posix(path: Path, root: Path) -> str:
    """Project-relative path with forward slashes, or the absolute path."""
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()
