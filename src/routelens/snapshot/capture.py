"""Capture a content snapshot of a project's routing sources.

Only files the walker would visit are hashed, using the same skip rules,
so a change the walker would see always changes the fingerprint and a
change it would ignore never does.
"""

import hashlib
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, Iterator, Optional

from ..analysis.project import MANIFEST_NAME, discover_roots, find_middleware, find_next_config, load_manifest
from ..cache import compute_config_hash
from ..config import DEFAULT_CONFIG, AnalysisConfig
from ..logging_config import get_logger
from ..routing.filters import DirIdentity, dir_identity, relative_posix, should_skip_dir, should_skip_file
from .models import Snapshot

logger = get_logger(__name__)

UNREADABLE = "unreadable"


def hash_file(path: Path) -> str:
    """SHA-256 of a file's bytes."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def take_snapshot(
    root: Path,
    config: Optional[AnalysisConfig] = None,
    roots: Optional[Iterable[Path]] = None,
    middleware: Optional[Iterable[Path]] = None,
) -> Snapshot:
    """Hash the manifest, the framework config file and every routing source file.

    Parameters
    ----------
    root:
        Project root directory.
    config:
        Supplies the skip rules; defaults to ``DEFAULT_CONFIG``.
    roots, middleware:
        Routing roots and middleware files; discovered when omitted.

    Returns
    -------
    Snapshot
        Fingerprint is SHA-256 over the manifest hash and the sorted
        ``relpath hash`` lines. ``config_hash`` covers the settings that
        shape a result, so a config change never reuses a stored result.

    Raises
    ------
    ManifestError
        If ``package.json`` is missing or malformed.
    """
    root = Path(root)
    config = config or DEFAULT_CONFIG

    load_manifest(root)
    manifest_hash = hash_file(root / MANIFEST_NAME)

    if roots is None:
        roots = [r.path for r in discover_roots(root)]
    if middleware is None:
        middleware = find_middleware(root)

    file_hashes: Dict[str, str] = {}
    for routing_root in roots:
        for path in _iter_source_files(Path(routing_root), config, _identities(Path(routing_root))):
            file_hashes[relative_posix(path, root)] = _safe_hash(path)
    for path in middleware:
        file_hashes[relative_posix(Path(path), root)] = _safe_hash(Path(path))
    next_config = find_next_config(root)
    if next_config is not None:
        file_hashes[relative_posix(next_config, root)] = _safe_hash(next_config)

    return Snapshot(
        fingerprint=compute_fingerprint(manifest_hash, file_hashes),
        file_hashes=file_hashes,
        manifest_hash=manifest_hash,
        taken_at=datetime.now(timezone.utc).isoformat(),
        root=str(root),
        config_hash=compute_config_hash(config.result_key_fields()),
    )


def compute_fingerprint(manifest_hash: str, file_hashes: Dict[str, str]) -> str:
    digest = hashlib.sha256()
    digest.update(f"manifest {manifest_hash}\n".encode())
    for rel in sorted(file_hashes):
        digest.update(f"{rel} {file_hashes[rel]}\n".encode())
    return digest.hexdigest()


# ── Private helpers ──────────────────────────────────────────────────


def _identities(directory: Path) -> FrozenSet[DirIdentity]:
    try:
        return frozenset({dir_identity(directory)})
    except OSError:
        return frozenset()


def _iter_source_files(
    directory: Path, config: AnalysisConfig, ancestors: FrozenSet[DirIdentity]
) -> Iterator[Path]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.warning(f"Snapshot cannot read {directory}: {e}")
        return
    for entry in entries:
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if is_dir:
            if should_skip_dir(entry.name, config):
                continue
            try:
                identity = dir_identity(Path(entry.path))
            except OSError:
                continue
            if identity not in ancestors:
                yield from _iter_source_files(Path(entry.path), config, ancestors | {identity})
        elif not should_skip_file(entry.name, config):
            yield Path(entry.path)


def _safe_hash(path: Path) -> str:
    try:
        return hash_file(path)
    except OSError as e:
        logger.warning(f"Snapshot cannot hash {path}: {e}")
        return UNREADABLE
