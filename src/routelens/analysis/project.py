"""Project discovery: manifest, routing roots and middleware files."""

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from ..exceptions import InvalidPathError, ManifestError, ProjectError
from ..routing.models import RouterFamily

MANIFEST_NAME = "package.json"

# Checked in this order; both app and pages roots may coexist.
ROOT_CANDIDATES: Tuple[Tuple[str, RouterFamily], ...] = (
    ("app", RouterFamily.APP),
    ("src/app", RouterFamily.APP),
    ("pages", RouterFamily.PAGES),
    ("src/pages", RouterFamily.PAGES),
)

MIDDLEWARE_CANDIDATES = (
    "middleware.ts",
    "middleware.js",
    "middleware.mjs",
    "src/middleware.ts",
    "src/middleware.js",
    "src/middleware.mjs",
)

NEXT_CONFIG_NAMES = ("next.config.js", "next.config.mjs", "next.config.ts", "next.config.cjs")

_MAJOR_RE = re.compile(r"^\s*(?:[\^~=v<>]\s*)*(\d+)")


@dataclass(frozen=True)
class RouteRoot:
    path: Path
    family: RouterFamily


@dataclass(frozen=True)
class ProjectInfo:
    """What a project looks like before any file is read.

    Attributes:
        root: Project root directory
        manifest: Parsed dependency manifest
        next_version: Declared framework version, if any
        router: "app", "pages" or "hybrid"
        roots: Routing roots in discovery order
        middleware: Root-level middleware files
    """

    root: Path
    manifest: Dict[str, Any]
    next_version: Optional[str]
    router: str
    roots: Tuple[RouteRoot, ...]
    middleware: Tuple[Path, ...] = ()


def load_manifest(root: Path) -> Dict[str, Any]:
    """Read and validate ``package.json``.

    Raises:
        ManifestError: If the manifest is missing, unreadable or not a JSON object
    """
    manifest_path = Path(root) / MANIFEST_NAME
    if not manifest_path.is_file():
        raise ManifestError(manifest_path, "File not found")
    try:
        data = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(manifest_path, f"Cannot read manifest: {e}")
    except json.JSONDecodeError as e:
        raise ManifestError(manifest_path, f"Malformed JSON at line {e.lineno}: {e.msg}")
    if not isinstance(data, dict):
        raise ManifestError(manifest_path, "Manifest must be a JSON object")
    return data


def declared_version(manifest: Dict[str, Any], package: str = "next") -> Optional[str]:
    for section in ("dependencies", "devDependencies", "peerDependencies"):
        deps = manifest.get(section)
        if isinstance(deps, dict) and package in deps:
            return str(deps[package])
    return None


def major_version(version: Optional[str]) -> Optional[int]:
    """Major number of a version range (``^14.2.0`` -> 14); None for tags like ``latest``."""
    if not version:
        return None
    match = _MAJOR_RE.match(version)
    return int(match.group(1)) if match else None


def discover_roots(root: Path) -> Tuple[RouteRoot, ...]:
    root = Path(root)
    return tuple(
        RouteRoot(root / rel, family)
        for rel, family in ROOT_CANDIDATES
        if (root / rel).is_dir()
    )


def find_middleware(root: Path) -> Tuple[Path, ...]:
    root = Path(root)
    return tuple(root / rel for rel in MIDDLEWARE_CANDIDATES if (root / rel).is_file())


def find_next_config(root: Path) -> Optional[Path]:
    """First ``next.config.*`` file in the project root, if any."""
    root = Path(root)
    for name in NEXT_CONFIG_NAMES:
        if (root / name).is_file():
            return root / name
    return None


def inspect_project(root: Path) -> ProjectInfo:
    """Validate a project root and describe its routing layout.

    Raises:
        InvalidPathError: If ``root`` is missing or not a directory
        ManifestError: If ``package.json`` is missing or malformed
        ProjectError: If the project does not use file-based routing
    """
    root = Path(root)
    if not root.exists():
        raise InvalidPathError(root, "Path does not exist")
    if not root.is_dir():
        raise InvalidPathError(root, "Not a directory")

    manifest = load_manifest(root)
    version = declared_version(manifest)
    if version is None and find_next_config(root) is None:
        raise ProjectError(root, "No 'next' dependency and no next.config file")

    roots = discover_roots(root)
    if not roots:
        raise ProjectError(root, "No app/ or pages/ directory found")

    families = {r.family for r in roots}
    if families == {RouterFamily.APP, RouterFamily.PAGES}:
        router = "hybrid"
    else:
        router = next(iter(families)).value

    return ProjectInfo(
        root=root,
        manifest=manifest,
        next_version=version,
        router=router,
        roots=roots,
        middleware=find_middleware(root),
    )
