"""Shared test fixtures: on-disk projects built under tmp_path."""

import json
from pathlib import Path
from typing import Dict, Optional

import pytest

from routelens.config import AnalysisConfig

THREE_ROUTES = {
    "app/[id]/page.ts": "export default function Item() { return null }\n",
    "app/blog/[...slug]/page.ts": "export default function Post() { return null }\n",
    "app/api/users/route.ts": (
        "export async function GET() {\n"
        "  return Response.json([])\n"
        "}\n"
        "export async function POST(request) {\n"
        "  return Response.json({})\n"
        "}\n"
    ),
}


def write_project(
    root: Path,
    files: Dict[str, str],
    dependencies: Optional[Dict[str, str]] = None,
) -> Path:
    """Write a package.json plus ``files`` (relative path -> text) under ``root``."""
    root.mkdir(parents=True, exist_ok=True)
    manifest = {
        "name": "fixture-app",
        "dependencies": {"next": "14.2.0", "react": "18.2.0"} if dependencies is None else dependencies,
    }
    (root / "package.json").write_text(json.dumps(manifest), encoding="utf-8")
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def make_project(tmp_path):
    """Factory: make_project(files, dependencies=None, name='site') -> Path."""

    def factory(files: Dict[str, str], dependencies: Optional[Dict[str, str]] = None, name: str = "site") -> Path:
        return write_project(tmp_path / name, files, dependencies)

    return factory


@pytest.fixture
def three_route_project(make_project):
    return make_project(THREE_ROUTES)


@pytest.fixture
def config():
    """Config with no persistence side effects."""
    return AnalysisConfig(enable_history=False, write_reports=False)


@pytest.fixture
def persistent_config():
    """Config that keeps history and reports under the project root."""
    return AnalysisConfig(enable_history=True, write_reports=True)
