"""Convention pattern detector.

A fixed table of named structural conventions. Path-level conventions are
matched against a composed route path that still carries its raw segment
names (``app/(shop)/@modal/(.)item/[id]``); content-level conventions are
matched against file text. Every pattern is tested independently, so one
input can match several conventions at once.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Pattern, Tuple

from .models import PatternMatch


class PatternType(str, Enum):
    """Named conventions the detector knows about."""

    # Path-level
    DYNAMIC = "dynamic"
    CATCH_ALL = "catch-all"
    OPTIONAL_CATCH_ALL = "optional-catch-all"
    API = "api"
    ROUTE_GROUP = "route-group"
    PARALLEL = "parallel"
    INTERCEPTING = "intercepting"

    # Content-level
    SERVER_ACTION = "server-action"
    CLIENT_COMPONENT = "client-component"
    STATIC_PARAMS = "static-params"
    EDGE_RUNTIME = "edge-runtime"
    FORCE_DYNAMIC = "force-dynamic"


class Target(str, Enum):
    PATH = "path"
    CONTENT = "content"


@dataclass(frozen=True)
class ConventionPattern:
    type: PatternType
    target: Target
    regex: Pattern[str]
    description: str


CONVENTIONS: Tuple[ConventionPattern, ...] = (
    ConventionPattern(
        PatternType.DYNAMIC,
        Target.PATH,
        re.compile(r"\[[^/]+\]"),
        "Dynamic segment resolved at request time",
    ),
    ConventionPattern(
        PatternType.CATCH_ALL,
        Target.PATH,
        re.compile(r"(?<!\[)\[\.\.\.[^\[\]/]+\](?!\])"),
        "Catch-all segment capturing one or more path parts",
    ),
    ConventionPattern(
        PatternType.OPTIONAL_CATCH_ALL,
        Target.PATH,
        re.compile(r"\[\[\.\.\.[^\[\]/]+\]\]"),
        "Optional catch-all segment capturing zero or more path parts",
    ),
    ConventionPattern(
        PatternType.API,
        Target.PATH,
        re.compile(r"(?:^|/)api(?:/|$)"),
        "API endpoint namespace",
    ),
    ConventionPattern(
        PatternType.ROUTE_GROUP,
        Target.PATH,
        re.compile(r"(?:^|/)\([^/().][^/()]*\)(?=/|$)"),
        "Route group that does not appear in the URL",
    ),
    ConventionPattern(
        PatternType.PARALLEL,
        Target.PATH,
        re.compile(r"(?:^|/)@[^/]+"),
        "Parallel route slot",
    ),
    ConventionPattern(
        PatternType.INTERCEPTING,
        Target.PATH,
        re.compile(r"(?:^|/)(?:\(\.\.\.\)|(?:\(\.\.\))+|\(\.\))[^/]+"),
        "Intercepting route overriding navigation to another route",
    ),
    ConventionPattern(
        PatternType.SERVER_ACTION,
        Target.CONTENT,
        re.compile(r"""["']use server["']"""),
        "Server action directive",
    ),
    ConventionPattern(
        PatternType.CLIENT_COMPONENT,
        Target.CONTENT,
        re.compile(r"""^\s*["']use client["']""", re.MULTILINE),
        "Client component directive",
    ),
    ConventionPattern(
        PatternType.STATIC_PARAMS,
        Target.CONTENT,
        re.compile(r"\b(?:generateStaticParams|getStaticPaths)\b"),
        "Static parameter generation for dynamic segments",
    ),
    ConventionPattern(
        PatternType.EDGE_RUNTIME,
        Target.CONTENT,
        re.compile(r"""export\s+const\s+runtime\s*=\s*["']edge["']"""),
        "Edge runtime route segment config",
    ),
    ConventionPattern(
        PatternType.FORCE_DYNAMIC,
        Target.CONTENT,
        re.compile(r"""export\s+const\s+dynamic\s*=\s*["']force-dynamic["']"""),
        "Route segment forced to render dynamically",
    ),
)


def _detect(text: str, target: Target) -> List[PatternMatch]:
    matches: List[PatternMatch] = []
    for convention in CONVENTIONS:
        if convention.target is not target:
            continue
        found = convention.regex.search(text)
        if found:
            matches.append(
                PatternMatch(
                    type=convention.type.value,
                    description=convention.description,
                    source_snippet=found.group(0).strip().lstrip("/"),
                )
            )
    return matches


def detect_path_patterns(path: str) -> List[PatternMatch]:
    """Return every path-level convention matching a raw route path."""
    return _detect(path, Target.PATH)


def detect_content_patterns(content: str) -> List[PatternMatch]:
    """Return every content-level convention matching file text."""
    return _detect(content, Target.CONTENT)
