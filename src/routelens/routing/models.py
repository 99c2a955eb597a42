"""Route topology models: tokens, normalized paths, pattern matches, records.

A ``RouteRecord`` is produced by the walker for every routing-convention
file. Records are immutable and are owned by the ``AnalysisResult`` that
contains them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple, Union


class RouterFamily(str, Enum):
    """Routing convention family a root directory follows."""

    APP = "app"
    PAGES = "pages"


class RouteKind(str, Enum):
    """What a routing-convention file contributes to the route tree."""

    PAGE = "page"
    LAYOUT = "layout"
    ROUTE = "route"
    MIDDLEWARE = "middleware"


class ParamKind(str, Enum):
    """Kind of dynamic parameter marker."""

    SINGLE = "single"
    CATCH_ALL = "catch-all"
    OPTIONAL_CATCH_ALL = "optional-catch-all"


class TokenKind(str, Enum):
    """Kind of token the normalizer emits for one raw segment name."""

    LITERAL = "literal"
    PARAM = "param"
    GROUP = "group"
    SLOT = "slot"
    EMPTY = "empty"


@dataclass(frozen=True)
class SegmentToken:
    """Canonical token for one file-system segment name.

    Attributes:
        kind: Token kind
        value: Literal text, parameter/group/slot name, or "" for empty
        param_kind: Marker kind when ``kind`` is PARAM
        intercept: Intercepting-route prefix such as "(.)" or "(..)(..)"
    """

    kind: TokenKind
    value: str = ""
    param_kind: Optional[ParamKind] = None
    intercept: str = ""

    @property
    def contributes_segment(self) -> bool:
        return self.kind in (TokenKind.LITERAL, TokenKind.PARAM)


@dataclass(frozen=True)
class Param:
    """Parameter marker inside a normalized path.

    The name is kept for display only; equality and hashing use the
    marker kind so that ``/[id]`` and ``/[slug]`` match by structure.
    """

    kind: ParamKind
    name: str = field(default="", compare=False)

    def __str__(self) -> str:
        if self.kind is ParamKind.CATCH_ALL:
            return f"[...{self.name}]"
        if self.kind is ParamKind.OPTIONAL_CATCH_ALL:
            return f"[[...{self.name}]]"
        return f"[{self.name}]"


Segment = Union[str, Param]


@dataclass(frozen=True)
class NormalizedPath:
    """Ordered sequence of literal segments and parameter markers."""

    segments: Tuple[Segment, ...] = ()

    def __str__(self) -> str:
        if not self.segments:
            return "/"
        return "/" + "/".join(str(s) for s in self.segments)

    def append(self, token: SegmentToken) -> "NormalizedPath":
        """Return a new path extended by a token that contributes a segment."""
        if token.kind is TokenKind.LITERAL:
            return NormalizedPath(self.segments + (token.value,))
        if token.kind is TokenKind.PARAM:
            return NormalizedPath(self.segments + (Param(token.param_kind, token.value),))
        return self

    @property
    def params(self) -> Tuple[Param, ...]:
        return tuple(s for s in self.segments if isinstance(s, Param))

    @property
    def is_dynamic(self) -> bool:
        return bool(self.params)

    @property
    def depth(self) -> int:
        return len(self.segments)

    def matches(self, other: "NormalizedPath") -> bool:
        """Structural match: same literals and same marker kinds by position."""
        return self.segments == other.segments


@dataclass(frozen=True)
class PatternMatch:
    """One named convention detected on a path or in file content."""

    type: str
    description: str
    source_snippet: str = ""

    def to_dict(self) -> Dict[str, str]:
        return {
            "type": self.type,
            "description": self.description,
            "source_snippet": self.source_snippet,
        }


@dataclass(frozen=True)
class RouteRecord:
    """A route, layout, API endpoint, or middleware found in the source tree.

    Attributes:
        path: Normalized URL path (route groups and slots removed)
        kind: What the file contributes
        family: Router family the file was found under
        file: Path of the source file relative to the project root
        is_dynamic: True if the path contains a parameter marker
        is_server_rendered: Rendering classification of the file content
        patterns: Every convention matched on the path and content
        complexity: Content complexity score (unbounded, non-negative)
        methods: HTTP verbs handled (route kind only)
        groups: Route group names crossed on the way to the file
        slots: Parallel-route slot names crossed on the way to the file
        intercepts: Intercepting prefixes crossed on the way to the file
        facts: Named heuristic facts from the file classifier
        classified: False when the classifier could not evaluate the file
    """

    path: NormalizedPath
    kind: RouteKind
    family: RouterFamily
    file: str
    is_dynamic: bool = False
    is_server_rendered: bool = True
    patterns: Tuple[PatternMatch, ...] = ()
    complexity: float = 0.0
    methods: FrozenSet[str] = frozenset()
    groups: Tuple[str, ...] = ()
    slots: Tuple[str, ...] = ()
    intercepts: Tuple[str, ...] = ()
    facts: Tuple[Tuple[str, Any], ...] = ()
    classified: bool = True

    def fact(self, name: str, default: Any = None) -> Any:
        for key, value in self.facts:
            if key == name:
                return value
        return default

    @property
    def pattern_types(self) -> Tuple[str, ...]:
        return tuple(p.type for p in self.patterns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path),
            "kind": self.kind.value,
            "family": self.family.value,
            "file": self.file,
            "is_dynamic": self.is_dynamic,
            "is_server_rendered": self.is_server_rendered,
            "patterns": [p.to_dict() for p in self.patterns],
            "complexity": self.complexity,
            "methods": sorted(self.methods),
            "groups": list(self.groups),
            "slots": list(self.slots),
            "intercepts": list(self.intercepts),
            "facts": {k: _plain(v) for k, v in self.facts},
            "classified": self.classified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RouteRecord":
        return cls(
            path=parse_path(data["path"]),
            kind=RouteKind(data["kind"]),
            family=RouterFamily(data["family"]),
            file=data["file"],
            is_dynamic=data.get("is_dynamic", False),
            is_server_rendered=data.get("is_server_rendered", True),
            patterns=tuple(PatternMatch(**p) for p in data.get("patterns", [])),
            complexity=data.get("complexity", 0.0),
            methods=frozenset(data.get("methods", [])),
            groups=tuple(data.get("groups", [])),
            slots=tuple(data.get("slots", [])),
            intercepts=tuple(data.get("intercepts", [])),
            facts=tuple(sorted(data.get("facts", {}).items())),
            classified=data.get("classified", True),
        )


def parse_path(text: str) -> NormalizedPath:
    """Parse the display form produced by ``str(NormalizedPath)``."""
    segments = []
    for part in text.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("[[...") and part.endswith("]]"):
            segments.append(Param(ParamKind.OPTIONAL_CATCH_ALL, part[5:-2]))
        elif part.startswith("[...") and part.endswith("]"):
            segments.append(Param(ParamKind.CATCH_ALL, part[4:-1]))
        elif part.startswith("[") and part.endswith("]"):
            segments.append(Param(ParamKind.SINGLE, part[1:-1]))
        else:
            segments.append(part)
    return NormalizedPath(tuple(segments))


def _plain(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    if isinstance(value, Enum):
        return value.value
    return value
