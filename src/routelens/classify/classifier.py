"""File classifier: runs the registered heuristics over one file's content."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from ..cache import ClassificationCache
from ..exceptions import ClassificationError
from ..logging_config import get_logger
from ..routing.conventions import detect_content_patterns
from ..routing.models import PatternMatch, RouteKind, RouterFamily
from .complexity import complexity_score
from .registry import ClassificationContext, HeuristicRegistry, default_registry

logger = get_logger(__name__)

FACTS_GROUP = "facts"
COUNTERS_GROUP = "counters"
METHODS_HEURISTIC = "http_methods"
MATCHERS_HEURISTIC = "middleware.matchers"


@dataclass(frozen=True)
class FileFacts:
    """Everything the heuristics say about one file.

    Attributes:
        flags: Scalar fact predicates (booleans and the rendering category)
        methods: HTTP verbs exported or handled
        counters: Per heuristic group occurrence counts
        matchers: Middleware path matchers
        complexity: Complexity score
        patterns: Content-level conventions detected
        classified: False if a heuristic raised
        error: Description of the failure when not classified
    """

    flags: Dict[str, Any] = field(default_factory=dict)
    methods: FrozenSet[str] = frozenset()
    counters: Dict[str, Dict[str, int]] = field(default_factory=dict)
    matchers: Tuple[str, ...] = ()
    complexity: float = 0.0
    patterns: Tuple[PatternMatch, ...] = ()
    classified: bool = True
    error: Optional[str] = None

    @property
    def rendering(self) -> str:
        return self.flags.get("rendering", "server")

    @property
    def is_server_rendered(self) -> bool:
        return self.rendering == "server"

    def flag(self, name: str) -> bool:
        return bool(self.flags.get(name, False))

    def counts(self, group: str) -> Dict[str, int]:
        return self.counters.get(group, {})

    @classmethod
    def unclassifiable(cls, error: str) -> "FileFacts":
        return cls(classified=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "flags": dict(self.flags),
            "methods": sorted(self.methods),
            "counters": {k: dict(v) for k, v in self.counters.items()},
            "matchers": list(self.matchers),
            "complexity": self.complexity,
            "patterns": [p.to_dict() for p in self.patterns],
            "classified": self.classified,
            "error": self.error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "FileFacts":
        return cls(
            flags=dict(data.get("flags", {})),
            methods=frozenset(data.get("methods", [])),
            counters={k: dict(v) for k, v in data.get("counters", {}).items()},
            matchers=tuple(data.get("matchers", [])),
            complexity=data.get("complexity", 0.0),
            patterns=tuple(PatternMatch(**p) for p in data.get("patterns", [])),
            classified=data.get("classified", True),
            error=data.get("error"),
        )


class FileClassifier:
    """Evaluates every registered heuristic against a file.

    A heuristic that raises makes the whole file unclassifiable; the
    exception never propagates to the caller.
    """

    def __init__(
        self,
        registry: Optional[HeuristicRegistry] = None,
        cache: Optional[ClassificationCache] = None,
    ):
        self.registry = registry if registry is not None else default_registry
        self.cache = cache

    def classify(
        self,
        content: str,
        kind: Optional[RouteKind] = None,
        family: RouterFamily = RouterFamily.APP,
        path: str = "",
    ) -> FileFacts:
        key = None
        if self.cache is not None:
            key = self.cache.key_for(content, kind.value if kind else "", family.value)
            cached = self.cache.get(key)
            if cached is not None:
                return FileFacts.from_dict(cached)

        ctx = ClassificationContext(content=content, kind=kind, family=family, path=path)
        try:
            facts = self._evaluate(ctx)
        except ClassificationError as e:
            logger.warning(f"Could not classify {path or '<content>'}: {e}")
            return FileFacts.unclassifiable(str(e))

        if self.cache is not None and key is not None:
            self.cache.set(key, facts.to_dict())
        return facts

    def _evaluate(self, ctx: ClassificationContext) -> FileFacts:
        flags = {name: self._run(name, ctx) for name in self.registry.names(FACTS_GROUP)}
        counters = {name: self._run(name, ctx) for name in self.registry.names(COUNTERS_GROUP)}

        methods: FrozenSet[str] = frozenset()
        if METHODS_HEURISTIC in self.registry:
            methods = frozenset(self._run(METHODS_HEURISTIC, ctx))

        matchers: List[str] = []
        if MATCHERS_HEURISTIC in self.registry:
            matchers = list(self._run(MATCHERS_HEURISTIC, ctx))

        try:
            complexity = complexity_score(ctx.content)
            patterns = tuple(detect_content_patterns(ctx.content))
        except Exception as e:
            raise ClassificationError("content", str(e), ctx.path or None) from e

        return FileFacts(
            flags=flags,
            methods=methods,
            counters=counters,
            matchers=tuple(matchers),
            complexity=complexity,
            patterns=patterns,
        )

    def _run(self, name: str, ctx: ClassificationContext) -> Any:
        try:
            return self.registry.evaluate(name, ctx)
        except Exception as e:
            raise ClassificationError(name, f"{type(e).__name__}: {e}", ctx.path or None) from e
