"""Registry of named, independently testable content heuristics.

Every heuristic is a plain function of a ``ClassificationContext``. They
never read each other's results, so evaluation order does not matter and a
new convention can be added by registering one more function.

Usage:
    registry = HeuristicRegistry()

    @registry.register("has_foo", group="facts")
    def has_foo(ctx: ClassificationContext) -> bool:
        return "foo" in ctx.content
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..routing.models import RouteKind, RouterFamily

HeuristicFn = Callable[["ClassificationContext"], Any]


@dataclass(frozen=True)
class ClassificationContext:
    """Input to every heuristic: one file's text and where it was found."""

    content: str
    kind: Optional[RouteKind] = None
    family: RouterFamily = RouterFamily.APP
    path: str = ""


@dataclass(frozen=True)
class Heuristic:
    name: str
    group: str
    func: HeuristicFn
    description: str = ""

    def __call__(self, ctx: ClassificationContext) -> Any:
        return self.func(ctx)


class HeuristicRegistry:
    """Named heuristics grouped by concern (facts, data.fetching, seo.meta, ...)."""

    def __init__(self) -> None:
        self._heuristics: Dict[str, Heuristic] = {}

    def register(self, name: str, group: str, description: str = "") -> Callable[[HeuristicFn], HeuristicFn]:
        def decorator(func: HeuristicFn) -> HeuristicFn:
            self.add(Heuristic(name, group, func, description or (func.__doc__ or "").strip()))
            return func

        return decorator

    def add(self, heuristic: Heuristic) -> None:
        if heuristic.name in self._heuristics:
            raise ValueError(f"Heuristic '{heuristic.name}' is already registered")
        self._heuristics[heuristic.name] = heuristic

    def get(self, name: str) -> Heuristic:
        return self._heuristics[name]

    def __contains__(self, name: str) -> bool:
        return name in self._heuristics

    def names(self, group: Optional[str] = None) -> List[str]:
        """Registered names in registration order, optionally for one group."""
        return [h.name for h in self._heuristics.values() if group is None or h.group == group]

    def evaluate(self, name: str, ctx: ClassificationContext) -> Any:
        return self._heuristics[name](ctx)

    def evaluate_group(self, group: str, ctx: ClassificationContext) -> Dict[str, Any]:
        """Evaluate every heuristic in ``group``; exceptions propagate."""
        return {name: self.evaluate(name, ctx) for name in self.names(group)}

    def copy(self) -> "HeuristicRegistry":
        clone = HeuristicRegistry()
        clone._heuristics = dict(self._heuristics)
        return clone


default_registry = HeuristicRegistry()
