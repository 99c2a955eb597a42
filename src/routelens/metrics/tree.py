"""MetricTree — tagged metric values with one exhaustive merge function.

A tree is a ``Node`` mapping group names to ``Scalar`` counters, nested
``Node``s, or ``StringSet``s. Merging is associative and commutative per
leaf:

    Scalar   + Scalar    -> sum
    StringSet + StringSet -> union
    Node     + Node      -> key-wise recursive merge

Values are immutable; ``merge`` always returns new values. Two trees that
disagree on the shape of a leaf cannot be merged.

Example:
    >>> a = counter("routes.total", 2)
    >>> b = merge(counter("routes.total", 1), members("api.endpoints", "GET /api/users"))
    >>> to_plain(merge(a, b))
    {'api': {'endpoints': {'__set__': ['GET /api/users']}}, 'routes': {'total': 3}}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterator, Mapping, Tuple, Union

from ..exceptions import MetricShapeError

SET_TAG = "__set__"


@dataclass(frozen=True)
class Scalar:
    value: Union[int, float] = 0


@dataclass(frozen=True)
class StringSet:
    values: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class Node:
    children: Mapping[str, "MetricValue"] = field(default_factory=dict)

    def __hash__(self) -> int:
        return hash(tuple(sorted(self.children.items(), key=lambda kv: kv[0])))

    def get(self, path: str, default: Any = None) -> Any:
        """Look up a dotted path; returns the leaf value (number or set)."""
        node: MetricValue = self
        for part in path.split("."):
            if not isinstance(node, Node) or part not in node.children:
                return default
            node = node.children[part]
        if isinstance(node, Scalar):
            return node.value
        if isinstance(node, StringSet):
            return node.values
        return node

    def __bool__(self) -> bool:
        return bool(self.children)


MetricValue = Union[Scalar, StringSet, Node]

EMPTY = Node()


def _kind(value: MetricValue) -> str:
    return type(value).__name__


def merge(a: MetricValue, b: MetricValue, _path: str = "") -> MetricValue:
    """Merge two metric values of the same shape."""
    if isinstance(a, Scalar) and isinstance(b, Scalar):
        return Scalar(a.value + b.value)
    if isinstance(a, StringSet) and isinstance(b, StringSet):
        return StringSet(a.values | b.values)
    if isinstance(a, Node) and isinstance(b, Node):
        children: Dict[str, MetricValue] = dict(a.children)
        for key, value in b.children.items():
            if key in children:
                child_path = f"{_path}.{key}" if _path else key
                children[key] = merge(children[key], value, child_path)
            else:
                children[key] = value
        return Node(children)
    raise MetricShapeError(_path or "<root>", _kind(a), _kind(b))


def _nest(path: str, leaf: MetricValue) -> Node:
    parts = path.split(".")
    value: MetricValue = leaf
    for part in reversed(parts):
        value = Node({part: value})
    return value  # type: ignore[return-value]


def counter(path: str, n: Union[int, float] = 1) -> Node:
    """Single-leaf tree holding a scalar at a dotted path."""
    return _nest(path, Scalar(n))


def members(path: str, *values: str) -> Node:
    """Single-leaf tree holding a string set at a dotted path."""
    return _nest(path, StringSet(frozenset(values)))


def counters(prefix: str, values: Mapping[str, Union[int, float, bool]]) -> Node:
    """Tree of scalars under ``prefix`` from a flat mapping; bools count as 0/1."""
    leaf = Node({k: Scalar(int(v) if isinstance(v, bool) else v) for k, v in values.items()})
    return _nest(prefix, leaf)


def flatten(value: MetricValue, prefix: str = "") -> Iterator[Tuple[str, Union[Scalar, StringSet]]]:
    """Yield (dotted_path, leaf) pairs in sorted key order."""
    if isinstance(value, Node):
        for key in sorted(value.children):
            child_prefix = f"{prefix}.{key}" if prefix else key
            yield from flatten(value.children[key], child_prefix)
    else:
        yield prefix, value


def to_plain(value: MetricValue) -> Any:
    """Convert to JSON-friendly nested dicts; sets become tagged sorted lists."""
    if isinstance(value, Scalar):
        return value.value
    if isinstance(value, StringSet):
        return {SET_TAG: sorted(value.values)}
    return {key: to_plain(value.children[key]) for key in sorted(value.children)}


def from_plain(obj: Any) -> MetricValue:
    """Inverse of ``to_plain``."""
    if isinstance(obj, bool):
        return Scalar(int(obj))
    if isinstance(obj, (int, float)):
        return Scalar(obj)
    if isinstance(obj, dict):
        if set(obj) == {SET_TAG}:
            return StringSet(frozenset(obj[SET_TAG]))
        return Node({key: from_plain(child) for key, child in obj.items()})
    raise TypeError(f"Cannot convert {type(obj).__name__} to a metric value")
