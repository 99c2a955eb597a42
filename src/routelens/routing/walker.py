"""Route tree walker.

Depth-first, pre-order traversal of one routing root. Siblings are visited
in sorted-name order so identical trees always produce identical output.

For every readable source file the walker builds a ``FileVisit`` (raw
tokens, content and classifier facts). Convention files additionally get a
``RouteRecord``. The walker itself contributes only route-level metrics
under ``routes.*``; analysis steps plug in through the ``visitor``
callback and return partial results that are merged file by file.

Directory scans are memoized in an injected ``WalkCache`` so that several
analyses over the same tree read and classify each file once.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, FrozenSet, Hashable, Iterator, List, Optional, Tuple, Union, cast

from ..classify import FileClassifier, FileFacts
from ..config import DEFAULT_CONFIG, AnalysisConfig
from ..exceptions import FileAccessError, InvalidPathError
from ..logging_config import get_logger
from ..metrics.result import AnalysisResult, Finding, Severity, merge_all
from ..metrics.tree import EMPTY, Node, counter, members, merge
from .conventions import detect_path_patterns
from .filters import DirIdentity, dir_identity, relative_posix, should_skip_dir, should_skip_file
from .models import RouteKind, RouteRecord, RouterFamily, SegmentToken, TokenKind
from .normalizer import (
    compose_path,
    normalize_segment,
    route_file_kind,
    special_file_name,
)

logger = get_logger(__name__)


class WalkState(str, Enum):
    IDLE = "idle"
    WALKING = "walking"
    DONE = "done"


@dataclass(frozen=True)
class FileVisit:
    """One non-skipped source file reached by the walker.

    Attributes:
        path: Absolute file path
        rel_path: Path relative to the project root (forward slashes)
        family: Router family of the routing root
        tokens: Normalizer tokens from the routing root down to the file
        content: File text
        facts: Classifier output for the content
        record: Route record when the file is a routing-convention file
        special: Special file base name (loading, error, ...) if any
    """

    path: Path
    rel_path: str
    family: RouterFamily
    tokens: Tuple[SegmentToken, ...]
    content: str
    facts: FileFacts
    record: Optional[RouteRecord] = None
    special: Optional[str] = None

    @property
    def kind(self) -> Optional[RouteKind]:
        return self.record.kind if self.record is not None else None


ScanItem = Union[FileVisit, Finding]
Visitor = Callable[[FileVisit], Optional[AnalysisResult]]


class WalkCache:
    """Per-invocation memo of directory scans.

    Keys are ``(directory, family, inherited tokens)``. Concurrent callers
    asking for the same key wait on one lock per key; the first computed
    value is kept.
    """

    def __init__(self) -> None:
        self._values: Dict[Hashable, Any] = {}
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get_or_compute(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        with self._guard:
            if key in self._values:
                self.hits += 1
                return self._values[key]
            lock = self._locks.setdefault(key, threading.Lock())

        with lock:
            with self._guard:
                if key in self._values:
                    self.hits += 1
                    return self._values[key]
            value = factory()
            with self._guard:
                self.misses += 1
                return self._values.setdefault(key, value)

    def __len__(self) -> int:
        with self._guard:
            return len(self._values)

    def __contains__(self, key: Hashable) -> bool:
        with self._guard:
            return key in self._values

    def clear(self) -> None:
        with self._guard:
            self._values.clear()
            self._locks.clear()


class RouteTreeWalker:
    """Walks routing roots and produces route records and metrics."""

    def __init__(
        self,
        classifier: Optional[FileClassifier] = None,
        config: Optional[AnalysisConfig] = None,
        cache: Optional[WalkCache] = None,
    ):
        self.classifier = classifier if classifier is not None else FileClassifier()
        self.config = config if config is not None else DEFAULT_CONFIG
        self.cache = cache if cache is not None else WalkCache()
        self._active = 0
        self._state = WalkState.IDLE
        self._state_lock = threading.Lock()

    @property
    def state(self) -> WalkState:
        return self._state

    def walk(
        self,
        root: Path,
        family: RouterFamily,
        visitor: Optional[Visitor] = None,
        project_root: Optional[Path] = None,
    ) -> AnalysisResult:
        """Walk one routing root.

        Args:
            root: Routing root directory (``app/``, ``src/pages/``, ...)
            family: Router family the root follows
            visitor: Called for every FileVisit; its result is merged in
            project_root: Base for relative file paths (default: root's parent)

        Returns:
            Route records, ``routes.*`` metrics, visitor partials and
            findings for unreadable entries

        Raises:
            InvalidPathError: If the root cannot be read
        """
        root = Path(root)
        self._check_root(root)
        project_root = Path(project_root) if project_root is not None else root.parent

        self._enter()
        try:
            items = self._scan_dir(root, root, project_root, family, (), self._root_ancestors(root))
            return merge_all(self._item_result(item, visitor) for item in items)
        finally:
            self._leave()

    def iter_visits(
        self,
        root: Path,
        family: RouterFamily,
        project_root: Optional[Path] = None,
    ) -> Iterator[FileVisit]:
        """Yield every FileVisit of the traversal, in walk order."""
        root = Path(root)
        self._check_root(root)
        project_root = Path(project_root) if project_root is not None else root.parent
        for item in self._scan_dir(root, root, project_root, family, (), self._root_ancestors(root)):
            if isinstance(item, FileVisit):
                yield item

    def walk_middleware(
        self,
        path: Path,
        project_root: Path,
        family: RouterFamily = RouterFamily.APP,
        visitor: Optional[Visitor] = None,
    ) -> AnalysisResult:
        """Result for a root-level middleware file; unreadable files become findings."""
        try:
            visit = self._middleware_visit(Path(path), Path(project_root), family)
        except FileAccessError as e:
            return AnalysisResult(
                findings=[_io_finding(relative_posix(Path(path), Path(project_root)), e.reason)]
            )
        return self._item_result(visit, visitor)

    def middleware_record(
        self,
        path: Path,
        project_root: Path,
        family: RouterFamily = RouterFamily.APP,
    ) -> RouteRecord:
        """Record for a root-level middleware file (kind middleware, path ``/``).

        Raises:
            FileAccessError: If the file cannot be read
        """
        visit = self._middleware_visit(Path(path), Path(project_root), family)
        return cast(RouteRecord, visit.record)

    def _middleware_visit(self, path: Path, project_root: Path, family: RouterFamily) -> FileVisit:
        rel = relative_posix(path, project_root)
        content = self._read(path)
        facts = self.classifier.classify(content, RouteKind.MIDDLEWARE, family, rel)
        record = self._build_record(
            tokens=(),
            kind=RouteKind.MIDDLEWARE,
            family=family,
            rel=rel,
            route_text=path.name,
            facts=facts,
        )
        return FileVisit(path, rel, family, (), content, facts, record)

    def _check_root(self, root: Path) -> None:
        if not root.exists():
            raise InvalidPathError(root, "Routing root does not exist")
        if not root.is_dir():
            raise InvalidPathError(root, "Routing root is not a directory")
        try:
            with os.scandir(root):
                pass
        except OSError as e:
            raise InvalidPathError(root, f"Routing root cannot be read: {e.strerror or e}")

    @staticmethod
    def _root_ancestors(root: Path) -> FrozenSet[DirIdentity]:
        try:
            return frozenset({dir_identity(root)})
        except OSError:
            return frozenset()

    def _enter(self) -> None:
        with self._state_lock:
            self._active += 1
            self._state = WalkState.WALKING

    def _leave(self) -> None:
        with self._state_lock:
            self._active -= 1
            if self._active == 0:
                self._state = WalkState.DONE

    def _scan_dir(
        self,
        directory: Path,
        root: Path,
        project_root: Path,
        family: RouterFamily,
        inherited: Tuple[SegmentToken, ...],
        ancestors: FrozenSet[DirIdentity],
    ) -> Tuple[ScanItem, ...]:
        key = (str(directory), family.value, inherited)
        return self.cache.get_or_compute(
            key, lambda: self._compute_scan(directory, root, project_root, family, inherited, ancestors)
        )

    def _compute_scan(
        self,
        directory: Path,
        root: Path,
        project_root: Path,
        family: RouterFamily,
        inherited: Tuple[SegmentToken, ...],
        ancestors: FrozenSet[DirIdentity],
    ) -> Tuple[ScanItem, ...]:
        items: List[ScanItem] = []
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as e:
            rel = relative_posix(directory, project_root)
            logger.warning(f"Cannot read directory {rel}: {e}")
            return (_io_finding(rel, e.strerror or str(e)),)

        for entry in entries:
            path = Path(entry.path)
            try:
                is_dir = entry.is_dir()
            except OSError as e:
                items.append(_io_finding(relative_posix(path, project_root), e.strerror or str(e)))
                continue

            if is_dir:
                if should_skip_dir(entry.name, self.config):
                    continue
                try:
                    identity = dir_identity(path)
                except OSError as e:
                    items.append(_io_finding(relative_posix(path, project_root), e.strerror or str(e)))
                    continue
                if identity in ancestors:
                    logger.warning(f"Skipping {relative_posix(path, project_root)}: symlink loop")
                    continue
                token = normalize_segment(entry.name, family, extensions=self.config.source_extensions)
                items.extend(
                    self._scan_dir(path, root, project_root, family, inherited + (token,), ancestors | {identity})
                )
            else:
                if should_skip_file(entry.name, self.config):
                    continue
                item = self._visit_file(path, root, project_root, family, inherited)
                if item is not None:
                    items.append(item)
        return tuple(items)

    def _visit_file(
        self,
        path: Path,
        root: Path,
        project_root: Path,
        family: RouterFamily,
        inherited: Tuple[SegmentToken, ...],
    ) -> Optional[ScanItem]:
        rel = relative_posix(path, project_root)
        try:
            size = path.stat().st_size
        except OSError as e:
            return _io_finding(rel, e.strerror or str(e))
        if size > self.config.max_file_size_bytes:
            logger.warning(f"Skipping {rel}: {size} bytes exceeds size limit")
            return Finding(
                Severity.WARNING,
                "size",
                "File exceeds the size limit and was not analyzed",
                rel,
                {"bytes": size, "limit": self.config.max_file_size_bytes},
            )

        try:
            content = self._read(path)
        except FileAccessError as e:
            logger.warning(f"Cannot read {rel}: {e.reason}")
            return _io_finding(rel, e.reason)

        token = normalize_segment(path.name, family, is_file=True, extensions=self.config.source_extensions)
        tokens = inherited + (token,)
        in_api = bool(inherited) and inherited[0].kind is TokenKind.LITERAL and inherited[0].value == "api"
        kind = route_file_kind(path.name, family, in_api, self.config.source_extensions)

        facts = self.classifier.classify(content, kind, family, rel)
        record = None
        if kind is not None:
            route_text = f"{root.name}/{relative_posix(path, root)}"
            record = self._build_record(tokens, kind, family, rel, route_text, facts)

        special = None
        if family is RouterFamily.APP:
            special = special_file_name(path.name, self.config.source_extensions)

        return FileVisit(path, rel, family, tokens, content, facts, record, special)

    def _build_record(
        self,
        tokens: Tuple[SegmentToken, ...],
        kind: RouteKind,
        family: RouterFamily,
        rel: str,
        route_text: str,
        facts: FileFacts,
    ) -> RouteRecord:
        path, groups, slots, intercepts = compose_path(tokens)
        patterns = tuple(detect_path_patterns(route_text)) + facts.patterns
        return RouteRecord(
            path=path,
            kind=kind,
            family=family,
            file=rel,
            is_dynamic=path.is_dynamic,
            is_server_rendered=facts.is_server_rendered if facts.classified else True,
            patterns=patterns,
            complexity=facts.complexity,
            methods=facts.methods if kind is RouteKind.ROUTE else frozenset(),
            groups=groups,
            slots=slots,
            intercepts=intercepts,
            facts=tuple(sorted(facts.flags.items())),
            classified=facts.classified,
        )

    def _read(self, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            reason = getattr(e, "strerror", None) or str(e)
            raise FileAccessError(path, reason) from e

    def _item_result(self, item: ScanItem, visitor: Optional[Visitor]) -> AnalysisResult:
        if isinstance(item, Finding):
            return AnalysisResult(findings=[item])

        result = AnalysisResult(metrics=route_metrics(item))
        if item.record is not None:
            result.routes.append(item.record)
        if not item.facts.classified:
            result.findings.append(
                Finding(
                    Severity.WARNING,
                    "classification",
                    "File could not be classified",
                    item.rel_path,
                    {"error": item.facts.error or ""},
                )
            )
        if visitor is not None:
            partial = visitor(item)
            if partial is not None:
                result = merge_all([result, partial])
        return result


def route_metrics(visit: FileVisit) -> Node:
    """``routes.*`` metrics contributed by one visit."""
    tree: Node = EMPTY
    if visit.special is not None:
        tree = merge(tree, counter(f"routes.special.{visit.special}"))

    record = visit.record
    if record is None:
        return tree

    parts = [
        counter("routes.total"),
        counter(f"routes.by_kind.{record.kind.value}"),
        counter(f"routes.by_family.{record.family.value}"),
        counter("routes.dynamic" if record.is_dynamic else "routes.static"),
        members(f"routes.paths.{record.kind.value}", str(record.path)),
    ]
    if record.kind is RouteKind.ROUTE:
        parts.append(counter("routes.api"))
    if record.groups:
        parts.append(members("routes.groups", *record.groups))
    if record.slots:
        parts.append(members("routes.slots", *record.slots))
    if record.intercepts:
        parts.append(members("routes.intercepts", *record.intercepts))
    for pattern in record.patterns:
        parts.append(counter(f"routes.patterns.{pattern.type}"))
    if not record.classified:
        parts.append(counter("routes.unclassified"))

    for part in parts:
        tree = cast(Node, merge(tree, part))
    return tree


def _io_finding(rel: str, reason: str) -> Finding:
    return Finding(Severity.ERROR, "io", f"Cannot read {rel}", rel, {"reason": reason})
