"""Analysis engine: the control flow of one analysis run.

Pipeline:
  Inspect project (manifest, routing roots, middleware)
       → Snapshot (content fingerprint plus result-shaping settings)
       → History lookup (a fresh hit is returned as stored)
       → Project checks (dependencies, framework config)
       → Walk every routing root with the analysis steps as visitor
       → Finalize steps over the aggregated result
       → Diff against the latest stored result of the same type
       → Save to history
       → Write JSON report

Only input errors (bad path, bad manifest, not a project, unknown analysis
type) escape ``run``. Everything else degrades to findings or log warnings.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from ..cache import ClassificationCache, compute_config_hash
from ..classify import FileClassifier
from ..config import ANALYSIS_TYPES, DEFAULT_CONFIG, AnalysisConfig
from ..exceptions import InvalidConfigError
from ..history.diff import diff_results
from ..history.models import ChangeSet
from ..history.store import HistoryStore
from ..logging_config import get_logger
from ..metrics.result import AnalysisResult, merge_all
from ..report.json_report import write_report
from ..routing.walker import FileVisit, RouteTreeWalker, Visitor, WalkCache
from ..snapshot.capture import take_snapshot
from ..snapshot.models import Snapshot
from .project import ProjectInfo, RouteRoot, inspect_project
from .steps import Step, steps_for

logger = get_logger(__name__)


@dataclass
class AnalysisOutcome:
    """Result of one analysis run plus how it was obtained."""

    analysis_type: str
    result: AnalysisResult
    snapshot: Snapshot
    from_history: bool = False
    changes: Optional[ChangeSet] = None
    report_path: Optional[Path] = None
    project: Optional[ProjectInfo] = None
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


def build_visitor(steps: List[Step], config: AnalysisConfig) -> Visitor:
    """One visitor that runs every step's ``visit`` in declaration order."""
    visits = [s.visit for s in steps if s.visit is not None]

    def visitor(visit: FileVisit) -> Optional[AnalysisResult]:
        return merge_all(fn(visit, config) for fn in visits)

    return visitor


def run_inspections(project: ProjectInfo, steps: List[Step], config: AnalysisConfig) -> AnalysisResult:
    """Run every step's ``inspect`` once over the project, merged in declaration order."""
    return merge_all(s.inspect(project, config) for s in steps if s.inspect is not None)


def finalize(result: AnalysisResult, steps: List[Step], config: AnalysisConfig) -> AnalysisResult:
    """Apply every step's ``finalize`` to the same aggregate, then merge in order."""
    partials = [s.finalize(result, config) for s in steps if s.finalize is not None]
    return merge_all([result, *partials])


class AnalysisEngine:
    """Runs analyses over a project, consulting and updating history.

    Args:
        config: Analysis configuration (defaults to ``DEFAULT_CONFIG``)
        history: History store; by default one under the project's
            ``config.history_dir`` when ``config.enable_history`` is set
        classifier: File classifier; by default one backed by a
            ``ClassificationCache`` when ``config.cache_enabled`` is set
        walk_cache: Directory scan memo shared by every run of this engine;
            by default each run (or ``run_all`` call) gets a fresh one
    """

    def __init__(
        self,
        config: Optional[AnalysisConfig] = None,
        history: Optional[HistoryStore] = None,
        classifier: Optional[FileClassifier] = None,
        walk_cache: Optional[WalkCache] = None,
    ):
        self.config = config or DEFAULT_CONFIG
        self.history = history
        self.classifier = classifier
        self.walk_cache = walk_cache

    def run(self, root: Path, analysis_type: str, force: bool = False) -> AnalysisOutcome:
        """Run one analysis type over the project at ``root``.

        Args:
            root: Project root directory
            analysis_type: One of ``ANALYSIS_TYPES``
            force: Skip the history lookup

        Raises:
            InvalidConfigError: Unknown analysis type
            InvalidPathError: Root missing or not a directory
            ManifestError: package.json missing or malformed
            ProjectError: Not a file-routed project
        """
        return self._run(Path(root), analysis_type, force, self._walk_cache())

    def run_all(self, root: Path, force: bool = False) -> Dict[str, AnalysisOutcome]:
        """Run every analysis type, reading and classifying each file once."""
        cache = self._walk_cache()
        return {t: self._run(Path(root), t, force, cache) for t in ANALYSIS_TYPES}

    # ── Pipeline ───────────────────────────────────────────────────

    def _run(self, root: Path, analysis_type: str, force: bool, cache: WalkCache) -> AnalysisOutcome:
        if analysis_type not in ANALYSIS_TYPES:
            raise InvalidConfigError(
                "analysis_type", analysis_type, f"Expected one of: {', '.join(ANALYSIS_TYPES)}"
            )

        log = get_logger(__name__, analysis_type=analysis_type)
        project = inspect_project(root)
        snapshot = take_snapshot(
            root,
            self.config,
            roots=[r.path for r in project.roots],
            middleware=project.middleware,
        )
        log.info(f"{snapshot.file_count} files, fingerprint {snapshot.fingerprint[:12]}")

        history = self._history_for(root)
        if history is not None and not force:
            entry = history.lookup(analysis_type, snapshot)
            if entry is not None:
                log.info(f"Using stored result from {entry.timestamp}")
                return AnalysisOutcome(
                    analysis_type=analysis_type,
                    result=entry.result,
                    snapshot=snapshot,
                    from_history=True,
                    project=project,
                )

        classifier, owned_cache = self._classifier_for(root)
        try:
            result = self._analyze(project, analysis_type, classifier, cache)
        finally:
            if owned_cache is not None:
                owned_cache.close()

        outcome = AnalysisOutcome(
            analysis_type=analysis_type,
            result=result,
            snapshot=snapshot,
            project=project,
        )

        if history is not None:
            baseline = history.latest(analysis_type)
            if baseline is not None:
                outcome.changes = diff_results(baseline.result, result, baseline.timestamp)
            try:
                history.save(analysis_type, snapshot, result)
            except OSError as e:
                log.warning(f"Could not save history entry: {e}")

        if self.config.write_reports:
            try:
                outcome.report_path = write_report(self._resolve(root, self.config.logs_dir), analysis_type, outcome)
            except OSError as e:
                log.warning(f"Could not write report: {e}")

        return outcome

    def _analyze(
        self,
        project: ProjectInfo,
        analysis_type: str,
        classifier: FileClassifier,
        cache: WalkCache,
    ) -> AnalysisResult:
        steps = list(steps_for(analysis_type))
        visitor = build_visitor(steps, self.config)
        walker = RouteTreeWalker(classifier, self.config, cache)

        def walk_root(route_root: RouteRoot) -> AnalysisResult:
            logger.debug(f"Walking {route_root.path} ({route_root.family.value})")
            return walker.walk(route_root.path, route_root.family, visitor, project_root=project.root)

        partials = [run_inspections(project, steps, self.config)]
        roots = list(project.roots)
        if self.config.workers > 1 and len(roots) > 1:
            with ThreadPoolExecutor(max_workers=self.config.workers) as pool:
                partials.extend(pool.map(walk_root, roots))
        else:
            partials.extend(walk_root(r) for r in roots)

        family = roots[0].family
        for path in project.middleware:
            partials.append(walker.walk_middleware(path, project.root, family, visitor))

        return finalize(merge_all(partials), steps, self.config)

    # ── Collaborators ──────────────────────────────────────────────

    def _walk_cache(self) -> WalkCache:
        return self.walk_cache if self.walk_cache is not None else WalkCache()

    def _history_for(self, root: Path) -> Optional[HistoryStore]:
        if self.history is not None:
            return self.history
        if not self.config.enable_history:
            return None
        return HistoryStore(
            self._resolve(root, self.config.history_dir),
            self.config.validity_hours,
            self.config.default_validity_hours,
        )

    def _classifier_for(self, root: Path):
        if self.classifier is not None:
            return self.classifier, None
        if not self.config.cache_enabled:
            return FileClassifier(), None
        cache = ClassificationCache(
            cache_dir=str(self._resolve(root, self.config.cache_dir)),
            ttl_hours=self.config.cache_ttl_hours,
            enabled=True,
            config_hash=compute_config_hash(self.config.cache_key_fields()),
        )
        return FileClassifier(cache=cache), cache

    @staticmethod
    def _resolve(root: Path, directory: str) -> Path:
        path = Path(directory).expanduser()
        return path if path.is_absolute() else root / path
