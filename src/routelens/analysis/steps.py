"""Analysis steps for the four analysis types.

Each step has an optional per-file ``visit`` and an optional project-level
``finalize``:

    visit(FileVisit, AnalysisConfig)      -> AnalysisResult | None
    finalize(AnalysisResult, AnalysisConfig) -> AnalysisResult | None

An optional ``inspect`` runs once per analysis over the project description
(manifest, framework config) before any file is read:

    inspect(ProjectInfo, AnalysisConfig)  -> AnalysisResult | None

``visit`` sees one file and must be additive: the metrics of a project are
the merge of the metrics of its files. ``finalize`` sees the aggregated
result of all files and emits project-level recommendations (and the odd
non-additive metric such as a score).
"""

import re
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ..classify.complexity import to_centi
from ..classify.heuristics import semantic_score
from ..classify.predicates import MUTATING_METHODS
from ..config import AnalysisConfig
from ..math import RobustStatistics
from ..metrics.result import AnalysisResult, Finding, Severity
from ..metrics.tree import EMPTY, Node, counter, counters, members, merge
from ..routing.models import RouteKind
from ..routing.walker import FileVisit
from .project import MANIFEST_NAME, ProjectInfo, declared_version, find_next_config, major_version

VisitFn = Callable[[FileVisit, AnalysisConfig], Optional[AnalysisResult]]
FinalizeFn = Callable[[AnalysisResult, AnalysisConfig], Optional[AnalysisResult]]
InspectFn = Callable[[ProjectInfo, AnalysisConfig], Optional[AnalysisResult]]


@dataclass(frozen=True)
class Step:
    name: str
    visit: Optional[VisitFn] = None
    finalize: Optional[FinalizeFn] = None
    inspect: Optional[InspectFn] = None


def _tree(*parts: Node) -> Node:
    tree: Node = EMPTY
    for part in parts:
        tree = merge(tree, part)  # type: ignore[assignment]
    return tree


def _finding(severity: Severity, category: str, message: str, visit: FileVisit, **details) -> Finding:
    return Finding(severity, category, message, visit.rel_path, details)


def _metric(result: AnalysisResult, path: str) -> float:
    value = result.metrics.get(path, 0)
    return value if isinstance(value, (int, float)) else 0


def _recommend(
    *recs: str,
    metrics: Node = EMPTY,
    findings: Optional[List[Finding]] = None,
) -> Optional[AnalysisResult]:
    """Finalize output; empty strings are dropped, None when there is nothing to say."""
    kept = [r for r in recs if r]
    if not (kept or metrics or findings):
        return None
    return AnalysisResult(metrics=metrics, findings=list(findings or []), recommendations=kept)


def _when(condition: bool, text: str) -> str:
    return text if condition else ""


# ── routes ───────────────────────────────────────────────────────────

# App Router and SWC minification became the default in this major.
CURRENT_NEXT_MAJOR = 13

_WEBPACK4_RE = re.compile(r"\bwebpack5\s*:\s*false\b")


def _project_inspect(project: ProjectInfo, config: AnalysisConfig) -> Optional[AnalysisResult]:
    parts = [counter(f"project.router.{project.router}")]
    findings: List[Finding] = []
    recs: List[str] = []

    major = major_version(project.next_version)
    if project.next_version is None:
        parts.append(counter("project.missing_dependencies"))
        findings.append(Finding(Severity.ERROR, "dependency", "Next.js dependency not found", MANIFEST_NAME))
    elif major is not None and major < CURRENT_NEXT_MAJOR:
        parts.append(counter("project.outdated_framework"))
        findings.append(
            Finding(
                Severity.WARNING,
                "dependency",
                f"Using older Next.js version: {project.next_version}",
                MANIFEST_NAME,
                {"version": project.next_version},
            )
        )
        recs.append(f"Update to Next.js {CURRENT_NEXT_MAJOR} or later for the latest routing features")
    if declared_version(project.manifest, "react") is None:
        parts.append(counter("project.missing_dependencies"))
        findings.append(Finding(Severity.ERROR, "dependency", "React dependency not found", MANIFEST_NAME))

    path = find_next_config(project.root)
    if path is None:
        findings.append(Finding(Severity.INFO, "config", "No next.config file found"))
        return AnalysisResult(metrics=_tree(*parts), findings=findings, recommendations=recs)

    name = path.name
    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        findings.append(Finding(Severity.ERROR, "config", f"Cannot read {name}", name, {"reason": str(e)}))
        return AnalysisResult(metrics=_tree(*parts), findings=findings, recommendations=recs)

    if _WEBPACK4_RE.search(content):
        parts.append(counter("project.config_issues"))
        findings.append(Finding(Severity.WARNING, "config", "Using deprecated webpack 4", name))
        recs.append("Update to webpack 5 for better performance")
    if "swcMinify" not in content and major is not None and major < CURRENT_NEXT_MAJOR:
        parts.append(counter("project.config_issues"))
        findings.append(Finding(Severity.INFO, "config", "SWC minification not configured", name))
        recs.append("Enable swcMinify for faster builds")
    return AnalysisResult(metrics=_tree(*parts), findings=findings, recommendations=recs)


def _structure_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    record = visit.record
    if record is None or record.kind is not RouteKind.PAGE:
        return None
    parts = [counter("structure.pages"), counter(f"structure.depth.d{min(record.path.depth, 5)}")]
    findings: List[Finding] = []
    if record.is_dynamic and "static-params" not in record.pattern_types:
        parts.append(counter("structure.dynamic_without_static_params"))
        findings.append(
            _finding(
                Severity.INFO,
                "structure",
                f"Dynamic page {record.path} does not generate static params",
                visit,
            )
        )
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _structure_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    findings: List[Finding] = []
    if _metric(result, "routes.total") == 0:
        findings.append(Finding(Severity.WARNING, "structure", "No routes found in the routing roots"))
    if _metric(result, "routes.by_family.app") and _metric(result, "routes.by_family.pages"):
        findings.append(
            Finding(Severity.INFO, "structure", "Project mixes the app and pages routers")
        )
    return _recommend(
        _when(
            _metric(result, "structure.dynamic_without_static_params") > 0,
            "Add generateStaticParams to dynamic pages that can be prerendered",
        ),
        _when(
            _metric(result, "routes.special.loading") == 0 and _metric(result, "routes.by_family.app") > 0,
            "Add loading.tsx files to stream route segments",
        ),
        _when(
            _metric(result, "routes.special.error") == 0 and _metric(result, "routes.by_family.app") > 0,
            "Add error.tsx boundaries to isolate route segment failures",
        ),
        findings=findings,
    )


def _api_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    record = visit.record
    if record is None or record.kind is not RouteKind.ROUTE:
        return None
    facts = visit.facts
    parts = [counter("api.routes")]
    findings: List[Finding] = []

    if record.methods:
        parts.append(members("api.endpoints", *(f"{m} {record.path}" for m in sorted(record.methods))))
        parts.extend(counter(f"api.methods.{m}") for m in sorted(record.methods))
    else:
        parts.append(counter("api.missing_methods"))
        findings.append(
            _finding(Severity.WARNING, "api", f"API route {record.path} exports no HTTP method handlers", visit)
        )

    if facts.classified:
        mutating = bool(record.methods & MUTATING_METHODS)
        if facts.flag("has_validation"):
            parts.append(counter("api.validated"))
        elif mutating:
            parts.append(counter("api.missing_validation"))
            findings.append(
                _finding(
                    Severity.WARNING,
                    "api",
                    f"API route {record.path} accepts writes without input validation",
                    visit,
                    methods=sorted(record.methods & MUTATING_METHODS),
                )
            )
        if facts.flag("has_error_handling"):
            parts.append(counter("api.error_handled"))
        else:
            parts.append(counter("api.missing_error_handling"))
            findings.append(
                _finding(Severity.WARNING, "api", f"API route {record.path} has no error handling", visit)
            )
        if facts.flag("has_auth"):
            parts.append(counter("api.authenticated"))
        if facts.flag("has_rate_limit"):
            parts.append(counter("api.rate_limited"))
        if facts.flag("has_caching"):
            parts.append(counter("api.cached"))

    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _api_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    routes = _metric(result, "api.routes")
    if routes == 0:
        return None
    return _recommend(
        _when(_metric(result, "api.missing_validation") > 0, "Validate request bodies in API routes (e.g. with zod)"),
        _when(_metric(result, "api.missing_error_handling") > 0, "Wrap API route handlers in try/catch and return explicit error responses"),
        _when(_metric(result, "api.rate_limited") == 0, "Consider rate limiting public API routes"),
    )


def _actions_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    facts = visit.facts
    if not facts.flag("server_directive"):
        return None
    counts = facts.counts("actions.functions")
    parts = [counter("actions.files"), counters("actions", counts)]
    findings: List[Finding] = []
    if facts.flag("has_validation"):
        parts.append(counter("actions.validated"))
    else:
        parts.append(counter("actions.unvalidated"))
        findings.append(_finding(Severity.WARNING, "actions", "Server action without input validation", visit))
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _actions_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    return _recommend(
        _when(_metric(result, "actions.unvalidated") > 0, "Validate server action inputs; actions are public endpoints"),
    )


def _middleware_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if visit.kind is not RouteKind.MIDDLEWARE:
        return None
    parts = [counter("middleware.files")]
    findings: List[Finding] = []
    if visit.facts.matchers:
        parts.append(members("middleware.matchers", *visit.facts.matchers))
    else:
        parts.append(counter("middleware.unmatched"))
        findings.append(
            _finding(Severity.INFO, "middleware", "Middleware has no matcher and runs on every request", visit)
        )
    if visit.facts.flag("has_auth"):
        parts.append(counter("middleware.authenticated"))
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _middleware_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if _metric(result, "middleware.files") > 0:
        return None
    if _metric(result, "api.missing_validation") or _metric(result, "actions.unvalidated"):
        return _recommend("Consider middleware to centralize authentication for API routes")
    return None


# ── data ─────────────────────────────────────────────────────────────


def _counts_visit(group: str, markup_only: bool = False) -> VisitFn:
    """Visit that sums one counter heuristic group over classified files."""

    def visit(v: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
        if not v.facts.classified or (markup_only and not _renders_markup(v)):
            return None
        return AnalysisResult(metrics=counters(group, v.facts.counts(group)))

    return visit


def _data_fetching_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    fetches = _metric(result, "data.fetching.fetch_calls")
    libraries = _metric(result, "data.fetching.use_query") + _metric(result, "data.fetching.use_swr")
    return _recommend(
        _when(fetches > 5, "Consider using React Query or SWR for better data fetching management"),
        _when(fetches > 0 and libraries == 0, "Implement a data caching strategy using React Query or SWR"),
    )


def _data_state_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if not visit.facts.classified:
        return None
    counts = visit.facts.counts("data.state")
    tree = counters("data.state", counts)
    findings: List[Finding] = []
    if counts.get("use_state", 0) > config.max_use_state:
        tree = _tree(tree, counter("data.state.complex_files"))
        findings.append(
            _finding(
                Severity.INFO,
                "state",
                f"{counts['use_state']} useState calls in one file",
                visit,
                use_state=counts["use_state"],
            )
        )
    return AnalysisResult(metrics=tree, findings=findings)


def _data_state_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    return _recommend(
        _when(
            _metric(result, "data.state.complex_files") > 0 and _metric(result, "data.state.use_reducer") == 0,
            "Consider using useReducer for complex state management",
        ),
        _when(
            _metric(result, "data.state.context_api") > 3,
            "Consider using a state management library for better scalability",
        ),
    )


def _data_caching_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if not visit.facts.classified:
        return None
    counts = visit.facts.counts("data.caching")
    parts = [counters("data.caching", counts)]
    findings: List[Finding] = []
    static_or_server = counts.get("static_props", 0) or counts.get("server_props", 0)
    if static_or_server and not counts.get("revalidation", 0):
        parts.append(counter("data.caching.caching_issues"))
        findings.append(
            _finding(Severity.WARNING, "caching", "Data fetching export without a revalidation strategy", visit)
        )
    record = visit.record
    if (
        record is not None
        and record.kind is RouteKind.ROUTE
        and "GET" in record.methods
        and not visit.facts.flag("has_caching")
    ):
        parts.append(counter("data.caching.uncached_get_routes"))
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _data_caching_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    return _recommend(
        _when(
            _metric(result, "data.caching.static_props") > 0 and _metric(result, "data.caching.revalidation") == 0,
            "Implement a revalidation strategy for static props",
        ),
        _when(
            _metric(result, "data.caching.server_props") > 0,
            "Consider static props with revalidation instead of server-side props for better performance",
        ),
        _when(
            _metric(result, "data.caching.uncached_get_routes") > 0,
            "Declare caching for GET route handlers that serve stable data",
        ),
    )


def _data_mutations_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    return _recommend(
        _when(
            _metric(result, "data.mutations.form_submissions") > 0
            and _metric(result, "data.mutations.optimistic_updates") == 0,
            "Implement optimistic updates for better user experience",
        ),
        _when(
            _metric(result, "data.mutations.server_mutations") > 3,
            "Consider implementing a mutation management strategy",
        ),
    )


# ── performance ──────────────────────────────────────────────────────


def _components_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if not visit.facts.classified:
        return None
    counts = visit.facts.counts("performance.components")
    rendering = "client_components" if visit.facts.rendering == "client" else "server_components"
    parts = [
        counter("performance.components.total"),
        counter(f"performance.components.{rendering}"),
        counter("performance.components.heavy_imports", counts.get("heavy_imports", 0)),
    ]
    findings: List[Finding] = []
    size = counts.get("bytes", 0)
    if size > config.heavy_component_bytes:
        parts.append(counter("performance.components.heavy"))
        findings.append(
            _finding(
                Severity.WARNING,
                "performance",
                f"Heavy component ({size} bytes)",
                visit,
                bytes=size,
                limit=config.heavy_component_bytes,
            )
        )
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _components_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    client = _metric(result, "performance.components.client_components")
    server = _metric(result, "performance.components.server_components")
    return _recommend(
        _when(client > server, "Move data fetching and static rendering into server components"),
        _when(
            _metric(result, "performance.components.heavy") > 0,
            "Split heavy components into smaller lazily loaded pieces",
        ),
        _when(
            _metric(result, "performance.components.heavy_imports") > 0,
            "Load heavy libraries with dynamic imports",
        ),
    )


def _splitting_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    return _recommend(
        _when(
            _metric(result, "performance.splitting.dynamic_imports") == 0,
            "Consider implementing dynamic imports for better code splitting",
        ),
    )


def _images_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if not visit.facts.classified:
        return None
    counts = visit.facts.counts("performance.images")
    parts = [counters("performance.images", counts)]
    findings: List[Finding] = []
    raw = counts.get("img_tags", 0)
    if raw:
        parts.append(counter("performance.images.unoptimized", raw))
        findings.append(
            _finding(Severity.WARNING, "images", f"{raw} <img> tags bypass next/image", visit, count=raw)
        )
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _images_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    unoptimized = int(_metric(result, "performance.images.unoptimized"))
    return _recommend(_when(unoptimized > 0, f"Optimize {unoptimized} images using next/image"))


def _complexity_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if not visit.facts.classified:
        return None
    score = visit.facts.complexity
    parts = [
        counter("performance.complexity.files"),
        counter("performance.complexity.total_centi", to_centi(score)),
    ]
    findings: List[Finding] = []
    if score > config.complexity_threshold:
        parts.append(counter("performance.complexity.over_threshold"))
        findings.append(
            _finding(
                Severity.WARNING,
                "complexity",
                f"Complexity {score} exceeds threshold {config.complexity_threshold}",
                visit,
                score=score,
            )
        )
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _complexity_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    records = [r for r in result.routes if r.classified]
    if not records:
        return None
    scores = [r.complexity for r in records]
    summary = RobustStatistics.percentile_summary(scores)
    flags = RobustStatistics.high_outliers(scores)

    findings = [
        Finding(
            Severity.INFO,
            "complexity",
            f"{record.path} ({record.kind.value}) is a complexity outlier",
            record.file,
            {"score": record.complexity},
        )
        for record, flagged in zip(records, flags)
        if flagged
    ]
    files = _metric(result, "performance.complexity.files")
    mean = round(_metric(result, "performance.complexity.total_centi") / files / 100, 2) if files else 0.0
    metrics = _tree(
        counters("performance.complexity.routes", summary),
        counter("performance.complexity.outliers", len(findings)),
        counter("performance.complexity.mean", mean),
    )
    return _recommend(
        _when(
            _metric(result, "performance.complexity.over_threshold") > 0 or bool(findings),
            "Review the most complex routes and extract logic into smaller modules",
        ),
        metrics=metrics,
        findings=findings,
    )


# ── seo ──────────────────────────────────────────────────────────────

_PAGE_KINDS = (RouteKind.PAGE, RouteKind.LAYOUT)


def _renders_markup(visit: FileVisit) -> bool:
    return visit.kind not in (RouteKind.ROUTE, RouteKind.MIDDLEWARE)


def _meta_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    record = visit.record
    if record is None or record.kind not in _PAGE_KINDS or not visit.facts.classified:
        return None
    counts = visit.facts.counts("seo.meta")
    parts = [counters("seo.meta", counts)]
    findings: List[Finding] = []
    if visit.facts.flag("exports_metadata"):
        parts.append(counter("seo.meta.exports_metadata"))
    elif record.kind is RouteKind.PAGE and not counts.get("title", 0):
        parts.append(counter("seo.meta.pages_without_metadata"))
        findings.append(
            _finding(Severity.INFO, "seo", f"Page {record.path} declares no metadata or title", visit)
        )
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _meta_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    return _recommend(
        _when(_metric(result, "seo.meta.title") == 0, "Add title tags to improve SEO ranking"),
        _when(_metric(result, "seo.meta.description") == 0, "Add meta descriptions for better search results"),
        _when(_metric(result, "seo.meta.open_graph") == 0, "Implement OpenGraph tags for social media sharing"),
    )


def _content_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if not visit.facts.classified or not _renders_markup(visit):
        return None
    counts = dict(visit.facts.counts("seo.content"))
    counts.pop("text_chars", None)
    parts = [counters("seo.content", counts)]
    findings: List[Finding] = []

    missing_alt = max(counts.get("images", 0) - counts.get("images_with_alt", 0), 0)
    if missing_alt:
        parts.append(counter("seo.content.images_missing_alt", missing_alt))
        findings.append(_finding(Severity.WARNING, "seo", "Images missing alt text", visit, count=missing_alt))
    if counts.get("generic_links", 0):
        findings.append(_finding(Severity.INFO, "seo", "Generic link text detected", visit))
    if counts.get("h1", 0) > 1:
        findings.append(_finding(Severity.INFO, "seo", "More than one H1 heading", visit, count=counts["h1"]))
    record = visit.record
    if record is not None and record.kind is RouteKind.PAGE and counts.get("h1", 0) == 0:
        parts.append(counter("seo.content.pages_without_h1"))
    return AnalysisResult(metrics=_tree(*parts), findings=findings)


def _content_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    return _recommend(
        _when(_metric(result, "seo.content.h1") == 0, "Add H1 heading for main page title"),
        _when(_metric(result, "seo.content.images_missing_alt") > 0, "Add alt text to all images"),
        _when(_metric(result, "seo.content.internal_links") == 0, "Add internal links for better site structure"),
    )


def _semantic_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    node = result.metrics.get("seo.semantic")
    counts: Mapping[str, float] = {}
    if isinstance(node, Node):
        counts = {k: _metric(result, f"seo.semantic.{k}") for k in node.children}
    score = semantic_score(counts)
    return _recommend(
        _when(score < 70, "Increase use of semantic HTML elements"),
        _when(not counts.get("main"), "Add <main> element to identify primary content"),
        _when(not counts.get("nav"), "Use <nav> element for navigation sections"),
        _when(
            counts.get("div_with_role", 0) > counts.get("landmark_roles", 0),
            "Replace divs with roles using semantic HTML elements",
        ),
        metrics=counter("seo.semantic_score", score),
    )


def _loading_visit(visit: FileVisit, config: AnalysisConfig) -> Optional[AnalysisResult]:
    if not visit.facts.classified or not _renders_markup(visit):
        return None
    counts = visit.facts.counts("seo.loading")
    findings: List[Finding] = []
    if counts.get("blocking_scripts", 0):
        findings.append(
            _finding(
                Severity.WARNING,
                "seo",
                f"{counts['blocking_scripts']} render-blocking scripts found",
                visit,
            )
        )
    if counts.get("unsized_images", 0):
        findings.append(
            _finding(
                Severity.INFO,
                "seo",
                f"{counts['unsized_images']} images without explicit dimensions",
                visit,
            )
        )
    return AnalysisResult(metrics=counters("seo.loading", counts), findings=findings)


def _loading_finalize(result: AnalysisResult, config: AnalysisConfig) -> Optional[AnalysisResult]:
    scripts = _metric(result, "seo.loading.async_scripts") + _metric(result, "seo.loading.deferred_scripts")
    return _recommend(
        _when(_metric(result, "seo.loading.lazy_images") == 0, "Implement lazy loading for images below the fold"),
        _when(
            scripts == 0 and _metric(result, "seo.loading.blocking_scripts") > 0,
            "Use async or defer for non-critical scripts",
        ),
        _when(
            _metric(result, "seo.loading.unsized_images") > 0,
            "Add width and height attributes to images to prevent layout shifts",
        ),
        _when(
            _metric(result, "seo.loading.next_image") == 0,
            "Use Next.js Image component for automatic image optimization",
        ),
    )


ANALYSES: Dict[str, Tuple[Step, ...]] = {
    "routes": (
        Step("project", inspect=_project_inspect),
        Step("structure", _structure_visit, _structure_finalize),
        Step("api", _api_visit, _api_finalize),
        Step("actions", _actions_visit, _actions_finalize),
        Step("middleware", _middleware_visit, _middleware_finalize),
    ),
    "data": (
        Step("fetching", _counts_visit("data.fetching"), _data_fetching_finalize),
        Step("state", _data_state_visit, _data_state_finalize),
        Step("caching", _data_caching_visit, _data_caching_finalize),
        Step("mutations", _counts_visit("data.mutations"), _data_mutations_finalize),
    ),
    "performance": (
        Step("components", _components_visit, _components_finalize),
        Step("splitting", _counts_visit("performance.splitting"), _splitting_finalize),
        Step("images", _images_visit, _images_finalize),
        Step("complexity", _complexity_visit, _complexity_finalize),
    ),
    "seo": (
        Step("meta", _meta_visit, _meta_finalize),
        Step("content", _content_visit, _content_finalize),
        Step("semantic", _counts_visit("seo.semantic", markup_only=True), _semantic_finalize),
        Step("loading", _loading_visit, _loading_finalize),
    ),
}


def steps_for(analysis_type: str) -> Tuple[Step, ...]:
    """Ordered steps of an analysis type; KeyError if unknown."""
    return ANALYSES[analysis_type]
