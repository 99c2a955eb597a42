"""Diff engine: computes a ChangeSet between two AnalysisResults.

The algorithm works in two passes:
  1. Metrics: flatten both MetricTrees and compare leaf by leaf. A leaf
     missing on one side counts as 0 (scalars) or the empty set (sets).
  2. Findings and recommendations: set difference, order preserved from
     the side they come from.
"""

from typing import Dict, List, Optional, Union

from ..metrics.result import AnalysisResult, Finding
from ..metrics.tree import Scalar, StringSet, flatten
from .models import Change, ChangeSet, MetricChange, SetChange

# ── Metric direction classification ──────────────────────────────────────────
# Matched against the last segment of a dotted metric path.

_LOWER_IS_BETTER = frozenset({
    "unclassified",
    "missing_validation",
    "missing_error_handling",
    "missing_methods",
    "unvalidated",
    "caching_issues",
    "complex_files",
    "heavy",
    "heavy_imports",
    "img_tags",
    "unoptimized",
    "over_threshold",
    "outliers",
    "images_missing_alt",
    "generic_links",
    "blocking_scripts",
    "unsized_images",
    "pages_without_metadata",
    "pages_without_h1",
    "div_with_role",
    "server_props",
    "uncached_get_routes",
    "dynamic_without_static_params",
    "unmatched",
    "missing_dependencies",
    "outdated_framework",
    "config_issues",
})

_HIGHER_IS_BETTER = frozenset({
    "next_image",
    "lazy_images",
    "revalidation",
    "optimistic_updates",
    "dynamic_imports",
    "lazy_components",
    "images_with_alt",
    "semantic_score",
    "rate_limited",
    "authenticated",
    "validated",
    "error_handled",
    "sized_images",
    "async_scripts",
    "deferred_scripts",
    "landmark_roles",
    "server_components",
})

Leaf = Union[Scalar, StringSet]


def classify_trend(metric: str, delta: float) -> str:
    """Return 'better', 'worse', or 'neutral' for a metric delta.

    Unknown metrics default to 'neutral'.
    """
    if abs(delta) < 0.001:
        return "neutral"
    name = metric.rsplit(".", 1)[-1]
    if name in _LOWER_IS_BETTER:
        return "better" if delta < 0 else "worse"
    if name in _HIGHER_IS_BETTER:
        return "better" if delta > 0 else "worse"
    return "neutral"


def _diff_metrics(previous: AnalysisResult, current: AnalysisResult) -> Dict[str, Change]:
    old_leaves: Dict[str, Leaf] = dict(flatten(previous.metrics))
    new_leaves: Dict[str, Leaf] = dict(flatten(current.metrics))

    changes: Dict[str, Change] = {}
    for path in sorted(set(old_leaves) | set(new_leaves)):
        old = old_leaves.get(path)
        new = new_leaves.get(path)

        if isinstance(old, StringSet) or isinstance(new, StringSet):
            old_values = old.values if isinstance(old, StringSet) else frozenset()
            new_values = new.values if isinstance(new, StringSet) else frozenset()
            if old_values != new_values:
                changes[path] = SetChange(
                    added=sorted(new_values - old_values),
                    removed=sorted(old_values - new_values),
                )
            continue

        old_value = old.value if old is not None else 0
        new_value = new.value if new is not None else 0
        delta = new_value - old_value
        if abs(delta) >= 0.001:
            changes[path] = MetricChange(
                previous=old_value,
                current=new_value,
                delta=round(delta, 4),
                trend=classify_trend(path, delta),
            )
    return changes


def _difference(items: List[Finding], exclude: List[Finding]) -> List[Finding]:
    seen = set(exclude)
    out: List[Finding] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


def diff_results(
    previous: AnalysisResult,
    current: AnalysisResult,
    previous_timestamp: Optional[str] = None,
) -> ChangeSet:
    """Compare ``current`` against a ``previous`` baseline."""
    previous_recs = set(previous.recommendations)
    new_recs: List[str] = []
    for rec in current.recommendations:
        if rec not in previous_recs and rec not in new_recs:
            new_recs.append(rec)

    return ChangeSet(
        previous_timestamp=previous_timestamp,
        metrics=_diff_metrics(previous, current),
        new_findings=_difference(current.findings, previous.findings),
        resolved_findings=_difference(previous.findings, current.findings),
        new_recommendations=new_recs,
    )
