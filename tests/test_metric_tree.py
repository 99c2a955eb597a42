"""Tests for MetricTree merging and AnalysisResult aggregation."""

import pytest

from routelens.exceptions import MetricShapeError
from routelens.metrics.result import AnalysisResult, Finding, Severity, merge_all, merge_results
from routelens.metrics.tree import (
    EMPTY,
    Node,
    Scalar,
    StringSet,
    counter,
    counters,
    flatten,
    from_plain,
    members,
    merge,
    to_plain,
)
from routelens.routing.models import RouteKind, RouteRecord, RouterFamily, parse_path


@pytest.fixture
def trees():
    a = merge(counter("routes.total", 2), members("api.endpoints", "GET /a"))
    b = merge(counter("routes.total", 1), counter("routes.dynamic"))
    c = merge(members("api.endpoints", "POST /a", "GET /a"), counter("seo.meta.title", 3))
    return a, b, c


class TestMerge:
    def test_leaf_rules(self):
        assert merge(Scalar(2), Scalar(3)) == Scalar(5)
        assert merge(StringSet(frozenset({"a"})), StringSet(frozenset({"b"}))) == StringSet(frozenset({"a", "b"}))

    def test_commutative(self, trees):
        a, b, _ = trees
        assert merge(a, b) == merge(b, a)

    def test_associative(self, trees):
        a, b, c = trees
        assert merge(merge(a, b), c) == merge(a, merge(b, c))

    def test_empty_is_identity(self, trees):
        a, _, _ = trees
        assert merge(a, EMPTY) == a
        assert merge(EMPTY, a) == a

    def test_shape_mismatch(self):
        with pytest.raises(MetricShapeError) as exc:
            merge(counter("routes.groups"), members("routes.groups", "shop"))
        assert exc.value.details["path"] == "routes.groups"

    def test_counters_from_mapping(self):
        tree = counters("data.fetching", {"fetch_calls": 2, "use_swr": False})
        assert tree.get("data.fetching.fetch_calls") == 2
        assert tree.get("data.fetching.use_swr") == 0

    def test_get_missing_path(self):
        assert counter("a.b").get("a.c", 7) == 7
        assert isinstance(counter("a.b").get("a"), Node)


class TestPlainConversion:
    def test_round_trip(self, trees):
        a, b, c = trees
        tree = merge(merge(a, b), c)
        assert from_plain(to_plain(tree)) == tree

    def test_sets_are_sorted(self):
        plain = to_plain(members("x", "b", "a"))
        assert plain == {"x": {"__set__": ["a", "b"]}}

    def test_flatten_sorted(self, trees):
        a, b, _ = trees
        paths = [p for p, _ in flatten(merge(a, b))]
        assert paths == sorted(paths)
        assert "routes.total" in paths


def _record(path):
    return RouteRecord(path=parse_path(path), kind=RouteKind.PAGE, family=RouterFamily.APP, file=f"app{path}/page.tsx")


class TestAggregator:
    def test_findings_concatenated_in_order(self):
        f1 = Finding(Severity.INFO, "x", "one")
        f2 = Finding(Severity.INFO, "x", "one")
        a = AnalysisResult(findings=[f1], recommendations=["r"])
        b = AnalysisResult(findings=[f2], recommendations=["r"])
        merged = merge_results(a, b)
        assert merged.findings == [f1, f2]
        assert merged.recommendations == ["r", "r"]

    def test_inputs_not_mutated(self):
        a = AnalysisResult(metrics=counter("n"), routes=[_record("/a")])
        b = AnalysisResult(metrics=counter("n"), routes=[_record("/b")])
        merged = merge_results(a, b)
        assert merged.metrics.get("n") == 2
        assert len(a.routes) == 1 and a.metrics.get("n") == 1

    def test_metric_merge_order_insensitive(self):
        parts = [AnalysisResult(metrics=counter("n", i)) for i in range(5)]
        assert merge_all(parts).metrics == merge_all(reversed(parts)).metrics

    def test_metric_shape_clash_raises(self):
        scalar = AnalysisResult(metrics=counter("routes.total"))
        nested = AnalysisResult(metrics=counter("routes.total.pages"))
        with pytest.raises(MetricShapeError) as exc:
            merge_results(scalar, nested)
        assert exc.value.details["path"] == "routes.total"

    def test_none_partials_skipped(self):
        assert merge_all([None, AnalysisResult(metrics=counter("n")), None]).metrics.get("n") == 1

    def test_serialization_round_trip(self):
        result = AnalysisResult(
            metrics=merge(counter("routes.total"), members("routes.paths.page", "/a")),
            findings=[Finding(Severity.WARNING, "seo", "msg", "app/page.tsx", {"count": 2})],
            recommendations=["do it"],
            routes=[_record("/a")],
        )
        restored = AnalysisResult.from_dict(result.to_dict())
        assert restored.metrics == result.metrics
        assert restored.findings == result.findings
        assert restored.findings[0].details == {"count": 2}
        assert restored.recommendations == result.recommendations
        assert restored.routes == result.routes

    def test_finding_equality_ignores_details(self):
        assert Finding(Severity.INFO, "a", "m", details={"x": 1}) == Finding(Severity.INFO, "a", "m")
