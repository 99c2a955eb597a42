"""Tests for AnalysisEngine: history short-circuit, diffs, reports, run_all."""

import json

import pytest

from routelens import AnalysisEngine
from routelens.config import ANALYSIS_TYPES, AnalysisConfig
from routelens.exceptions import InvalidConfigError, ProjectError
from routelens.history import HistoryStore
from routelens.routing.walker import WalkCache


class TestRun:
    def test_fresh_run(self, three_route_project, config):
        outcome = AnalysisEngine(config).run(three_route_project, "routes")
        assert not outcome.from_history
        assert outcome.changes is None
        assert outcome.report_path is None
        assert outcome.project.router == "app"
        assert outcome.result.metrics.get("routes.total") == 3
        assert outcome.snapshot.file_count == 3

    def test_unknown_type(self, three_route_project, config):
        with pytest.raises(InvalidConfigError):
            AnalysisEngine(config).run(three_route_project, "security")

    def test_not_a_project(self, make_project, config):
        root = make_project({"app/page.tsx": "x"}, dependencies={})
        with pytest.raises(ProjectError):
            AnalysisEngine(config).run(root, "routes")

    def test_middleware_is_analyzed(self, make_project, config):
        root = make_project(
            {
                "app/page.tsx": "export default function Home() {}\n",
                "middleware.ts": "export function middleware() {}\n",
            }
        )
        result = AnalysisEngine(config).run(root, "routes").result
        assert result.metrics.get("middleware.files") == 1
        assert result.metrics.get("middleware.unmatched") == 1


class TestHistory:
    def test_second_run_is_served_from_history_unchanged(self, three_route_project, persistent_config):
        first = AnalysisEngine(persistent_config).run(three_route_project, "routes")
        second = AnalysisEngine(persistent_config).run(three_route_project, "routes")
        assert not first.from_history
        assert second.from_history
        assert second.result.metrics == first.result.metrics
        assert second.result.metrics.get("routes.total") == 3
        assert len(second.result.findings) == len(first.result.findings)

    def test_force_skips_lookup_and_diffs_against_latest(self, three_route_project, persistent_config):
        AnalysisEngine(persistent_config).run(three_route_project, "routes")
        forced = AnalysisEngine(persistent_config).run(three_route_project, "routes", force=True)
        assert not forced.from_history
        assert forced.changes is not None
        assert forced.changes.is_empty

    def test_content_change_is_a_miss_with_changes(self, three_route_project, persistent_config):
        AnalysisEngine(persistent_config).run(three_route_project, "routes")
        (three_route_project / "app" / "about").mkdir()
        (three_route_project / "app" / "about" / "page.ts").write_text("export default function About() {}\n")
        outcome = AnalysisEngine(persistent_config).run(three_route_project, "routes")
        assert not outcome.from_history
        assert outcome.changes.metrics["routes.total"].delta == 1
        assert "/about" in outcome.changes.metrics["routes.paths.page"].added

    def test_result_settings_change_is_a_miss(self, three_route_project, persistent_config):
        AnalysisEngine(persistent_config).run(three_route_project, "performance")
        strict = AnalysisConfig(complexity_threshold=0.0)
        outcome = AnalysisEngine(strict).run(three_route_project, "performance")
        assert not outcome.from_history
        assert outcome.result.metrics.get("performance.complexity.over_threshold") == 3
        assert AnalysisEngine(strict).run(three_route_project, "performance").from_history

    def test_injected_store(self, three_route_project, tmp_path):
        store = HistoryStore(tmp_path / "elsewhere")
        config = AnalysisConfig(write_reports=False)
        engine = AnalysisEngine(config, history=store)
        engine.run(three_route_project, "data")
        assert engine.run(three_route_project, "data").from_history
        assert not (three_route_project / ".routelens" / "history").exists()

    def test_history_disabled(self, three_route_project, config):
        AnalysisEngine(config).run(three_route_project, "routes")
        assert not AnalysisEngine(config).run(three_route_project, "routes").from_history


class TestReports:
    def test_report_written(self, three_route_project):
        config = AnalysisConfig(enable_history=False, write_reports=True)
        outcome = AnalysisEngine(config).run(three_route_project, "seo")
        assert outcome.report_path.parent == three_route_project / ".routelens" / "logs"
        assert outcome.report_path.name.endswith("_seo.json")
        report = json.loads(outcome.report_path.read_text())
        assert report["analysis_type"] == "seo"
        assert report["snapshot"]["fingerprint"] == outcome.snapshot.fingerprint
        assert report["result"]["routes"][0]["file"].startswith("app/")


class TestRunAll:
    def test_every_type(self, three_route_project, config):
        outcomes = AnalysisEngine(config).run_all(three_route_project)
        assert list(outcomes) == list(ANALYSIS_TYPES)
        for outcome in outcomes.values():
            assert outcome.result.metrics.get("routes.total") == 3

    def test_shared_walk_cache(self, three_route_project, config):
        cache = WalkCache()
        AnalysisEngine(config, walk_cache=cache).run_all(three_route_project)
        assert cache.hits >= len(ANALYSIS_TYPES) - 1


class TestParallelRoots:
    def test_workers_do_not_change_result(self, make_project):
        files = {
            "app/page.tsx": "export default function Home() {}\n",
            "app/shop/[id]/page.tsx": "export default function Item() {}\n",
            "pages/about.tsx": "export default function About() {}\n",
            "pages/api/ping.ts": "export default function handler(req, res) {}\n",
        }
        root = make_project(files)
        sequential = AnalysisEngine(AnalysisConfig(enable_history=False, write_reports=False)).run(root, "routes")
        parallel = AnalysisEngine(AnalysisConfig(enable_history=False, write_reports=False, workers=4)).run(
            root, "routes"
        )
        assert parallel.project.router == "hybrid"
        assert parallel.result.metrics == sequential.result.metrics
        assert parallel.result.routes == sequential.result.routes
