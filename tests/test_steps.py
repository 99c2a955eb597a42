"""Tests for the analysis steps, run through the walker the way the engine runs them."""

from routelens import AnalysisEngine
from routelens.analysis.engine import build_visitor, finalize, run_inspections
from routelens.analysis.project import inspect_project
from routelens.analysis.steps import ANALYSES, steps_for
from routelens.config import ANALYSIS_TYPES, AnalysisConfig
from routelens.metrics.result import AnalysisResult, Severity, merge_all, merge_results
from routelens.metrics.tree import Scalar, flatten
from routelens.routing.models import RouterFamily
from routelens.routing.walker import RouteTreeWalker, route_metrics

APP = RouterFamily.APP


def run_steps(root, analysis_type, config=None, middleware=None):
    config = config or AnalysisConfig(enable_history=False, write_reports=False)
    steps = list(steps_for(analysis_type))
    visitor = build_visitor(steps, config)
    walker = RouteTreeWalker(config=config)
    partials = [walker.walk(root / "app", APP, visitor, project_root=root)]
    if middleware:
        partials.append(walker.walk_middleware(root / middleware, root, APP, visitor))
    return finalize(merge_all(partials), steps, config)


class TestStepTable:
    def test_step_names(self):
        assert set(ANALYSES) == set(ANALYSIS_TYPES)
        assert [s.name for s in steps_for("routes")] == ["project", "structure", "api", "actions", "middleware"]
        for analysis_type in ("data", "performance", "seo"):
            assert len(steps_for(analysis_type)) == 4

    def test_only_routes_inspects_the_project(self):
        for analysis_type in ANALYSIS_TYPES:
            inspecting = [s.name for s in steps_for(analysis_type) if s.inspect is not None]
            assert inspecting == (["project"] if analysis_type == "routes" else [])


class TestRoutesAnalysis:
    def test_three_route_example(self, three_route_project):
        result = run_steps(three_route_project, "routes")
        metrics = result.metrics
        assert metrics.get("structure.pages") == 2
        assert metrics.get("structure.dynamic_without_static_params") == 2
        assert metrics.get("api.routes") == 1
        assert metrics.get("api.endpoints") == frozenset({"GET /api/users", "POST /api/users"})
        assert metrics.get("api.missing_validation") == 1
        assert metrics.get("api.missing_error_handling") == 1
        assert "Validate request bodies in API routes (e.g. with zod)" in result.recommendations
        assert "Consider middleware to centralize authentication for API routes" in result.recommendations
        categories = [f.category for f in result.findings]
        assert categories.count("api") == 2
        assert categories.count("structure") == 2

    def test_route_without_handlers(self, make_project):
        root = make_project({"app/api/empty/route.ts": "const x = 1\n"})
        result = run_steps(root, "routes")
        assert result.metrics.get("api.missing_methods") == 1
        assert any("exports no HTTP method" in f.message for f in result.findings)

    def test_server_actions(self, make_project):
        root = make_project(
            {
                "app/actions.ts": "'use server'\nexport async function save(data) {}\nexport async function remove(id) {}\n",
                "app/page.tsx": "export default function Home() {}\n",
            }
        )
        result = run_steps(root, "routes")
        assert result.metrics.get("actions.files") == 1
        assert result.metrics.get("actions.exported_async") == 2
        assert result.metrics.get("actions.unvalidated") == 1

    def test_middleware(self, make_project):
        root = make_project(
            {
                "app/page.tsx": "export default function Home() {}\n",
                "middleware.ts": "export const config = { matcher: ['/admin/:path*'] }\n",
            }
        )
        result = run_steps(root, "routes", middleware="middleware.ts")
        assert result.metrics.get("middleware.files") == 1
        assert result.metrics.get("middleware.matchers") == frozenset({"/admin/:path*"})
        assert result.metrics.get("routes.by_kind.middleware") == 1

    def test_empty_tree_warns(self, make_project):
        root = make_project({"app/lib/util.ts": "export const x = 1\n"})
        result = run_steps(root, "routes")
        assert any(f.message == "No routes found in the routing roots" for f in result.findings)


class TestDataAnalysis:
    def test_fetching_and_state(self, make_project):
        content = (
            "'use client'\n"
            "export default function Page() {\n"
            + "  const [v] = useState(0)\n" * 6
            + "  fetch('/a')\n"
            "  fetch('/b')\n"
            "}\n"
        )
        root = make_project({"app/page.tsx": content})
        result = run_steps(root, "data")
        assert result.metrics.get("data.fetching.fetch_calls") == 2
        assert result.metrics.get("data.state.use_state") == 6
        assert result.metrics.get("data.state.complex_files") == 1
        assert "Implement a data caching strategy using React Query or SWR" in result.recommendations
        assert "Consider using useReducer for complex state management" in result.recommendations

    def test_threshold_is_configurable(self, make_project):
        content = "export default function Page() {\n" + "  const [v] = useState(0)\n" * 3 + "}\n"
        root = make_project({"app/page.tsx": content})
        strict = AnalysisConfig(enable_history=False, write_reports=False, max_use_state=2)
        assert run_steps(root, "data", strict).metrics.get("data.state.complex_files") == 1
        assert run_steps(root, "data").metrics.get("data.state.complex_files") is None


class TestPerformanceAnalysis:
    def test_complexity_outlier(self, make_project):
        simple = "export default function P() { return null }\n"
        branchy = "export default function P() {\n" + "  if (a && b) { c() }\n" * 20 + "}\n"
        files = {f"app/p{i}/page.tsx": simple for i in range(4)}
        files["app/big/page.tsx"] = branchy
        root = make_project(files)
        result = run_steps(root, "performance")
        assert result.metrics.get("performance.complexity.outliers") == 1
        assert result.metrics.get("performance.complexity.routes.max") > result.metrics.get(
            "performance.complexity.routes.p50"
        )
        outliers = [f for f in result.findings if f.category == "complexity" and f.severity is Severity.INFO]
        assert [f.file for f in outliers] == ["app/big/page.tsx"]
        assert result.metrics.get("performance.complexity.over_threshold") == 1

    def test_scoring_is_deterministic(self, three_route_project):
        first = run_steps(three_route_project, "performance")
        second = run_steps(three_route_project, "performance")
        assert first.metrics == second.metrics

    def test_images_and_components(self, make_project):
        root = make_project(
            {"app/page.tsx": "'use client'\nimport moment from 'moment'\nexport default () => <img src=\"/a.png\" />\n"}
        )
        result = run_steps(root, "performance")
        assert result.metrics.get("performance.components.client_components") == 1
        assert result.metrics.get("performance.components.heavy_imports") == 1
        assert result.metrics.get("performance.images.unoptimized") == 1
        assert "Optimize 1 images using next/image" in result.recommendations

    def test_complexity_totals_are_exact_in_any_grouping(self, make_project):
        # Scores 0.1, 0.2 and 0.3: float sums would differ by grouping
        root = make_project(
            {
                "app/a/page.ts": "one\n",
                "app/b/page.ts": "one\ntwo\n",
                "app/c/page.ts": "one\ntwo\nthree\n",
            }
        )
        config = AnalysisConfig(enable_history=False, write_reports=False)
        visitor = build_visitor(list(steps_for("performance")), config)
        walker = RouteTreeWalker(config=config)
        visits = list(walker.iter_visits(root / "app", APP, project_root=root))
        partials = [merge_all([AnalysisResult(metrics=route_metrics(v)), visitor(v)]) for v in visits]

        whole = merge_all(partials)
        split = merge_results(partials[0], merge_all(partials[1:]))
        assert split.metrics == whole.metrics
        assert whole.metrics.get("performance.complexity.total_centi") == 60

        for partial in partials:
            for path, leaf in flatten(partial.metrics):
                if isinstance(leaf, Scalar):
                    assert isinstance(leaf.value, int), path

    def test_complexity_mean(self, make_project):
        root = make_project({"app/a/page.ts": "one\n", "app/b/page.ts": "one\ntwo\nthree\n"})
        assert run_steps(root, "performance").metrics.get("performance.complexity.mean") == 0.2


def inspect_routes(root, config=None):
    config = config or AnalysisConfig(enable_history=False, write_reports=False)
    return run_inspections(inspect_project(root), list(steps_for("routes")), config)


class TestProjectChecks:
    def test_current_project_only_notes_missing_config(self, three_route_project):
        result = inspect_routes(three_route_project)
        assert [(f.category, f.severity) for f in result.findings] == [("config", Severity.INFO)]
        assert result.metrics.get("project.router.app") == 1
        assert result.recommendations == []

    def test_outdated_framework_and_config(self, make_project):
        root = make_project({"app/page.tsx": "export default function Home() {}\n"}, dependencies={"next": "^12.3.4"})
        (root / "next.config.js").write_text("module.exports = { webpack5: false }\n")
        result = inspect_routes(root)
        messages = [f.message for f in result.findings]
        assert "Using older Next.js version: ^12.3.4" in messages
        assert "React dependency not found" in messages
        assert "Using deprecated webpack 4" in messages
        assert "SWC minification not configured" in messages
        assert result.metrics.get("project.missing_dependencies") == 1
        assert result.metrics.get("project.outdated_framework") == 1
        assert result.metrics.get("project.config_issues") == 2
        assert "Update to webpack 5 for better performance" in result.recommendations
        assert "Enable swcMinify for faster builds" in result.recommendations

    def test_config_only_project_lacks_next_dependency(self, make_project):
        root = make_project({"app/page.tsx": "export default function Home() {}\n"}, dependencies={"react": "18.2.0"})
        (root / "next.config.mjs").write_text("export default { reactStrictMode: true }\n")
        result = inspect_routes(root)
        assert [f.message for f in result.findings] == ["Next.js dependency not found"]
        assert result.findings[0].severity is Severity.ERROR
        assert result.findings[0].file == "package.json"

    def test_engine_runs_checks_for_routes_only(self, make_project):
        root = make_project(
            {"app/page.tsx": "export default function Home() {}\n"},
            dependencies={"next": "12.0.0", "react": "17.0.2"},
        )
        engine = AnalysisEngine(AnalysisConfig(enable_history=False, write_reports=False))
        assert engine.run(root, "routes").result.metrics.get("project.outdated_framework") == 1
        assert engine.run(root, "seo").result.metrics.get("project.outdated_framework") is None


class TestSeoAnalysis:
    def test_page_signals(self, make_project):
        content = (
            "export const metadata = { title: 'Home', description: 'Welcome' }\n"
            "export default function Home() {\n"
            "  return (\n"
            "    <main>\n"
            "      <h1>Home</h1>\n"
            '      <img src="/hero.png" />\n'
            '      <a href="/about">About</a>\n'
            "    </main>\n"
            "  )\n"
            "}\n"
        )
        root = make_project({"app/page.tsx": content})
        result = run_steps(root, "seo")
        metrics = result.metrics
        assert metrics.get("seo.meta.title") == 1
        assert metrics.get("seo.meta.exports_metadata") == 1
        assert metrics.get("seo.content.images_missing_alt") == 1
        assert metrics.get("seo.semantic_score") == 100.0
        assert metrics.get("seo.loading.unsized_images") == 1
        assert "Use <nav> element for navigation sections" in result.recommendations
        assert "Add alt text to all images" in result.recommendations

    def test_api_routes_are_not_markup(self, three_route_project):
        result = run_steps(three_route_project, "seo")
        assert result.metrics.get("seo.semantic.div", 0) == 0
        assert result.metrics.get("seo.meta.pages_without_metadata") == 2
