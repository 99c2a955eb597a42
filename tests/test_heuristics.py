"""Tests for counter heuristics and the complexity score."""

from routelens.classify.complexity import (
    branch_points,
    complexity_score,
    max_brace_depth,
    non_blank_lines,
    to_centi,
)
from routelens.classify.heuristics import (
    data_caching,
    data_fetching,
    data_state,
    middleware_matchers,
    performance_components,
    performance_images,
    semantic_score,
    seo_content,
    seo_loading,
    seo_meta,
    seo_semantic,
)
from routelens.classify.registry import ClassificationContext


def ctx(content):
    return ClassificationContext(content=content)


class TestDataCounters:
    def test_fetch_calls_are_counted(self):
        content = "await fetch('/a')\nawait fetch('/b')\nconst q = useQuery(key)\n"
        counts = data_fetching(ctx(content))
        assert counts["fetch_calls"] == 2
        assert counts["use_query"] == 1
        assert counts["use_swr"] == 0

    def test_state_hooks(self):
        content = "const [a] = useState(0)\nconst [b] = useState(1)\nconst c = useContext(Theme)\n"
        counts = data_state(ctx(content))
        assert counts["use_state"] == 2
        assert counts["context_api"] == 1

    def test_caching_exports(self):
        content = "export async function getStaticProps() { return { props: {}, revalidate: 60 } }"
        counts = data_caching(ctx(content))
        assert counts["static_props"] == 1
        assert counts["revalidation"] == 1
        assert counts["server_props"] == 0


class TestPerformanceCounters:
    def test_component_size_and_heavy_imports(self):
        content = "import moment from 'moment'\nimport _ from 'lodash'\n"
        counts = performance_components(ctx(content))
        assert counts["bytes"] == len(content.encode("utf-8"))
        assert counts["heavy_imports"] == 2

    def test_images(self):
        counts = performance_images(ctx('<Image src="/a.png" />\n<img src="/b.png" />\n<img src="/c.png">'))
        assert counts == {"next_image": 1, "img_tags": 2}


class TestSeoCounters:
    def test_meta_presence_rules(self):
        content = "export const metadata = { title: 'Home', description: 'x', openGraph: {} }\n// viewport\n"
        counts = seo_meta(ctx(content))
        assert counts["title"] == 1
        assert counts["description"] == 1
        assert counts["open_graph"] == 1
        assert counts["viewport"] == 1
        assert counts["canonical"] == 0

    def test_content_alt_text_and_links(self):
        content = (
            '<h1>Title</h1><img src="/a.png" alt="A" /><img src="/b.png" />'
            '<a href="/about">About</a><a href="https://example.com">x</a><a href="/x">click here</a>'
        )
        counts = seo_content(ctx(content))
        assert counts["h1"] == 1
        assert counts["images"] == 2
        assert counts["images_with_alt"] == 1
        assert counts["internal_links"] == 2
        assert counts["external_links"] == 1
        assert counts["generic_links"] == 1
        assert counts["text_chars"] > 0

    def test_semantic_score(self):
        counts = seo_semantic(ctx('<header></header><main></main><div role="button"></div><div></div>'))
        assert counts["header"] == 1
        assert counts["main"] == 1
        assert counts["div"] == 2
        assert counts["div_with_role"] == 1
        assert semantic_score(counts) == round(2 / 3 * 100, 2)

    def test_semantic_score_empty(self):
        assert semantic_score({}) == 0.0

    def test_loading_scripts_and_images(self):
        content = (
            '<script src="/a.js"></script><script async src="/b.js"></script>'
            '<img src="/c.png" loading="lazy" width="10" height="10"><img src="/d.png">'
        )
        counts = seo_loading(ctx(content))
        assert counts["blocking_scripts"] == 1
        assert counts["async_scripts"] == 1
        assert counts["lazy_images"] == 1
        assert counts["sized_images"] == 1
        assert counts["unsized_images"] == 1


class TestMiddlewareMatchers:
    def test_list_matcher(self):
        content = "export const config = { matcher: ['/dashboard/:path*', '/api/:path*'] }"
        assert middleware_matchers(ctx(content)) == ["/dashboard/:path*", "/api/:path*"]

    def test_single_matcher(self):
        assert middleware_matchers(ctx("export const config = { matcher: '/admin' }")) == ["/admin"]

    def test_no_matcher(self):
        assert middleware_matchers(ctx("export function middleware() {}")) == []


class TestComplexity:
    def test_components(self):
        content = "if (a && b) {\n  for (x of y) { z() }\n}\n\n"
        assert branch_points(content) == 3
        assert max_brace_depth(content) == 2
        assert non_blank_lines(content) == 3
        assert complexity_score(content) == round(3 + 0.3 + 1.0, 2)

    def test_empty_content(self):
        assert complexity_score("") == 0.0

    def test_deterministic(self):
        content = "export default function Page() { return cond ? <A /> : <B /> }\n"
        assert complexity_score(content) == complexity_score(content)

    def test_monotonic_when_lines_are_appended(self):
        content = "export default function Page() {\n  return null\n}\n"
        previous = complexity_score(content)
        for extra in ["const a = 1\n", "if (a) { b() }\n", "while (x) { y() }\n", "\n"]:
            content += extra
            score = complexity_score(content)
            assert score >= previous
            previous = score

    def test_line_append_after_trailing_keyword(self):
        for content in ["if", "a ?", "x &", "{"]:
            for extra in ["\nx", "\n.", "\n&", "\n}"]:
                assert complexity_score(content + extra) >= complexity_score(content)

    def test_centi_units(self):
        assert to_centi(12.34) == 1234
        assert to_centi(0.1) + to_centi(0.2) + to_centi(0.3) == 60
        assert isinstance(to_centi(0.3), int)
