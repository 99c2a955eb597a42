"""Tests for the fact predicates registered in the default registry."""

import pytest

from routelens.classify import default_registry
from routelens.classify.predicates import (
    client_directive,
    has_auth,
    has_caching,
    has_error_handling,
    has_rate_limit,
    has_validation,
    http_methods,
    rendering,
)
from routelens.classify.registry import ClassificationContext, HeuristicRegistry
from routelens.routing.models import RouteKind, RouterFamily


def ctx(content, kind=None, family=RouterFamily.APP):
    return ClassificationContext(content=content, kind=kind, family=family)


class TestRegistry:
    def test_builtin_groups_registered(self):
        assert "rendering" in default_registry.names("facts")
        assert "http_methods" in default_registry.names("methods")
        assert "seo.meta" in default_registry.names("counters")
        assert "middleware.matchers" in default_registry.names("middleware")

    def test_duplicate_name_rejected(self):
        registry = HeuristicRegistry()
        registry.register("x", group="facts")(lambda c: True)
        with pytest.raises(ValueError):
            registry.register("x", group="facts")(lambda c: False)

    def test_copy_is_independent(self):
        clone = default_registry.copy()
        clone.register("extra_fact", group="facts")(lambda c: True)
        assert "extra_fact" in clone
        assert "extra_fact" not in default_registry

    def test_evaluate_group(self):
        registry = HeuristicRegistry()
        registry.register("has_a", group="facts")(lambda c: "a" in c.content)
        registry.register("has_b", group="facts")(lambda c: "b" in c.content)
        assert registry.evaluate_group("facts", ctx("abc")) == {"has_a": True, "has_b": True}


class TestRendering:
    def test_app_defaults_to_server(self):
        assert rendering(ctx("export default function Page() {}", RouteKind.PAGE)) == "server"

    def test_app_client_directive(self):
        content = "// comment\n'use client'\nexport default function Page() {}"
        assert client_directive(ctx(content))
        assert rendering(ctx(content, RouteKind.PAGE)) == "client"

    def test_directive_must_lead(self):
        content = "import x from 'y'\n'use client'\n"
        assert not client_directive(ctx(content))

    def test_pages_without_server_data_is_client(self):
        assert rendering(ctx("export default function About() {}", RouteKind.PAGE, RouterFamily.PAGES)) == "client"

    def test_pages_with_server_props_is_server(self):
        content = "export async function getServerSideProps() { return { props: {} } }"
        assert rendering(ctx(content, RouteKind.PAGE, RouterFamily.PAGES)) == "server"

    def test_routes_and_middleware_always_server(self):
        assert rendering(ctx("'use client'", RouteKind.ROUTE)) == "server"
        assert rendering(ctx("'use client'", RouteKind.MIDDLEWARE, RouterFamily.PAGES)) == "server"


class TestFactPredicates:
    def test_validation(self):
        assert has_validation(ctx("import { z } from 'zod'\nconst s = z.object({})"))
        assert not has_validation(ctx("const body = await request.json()"))

    def test_error_handling(self):
        assert has_error_handling(ctx("try { await run() } catch (e) { log(e) }"))
        assert has_error_handling(ctx("fetch(url).catch(() => null)"))
        assert not has_error_handling(ctx("return await run()"))

    def test_caching(self):
        assert has_caching(ctx("export const revalidate = 60"))
        assert not has_caching(ctx("return Response.json(data)"))

    def test_rate_limit(self):
        assert has_rate_limit(ctx("const { success } = await ratelimit.limit(ip)"))
        assert not has_rate_limit(ctx("return Response.json(data)"))

    def test_auth(self):
        assert has_auth(ctx("const session = await getServerSession(authOptions)"))
        assert not has_auth(ctx("return Response.json(data)"))


class TestHttpMethods:
    def test_exported_functions_and_consts(self):
        content = (
            "export async function GET() {}\n"
            "export function POST() {}\n"
            "export const DELETE = handler\n"
        )
        assert http_methods(ctx(content, RouteKind.ROUTE)) == frozenset({"GET", "POST", "DELETE"})

    def test_export_list(self):
        content = "const handler = auth()\nexport { handler as GET, handler as POST }\n"
        assert http_methods(ctx(content, RouteKind.ROUTE)) == frozenset({"GET", "POST"})

    def test_deduplicated(self):
        content = "export async function GET() {}\nexport { GET }\n"
        assert http_methods(ctx(content, RouteKind.ROUTE)) == frozenset({"GET"})

    def test_pages_api_method_checks(self):
        content = (
            "export default function handler(req, res) {\n"
            "  if (req.method === 'POST') { return create(req, res) }\n"
            "  switch (req.method) { case 'PUT': return update(req, res) }\n"
            "}\n"
        )
        found = http_methods(ctx(content, RouteKind.ROUTE, RouterFamily.PAGES))
        assert found == frozenset({"POST", "PUT"})

    def test_method_checks_ignored_in_app_router(self):
        content = "if (req.method === 'POST') {}"
        assert http_methods(ctx(content, RouteKind.ROUTE)) == frozenset()
