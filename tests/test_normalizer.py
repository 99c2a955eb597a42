"""Tests for routelens.routing.normalizer and the path model."""

import pytest

from routelens.routing.models import (
    NormalizedPath,
    Param,
    ParamKind,
    RouteKind,
    RouterFamily,
    SegmentToken,
    TokenKind,
    parse_path,
)
from routelens.routing.normalizer import (
    compose_path,
    normalize_segment,
    route_file_kind,
    special_file_name,
    split_extension,
)

APP = RouterFamily.APP
PAGES = RouterFamily.PAGES


class TestNormalizeSegment:
    def test_literal_passes_through(self):
        token = normalize_segment("blog", APP)
        assert token == SegmentToken(TokenKind.LITERAL, "blog")

    @pytest.mark.parametrize(
        "name, value, kind",
        [
            ("[id]", "id", ParamKind.SINGLE),
            ("[...slug]", "slug", ParamKind.CATCH_ALL),
            ("[[...slug]]", "slug", ParamKind.OPTIONAL_CATCH_ALL),
        ],
    )
    def test_parameter_markers(self, name, value, kind):
        token = normalize_segment(name, APP)
        assert token.kind is TokenKind.PARAM
        assert token.value == value
        assert token.param_kind is kind

    def test_route_group(self):
        token = normalize_segment("(marketing)", APP)
        assert token.kind is TokenKind.GROUP
        assert token.value == "marketing"
        assert not token.contributes_segment

    def test_parallel_slot(self):
        token = normalize_segment("@modal", APP)
        assert token.kind is TokenKind.SLOT
        assert token.value == "modal"

    @pytest.mark.parametrize("prefix", ["(.)", "(..)", "(..)(..)", "(...)"])
    def test_intercepting_prefix_is_stripped(self, prefix):
        token = normalize_segment(f"{prefix}photo", APP)
        assert token.kind is TokenKind.LITERAL
        assert token.value == "photo"
        assert token.intercept == prefix

    def test_intercepted_parameter(self):
        token = normalize_segment("(..)[id]", APP)
        assert token.kind is TokenKind.PARAM
        assert token.param_kind is ParamKind.SINGLE
        assert token.intercept == "(..)"

    @pytest.mark.parametrize("name", ["page.tsx", "layout.js", "route.ts", "loading.tsx", "default.jsx"])
    def test_app_convention_files_are_empty(self, name):
        assert normalize_segment(name, APP, is_file=True).kind is TokenKind.EMPTY

    def test_pages_index_is_empty(self):
        assert normalize_segment("index.tsx", PAGES, is_file=True).kind is TokenKind.EMPTY

    def test_pages_file_name_becomes_segment(self):
        assert normalize_segment("about.tsx", PAGES, is_file=True) == SegmentToken(TokenKind.LITERAL, "about")
        token = normalize_segment("[id].tsx", PAGES, is_file=True)
        assert token.kind is TokenKind.PARAM and token.value == "id"

    def test_unknown_extension_is_kept(self):
        assert split_extension("notes.md") == ("notes.md", "")
        assert split_extension("page.tsx") == ("page", ".tsx")


class TestComposePath:
    def test_group_is_metadata_not_segment(self):
        tokens = [
            normalize_segment("(marketing)", APP),
            normalize_segment("about", APP),
            normalize_segment("page.ts", APP, is_file=True),
        ]
        path, groups, slots, intercepts = compose_path(tokens)
        assert str(path) == "/about"
        assert groups == ("marketing",)
        assert slots == ()
        assert intercepts == ()

    def test_slot_and_intercept_recorded(self):
        tokens = [
            normalize_segment("@modal", APP),
            normalize_segment("(.)photo", APP),
            normalize_segment("[id]", APP),
        ]
        path, groups, slots, intercepts = compose_path(tokens)
        assert str(path) == "/photo/[id]"
        assert slots == ("modal",)
        assert intercepts == ("(.)",)
        assert path.is_dynamic

    def test_root_path(self):
        path, _, _, _ = compose_path([normalize_segment("page.tsx", APP, is_file=True)])
        assert str(path) == "/"
        assert path.depth == 0
        assert not path.is_dynamic

    def test_display_round_trip(self):
        for text in ["/", "/about", "/blog/[...slug]", "/shop/[[...filters]]", "/users/[id]/edit"]:
            assert str(parse_path(text)) == text


class TestParamEquality:
    def test_params_match_by_kind(self):
        assert Param(ParamKind.SINGLE, "id") == Param(ParamKind.SINGLE, "slug")
        assert Param(ParamKind.SINGLE, "id") != Param(ParamKind.CATCH_ALL, "id")

    def test_paths_match_structurally(self):
        a = NormalizedPath(("users", Param(ParamKind.SINGLE, "id")))
        b = NormalizedPath(("users", Param(ParamKind.SINGLE, "userId")))
        assert a.matches(b)
        assert str(a) != str(b)


class TestFileKinds:
    @pytest.mark.parametrize(
        "name, kind",
        [
            ("page.tsx", RouteKind.PAGE),
            ("layout.js", RouteKind.LAYOUT),
            ("template.tsx", RouteKind.LAYOUT),
            ("route.ts", RouteKind.ROUTE),
            ("utils.ts", None),
            ("loading.tsx", None),
            ("page.md", None),
        ],
    )
    def test_app_router(self, name, kind):
        assert route_file_kind(name, APP) is kind

    def test_pages_router(self):
        assert route_file_kind("about.tsx", PAGES) is RouteKind.PAGE
        assert route_file_kind("users.ts", PAGES, in_api=True) is RouteKind.ROUTE

    def test_special_names(self):
        assert special_file_name("loading.tsx") == "loading"
        assert special_file_name("not-found.js") == "not-found"
        assert special_file_name("page.tsx") is None
