"""Counter heuristics used by the data, performance, SEO and route steps.

Each heuristic returns a flat ``{name: int}`` mapping of occurrence counts
(booleans are reported as 0/1) so the analysis steps can turn them into
MetricTree counters without knowing anything about the regexes.
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Pattern, Union

from .registry import ClassificationContext, default_registry

Counts = Dict[str, int]
Rule = Union[Pattern[str], str]


def _count(rule: Rule, content: str) -> int:
    if isinstance(rule, str):
        return int(rule in content)
    return len(rule.findall(content))


def _apply(rules: Mapping[str, Rule], content: str) -> Counts:
    return {name: _count(rule, content) for name, rule in rules.items()}


# data.*

DATA_FETCHING: Dict[str, Rule] = {
    "fetch_calls": re.compile(r"\bfetch\("),
    "use_query": re.compile(r"\buseQuery\b"),
    "use_swr": re.compile(r"\buseSWR\b"),
    "server_actions": re.compile(r"""["']use server["']"""),
}

DATA_STATE: Dict[str, Rule] = {
    "use_state": re.compile(r"\buseState\b"),
    "use_reducer": re.compile(r"\buseReducer\b"),
    "context_api": re.compile(r"\buseContext\b|\bcreateContext\b"),
    "redux": re.compile(r"\buseDispatch\b|\buseSelector\b"),
    "zustand": re.compile(r"\bcreate\(\s*\(\s*set\b"),
}

DATA_CACHING: Dict[str, Rule] = {
    "revalidation": re.compile(r"\brevalidate(?:Path|Tag)?\b"),
    "static_props": re.compile(r"\bgetStaticProps\b"),
    "server_props": re.compile(r"\bgetServerSideProps\b"),
    "fetch_cache": re.compile(r"""cache:\s*["'](?:force-cache|no-store)["']"""),
    "unstable_cache": re.compile(r"\bunstable_cache\("),
}

DATA_MUTATIONS: Dict[str, Rule] = {
    "form_submissions": re.compile(r"\bhandleSubmit\b|\bonSubmit\b"),
    "optimistic_updates": re.compile(r"(?i)optimistic"),
    "server_mutations": re.compile(r"\bmutate\(|\buseMutation\b"),
}

# performance.*

PERFORMANCE_SPLITTING: Dict[str, Rule] = {
    "dynamic_imports": re.compile(r"(?<![\w.])import\(|\bdynamic\(\s*\(\)\s*=>"),
    "lazy_components": re.compile(r"\bReact\.lazy\(|(?<![\w.])lazy\("),
}

PERFORMANCE_IMAGES: Dict[str, Rule] = {
    "next_image": re.compile(r"<Image\b"),
    "img_tags": re.compile(r"<img\b"),
}

# seo.*

SEO_META: Dict[str, Rule] = {
    "title": re.compile(r"\btitle:|<title>"),
    "description": re.compile(r"\bdescription:|<meta[^>]*name=[\"']description[\"']"),
    "viewport": "viewport",
    "robots": "robots",
    "canonical": "canonical",
    "open_graph": re.compile(r"\bog:|\bopenGraph\b"),
    "twitter_cards": re.compile(r"\btwitter:"),
}

SEO_CONTENT: Dict[str, Rule] = {
    "h1": re.compile(r"<h1\b"),
    "h2": re.compile(r"<h2\b"),
    "h3": re.compile(r"<h3\b"),
    "paragraphs": re.compile(r"<p\b"),
    "images": re.compile(r"<img\b|<Image\b"),
    "images_with_alt": re.compile(r"""\balt=(?:["'][^"']+["']|\{[^}]+\})"""),
    "internal_links": re.compile(r"""\bhref=["']/[^"']*["']"""),
    "external_links": re.compile(r"""\bhref=["']https?://[^"']+["']"""),
    "generic_links": re.compile(r"(?i)>\s*(?:click here|click|here|read more)\s*<"),
}

SEO_SEMANTIC: Dict[str, Rule] = {
    "header": re.compile(r"<header\b"),
    "nav": re.compile(r"<nav\b"),
    "main": re.compile(r"<main\b"),
    "article": re.compile(r"<article\b"),
    "section": re.compile(r"<section\b"),
    "aside": re.compile(r"<aside\b"),
    "footer": re.compile(r"<footer\b"),
    "landmark_roles": re.compile(
        r"""role=["'](?:main|navigation|banner|contentinfo|complementary|search)["']"""
    ),
    "div": re.compile(r"<div\b"),
    "div_with_role": re.compile(r"<div[^>]+role="),
}

SEO_LOADING: Dict[str, Rule] = {
    "lazy_images": re.compile(r"""loading=["']lazy["']"""),
    "async_scripts": re.compile(r"<script[^>]*\basync\b"),
    "deferred_scripts": re.compile(r"<script[^>]*\bdefer\b"),
    "blocking_scripts": re.compile(r"<script(?![^>]*\b(?:async|defer|type=[\"']application/ld\+json[\"'])\b)[^>]*\bsrc="),
    "sized_images": re.compile(r"<(?:img|Image)\b[^>]*\b(?:width|height)="),
    "unsized_images": re.compile(r"<img\b(?![^>]*\b(?:width|height)=)[^>]*>"),
    "next_image": re.compile(r"<Image\b"),
}

# routes.*

ACTIONS_FUNCTIONS: Dict[str, Rule] = {
    "directives": re.compile(r"""["']use server["']"""),
    "exported_async": re.compile(r"export\s+async\s+function\s+\w+"),
    "form_actions": re.compile(r"\baction=\{"),
}

_MATCHER_BLOCK = re.compile(r"matcher\s*:\s*(\[[^\]]*\]|[\"'][^\"']*[\"'])")
_QUOTED = re.compile(r"""["']([^"']+)["']""")

_HEAVY_IMPORTS = re.compile(
    r"""from\s+["'](?:moment|lodash|chart\.js|d3|three|@mui/material|antd|framer-motion)["']"""
)


@default_registry.register("data.fetching", group="counters")
def data_fetching(ctx: ClassificationContext) -> Counts:
    """fetch(), React Query, SWR and server action usage."""
    return _apply(DATA_FETCHING, ctx.content)


@default_registry.register("data.state", group="counters")
def data_state(ctx: ClassificationContext) -> Counts:
    """Hooks and libraries used for client state."""
    return _apply(DATA_STATE, ctx.content)


@default_registry.register("data.caching", group="counters")
def data_caching(ctx: ClassificationContext) -> Counts:
    return _apply(DATA_CACHING, ctx.content)


@default_registry.register("data.mutations", group="counters")
def data_mutations(ctx: ClassificationContext) -> Counts:
    return _apply(DATA_MUTATIONS, ctx.content)


@default_registry.register("performance.components", group="counters")
def performance_components(ctx: ClassificationContext) -> Counts:
    """Size and import weight of a component file.

    ``heavy`` is left to the step because the threshold is configurable;
    this reports raw bytes and heavy library imports.
    """
    return {
        "bytes": len(ctx.content.encode("utf-8")),
        "heavy_imports": len(_HEAVY_IMPORTS.findall(ctx.content)),
    }


@default_registry.register("performance.splitting", group="counters")
def performance_splitting(ctx: ClassificationContext) -> Counts:
    return _apply(PERFORMANCE_SPLITTING, ctx.content)


@default_registry.register("performance.images", group="counters")
def performance_images(ctx: ClassificationContext) -> Counts:
    """next/image components versus raw <img> tags."""
    return _apply(PERFORMANCE_IMAGES, ctx.content)


@default_registry.register("seo.meta", group="counters")
def seo_meta(ctx: ClassificationContext) -> Counts:
    return _apply(SEO_META, ctx.content)


@default_registry.register("seo.content", group="counters")
def seo_content(ctx: ClassificationContext) -> Counts:
    counts = _apply(SEO_CONTENT, ctx.content)
    counts["text_chars"] = len(re.sub(r"<[^>]+>", "", ctx.content).strip())
    return counts


@default_registry.register("seo.semantic", group="counters")
def seo_semantic(ctx: ClassificationContext) -> Counts:
    return _apply(SEO_SEMANTIC, ctx.content)


@default_registry.register("seo.loading", group="counters")
def seo_loading(ctx: ClassificationContext) -> Counts:
    return _apply(SEO_LOADING, ctx.content)


@default_registry.register("actions.functions", group="counters")
def actions_functions(ctx: ClassificationContext) -> Counts:
    """Server action directives, exported async functions and form actions."""
    return _apply(ACTIONS_FUNCTIONS, ctx.content)


@default_registry.register("middleware.matchers", group="middleware")
def middleware_matchers(ctx: ClassificationContext) -> List[str]:
    """Path matchers declared in a middleware ``config`` export."""
    found: List[str] = []
    for block in _MATCHER_BLOCK.findall(ctx.content):
        for value in _QUOTED.findall(block):
            if value not in found:
                found.append(value)
    return found


def semantic_score(counts: Mapping[str, int]) -> float:
    """Share of semantic landmarks among semantic and role-carrying div elements, 0-100."""
    semantic = sum(counts.get(k, 0) for k in ("header", "nav", "main", "article", "section", "aside", "footer", "landmark_roles"))
    non_semantic = counts.get("div_with_role", 0)
    if semantic + non_semantic == 0:
        return 0.0
    return round(semantic / (semantic + non_semantic) * 100, 2)
