"""Fact predicates evaluated for every routing-convention file.

Group ``facts`` holds boolean/categorical answers stored on each
RouteRecord. ``http_methods`` lives in its own group because it returns a
set rather than a scalar.

All predicates are regex heuristics. False positives and negatives are
expected; identical content always yields identical facts.
"""

from __future__ import annotations

import re
from typing import FrozenSet

from ..routing.models import RouteKind, RouterFamily
from .registry import ClassificationContext, default_registry

HTTP_METHODS = ("GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
MUTATING_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})

_CLIENT_DIRECTIVE = re.compile(r"""^\s*(?:/\*.*?\*/\s*|//[^\n]*\n\s*)*["']use client["']""", re.DOTALL)
_SERVER_DIRECTIVE = re.compile(r"""["']use server["']""")
_SERVER_ONLY = re.compile(r"""import\s+["']server-only["']""")

_VALIDATION = re.compile(
    r"\bz\.(?:object|string|number|array|enum|union)\b"
    r"|\.safeParse\(|\.parseAsync\(|\bschema\.parse\("
    r"|from\s+[\"'](?:zod|yup|joi|valibot|superstruct|class-validator|ajv)[\"']"
    r"|\byup\.object\b|\bJoi\.object\b|\bvalidate(?:Request|Body|Input)?\("
)
_ERROR_HANDLING = re.compile(
    r"\btry\s*\{[\s\S]*?\}\s*catch\b|\.catch\(|\bonError\b|\bErrorBoundary\b|\bnotFound\(\)"
)
_CACHING = re.compile(
    r"\brevalidate\b|\brevalidatePath\(|\brevalidateTag\(|\bunstable_cache\(|[\"']force-cache[\"']"
    r"|\bcache\(|Cache-Control|export\s+const\s+dynamic\s*=\s*[\"']force-static[\"']"
)
_RATE_LIMIT = re.compile(
    r"(?i)\brate[-_]?limit|\bRatelimit\b|\blimiter\b|\bthrottle\b|status:\s*429|\b429\b"
)
_AUTH = re.compile(
    r"\bgetServerSession\(|\bauth\(\)|\bgetToken\(|\bcurrentUser\(|\bgetAuth\(|\bwithAuth\b"
    r"|\bheaders\(\)\.get\([\"']authorization[\"']\)|\brequest\.headers\.get\([\"']authorization[\"']\)"
)
_METADATA = re.compile(r"export\s+(?:const\s+metadata\b|(?:async\s+)?function\s+generateMetadata\b)")
_PAGES_SERVER_DATA = re.compile(r"\b(?:getServerSideProps|getStaticProps|getInitialProps)\b")

_METHOD_ALT = "|".join(HTTP_METHODS)
_EXPORTED_FUNCTION = re.compile(rf"export\s+(?:async\s+)?function\s+({_METHOD_ALT})\b")
_EXPORTED_CONST = re.compile(rf"export\s+const\s+({_METHOD_ALT})\s*=")
_EXPORT_LIST = re.compile(r"export\s*\{([^}]*)\}")
_REQ_METHOD = re.compile(rf"""(?:req|request)\.method\s*={{2,3}}\s*["']({_METHOD_ALT})["']""")
_CASE_METHOD = re.compile(rf"""case\s+["']({_METHOD_ALT})["']\s*:""")


@default_registry.register("client_directive", group="facts")
def client_directive(ctx: ClassificationContext) -> bool:
    """File opens with a 'use client' directive."""
    return bool(_CLIENT_DIRECTIVE.match(ctx.content))


@default_registry.register("server_directive", group="facts")
def server_directive(ctx: ClassificationContext) -> bool:
    """File declares a 'use server' directive (module or inline)."""
    return bool(_SERVER_DIRECTIVE.search(ctx.content))


@default_registry.register("server_only_import", group="facts")
def server_only_import(ctx: ClassificationContext) -> bool:
    """File imports the server-only marker package."""
    return bool(_SERVER_ONLY.search(ctx.content))


@default_registry.register("rendering", group="facts")
def rendering(ctx: ClassificationContext) -> str:
    """'client' or 'server'.

    App router files render on the server unless they opt into the client.
    Pages router pages render on the server only when they export a
    server data function; API routes and middleware always run on the server.
    """
    if ctx.kind in (RouteKind.ROUTE, RouteKind.MIDDLEWARE):
        return "server"
    if ctx.family is RouterFamily.PAGES:
        return "server" if _PAGES_SERVER_DATA.search(ctx.content) else "client"
    return "client" if _CLIENT_DIRECTIVE.match(ctx.content) else "server"


@default_registry.register("has_validation", group="facts")
def has_validation(ctx: ClassificationContext) -> bool:
    """Contains an input validation idiom (zod, yup, joi, validate(...))."""
    return bool(_VALIDATION.search(ctx.content))


@default_registry.register("has_error_handling", group="facts")
def has_error_handling(ctx: ClassificationContext) -> bool:
    """Contains try/catch, a rejection handler, or an error boundary."""
    return bool(_ERROR_HANDLING.search(ctx.content))


@default_registry.register("has_caching", group="facts")
def has_caching(ctx: ClassificationContext) -> bool:
    """Contains a caching directive or revalidation hint."""
    return bool(_CACHING.search(ctx.content))


@default_registry.register("has_rate_limit", group="facts")
def has_rate_limit(ctx: ClassificationContext) -> bool:
    """Contains a rate-limiting idiom."""
    return bool(_RATE_LIMIT.search(ctx.content))


@default_registry.register("has_auth", group="facts")
def has_auth(ctx: ClassificationContext) -> bool:
    """Contains a session or token check."""
    return bool(_AUTH.search(ctx.content))


@default_registry.register("exports_metadata", group="facts")
def exports_metadata(ctx: ClassificationContext) -> bool:
    """Exports static metadata or generateMetadata."""
    return bool(_METADATA.search(ctx.content))


@default_registry.register("http_methods", group="methods")
def http_methods(ctx: ClassificationContext) -> FrozenSet[str]:
    """Deduplicated HTTP verbs exported or handled by the file."""
    found = set(_EXPORTED_FUNCTION.findall(ctx.content))
    found.update(_EXPORTED_CONST.findall(ctx.content))
    for block in _EXPORT_LIST.findall(ctx.content):
        for item in block.split(","):
            name = item.strip().split(" as ")[-1].strip()
            if name in HTTP_METHODS:
                found.add(name)
    if ctx.family is RouterFamily.PAGES:
        found.update(_REQ_METHOD.findall(ctx.content))
        found.update(_CASE_METHOD.findall(ctx.content))
    return frozenset(found)
