"""Path normalizer — raw file-system segment names to canonical route tokens.

Rules, in priority order:
  1. Routing-convention file names (page/layout/template/route in the app
     router, ``index`` in the pages router) normalize to the empty token.
  2. ``[name]`` is a single dynamic parameter.
  3. ``[...name]`` is a catch-all, ``[[...name]]`` an optional catch-all.
  4. ``(group)`` is a route group: no path segment, recorded as metadata.
     Intercepting prefixes ``(.)``, ``(..)``, ``(..)(..)`` and ``(...)`` are
     stripped and recorded; the remainder normalizes as usual.
  5. ``@slot`` is a parallel-route slot: no path segment, recorded.

Anything else passes through unchanged as a literal.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Tuple

from .models import (
    NormalizedPath,
    ParamKind,
    RouteKind,
    RouterFamily,
    SegmentToken,
    TokenKind,
)

SOURCE_EXTENSIONS = (".js", ".jsx", ".ts", ".tsx", ".mjs")

# app router convention file base name -> kind
APP_ROUTE_FILES = {
    "page": RouteKind.PAGE,
    "layout": RouteKind.LAYOUT,
    "template": RouteKind.LAYOUT,
    "route": RouteKind.ROUTE,
}

# Files with framework meaning that are not routes themselves
APP_SPECIAL_FILES = frozenset({"loading", "error", "global-error", "not-found", "default"})

PAGES_INDEX = "index"

_OPTIONAL_CATCH_ALL_RE = re.compile(r"^\[\[\.\.\.([^\[\]/]+)\]\]$")
_CATCH_ALL_RE = re.compile(r"^\[\.\.\.([^\[\]/]+)\]$")
_SINGLE_RE = re.compile(r"^\[([^\[\]/.][^\[\]/]*)\]$")
_INTERCEPT_RE = re.compile(r"^(\(\.\.\.\)|(?:\(\.\.\))+|\(\.\))(.+)$")
_GROUP_RE = re.compile(r"^\(([^().][^()]*)\)$")


def split_extension(name: str, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> Tuple[str, str]:
    """Split a source file name into (base, extension); extension is "" if unknown."""
    for ext in sorted(extensions, key=len, reverse=True):
        if name.endswith(ext) and len(name) > len(ext):
            return name[: -len(ext)], ext
    return name, ""


def normalize_segment(
    name: str,
    family: RouterFamily,
    is_file: bool = False,
    extensions: Iterable[str] = SOURCE_EXTENSIONS,
) -> SegmentToken:
    """Normalize one raw segment name into a canonical token.

    Args:
        name: File or directory name (no separators)
        family: Router family the segment belongs to
        is_file: Treat ``name`` as a file name (strip a source extension)
        extensions: Recognized source extensions

    Returns:
        The canonical SegmentToken
    """
    if is_file:
        base, ext = split_extension(name, extensions)
        if ext:
            if family is RouterFamily.APP and (base in APP_ROUTE_FILES or base in APP_SPECIAL_FILES):
                return SegmentToken(TokenKind.EMPTY)
            if family is RouterFamily.PAGES and base == PAGES_INDEX:
                return SegmentToken(TokenKind.EMPTY)
            name = base

    intercept = ""
    match = _INTERCEPT_RE.match(name)
    if match:
        intercept, name = match.group(1), match.group(2)

    token = _bracket_token(name)
    if token is None:
        group = _GROUP_RE.match(name)
        if group and not intercept:
            return SegmentToken(TokenKind.GROUP, group.group(1))
        if name.startswith("@") and len(name) > 1 and not intercept:
            return SegmentToken(TokenKind.SLOT, name[1:])
        token = SegmentToken(TokenKind.LITERAL, name)

    if intercept:
        return SegmentToken(token.kind, token.value, token.param_kind, intercept)
    return token


def _bracket_token(name: str) -> Optional[SegmentToken]:
    match = _OPTIONAL_CATCH_ALL_RE.match(name)
    if match:
        return SegmentToken(TokenKind.PARAM, match.group(1), ParamKind.OPTIONAL_CATCH_ALL)
    match = _CATCH_ALL_RE.match(name)
    if match:
        return SegmentToken(TokenKind.PARAM, match.group(1), ParamKind.CATCH_ALL)
    match = _SINGLE_RE.match(name)
    if match:
        return SegmentToken(TokenKind.PARAM, match.group(1), ParamKind.SINGLE)
    return None


def compose_path(
    tokens: Iterable[SegmentToken],
) -> Tuple[NormalizedPath, Tuple[str, ...], Tuple[str, ...], Tuple[str, ...]]:
    """Fold tokens into (path, groups, slots, intercepts)."""
    path = NormalizedPath()
    groups: List[str] = []
    slots: List[str] = []
    intercepts: List[str] = []
    for token in tokens:
        if token.kind is TokenKind.GROUP:
            groups.append(token.value)
        elif token.kind is TokenKind.SLOT:
            slots.append(token.value)
        else:
            path = path.append(token)
        if token.intercept:
            intercepts.append(token.intercept)
    return path, tuple(groups), tuple(slots), tuple(intercepts)


def route_file_kind(
    name: str,
    family: RouterFamily,
    in_api: bool = False,
    extensions: Iterable[str] = SOURCE_EXTENSIONS,
) -> Optional[RouteKind]:
    """Return the RouteKind of a routing-convention file, or None.

    In the app router only convention base names count. In the pages
    router every source file is a route: a page, or an API route when it
    lives under ``api/``.
    """
    base, ext = split_extension(name, extensions)
    if not ext:
        return None
    if family is RouterFamily.APP:
        return APP_ROUTE_FILES.get(base)
    return RouteKind.ROUTE if in_api else RouteKind.PAGE


def special_file_name(name: str, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> Optional[str]:
    """Return the special-file base name (loading, error, ...) or None."""
    base, ext = split_extension(name, extensions)
    if ext and base in APP_SPECIAL_FILES:
        return base
    return None
