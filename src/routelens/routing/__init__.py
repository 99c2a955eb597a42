"""Route tree model, normalizer, convention detector, and walker."""

from .conventions import PatternType, detect_content_patterns, detect_path_patterns
from .models import (
    NormalizedPath,
    Param,
    ParamKind,
    PatternMatch,
    RouteKind,
    RouteRecord,
    RouterFamily,
    SegmentToken,
    TokenKind,
)
from .normalizer import compose_path, normalize_segment

__all__ = [
    "NormalizedPath",
    "Param",
    "ParamKind",
    "PatternMatch",
    "PatternType",
    "RouteKind",
    "RouteRecord",
    "RouterFamily",
    "SegmentToken",
    "TokenKind",
    "compose_path",
    "detect_content_patterns",
    "detect_path_patterns",
    "normalize_segment",
]
