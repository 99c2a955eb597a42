"""File classification: registry, built-in heuristics, complexity scoring."""

from . import heuristics, predicates  # noqa: F401  (register built-ins)
from .classifier import FileClassifier, FileFacts
from .complexity import complexity_score
from .registry import (
    ClassificationContext,
    Heuristic,
    HeuristicRegistry,
    default_registry,
)

__all__ = [
    "ClassificationContext",
    "FileClassifier",
    "FileFacts",
    "Heuristic",
    "HeuristicRegistry",
    "complexity_score",
    "default_registry",
]
