"""
routelens - Static analysis of file-routed web applications

Walks the app/ and pages/ routing trees of a Next.js-style project, turns
file paths into URL routes, and reports route topology, data-handling,
performance, and SEO signals. Results are stored per content snapshot so
unchanged projects are not re-analyzed.
"""

__version__ = "0.1.0"

from .analysis.engine import AnalysisEngine, AnalysisOutcome
from .config import AnalysisConfig, load_config
from .metrics.result import AnalysisResult, Finding

__all__ = [
    "AnalysisEngine",  # Main entry point
    "AnalysisOutcome",
    "AnalysisConfig",
    "load_config",
    "AnalysisResult",
    "Finding",
]
