"""Configuration loading and management for routelens.

This module provides configuration discovery and validation. Configuration
sources are merged in priority order:
    1. Defaults (defined in AnalysisConfig)
    2. Global config (~/.routelens.toml)
    3. Project config (./routelens.toml)
    4. Explicit config file
    5. Environment variables (ROUTELENS_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(verbose=True, complexity_threshold=40)
    >>> config.verbosity
    'verbose'
    >>> config.complexity_threshold
    40
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError

Verbosity = Literal["quiet", "normal", "verbose"]

ANALYSIS_TYPES = ("routes", "data", "performance", "seo")


@dataclass(frozen=True)
class AnalysisConfig:
    """Configuration for one analysis invocation.

    All fields have defaults. Users typically override only a few
    fields via CLI flags or a ``routelens.toml`` file.

    Attributes:
        Traversal:
            source_extensions: File extensions the walker reads as source
            private_prefix: Directory/file name prefix that is never traversed
            allow_hidden_files: Traverse dot-prefixed entries
            max_file_size_mb: Files larger than this are reported, not read

        History and reports:
            history_dir: Directory holding one JSON file per history entry
            logs_dir: Directory holding per-run JSON reports
            default_validity_hours: Age after which a history hit is a miss
            validity_hours: Per analysis type override of the validity window
            history_retention_days: Age used by the prune maintenance pass
            enable_history: Consult and update the history store
            write_reports: Write a JSON report per run

        Heuristic thresholds:
            complexity_threshold: Flag files whose complexity exceeds this
            heavy_component_bytes: Components larger than this count as heavy
            max_use_state: useState calls per file before flagging complex state

        Classification cache:
            cache_enabled: Persist per-file classification facts with diskcache
            cache_dir: Directory for cache storage
            cache_ttl_hours: Cache time-to-live in hours

        Execution:
            workers: Thread pool size for walking independent roots (1 = sequential)
            verbosity: Logging verbosity level
            log_file: Append DEBUG-level logs to this file ("" = no file)
    """

    # Traversal
    source_extensions: tuple = (".js", ".jsx", ".ts", ".tsx", ".mjs")
    private_prefix: str = "_"
    allow_hidden_files: bool = False
    max_file_size_mb: float = 2.0

    # History and reports
    history_dir: str = ".routelens/history"
    logs_dir: str = ".routelens/logs"
    default_validity_hours: float = 24.0
    validity_hours: Dict[str, float] = field(default_factory=dict)
    history_retention_days: int = 30
    enable_history: bool = True
    write_reports: bool = True

    # Heuristic thresholds
    complexity_threshold: float = 25.0
    heavy_component_bytes: int = 5000
    max_use_state: int = 5

    # Classification cache
    cache_enabled: bool = False
    cache_dir: str = ".routelens/cache"
    cache_ttl_hours: int = 24

    # Execution
    workers: int = 1
    verbosity: Verbosity = "normal"
    log_file: str = ""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if isinstance(self.source_extensions, list):
            object.__setattr__(self, "source_extensions", tuple(self.source_extensions))
        if not self.source_extensions:
            raise ValueError("source_extensions must not be empty")
        for ext in self.source_extensions:
            if not ext.startswith("."):
                raise ValueError(f"source extension must start with '.': {ext}")

        if self.max_file_size_mb <= 0:
            raise ValueError("max_file_size_mb must be positive")

        if self.default_validity_hours < 0:
            raise ValueError("default_validity_hours must be non-negative")
        for analysis_type, hours in self.validity_hours.items():
            if analysis_type not in ANALYSIS_TYPES:
                raise ValueError(f"validity_hours has unknown analysis type '{analysis_type}'")
            if hours < 0:
                raise ValueError(f"validity_hours[{analysis_type}] must be non-negative")
        if self.history_retention_days < 0:
            raise ValueError("history_retention_days must be non-negative")

        if self.complexity_threshold < 0:
            raise ValueError("complexity_threshold must be non-negative")
        if self.heavy_component_bytes < 1:
            raise ValueError("heavy_component_bytes must be at least 1")
        if self.max_use_state < 0:
            raise ValueError("max_use_state must be non-negative")

        if self.cache_ttl_hours < 0:
            raise ValueError("cache_ttl_hours must be non-negative")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.verbosity not in ("quiet", "normal", "verbose"):
            raise ValueError(f"verbosity must be quiet, normal or verbose, got '{self.verbosity}'")

    @property
    def max_file_size_bytes(self) -> int:
        """Get max file size in bytes."""
        return int(self.max_file_size_mb * 1024 * 1024)

    def validity_seconds(self, analysis_type: str) -> float:
        """Validity window of a history entry for the given analysis type."""
        hours = self.validity_hours.get(analysis_type, self.default_validity_hours)
        return hours * 3600

    def cache_key_fields(self) -> dict:
        """Fields that change classification output; used for cache keys."""
        return {
            "source_extensions": list(self.source_extensions),
            "complexity_threshold": self.complexity_threshold,
        }

    def result_key_fields(self) -> dict:
        """Fields that change an analysis result; part of the history key."""
        return {
            **self.cache_key_fields(),
            "private_prefix": self.private_prefix,
            "allow_hidden_files": self.allow_hidden_files,
            "max_file_size_mb": self.max_file_size_mb,
            "heavy_component_bytes": self.heavy_component_bytes,
            "max_use_state": self.max_use_state,
        }


DEFAULT_CONFIG = AnalysisConfig()


def load_config(config_file: Optional[Path] = None, **overrides) -> AnalysisConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated AnalysisConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict = {}

    global_config = Path.home() / ".routelens.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "routelens.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    # Convert verbosity boolean flags to string
    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update(overrides)

    try:
        return AnalysisConfig(**merged)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from ROUTELENS_* environment variables.

    Scalar fields only; tuple and mapping fields are configured through TOML.

    Returns:
        Dict of field_name -> parsed_value for any ROUTELENS_* vars found.
    """
    type_hints = get_type_hints(AnalysisConfig)

    result: dict[str, Any] = {}

    for field_name in AnalysisConfig.__dataclass_fields__:
        env_key = f"ROUTELENS_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
            if parsed is not None:
                result[field_name] = parsed
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse environment variable string to the correct type.

    Returns:
        Parsed value or None if the type is not settable from the environment

    Raises:
        ValueError: If value can't be parsed to expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if origin in (dict, tuple) or type_hint in (dict, tuple):
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict."""
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
