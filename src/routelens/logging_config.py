"""
Logging configuration for routelens.

Provides structured logging with rich formatting for terminal output.
Only the ``routelens`` logger is configured; the root logger and other
libraries' loggers are left alone. Calling ``setup_logging`` again (one
CLI process running several commands, or a test runner) replaces the
previous handlers instead of stacking new ones.

Engine messages about one analysis run go through ``AnalysisLogAdapter``
so every line names its analysis type:

    >>> log = get_logger(__name__, analysis_type="seo")
    >>> log.info("12 files")        # logged as "[seo] 12 files"
"""

import logging
from typing import Any, MutableMapping, Optional, Tuple, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "routelens"

VERBOSITY_LEVELS = {
    "quiet": logging.ERROR,
    "normal": logging.WARNING,
    "verbose": logging.DEBUG,
}


def resolve_level(verbose: bool = False, quiet: bool = False, verbosity: Optional[str] = None) -> int:
    """Log level from CLI flags or a config verbosity; ``quiet`` wins over everything."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return VERBOSITY_LEVELS.get(verbosity or "normal", logging.WARNING)


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[str] = None,
    verbosity: Optional[str] = None,
) -> logging.Logger:
    """
    Configure the routelens logger with a rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to append logs to (always at DEBUG)
        verbosity: Config verbosity ("quiet", "normal", "verbose"); flags win

    Returns:
        Configured logger instance for routelens
    """
    level = resolve_level(verbose, quiet, verbosity)
    show_debug = level <= logging.DEBUG

    console_handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        tracebacks_show_locals=show_debug,
        # File paths and route segments contain brackets: [id], [...slug]
        markup=False,
        show_time=True,
        show_path=show_debug,
    )
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    handlers: list = [console_handler]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for handler in handlers:
        logger.addHandler(handler)
    logger.setLevel(logging.DEBUG if log_file else level)
    logger.propagate = False

    return logger


class AnalysisLogAdapter(logging.LoggerAdapter):
    """Prefixes messages with the analysis type, e.g. ``[routes] ...``."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        return f"[{self.extra['analysis_type']}] {msg}", kwargs


def get_logger(
    name: Optional[str] = None, analysis_type: Optional[str] = None
) -> Union[logging.Logger, AnalysisLogAdapter]:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'routelens.routing.walker')
              If None, returns the root routelens logger
        analysis_type: Tag every message with this analysis type

    Returns:
        Logger instance, or an adapter when ``analysis_type`` is given
    """
    if name is None:
        name = ROOT_LOGGER
    elif not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    logger = logging.getLogger(name)
    if analysis_type is None:
        return logger
    return AnalysisLogAdapter(logger, {"analysis_type": analysis_type})
