"""
Logging configuration — one setup call per process.

The CLI calls setup_logging() before running a round.  Every module
that does ``logger = logging.getLogger(__name__)`` inherits it.

Levels are resolved in precedence order:
    --debug / --verbose / --quiet  >  STOREGEN_LOG_LEVEL  >  WARNING

STOREGEN_LOG_FILE adds a file handler (level: STOREGEN_LOG_FILE_LEVEL,
defaulting to the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

ENV_LEVEL = "STOREGEN_LOG_LEVEL"
ENV_FILE = "STOREGEN_LOG_FILE"
ENV_FILE_LEVEL = "STOREGEN_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# DEBUG and file output: file:line of the emitting code
_FMT_DETAIL = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%Y-%m-%d %H:%M:%S")

# (highest level, format) pairs, checked in order; WARNING and above
# falls through to diagnostics that read like compiler output
_CONSOLE_FORMATS: tuple[tuple[int, tuple[str, str | None]], ...] = (
    (logging.DEBUG, _FMT_DETAIL),
    (logging.INFO, ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S")),
)
_FMT_MINIMAL = ("storegen: %(message)s", None)


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(ENV_LEVEL, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Configure the root logger.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file, defaulting to ``level``.
    """
    console_level = _parse_level(level)
    handlers: list[logging.Handler] = [_console_handler(console_level)]
    if log_file:
        handlers.append(_file_handler(log_file, _parse_level(log_file_level or level)))

    # The root passes on anything at least one handler wants.
    logging.basicConfig(
        level=min(h.level for h in handlers),
        handlers=handlers,
        force=True,
    )


def _console_handler(level: int) -> logging.Handler:
    fmt, datefmt = next(
        (f for ceiling, f in _CONSOLE_FORMATS if level <= ceiling),
        _FMT_MINIMAL,
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    fmt, datefmt = _FMT_DETAIL
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def setup_from_environment(level: str, environ: Mapping[str, str] | None = None) -> None:
    """setup_logging() with file output taken from STOREGEN_LOG_FILE*."""
    env = os.environ if environ is None else environ
    setup_logging(
        level=level,
        log_file=env.get(ENV_FILE),
        log_file_level=env.get(ENV_FILE_LEVEL),
    )


def _parse_level(name: str | None) -> int:
    """Level name to its numeric value; unknown or empty names mean WARNING."""
    value = logging.getLevelName(name.upper()) if name else None
    return value if isinstance(value, int) else logging.WARNING
