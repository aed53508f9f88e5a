"""
Logging configuration — set up once per invocation by the root group.

Every module that does ``logger = logging.getLogger(__name__)``
inherits this config.  Progress and diagnostics go to stderr so that
``evm version``, ``evm which`` and the ``--json`` outputs stay clean on
stdout.

Levels are resolved in precedence order:
    --debug  >  --verbose  >  --quiet  >  EVM_LOG_LEVEL  >  WARNING

Optional file output via EVM_LOG_FILE / EVM_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

LEVEL_ENV_VAR = "EVM_LOG_LEVEL"
FILE_ENV_VAR = "EVM_LOG_FILE"
FILE_LEVEL_ENV_VAR = "EVM_LOG_FILE_LEVEL"

# ── Format strings ──────────────────────────────────────────────

# Console, by level: bare message, then timestamps, then file:line
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    logging.WARNING: ("%(message)s", None),
}

# Log file — always full detail
_FILE_FORMAT = ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%Y-%m-%d %H:%M:%S")

# urllib3 is only present transitively; psutil logs nothing useful for us
_NOISY_LOGGERS = ("urllib3", "psutil")


def resolve_level(
    *,
    verbose: bool = False,
    quiet: bool = False,
    debug: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Console level name for the given global flags and environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(LEVEL_ENV_VAR) or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Install the console handler (and an optional file handler) on the root logger.

    Args:
        level: Console level name; unknown names mean WARNING.
        log_file: Optional path of a log file to append to.
        log_file_level: Level for the file; defaults to ``level``.
        quiet_third_party: Hold third-party loggers at WARNING unless
            the console is at DEBUG.
    """
    console_level = _parse_level(level)
    handlers = [_console_handler(console_level)]

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handlers.append(_file_handler(log_file, file_level))

    root = logging.getLogger()
    root.handlers.clear()
    for handler in handlers:
        root.addHandler(handler)
    # Root must let through whatever the most verbose handler wants
    root.setLevel(min(h.level for h in handlers))

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.raiseExceptions = False


def configure_from_flags(
    *,
    verbose: bool = False,
    quiet: bool = False,
    debug: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Resolve the level from flags and environment, then set up logging.

    Returns:
        The console level name that was applied.
    """
    env = os.environ if environ is None else environ
    level = resolve_level(verbose=verbose, quiet=quiet, debug=debug, environ=env)
    setup_logging(
        level=level,
        log_file=env.get(FILE_ENV_VAR),
        log_file_level=env.get(FILE_LEVEL_ENV_VAR),
        quiet_third_party=not debug,
    )
    return level


# ── Handlers ────────────────────────────────────────────────────


def _console_handler(level: int) -> logging.Handler:
    if level <= logging.DEBUG:
        fmt, datefmt = _CONSOLE_FORMATS[logging.DEBUG]
    elif level <= logging.INFO:
        fmt, datefmt = _CONSOLE_FORMATS[logging.INFO]
    else:
        fmt, datefmt = _CONSOLE_FORMATS[logging.WARNING]
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _file_handler(path: str, level: int) -> logging.Handler:
    fmt, datefmt = _FILE_FORMAT
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    return handler


def _parse_level(level: str | None) -> int:
    """Numeric level for a level name; WARNING when unset or unknown."""
    numeric = logging.getLevelName(level.upper()) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
