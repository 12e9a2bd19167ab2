"""
Process-wide logging for profilekit.

The CLI calls ``configure_from_flags`` once per invocation; library code
only ever does ``logger = logging.getLogger(__name__)``.

Console level precedence:
    --debug  >  --verbose  >  --quiet  >  PROFILEKIT_LOG_LEVEL  >  WARNING

A log file is opt-in through PROFILEKIT_LOG_FILE, with its own level in
PROFILEKIT_LOG_FILE_LEVEL. The elevated child process inherits both, so
its output lands in the same file as the parent's.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

ENV_LEVEL = "PROFILEKIT_LOG_LEVEL"
ENV_FILE = "PROFILEKIT_LOG_FILE"
ENV_FILE_LEVEL = "PROFILEKIT_LOG_FILE_LEVEL"

DEFAULT_LEVEL = logging.WARNING

# Console formats by verbosity. Quiet runs print the message only since
# the report already carries the context.
_CONSOLE_FORMATS: dict[int, tuple[str, str | None]] = {
    logging.DEBUG: ("%(asctime)s %(levelname)-7s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s %(name)s: %(message)s", "%H:%M:%S"),
}
_PLAIN_FORMAT = ("%(levelname)s: %(message)s", None)

_FILE_FORMAT = "%(asctime)s pid=%(process)d %(levelname)-7s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def parse_level(level: str | int | None) -> int:
    """Level name or number to a logging constant; WARNING when unrecognised."""
    if isinstance(level, int):
        return level
    if not level:
        return DEFAULT_LEVEL
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else DEFAULT_LEVEL


def resolve_level(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Pick the console level from CLI flags, then the environment."""
    if debug:
        return logging.DEBUG
    if verbose:
        return logging.INFO
    if quiet:
        return logging.ERROR
    env = os.environ if environ is None else environ
    return parse_level(env.get(ENV_LEVEL))


def _console_formatter(level: int) -> logging.Formatter:
    for threshold in sorted(_CONSOLE_FORMATS):
        if level <= threshold:
            fmt, datefmt = _CONSOLE_FORMATS[threshold]
            return logging.Formatter(fmt, datefmt=datefmt)
    fmt, datefmt = _PLAIN_FORMAT
    return logging.Formatter(fmt, datefmt=datefmt)


def setup_logging(
    level: str | int = "WARNING",
    log_file: str | Path | None = None,
    log_file_level: str | int | None = None,
) -> None:
    """Replace the root logger's handlers with a stderr handler and an optional file.

    The root logger sits at the lower of the two handler levels so that a
    chatty file does not need a chatty console.
    """
    console_level = parse_level(level)

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(_console_formatter(console_level))
    root.addHandler(console)

    root_level = console_level
    if log_file:
        file_level = parse_level(log_file_level) if log_file_level is not None else console_level
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(file_handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def configure_from_flags(
    *,
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> int:
    """Set up logging from the CLI's global flags; returns the console level."""
    env = os.environ if environ is None else environ
    level = resolve_level(debug=debug, verbose=verbose, quiet=quiet, environ=env)
    setup_logging(level, log_file=env.get(ENV_FILE), log_file_level=env.get(ENV_FILE_LEVEL))
    return level
