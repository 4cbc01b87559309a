"""
Logging for the extraction pipeline and the backends.

Every module logs through a child of the "svcgen.gen" logger:

    logger = get_logger(__name__)   # servicegen.api.pipeline -> svcgen.gen.pipeline

Phase and progress lines are pre-tagged at the call site ("[PHASE 2] ...",
"[GENERATED] ..."), so they are printed unchanged; warnings and errors get a
level prefix. The starting level is GeneratorSettings.LOG_LEVEL
(SVCGEN_LOG_LEVEL); the CLI's -v / -q flags override it.
"""

import logging
import sys

from servicegen.config import get_settings

ROOT_LOGGER = "svcgen.gen"


def get_logger(name: str = None) -> logging.Logger:
    if not name or name == ROOT_LOGGER:
        return logging.getLogger(ROOT_LOGGER)
    return logging.getLogger(f"{ROOT_LOGGER}.{name.rsplit('.', 1)[-1]}")


def resolve_level(verbose: bool = False, quiet: bool = False, settings=None) -> int:
    """
    Effective level for a run.

        -v / --verbose  -> DEBUG
        -q / --quiet    -> WARNING
        neither         -> settings.LOG_LEVEL
    """
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    settings = settings or get_settings()
    level = logging.getLevelName(settings.LOG_LEVEL.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{settings.LOG_LEVEL}' (SVCGEN_LOG_LEVEL)")
    return level


def configure_gen_logging(verbose: bool = False, quiet: bool = False, settings=None, stream=None) -> int:
    """
    Attach one handler to the svcgen.gen hierarchy and set its level.

    Calling it again reuses the handler and points it at the current stderr
    (or `stream`), so repeated CLI invocations in one process stay correct.
    Returns the level in effect.
    """
    level = resolve_level(verbose, quiet, settings)
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False

    handler = next((h for h in root.handlers if isinstance(h.formatter, _TaggedFormatter)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler.setFormatter(_TaggedFormatter())
        root.addHandler(handler)
    handler.setStream(stream or sys.stderr)
    handler.setLevel(level)
    return level


class _TaggedFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if record.levelno >= logging.WARNING:
            return f"{record.levelname.lower()}: {message}"
        return message
