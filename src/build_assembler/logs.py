# src/build_assembler/logs.py
"""Assembler logger: extra levels, tagged output and stdout/stderr routing."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from collections.abc import Generator
from contextlib import contextmanager, suppress
from typing import Any, TextIO, cast

from .constants import DEFAULT_ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL
from .meta import PROGRAM_ENV, PROGRAM_PACKAGE


# --- Constants ---------------------------------------------------------------

# ANSI Colors
RESET = "\033[0m"
CYAN = "\033[36m"
YELLOW = "\033[93m"
RED = "\033[91m"
GRAY = "\033[90m"

# Logger levels
TRACE_LEVEL = logging.DEBUG - 5
# DEBUG      - builtin # verbose
# INFO       - builtin
# WARNING    - builtin
# ERROR      - builtin
# CRITICAL   - builtin # quiet mode
SILENT_LEVEL = logging.CRITICAL + 1  # one above the highest builtin level

LEVEL_ORDER = [
    "trace",
    "debug",
    "info",
    "warning",
    "error",
    "critical",
    "silent",  # disables all logging
]

TAG_STYLES = {
    "TRACE": (GRAY, "[TRACE]"),
    "DEBUG": (CYAN, "[DEBUG]"),
    "WARNING": (YELLOW, "⚠️ "),
    "ERROR": (RED, "❌ "),
    "CRITICAL": (RED, "💥 "),
}

# sanity check
assert set(TAG_STYLES.keys()) <= {lvl.upper() for lvl in LEVEL_ORDER}, (  # noqa: S101
    "TAG_STYLES contains unknown levels"
)


# --- Logging that bypasses streams -------------------------------------------


def safe_log(msg: str) -> None:
    """Emergency logger that never fails."""
    stream = cast("TextIO", sys.__stderr__)
    try:
        print(msg, file=stream)
    except Exception:  # noqa: BLE001
        # never crash during crash reporting
        with suppress(Exception):
            stream.write(f"[INTERNAL] {msg}\n")


# --- App logger --------------------------------------------------------------


class AppLogger(logging.Logger):
    """Logger for the assembler and its workers."""

    enable_color: bool = False

    _logging_module_extended: bool = False

    # if stdout or stderr are redirected, we need to repoint
    _last_stream_ids: tuple[TextIO, TextIO] | None = None

    # phase workers log from many threads at once
    _handler_lock = threading.Lock()

    def __init__(
        self,
        name: str,
        level: int = logging.NOTSET,
        *,
        enable_color: bool | None = None,
    ) -> None:
        type(self).extend_logging_module()
        super().__init__(name, level)

        # default level resolution
        if self.level == logging.NOTSET:
            self.setLevel(self.determine_log_level())

        self.enable_color = (
            enable_color
            if enable_color is not None
            else type(self).determine_color_enabled()
        )

        self.propagate = False  # avoid duplicate root logs

    def ensure_handlers(self) -> None:
        with self._handler_lock:
            if self._last_stream_ids is None or not self.handlers:
                rebuild = True
            else:
                last_stdout, last_stderr = self._last_stream_ids
                rebuild = (last_stdout is not sys.stdout) or (
                    last_stderr is not sys.stderr
                )

            if rebuild:
                self.handlers.clear()
                h = DualStreamHandler()
                h.setFormatter(TagFormatter("%(message)s"))
                h.enable_color = self.enable_color
                self.addHandler(h)
                self._last_stream_ids = (sys.stdout, sys.stderr)

    def _log(  # type: ignore[override]
        self, level: int, msg: str, args: tuple[Any, ...], **kwargs: Any
    ) -> None:
        self.ensure_handlers()
        super()._log(level, msg, args, **kwargs)

    def setLevel(self, level: int | str) -> None:  # noqa: N802
        """Case insensitive version"""
        if isinstance(level, str):
            level = level.upper()
        super().setLevel(level)

    @classmethod
    def determine_color_enabled(cls) -> bool:
        """Return True if colored output should be enabled."""
        # Respect explicit overrides
        if "NO_COLOR" in os.environ:
            return False
        if os.getenv("FORCE_COLOR", "").lower() in {"1", "true", "yes"}:
            return True

        # Auto-detect: use color if output is a TTY
        return sys.stdout.isatty()

    @classmethod
    def extend_logging_module(cls) -> bool:
        """Register the TRACE and SILENT level names once per process.

        Returns False when the registration already happened.
        """
        if AppLogger._logging_module_extended:
            return False
        AppLogger._logging_module_extended = True

        logging.addLevelName(TRACE_LEVEL, "TRACE")
        logging.addLevelName(SILENT_LEVEL, "SILENT")

        logging.TRACE = TRACE_LEVEL  # type: ignore[attr-defined]
        logging.SILENT = SILENT_LEVEL  # type: ignore[attr-defined]

        return True

    def determine_log_level(
        self,
        *,
        args: argparse.Namespace | None = None,
        root_log_level: str | None = None,
    ) -> str:
        """Resolve log level from CLI → env → config file → default."""
        args_level = getattr(args, "log_level", None)
        if args_level is not None:
            return str(args_level).upper()

        env_log_level = os.getenv(f"{PROGRAM_ENV}_{DEFAULT_ENV_LOG_LEVEL}") or os.getenv(
            DEFAULT_ENV_LOG_LEVEL
        )
        if env_log_level:
            return env_log_level.upper()

        if root_log_level:
            return root_log_level.upper()

        return DEFAULT_LOG_LEVEL.upper()

    @property
    def level_name(self) -> str:
        """Return the current effective level name."""
        return logging.getLevelName(self.getEffectiveLevel())

    def error_if_not_debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Logs an exception with the real traceback starting from the caller.
        Only shows full traceback if debug/trace is enabled."""
        exc_info = kwargs.pop("exc_info", True)
        stacklevel = kwargs.pop("stacklevel", 2)  # skip helper frame
        if self.isEnabledFor(logging.DEBUG):
            self.exception(msg, *args, exc_info=exc_info, stacklevel=stacklevel)
        else:
            self.error(msg, *args)

    def critical_if_not_debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """Logs an exception with the real traceback starting from the caller.
        Only shows full traceback if debug/trace is enabled."""
        exc_info = kwargs.pop("exc_info", True)
        stacklevel = kwargs.pop("stacklevel", 2)  # skip helper frame
        if self.isEnabledFor(logging.DEBUG):
            self.critical(msg, *args, exc_info=exc_info, stacklevel=stacklevel)
        else:
            self.critical(msg, *args)

    def trace(self, msg: str, *args: Any, **kwargs: Any) -> None:
        if self.isEnabledFor(TRACE_LEVEL):
            self._log(TRACE_LEVEL, msg, args, **kwargs)

    def resolve_level_name(self, level_name: str) -> int | None:
        """logging.getLevelNamesMapping() is only introduced in 3.11"""
        return getattr(logging, level_name.upper(), None)

    @contextmanager
    def use_level(self, level: str | int) -> Generator[None, None, None]:
        """Use a context to temporarily log with a different log-level."""
        prev_level = self.level

        if isinstance(level, str):
            level_no = self.resolve_level_name(level)
            if not isinstance(level_no, int):
                self.error("Unknown log level: %r", level)
                # Yield control anyway so the 'with' block doesn't explode
                yield
                return
        else:
            level_no = level

        self.setLevel(level_no)
        try:
            yield
        finally:
            self.setLevel(prev_level)


# --- Tag formatter -----------------------------------------------------------


class TagFormatter(logging.Formatter):
    def format(self: TagFormatter, record: logging.LogRecord) -> str:
        tag_color, tag_text = TAG_STYLES.get(record.levelname, ("", ""))
        msg = super().format(record)
        if tag_text:
            if getattr(record, "enable_color", False) and tag_color:
                prefix = f"{tag_color}{tag_text}{RESET}"
            else:
                prefix = tag_text
            return f"{prefix} {msg}"
        return msg


# --- DualStreamHandler -------------------------------------------------------


class DualStreamHandler(logging.StreamHandler):  # type: ignore[type-arg]
    """Send info/debug/trace to stdout, everything else to stderr."""

    enable_color: bool = False

    def emit(self, record: logging.LogRecord) -> None:
        # pick the stream per record without mutating shared handler state
        stream = sys.stderr if record.levelno >= logging.WARNING else sys.stdout

        # used by TagFormatter
        record.enable_color = getattr(self, "enable_color", False)

        try:
            msg = self.format(record)
            with self.lock:  # type: ignore[union-attr]
                stream.write(msg + self.terminator)
                stream.flush()
        except Exception:  # noqa: BLE001
            self.handleError(record)


# --- Logger initialization ---------------------------------------------------


def _create_app_logger() -> AppLogger:
    # Only our own logger gets the AppLogger class; third-party loggers
    # (httpx, httpcore) keep the stdlib class.
    previous = logging.getLoggerClass()
    logging.setLoggerClass(AppLogger)
    try:
        return cast("AppLogger", logging.getLogger(PROGRAM_PACKAGE))
    finally:
        logging.setLoggerClass(previous)


_APP_LOGGER = _create_app_logger()


def get_logger() -> AppLogger:
    """Return the configured app logger."""
    return _APP_LOGGER
