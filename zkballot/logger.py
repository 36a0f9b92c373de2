"""
ZKBallot Logging
================

Process-wide logging for the ballot. Every module asks for its logger with
``get_logger(__name__)``; the first request (or the import of this module)
installs the handlers on the root logger:

  - a rich console handler with ballot-aware highlighting
  - an optional size-rotated file handler under ``logs/``

Settings come from ``.env`` (see constants.py) and can be replaced later
from the ``[logging]`` section of zkballot.toml via ``configure_logging``.

Usage:
    >>> from zkballot.logger import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.info("Proposal #0 created")
"""

import logging
import logging.handlers
import re
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.highlighter import RegexHighlighter
from rich.logging import RichHandler
from rich.theme import Theme

from .constants import (
    LOG_BACKUP_COUNT,
    LOG_CONSOLE_HIGHLIGHTING,
    LOG_DATE_FORMAT,
    LOG_FILE_OUTPUT,
    LOG_FORMAT,
    LOG_LEVEL,
    LOG_MAX_FILE_SIZE,
)


LOG_FILE_PATH = Path(__file__).parent.parent / "logs" / "zkballot.log"

BALLOT_THEME = Theme({
    "zkballot.arrow":          "bold yellow",
    "zkballot.hash":           "dim cyan",
    "zkballot.level_critical": "bold red reverse",
    "zkballot.level_debug":    "bold dim",
    "zkballot.level_error":    "bold red",
    "zkballot.level_info":     "bold green",
    "zkballot.level_warning":  "bold yellow",
    "zkballot.logger_name":    "magenta",
    "zkballot.proposal":       "bold white",
    "zkballot.state":          "bold magenta",
    "zkballot.timestamp":      "bold cyan",
})


def _warn(message: str) -> None:
    # Logging is not up yet; report straight to stderr
    sys.stderr.write(f"{time.strftime('%Y-%m-%d %H:%M:%S')} - zkballot.logger - {message}\n")


def checked_log_format(log_format: Optional[str]) -> str:
    """Return *log_format* if it renders a test record, else the default."""
    if not log_format:
        return str(LOG_FORMAT.default())
    log_format = str(log_format)
    # A bare "(name)s" without its '%' is a typo that logging would print literally
    if re.search(r"(?<!%)\([a-zA-Z_]\w*\)[a-zA-Z]", log_format):
        _warn(f"Malformed log format {log_format!r}, using default")
        return str(LOG_FORMAT.default())
    record = logging.LogRecord("zkballot", logging.INFO, "", 0, "probe", (), None)
    try:
        logging.Formatter(fmt=log_format).format(record)
    except (ValueError, KeyError, TypeError) as e:
        _warn(f"Invalid log format {log_format!r} ({e}), using default")
        return str(LOG_FORMAT.default())
    return log_format


def checked_date_format(date_format: Optional[str]) -> str:
    """Return *date_format* if it holds at least one strftime directive, else the default."""
    if not date_format:
        return str(LOG_DATE_FORMAT.default())
    date_format = str(date_format)
    if not re.search(r"%[a-zA-Z]", date_format):
        _warn(f"Invalid date format {date_format!r}, using default")
        return str(LOG_DATE_FORMAT.default())
    return date_format


class TerminalSafeFormatter(logging.Formatter):
    """
    Formatter that strips terminal control sequences from the final line.

    Proposal titles, descriptions and cancel reasons are caller-supplied
    and end up in log lines verbatim (CWE-117).
    """

    _escape_sequences = re.compile(r"\x1b(\[[0-?]*[ -/]*[@-~]|[@-Z\\-_])")
    # Everything below 0x20 except tab and newline, plus DEL
    _unprintable = re.compile(r"[\x00-\x08\x0b-\x1f\x7f]")

    @classmethod
    def sanitize(cls, text: str) -> str:
        if not text:
            return text
        return cls._unprintable.sub("", cls._escape_sequences.sub("", text))

    def format(self, record: logging.LogRecord) -> str:
        return self.sanitize(super().format(record))


class BallotLogHighlighter(RegexHighlighter):
    """Highlights proposal ids, lifecycle states and hex digests."""

    base_style = "zkballot."
    highlights = [
        r"(?P<timestamp>^(.*?)UTC)",
        r"(?P<level_debug>\bDEBUG\b)",
        r"(?P<level_info>\bINFO\b)",
        r"(?P<level_warning>\bWARNING\b)",
        r"(?P<level_error>\bERROR\b)",
        r"(?P<level_critical>\bCRITICAL\b)",
        r"\-\s+\w+\s+-\s+(?P<logger_name>[\w.]+)(?=\s-\s)",
        r"(?P<proposal>Proposal #\d+)",
        r"(?P<state>\b(PENDING|ACTIVE|ENDED|EXECUTED|CANCELLED)\b)",
        r"(?P<hash>\b0x[0-9a-fA-F]{8,}\b)",
        r"(?P<arrow>→)",
    ]


class LogManager:
    """
    Singleton owner of the root logger's handlers.

    ``configure`` is idempotent; ``reconfigure`` replaces the handlers.
    """

    _instance: Optional["LogManager"] = None
    _instance_lock = threading.Lock()

    def __new__(cls) -> "LogManager":
        with cls._instance_lock:
            if cls._instance is None:
                instance = super().__new__(cls)
                instance._configured = False
                instance._lock = threading.RLock()
                cls._instance = instance
        return cls._instance

    @property
    def is_configured(self) -> bool:
        return self._configured

    def _handlers(
        self,
        level: int,
        console_output: bool,
        file_output: bool,
        log_file: Optional[Path],
    ) -> List[logging.Handler]:
        # UTC keeps log timestamps comparable with the ballot clock
        formatter = TerminalSafeFormatter(
            fmt=checked_log_format(LOG_FORMAT),
            datefmt=checked_date_format(LOG_DATE_FORMAT) + " UTC",
        )
        formatter.converter = time.gmtime

        handlers: List[logging.Handler] = []
        if console_output and LOG_CONSOLE_HIGHLIGHTING:
            handlers.append(RichHandler(
                console=Console(theme=BALLOT_THEME, highlight=False),
                highlighter=BallotLogHighlighter(),
                keywords=[],
                markup=False,
                rich_tracebacks=True,
                show_time=False,
                show_level=False,
                show_path=False,
            ))
        elif console_output:
            handlers.append(logging.StreamHandler(sys.stdout))

        if file_output:
            path = log_file or LOG_FILE_PATH
            path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.handlers.RotatingFileHandler(
                str(path),
                maxBytes=LOG_MAX_FILE_SIZE,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            ))

        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(formatter)
        return handlers

    def configure(
        self,
        log_level: Optional[str] = None,
        log_file: Optional[Path] = None,
        console_output: bool = True,
        file_output: Optional[bool] = None,
    ) -> None:
        """
        Install handlers on the root logger, once.

        Args:
            log_level: Level name; defaults to LOG_LEVEL from .env
            log_file: Rotating log path; defaults to logs/zkballot.log
            console_output: Attach the console handler
            file_output: Attach the file handler; defaults to LOG_FILE_OUTPUT
        """
        with self._lock:
            if self._configured:
                return
            level = getattr(logging, str(log_level or LOG_LEVEL).upper(), logging.INFO)
            if file_output is None:
                file_output = bool(LOG_FILE_OUTPUT)

            root = logging.getLogger()
            root.setLevel(level)
            root.handlers.clear()
            for handler in self._handlers(level, console_output, file_output, log_file):
                root.addHandler(handler)
            self._configured = True

    def reconfigure(self, **kwargs) -> None:
        with self._lock:
            self._configured = False
            self.configure(**kwargs)

    def get_logger(self, name: str) -> logging.Logger:
        if not self._configured:
            self.configure()
        return logging.getLogger(name)


_manager = LogManager()
_manager.configure()


def get_logger(name: str) -> logging.Logger:
    """Logger for *name* (usually ``__name__``) with ballot handlers installed."""
    return _manager.get_logger(name)


def configure_logging(log_level: Optional[str] = None, file_output: Optional[bool] = None) -> None:
    """Re-apply the logging setup, e.g. from a loaded ``[logging]`` section."""
    _manager.reconfigure(log_level=log_level, file_output=file_output)
