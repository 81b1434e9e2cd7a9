"""
Blog API Backend — Logging Setup
=================================

What:  Builds the process's logging layers from an explicit LoggingConfig.
Why:   Startup decides once which layers exist; shutdown removes exactly the
       handlers startup installed (flushing the file handler), instead of
       leaving a one-time global configuration nobody can undo.
How:   setup_logging(config) → LoggingHandle; handle.shutdown() on exit.

Layers (each toggled independently):
    console  StreamHandler(stdout) at INFO
    file     TimedRotatingFileHandler, daily, under config.log_dir, at DEBUG
    trace    JSON span records from the `blogapi.trace` logger on stdout

Every record passes through RequestIDFilter, which stamps the current
request ID (from the ContextVar set by RequestContextMiddleware) so the
format can include it.
"""

import json
import logging
import sys
from dataclasses import dataclass, field
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import List

from blogapi.middleware.context import request_id_var

TRACE_LOGGER_NAME = "blogapi.trace"

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s"
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Third-party loggers that are chatty at INFO/DEBUG
NOISY_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "httpcore", "httpx")


@dataclass(frozen=True)
class LoggingConfig:
    level: str = "INFO"
    console: bool = True
    file: bool = False
    trace: bool = False
    log_dir: str = "logs"
    file_name: str = "blogapi.log"

    @classmethod
    def from_settings(cls, settings) -> "LoggingConfig":
        return cls(
            level=settings.log_level,
            console=settings.enable_console_log,
            file=settings.enable_file_log,
            trace=settings.enable_trace_log,
            log_dir=settings.log_dir,
        )


class RequestIDFilter(logging.Filter):
    """Adds `record.request_id` ("-" outside of a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or "-"
        return True


class TraceFormatter(logging.Formatter):
    """Renders the `span` extra of a record as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        span = getattr(record, "span", None) or {"name": record.getMessage()}
        return json.dumps({"type": "span", **span}, default=str)


@dataclass
class LoggingHandle:
    """What setup_logging() installed, so shutdown() can take it back out."""

    root_handlers: List[logging.Handler] = field(default_factory=list)
    trace_handlers: List[logging.Handler] = field(default_factory=list)

    def shutdown(self) -> None:
        root = logging.getLogger()
        for handler in self.root_handlers:
            root.removeHandler(handler)
            handler.close()

        trace = logging.getLogger(TRACE_LOGGER_NAME)
        for handler in self.trace_handlers:
            trace.removeHandler(handler)
            handler.close()

        self.root_handlers.clear()
        self.trace_handlers.clear()


def setup_logging(config: LoggingConfig) -> LoggingHandle:
    """
    Install the configured layers on the root and trace loggers.

    Safe to call again after a previous handle's shutdown(); handlers from
    an earlier handle that was not shut down are left alone.
    """
    handle = LoggingHandle()
    request_filter = RequestIDFilter()
    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(getattr(logging, config.level, logging.INFO))

    if config.console:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(max(logging.INFO, root.level))
        console.setFormatter(formatter)
        console.addFilter(request_filter)
        handle.root_handlers.append(console)

    if config.file:
        log_dir = Path(config.log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_dir / config.file_name,
            when="midnight",
            backupCount=14,
            encoding="utf-8",
            utc=True,
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(formatter)
        file_handler.addFilter(request_filter)
        handle.root_handlers.append(file_handler)
        # The file layer wants DEBUG even when the console stays at INFO
        root.setLevel(min(root.level, logging.DEBUG))

    for handler in handle.root_handlers:
        root.addHandler(handler)

    # ── Trace layer ───────────────────────────────────────────────────────
    # Spans never reach the console/file layers (propagate=False)
    trace = logging.getLogger(TRACE_LOGGER_NAME)
    trace.propagate = False
    if config.trace:
        trace_handler = logging.StreamHandler(sys.stdout)
        trace_handler.setFormatter(TraceFormatter())
        trace.addHandler(trace_handler)
        trace.setLevel(logging.INFO)
        handle.trace_handlers.append(trace_handler)
    else:
        trace.setLevel(logging.WARNING)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return handle
