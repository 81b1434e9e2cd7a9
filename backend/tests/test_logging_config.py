"""
Blog API Backend — Logging Setup Tests
=======================================

What we test:
    ✅ Each layer is installed only when enabled
    ✅ shutdown() removes exactly the handlers setup installed
    ✅ The request ID filter stamps records from the ContextVar
    ✅ Trace records render as one JSON object
    ✅ ENABLE_OPENTELEMETRY still switches the trace layer
"""

import json
import logging
from logging.handlers import TimedRotatingFileHandler

import pytest

from blogapi.config import Settings
from blogapi.logging_config import (
    TRACE_LOGGER_NAME,
    LoggingConfig,
    RequestIDFilter,
    TraceFormatter,
    setup_logging,
)
from blogapi.middleware.context import request_id_var


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    trace = logging.getLogger(TRACE_LOGGER_NAME)
    saved = (root.level, list(root.handlers), trace.level, trace.propagate)
    yield
    root.setLevel(saved[0])
    root.handlers[:] = saved[1]
    trace.setLevel(saved[2])
    trace.propagate = saved[3]


def make_record(msg="hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord("test", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestSetupLogging:

    def test_from_settings(self):
        settings = Settings(
            log_level="debug",
            enable_console_log=False,
            enable_file_log=True,
            enable_trace_log=True,
            log_dir="/tmp/blog-logs",
        )

        config = LoggingConfig.from_settings(settings)

        assert config == LoggingConfig(
            level="DEBUG", console=False, file=True, trace=True, log_dir="/tmp/blog-logs"
        )

    def test_trace_toggle_accepts_opentelemetry_name(self, monkeypatch):
        monkeypatch.delenv("ENABLE_TRACE_LOG", raising=False)
        monkeypatch.setenv("ENABLE_OPENTELEMETRY", "true")

        assert Settings(_env_file=None).enable_trace_log is True

    def test_file_layer_writes_and_shutdown_detaches(self, tmp_path, restore_logging):
        root = logging.getLogger()
        before = list(root.handlers)

        handle = setup_logging(LoggingConfig(console=False, file=True, log_dir=str(tmp_path)))
        file_handlers = [h for h in root.handlers if isinstance(h, TimedRotatingFileHandler)]
        logging.getLogger("blogapi.test").info("written to file")
        handle.shutdown()

        assert len(file_handlers) == 1
        assert root.handlers == before
        assert "written to file" in (tmp_path / "blogapi.log").read_text()

    def test_console_layer(self, restore_logging):
        root = logging.getLogger()

        handle = setup_logging(LoggingConfig(console=True))
        installed = list(handle.root_handlers)
        handle.shutdown()

        assert len(installed) == 1
        assert all(h not in root.handlers for h in installed)

    def test_trace_layer_toggle(self, restore_logging):
        trace = logging.getLogger(TRACE_LOGGER_NAME)

        disabled = setup_logging(LoggingConfig(console=False, trace=False))
        assert not trace.isEnabledFor(logging.INFO)
        disabled.shutdown()

        enabled = setup_logging(LoggingConfig(console=False, trace=True))
        assert trace.isEnabledFor(logging.INFO)
        assert trace.propagate is False
        assert len(enabled.trace_handlers) == 1
        enabled.shutdown()

        assert enabled.trace_handlers == []


class TestFiltersAndFormatters:

    def test_request_id_from_context_var(self):
        token = request_id_var.set("req-123")
        try:
            record = make_record()
            RequestIDFilter().filter(record)
        finally:
            request_id_var.reset(token)

        assert record.request_id == "req-123"

    def test_request_id_outside_request(self):
        record = make_record()
        RequestIDFilter().filter(record)
        assert record.request_id == "-"

    def test_trace_formatter_emits_json(self):
        record = make_record(span={"name": "GET /posts", "duration_ms": 1.5})

        rendered = json.loads(TraceFormatter().format(record))

        assert rendered == {"type": "span", "name": "GET /posts", "duration_ms": 1.5}
