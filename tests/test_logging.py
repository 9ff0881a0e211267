"""Tests for the structured logging system (stock_kernel/logging_config.py)."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from stock_kernel.domain.measurement import MeasurementType
from stock_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


def _make_handler() -> tuple[logging.Handler, StringIO]:
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    return handler, stream


def _parse_log(stream: StringIO) -> dict:
    """Parse the first JSON log line from a stream."""
    line = stream.getvalue().strip().split("\n")[0]
    return json.loads(line)


def _parse_all_logs(stream: StringIO) -> list[dict]:
    lines = stream.getvalue().strip().split("\n")
    return [json.loads(line) for line in lines if line]


# ---------------------------------------------------------------------------
# StructuredFormatter tests
# ---------------------------------------------------------------------------


class TestStructuredFormatter:
    """Tests for JSON log output format."""

    def test_basic_json_output(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("hello")

        record = _parse_log(stream)
        assert record["level"] == "INFO"
        assert record["message"] == "hello"
        assert record["logger"] == "stock_kernel.test"
        assert "ts" in record

    def test_extra_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("record_added", extra={"record_count": 3, "kind": "new_item"})

        record = _parse_log(stream)
        assert record["record_count"] == 3
        assert record["kind"] == "new_item"

    def test_decimal_and_enum_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("amounts", extra={"amount": Decimal("2.50"), "tracking": MeasurementType.LENGTH})

        record = _parse_log(stream)
        assert record["amount"] == "2.50"
        assert record["tracking"] == "length"

    def test_context_fields_included(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        LogContext.set(correlation_id="abc-123", document_id="doc-9")
        logger.info("test_msg")

        record = _parse_log(stream)
        assert record["correlation_id"] == "abc-123"
        assert record["document_id"] == "doc-9"

    def test_exception_fields(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        try:
            raise ValueError("boom")
        except ValueError:
            logger.error("failed", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_type"] == "ValueError"
        assert record["exc_message"] == "boom"
        assert "traceback" in record

    def test_kernel_exception_code_extracted(self):
        """Stock kernel exceptions carry a .code attribute."""
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        from stock_kernel.exceptions import SessionStateError

        try:
            raise SessionStateError("add_record", "closed")
        except SessionStateError:
            logger.error("state_error", exc_info=True)

        record = _parse_log(stream)
        assert record["exc_code"] == "SESSION_STATE"
        assert record["exc_type"] == "SessionStateError"
        assert record["exc_operation"] == "add_record"
        assert record["exc_state"] == "closed"

    def test_no_context_fields_when_empty(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("bare_message")

        record = _parse_log(stream)
        assert "correlation_id" not in record
        assert "document_id" not in record

    def test_uuid_serialized(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        uid = uuid4()
        logger.info("with_uuid", extra={"item_id": uid})

        record = _parse_log(stream)
        assert record["item_id"] == str(uid)

    def test_valid_json_every_line(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler)
        logger = get_logger("test")
        logger.info("first")
        logger.warning("second", extra={"k": "v"})
        logger.debug("third")

        logs = _parse_all_logs(stream)
        # default level is INFO, so the debug line is dropped
        assert len(logs) == 2
        for record in logs:
            assert "ts" in record
            assert "level" in record
            assert "logger" in record
            assert "message" in record


# ---------------------------------------------------------------------------
# LogContext tests
# ---------------------------------------------------------------------------


class TestLogContext:

    def test_set_and_get(self):
        LogContext.set(correlation_id="x", session_id="y")
        assert LogContext.get_all() == {"correlation_id": "x", "session_id": "y"}

    def test_clear(self):
        LogContext.set(correlation_id="x")
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_context_manager(self):
        LogContext.set(document_id="outer")
        with LogContext.bind(document_id="inner"):
            assert LogContext.get_all()["document_id"] == "inner"
        assert LogContext.get_all()["document_id"] == "outer"

    def test_bind_restores_none(self):
        assert "document_id" not in LogContext.get_all()
        with LogContext.bind(document_id="temp"):
            assert LogContext.get_all()["document_id"] == "temp"
        assert "document_id" not in LogContext.get_all()

    def test_bind_ignores_none(self):
        with LogContext.bind(document_id=None):
            assert LogContext.get_all() == {}

    def test_all_fields(self):
        LogContext.set(correlation_id="c", session_id="s", actor_id="a", document_id="d")
        ctx = LogContext.get_all()
        assert len(ctx) == 4
        assert ctx["actor_id"] == "a"

    def test_bind_rejects_unknown_field(self):
        with pytest.raises(TypeError):
            LogContext.bind(entry_id="x")


# ---------------------------------------------------------------------------
# configure_logging tests
# ---------------------------------------------------------------------------


class TestConfigureLogging:

    def test_idempotent(self):
        h1, _ = _make_handler()
        configure_logging(handler=h1)
        h2, _ = _make_handler()
        configure_logging(handler=h2)  # second call is no-op
        root = logging.getLogger("stock_kernel")
        assert len(root.handlers) == 1

    def test_get_logger_returns_child(self):
        logger = get_logger("modules.breakdown.session")
        assert logger.name == "stock_kernel.modules.breakdown.session"

    def test_logger_hierarchy(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level=logging.DEBUG)
        child = get_logger("deep.nested.module")
        child.debug("hierarchy_test")

        record = _parse_log(stream)
        assert record["message"] == "hierarchy_test"
        assert record["logger"] == "stock_kernel.deep.nested.module"

    def test_level_by_name(self):
        handler, stream = _make_handler()
        configure_logging(handler=handler, level="debug")
        get_logger("test").debug("named_level")
        assert _parse_log(stream)["message"] == "named_level"

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            configure_logging(fmt="xml")

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            configure_logging(level="chatty")


class TestConsoleFormatter:

    def test_key_value_line(self):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        configure_logging(handler=handler, fmt="console")
        LogContext.set(document_id="doc-1")
        get_logger("test").warning("breakdown_rejected", extra={"code": "SKU_REQUIRED"})

        line = stream.getvalue().strip()
        assert "[WARNING] stock_kernel.test: breakdown_rejected" in line
        assert "document_id=doc-1" in line
        assert "code=SKU_REQUIRED" in line

    def test_traceback_appended(self):
        stream = StringIO()
        handler = logging.StreamHandler(stream)
        configure_logging(handler=handler, fmt="console")
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            get_logger("test").error("failed", exc_info=True)

        output = stream.getvalue()
        assert "exc_type=RuntimeError" in output
        assert "Traceback" in output
