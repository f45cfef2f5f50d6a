"""Tests for the structured logging utilities."""

import logging
import time
from unittest.mock import MagicMock, patch

import pytest

from social_report.utils.logging import (
    LogContext,
    PerformanceMetrics,
    StructuredLogFormatter,
    StructuredLogger,
    clear_context,
    configure_logging,
    get_extra_context,
    get_logger,
    get_request_id,
    set_extra_context,
    set_request_id,
    timed_operation,
)


class TestContextVariables:
    """Tests for context variable management."""

    def setup_method(self) -> None:
        clear_context()

    def teardown_method(self) -> None:
        clear_context()

    def test_request_id_default_none(self) -> None:
        """Request ID should default to None."""
        assert get_request_id() is None

    def test_set_and_get_request_id(self) -> None:
        set_request_id("req-123")
        assert get_request_id() == "req-123"

    def test_extra_context_default_empty(self) -> None:
        assert get_extra_context() == {}

    def test_set_and_get_extra_context(self) -> None:
        ctx = {"workbook": "export.xlsx", "operation": "dashboard"}
        set_extra_context(ctx)
        assert get_extra_context() == ctx

    def test_clear_context(self) -> None:
        """Clear context should reset all context variables."""
        set_request_id("req-123")
        set_extra_context({"key": "value"})

        clear_context()

        assert get_request_id() is None
        assert get_extra_context() == {}


class TestPerformanceMetrics:
    """Tests for PerformanceMetrics class."""

    def test_initialization(self) -> None:
        metrics = PerformanceMetrics(operation="scan_workbook")
        assert metrics.operation == "scan_workbook"
        assert metrics.duration_seconds == 0.0
        assert metrics.sheets_scanned == 0
        assert metrics.tables_detected == 0
        assert metrics.rows_processed == 0
        assert metrics.custom_metrics == {}

    def test_finish_calculates_duration(self) -> None:
        metrics = PerformanceMetrics(operation="scan_workbook")
        time.sleep(0.01)
        metrics.finish()
        assert metrics.duration_seconds > 0
        assert metrics.end_time is not None

    def test_to_dict_with_all_fields(self) -> None:
        metrics = PerformanceMetrics(operation="scan_workbook")
        metrics.duration_seconds = 2.0
        metrics.sheets_scanned = 7
        metrics.tables_detected = 9
        metrics.rows_processed = 310
        metrics.custom_metrics = {"discarded": 2}

        result = metrics.to_dict()

        assert result == {
            "operation": "scan_workbook",
            "duration_seconds": 2.0,
            "sheets_scanned": 7,
            "tables_detected": 9,
            "rows_processed": 310,
            "custom_metrics": {"discarded": 2},
        }

    def test_to_dict_excludes_zero_values(self) -> None:
        """to_dict should exclude zero counters."""
        metrics = PerformanceMetrics(operation="merge_tables")
        result = metrics.to_dict()
        assert "sheets_scanned" not in result
        assert "tables_detected" not in result
        assert "rows_processed" not in result


class TestStructuredLogger:
    """Tests for StructuredLogger class."""

    def setup_method(self) -> None:
        self.logger = get_logger("test_logger")

    def test_get_logger_returns_structured_logger(self) -> None:
        assert isinstance(get_logger(__name__), StructuredLogger)

    def test_logger_property(self) -> None:
        assert isinstance(self.logger.logger, logging.Logger)

    def test_build_message_without_kwargs(self) -> None:
        assert self.logger._build_message("Sheet scanned") == "Sheet scanned"

    def test_build_message_with_kwargs(self) -> None:
        msg = self.logger._build_message("Table detected", sheet="Facebook", rows=31)
        assert msg == "Table detected | sheet=Facebook, rows=31"

    @patch.object(logging.Logger, "info")
    def test_info_logging(self, mock_info: MagicMock) -> None:
        self.logger.info("Dashboard built", sheets=5)
        mock_info.assert_called_once()
        call_args = mock_info.call_args[0][0]
        assert "Dashboard built" in call_args
        assert "sheets=5" in call_args

    @patch.object(logging.Logger, "debug")
    def test_debug_logging(self, mock_debug: MagicMock) -> None:
        self.logger.debug("Skipping reserved sheet")
        mock_debug.assert_called_once()

    @patch.object(logging.Logger, "warning")
    def test_warning_logging(self, mock_warning: MagicMock) -> None:
        self.logger.warning("Workbook could not be parsed")
        mock_warning.assert_called_once()

    @patch.object(logging.Logger, "error")
    def test_error_logging(self, mock_error: MagicMock) -> None:
        self.logger.error("Report creation failed", exc_info=False)
        mock_error.assert_called_once()

    @patch.object(logging.Logger, "exception")
    def test_exception_logging(self, mock_exception: MagicMock) -> None:
        self.logger.exception("Unexpected error")
        mock_exception.assert_called_once()

    @patch.object(logging.Logger, "info")
    def test_log_performance(self, mock_info: MagicMock) -> None:
        metrics = PerformanceMetrics(operation="scan_workbook")
        metrics.tables_detected = 4
        self.logger.log_performance(metrics)
        call_args = mock_info.call_args[0][0]
        assert "Performance: scan_workbook" in call_args
        assert "tables_detected=4" in call_args

    @patch.object(logging.Logger, "log")
    def test_log_publish_call_success(self, mock_log: MagicMock) -> None:
        self.logger.log_publish_call("XlsxReportWriter", "Reach", 12)
        mock_log.assert_called_once()
        level, message = mock_log.call_args[0]
        assert level == logging.INFO
        assert "tab=Reach" in message
        assert "rows_written=12" in message

    @patch.object(logging.Logger, "log")
    def test_log_publish_call_failure(self, mock_log: MagicMock) -> None:
        """Failed writes are logged at ERROR level with the error."""
        self.logger.log_publish_call(
            "SheetsWriter",
            "Views",
            0,
            success=False,
            error_message="permission denied",
        )
        level, message = mock_log.call_args[0]
        assert level == logging.ERROR
        assert "error=permission denied" in message


class TestStructuredLogFormatter:
    def setup_method(self) -> None:
        clear_context()

    def teardown_method(self) -> None:
        clear_context()

    def _record(self, msg: str) -> logging.LogRecord:
        return logging.LogRecord("test", logging.INFO, __file__, 1, msg, None, None)

    def test_prefix_includes_context(self) -> None:
        formatter = StructuredLogFormatter("%(message)s")
        set_request_id("req-1")
        set_extra_context({"workbook": "export.xlsx"})

        output = formatter.format(self._record("Scanning"))

        assert output == "[request_id=req-1 workbook=export.xlsx] Scanning"

    def test_no_prefix_without_context(self) -> None:
        formatter = StructuredLogFormatter("%(message)s")
        record = self._record("Scanning")

        assert formatter.format(record) == "Scanning"
        assert record.msg == "Scanning"


class TestLogContext:
    """Tests for LogContext context manager."""

    def setup_method(self) -> None:
        clear_context()

    def teardown_method(self) -> None:
        clear_context()

    def test_context_sets_values(self) -> None:
        with LogContext(workbook="export.xlsx", operation="reporting"):
            extra = get_extra_context()
            assert extra == {"workbook": "export.xlsx", "operation": "reporting"}

    def test_context_restores_values(self) -> None:
        set_extra_context({"original": "value"})

        with LogContext(operation="dashboard"):
            assert get_extra_context() == {
                "original": "value",
                "operation": "dashboard",
            }

        assert get_extra_context() == {"original": "value"}

    def test_context_with_request_id(self) -> None:
        """request_id goes to its own context variable."""
        with LogContext(request_id="req-456", workbook="a.xlsx"):
            assert get_request_id() == "req-456"
            assert "request_id" not in get_extra_context()

        assert get_request_id() is None

    def test_nested_contexts(self) -> None:
        with LogContext(operation="outer"):
            with LogContext(operation="inner"):
                assert get_extra_context()["operation"] == "inner"
            assert get_extra_context()["operation"] == "outer"


class TestTimedOperation:
    """Tests for timed_operation context manager."""

    @patch.object(StructuredLogger, "log_performance")
    def test_timed_operation_logs_metrics(self, mock_log: MagicMock) -> None:
        logger = get_logger("test")
        with timed_operation(logger, "scan_workbook") as metrics:
            metrics.tables_detected = 3

        mock_log.assert_called_once()
        logged_metrics = mock_log.call_args[0][0]
        assert logged_metrics.operation == "scan_workbook"
        assert logged_metrics.tables_detected == 3
        assert logged_metrics.end_time is not None

    @patch.object(StructuredLogger, "log_performance")
    def test_logs_even_on_error(self, mock_log: MagicMock) -> None:
        logger = get_logger("test")
        with pytest.raises(ValueError), timed_operation(logger, "read_workbook"):
            raise ValueError("bad workbook")

        mock_log.assert_called_once()


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_configure_with_string_level(self) -> None:
        configure_logging(level="DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_configure_with_int_level(self) -> None:
        configure_logging(level=logging.WARNING)
        assert logging.getLogger().level == logging.WARNING

    def test_structured_formatter_installed(self) -> None:
        configure_logging(level=logging.INFO, use_structured_formatter=True)
        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0].formatter, StructuredLogFormatter)

    def test_plain_formatter(self) -> None:
        configure_logging(level=logging.INFO, use_structured_formatter=False)
        formatter = logging.getLogger().handlers[0].formatter
        assert not isinstance(formatter, StructuredLogFormatter)
