"""
Tests for logging_manager module.

Tests the KealoaLogger file layout, the safe_logger function and the
NullLogger class that provide null-safe logging throughout the codebase.
"""
import pytest
import click
from unittest.mock import MagicMock

from kealoa.core.exceptions import DatabaseError
from kealoa.core.logging_manager import (
    KealoaLogger,
    NullLogger,
    handle_cli_error,
    safe_logger,
)


class TestNullLogger:
    """Tests for NullLogger class."""

    def test_null_logger_methods_are_no_ops(self):
        """NullLogger logging methods should do nothing."""
        logger = NullLogger()
        logger.log_operation("test_op", {"key": "value"})
        logger.log_error(ValueError("test error"), {"context": "test"})
        logger.log_debug("debug message", {"key": "value"})
        logger.log_info("info message")
        logger.log_warning("warning message")

    def test_null_logger_log_cli_error_returns_formatted(self):
        """NullLogger.log_cli_error should return formatted error string."""
        result = NullLogger().log_cli_error(ValueError("test error"))
        assert result == "❌ ValueError: test error"


class TestSafeLogger:
    """Tests for safe_logger function."""

    def test_safe_logger_returns_logger_when_provided(self):
        """safe_logger should return the same logger when not None."""
        mock_logger = MagicMock(spec=KealoaLogger)
        assert safe_logger(mock_logger) is mock_logger

    def test_safe_logger_returns_null_logger_when_none(self):
        """safe_logger should return NullLogger when logger is None."""
        assert isinstance(safe_logger(None), NullLogger)

    def test_safe_logger_null_logger_is_singleton(self):
        """safe_logger should return the same NullLogger instance."""
        assert safe_logger(None) is safe_logger(None)


class TestKealoaLogger:
    """Tests for KealoaLogger file output."""

    def test_creates_log_directory(self, tmp_dir):
        """The log directory is created on demand."""
        log_dir = tmp_dir / "nested" / "logs"
        KealoaLogger(log_dir, component_name="importer")
        assert log_dir.is_dir()

    def test_operation_written_to_component_log(self, tmp_dir):
        """log_operation writes a JSON detail line to <component>.log."""
        logger = KealoaLogger(tmp_dir, component_name="importer")
        logger.log_operation("import_rounds_complete", {"imported": 3})

        content = (tmp_dir / "importer.log").read_text(encoding="utf-8")
        assert "OPERATION - import_rounds_complete" in content
        assert '"imported": 3' in content

    def test_errors_written_to_errors_log(self, tmp_dir):
        """log_error writes the error and its context to errors.log."""
        logger = KealoaLogger(tmp_dir, component_name="database")
        logger.log_error(DatabaseError("boom"), {"operation": "create_round"})

        content = (tmp_dir / "errors.log").read_text(encoding="utf-8")
        assert "DatabaseError: boom" in content
        assert "operation=create_round" in content

    def test_debug_goes_to_component_log_only(self, tmp_dir):
        """Debug records are kept out of errors.log."""
        logger = KealoaLogger(tmp_dir, component_name="database")
        logger.log_debug("Created person: Pat Lee", {"person_id": 1})

        assert "Created person: Pat Lee" in (tmp_dir / "database.log").read_text()
        assert "Pat Lee" not in (tmp_dir / "errors.log").read_text()

    def test_log_cli_error_message(self, tmp_dir):
        """log_cli_error returns a one-line message without traceback."""
        logger = KealoaLogger(tmp_dir)
        message = logger.log_cli_error(DatabaseError("locked"), {"operation": "init"})
        assert message == "❌ DatabaseError: locked"


class TestHandleCliError:
    """Tests for handle_cli_error."""

    def test_prints_message_and_exits(self, capsys):
        """The error is echoed to stderr and the process exits with 1."""
        ctx = click.Context(click.Command("test"), obj={"verbose": False})

        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ctx, DatabaseError("no such table"), "stats_overview")

        assert exc_info.value.code == 1
        assert "DatabaseError: no such table" in capsys.readouterr().err

    def test_custom_exit_code(self):
        """A custom exit code is honored."""
        ctx = click.Context(click.Command("test"), obj={})

        with pytest.raises(SystemExit) as exc_info:
            handle_cli_error(ctx, ValueError("bad"), "check", exit_code=2)

        assert exc_info.value.code == 2
