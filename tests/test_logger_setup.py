"""
Unit Tests for Logger Setup
===========================
Unit tests for the centralized logging configuration using loguru.

Test Coverage:
- Basic configuration
- File handler configuration
- Log levels
- Settings fallback
"""

import sys
from unittest.mock import MagicMock, patch

import pytest

from ats_auth.core.logger_setup import configure_logger


def _settings(log_level="INFO", debug=False):
    mock_settings = MagicMock()
    mock_settings.log_level = log_level
    mock_settings.debug = debug
    return mock_settings


class TestLoggerSetup:
    """Test cases for logger configuration."""

    @patch("ats_auth.core.logger_setup.logger")
    def test_configure_logger_removes_default_handler(self, mock_logger):
        configure_logger(_settings())

        mock_logger.remove.assert_called_once()

    @patch("ats_auth.core.logger_setup.logger")
    def test_debug_mode_only_logs_to_stdout(self, mock_logger):
        """In debug mode only the colorized stdout handler is added."""
        configure_logger(_settings(log_level="DEBUG", debug=True))

        mock_logger.add.assert_called_once()
        call_args = mock_logger.add.call_args
        assert call_args[0][0] == sys.stdout
        assert call_args[1]["level"] == "DEBUG"
        assert call_args[1]["colorize"] is True
        assert call_args[1]["diagnose"] is True

        format_string = call_args[1]["format"]
        for field in ("{time:YYYY-MM-DD HH:mm:ss.SSS}", "{level: <8}", "{name}", "{message}"):
            assert field in format_string

    @patch("ats_auth.core.logger_setup.logger")
    def test_production_mode_adds_file_handler(self, mock_logger):
        """Outside debug mode a rotating file handler is added after stdout."""
        configure_logger(_settings(log_level="INFO", debug=False))

        assert mock_logger.add.call_count == 2
        stdout_call, file_call = mock_logger.add.call_args_list
        assert stdout_call[0][0] == sys.stdout
        assert stdout_call[1]["diagnose"] is False

        assert file_call[0][0] == "logs/auth_{time:YYYY-MM-DD}.log"
        assert file_call[1]["rotation"] == "500 MB"
        assert file_call[1]["retention"] == "10 days"
        assert file_call[1]["level"] == "INFO"
        assert file_call[1]["diagnose"] is False
        assert "<green>" not in file_call[1]["format"]

    @pytest.mark.parametrize("level", ["TRACE", "DEBUG", "WARNING", "ERROR"])
    @patch("ats_auth.core.logger_setup.logger")
    def test_log_level_applied_to_handlers(self, mock_logger, level):
        configure_logger(_settings(log_level=level, debug=False))

        for call in mock_logger.add.call_args_list:
            assert call[1]["level"] == level
        mock_logger.info.assert_called_once_with(
            f"Logger configured for auth with level: {level}"
        )

    @patch("ats_auth.core.logger_setup.logger")
    @patch("ats_auth.core.logger_setup.settings")
    def test_falls_back_to_global_settings(self, mock_settings, mock_logger):
        mock_settings.log_level = "WARNING"
        mock_settings.debug = True

        configure_logger()

        assert mock_logger.add.call_args[1]["level"] == "WARNING"

    @patch("ats_auth.core.logger_setup.logger")
    def test_service_name_bound_and_used_for_file(self, mock_logger):
        """The service name is bound on every record and names the log file."""
        configure_logger(_settings(debug=False), service_name="admin-gateway")

        mock_logger.configure.assert_called_once_with(extra={"service": "admin-gateway"})
        file_call = mock_logger.add.call_args_list[1]
        assert file_call[0][0] == "logs/admin-gateway_{time:YYYY-MM-DD}.log"
        assert "{extra[service]}" in file_call[1]["format"]
