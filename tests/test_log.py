"""Tests for evdispatch.log.setup_logging."""

from __future__ import annotations

from unittest.mock import patch

from evdispatch.log import _safe_message_filter, setup_logging


class TestSetupLogging:
    def test_removes_default_handler_and_adds_stderr(self, monkeypatch):
        """setup_logging configures loguru with the correct level."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        with patch("evdispatch.log.logger") as mock_logger:
            setup_logging(verbose=False)
            mock_logger.remove.assert_called_once()
            mock_logger.add.assert_called_once()
            assert mock_logger.add.call_args[1]["level"] == "INFO"

    def test_verbose_sets_debug_level(self):
        with patch("evdispatch.log.logger") as mock_logger:
            setup_logging(verbose=True)
            assert mock_logger.add.call_args[1]["level"] == "DEBUG"

    def test_log_level_env(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "warning")
        with patch("evdispatch.log.logger") as mock_logger:
            setup_logging()
            assert mock_logger.add.call_args[1]["level"] == "WARNING"

    def test_unknown_log_level_env_falls_back_to_info(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")
        with patch("evdispatch.log.logger") as mock_logger:
            setup_logging()
            assert mock_logger.add.call_args[1]["level"] == "INFO"

    def test_enables_package_logger(self):
        with patch("evdispatch.log.logger") as mock_logger:
            setup_logging()
            mock_logger.enable.assert_called_once_with("evdispatch")

    def test_format_includes_time_and_level(self):
        with patch("evdispatch.log.logger") as mock_logger:
            setup_logging()
            fmt = mock_logger.add.call_args[1]["format"]
            assert "{time:" in fmt
            assert "{level:" in fmt
            assert "{message}" in fmt


def test_safe_message_filter_escapes():
    record = {"message": "handler {x} <tag>"}

    assert _safe_message_filter(record) is True
    assert record["message"] == "handler {{x}} \\<tag>"


def test_setup_logging_exported_from_package():
    import evdispatch

    assert evdispatch.setup_logging is setup_logging
    assert "setup_logging" in evdispatch.__all__
