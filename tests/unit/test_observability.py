"""Unit tests for run_wasm.observability module."""

from __future__ import annotations

import pytest
import structlog

from run_wasm.observability import configure_logging, step


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_filters_below_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test events below the level are dropped, others go to stderr."""
        configure_logging("warning")
        log = structlog.get_logger("test")
        log.info("quiet_event")
        log.warning("loud_event")

        captured = capsys.readouterr()
        assert "quiet_event" not in captured.err
        assert "loud_event" in captured.err
        assert captured.out == ""

    def test_case_insensitive(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test level names are case-insensitive."""
        configure_logging("DEBUG")
        structlog.get_logger("test").debug("debug_event")
        assert "debug_event" in capsys.readouterr().err

    def test_unknown_level(self) -> None:
        """Test an unknown level is rejected."""
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("loud")


class TestStep:
    """Tests for the step context manager."""

    def test_logs_start_and_finish(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a step logs start and finish with duration."""
        with step("compile", unit="demo"):
            pass
        out = capsys.readouterr().out
        assert "compile_started" in out
        assert "compile_finished" in out
        assert "duration_ms" in out
        assert "unit=demo" in out

    def test_logs_failure_and_reraises(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a failing step logs and re-raises."""
        with pytest.raises(RuntimeError):
            with step("bindgen"):
                raise RuntimeError("boom")
        out = capsys.readouterr().out
        assert "bindgen_failed" in out
        assert "bindgen_finished" not in out

    def test_failure_passes_default_level(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a failed step is still reported at the default warning level."""
        configure_logging("warning")
        with pytest.raises(RuntimeError):
            with step("compile"):
                raise RuntimeError("boom")
        err = capsys.readouterr().err
        assert "compile_failed" in err
        assert "compile_started" not in err
