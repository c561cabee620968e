"""Unit tests for run_wasm.output module."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from run_wasm import output


class TestCreateConsole:
    """Tests for create_console function."""

    def test_create_console_default(self) -> None:
        """Test creating console with default settings."""
        console = output.create_console()
        assert console is not None

    def test_create_console_no_color(self) -> None:
        """Test creating console with no_color=True."""
        console = output.create_console(no_color=True)
        assert console.no_color is True
        assert console.is_terminal is False

    def test_create_console_respects_env_var(self) -> None:
        """Test that NO_COLOR environment variable is respected."""
        with patch.object(output, "_force_no_color", True):
            console = output.create_console()
            assert console.no_color is True

    def test_stderr_console(self) -> None:
        """Test the error console writes to stderr."""
        assert output.create_console(no_color=True, stderr=True).stderr is True


class TestMessages:
    """Tests for the message helpers."""

    def test_success_goes_to_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test success prefixes a checkmark on stdout."""
        output.success("Built demo")
        captured = capsys.readouterr()
        assert "✓ Built demo" in captured.out
        assert captured.err == ""

    def test_error_goes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test error prefixes an X on stderr, keeping stdout clean."""
        output.error("WASM artifact not found: demo.wasm")
        captured = capsys.readouterr()
        assert "✗ WASM artifact not found: demo.wasm" in captured.err
        assert captured.out == ""

    def test_info_message(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test info prints the message as is."""
        output.info("Serving `demo` on http://localhost:8000")
        assert "Serving `demo` on http://localhost:8000" in capsys.readouterr().out


class TestUsageError:
    """Tests for usage_error() function."""

    def test_cause_blank_line_usage(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the cause and usage are separated by one blank line on stdout."""
        output.usage_error("Unknown option --relase", "Usage: run-wasm [OPTIONS] NAME")
        captured = capsys.readouterr()
        assert "Unknown option --relase\n\nUsage: run-wasm [OPTIONS] NAME" in captured.out
        assert captured.err == ""

    def test_brackets_are_not_markup(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test square brackets survive, e.g. [OPTIONS] and [bold]."""
        output.usage_error("Unknown option [bold]", "Usage: run-wasm [OPTIONS] NAME")
        out = capsys.readouterr().out
        assert "Unknown option [bold]" in out
        assert "[OPTIONS]" in out
