"""Tests for the output system.

Covers:
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug output
- Document printing (plain when piped, highlighted on a TTY)
- Rich markup escaping
- Global instance management
- Convenience functions
"""

from __future__ import annotations

import pytest

from speclink import output as output_module
from speclink.output import (
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("speclink.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("speclink.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    """Test that NO_COLOR and TERM=dumb are respected."""

    def test_no_color_env_disables_color(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Test that data goes to stdout and diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert captured.out == "hello world\n"
        assert captured.err == ""

    def test_print_data_keeps_trailing_newline(self, capfd, non_tty):
        OutputManager(no_color=True).print_data("{}\n")
        assert capfd.readouterr().out == "{}\n"

    def test_error_goes_to_stderr(self, capfd, non_tty):
        OutputManager(no_color=True).error("something broke")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == "Error: something broke\n"

    def test_success_goes_to_stderr(self, capfd, non_tty):
        OutputManager(no_color=True).success("Added 3 link definition(s)")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "Added 3 link definition(s)" in captured.err


# ------------------------------------------------------------------ #
# Quiet / verbose
# ------------------------------------------------------------------ #


class TestQuietVerbose:
    def test_quiet_suppresses_success(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).success("success")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_errors(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).error("fail")
        assert capfd.readouterr().err == "Error: fail\n"

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("trace")
        assert capfd.readouterr().err == ""

    def test_debug_shown_when_verbose(self, capfd, non_tty):
        OutputManager(no_color=True, verbose=True).debug("trace")
        assert capfd.readouterr().err == "[debug] trace\n"

    def test_rich_debug_escapes_markup(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        OutputManager(verbose=True).debug("path '/a/[b]'")
        err = capfd.readouterr().err
        assert "[debug]" in err
        assert "/a/[b]" in err


# ------------------------------------------------------------------ #
# Document printing
# ------------------------------------------------------------------ #


class TestPrintDocument:
    def test_plain_when_piped(self, capfd, non_tty):
        OutputManager().print_document('{"a": 1}\n', "json")
        assert capfd.readouterr().out == '{"a": 1}\n'

    def test_plain_when_no_color(self, capfd, tty):
        OutputManager(no_color=True).print_document("a: 1\n", "yaml")
        assert capfd.readouterr().out == "a: 1\n"

    def test_highlighted_on_tty(self, capfd, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        OutputManager().print_document('{"a": 1}\n', "json")
        captured = capfd.readouterr()
        assert '"a"' in captured.out
        assert captured.err == ""


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_overrides(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr

    def test_reset_output_clears(self):
        set_output(OutputManager())
        reset_output()
        assert output_module._output is None


class TestConvenienceFunctions:
    def test_print_data_convenience(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.print_data("data")
        assert capfd.readouterr().out == "data\n"

    def test_error_convenience(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.error("oops")
        assert capfd.readouterr().err == "Error: oops\n"

    def test_debug_convenience(self, capfd, non_tty):
        set_output(OutputManager(no_color=True, verbose=True))
        output_module.debug("details")
        assert "details" in capfd.readouterr().err


    def test_success_convenience(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.success("done")
        assert capfd.readouterr().err == "done\n"
