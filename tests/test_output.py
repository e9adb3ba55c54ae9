"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- print_record and print_table in JSON and plain modes
- Global instance management
"""

from __future__ import annotations

import json

import pytest

from oidcauth import output as output_module
from oidcauth.output import (
    OutputFormat,
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
    monkeypatch.setattr("oidcauth.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("oidcauth.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# Format resolution and colour
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)

        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_no_color_forces_plain_on_tty(self, tty):
        assert OutputManager(no_color=True).format == OutputFormat.PLAIN

    def test_explicit_format_kept(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_enabled_by_default(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# Streams
# ------------------------------------------------------------------ #


class TestStreamDiscipline:
    def test_data_goes_to_stdout(self, capsys):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("https://x")

        captured = capsys.readouterr()
        assert captured.out == "https://x\n"
        assert captured.err == ""

    def test_diagnostics_go_to_stderr(self, capsys):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)

        mgr.info("hello")
        mgr.warning("careful")
        mgr.error("broken")

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "hello" in captured.err
        assert "Warning: careful" in captured.err
        assert "Error: broken" in captured.err

    def test_quiet_suppresses_info_but_not_errors(self, capsys):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)

        mgr.info("hidden")
        mgr.success("hidden too")
        mgr.suggest("hidden as well")
        mgr.error("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "Error: shown" in err

    def test_debug_only_when_verbose(self, capsys):
        OutputManager(no_color=True).debug("quiet debug")
        OutputManager(no_color=True, verbose=True).debug("loud debug")

        err = capsys.readouterr().err
        assert "quiet debug" not in err
        assert "[debug] loud debug" in err


# ------------------------------------------------------------------ #
# Records and tables
# ------------------------------------------------------------------ #


class TestPrintRecord:
    def test_json(self, capsys):
        OutputManager(format=OutputFormat.JSON).print_record({"uid": "abc", "info": {"name": "A"}})

        assert json.loads(capsys.readouterr().out) == {"uid": "abc", "info": {"name": "A"}}

    def test_plain_key_value_lines(self, capsys):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_record(
            {"uid": "abc", "scopes": ["openid", "email"]}
        )

        lines = capsys.readouterr().out.splitlines()
        assert lines == ["uid\tabc", 'scopes\t["openid", "email"]']


class TestPrintTable:
    def test_json_records(self, capsys):
        OutputManager(format=OutputFormat.JSON).print_table(
            ["NAME", "CLIENT ID"], [["corp", "corp-app"]]
        )

        assert json.loads(capsys.readouterr().out) == [{"NAME": "corp", "CLIENT ID": "corp-app"}]

    def test_plain_tsv(self, capsys):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_table(
            ["NAME", "CLIENT ID"], [["corp", "corp-app"]]
        )

        assert capsys.readouterr().out.splitlines() == ["NAME\tCLIENT ID", "corp\tcorp-app"]


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        reset_output()
        assert isinstance(get_output(), OutputManager)

    def test_set_output_is_used_by_helpers(self, capsys):
        set_output(OutputManager(format=OutputFormat.PLAIN, no_color=True))

        output_module.print_data("via helper")
        output_module.error("helper error")
        output_module.warning("helper warning")
        output_module.suggest("helper hint")

        captured = capsys.readouterr()
        assert captured.out == "via helper\n"
        assert "Error: helper error" in captured.err
        assert "Warning: helper warning" in captured.err
        assert "helper hint" in captured.err
