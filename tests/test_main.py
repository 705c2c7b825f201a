"""
Tests for the command line entry point.
"""

import os
import subprocess

import pytest

from core.config import Settings, get_settings
from supervisor import __version__
from supervisor import main as cli


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    # keep the test session's loguru sinks in place
    monkeypatch.setattr(cli, "setup_logger", lambda *args, **kwargs: None)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def reaped_pid() -> int:
    proc = subprocess.Popen(["true"])
    proc.wait()
    return proc.pid


# =============================================================================
# Argument parsing
# =============================================================================


@pytest.mark.unit
class TestParseArgs:
    def test_command_after_separator(self):
        args = cli.parse_args(["-check", "true", "--", "sleep", "1"])

        assert args.check == "true"
        assert args.command == ["sleep", "1"]

    def test_command_flags_are_not_parsed(self):
        args = cli.parse_args(["--", "ls", "-la", "--timeout", "x"])

        assert args.timeout is None
        assert args.command == ["ls", "-la", "--timeout", "x"]

    def test_command_without_separator(self):
        args = cli.parse_args(["--interval", "1s", "sleep", "5"])

        assert args.interval == "1s"
        assert args.command == ["sleep", "5"]

    def test_single_and_double_dash_options(self):
        single = cli.parse_args(["-pid", "42", "-timeout", "10s", "-log", "debug"])
        double = cli.parse_args(["--pid", "42", "--timeout", "10s", "--log", "debug"])

        for args in (single, double):
            assert args.pid == 42
            assert args.timeout == "10s"
            assert args.log == "debug"
            assert args.command == []

    def test_overrides_map_to_settings(self):
        args = cli.parse_args(["-check", "true", "-delay", "2s", "-log", "info", "--", "sleep"])

        settings = cli.load_settings(args)

        assert settings.CHECK_COMMAND == "true"
        assert settings.CHECK_DELAY.total_seconds() == 2
        assert settings.LOG_LEVEL == "INFO"

    def test_flags_take_precedence_over_environment(self, monkeypatch):
        monkeypatch.setenv("CHECK_INTERVAL", "9s")

        settings = cli.load_settings(cli.parse_args(["-interval", "1s"]))

        assert settings.CHECK_INTERVAL.total_seconds() == 1


# =============================================================================
# main()
# =============================================================================


@pytest.mark.unit
class TestMain:
    def test_version(self, capsys):
        assert cli.main(["--version"]) == 0
        assert capsys.readouterr().out.strip() == __version__

    def test_invalid_duration_is_usage_error(self):
        assert cli.main(["-interval", "soon", "--", "sleep", "1"]) == cli.EXIT_USAGE

    def test_invalid_log_level_is_usage_error(self):
        assert cli.main(["-log", "chatty", "--", "sleep", "1"]) == cli.EXIT_USAGE

    def test_missing_command_fails(self, capsys):
        assert cli.main(["-check", "true"]) == cli.EXIT_FAILURE
        assert "usage: mf" in capsys.readouterr().err


@pytest.mark.integration
class TestMainProcesses:
    def test_attach_to_missing_pid_fails(self):
        assert cli.main(["-pid", str(reaped_pid()), "-check", "false"]) == cli.EXIT_FAILURE

    def test_attach_without_check_returns_immediately(self):
        assert cli.main(["-pid", str(os.getpid())]) == 0

    def test_launch_failure(self):
        assert cli.main(["--", "/no/such/binary"]) == cli.EXIT_FAILURE

    def test_exit_code_is_propagated(self):
        assert cli.main(["--", "test", "1", "-eq", "2"]) == 1

    def test_passing_check_does_not_interfere(self):
        assert cli.main(["-check", "true", "-interval", "50ms", "--", "sleep", "0.3"]) == 0

    @pytest.mark.slow
    def test_failing_check_terminates_after_timeout(self):
        code = cli.main(
            ["-check", "false", "-interval", "100ms", "-timeout", "300ms", "--", "sleep", "30"]
        )

        # SIGTERM
        assert code == 128 + 15
