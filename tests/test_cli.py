"""Tests for the procexplorer command line."""

import io
import logging
import sys

import pytest
from rich.console import Console

from procexplorer import cli
from procexplorer.config import Config
from procexplorer.models import MAX_TASKS, LoopStatistics


@pytest.fixture
def interactive(monkeypatch):
    monkeypatch.setattr(cli, "_is_interactive", lambda: True)


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("procexplorer")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


class TestParser:
    """Tests for build_parser()."""

    def test_defaults(self):
        """Test default option values."""
        args = cli.build_parser().parse_args([])

        assert args.timeout == 1.0
        assert args.refresh == 2.0
        assert args.max_tasks == MAX_TASKS
        assert args.source == "psutil"
        assert args.log_file is None
        assert args.log_level == "WARNING"

    def test_options(self):
        """Test every option is parsed."""
        args = cli.build_parser().parse_args(
            ["--timeout", "0.5", "--refresh", "3", "--max-tasks", "10", "--source", "mock", "--log-level", "debug"]
        )

        assert args.timeout == 0.5
        assert args.refresh == 3.0
        assert args.max_tasks == 10
        assert args.source == "mock"
        assert args.log_level == "DEBUG"

    @pytest.mark.parametrize("argv", [["--timeout", "0"], ["--timeout", "soon"], ["--source", "proc"]])
    def test_rejects_bad_values(self, argv):
        """Test invalid values are argparse errors."""
        with pytest.raises(SystemExit) as excinfo:
            cli.build_parser().parse_args(argv)
        assert excinfo.value.code == 2


class TestConfig:
    """Tests for Config validation."""

    def test_defaults(self):
        """Test the default configuration is valid."""
        config = Config()

        assert config.timeout == 1.0
        assert config.max_tasks == MAX_TASKS

    @pytest.mark.parametrize(
        "kwargs",
        [{"timeout": 0}, {"refresh_interval": 0.01}, {"max_tasks": 0}, {"max_tasks": MAX_TASKS + 1}],
    )
    def test_invalid(self, kwargs):
        """Test out-of-range settings are refused."""
        with pytest.raises(ValueError):
            Config(**kwargs)


def test_configure_logging_to_file(tmp_path):
    """Test log records go to the requested file."""
    log_file = tmp_path / "procexplorer.log"

    cli.configure_logging("INFO", str(log_file))
    logging.getLogger("procexplorer.app").info("loop started")
    logging.getLogger("procexplorer.app").debug("hidden")
    for handler in logging.getLogger("procexplorer").handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "loop started" in content
    assert "hidden" not in content


def test_configure_logging_without_file():
    """Test records are dropped without a log file."""
    cli.configure_logging("WARNING", None)

    handlers = logging.getLogger("procexplorer").handlers
    assert len(handlers) == 1
    assert isinstance(handlers[0], logging.NullHandler)


class TestSummary:
    """Tests for print_summary()."""

    def test_graceful_summary(self):
        """Test the statistics and farewell are printed."""
        console = Console(file=io.StringIO(), width=80)

        cli.print_summary(LoopStatistics(resizes=2, timeouts=7, inputs=3), console)

        output = console.file.getvalue()
        assert "Resizes handled" in output
        assert "7" in output
        assert cli.FAREWELL in output
        assert "Error" not in output

    def test_fatal_summary(self):
        """Test a fatal error is reported with the statistics."""
        console = Console(file=io.StringIO(), width=80)

        cli.print_summary(LoopStatistics(fatal_error="input wait failed: [bad fd]"), console)

        output = console.file.getvalue()
        assert "Error:" in output
        assert "[bad fd]" in output


class TestMain:
    """Tests for main()."""

    def test_requires_terminal(self, monkeypatch):
        """Test main refuses to start without a terminal."""
        monkeypatch.setattr(cli, "_is_interactive", lambda: False)
        monkeypatch.setattr(cli, "run_app", pytest.fail)

        assert cli.main(["--source", "mock"]) == 1

    def test_redirected_stdin_is_not_interactive(self, monkeypatch):
        """Test a non-terminal stdin is detected."""
        monkeypatch.setattr(sys, "stdin", io.StringIO())

        assert cli._is_interactive() is False

    def test_graceful_quit_exits_zero(self, interactive, monkeypatch, capsys):
        """Test a quit run prints the summary and returns 0."""
        seen: list[Config] = []

        def fake_run_app(config):
            seen.append(config)
            return LoopStatistics(inputs=1)

        monkeypatch.setattr(cli, "run_app", fake_run_app)

        assert cli.main(["--source", "mock", "--timeout", "0.25"]) == 0
        assert seen == [Config(timeout=0.25, source="mock")]
        assert cli.FAREWELL in capsys.readouterr().out

    def test_fatal_run_exits_non_zero(self, interactive, monkeypatch, capsys):
        """Test a fatal loop outcome returns 1."""
        monkeypatch.setattr(cli, "run_app", lambda config: LoopStatistics(fatal_error="boom"))

        assert cli.main([]) == 1
        assert "boom" in capsys.readouterr().out

    def test_initialization_failure(self, interactive, monkeypatch, capsys):
        """Test a terminal setup failure is reported and returns 1."""

        def broken(config):
            raise OSError("no terminal")

        monkeypatch.setattr(cli, "run_app", broken)

        assert cli.main([]) == 1
        assert "no terminal" in capsys.readouterr().err

    def test_invalid_max_tasks(self):
        """Test a max-tasks above the cap is an argparse error."""
        with pytest.raises(SystemExit) as excinfo:
            cli.main(["--max-tasks", str(MAX_TASKS + 1)])
        assert excinfo.value.code == 2
