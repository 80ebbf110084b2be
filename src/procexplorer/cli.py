"""Command line entry point for procexplorer."""

import argparse
import curses
import logging
import sys
from importlib.metadata import PackageNotFoundError, version

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from procexplorer.app import run_app
from procexplorer.config import MIN_REFRESH_INTERVAL, Config
from procexplorer.models import MAX_TASKS, LoopStatistics

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
FAREWELL = "Thank you for using ProcessExplorerLite!"


def _package_version() -> str:
    """Installed distribution version, or "unknown" when running from source."""
    try:
        return version("procexplorer")
    except PackageNotFoundError:
        return "unknown"


def _positive_float(text: str) -> float:
    """argparse type for strictly positive numbers."""
    try:
        value = float(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {text!r}") from None
    if value <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return value


def _is_interactive() -> bool:
    """True when both stdin and stdout are terminals."""
    return sys.stdin.isatty() and sys.stdout.isatty()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="procexplorer",
        description="Interactive full-screen task explorer (ProcessExplorerLite).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {_package_version()}")
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=1.0,
        help="Seconds to wait for a key before redrawing (default: 1.0).",
    )
    parser.add_argument(
        "--refresh",
        type=_positive_float,
        default=2.0,
        help=f"Seconds between task snapshots, at least {MIN_REFRESH_INTERVAL} (default: 2.0).",
    )
    parser.add_argument(
        "--max-tasks",
        type=int,
        default=MAX_TASKS,
        help=f"Upper bound on listed task rows, at most {MAX_TASKS} (default: {MAX_TASKS}).",
    )
    parser.add_argument(
        "--source",
        choices=("psutil", "mock"),
        default="psutil",
        help="Where task rows come from (default: psutil).",
    )
    parser.add_argument("--log-file", default=None, help="Write log messages to this file.")
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="WARNING",
        type=str.upper,
        help="Log level for --log-file (default: WARNING).",
    )
    return parser


def configure_logging(level: str, log_file: str | None) -> None:
    """
    Route the package's log records to ``log_file``.

    curses owns the terminal while the explorer runs, so without a file the
    records are dropped.
    """
    root = logging.getLogger("procexplorer")
    root.setLevel(level)
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    if log_file:
        handler: logging.Handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
    else:
        handler = logging.NullHandler()
    root.addHandler(handler)
    root.propagate = False


def print_summary(stats: LoopStatistics, console: Console | None = None) -> None:
    """Print the loop statistics after the terminal has been restored."""
    console = console or Console()
    table = Table(title="ProcessExplorerLite session", show_header=False)
    table.add_column("Statistic", style="cyan")
    table.add_column("Value", justify="right")
    for label, value in stats.as_rows():
        table.add_row(label, value)
    console.print(table)
    if stats.failed:
        console.print(f"[bold red]Error:[/bold red] {escape(stats.fatal_error or '')}")
    console.print(FAREWELL)


def main(argv: list[str] | None = None) -> int:
    """Entry point for the procexplorer command."""
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = Config(
            timeout=args.timeout,
            refresh_interval=args.refresh,
            max_tasks=args.max_tasks,
            source=args.source,
            log_file=args.log_file,
            log_level=args.log_level,
        )
    except ValueError as exc:
        parser.error(str(exc))

    configure_logging(config.log_level, config.log_file)
    err = Console(stderr=True)

    if not _is_interactive():
        err.print("procexplorer: needs an interactive terminal")
        return 1

    try:
        stats = run_app(config)
    except (curses.error, OSError) as exc:
        logger.error("Could not run the explorer: %s", exc)
        err.print(f"procexplorer: {escape(str(exc))}")
        return 1

    print_summary(stats)
    return 1 if stats.failed else 0


if __name__ == "__main__":
    sys.exit(main())
