"""procexplorer - event loop and key handling."""

import curses
import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from procexplorer.config import Config
from procexplorer.models import LoopStatistics, TaskRecord
from procexplorer.monitor import ProviderError, TaskProvider, build_provider
from procexplorer.multiplexer import InputMultiplexer, WaitOutcome, WaitResult
from procexplorer.notify import ResizeFlag, ResizeNotifier
from procexplorer.render import Frame, Screen, available_rows, render
from procexplorer.selection import SelectionState
from procexplorer.terminal import CursesScreen

logger = logging.getLogger(__name__)


class Command(Enum):
    """Effects a single key press can have."""

    QUIT = "quit"
    UP = "up"
    DOWN = "down"
    PAGE_UP = "page-up"
    PAGE_DOWN = "page-down"
    HOME = "home"
    END = "end"
    TOGGLE_DEBUG = "toggle-debug"
    TOGGLE_HELP = "toggle-help"
    REFRESH = "refresh"


def _letters(chars: str, command: Command) -> dict[int, Command]:
    """Bind both cases of each letter in chars to command."""
    keys: dict[int, Command] = {}
    for char in chars:
        keys[ord(char.lower())] = command
        keys[ord(char.upper())] = command
    return keys


KEYMAP: dict[int, Command] = {
    **_letters("q", Command.QUIT),
    **_letters("k", Command.UP),
    **_letters("j", Command.DOWN),
    **_letters("d", Command.TOGGLE_DEBUG),
    **_letters("h?", Command.TOGGLE_HELP),
    **_letters("r", Command.REFRESH),
    curses.KEY_UP: Command.UP,
    curses.KEY_DOWN: Command.DOWN,
    curses.KEY_PPAGE: Command.PAGE_UP,
    curses.KEY_NPAGE: Command.PAGE_DOWN,
    curses.KEY_HOME: Command.HOME,
    curses.KEY_END: Command.END,
}


class Terminal(Screen, Protocol):
    """Screen that can also follow resizes and hand out key presses."""

    def reconcile(self) -> None: ...

    def read_key(self) -> int: ...


class Multiplexer(Protocol):
    def wait(self, timeout: float) -> WaitResult: ...


@dataclass(slots=True)
class AppState:
    """All state the event loop mutates. Only the loop touches it."""

    tasks: list[TaskRecord] = field(default_factory=list)
    selection: SelectionState = field(default_factory=SelectionState)
    show_debug: bool = False
    show_help: bool = False
    running: bool = True
    refresh_requested: bool = False
    last_refresh: float | None = None
    stats: LoopStatistics = field(default_factory=LoopStatistics)


def dispatch(state: AppState, key: int, visible_rows: int) -> Command | None:
    """
    Apply the effect of one key press to ``state``.

    Unknown keys are ignored and return None. Nothing here performs I/O;
    REFRESH only marks the snapshot as due.
    """
    command = KEYMAP.get(key)
    if command is None:
        return None

    n_items = len(state.tasks)
    selection = state.selection
    if command is Command.QUIT:
        state.running = False
    elif command is Command.UP:
        selection.navigate_up(n_items, visible_rows)
    elif command is Command.DOWN:
        selection.navigate_down(n_items, visible_rows)
    elif command is Command.PAGE_UP:
        selection.page(-1, n_items, visible_rows)
    elif command is Command.PAGE_DOWN:
        selection.page(1, n_items, visible_rows)
    elif command is Command.HOME:
        selection.move_to(0, n_items, visible_rows)
    elif command is Command.END:
        selection.move_to(n_items - 1, n_items, visible_rows)
    elif command is Command.TOGGLE_DEBUG:
        state.show_debug = not state.show_debug
    elif command is Command.TOGGLE_HELP:
        state.show_help = not state.show_help
    elif command is Command.REFRESH:
        state.refresh_requested = True
    return command


class EventLoop:
    """
    Redraw, wait for input, react; until quit or a fatal error.

    Each iteration reconciles a pending resize, refreshes the snapshot when
    due, draws, then blocks in the multiplexer for at most ``config.timeout``
    seconds. The resize flag is the only state written from outside this
    loop.
    """

    def __init__(
        self,
        terminal: Terminal,
        provider: TaskProvider,
        multiplexer: Multiplexer,
        resize_flag: ResizeFlag,
        config: Config | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._terminal = terminal
        self._provider = provider
        self._multiplexer = multiplexer
        self._resize_flag = resize_flag
        self._config = config or Config()
        self._clock = clock
        self.state = AppState()

    def run(self) -> LoopStatistics:
        """Run until the loop terminates and return the statistics."""
        state = self.state
        stats = state.stats
        self._resize_flag.consume()
        logger.info("Event loop started (timeout=%.2fs)", self._config.timeout)

        try:
            self._refresh()
            while state.running:
                self._iterate()
        except ProviderError as exc:
            logger.error("Task snapshot failed: %s", exc)
            stats.fatal_error = str(exc)
            stats.exit_reason = "provider-error"
        except KeyboardInterrupt:
            stats.exit_reason = "interrupted"
        finally:
            state.running = False

        logger.info("Event loop stopped (%s)", stats.exit_reason)
        return stats

    def visible_rows(self) -> int:
        """Task rows that fit with the current viewport and panels."""
        rows, _ = self._terminal.dimensions()
        return available_rows(rows, self.state.show_debug, self.state.show_help)

    def _iterate(self) -> None:
        """One pass: reconcile, refresh, draw, wait, and handle the outcome."""
        state = self.state
        stats = state.stats

        if self._resize_flag.consume():
            self._terminal.reconcile()
            stats.resizes += 1

        if state.refresh_requested or self._refresh_due():
            self._refresh()

        rows, cols = self._terminal.dimensions()
        state.selection.ensure_visible(len(state.tasks), self.visible_rows())
        render(
            self._terminal,
            Frame(
                tasks=state.tasks,
                selection=state.selection,
                rows=rows,
                cols=cols,
                show_debug=state.show_debug,
                show_help=state.show_help,
                stats=stats,
            ),
        )

        # A fresh timeout value for every wait, including retries.
        result = self._multiplexer.wait(self._config.timeout)
        if result.outcome is WaitOutcome.INTERRUPTED:
            stats.interrupts += 1
        elif result.outcome is WaitOutcome.TIMED_OUT:
            stats.timeouts += 1
        elif result.outcome is WaitOutcome.READY:
            stats.inputs += 1
            dispatch(state, self._terminal.read_key(), self.visible_rows())
        else:
            stats.last_error_code = result.code
            stats.fatal_error = f"input wait failed: {os.strerror(result.code)}"
            stats.exit_reason = "wait-failed"
            state.running = False
            logger.error("Input wait failed with errno %d", result.code)

    def _refresh_due(self) -> bool:
        """True when no snapshot was taken yet or the interval has passed."""
        last = self.state.last_refresh
        return last is None or self._clock() - last >= self._config.refresh_interval

    def _refresh(self) -> None:
        """Replace the task list with a fresh snapshot."""
        state = self.state
        state.tasks = self._provider.collect(self._config.max_tasks)[: self._config.max_tasks]
        state.last_refresh = self._clock()
        state.refresh_requested = False
        state.stats.refreshes += 1
        state.selection.ensure_visible(len(state.tasks), self.visible_rows())
        logger.debug("Snapshot refreshed: %d tasks", len(state.tasks))


def run_app(config: Config) -> LoopStatistics:
    """Open the terminal, run the event loop, and restore the terminal."""
    provider = build_provider(config.source)
    with CursesScreen() as screen, ResizeNotifier() as notifier:
        multiplexer = InputMultiplexer(
            screen.input_fd,
            wakeup_fd=notifier.wakeup_fd,
            drain=notifier.drain,
        )
        loop = EventLoop(screen, provider, multiplexer, notifier.flag, config)
        return loop.run()
