"""curses implementation of the procexplorer drawing surface."""

import curses
import logging
import os
import sys
from types import TracebackType

from procexplorer.render import Style

logger = logging.getLogger(__name__)

# (pair number, foreground, extra attributes) per style; background is the terminal default.
_STYLE_COLORS = {
    Style.HEADER: (1, curses.COLOR_CYAN, curses.A_BOLD),
    Style.FOOTER: (2, curses.COLOR_GREEN, 0),
    Style.TABLE_HEADER: (3, curses.COLOR_YELLOW, curses.A_BOLD | curses.A_REVERSE),
    Style.DEBUG: (4, curses.COLOR_MAGENTA, 0),
    Style.SELECTED: (5, curses.COLOR_BLACK, 0),
    Style.RUNNING: (6, curses.COLOR_GREEN, curses.A_BOLD),
    Style.SLEEPING: (7, curses.COLOR_BLUE, 0),
}

# Attributes used when the terminal has no colors.
_MONO_ATTRS = {
    Style.NORMAL: curses.A_NORMAL,
    Style.HEADER: curses.A_BOLD,
    Style.FOOTER: curses.A_NORMAL,
    Style.TABLE_HEADER: curses.A_REVERSE,
    Style.DEBUG: curses.A_DIM,
    Style.SELECTED: curses.A_REVERSE | curses.A_BOLD,
    Style.RUNNING: curses.A_BOLD,
    Style.SLEEPING: curses.A_NORMAL,
}


def _init_attrs() -> dict[Style, int]:
    """Curses attributes per style, colored when the terminal supports it."""
    attrs = dict(_MONO_ATTRS)
    if not curses.has_colors():
        return attrs
    try:
        curses.start_color()
    except curses.error:
        return attrs
    try:
        curses.use_default_colors()
        background = -1
    except curses.error:
        background = curses.COLOR_BLACK

    for style, (pair, fg, extra) in _STYLE_COLORS.items():
        try:
            if style is Style.SELECTED:
                curses.init_pair(pair, fg, curses.COLOR_WHITE)
            else:
                curses.init_pair(pair, fg, background)
        except curses.error:
            continue
        attrs[style] = curses.color_pair(pair) | extra
    return attrs


class CursesScreen:
    """
    Full-screen curses surface, used as a context manager.

    Entering switches the terminal to cbreak/noecho with a hidden cursor and
    non-blocking key reads; leaving always restores it, also when setup
    fails half way.
    """

    def __init__(self) -> None:
        self._stdscr: "curses.window | None" = None
        self._attrs: dict[Style, int] = dict(_MONO_ATTRS)
        self._size: tuple[int, int] | None = None

    @property
    def input_fd(self) -> int:
        """File descriptor keyboard input arrives on."""
        return sys.stdin.fileno()

    def __enter__(self) -> "CursesScreen":
        # Keep a lone Esc press from stalling getch().
        os.environ.setdefault("ESCDELAY", "25")
        self._stdscr = curses.initscr()
        try:
            curses.cbreak()
            curses.noecho()
            self._stdscr.keypad(True)
            self._stdscr.nodelay(True)
            try:
                curses.curs_set(0)
            except curses.error:
                # Some terminals can't hide the cursor.
                pass
            self._attrs = _init_attrs()
        except BaseException:
            self._teardown()
            raise
        logger.info("Terminal initialized (%dx%d)", *self.dimensions())
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._teardown()

    def _teardown(self) -> None:
        """Undo the terminal modes and end curses; runs at most once per enter."""
        if self._stdscr is None:
            return
        try:
            self._stdscr.keypad(False)
            curses.nocbreak()
            curses.echo()
        except curses.error:
            pass
        finally:
            curses.endwin()
            self._stdscr = None
            self._size = None
            logger.info("Terminal restored")

    @property
    def window(self) -> "curses.window":
        """The curses window, once the screen has been entered."""
        if self._stdscr is None:
            raise RuntimeError("screen is not initialized")
        return self._stdscr

    def dimensions(self) -> tuple[int, int]:
        """Cached (rows, cols) of the viewport."""
        if self._size is None:
            self._size = self.window.getmaxyx()
        return self._size

    def reconcile(self) -> None:
        """Drop the cached size and resize curses to the real terminal size."""
        self._size = None
        try:
            size = os.get_terminal_size(sys.__stdout__.fileno())
        except OSError:
            return
        try:
            curses.resizeterm(size.lines, size.columns)
        except curses.error:
            return
        curses.update_lines_cols()
        logger.debug("Viewport reconciled to %dx%d", size.lines, size.columns)

    def clear(self) -> None:
        """Blank the off-screen buffer."""
        self.window.erase()

    def write_at(self, row: int, col: int, text: str, style: Style = Style.NORMAL) -> None:
        """Write text at a cell; writes past the edge are dropped."""
        try:
            self.window.addstr(row, col, text, self._attrs.get(style, curses.A_NORMAL))
        except curses.error:
            # Writing the bottom-right cell or past the edge raises; ignore it.
            return

    def hline(self, row: int, char: str, length: int, style: Style = Style.NORMAL) -> None:
        """Draw a horizontal line from the left edge."""
        try:
            self.window.hline(row, 0, ord(char), length, self._attrs.get(style, curses.A_NORMAL))
        except curses.error:
            return

    def present(self) -> None:
        """Copy the buffer to the physical terminal."""
        self.window.noutrefresh()
        curses.doupdate()

    def read_key(self) -> int:
        """Read one key code; -1 when nothing is buffered."""
        return self.window.getch()
