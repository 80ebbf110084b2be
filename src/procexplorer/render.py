"""Full-screen draw of the task table for procexplorer."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol

from procexplorer.models import LoopStatistics, TaskRecord, TaskState
from procexplorer.selection import SelectionState

TITLE = "ProcessExplorerLite"
QUIT_HINT = "Press 'q' to quit"
FOOTER_KEYS = "Keys: [q]uit | [r]efresh | [h]elp | [d]ebug"
TABLE_HEADER = f"{'PID':>7} {'TID':>7} {'STATE':<10} COMMAND"

HEADER_ROWS = 2
TABLE_HEADER_ROWS = 1
FOOTER_ROWS = 1
DEBUG_PANEL_ROWS = 4
HELP_PANEL_ROWS = 4

HELP_LINES = (
    "Up/k  Down/j        move the selection",
    "PgUp PgDn Home End  jump through the list",
    "r  refresh now      d  toggle debug panel",
    "h  close this help  q  quit",
)


class Style(Enum):
    """Style identifiers understood by every Screen implementation."""

    NORMAL = "normal"
    HEADER = "header"
    FOOTER = "footer"
    TABLE_HEADER = "table-header"
    DEBUG = "debug"
    SELECTED = "selected"
    RUNNING = "running"
    SLEEPING = "sleeping"


class Screen(Protocol):
    """Drawing surface the render pass writes to."""

    def dimensions(self) -> tuple[int, int]: ...

    def clear(self) -> None: ...

    def write_at(self, row: int, col: int, text: str, style: Style = Style.NORMAL) -> None: ...

    def hline(self, row: int, char: str, length: int, style: Style = Style.NORMAL) -> None: ...

    def present(self) -> None: ...


@dataclass(slots=True)
class Frame:
    """Everything one render pass looks at."""

    tasks: Sequence[TaskRecord]
    selection: SelectionState
    rows: int
    cols: int
    show_debug: bool = False
    show_help: bool = False
    stats: LoopStatistics = field(default_factory=LoopStatistics)


def available_rows(rows: int, show_debug: bool = False, show_help: bool = False) -> int:
    """Number of task rows that fit in a viewport of the given height."""
    used = HEADER_ROWS + FOOTER_ROWS + TABLE_HEADER_ROWS
    if show_debug:
        used += DEBUG_PANEL_ROWS
    if show_help:
        used += HELP_PANEL_ROWS
    return max(0, rows - used)


def format_task(task: TaskRecord) -> str:
    """Format a task as one table line, without padding."""
    return f"{task.pid:>7} {task.tid:>7} {task.state.label:<10} {task.command}"


def _state_style(state: TaskState) -> Style:
    """Highlight style for the state column, NORMAL when unstyled."""
    if state is TaskState.RUNNING:
        return Style.RUNNING
    if state is TaskState.SLEEPING:
        return Style.SLEEPING
    return Style.NORMAL


def _clip(text: str, col: int, cols: int) -> str:
    """Cut text so it ends at the right edge."""
    if col >= cols:
        return ""
    return text[: cols - col]


def _put(screen: Screen, frame: Frame, row: int, col: int, text: str, style: Style = Style.NORMAL) -> None:
    """Write text clipped to the viewport; off-screen writes are skipped."""
    if row < 0 or row >= frame.rows or col < 0:
        return
    text = _clip(text, col, frame.cols)
    if text:
        screen.write_at(row, col, text, style)


def render(screen: Screen, frame: Frame) -> int:
    """
    Draw the whole screen for ``frame`` and present it.

    Returns the number of task rows drawn. A viewport too small for any
    task row draws an empty table region.
    """
    screen.clear()
    if frame.rows <= 0 or frame.cols <= 0:
        screen.present()
        return 0

    _draw_header(screen, frame)

    visible = available_rows(frame.rows, frame.show_debug, frame.show_help)
    drawn = _draw_table(screen, frame, visible)

    panel_row = HEADER_ROWS + TABLE_HEADER_ROWS + visible
    if frame.show_help:
        panel_row = _draw_panel(screen, frame, panel_row, HELP_LINES)
    if frame.show_debug:
        _draw_panel(screen, frame, panel_row, _debug_lines(frame, visible))

    _draw_footer(screen, frame, visible)
    screen.present()
    return drawn


def _draw_header(screen: Screen, frame: Frame) -> None:
    """Title, quit hint and the separator line."""
    _put(screen, frame, 0, 0, TITLE, Style.HEADER)
    hint_col = frame.cols - len(QUIT_HINT) - 1
    if hint_col > len(TITLE):
        _put(screen, frame, 0, hint_col, QUIT_HINT, Style.HEADER)
    if frame.rows > 1:
        screen.hline(1, "-", frame.cols, Style.NORMAL)


def _draw_table(screen: Screen, frame: Frame, visible: int) -> int:
    """Column header and the visible window of tasks; returns rows drawn."""
    if visible <= 0:
        return 0
    _put(screen, frame, HEADER_ROWS, 0, TABLE_HEADER.ljust(frame.cols), Style.TABLE_HEADER)

    first_row = HEADER_ROWS + TABLE_HEADER_ROWS
    window = frame.tasks[frame.selection.scroll : frame.selection.scroll + visible]
    state_col = 16
    for offset, task in enumerate(window):
        row = first_row + offset
        if frame.selection.scroll + offset == frame.selection.selected:
            _put(screen, frame, row, 0, format_task(task).ljust(frame.cols), Style.SELECTED)
            continue
        _put(screen, frame, row, 0, format_task(task))
        style = _state_style(task.state)
        if style is not Style.NORMAL:
            _put(screen, frame, row, state_col, task.state.label, style)
    return len(window)


def _draw_panel(screen: Screen, frame: Frame, first_row: int, lines: Sequence[str]) -> int:
    """Draw panel lines from first_row, stopping above the footer; returns the next row."""
    footer_row = frame.rows - FOOTER_ROWS
    for offset, line in enumerate(lines):
        row = first_row + offset
        if row >= footer_row:
            break
        _put(screen, frame, row, 1, line, Style.DEBUG)
    return first_row + len(lines)


def _draw_footer(screen: Screen, frame: Frame, visible: int) -> None:
    """Key hints on the last row, with a position indicator when the list scrolls."""
    row = frame.rows - 1
    if row < HEADER_ROWS:
        return
    _put(screen, frame, row, 0, FOOTER_KEYS, Style.FOOTER)
    total = len(frame.tasks)
    if total > visible and total > 0:
        indicator = f"{frame.selection.selected + 1}/{total}"
        col = frame.cols - len(indicator) - 1
        if col > len(FOOTER_KEYS):
            _put(screen, frame, row, col, indicator, Style.FOOTER)


def _debug_lines(frame: Frame, visible: int) -> list[str]:
    """Loop statistics and viewport state for the debug panel."""
    stats = frame.stats
    return [
        f"Viewport: {frame.rows}x{frame.cols}  Tasks: {len(frame.tasks)}  Visible rows: {visible}",
        f"Selected: {frame.selection.selected}  Scroll: {frame.selection.scroll}",
        f"Resizes: {stats.resizes}  Timeouts: {stats.timeouts}  "
        f"Inputs: {stats.inputs}  Interrupts: {stats.interrupts}",
        f"Refreshes: {stats.refreshes}  Last error: {stats.last_error_code}",
    ]
