"""Highlighted row and scroll position of the task table."""


def clamp(value: int, lo: int, hi: int) -> int:
    """Clamp value into [lo, hi]."""
    return max(lo, min(hi, value))


class SelectionState:
    """
    Selected row and first visible row of a list.

    After every mutation ``scroll <= selected <= scroll + visible_rows - 1``
    holds for the visible_rows passed in, and ``selected`` stays within
    the list. An empty list pins both to 0.
    """

    def __init__(self) -> None:
        self.selected = 0
        self.scroll = 0

    def __repr__(self) -> str:
        return f"SelectionState(selected={self.selected}, scroll={self.scroll})"

    def navigate_up(self, n_items: int, visible_rows: int) -> None:
        """Move the highlight one row up; a no-op on the first row."""
        if self.selected > 0:
            self.selected -= 1
        self.ensure_visible(n_items, visible_rows)

    def navigate_down(self, n_items: int, visible_rows: int) -> None:
        """Move the highlight one row down; a no-op on the last row."""
        if self.selected < n_items - 1:
            self.selected += 1
        self.ensure_visible(n_items, visible_rows)

    def page(self, delta_pages: int, n_items: int, visible_rows: int) -> None:
        """Move by whole pages of visible rows."""
        self.move_to(self.selected + delta_pages * max(1, visible_rows), n_items, visible_rows)

    def move_to(self, index: int, n_items: int, visible_rows: int) -> None:
        """Select index (clamped to the list) and scroll it into view."""
        self.selected = index
        self.ensure_visible(n_items, visible_rows)

    def ensure_visible(self, n_items: int, visible_rows: int) -> None:
        """Clamp the selection to the list and the scroll to the selection."""
        if n_items <= 0:
            self.selected = 0
            self.scroll = 0
            return
        self.selected = clamp(self.selected, 0, n_items - 1)
        if visible_rows <= 0:
            self.scroll = self.selected
            return
        if self.selected < self.scroll:
            self.scroll = self.selected
        elif self.selected >= self.scroll + visible_rows:
            self.scroll = self.selected - visible_rows + 1
        # Keep the window full when the list shrank under it.
        max_scroll = max(0, n_items - visible_rows)
        self.scroll = clamp(self.scroll, max(0, self.selected - visible_rows + 1), min(self.selected, max_scroll))
