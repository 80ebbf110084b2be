"""Terminal resize notification for procexplorer.

The SIGWINCH handler only ever assigns ``ResizeFlag.pending``. Everything
else (querying the new size, redrawing, logging) happens in the event loop
after it reads the flag with ``consume()``.
"""

import logging
import os
import signal
from types import FrameType, TracebackType

logger = logging.getLogger(__name__)


class ResizeFlag:
    """Coalescing "viewport changed" flag: many sets before a read count once."""

    __slots__ = ("pending",)

    def __init__(self) -> None:
        self.pending = False

    def set(self) -> None:
        """Mark a reconciliation as pending. Safe to call from a signal handler."""
        self.pending = True

    def consume(self) -> bool:
        """Return whether a resize was pending, clearing the flag."""
        pending, self.pending = self.pending, False
        return pending


class ResizeNotifier:
    """
    Scoped SIGWINCH installation.

    On enter, installs a handler that sets ``flag`` and registers a
    non-blocking self-pipe with ``signal.set_wakeup_fd`` so a blocked
    ``select()`` on ``wakeup_fd`` returns as soon as a signal arrives.
    On exit, the previous handler and wakeup fd are put back and the
    pipe is closed. On platforms without SIGWINCH the notifier is inert
    and ``wakeup_fd`` stays None.
    """

    def __init__(self, flag: ResizeFlag | None = None) -> None:
        self.flag = flag if flag is not None else ResizeFlag()
        self.wakeup_fd: int | None = None
        self._write_fd: int | None = None
        self._old_handler: signal.Handlers | object | None = None
        self._old_wakeup_fd: int = -1
        self._installed = False

    @property
    def supported(self) -> bool:
        return hasattr(signal, "SIGWINCH")

    def _handle(self, signum: int, frame: FrameType | None) -> None:
        """SIGWINCH handler: only raises the flag."""
        self.flag.set()

    def __enter__(self) -> "ResizeNotifier":
        if not self.supported:
            return self

        read_fd, write_fd = os.pipe()
        os.set_blocking(read_fd, False)
        os.set_blocking(write_fd, False)
        self.wakeup_fd, self._write_fd = read_fd, write_fd
        try:
            self._old_wakeup_fd = signal.set_wakeup_fd(write_fd, warn_on_full_buffer=False)
        except (ValueError, OSError):
            self._close()
            raise
        try:
            self._old_handler = signal.signal(signal.SIGWINCH, self._handle)
        except (ValueError, OSError):
            signal.set_wakeup_fd(self._old_wakeup_fd)
            self._close()
            raise
        self._installed = True
        logger.debug("SIGWINCH handler installed")
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._installed:
            signal.signal(signal.SIGWINCH, self._old_handler or signal.SIG_DFL)
            signal.set_wakeup_fd(self._old_wakeup_fd)
            self._installed = False
            logger.debug("SIGWINCH handler restored")
        self._close()

    def drain(self) -> None:
        """Discard pending wakeup bytes so the next wait blocks again."""
        if self.wakeup_fd is None:
            return
        while True:
            try:
                if not os.read(self.wakeup_fd, 512):
                    return
            except BlockingIOError:
                return

    def _close(self) -> None:
        """Close both ends of the wakeup pipe."""
        for fd in (self.wakeup_fd, self._write_fd):
            if fd is not None:
                os.close(fd)
        self.wakeup_fd = self._write_fd = None
