"""Bounded wait for keyboard input or a resize wakeup."""

import errno
import select
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

SelectFn = Callable[[list[int], list[int], list[int], float], tuple[list[int], list[int], list[int]]]

DEFAULT_TIMEOUT = 1.0


class WaitOutcome(Enum):
    """What ended a multiplexer wait."""

    READY = "ready"
    TIMED_OUT = "timed-out"
    INTERRUPTED = "interrupted"
    FAILED = "failed"


@dataclass(slots=True, frozen=True)
class WaitResult:
    """Outcome of one wait, with the errno when it FAILED."""

    outcome: WaitOutcome
    code: int = 0


class InputMultiplexer:
    """
    Wait until the input fd is readable or the timeout elapses.

    When a wakeup fd is given (see ResizeNotifier), a signal arriving during
    the wait makes it return INTERRUPTED rather than being absorbed by the
    automatic EINTR retry of ``select()``. The timeout is taken fresh on
    every call and never carried over from a previous wait, so a retry
    after INTERRUPTED waits the whole interval again.
    """

    def __init__(
        self,
        input_fd: int,
        wakeup_fd: int | None = None,
        drain: Callable[[], None] | None = None,
        select_fn: SelectFn = select.select,
    ) -> None:
        """
        Initialize the multiplexer.

        Args:
            input_fd: File descriptor the keyboard input arrives on.
            wakeup_fd: Read end of the signal wakeup pipe, if any.
            drain: Called to empty the wakeup pipe after it fired.
            select_fn: ``select.select`` compatible callable.
        """
        self._input_fd = input_fd
        self._wakeup_fd = wakeup_fd
        self._drain = drain
        self._select = select_fn

    def wait(self, timeout: float = DEFAULT_TIMEOUT) -> WaitResult:
        """Block until input is ready, ``timeout`` seconds pass or a signal arrives."""
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        fds = [self._input_fd]
        if self._wakeup_fd is not None:
            fds.append(self._wakeup_fd)
        try:
            readable, _, _ = self._select(fds, [], [], timeout)
        except InterruptedError:
            return WaitResult(WaitOutcome.INTERRUPTED, errno.EINTR)
        except OSError as exc:
            return WaitResult(WaitOutcome.FAILED, exc.errno or errno.EIO)

        if self._wakeup_fd is not None and self._wakeup_fd in readable:
            if self._drain is not None:
                self._drain()
            return WaitResult(WaitOutcome.INTERRUPTED, errno.EINTR)
        if self._input_fd in readable:
            return WaitResult(WaitOutcome.READY)
        return WaitResult(WaitOutcome.TIMED_OUT)
