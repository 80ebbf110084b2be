"""Tests for the InputMultiplexer."""

import errno
import os

import pytest

from procexplorer.multiplexer import InputMultiplexer, WaitOutcome, WaitResult


@pytest.fixture
def pipe():
    """A readable/writable pipe pair, closed after the test."""
    read_fd, write_fd = os.pipe()
    yield read_fd, write_fd
    os.close(read_fd)
    os.close(write_fd)


def drainer(fd: int):
    def drain() -> None:
        os.set_blocking(fd, False)
        try:
            os.read(fd, 512)
        except BlockingIOError:
            pass

    return drain


class TestWithPipes:
    """Tests against real file descriptors."""

    def test_times_out_without_input(self, pipe):
        """Test an idle input reports TIMED_OUT."""
        mux = InputMultiplexer(pipe[0])

        assert mux.wait(0.01) == WaitResult(WaitOutcome.TIMED_OUT)

    def test_ready_when_input_buffered(self, pipe):
        """Test buffered input reports READY without consuming it."""
        os.write(pipe[1], b"q")
        mux = InputMultiplexer(pipe[0])

        assert mux.wait(1.0).outcome is WaitOutcome.READY
        assert os.read(pipe[0], 1) == b"q"

    def test_wakeup_reports_interrupted_and_drains(self, pipe):
        """Test a wakeup byte reports INTERRUPTED and the next wait blocks again."""
        wake_r, wake_w = os.pipe()
        try:
            os.write(wake_w, b"\x1c\x1c\x1c")
            mux = InputMultiplexer(pipe[0], wakeup_fd=wake_r, drain=drainer(wake_r))

            result = mux.wait(1.0)
            assert result.outcome is WaitOutcome.INTERRUPTED
            assert result.code == errno.EINTR

            assert mux.wait(0.01).outcome is WaitOutcome.TIMED_OUT
        finally:
            os.close(wake_r)
            os.close(wake_w)

    def test_interrupted_before_input(self, pipe):
        """Test a wakeup wins over pending input, which stays unread."""
        wake_r, wake_w = os.pipe()
        try:
            os.write(wake_w, b"\x1c")
            os.write(pipe[1], b"j")
            mux = InputMultiplexer(pipe[0], wakeup_fd=wake_r, drain=drainer(wake_r))

            assert mux.wait(1.0).outcome is WaitOutcome.INTERRUPTED
            assert mux.wait(1.0).outcome is WaitOutcome.READY
        finally:
            os.close(wake_r)
            os.close(wake_w)


class TestWithFakeSelect:
    """Tests using a stand-in select function."""

    def test_full_timeout_on_every_call(self):
        """Test retries after INTERRUPTED get the full timeout, not a remainder."""
        seen: list[float] = []

        def fake_select(rlist, wlist, xlist, timeout):
            seen.append(timeout)
            if len(seen) == 1:
                raise InterruptedError(errno.EINTR, "interrupted")
            return [], [], []

        mux = InputMultiplexer(0, select_fn=fake_select)

        assert mux.wait(1.0).outcome is WaitOutcome.INTERRUPTED
        assert mux.wait(1.0).outcome is WaitOutcome.TIMED_OUT
        assert seen == [1.0, 1.0]

    def test_os_error_is_failed(self):
        """Test a genuine select failure reports FAILED with its errno."""

        def fake_select(rlist, wlist, xlist, timeout):
            raise OSError(errno.EBADF, "bad file descriptor")

        result = InputMultiplexer(99, select_fn=fake_select).wait(1.0)

        assert result == WaitResult(WaitOutcome.FAILED, errno.EBADF)

    def test_watches_wakeup_fd(self):
        """Test the wakeup fd is passed to select alongside the input fd."""
        watched: list[list[int]] = []

        def fake_select(rlist, wlist, xlist, timeout):
            watched.append(list(rlist))
            return [], [], []

        InputMultiplexer(0, wakeup_fd=7, select_fn=fake_select).wait(0.5)

        assert watched == [[0, 7]]

    def test_rejects_non_positive_timeout(self):
        """Test a zero timeout is refused."""
        with pytest.raises(ValueError):
            InputMultiplexer(0).wait(0)
