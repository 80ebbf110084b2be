"""Task snapshot providers for procexplorer."""

import logging
from typing import Protocol

import psutil

from procexplorer.models import MAX_TASKS, TaskRecord, TaskState

logger = logging.getLogger(__name__)

_PSUTIL_STATES = {
    psutil.STATUS_RUNNING: TaskState.RUNNING,
    psutil.STATUS_SLEEPING: TaskState.SLEEPING,
    psutil.STATUS_IDLE: TaskState.SLEEPING,
    psutil.STATUS_DISK_SLEEP: TaskState.DISK_WAIT,
    psutil.STATUS_ZOMBIE: TaskState.ZOMBIE,
    psutil.STATUS_STOPPED: TaskState.STOPPED,
    psutil.STATUS_TRACING_STOP: TaskState.STOPPED,
}

MOCK_COMMANDS = (
    "systemd", "kthreadd", "bash", "vim", "firefox",
    "chrome", "docker", "nginx", "postgres", "python3",
    "gcc", "make", "ssh", "sshd", "cron",
    "dbus-daemon", "NetworkManager", "pulseaudio", "Xorg", "gnome-shell",
)

MOCK_STATE_CYCLE = "RSSSDSSSSS"


class ProviderError(Exception):
    """The task enumeration source could not be read."""


class TaskProvider(Protocol):
    """Anything that can produce a point-in-time list of task rows."""

    def collect(self, max_count: int) -> list[TaskRecord]: ...


def state_from_status(status: str | None) -> TaskState:
    """Map a psutil status string (or a one-letter code) to a TaskState."""
    if not status:
        return TaskState.UNKNOWN
    if status in _PSUTIL_STATES:
        return _PSUTIL_STATES[status]
    if len(status) == 1:
        return TaskState.from_code(status)
    return TaskState.UNKNOWN


def _capacity(max_count: int) -> int:
    """Requested row count bounded by MAX_TASKS."""
    return max(0, min(max_count, MAX_TASKS))


class PsutilTaskProvider:
    """
    Provider backed by the OS process table, one row per thread.

    Processes that exit or deny access while being enumerated are skipped;
    a failure of the enumeration itself is raised as ProviderError.
    """

    def __init__(self, include_threads: bool = True) -> None:
        """
        Initialize the provider.

        Args:
            include_threads: List every thread of a process as its own row.
                When False, each process gets a single row with tid == pid.
        """
        self._include_threads = include_threads

    def collect(self, max_count: int = MAX_TASKS) -> list[TaskRecord]:
        """Collect up to max_count task rows in enumeration order."""
        limit = _capacity(max_count)
        tasks: list[TaskRecord] = []
        if limit == 0:
            return tasks

        try:
            for proc in psutil.process_iter(attrs=["pid", "name", "status"]):
                try:
                    self._append_rows(proc, tasks, limit)
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    continue
                if len(tasks) >= limit:
                    break
        except (psutil.Error, OSError) as exc:
            raise ProviderError(f"cannot enumerate processes: {exc}") from exc

        logger.debug("Collected %d task rows", len(tasks))
        return tasks

    def _append_rows(self, proc: psutil.Process, tasks: list[TaskRecord], limit: int) -> None:
        """Add one row per thread of proc, stopping at limit."""
        with proc.oneshot():
            info = proc.info
            pid = info.get("pid") or proc.pid
            command = info.get("name") or ""
            state = state_from_status(info.get("status"))

            tids = [pid]
            if self._include_threads:
                try:
                    tids = sorted(thread.id for thread in proc.threads()) or [pid]
                except psutil.AccessDenied:
                    pass

        for tid in tids:
            if len(tasks) >= limit:
                return
            tasks.append(TaskRecord.create(pid, tid, command, state))


class MockTaskProvider:
    """Deterministic placeholder data: 50 processes with 1-4 threads each."""

    def __init__(self, process_count: int = 50) -> None:
        self._process_count = process_count

    def collect(self, max_count: int = MAX_TASKS) -> list[TaskRecord]:
        """Generate up to max_count rows of mock tasks."""
        limit = _capacity(max_count)
        tasks: list[TaskRecord] = []

        for i in range(self._process_count):
            pid = 100 + i * 10
            for t in range(1 + i % 4):
                if len(tasks) >= limit:
                    return tasks
                state = TaskState.from_code(MOCK_STATE_CYCLE[len(tasks) % len(MOCK_STATE_CYCLE)])
                tasks.append(
                    TaskRecord.create(pid, pid + t, MOCK_COMMANDS[i % len(MOCK_COMMANDS)], state)
                )

        return tasks


def build_provider(source: str) -> TaskProvider:
    """Return the provider registered under ``source`` ("psutil" or "mock")."""
    if source == "psutil":
        return PsutilTaskProvider()
    if source == "mock":
        return MockTaskProvider()
    raise ValueError(f"unknown task source: {source!r}")
