"""Data models for procexplorer."""

from dataclasses import dataclass
from enum import Enum

MAX_TASKS = 1000
COMMAND_WIDTH = 31


class TaskState(Enum):
    """Scheduler state of a task row."""

    RUNNING = "R"
    SLEEPING = "S"
    DISK_WAIT = "D"
    ZOMBIE = "Z"
    STOPPED = "T"
    UNKNOWN = "?"

    @property
    def code(self) -> str:
        """One-letter state code, as shown by ps and top."""
        return self.value

    @property
    def label(self) -> str:
        """Human readable state name."""
        return _LABELS[self]

    @classmethod
    def from_code(cls, code: str) -> "TaskState":
        """Map a one-letter code to a state, UNKNOWN for anything else."""
        for state in cls:
            if state.value == code.upper():
                return state
        return cls.UNKNOWN


_LABELS = {
    TaskState.RUNNING: "Running",
    TaskState.SLEEPING: "Sleeping",
    TaskState.DISK_WAIT: "Disk sleep",
    TaskState.ZOMBIE: "Zombie",
    TaskState.STOPPED: "Stopped",
    TaskState.UNKNOWN: "Unknown",
}


@dataclass(slots=True, frozen=True)
class TaskRecord:
    """Immutable snapshot of one process or thread."""

    pid: int
    tid: int
    command: str  # At most COMMAND_WIDTH characters
    state: TaskState

    @classmethod
    def create(cls, pid: int, tid: int, command: str, state: TaskState) -> "TaskRecord":
        """Build a record, truncating the command to COMMAND_WIDTH."""
        return cls(pid=pid, tid=tid, command=command[:COMMAND_WIDTH], state=state)


@dataclass(slots=True)
class LoopStatistics:
    """Diagnostic counters kept by the event loop for the whole run."""

    resizes: int = 0
    timeouts: int = 0
    inputs: int = 0
    interrupts: int = 0
    refreshes: int = 0
    last_error_code: int = 0
    fatal_error: str | None = None
    exit_reason: str = "quit"

    @property
    def failed(self) -> bool:
        """True when the loop stopped on a fatal condition."""
        return self.fatal_error is not None

    def as_rows(self) -> list[tuple[str, str]]:
        """Label/value pairs for the exit summary and the debug panel."""
        return [
            ("Resizes handled", str(self.resizes)),
            ("Timeouts elapsed", str(self.timeouts)),
            ("Inputs processed", str(self.inputs)),
            ("Interrupted waits", str(self.interrupts)),
            ("Snapshot refreshes", str(self.refreshes)),
            ("Last error code", str(self.last_error_code)),
        ]
