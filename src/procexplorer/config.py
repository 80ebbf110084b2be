"""Runtime configuration for procexplorer."""

from dataclasses import dataclass

from procexplorer.models import MAX_TASKS

MIN_REFRESH_INTERVAL = 0.1


@dataclass(slots=True, frozen=True)
class Config:
    """Settings for one run of the explorer."""

    timeout: float = 1.0  # Seconds per input wait
    refresh_interval: float = 2.0  # Seconds between snapshot collections
    max_tasks: int = MAX_TASKS
    source: str = "psutil"  # 'psutil' or 'mock'
    log_file: str | None = None
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")
        if self.refresh_interval < MIN_REFRESH_INTERVAL:
            raise ValueError(f"refresh interval must be at least {MIN_REFRESH_INTERVAL}s")
        if not 0 < self.max_tasks <= MAX_TASKS:
            raise ValueError(f"max tasks must be between 1 and {MAX_TASKS}")
