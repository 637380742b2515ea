"""
Worker invocation result models.

Structured outcome of one spawn-and-wait of the render executable.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class WorkerStatus(str, Enum):
    """
    Invocation outcome.

    SUCCESS: Process exited with code 0
    FAILED: Non-zero exit, or the process could not be started
    SKIPPED: Not run because an earlier invocation failed
    """

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class WorkerResult(BaseModel):
    """Result of one worker invocation."""

    model_config = ConfigDict(extra="forbid")

    status: WorkerStatus

    args: List[str]
    """Invocation-specific arguments (fixed flags excluded)."""

    command: List[str] = Field(default_factory=list)
    """Full command line that was (or would have been) spawned."""

    exit_code: Optional[int] = None

    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    stdout: str = ""
    stderr: str = ""

    failure_reason: Optional[str] = None

    @property
    def is_failure(self) -> bool:
        return self.status == WorkerStatus.FAILED

    def duration_seconds(self) -> Optional[float]:
        """Wall-clock duration of the process in seconds."""
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def summary(self) -> str:
        """Human-readable summary of the invocation."""
        target = " ".join(self.args)
        duration = self.duration_seconds()
        duration_str = f" ({duration:.1f}s)" if duration is not None else ""

        if self.status == WorkerStatus.SUCCESS:
            return f"SUCCESS{duration_str}: {target}"
        if self.status == WorkerStatus.SKIPPED:
            return f"SKIPPED: {target}"
        return f"FAILED{duration_str}: {target} - {self.failure_reason}"
