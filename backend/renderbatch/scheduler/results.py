"""
Dispatch result model.
"""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field

from ..jobs.models import RenderJob
from ..project.snapshot import ProjectSnapshotFile
from ..worker.results import WorkerResult
from .state import DispatchMode


class DispatchResult(BaseModel):
    """
    Outcome of one completed dispatch.

    Only returned when the dispatch succeeded; failures raise.
    """

    model_config = ConfigDict(extra="forbid")

    mode: DispatchMode

    jobs: List[RenderJob] = Field(default_factory=list)
    """Resolved jobs, in the order they were submitted."""

    snapshot: Optional[ProjectSnapshotFile] = None
    """Snapshot handed to the worker (background mode only)."""

    worker_results: List[WorkerResult] = Field(default_factory=list)

    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def summary(self) -> str:
        """Human-readable summary of the dispatch."""
        duration = self.duration_seconds()
        duration_str = f" in {duration:.1f}s" if duration is not None else ""
        line = f"{self.mode.value}: {len(self.jobs)} job(s) rendered{duration_str}"
        if self.snapshot is not None:
            line += f" from {self.snapshot.path}"
        return line
