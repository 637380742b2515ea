"""
renderbatch: batch rendering through a host application's render queue.

Queue render jobs, submit them to the host's render queue without
disturbing work already queued there, and render them either inside the
host or through the external command-line renderer.
"""

__version__ = "0.1.0"

from .jobs import (
    JobError,
    InvalidJobError,
    PostRenderAction,
    RenderJob,
)
from .queue import (
    QueueError,
    QueueStateError,
    QueueEntryStatus,
    QueueAdapter,
    EnabledSnapshot,
    QueueEntryHandle,
    HostRenderQueue,
    InMemoryRenderQueue,
)
from .worker import (
    WorkerError,
    WorkerExecutionError,
    WorkerNotFoundError,
    WorkerResult,
    FailurePolicy,
    ExternalRenderWorker,
    discover_aerender,
)
from .project import (
    HostProject,
    InMemoryProject,
    ProjectSnapshotFile,
)
from .scheduler import (
    SchedulerError,
    DispatchInProgressError,
    DispatchMode,
    DispatchPhase,
    DispatchResult,
    Scheduler,
)
from .config import RenderBatchSettings

__all__ = [
    "__version__",
    # Jobs
    "JobError",
    "InvalidJobError",
    "PostRenderAction",
    "RenderJob",
    # Queue
    "QueueError",
    "QueueStateError",
    "QueueEntryStatus",
    "QueueAdapter",
    "EnabledSnapshot",
    "QueueEntryHandle",
    "HostRenderQueue",
    "InMemoryRenderQueue",
    # Worker
    "WorkerError",
    "WorkerExecutionError",
    "WorkerNotFoundError",
    "WorkerResult",
    "FailurePolicy",
    "ExternalRenderWorker",
    "discover_aerender",
    # Project
    "HostProject",
    "InMemoryProject",
    "ProjectSnapshotFile",
    # Scheduler
    "SchedulerError",
    "DispatchInProgressError",
    "DispatchMode",
    "DispatchPhase",
    "DispatchResult",
    "Scheduler",
    # Config
    "RenderBatchSettings",
]
