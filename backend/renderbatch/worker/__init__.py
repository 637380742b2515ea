"""
Out-of-process rendering through the command-line renderer.
"""

from .errors import (
    WorkerError,
    WorkerNotFoundError,
    WorkerExecutionError,
)
from .results import (
    WorkerStatus,
    WorkerResult,
)
from .discovery import (
    ENV_AERENDER_PATH,
    discover_aerender,
)
from .process import (
    DEFAULT_FIXED_FLAGS,
    FailurePolicy,
    ExternalRenderWorker,
)

__all__ = [
    # Errors
    "WorkerError",
    "WorkerNotFoundError",
    "WorkerExecutionError",
    # Results
    "WorkerStatus",
    "WorkerResult",
    # Discovery
    "ENV_AERENDER_PATH",
    "discover_aerender",
    # Worker
    "DEFAULT_FIXED_FLAGS",
    "FailurePolicy",
    "ExternalRenderWorker",
]
