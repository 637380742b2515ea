"""
Host render queue access.

All mutation of the host's global render queue goes through QueueAdapter.
The host queue itself is injected behind the HostRenderQueue interface.
"""

from .errors import (
    QueueError,
    QueueStateError,
)
from .host import (
    QueueEntryStatus,
    PROTECTED_STATUSES,
    HostOutputModule,
    HostQueueEntry,
    HostRenderQueue,
)
from .models import (
    SnapshotEntry,
    EnabledSnapshot,
    QueueEntryHandle,
    RestoreToken,
)
from .adapter import QueueAdapter
from .memory import (
    MemoryComposition,
    MemoryOutputModule,
    MemoryQueueEntry,
    InMemoryRenderQueue,
)

__all__ = [
    # Errors
    "QueueError",
    "QueueStateError",
    # Host interface
    "QueueEntryStatus",
    "PROTECTED_STATUSES",
    "HostOutputModule",
    "HostQueueEntry",
    "HostRenderQueue",
    # Bookkeeping
    "SnapshotEntry",
    "EnabledSnapshot",
    "QueueEntryHandle",
    "RestoreToken",
    # Adapter
    "QueueAdapter",
    # In-memory host
    "MemoryComposition",
    "MemoryOutputModule",
    "MemoryQueueEntry",
    "InMemoryRenderQueue",
]
