"""
Queue bookkeeping structures.

These hold live references to host queue entries, so they are plain
dataclasses rather than serialisable models.
"""

from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

from .errors import QueueStateError

if TYPE_CHECKING:
    from ..jobs.models import RenderJob
    from .host import HostQueueEntry


@dataclass(frozen=True)
class SnapshotEntry:
    """One captured pre-existing entry and its prior enabled flag."""

    entry: "HostQueueEntry"
    was_enabled: bool
    position: int  # 1-based queue position at capture time, for logs only


@dataclass
class EnabledSnapshot:
    """
    Enabled flags of pre-existing entries, captured before injection.

    Restoration matches entries by identity, never by position.
    A snapshot spans exactly one disable/enable pairing.
    """

    entries: List[SnapshotEntry] = field(default_factory=list)
    restored: bool = False

    def record(self, entry: "HostQueueEntry", was_enabled: bool, position: int) -> None:
        if self.restored:
            raise QueueStateError("Cannot record into a snapshot that was already restored")
        self.entries.append(SnapshotEntry(entry=entry, was_enabled=was_enabled, position=position))

    def mark_restored(self) -> None:
        """
        Mark the snapshot consumed.

        Raises:
            QueueStateError: If the snapshot was already restored
        """
        if self.restored:
            raise QueueStateError("Enabled snapshot was already restored; snapshots cannot be reused")
        self.restored = True

    def __len__(self) -> int:
        return len(self.entries)


@dataclass(frozen=True)
class QueueEntryHandle:
    """
    Reference to an entry this layer injected.

    Usable only to remove that entry later.
    """

    entry: "HostQueueEntry"
    job: "RenderJob"


@dataclass(frozen=True)
class RestoreToken:
    """
    Proof of exclusive queue access.

    Returned by QueueAdapter.exclusive_access(). Releasing the access
    restores the snapshot it holds.
    """

    snapshot: EnabledSnapshot

    @property
    def disabled_count(self) -> int:
        return len(self.snapshot)
