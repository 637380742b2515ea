"""
Host render queue interface.

The host application owns one global render queue. This layer never
reaches for it implicitly: a HostRenderQueue implementation is injected
into the QueueAdapter, so tests and dry runs can use an in-memory queue.

Implementations must expose these attributes:

    HostQueueEntry.render       bool, the entry's enabled flag (read/write)
    HostQueueEntry.status       QueueEntryStatus (read)
    HostQueueEntry.composition  the composition this entry renders
    HostOutputModule.name       module name (read)
    HostOutputModule.file       output file path (read/write)
    HostOutputModule.post_render_action  PostRenderAction (read/write)
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, FrozenSet, List


class QueueEntryStatus(str, Enum):
    """
    Status of a host render queue entry.

    Mirrors the host's own status set.
    """

    UNQUEUED = "unqueued"  # Not ready to render (render flag off)
    QUEUED = "queued"  # Ready to render
    NEEDS_OUTPUT = "needs_output"  # No output file set
    RENDERING = "rendering"  # Currently rendering
    USER_STOPPED = "user_stopped"  # Stopped by the user
    ERR_STOPPED = "err_stopped"  # Stopped by an error
    DONE = "done"  # Rendered
    WILL_CONTINUE = "will_continue"  # Partially rendered, will resume


# Entries in these states are committed to or past execution.
# Their render flag must never be toggled.
PROTECTED_STATUSES: FrozenSet[QueueEntryStatus] = frozenset({
    QueueEntryStatus.RENDERING,
    QueueEntryStatus.DONE,
    QueueEntryStatus.WILL_CONTINUE,
})


class HostOutputModule(ABC):
    """Per-entry output configuration: file, template, post-render behaviour."""

    @abstractmethod
    def apply_template(self, name: str) -> None:
        """Apply an installed output module template by name."""
        pass

    @abstractmethod
    def templates(self) -> List[str]:
        """Names of the output module templates installed on the host."""
        pass

    @abstractmethod
    def save_as_template(self, name: str) -> None:
        """Install this module's current settings as a template."""
        pass


class HostQueueEntry(ABC):
    """One entry of the host render queue."""

    @abstractmethod
    def output_module(self, index: int) -> HostOutputModule:
        """Return the output module at a 1-based index."""
        pass

    @abstractmethod
    def output_modules(self) -> List[HostOutputModule]:
        """All output modules of this entry, in order."""
        pass

    @abstractmethod
    def remove(self) -> None:
        """Remove this entry from the host queue."""
        pass


class HostRenderQueue(ABC):
    """The host application's render queue."""

    @abstractmethod
    def items(self) -> List[HostQueueEntry]:
        """Current entries, in queue order."""
        pass

    @abstractmethod
    def add(self, composition: Any) -> HostQueueEntry:
        """Append a new entry rendering the given composition."""
        pass

    @abstractmethod
    def render(self) -> None:
        """
        Render every enabled entry, in queue order.

        Blocks until the host has finished.
        """
        pass

    @abstractmethod
    def output_module_templates(self) -> List[str]:
        """Names of installed output module templates."""
        pass

    @abstractmethod
    def render_settings_templates(self) -> List[str]:
        """Names of installed render settings templates."""
        pass
