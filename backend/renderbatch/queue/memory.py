"""
In-memory host render queue.

Behaves like the host queue closely enough to drive the adapter and the
scheduler without the host application: entry order, render flags,
statuses, output modules and installed templates.

Used by the test suite and for dry runs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from ..jobs.models import PostRenderAction
from .host import HostOutputModule, HostQueueEntry, HostRenderQueue, QueueEntryStatus

logger = logging.getLogger(__name__)


DEFAULT_OUTPUT_MODULE_TEMPLATES = ["Lossless", "High Quality", "H.264 - Match Render Settings"]
DEFAULT_RENDER_SETTINGS_TEMPLATES = ["Best Settings", "Draft Settings", "Current Settings"]


@dataclass(frozen=True)
class MemoryComposition:
    """Stand-in for a host composition."""

    name: str


class MemoryOutputModule(HostOutputModule):
    def __init__(self, queue: "InMemoryRenderQueue", name: str = "Lossless"):
        self._queue = queue
        self.name = name
        self.file: Optional[str] = None
        self.post_render_action: PostRenderAction = PostRenderAction.NONE

    def apply_template(self, name: str) -> None:
        if name not in self._queue.output_module_templates():
            raise ValueError(f"Output module template not found: {name}")
        self.name = name

    def templates(self) -> List[str]:
        return self._queue.output_module_templates()

    def save_as_template(self, name: str) -> None:
        self._queue.install_output_module_template(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "file": self.file,
            "post_render_action": self.post_render_action.value,
        }


class MemoryQueueEntry(HostQueueEntry):
    """
    Queue entry.

    Toggling the render flag moves the status between QUEUED and
    UNQUEUED, as the host does. Other statuses are not affected.
    """

    def __init__(
        self,
        queue: "InMemoryRenderQueue",
        composition: Any,
        render: bool = True,
        status: Optional[QueueEntryStatus] = None,
    ):
        self._queue = queue
        self.composition = composition
        self._render = render
        if status is None:
            status = QueueEntryStatus.QUEUED if render else QueueEntryStatus.UNQUEUED
        self.status = status
        self._output_modules: List[MemoryOutputModule] = [MemoryOutputModule(queue)]

    @property
    def render(self) -> bool:
        return self._render

    @render.setter
    def render(self, value: bool) -> None:
        self._render = value
        if self.status in (QueueEntryStatus.QUEUED, QueueEntryStatus.UNQUEUED):
            self.status = QueueEntryStatus.QUEUED if value else QueueEntryStatus.UNQUEUED

    def output_module(self, index: int) -> MemoryOutputModule:
        if index < 1 or index > len(self._output_modules):
            raise IndexError(f"Output module index out of range: {index}")
        return self._output_modules[index - 1]

    def output_modules(self) -> List[MemoryOutputModule]:
        return list(self._output_modules)

    def add_output_module(self, name: str) -> MemoryOutputModule:
        module = MemoryOutputModule(self._queue, name=name)
        self._output_modules.append(module)
        return module

    def remove(self) -> None:
        self._queue._remove(self)

    def state(self) -> tuple:
        """Comparable view of this entry."""
        return (
            self.composition,
            self._render,
            self.status,
            tuple(tuple(sorted(m.to_dict().items())) for m in self._output_modules),
        )

    def __repr__(self) -> str:
        return f"MemoryQueueEntry({self.composition!r}, render={self._render}, status={self.status.value})"


class InMemoryRenderQueue(HostRenderQueue):
    """
    Host render queue kept in memory.

    Args:
        on_render: Optional callback run for each entry as it renders.
            Raising from it stops the render with the entry ERR_STOPPED.
    """

    def __init__(
        self,
        on_render: Optional[Callable[[MemoryQueueEntry], None]] = None,
        output_module_templates: Optional[List[str]] = None,
        render_settings_templates: Optional[List[str]] = None,
    ):
        self._items: List[MemoryQueueEntry] = []
        self._on_render = on_render
        self._om_templates = list(output_module_templates or DEFAULT_OUTPUT_MODULE_TEMPLATES)
        self._rs_templates = list(render_settings_templates or DEFAULT_RENDER_SETTINGS_TEMPLATES)

        # Call history, for inspection
        self.added: List[Any] = []
        self.rendered: List[MemoryQueueEntry] = []
        self.render_calls = 0

    def items(self) -> List[MemoryQueueEntry]:
        return list(self._items)

    def add(self, composition: Any) -> MemoryQueueEntry:
        entry = MemoryQueueEntry(self, composition)
        self._items.append(entry)
        self.added.append(composition)
        return entry

    def seed(
        self,
        composition: Any,
        render: bool = True,
        status: Optional[QueueEntryStatus] = None,
    ) -> MemoryQueueEntry:
        """Add a pre-existing entry without recording it as an add call."""
        entry = MemoryQueueEntry(self, composition, render=render, status=status)
        self._items.append(entry)
        return entry

    def render(self) -> None:
        self.render_calls += 1
        for entry in self.items():
            if not entry.render or entry.status != QueueEntryStatus.QUEUED:
                continue
            entry.status = QueueEntryStatus.RENDERING
            try:
                if self._on_render is not None:
                    self._on_render(entry)
            except Exception:
                entry.status = QueueEntryStatus.ERR_STOPPED
                raise
            entry.status = QueueEntryStatus.DONE
            self.rendered.append(entry)
            logger.debug(f"[MemoryQueue] Rendered {entry!r}")

    def output_module_templates(self) -> List[str]:
        return list(self._om_templates)

    def render_settings_templates(self) -> List[str]:
        return list(self._rs_templates)

    def install_output_module_template(self, name: str) -> None:
        if name not in self._om_templates:
            self._om_templates.append(name)

    def state(self) -> List[tuple]:
        """Comparable view of the whole queue."""
        return [entry.state() for entry in self._items]

    def _remove(self, entry: MemoryQueueEntry) -> None:
        for index, item in enumerate(self._items):
            if item is entry:
                del self._items[index]
                return
        raise RuntimeError("Object is invalid: render queue entry was already removed")
