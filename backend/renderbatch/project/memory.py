"""
In-memory host project.

Pairs with InMemoryRenderQueue. Saving writes the render queue as JSON so
snapshots and imports work against real files.
"""

import json
import logging
import shutil
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..jobs.models import PostRenderAction
from ..queue.host import QueueEntryStatus
from ..queue.memory import InMemoryRenderQueue, MemoryComposition, MemoryQueueEntry
from .host import HostProject, ImportedItem

logger = logging.getLogger(__name__)


class MemoryImportedItem(ImportedItem):
    """Entries brought in by an import; removing the item removes them."""

    def __init__(self, queue: InMemoryRenderQueue, entries: List[MemoryQueueEntry]):
        self._queue = queue
        self.entries = entries

    def remove(self) -> None:
        present = self._queue.items()
        for entry in self.entries:
            if any(item is entry for item in present):
                entry.remove()


class InMemoryProject(HostProject):
    """
    Open project kept in memory.

    Args:
        queue: The project's render queue
        file: Backing file, or None for a never-saved project
        save_dialog_path: Path chosen when save() is called on a project
            without a file. None simulates the user cancelling the dialog.
    """

    def __init__(
        self,
        queue: InMemoryRenderQueue,
        file: Optional[str] = None,
        save_dialog_path: Optional[str] = None,
    ):
        self.queue = queue
        self._file = file
        self._save_dialog_path = save_dialog_path
        self.save_count = 0

    @property
    def file(self) -> Optional[str]:
        return self._file

    def save(self) -> None:
        if self._file is None:
            if self._save_dialog_path is None:
                logger.debug("[MemoryProject] Save cancelled, project has no file")
                return
            self._file = self._save_dialog_path
        self._write(self._file)

    def save_as(self, path: str) -> None:
        self._file = path
        self._write(path)

    def copy_to(self, path: str) -> None:
        if self._file is None:
            raise RuntimeError("Project has no backing file to copy")
        shutil.copyfile(self._file, path)

    def import_project(self, path: str) -> MemoryImportedItem:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)

        entries: List[MemoryQueueEntry] = []
        for item in data.get("render_queue", []):
            entry = self.queue.seed(
                MemoryComposition(item["composition"]),
                render=item.get("render", True),
                status=QueueEntryStatus(item.get("status", QueueEntryStatus.QUEUED.value)),
            )
            modules = item.get("output_modules", [])
            for index, module_data in enumerate(modules):
                module = entry.output_module(1) if index == 0 else entry.add_output_module(module_data["name"])
                module.name = module_data["name"]
                module.file = module_data.get("file")
                module.post_render_action = PostRenderAction(
                    module_data.get("post_render_action", PostRenderAction.NONE.value)
                )
            entries.append(entry)

        return MemoryImportedItem(self.queue, entries)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "render_queue": [
                {
                    "composition": getattr(entry.composition, "name", str(entry.composition)),
                    "render": entry.render,
                    "status": entry.status.value,
                    "output_modules": [m.to_dict() for m in entry.output_modules()],
                }
                for entry in self.queue.items()
            ]
        }

    def _write(self, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)
        self.save_count += 1
        logger.debug(f"[MemoryProject] Saved {path}")
