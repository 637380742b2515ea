"""
Project snapshots for out-of-process rendering.

A snapshot is a disposable, uniquely named duplicate of the saved project.
The external renderer works on the snapshot so the original project file
is never rendered from directly.
"""

import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from ..queue.errors import QueueStateError
from .host import HostProject

logger = logging.getLogger(__name__)


DEFAULT_SNAPSHOT_SUFFIX = "render"


class ProjectSnapshotFile(BaseModel):
    """A duplicated project file handed to the external renderer."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    source_path: str
    """Backing file of the open project at snapshot time."""

    path: str
    """The snapshot file."""

    created_at: datetime = Field(default_factory=datetime.now)

    def remove(self) -> bool:
        """Delete the snapshot file. Returns False if it was already gone."""
        snapshot = Path(self.path)
        if not snapshot.exists():
            return False
        snapshot.unlink()
        logger.info(f"[Snapshot] Removed {self.path}")
        return True


def ensure_backing_file(project: HostProject, fallback_path: Optional[str] = None) -> str:
    """
    Make sure the open project has a backing file.

    Args:
        project: The open project
        fallback_path: Where to save an unsaved project. Without it the
            host's own save (which may prompt the user) is used.

    Returns:
        The project's backing file path

    Raises:
        QueueStateError: If the project still has no backing file
    """
    if project.file:
        return project.file

    if fallback_path:
        logger.info(f"[Snapshot] Project has no file, saving as {fallback_path}")
        project.save_as(fallback_path)
    else:
        logger.info("[Snapshot] Project has no file, saving")
        project.save()

    if not project.file:
        raise QueueStateError(
            "The open project has no backing file and could not be saved; "
            "background rendering needs a saved project"
        )
    return project.file


def snapshot_path_for(
    project_path: str,
    snapshot_dir: Optional[str] = None,
    suffix: str = DEFAULT_SNAPSHOT_SUFFIX,
) -> str:
    """
    Build a unique snapshot path for a project file.

    Format: <stem>_<suffix>_<YYYYmmdd-HHMMSS>_<6 hex><ext>
    Placed beside the project unless snapshot_dir is given.
    """
    source = Path(project_path)
    directory = Path(snapshot_dir) if snapshot_dir else source.parent
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")

    while True:
        token = uuid.uuid4().hex[:6]
        candidate = directory / f"{source.stem}_{suffix}_{timestamp}_{token}{source.suffix}"
        if not candidate.exists() and candidate != source:
            return str(candidate)


def create_snapshot(
    project: HostProject,
    snapshot_dir: Optional[str] = None,
    suffix: str = DEFAULT_SNAPSHOT_SUFFIX,
) -> ProjectSnapshotFile:
    """
    Save the open project and duplicate it to a fresh snapshot file.

    Raises:
        QueueStateError: If the project has no backing file or the copy
            did not produce a file
    """
    if not project.file:
        raise QueueStateError("Cannot snapshot a project without a backing file")

    project.save()
    source_path = project.file
    path = snapshot_path_for(source_path, snapshot_dir=snapshot_dir, suffix=suffix)

    if snapshot_dir:
        Path(snapshot_dir).mkdir(parents=True, exist_ok=True)

    project.copy_to(path)
    if not Path(path).is_file():
        raise QueueStateError(f"Project snapshot was not written: {path}")

    logger.info(f"[Snapshot] Duplicated {source_path} -> {path}")
    return ProjectSnapshotFile(source_path=source_path, path=path)
