"""
Open-project persistence and snapshots for background rendering.
"""

from .host import (
    HostProject,
    ImportedItem,
)
from .snapshot import (
    DEFAULT_SNAPSHOT_SUFFIX,
    ProjectSnapshotFile,
    ensure_backing_file,
    snapshot_path_for,
    create_snapshot,
)
from .memory import (
    InMemoryProject,
    MemoryImportedItem,
)

__all__ = [
    # Host interface
    "HostProject",
    "ImportedItem",
    # Snapshots
    "DEFAULT_SNAPSHOT_SUFFIX",
    "ProjectSnapshotFile",
    "ensure_backing_file",
    "snapshot_path_for",
    "create_snapshot",
    # In-memory host
    "InMemoryProject",
    "MemoryImportedItem",
]
