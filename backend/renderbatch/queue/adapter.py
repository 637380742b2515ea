"""
Queue adapter: all mutation of the host render queue.

Design rules:
- Pre-existing entries are disabled before injection and restored after
- Entries that are RENDERING, DONE or WILL_CONTINUE are never toggled
- Restoration matches recorded entry identities, never queue positions
- exclusive_access() guarantees restoration on every exit path
"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, TYPE_CHECKING

from .errors import QueueStateError
from .host import HostQueueEntry, HostRenderQueue, PROTECTED_STATUSES
from .models import EnabledSnapshot, QueueEntryHandle, RestoreToken

if TYPE_CHECKING:
    from ..jobs.models import RenderJob
    from ..project.host import HostProject

logger = logging.getLogger(__name__)


class QueueAdapter:
    """
    Bridge to the host's single global render queue.

    The host queue is injected; nothing here reaches for global state.
    """

    def __init__(self, host_queue: HostRenderQueue):
        self._host = host_queue

    @property
    def host_queue(self) -> HostRenderQueue:
        return self._host

    def entries(self) -> List[HostQueueEntry]:
        """Current host entries, in queue order."""
        return list(self._host.items())

    def contains(self, entry: HostQueueEntry) -> bool:
        """Check whether this exact entry is still in the host queue."""
        return any(item is entry for item in self._host.items())

    # =========================================================================
    # Injection
    # =========================================================================

    def add_job(self, job: "RenderJob") -> QueueEntryHandle:
        """
        Add a resolved job to the host queue.

        Applies the job's template to output module 1 (an empty template
        keeps the host's default module), sets the output file and the
        post-render action.

        Args:
            job: A resolved RenderJob

        Returns:
            Handle for removing the entry later

        Raises:
            QueueStateError: If the job was not resolved
        """
        if not job.is_resolved:
            raise QueueStateError(
                f"Job {job.id} must be resolved before it is added to the render queue"
            )

        entry = self._host.add(job.composition)
        try:
            output_module = entry.output_module(1)
            if job.output_template:
                output_module.apply_template(job.output_template)
            output_module.file = job.output_path
            output_module.post_render_action = job.post_render_action
        except Exception:
            # A half-configured entry has no handle; it must not stay behind
            logger.error(f"[QueueAdapter] Failed to configure job {job.id}, removing its entry")
            entry.remove()
            raise

        logger.info(f"[QueueAdapter] Added job {job.describe()}")
        return QueueEntryHandle(entry=entry, job=job)

    def remove_job(self, handle: QueueEntryHandle) -> None:
        """
        Remove an injected entry.

        Raises:
            QueueStateError: If the entry is no longer in the queue, or the
                host refused to remove it
        """
        if not self.contains(handle.entry):
            raise QueueStateError(
                f"Render queue entry for job {handle.job.id} no longer exists "
                f"(already removed or consumed by the host)"
            )
        try:
            handle.entry.remove()
        except Exception as e:
            raise QueueStateError(
                f"Host failed to remove render queue entry for job {handle.job.id}: {e}"
            ) from e
        logger.debug(f"[QueueAdapter] Removed entry for job {handle.job.id}")

    def render(self) -> None:
        """Run the host's render-now operation; blocks until it returns."""
        logger.info(f"[QueueAdapter] Rendering {sum(1 for e in self._host.items() if e.render)} enabled entries")
        self._host.render()

    # =========================================================================
    # Stash / restore of pre-existing entries
    # =========================================================================

    def disable_existing(self) -> EnabledSnapshot:
        """
        Disable every eligible pre-existing entry.

        An entry is eligible iff its render flag is on and its status is
        not RENDERING, DONE or WILL_CONTINUE. Only eligible entries are
        captured; everything else is left untouched.

        If the host fails part way, entries already disabled are restored
        before the error propagates.

        Returns:
            Snapshot to hand to enable_existing()
        """
        snapshot = EnabledSnapshot()
        try:
            for position, entry in enumerate(self._host.items(), start=1):
                if not entry.render:
                    continue
                if entry.status in PROTECTED_STATUSES:
                    logger.debug(
                        f"[QueueAdapter] Leaving entry {position} untouched "
                        f"(status: {entry.status.value})"
                    )
                    continue
                snapshot.record(entry, was_enabled=True, position=position)
                entry.render = False
        except Exception:
            logger.error(
                f"[QueueAdapter] Failed while disabling existing entries, "
                f"restoring {len(snapshot)} already disabled"
            )
            self.enable_existing(snapshot)
            raise

        logger.info(f"[QueueAdapter] Disabled {len(snapshot)} existing entries")
        return snapshot

    def enable_existing(self, snapshot: EnabledSnapshot) -> int:
        """
        Restore the enabled flags captured by disable_existing().

        Entries that vanished since the snapshot are skipped.

        Returns:
            Number of entries re-enabled

        Raises:
            QueueStateError: If the snapshot was already restored
        """
        snapshot.mark_restored()

        present = self._host.items()
        restored = 0
        for captured in snapshot.entries:
            if not captured.was_enabled:
                continue
            if not any(item is captured.entry for item in present):
                logger.warning(
                    f"[QueueAdapter] Entry captured at position {captured.position} "
                    f"no longer exists, cannot re-enable"
                )
                continue
            captured.entry.render = True
            restored += 1

        logger.info(f"[QueueAdapter] Re-enabled {restored} existing entries")
        return restored

    @contextmanager
    def exclusive_access(self) -> Iterator[RestoreToken]:
        """
        Scoped exclusive access to the host queue.

        Disables pre-existing entries on entry and restores them on exit,
        whether the block succeeds or raises.

        Usage:
            with adapter.exclusive_access() as token:
                ... inject, render, remove ...
        """
        snapshot = self.disable_existing()
        token = RestoreToken(snapshot=snapshot)
        try:
            yield token
        finally:
            self.enable_existing(snapshot)

    # =========================================================================
    # Templates
    # =========================================================================

    def has_output_module_template(self, name: str) -> bool:
        """Check if an output module template is installed."""
        return name in self._host.output_module_templates()

    def has_render_settings_template(self, name: str) -> bool:
        """Check if a render settings template is installed."""
        return name in self._host.render_settings_templates()

    def load_output_modules(self, project: "HostProject", project_path: str) -> List[str]:
        """
        Install the output modules carried by a project file as templates.

        The project's last render queue entry holds the modules to load.
        Modules whose name is already an installed template are skipped.
        The imported project is removed afterwards.

        Args:
            project: The open host project (used to import the file)
            project_path: Project file containing the modules

        Returns:
            Names of the templates that were installed
        """
        if not Path(project_path).is_file():
            logger.warning(f"[QueueAdapter] Output module project not found: {project_path}")
            return []

        imported = project.import_project(project_path)
        installed: List[str] = []
        try:
            items = self._host.items()
            if not items:
                logger.warning(f"[QueueAdapter] {project_path} has no render queue entry to load from")
                return installed

            known = set(self._host.output_module_templates())
            for module in items[-1].output_modules():
                if module.name in known:
                    continue
                module.save_as_template(module.name)
                known.add(module.name)
                installed.append(module.name)
        finally:
            imported.remove()

        logger.info(f"[QueueAdapter] Installed {len(installed)} output module templates from {project_path}")
        return installed
