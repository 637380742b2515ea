"""
Render batch scheduler.

Dispatches a batch of render jobs through the host render queue without
disturbing the work already queued there.

Dispatch lifecycle:
1. STASHING: disable eligible pre-existing entries
2. INJECTING: add this batch's jobs, in enqueue order
3. EXECUTING: render in host, or snapshot the project and run the worker
4. CLEANUP: remove every injected entry, restore the stashed entries

Design rules:
- Jobs are validated and resolved before the queue is touched
- Restoration runs on every exit path (QueueAdapter.exclusive_access)
- One dispatch at a time per scheduler
- No retries
"""

import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from ..jobs.models import PostRenderAction, RenderJob
from ..jobs.validation import resolve_jobs, validate_output_path
from ..project.host import HostProject
from ..project.snapshot import DEFAULT_SNAPSHOT_SUFFIX, create_snapshot, ensure_backing_file
from ..queue.adapter import QueueAdapter
from ..queue.errors import QueueStateError
from ..queue.host import HostRenderQueue
from ..queue.models import QueueEntryHandle
from ..worker.discovery import discover_aerender
from ..worker.process import ExternalRenderWorker
from .errors import DispatchInProgressError, SchedulerError
from .results import DispatchResult
from .state import DispatchMode, DispatchPhase, validate_phase_transition

logger = logging.getLogger(__name__)


class Scheduler:
    """
    Queues render jobs and dispatches them through the host render queue.

    Defaults are read at dispatch time: changing default_output_template
    after jobs were enqueued affects every job without its own template.
    """

    def __init__(
        self,
        queue: QueueAdapter,
        worker: Optional[ExternalRenderWorker] = None,
        project: Optional[HostProject] = None,
        default_output_template: Optional[str] = None,
        default_post_render_action: PostRenderAction = PostRenderAction.NONE,
        validate_templates: bool = False,
        snapshot_dir: Optional[str] = None,
        snapshot_suffix: str = DEFAULT_SNAPSHOT_SUFFIX,
        remove_snapshots: bool = False,
        fallback_project_path: Optional[str] = None,
    ):
        """
        Initialize scheduler.

        Args:
            queue: Adapter over the host render queue
            worker: External renderer, required for background rendering
            project: Open host project, required for background rendering
            default_output_template: Template for jobs without one
                ("" keeps the host default module, None means no default)
            default_post_render_action: Action for jobs without one
            validate_templates: Check templates are installed before dispatch
            snapshot_dir: Where snapshots go (defaults to beside the project)
            snapshot_suffix: Inserted into snapshot file names
            remove_snapshots: Delete the snapshot after the worker finishes
            fallback_project_path: Where to save a never-saved project
        """
        self._queue = queue
        self._worker = worker
        self._project = project

        self.default_output_template = default_output_template
        self.default_post_render_action = default_post_render_action
        self.validate_templates = validate_templates
        self.snapshot_dir = snapshot_dir
        self.snapshot_suffix = snapshot_suffix
        self.remove_snapshots = remove_snapshots
        self.fallback_project_path = fallback_project_path

        self._pending: List[RenderJob] = []
        self._phase = DispatchPhase.IDLE

    @classmethod
    def from_settings(
        cls,
        settings,
        host_queue: HostRenderQueue,
        project: Optional[HostProject] = None,
        worker: Optional[ExternalRenderWorker] = None,
    ) -> "Scheduler":
        """
        Build a scheduler from RenderBatchSettings.

        When a project is given and no worker, the worker executable is
        taken from settings.aerender_path or discovered.
        """
        if worker is None and project is not None:
            executable = settings.aerender_path or discover_aerender()
            worker = ExternalRenderWorker(
                executable,
                fixed_flags=settings.worker_flags,
                failure_policy=settings.failure_policy,
            )

        return cls(
            QueueAdapter(host_queue),
            worker=worker,
            project=project,
            default_output_template=settings.default_output_template,
            default_post_render_action=settings.default_post_render_action,
            validate_templates=settings.validate_templates,
            snapshot_dir=settings.snapshot_dir,
            snapshot_suffix=settings.snapshot_suffix,
            remove_snapshots=settings.remove_snapshots,
            fallback_project_path=settings.fallback_project_path,
        )

    # =========================================================================
    # Pending jobs
    # =========================================================================

    @property
    def phase(self) -> DispatchPhase:
        return self._phase

    @property
    def pending_jobs(self) -> List[RenderJob]:
        """Pending jobs in enqueue order (copy)."""
        return list(self._pending)

    def enqueue(self, job: RenderJob) -> int:
        """
        Add a job to the pending batch.

        Returns:
            Number of pending jobs

        Raises:
            InvalidJobError: If the job has no output path
        """
        validate_output_path(job)
        self._pending.append(job)
        logger.info(f"[Scheduler] Job {job.id} enqueued at position {len(self._pending)}")
        return len(self._pending)

    def add_job(
        self,
        composition,
        output_path: str,
        output_template: Optional[str] = None,
        post_render_action: Optional[PostRenderAction] = None,
    ) -> RenderJob:
        """Create a job and enqueue it. Unset options use the defaults at dispatch."""
        job = RenderJob(
            composition=composition,
            output_path=output_path,
            output_template=output_template,
            post_render_action=post_render_action,
        )
        self.enqueue(job)
        return job

    def clear(self) -> None:
        """Drop every pending job."""
        self._pending.clear()

    # =========================================================================
    # Dispatch entry points
    # =========================================================================

    def render(self) -> DispatchResult:
        """
        Render the pending batch inside the host, synchronously.

        An empty batch still disables and restores the existing entries.
        """
        return self._dispatch(self.pending_jobs, DispatchMode.IN_HOST, from_pending=True)

    def background_render(self) -> DispatchResult:
        """
        Render the pending batch through the external renderer.

        The project is saved, duplicated to a fresh snapshot, rendered from
        the snapshot, cleaned up and saved again.
        """
        return self._dispatch(self.pending_jobs, DispatchMode.BACKGROUND, from_pending=True)

    def render_job(self, job: RenderJob) -> DispatchResult:
        """Render one job inside the host. Pending jobs are not touched."""
        return self._dispatch([job], DispatchMode.IN_HOST, from_pending=False)

    def background_render_job(self, job: RenderJob) -> DispatchResult:
        """Render one job through the external renderer. Pending jobs are not touched."""
        return self._dispatch([job], DispatchMode.BACKGROUND, from_pending=False)

    # =========================================================================
    # Dispatch lifecycle
    # =========================================================================

    def _set_phase(self, phase: DispatchPhase) -> None:
        validate_phase_transition(self._phase, phase)
        logger.debug(f"[Scheduler] Phase {self._phase.value} -> {phase.value}")
        self._phase = phase

    def _dispatch(
        self,
        jobs: Sequence[RenderJob],
        mode: DispatchMode,
        from_pending: bool,
    ) -> DispatchResult:
        if self._phase != DispatchPhase.IDLE:
            raise DispatchInProgressError(self._phase.value)

        started_at = datetime.now()

        # Everything that can fail without touching the queue fails here
        installed = self._queue.host_queue.output_module_templates() if self.validate_templates else None
        resolved = resolve_jobs(
            jobs,
            self.default_output_template,
            self.default_post_render_action,
            installed_templates=installed,
        )

        execute: Callable[[DispatchResult], None]
        if mode == DispatchMode.BACKGROUND:
            if self._worker is None or self._project is None:
                raise SchedulerError("Background rendering needs both a worker and a project")
            ensure_backing_file(self._project, fallback_path=self.fallback_project_path)
            execute = self._execute_background
        else:
            execute = self._execute_in_host

        result = DispatchResult(mode=mode, jobs=resolved, started_at=started_at)
        logger.info(f"[Scheduler] Dispatching {len(resolved)} job(s) ({mode.value})")

        cleaned = False
        failure: Optional[Exception] = None
        self._set_phase(DispatchPhase.STASHING)
        try:
            with self._queue.exclusive_access() as token:
                logger.debug(f"[Scheduler] Stashed {token.disabled_count} existing entries")
                self._set_phase(DispatchPhase.INJECTING)
                handles: List[QueueEntryHandle] = []
                removal_failures: List[str] = []
                submitted = False
                try:
                    for job in resolved:
                        handles.append(self._queue.add_job(job))
                    submitted = True
                    self._set_phase(DispatchPhase.EXECUTING)
                    execute(result)
                finally:
                    self._set_phase(DispatchPhase.CLEANUP)
                    removal_failures = self._remove_handles(handles)
                    # Jobs leave the pending list once the whole batch was
                    # submitted and its entries are confirmed gone
                    if from_pending and submitted and not removal_failures:
                        self._drop_pending(jobs)
                    cleaned = not removal_failures

                if removal_failures:
                    raise QueueStateError(
                        f"{len(removal_failures)} injected entr(y/ies) could not be removed: "
                        + "; ".join(removal_failures)
                    )
        except Exception as e:
            failure = e
            raise
        finally:
            self._set_phase(DispatchPhase.IDLE)
            if mode == DispatchMode.BACKGROUND and cleaned:
                # The snapshot save wrote the injected entries; overwrite them
                self._save_project(failure)

        result.completed_at = datetime.now()
        logger.info(f"[Scheduler] {result.summary()}")
        return result

    def _execute_in_host(self, result: DispatchResult) -> None:
        self._queue.render()

    def _execute_background(self, result: DispatchResult) -> None:
        snapshot = create_snapshot(
            self._project,
            snapshot_dir=self.snapshot_dir,
            suffix=self.snapshot_suffix,
        )
        result.snapshot = snapshot

        self._worker.enqueue_project(snapshot.path)
        try:
            result.worker_results = self._worker.run_all()
        finally:
            if self.remove_snapshots:
                snapshot.remove()

    def _save_project(self, failure: Optional[Exception]) -> None:
        """Save the cleaned-up project. A save error never replaces a dispatch error."""
        if failure is None:
            self._project.save()
            return
        try:
            self._project.save()
        except Exception as e:
            logger.error(f"[Scheduler] Project save after failed dispatch also failed: {e}")

    def _remove_handles(self, handles: List[QueueEntryHandle]) -> List[str]:
        """
        Remove every injected entry, last first.

        Keeps going after a failure so every entry gets a removal attempt.

        Returns:
            Failure messages (empty when all entries were removed)
        """
        failures: List[str] = []
        for handle in reversed(handles):
            try:
                self._queue.remove_job(handle)
            except QueueStateError as e:
                logger.error(f"[Scheduler] {e}")
                failures.append(str(e))
        return failures

    def _drop_pending(self, dispatched: Sequence[RenderJob]) -> None:
        dispatched_ids = {id(job) for job in dispatched}
        self._pending = [job for job in self._pending if id(job) not in dispatched_ids]
