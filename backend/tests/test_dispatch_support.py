"""
Tests for dispatch phases, settings, project snapshots and result summaries.
"""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from renderbatch.config import (
    ENV_DEFAULT_POST_RENDER_ACTION,
    ENV_DEFAULT_TEMPLATE,
    ENV_FALLBACK_PROJECT_PATH,
    ENV_FAILURE_POLICY,
    ENV_REMOVE_SNAPSHOTS,
    ENV_SNAPSHOT_DIR,
    ENV_SNAPSHOT_SUFFIX,
    ENV_VALIDATE_TEMPLATES,
    RenderBatchSettings,
)
from renderbatch.jobs import PostRenderAction, RenderJob
from renderbatch.project import (
    InMemoryProject,
    create_snapshot,
    ensure_backing_file,
    snapshot_path_for,
)
from renderbatch.queue import InMemoryRenderQueue, MemoryComposition, QueueStateError
from renderbatch.scheduler import (
    DispatchMode,
    DispatchPhase,
    DispatchResult,
    InvalidPhaseTransitionError,
    Scheduler,
    can_transition_phase,
    validate_phase_transition,
)
from renderbatch.worker import ENV_AERENDER_PATH, FailurePolicy, WorkerResult, WorkerStatus


# =============================================================================
# Dispatch phases
# =============================================================================

class TestDispatchPhases:

    @pytest.mark.parametrize("from_phase,to_phase", [
        (DispatchPhase.IDLE, DispatchPhase.STASHING),
        (DispatchPhase.STASHING, DispatchPhase.INJECTING),
        (DispatchPhase.INJECTING, DispatchPhase.EXECUTING),
        (DispatchPhase.EXECUTING, DispatchPhase.CLEANUP),
        (DispatchPhase.CLEANUP, DispatchPhase.IDLE),
        (DispatchPhase.STASHING, DispatchPhase.IDLE),
        (DispatchPhase.INJECTING, DispatchPhase.CLEANUP),
    ])
    def test_allowed(self, from_phase, to_phase):
        assert can_transition_phase(from_phase, to_phase)
        validate_phase_transition(from_phase, to_phase)

    @pytest.mark.parametrize("from_phase,to_phase", [
        (DispatchPhase.IDLE, DispatchPhase.EXECUTING),
        (DispatchPhase.IDLE, DispatchPhase.IDLE),
        (DispatchPhase.EXECUTING, DispatchPhase.IDLE),
        (DispatchPhase.CLEANUP, DispatchPhase.INJECTING),
    ])
    def test_rejected(self, from_phase, to_phase):
        assert not can_transition_phase(from_phase, to_phase)
        with pytest.raises(InvalidPhaseTransitionError) as exc_info:
            validate_phase_transition(from_phase, to_phase)
        assert exc_info.value.target_phase == to_phase.value


# =============================================================================
# Settings
# =============================================================================

class TestSettings:

    def test_defaults(self):
        settings = RenderBatchSettings.from_env({})

        assert settings.aerender_path is None
        assert settings.failure_policy == FailurePolicy.ABORT
        assert settings.default_output_template is None
        assert settings.default_post_render_action == PostRenderAction.NONE
        assert settings.worker_flags == ["-continueOnMissingFootage"]
        assert settings.snapshot_suffix == "render"
        assert settings.validate_templates is False
        assert settings.remove_snapshots is False

    def test_from_env(self, tmp_path):
        settings = RenderBatchSettings.from_env({
            ENV_AERENDER_PATH: "/opt/aerender",
            ENV_DEFAULT_TEMPLATE: "High Quality",
            ENV_DEFAULT_POST_RENDER_ACTION: "IMPORT",
            ENV_FAILURE_POLICY: "continue",
            ENV_SNAPSHOT_DIR: str(tmp_path),
            ENV_SNAPSHOT_SUFFIX: "farm",
            ENV_REMOVE_SNAPSHOTS: "yes",
            ENV_VALIDATE_TEMPLATES: "1",
            ENV_FALLBACK_PROJECT_PATH: "/tmp/untitled.aep",
        })

        assert settings.aerender_path == "/opt/aerender"
        assert settings.default_output_template == "High Quality"
        assert settings.default_post_render_action == PostRenderAction.IMPORT
        assert settings.failure_policy == FailurePolicy.CONTINUE
        assert settings.snapshot_dir == str(tmp_path)
        assert settings.snapshot_suffix == "farm"
        assert settings.remove_snapshots is True
        assert settings.validate_templates is True
        assert settings.fallback_project_path == "/tmp/untitled.aep"

    def test_empty_template_means_host_default(self):
        settings = RenderBatchSettings.from_env({ENV_DEFAULT_TEMPLATE: ""})
        assert settings.default_output_template == ""

    def test_unknown_policy_rejected(self):
        with pytest.raises(ValueError):
            RenderBatchSettings.from_env({ENV_FAILURE_POLICY: "retry"})

    def test_scheduler_from_settings(self, host_queue, comp_a):
        settings = RenderBatchSettings(default_output_template="High Quality")
        scheduler = Scheduler.from_settings(settings, host_queue)
        scheduler.add_job(comp_a, "/tmp/a.mov")

        result = scheduler.render()

        assert result.jobs[0].output_template == "High Quality"
        assert host_queue.added == [comp_a]

    def test_scheduler_from_settings_builds_worker(self, host_queue, project):
        settings = RenderBatchSettings(
            aerender_path="/opt/aerender",
            failure_policy=FailurePolicy.CONTINUE,
            default_output_template="Lossless",
        )

        scheduler = Scheduler.from_settings(settings, host_queue, project=project)

        assert scheduler._worker.executable == "/opt/aerender"
        assert scheduler._worker.failure_policy == FailurePolicy.CONTINUE

    def test_scheduler_from_settings_saves_unsaved_project_to_fallback(
        self, host_queue, python_worker, tmp_path, comp_a
    ):
        """
        GIVEN: Settings with a fallback project path and a never-saved project
        WHEN: background_render() on a scheduler built from those settings
        THEN: The project is saved to the fallback path, no save dialog needed
        """
        fallback = tmp_path / "untitled.aep"
        settings = RenderBatchSettings(
            default_output_template="Lossless",
            fallback_project_path=str(fallback),
        )
        project = InMemoryProject(host_queue)
        scheduler = Scheduler.from_settings(
            settings, host_queue, project=project, worker=python_worker()
        )
        scheduler.add_job(comp_a, "/tmp/a.mov")

        result = scheduler.background_render()

        assert project.file == str(fallback)
        assert result.snapshot.source_path == str(fallback)


# =============================================================================
# Project snapshots
# =============================================================================

class TestSnapshots:

    def test_snapshot_name(self, tmp_path):
        path = Path(snapshot_path_for(str(tmp_path / "shot_010.aep"), suffix="farm"))

        assert path.parent == tmp_path
        assert path.suffix == ".aep"
        assert path.name.startswith("shot_010_farm_")

    def test_snapshot_names_are_unique(self, tmp_path):
        source = str(tmp_path / "shot_010.aep")
        names = {snapshot_path_for(source) for _ in range(20)}
        assert len(names) == 20

    def test_snapshot_dir(self, tmp_path):
        path = Path(snapshot_path_for(str(tmp_path / "shot.aep"), snapshot_dir=str(tmp_path / "snaps")))
        assert path.parent == tmp_path / "snaps"

    def test_create_snapshot_copies_saved_state(self, host_queue, project):
        host_queue.seed(MemoryComposition("existing"), render=False)

        snapshot = create_snapshot(project)

        assert snapshot.source_path == project.file
        assert Path(snapshot.path).read_text() == Path(project.file).read_text()
        assert snapshot.remove() is True
        assert snapshot.remove() is False

    def test_ensure_backing_file_uses_save_dialog(self, tmp_path):
        project = InMemoryProject(InMemoryRenderQueue(), save_dialog_path=str(tmp_path / "chosen.aep"))

        assert ensure_backing_file(project) == str(tmp_path / "chosen.aep")
        assert project.save_count == 1

    def test_ensure_backing_file_cancelled(self):
        project = InMemoryProject(InMemoryRenderQueue())

        with pytest.raises(QueueStateError, match="no backing file"):
            ensure_backing_file(project)

    def test_create_snapshot_without_file(self):
        with pytest.raises(QueueStateError):
            create_snapshot(InMemoryProject(InMemoryRenderQueue()))


# =============================================================================
# Result summaries
# =============================================================================

class TestResults:

    def test_worker_result_summary(self):
        started = datetime(2024, 1, 1, 12, 0, 0)
        failed = WorkerResult(
            status=WorkerStatus.FAILED,
            args=["-project", "a.aep"],
            exit_code=1,
            started_at=started,
            completed_at=started + timedelta(seconds=2),
            failure_reason="Render executable exited with code 1",
        )
        skipped = WorkerResult(status=WorkerStatus.SKIPPED, args=["-project", "b.aep"])

        assert failed.is_failure
        assert failed.duration_seconds() == 2.0
        assert failed.summary() == "FAILED (2.0s): -project a.aep - Render executable exited with code 1"
        assert not skipped.is_failure
        assert skipped.summary() == "SKIPPED: -project b.aep"

    def test_dispatch_result_summary(self):
        started = datetime(2024, 1, 1, 12, 0, 0)
        result = DispatchResult(
            mode=DispatchMode.IN_HOST,
            jobs=[RenderJob(composition=MemoryComposition("A"), output_path="/tmp/a.mov")],
            started_at=started,
        )
        assert result.duration_seconds() is None

        result.completed_at = started + timedelta(seconds=3)
        assert result.summary() == "in_host: 1 job(s) rendered in 3.0s"
