"""
Pytest configuration and shared fixtures for the renderbatch test suite.
"""

import sys

import pytest

from renderbatch.jobs.models import PostRenderAction
from renderbatch.project.memory import InMemoryProject
from renderbatch.queue.adapter import QueueAdapter
from renderbatch.queue.memory import InMemoryRenderQueue, MemoryComposition
from renderbatch.scheduler.scheduler import Scheduler
from renderbatch.worker.process import ExternalRenderWorker


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "subprocess: spawns real child processes (python interpreter)"
    )


@pytest.fixture
def python_worker():
    """
    Factory for workers that run the current interpreter instead of the
    real renderer. Invocation args land in sys.argv[1:] of the given code.
    """
    def factory(code: str = "import sys; sys.exit(0)", **kwargs) -> ExternalRenderWorker:
        return ExternalRenderWorker(sys.executable, fixed_flags=["-c", code], **kwargs)
    return factory


@pytest.fixture
def host_queue():
    return InMemoryRenderQueue()


@pytest.fixture
def adapter(host_queue):
    return QueueAdapter(host_queue)


@pytest.fixture
def comp_a():
    return MemoryComposition("Comp A")


@pytest.fixture
def comp_b():
    return MemoryComposition("Comp B")


@pytest.fixture
def scheduler(adapter):
    return Scheduler(
        adapter,
        default_output_template="Lossless",
        default_post_render_action=PostRenderAction.NONE,
    )


@pytest.fixture
def project(host_queue, tmp_path):
    project = InMemoryProject(host_queue, file=str(tmp_path / "shot_010.aep"))
    project.save()
    return project
