"""
Render jobs: what to render, where, and how.

This module models render work only.
It does NOT touch the host render queue or start renders.
"""

from .errors import (
    JobError,
    InvalidJobError,
)
from .models import (
    PostRenderAction,
    RenderJob,
)
from .validation import (
    validate_output_path,
    resolve_job,
    resolve_jobs,
)

__all__ = [
    # Errors
    "JobError",
    "InvalidJobError",
    # Models
    "PostRenderAction",
    "RenderJob",
    # Validation
    "validate_output_path",
    "resolve_job",
    "resolve_jobs",
]
