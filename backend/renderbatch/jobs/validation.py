"""
Render job validation.

Every check here runs BEFORE the host render queue is mutated.
A job that fails validation never reaches the queue.
"""

from typing import Iterable, List, Optional

from .errors import InvalidJobError
from .models import PostRenderAction, RenderJob


def validate_output_path(job: RenderJob) -> None:
    """
    Check the job has a usable output path.

    Raises:
        InvalidJobError: If the output path is empty or blank
    """
    if not job.output_path or not job.output_path.strip():
        raise InvalidJobError("output path is empty", job_id=job.id)


def resolve_job(
    job: RenderJob,
    default_template: Optional[str],
    default_action: Optional[PostRenderAction],
) -> RenderJob:
    """
    Validate a job and resolve it against the scheduler defaults.

    An empty-string default template is a valid resolution meaning
    "keep the host's own default output module". A None default leaves
    the job unresolved, which is a configuration error.

    Returns:
        The resolved job

    Raises:
        InvalidJobError: If the job cannot be resolved
    """
    validate_output_path(job)

    resolved = job.resolve(default_template, default_action)

    if resolved.output_template is None:
        raise InvalidJobError(
            "no output template set on the job and no default template configured",
            job_id=job.id,
        )
    if resolved.post_render_action is None:
        raise InvalidJobError(
            "no post-render action set on the job and no default action configured",
            job_id=job.id,
        )

    return resolved


def resolve_jobs(
    jobs: Iterable[RenderJob],
    default_template: Optional[str],
    default_action: Optional[PostRenderAction],
    installed_templates: Optional[Iterable[str]] = None,
) -> List[RenderJob]:
    """
    Resolve a batch of jobs, preserving order.

    Fails on the first invalid job so nothing in the batch is submitted.

    Args:
        jobs: Jobs in enqueue order
        default_template: Scheduler default template
        default_action: Scheduler default post-render action
        installed_templates: When given, every non-empty resolved template
            must be one of these

    Returns:
        Resolved jobs in the same order
    """
    known = set(installed_templates) if installed_templates is not None else None
    resolved: List[RenderJob] = []

    for job in jobs:
        job = resolve_job(job, default_template, default_action)
        if known is not None and job.output_template and job.output_template not in known:
            raise InvalidJobError(
                f"output module template '{job.output_template}' is not installed",
                job_id=job.id,
            )
        resolved.append(job)

    return resolved
