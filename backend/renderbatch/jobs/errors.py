"""
Job-specific error types.

All errors inherit from JobError for easy catching.
Errors are explicit and provide actionable messages.
"""

from typing import Optional


class JobError(Exception):
    """Base exception for all render job failures."""
    pass


class InvalidJobError(JobError):
    """
    Raised when a render job is misconfigured.

    Always raised before the host render queue is touched:
    - Output path is empty
    - Output template is unresolved and the scheduler has no default
    - Output template is not installed on the host
    """

    def __init__(self, reason: str, job_id: Optional[str] = None):
        self.job_id = job_id
        self.reason = reason
        if job_id:
            super().__init__(f"Invalid render job {job_id}: {reason}")
        else:
            super().__init__(f"Invalid render job: {reason}")
