"""
External render worker errors.

Raised when the command-line renderer cannot be found or an invocation
fails. Each failed invocation is reported individually in the results
carried by WorkerExecutionError.
"""

from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .results import WorkerResult


class WorkerError(Exception):
    """Base exception for external render worker failures."""
    pass


class WorkerNotFoundError(WorkerError):
    """Raised when the render executable cannot be located."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class WorkerExecutionError(WorkerError):
    """
    One or more worker invocations failed.

    Raised when:
    - The process exited with a non-zero code
    - The executable could not be started

    Attributes:
        results: Results for every pending invocation, in order,
            including skipped ones
        failures: The failed results only
    """

    def __init__(self, results: List["WorkerResult"]):
        self.results = list(results)
        self.failures = [r for r in self.results if r.is_failure]

        message = f"{len(self.failures)} of {len(self.results)} worker invocation(s) failed"
        if self.failures:
            message += f": {self.failures[0].summary()}"
        super().__init__(message)
