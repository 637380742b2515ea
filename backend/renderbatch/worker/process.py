"""
External render worker.

Wraps the command-line renderer, run out of process.

Design rules:
- One subprocess per invocation, spawned and waited on (blocking)
- Invocations run strictly in enqueue order, never in parallel
- Non-zero exit code = FAILED
- Capture stdout + stderr for audit
- Pending list is cleared once run_all() returns or raises
"""

import logging
import subprocess
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence

from .errors import WorkerExecutionError
from .results import WorkerResult, WorkerStatus

logger = logging.getLogger(__name__)


DEFAULT_FIXED_FLAGS = ["-continueOnMissingFootage"]


class FailurePolicy(str, Enum):
    """
    What run_all() does after an invocation fails.

    ABORT: Skip every remaining invocation
    CONTINUE: Run the remaining invocations anyway
    """

    ABORT = "abort"
    CONTINUE = "continue"


class ExternalRenderWorker:
    """
    Sequential runner for the command-line render executable.

    Each invocation is spawned as
    `<executable> [fixed flags] [invocation args]`.
    """

    def __init__(
        self,
        executable: str,
        fixed_flags: Optional[Sequence[str]] = None,
        failure_policy: FailurePolicy = FailurePolicy.ABORT,
    ):
        """
        Initialize worker.

        Args:
            executable: Path to the render executable
            fixed_flags: Flags passed to every invocation
                (defaults to -continueOnMissingFootage)
            failure_policy: Behaviour after a failed invocation
        """
        self.executable = executable
        self.fixed_flags: List[str] = list(DEFAULT_FIXED_FLAGS if fixed_flags is None else fixed_flags)
        self.failure_policy = failure_policy
        self._pending: List[List[str]] = []

    @property
    def pending(self) -> List[List[str]]:
        """Pending invocations, in order (copy)."""
        return [list(args) for args in self._pending]

    def enqueue(self, args: Sequence[str]) -> int:
        """
        Append one invocation. Does not start anything.

        Returns:
            Number of pending invocations
        """
        self._pending.append([str(arg) for arg in args])
        return len(self._pending)

    def enqueue_project(self, project_path: str) -> int:
        """Append an invocation rendering a whole project file."""
        return self.enqueue(["-project", project_path])

    def clear(self) -> None:
        self._pending.clear()

    def build_command(self, args: Sequence[str]) -> List[str]:
        return [self.executable, *self.fixed_flags, *args]

    def spawn(self, args: Sequence[str]) -> WorkerResult:
        """
        Spawn one invocation and wait for it to exit.

        Never raises for process failures; they are reported in the result.
        """
        args = list(args)
        cmd = self.build_command(args)
        started_at = datetime.now()

        logger.info(f"[Worker] Executing: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError as e:
            logger.error(f"[Worker] Could not start {self.executable}: {e}")
            return WorkerResult(
                status=WorkerStatus.FAILED,
                args=args,
                command=cmd,
                started_at=started_at,
                completed_at=datetime.now(),
                failure_reason=f"Could not start render executable: {e}",
            )

        logger.info(f"[Worker] Started PID {process.pid}")
        stdout, stderr = process.communicate()
        exit_code = process.returncode
        completed_at = datetime.now()

        logger.info(f"[Worker] PID {process.pid} exited with code {exit_code}")

        if exit_code != 0:
            return WorkerResult(
                status=WorkerStatus.FAILED,
                args=args,
                command=cmd,
                exit_code=exit_code,
                started_at=started_at,
                completed_at=completed_at,
                stdout=stdout or "",
                stderr=stderr or "",
                failure_reason=f"Render executable exited with code {exit_code}",
            )

        return WorkerResult(
            status=WorkerStatus.SUCCESS,
            args=args,
            command=cmd,
            exit_code=exit_code,
            started_at=started_at,
            completed_at=completed_at,
            stdout=stdout or "",
            stderr=stderr or "",
        )

    def run_all(self) -> List[WorkerResult]:
        """
        Run every pending invocation sequentially, blocking.

        Returns:
            One result per invocation, in order

        Raises:
            WorkerExecutionError: If any invocation failed. Carries the
                results of every invocation, including skipped ones.
        """
        pending = self._pending
        self._pending = []

        results: List[WorkerResult] = []
        aborted = False

        logger.info(f"[Worker] Running {len(pending)} invocation(s)")

        for args in pending:
            if aborted:
                results.append(WorkerResult(
                    status=WorkerStatus.SKIPPED,
                    args=args,
                    command=self.build_command(args),
                    failure_reason="Skipped after an earlier invocation failed",
                ))
                continue

            result = self.spawn(args)
            results.append(result)

            if result.is_failure:
                logger.error(f"[Worker] {result.summary()}")
                if self.failure_policy == FailurePolicy.ABORT:
                    aborted = True

        if any(r.is_failure for r in results):
            raise WorkerExecutionError(results)

        logger.info(f"[Worker] All {len(results)} invocation(s) completed")
        return results
