"""
Scheduler error types.
"""


class SchedulerError(Exception):
    """Base exception for scheduler failures."""
    pass


class DispatchInProgressError(SchedulerError):
    """Raised when a dispatch starts while another one is still in flight."""

    def __init__(self, current_phase: str):
        self.current_phase = current_phase
        super().__init__(
            f"A dispatch is already in progress (phase: {current_phase}); "
            f"the host render queue supports one dispatch at a time"
        )


class InvalidPhaseTransitionError(SchedulerError):
    """Raised when attempting an illegal dispatch phase transition."""

    def __init__(self, current_phase: str, target_phase: str):
        self.current_phase = current_phase
        self.target_phase = target_phase
        super().__init__(
            f"Invalid dispatch phase transition: {current_phase} -> {target_phase}"
        )
