"""
Batch dispatch: stash the host queue, inject, render, clean up, restore.
"""

from .errors import (
    SchedulerError,
    DispatchInProgressError,
    InvalidPhaseTransitionError,
)
from .state import (
    DispatchPhase,
    DispatchMode,
    can_transition_phase,
    validate_phase_transition,
)
from .results import DispatchResult
from .scheduler import Scheduler

__all__ = [
    # Errors
    "SchedulerError",
    "DispatchInProgressError",
    "InvalidPhaseTransitionError",
    # State
    "DispatchPhase",
    "DispatchMode",
    "can_transition_phase",
    "validate_phase_transition",
    # Results
    "DispatchResult",
    # Scheduler
    "Scheduler",
]
