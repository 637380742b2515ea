"""
Dispatch phase transitions.

Dispatch lifecycle: IDLE → STASHING → INJECTING → EXECUTING → CLEANUP → IDLE

A failure may jump straight to CLEANUP from INJECTING or EXECUTING, and a
failed stash returns to IDLE. CLEANUP always ends in IDLE.
"""

from enum import Enum
from typing import Set, Tuple

from .errors import InvalidPhaseTransitionError


class DispatchPhase(str, Enum):
    IDLE = "idle"
    STASHING = "stashing"  # Disabling pre-existing queue entries
    INJECTING = "injecting"  # Adding this batch's entries
    EXECUTING = "executing"  # Rendering in host or through the worker
    CLEANUP = "cleanup"  # Removing injected entries, restoring the stash


class DispatchMode(str, Enum):
    IN_HOST = "in_host"
    BACKGROUND = "background"


_PHASE_TRANSITIONS: Set[Tuple[DispatchPhase, DispatchPhase]] = {
    (DispatchPhase.IDLE, DispatchPhase.STASHING),
    (DispatchPhase.STASHING, DispatchPhase.INJECTING),
    (DispatchPhase.INJECTING, DispatchPhase.EXECUTING),
    (DispatchPhase.EXECUTING, DispatchPhase.CLEANUP),
    (DispatchPhase.CLEANUP, DispatchPhase.IDLE),

    # Failure paths
    (DispatchPhase.STASHING, DispatchPhase.IDLE),
    (DispatchPhase.INJECTING, DispatchPhase.CLEANUP),
}


def can_transition_phase(from_phase: DispatchPhase, to_phase: DispatchPhase) -> bool:
    """Check if a dispatch phase transition is legal."""
    return (from_phase, to_phase) in _PHASE_TRANSITIONS


def validate_phase_transition(from_phase: DispatchPhase, to_phase: DispatchPhase) -> None:
    """
    Validate a dispatch phase transition.

    Raises:
        InvalidPhaseTransitionError: If the transition is not allowed
    """
    if not can_transition_phase(from_phase, to_phase):
        raise InvalidPhaseTransitionError(from_phase.value, to_phase.value)
