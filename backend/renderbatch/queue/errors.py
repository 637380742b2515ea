"""
Render queue error types.

Raised when the host render queue is not in the state this layer expects.
A queue error never skips restoration of pre-existing entries.
"""


class QueueError(Exception):
    """Base exception for host render queue failures."""
    pass


class QueueStateError(QueueError):
    """
    Host queue (or project) state does not allow the operation.

    Examples:
    - An injected entry vanished before it could be removed
    - An enabled snapshot was restored twice
    - The open project has no backing file and cannot be saved
    """

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)
