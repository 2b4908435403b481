"""Exceptions raised by the action engine.

Action-level errors (``InvalidActionError``, ``NotFoundException``, ``RemoteApiError``) never
escape a single action: the batch executor turns them into a failed result. Batch-level errors
(``InvalidBatchError`` and its subclass ``EmptyBatchError``) reject the whole call before any
action runs.
"""

from typing import Optional


class TaskpilotException(Exception):
    """Base exception for taskpilot."""

    pass


class InvalidActionError(TaskpilotException):
    """Raised when an action descriptor cannot be dispatched.

    Either the declared type is unknown or a required field is missing. Raised before any
    remote call is made for the action.
    """

    def __init__(self, message: str, kind: Optional[str] = None):
        """Initialize invalid action error.

        Args:
            message: Human-readable reason
            kind: Declared action type, when one could be read
        """
        self.kind = kind
        super().__init__(message)


class NotFoundException(TaskpilotException):
    """Raised when a referenced remote entity (assignee, workspace, ...) cannot be resolved."""

    pass


class RemoteApiError(TaskpilotException):
    """Raised when the remote API returns a non-2xx status or the call cannot complete.

    ``status_code`` is None when no response was received (connection error, timeout).
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        method: Optional[str] = None,
        path: Optional[str] = None,
    ):
        """Initialize remote API error.

        Args:
            message: Error message reported by the remote service or transport
            status_code: HTTP status code, if a response was received
            method: HTTP method of the failed call
            path: API path of the failed call
        """
        self.status_code = status_code
        self.method = method
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        """Render the call, status and remote message."""
        base = super().__str__()
        if self.method and self.path:
            status = self.status_code if self.status_code is not None else "no response"
            return f"{self.method} {self.path} failed ({status}): {base}"
        return base


class InvalidBatchError(TaskpilotException):
    """Raised when a batch is malformed and cannot be executed at all."""

    pass


class EmptyBatchError(InvalidBatchError):
    """Raised when a batch contains no actions."""

    def __init__(self, message: str = "Batch contains no actions"):
        """Initialize empty batch error."""
        super().__init__(message)
