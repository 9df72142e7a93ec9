"""Failure taxonomy for forge REST calls."""
from __future__ import annotations

from typing import Optional


class ForgeError(Exception):
    """Base exception for a failed forge operation.

    Attributes:
        operation: Short name of the operation that failed (e.g. "create ref")
        target: The ref, branch, label or path the operation acted on
        message: Error message reported by the forge or the transport
        status_code: HTTP status code, if a response was received
    """

    def __init__(
        self,
        operation: str,
        target: str,
        message: str = "",
        status_code: Optional[int] = None,
    ):
        self.operation = operation
        self.target = target
        self.message = message
        self.status_code = status_code
        super().__init__(self._describe())

    def _describe(self) -> str:
        status = f" ({self.status_code})" if self.status_code is not None else ""
        detail = f": {self.message}" if self.message else ""
        return f"Failed to {self.operation} {self.target}{status}{detail}"


class NotFoundError(ForgeError):
    """The requested object does not exist on the forge."""

    pass


class UnauthorizedError(ForgeError):
    """The credentials may not perform the operation on the target."""

    def _describe(self) -> str:
        return f"You are not authorized to {self.operation} {self.target}"


class ConflictError(ForgeError):
    """The forge rejected the update against its current state.

    Raised for non-fast-forward ref updates and for refs that already exist.
    """

    pass


class TransientError(ForgeError):
    """Network failure, server error, or a response that could not be decoded."""

    pass


def error_for_status(
    status_code: int,
    operation: str,
    target: str,
    message: str = "",
) -> ForgeError:
    """Map a non-success HTTP status to the matching ForgeError subclass.

    Args:
        status_code: HTTP status code of the failed response
        operation: Name of the operation that failed
        target: The object the operation acted on
        message: Error message from the response body

    Returns:
        An exception instance ready to be raised
    """
    if status_code == 404:
        cls = NotFoundError
    elif status_code in (401, 403):
        cls = UnauthorizedError
    elif status_code in (409, 422):
        cls = ConflictError
    else:
        cls = TransientError
    return cls(operation, target, message, status_code=status_code)
