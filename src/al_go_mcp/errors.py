"""Error taxonomy shared by the repository client, index and tool handlers.

Domain errors carry a machine-readable ``code`` and a ``recoverable`` flag so
callers can decide whether retrying later makes sense. Tool handlers never let
these escape the request boundary: the server converts them into ``isError``
text results.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorCode(StrEnum):
    UPSTREAM_ERROR = "UPSTREAM_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INDEX_INIT_FAILED = "INDEX_INIT_FAILED"
    INVALID_INPUT = "INVALID_INPUT"


class AlGoError(Exception):
    """Base class for all errors raised by this package."""

    code: ErrorCode = ErrorCode.UPSTREAM_ERROR
    recoverable: bool = False

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UpstreamError(AlGoError):
    """A GitHub API call failed (network, auth, rate limit, server error)."""

    code = ErrorCode.UPSTREAM_ERROR
    recoverable = True


class NotFoundError(AlGoError):
    """The requested path does not resolve to a file."""

    code = ErrorCode.NOT_FOUND
    recoverable = False


class IndexInitError(AlGoError):
    """Fetching the documentation set for the index failed."""

    code = ErrorCode.INDEX_INIT_FAILED
    recoverable = True


class ToolError(Exception):
    """Text surfaced to the MCP caller as an error tool result."""
