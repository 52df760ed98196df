"""
Error taxonomy for the match dashboard.

Fetch-pipeline errors are retried by the loader; RenderTargetMissing is
handled inside the animation controller and never reaches callers.
"""

from dataclasses import dataclass
from typing import Optional


class MatchboardError(Exception):
    """Base class for all dashboard errors."""
    pass


class FetchError(MatchboardError):
    """A single fetch attempt against the scoring backend failed."""
    pass


class NetworkUnreachable(FetchError):
    """No response at all (connection refused, DNS failure, timeout)."""
    pass


class HttpError(FetchError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status: int, url: str = ""):
        self.status = status
        self.url = url
        super().__init__(f"HTTP error! status: {status}")


class FormatError(FetchError):
    """The body could not be decoded or lacks the expected fields."""
    pass


class RenderTargetMissing(MatchboardError):
    """A paired visual element is not rendered yet."""

    def __init__(self, element_id: str):
        self.element_id = element_id
        super().__init__(f"Render target not found: {element_id}")


UNREACHABLE = "unreachable"
SERVER_ERROR = "error"


@dataclass
class LoadFailure:
    """What the presentation layer shows after retries are exhausted."""

    kind: str
    message: str
    attempts: int
    error: Optional[BaseException] = None
    retryable: bool = True

    @property
    def server_status(self) -> str:
        return "Unreachable" if self.kind == UNREACHABLE else "Error"


def classify_failure(exc: BaseException, attempts: int) -> LoadFailure:
    """
    Turn the last fetch error into a human-readable failure report.

    Args:
        exc: The last exception raised by the fetch pipeline
        attempts: Total attempts made, first one included

    Returns:
        LoadFailure distinguishing "server unreachable" from "server error"
    """
    if isinstance(exc, NetworkUnreachable):
        return LoadFailure(
            kind=UNREACHABLE,
            message="Unable to connect to the server. Please check if the backend is running.",
            attempts=attempts,
            error=exc,
        )
    return LoadFailure(
        kind=SERVER_ERROR,
        message=f"Error: {exc}",
        attempts=attempts,
        error=exc,
    )
