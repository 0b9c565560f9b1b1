"""Normalized failure signals for the browser lifecycle.

Launch and connection failures propagate to the caller. Cleanup failures are
logged and swallowed, visibility problems are informational only.
"""
from enum import Enum


class BrowserFailure(Enum):
    """Failure categories raised by the lifecycle components."""
    LAUNCH = "launch"             # binary missing, exited before binding
    CONNECTION = "connection"     # probe failed after the single retry
    CLEANUP = "cleanup"           # best-effort, never surfaced
    VISIBILITY = "visibility"     # informational, never an error


class BrowserError(Exception):
    """Exception carrying a normalized BrowserFailure."""

    def __init__(self, failure: BrowserFailure, message: str = ""):
        self.failure = failure
        super().__init__(message or failure.value)


class LaunchFailure(BrowserError):
    def __init__(self, message: str = "", *, exit_code: int | None = None):
        self.exit_code = exit_code
        super().__init__(BrowserFailure.LAUNCH, message)


class ConnectionUnavailable(BrowserError):
    """DevTools endpoint did not answer. Carries host/port for diagnostics."""

    def __init__(self, host: str, port: int, reason: str = "", *, hint: str | None = None):
        self.host = host
        self.port = port
        self.reason = reason
        self.hint = hint
        message = f"DevTools not reachable at {host}:{port}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(BrowserFailure.CONNECTION, message)


class CleanupFailure(BrowserError):
    def __init__(self, message: str = ""):
        super().__init__(BrowserFailure.CLEANUP, message)


class VisibilityUnsupported(BrowserError):
    def __init__(self, message: str = ""):
        super().__init__(BrowserFailure.VISIBILITY, message)
