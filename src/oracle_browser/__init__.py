"""oracle-browser — dedicated Chrome launch and DevTools connection management.

Resolves the remote-debugging endpoint (including WSL host networking),
launches a headful Chrome on an ephemeral profile, verifies and opens the
CDP connection, and guarantees one cleanup per session.
"""
from .browser.session import open_browser_session, attach_browser_session  # noqa: F401
from .browser.model import BrowserSession, SessionState  # noqa: F401
from .config import BrowserConfig  # noqa: F401
from .errors import (  # noqa: F401
    BrowserError,
    BrowserFailure,
    CleanupFailure,
    ConnectionUnavailable,
    LaunchFailure,
    VisibilityUnsupported,
)
