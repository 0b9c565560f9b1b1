"""browser — Chrome process lifecycle and CDP connection primitives.

macOS, Linux and WSL. Page automation is left to the caller.
"""
from .endpoint import DebugEndpoint, resolve_endpoint, is_wsl, DEFAULT_DEBUG_PORT  # noqa: F401
from .chrome import find_system_chrome, build_chrome_flags, launch_chrome, ChromeProcess  # noqa: F401
from .connection import fetch_version, probe_devtools, connect_to_chrome, connect_to_remote_chrome  # noqa: F401
from .lifecycle import LifecycleGuard, exit_code_for  # noqa: F401
from .visibility import hide_chrome_window  # noqa: F401
from .model import BrowserSession, SessionState  # noqa: F401
