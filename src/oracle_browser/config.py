"""Runtime configuration for a browser session."""
import os
from dataclasses import dataclass
from typing import Mapping

from .browser.endpoint import REMOTE_HOST_ENV_VAR, port_from_env
from .utils import parse_duration

DEFAULT_CONNECT_TIMEOUT_MS = 5_000
DEFAULT_LAUNCH_TIMEOUT_MS = 30_000

_TRUTHY = {"1", "true", "yes", "on"}


def _flag(raw: str | None) -> bool:
    return (raw or "").strip().lower() in _TRUTHY


@dataclass
class BrowserConfig:
    """How to launch and connect to the browser.

    ``headless`` is accepted for callers that pass it through, but Chrome is
    always started with a visible window.
    """
    chrome_path: str | None = None
    headless: bool = False
    debug_port: int | None = None
    remote_debug_host: str | None = None
    keep_profile: bool = False
    hide_window: bool = False
    connect_timeout_ms: int = DEFAULT_CONNECT_TIMEOUT_MS
    launch_timeout_ms: int = DEFAULT_LAUNCH_TIMEOUT_MS
    event_log_dir: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None, **overrides) -> "BrowserConfig":
        """Build a config from ``ORACLE_BROWSER_*`` variables.

        Keyword *overrides* win over the environment when not None.
        """
        env = os.environ if env is None else env
        values = {
            "chrome_path": env.get("ORACLE_BROWSER_CHROME_PATH") or None,
            "debug_port": port_from_env(env),
            "remote_debug_host": (env.get(REMOTE_HOST_ENV_VAR) or "").strip() or None,
            "keep_profile": _flag(env.get("ORACLE_BROWSER_KEEP_PROFILE")),
            "hide_window": _flag(env.get("ORACLE_BROWSER_HIDE_WINDOW")),
            "connect_timeout_ms": parse_duration(
                env.get("ORACLE_BROWSER_CONNECT_TIMEOUT", ""), DEFAULT_CONNECT_TIMEOUT_MS,
            ),
            "launch_timeout_ms": parse_duration(
                env.get("ORACLE_BROWSER_LAUNCH_TIMEOUT", ""), DEFAULT_LAUNCH_TIMEOUT_MS,
            ),
            "event_log_dir": env.get("ORACLE_BROWSER_EVENT_LOG") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def connect_timeout(self) -> float:
        return self.connect_timeout_ms / 1000

    @property
    def launch_timeout(self) -> float:
        return self.launch_timeout_ms / 1000
