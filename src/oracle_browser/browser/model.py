"""Session state shared by the lifecycle components."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .endpoint import DebugEndpoint


class SessionState(Enum):
    LAUNCHING = 1
    CONNECTED = 2
    TERMINATING = 3
    TERMINATED = 4


@dataclass
class BrowserSession:
    """One browser per invocation.

    ``profile_dir`` and ``chrome`` are assigned once; ``state`` only moves
    forward. ``connection`` is the Playwright ``Browser`` while connected.
    """
    profile_dir: str | None = None
    endpoint: DebugEndpoint | None = None
    chrome: Any = None
    connection: Any = None
    owns_process: bool = True
    guard: Any = None
    state: SessionState = field(default=SessionState.LAUNCHING)

    @property
    def pid(self) -> int | None:
        return getattr(self.chrome, "pid", None)

    def advance(self, state: SessionState) -> None:
        if state.value <= self.state.value:
            raise ValueError(f"cannot move session from {self.state.name} to {state.name}")
        self.state = state

    def set_profile_dir(self, path: str) -> None:
        if self.profile_dir is not None:
            raise ValueError("profile_dir already assigned")
        self.profile_dir = path

    def attach_process(self, chrome) -> None:
        """Record the launched process and the endpoint it actually bound."""
        if self.chrome is not None:
            raise ValueError("session already owns a browser process")
        self.chrome = chrome
        self.endpoint = DebugEndpoint(chrome.host, chrome.port)

    def mark_connected(self, connection) -> bool:
        """Adopt *connection*. False if shutdown already started; the caller closes it."""
        if self.state != SessionState.LAUNCHING:
            return False
        self.advance(SessionState.CONNECTED)
        self.connection = connection
        return True
