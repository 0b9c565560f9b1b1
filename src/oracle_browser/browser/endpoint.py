"""Resolve the host/port pair for Chrome's remote-debugging listener.

Under WSL the controller runs in a network namespace separate from the
Windows host, so a Windows-side Chrome is reached through the nameserver
address WSL writes into ``/etc/resolv.conf``. Everything here is a pure
function of the environment mapping, a file reader and the platform
identity passed in, so the resolution can be tested without a real WSL box.
"""
import logging
import os
import platform
import re
from dataclasses import dataclass
from typing import Callable, Mapping

log = logging.getLogger(__name__)

DEFAULT_DEBUG_PORT = 45871
LOOPBACK_HOST = "127.0.0.1"
RESOLV_CONF = "/etc/resolv.conf"

PORT_ENV_VARS = ("ORACLE_BROWSER_PORT", "ORACLE_BROWSER_DEBUG_PORT")
REMOTE_HOST_ENV_VAR = "ORACLE_BROWSER_REMOTE_DEBUG_HOST"

_NAMESERVER_RE = re.compile(r"^nameserver\s+([0-9.]+)")


@dataclass(frozen=True)
class DebugEndpoint:
    host: str
    port: int

    @property
    def is_loopback(self) -> bool:
        return self.host == LOOPBACK_HOST

    @property
    def http_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def parse_port(raw) -> int | None:
    """Return *raw* as a port in ``(0, 65535]``, or None when invalid."""
    if raw is None:
        return None
    if isinstance(raw, int):
        value = raw
    else:
        try:
            value = int(str(raw).strip(), 10)
        except ValueError:
            return None
    if value <= 0 or value > 65535:
        return None
    return value


def port_from_env(env: Mapping[str, str] | None = None) -> int | None:
    """Port override from the environment; the first alias present wins."""
    env = os.environ if env is None else env
    for name in PORT_ENV_VARS:
        raw = env.get(name)
        if raw:
            return parse_port(raw)
    return None


def resolve_debug_port(explicit=None, env: Mapping[str, str] | None = None) -> int:
    port = parse_port(explicit)
    if port is not None:
        return port
    port = port_from_env(env)
    if port is not None:
        return port
    return DEFAULT_DEBUG_PORT


def is_wsl(
    env: Mapping[str, str] | None = None,
    system: str | None = None,
    release: str | None = None,
) -> bool:
    """True when running inside WSL (Linux only)."""
    env = os.environ if env is None else env
    system = platform.system() if system is None else system
    if system != "Linux":
        return False
    if env.get("WSL_DISTRO_NAME"):
        return True
    release = platform.release() if release is None else release
    return "microsoft" in release.lower()


def parse_nameserver(text: str) -> str | None:
    """First dotted-quad ``nameserver`` entry in a resolv.conf body."""
    for line in text.splitlines():
        match = _NAMESERVER_RE.match(line)
        if match:
            return match.group(1)
    return None


def resolve_remote_debug_host(
    explicit: str | None = None,
    env: Mapping[str, str] | None = None,
    read_file: Callable[[str], str] | None = None,
    system: str | None = None,
    release: str | None = None,
) -> str | None:
    """Host override, else the WSL host address, else None.

    Failures reading resolv.conf are treated as "no resolvable host".
    """
    if explicit and explicit.strip():
        return explicit.strip()
    env = os.environ if env is None else env
    override = (env.get(REMOTE_HOST_ENV_VAR) or "").strip()
    if override:
        return override
    if not is_wsl(env, system, release):
        return None
    read_file = read_file or _read_text
    try:
        return parse_nameserver(read_file(RESOLV_CONF))
    except OSError as e:
        log.debug("Could not read %s: %s", RESOLV_CONF, e)
        return None


def resolve_endpoint(
    host: str | None = None,
    port=None,
    *,
    env: Mapping[str, str] | None = None,
    read_file: Callable[[str], str] | None = None,
    system: str | None = None,
    release: str | None = None,
) -> DebugEndpoint:
    """Resolve the debug endpoint, defaulting the host to loopback."""
    resolved_host = resolve_remote_debug_host(
        host, env=env, read_file=read_file, system=system, release=release,
    )
    return DebugEndpoint(
        host=resolved_host or LOOPBACK_HOST,
        port=resolve_debug_port(port, env=env),
    )
