"""Chrome discovery and headful launch with remote debugging.

The bound DevTools port is read back from the ``DevToolsActivePort`` file
Chrome writes into its profile directory, so callers always see the port
that is actually listening.
"""
import asyncio
import logging
import os
import platform
import shutil
import socket
import time

from ..errors import LaunchFailure
from .endpoint import LOOPBACK_HOST, DebugEndpoint

log = logging.getLogger(__name__)

ACTIVE_PORT_FILE = "DevToolsActivePort"
_POLL_INTERVAL = 0.1
_TERMINATE_GRACE = 5.0

CHROME_FLAGS = (
    "--disable-background-networking",
    "--disable-background-timer-throttling",
    "--disable-breakpad",
    "--disable-client-side-phishing-detection",
    "--disable-default-apps",
    "--disable-hang-monitor",
    "--disable-popup-blocking",
    "--disable-prompt-on-repost",
    "--disable-sync",
    "--disable-translate",
    "--metrics-recording-only",
    "--no-first-run",
    "--safebrowsing-disable-auto-update",
    "--disable-features=TranslateUI,AutomationControlled",
    "--mute-audio",
    "--window-size=1280,720",
    "--password-store=basic",
    "--use-mock-keychain",
)


def find_system_chrome() -> str | None:
    """Find Chrome, Chromium or Edge on the system.

    Returns the path to the browser executable, or None if not found.
    """
    system = platform.system()
    if system == "Darwin":
        candidates = [
            "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
            "/Applications/Google Chrome Canary.app/Contents/MacOS/Google Chrome Canary",
            "/Applications/Chromium.app/Contents/MacOS/Chromium",
            "/Applications/Microsoft Edge.app/Contents/MacOS/Microsoft Edge",
        ]
    elif system == "Linux":
        candidates = [
            "google-chrome",
            "google-chrome-stable",
            "chromium-browser",
            "chromium",
            "microsoft-edge",
            "microsoft-edge-stable",
        ]
    elif system == "Windows":
        candidates = [
            r"C:\Program Files\Google\Chrome\Application\chrome.exe",
            r"C:\Program Files (x86)\Google\Chrome\Application\chrome.exe",
            r"C:\Program Files (x86)\Microsoft\Edge\Application\msedge.exe",
        ]
    else:
        return None

    for candidate in candidates:
        if system == "Linux":
            path = shutil.which(candidate)
            if path:
                return path
        elif os.path.isfile(candidate):
            return candidate
    return None


def build_chrome_flags(headless: bool = False, debug_host: str | None = None) -> list[str]:
    """Fixed Chrome flag set; identical across runs.

    Headless mode is blocked by the target site, so *headless* never adds
    ``--headless``.
    """
    if headless:
        log.warning("Headless mode requested; launching a visible window instead")
    flags = list(CHROME_FLAGS)
    if debug_host and debug_host != LOOPBACK_HOST:
        flags.append("--remote-debugging-address=0.0.0.0")
    return flags


def port_available(port: int, host: str = LOOPBACK_HOST) -> bool:
    """True if nothing is bound to *host*:*port* yet."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def read_active_port(profile_dir: str) -> int | None:
    """Port from Chrome's ``DevToolsActivePort`` file, or None if not written yet."""
    path = os.path.join(profile_dir, ACTIVE_PORT_FILE)
    try:
        with open(path, "r", encoding="utf-8") as f:
            first = f.readline().strip()
    except OSError:
        return None
    try:
        port = int(first)
    except ValueError:
        return None
    return port if 0 < port <= 65535 else None


class ChromeProcess:
    """Handle on a launched Chrome: pid, bound port, host and ``terminate()``."""

    def __init__(self, proc: asyncio.subprocess.Process, port: int, host: str):
        self._proc = proc
        self.pid = proc.pid
        self.port = port
        self.host = host

    @property
    def returncode(self) -> int | None:
        return self._proc.returncode

    @property
    def endpoint(self) -> DebugEndpoint:
        return DebugEndpoint(self.host, self.port)

    async def terminate(self, timeout: float = _TERMINATE_GRACE) -> None:
        """SIGTERM, then SIGKILL after *timeout*. Safe to call repeatedly."""
        proc = self._proc
        if proc.returncode is not None:
            return
        try:
            proc.terminate()
        except ProcessLookupError:
            return
        try:
            await asyncio.wait_for(proc.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            log.warning("Chrome (pid %s) ignored SIGTERM; killing", self.pid)
            try:
                proc.kill()
            except ProcessLookupError:
                return
            await proc.wait()


async def _wait_for_active_port(proc, profile_dir: str, timeout: float) -> int:
    deadline = time.monotonic() + timeout
    while True:
        port = read_active_port(profile_dir)
        if port is not None:
            return port
        if proc.returncode is not None:
            raise LaunchFailure(
                f"Chrome exited unexpectedly (code {proc.returncode})",
                exit_code=proc.returncode,
            )
        if time.monotonic() >= deadline:
            raise LaunchFailure(
                f"Chrome did not open a DevTools port within {timeout:g}s"
            )
        await asyncio.sleep(_POLL_INTERVAL)


async def launch_chrome(
    config,
    endpoint: DebugEndpoint,
    profile_dir: str,
) -> ChromeProcess:
    """Spawn Chrome with remote debugging for *endpoint* and *profile_dir*.

    Raises ``LaunchFailure`` when no binary is found, the process cannot be
    spawned, or it exits (or stalls) before binding a DevTools port.
    """
    chrome_path = config.chrome_path or find_system_chrome()
    if not chrome_path:
        raise LaunchFailure("No Chrome/Chromium binary found; set ORACLE_BROWSER_CHROME_PATH")

    bind_host = LOOPBACK_HOST if endpoint.is_loopback else "0.0.0.0"
    requested_port = endpoint.port
    if not port_available(requested_port, bind_host):
        log.warning("DevTools port %d is busy; letting Chrome pick a free port", requested_port)
        requested_port = 0

    # Stale file from a kept profile would report the wrong port.
    stale = os.path.join(profile_dir, ACTIVE_PORT_FILE)
    if os.path.exists(stale):
        os.remove(stale)

    args = [
        chrome_path,
        f"--remote-debugging-port={requested_port}",
        f"--user-data-dir={profile_dir}",
        *build_chrome_flags(config.headless, endpoint.host),
        "about:blank",
    ]

    log.info("Launching Chrome: %s", os.path.basename(chrome_path))
    try:
        proc = await asyncio.create_subprocess_exec(
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        raise LaunchFailure(f"Cannot start Chrome at {chrome_path}: {e}") from e

    try:
        port = await _wait_for_active_port(proc, profile_dir, config.launch_timeout)
    except BaseException:
        # includes cancellation
        await asyncio.shield(ChromeProcess(proc, requested_port, endpoint.host).terminate())
        raise

    chrome = ChromeProcess(proc, port, endpoint.host)
    host_label = "" if endpoint.is_loopback else f" on {endpoint.host}"
    log.info("Launched Chrome (pid %d) on port %d%s", chrome.pid, port, host_label)
    return chrome
