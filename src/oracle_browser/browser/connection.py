"""DevTools readiness probe and CDP connection.

A TCP accept is not enough: the ``/json/version`` payload must carry a
``webSocketDebuggerUrl`` before the endpoint counts as ready. The probe is
retried exactly once after a fixed 500 ms pause because Chrome's listener
can lag the process start.
"""
import asyncio
import logging

import httpx

from ..errors import ConnectionUnavailable
from .endpoint import DebugEndpoint, is_wsl

log = logging.getLogger(__name__)

RETRY_DELAY = 0.5
PROBE_TIMEOUT = 5.0


def firewall_hint(host: str, port: int, *, wsl: bool | None = None) -> str | None:
    """PowerShell firewall commands for a DevTools port blocked from WSL."""
    if wsl is None:
        wsl = is_wsl()
    if not wsl:
        return None
    return "\n".join([
        f"DevTools port {host}:{port} is blocked from WSL.",
        "",
        "PowerShell (admin):",
        f"New-NetFirewallRule -DisplayName 'Chrome DevTools {port}' -Direction Inbound "
        f"-Action Allow -Protocol TCP -LocalPort {port}",
        "New-NetFirewallRule -DisplayName 'Chrome DevTools (chrome.exe)' -Direction Inbound "
        "-Action Allow -Program 'C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe' "
        "-Protocol TCP",
        "",
        "Re-run the browser smoke test after adding the rule.",
    ])


async def fetch_version(
    host: str,
    port: int,
    *,
    timeout: float = PROBE_TIMEOUT,
    client: httpx.AsyncClient | None = None,
) -> dict | None:
    """Query ``/json/version``; None means "not ready yet", never an error."""
    url = f"http://{host}:{port}/json/version"
    try:
        if client is None:
            async with httpx.AsyncClient(timeout=timeout, trust_env=False) as own:
                resp = await own.get(url)
        else:
            resp = await client.get(url, timeout=timeout)
        if resp.status_code != 200:
            log.debug("DevTools probe %s returned HTTP %d", url, resp.status_code)
            return None
        payload = resp.json()
    except (httpx.HTTPError, ValueError) as e:
        log.debug("DevTools probe %s failed: %s", url, e)
        return None
    if not isinstance(payload, dict) or not payload.get("webSocketDebuggerUrl"):
        return None
    return payload


async def probe_devtools(
    host: str,
    port: int,
    *,
    retry_delay: float = RETRY_DELAY,
    timeout: float = PROBE_TIMEOUT,
    client: httpx.AsyncClient | None = None,
    wsl: bool | None = None,
) -> dict:
    """Probe the endpoint, retrying once after *retry_delay* seconds.

    Returns the version payload or raises ``ConnectionUnavailable``.
    """
    version = await fetch_version(host, port, timeout=timeout, client=client)
    if version is None:
        await asyncio.sleep(retry_delay)
        version = await fetch_version(host, port, timeout=timeout, client=client)
    if version is None:
        raise ConnectionUnavailable(
            host, port, "no webSocketDebuggerUrl in /json/version",
            hint=firewall_hint(host, port, wsl=wsl),
        )
    return version


async def _connect(playwright, endpoint: DebugEndpoint, timeout: float, client, wsl):
    version = await probe_devtools(
        endpoint.host, endpoint.port, timeout=timeout, client=client, wsl=wsl,
    )
    log.debug("DevTools %s at %s", version.get("Browser", "unknown browser"), endpoint)
    try:
        return await playwright.chromium.connect_over_cdp(
            endpoint.http_url, timeout=timeout * 1000,
        )
    except Exception as e:
        raise ConnectionUnavailable(
            endpoint.host, endpoint.port, str(e),
            hint=firewall_hint(endpoint.host, endpoint.port, wsl=wsl),
        ) from e


async def connect_to_chrome(
    playwright,
    endpoint: DebugEndpoint,
    *,
    timeout: float = PROBE_TIMEOUT,
    client: httpx.AsyncClient | None = None,
    wsl: bool | None = None,
):
    """Open a CDP connection to the Chrome this process launched."""
    browser = await _connect(playwright, endpoint, timeout, client, wsl)
    log.info("Connected to Chrome DevTools protocol")
    return browser


async def connect_to_remote_chrome(
    playwright,
    host: str,
    port: int,
    *,
    timeout: float = PROBE_TIMEOUT,
    client: httpx.AsyncClient | None = None,
    wsl: bool | None = None,
):
    """Open a CDP connection to an externally launched Chrome."""
    browser = await _connect(playwright, DebugEndpoint(host, port), timeout, client, wsl)
    log.info("Connected to remote Chrome DevTools protocol at %s:%d", host, port)
    return browser
