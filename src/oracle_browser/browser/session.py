"""Browser session lifecycle: resolve, launch, guard, connect.

The session never drives pages itself. Callers get a ``BrowserSession``
whose ``connection`` is a Playwright ``Browser`` connected over CDP and do
their own page automation on it.
"""
import asyncio
import logging
import sys
import tempfile
import uuid
from contextlib import asynccontextmanager

from ..errors import ConnectionUnavailable, LaunchFailure
from .model import BrowserSession, SessionState

log = logging.getLogger(__name__)

PROFILE_PREFIX = "oracle-browser-"


def _event_logger_for(config, event_logger):
    if event_logger is not None or not config.event_log_dir:
        return event_logger, False
    from ..telemetry import SessionEventLogger
    return SessionEventLogger(uuid.uuid4().hex[:12], log_dir=config.event_log_dir), True


async def _abandon_launch(session: BrowserSession, keep_profile: bool) -> None:
    from .lifecycle import remove_profile_dir

    session.advance(SessionState.TERMINATING)
    if session.profile_dir and not keep_profile:
        await remove_profile_dir(session.profile_dir)
    session.advance(SessionState.TERMINATED)


async def _adopt_connection(session: BrowserSession, browser) -> None:
    """Attach *browser* to the session, or drop it if shutdown won the race."""
    if session.mark_connected(browser):
        return
    try:
        await browser.close()
    except Exception as e:
        log.debug("Ignoring CDP disconnect failure: %s", e)
    endpoint = session.endpoint
    raise ConnectionUnavailable(
        endpoint.host, endpoint.port, "session shut down while connecting",
    )


@asynccontextmanager
async def open_browser_session(
    playwright,
    config=None,
    *,
    event_logger=None,
    exit_func=sys.exit,
    client=None,
):
    """Launch a dedicated Chrome and yield a connected ``BrowserSession``.

    Cleanup (disconnect, kill, profile removal) runs exactly once on normal
    exit, on error and on SIGINT/SIGTERM/SIGQUIT. ``LaunchFailure`` and
    ``ConnectionUnavailable`` propagate to the caller.
    """
    from ..config import BrowserConfig
    from .chrome import launch_chrome
    from .connection import connect_to_chrome
    from .endpoint import resolve_endpoint
    from .lifecycle import LifecycleGuard
    from .visibility import hide_chrome_window

    config = config or BrowserConfig.from_env()
    event_logger, owns_logger = _event_logger_for(config, event_logger)
    session = BrowserSession()
    try:
        # Until the guard is entered, any failure or cancellation must undo
        # the profile directory here.
        try:
            session.set_profile_dir(
                await asyncio.to_thread(tempfile.mkdtemp, prefix=PROFILE_PREFIX)
            )
            endpoint = resolve_endpoint(config.remote_debug_host, config.debug_port)
            chrome = await launch_chrome(config, endpoint, session.profile_dir)
            session.attach_process(chrome)
        except BaseException as e:
            if isinstance(e, LaunchFailure) and event_logger is not None:
                event_logger.log_error(e.failure.value, str(e), endpoint.host, endpoint.port)
            await asyncio.shield(_abandon_launch(session, config.keep_profile))
            raise

        if event_logger is not None:
            event_logger.log_launch(chrome.pid, chrome.host, chrome.port, config.chrome_path or "")

        guard = LifecycleGuard(
            session,
            keep_profile=config.keep_profile,
            exit_func=exit_func,
            event_logger=event_logger,
        )
        session.guard = guard
        async with guard:
            try:
                browser = await connect_to_chrome(
                    playwright, session.endpoint,
                    timeout=config.connect_timeout, client=client,
                )
                await _adopt_connection(session, browser)
            except ConnectionUnavailable as e:
                log.error("%s", e)
                if e.hint:
                    log.error("%s", e.hint)
                if event_logger is not None:
                    event_logger.log_error(e.failure.value, str(e), e.host, e.port)
                raise
            if event_logger is not None:
                event_logger.log_connect(session.endpoint.host, session.endpoint.port)
            if config.hide_window:
                await hide_chrome_window(chrome)
            yield session
    finally:
        if owns_logger:
            event_logger.close()


@asynccontextmanager
async def attach_browser_session(
    playwright,
    host: str,
    port: int,
    *,
    timeout: float = 5.0,
    event_logger=None,
    exit_func=sys.exit,
    client=None,
):
    """Yield a session connected to a Chrome someone else launched.

    Nothing is killed or removed on exit; only the CDP connection is closed.
    """
    from .connection import connect_to_remote_chrome
    from .endpoint import DebugEndpoint
    from .lifecycle import LifecycleGuard

    session = BrowserSession(endpoint=DebugEndpoint(host, port), owns_process=False)
    guard = LifecycleGuard(session, exit_func=exit_func, event_logger=event_logger)
    session.guard = guard
    async with guard:
        try:
            browser = await connect_to_remote_chrome(
                playwright, host, port, timeout=timeout, client=client,
            )
            await _adopt_connection(session, browser)
        except ConnectionUnavailable as e:
            if event_logger is not None:
                event_logger.log_error(e.failure.value, str(e), host, port)
            raise
        if event_logger is not None:
            event_logger.log_connect(host, port, remote=True)
        yield session
