"""Exactly-once shutdown for a browser session.

``LifecycleGuard`` owns the signal handlers for one session. Whichever of
normal completion, an unhandled error or a termination signal comes first
starts the single cleanup task; every later trigger awaits that same task.
Signal handlers run on the event loop, so a plain boolean latch is enough
to ignore repeated signals.
"""
import asyncio
import logging
import shutil
import signal
import sys
import time
from typing import Callable

from ..errors import CleanupFailure
from .model import BrowserSession, SessionState

log = logging.getLogger(__name__)

DEFAULT_SIGNALS = tuple(
    sig for sig in (
        signal.SIGINT,
        signal.SIGTERM,
        getattr(signal, "SIGQUIT", None),
    ) if sig is not None
)


def exit_code_for(signum: int) -> int:
    """130 after Ctrl-C, 1 for any other termination signal."""
    return 130 if signum == signal.SIGINT else 1


async def remove_profile_dir(path: str) -> bool:
    """Remove *path* recursively. Returns False if it was already gone or removal failed."""
    try:
        await asyncio.to_thread(shutil.rmtree, path)
    except FileNotFoundError:
        return False
    except OSError as e:
        log.warning("%s", CleanupFailure(f"could not remove profile {path}: {e}"))
        return False
    log.debug("Removed browser profile %s", path)
    return True


class LifecycleGuard:
    """Signal handling and cleanup for one ``BrowserSession``.

    Use as an async context manager, or call ``register()`` and
    ``unregister()`` explicitly. ``exit_func`` is called with 130 (SIGINT) or
    1 (other signals) once signal-triggered cleanup has finished.
    """

    def __init__(
        self,
        session: BrowserSession,
        *,
        keep_profile: bool = False,
        exit_func: Callable[[int], object] = sys.exit,
        signals=DEFAULT_SIGNALS,
        event_logger=None,
    ):
        self.session = session
        self.keep_profile = keep_profile
        self._exit = exit_func
        self._signals = tuple(signals)
        self._event_logger = event_logger
        self._handling = False
        self._registered = False
        self._loop: asyncio.AbstractEventLoop | None = None
        self._previous: dict = {}
        self._cleanup_task: asyncio.Future | None = None
        self.shutdown_task: asyncio.Task | None = None

    @property
    def registered(self) -> bool:
        return self._registered

    async def __aenter__(self):
        self.register()
        return self

    async def __aexit__(self, *exc):
        try:
            await asyncio.shield(self.cleanup())
        finally:
            self.unregister()
        return False

    def register(self) -> None:
        """Install handlers for SIGINT/SIGTERM/SIGQUIT on the running loop."""
        if self._registered:
            return
        loop = asyncio.get_running_loop()
        self._loop = loop
        for sig in self._signals:
            try:
                loop.add_signal_handler(sig, self._handle_signal, sig)
            except NotImplementedError:
                self._previous[sig] = signal.signal(sig, self._threadsafe_handler)
        self._registered = True

    def unregister(self) -> None:
        """Detach the handlers so a later session can install its own."""
        if not self._registered:
            return
        for sig in self._signals:
            try:
                if sig in self._previous:
                    signal.signal(sig, self._previous.pop(sig))
                elif self._loop is not None and not self._loop.is_closed():
                    self._loop.remove_signal_handler(sig)
            except (RuntimeError, ValueError) as e:
                log.debug("Could not restore handler for %s: %s", sig, e)
        self._registered = False

    def _threadsafe_handler(self, signum, _frame) -> None:
        self._loop.call_soon_threadsafe(self._handle_signal, signum)

    def _handle_signal(self, signum: int) -> None:
        if self._handling:
            return
        self._handling = True
        name = signal.Signals(signum).name
        log.warning("Received %s; terminating Chrome process", name)
        self.shutdown_task = asyncio.get_running_loop().create_task(self._shutdown(signum))

    async def _shutdown(self, signum: int) -> None:
        code = exit_code_for(signum)
        if self._event_logger is not None:
            self._event_logger.log_signal(signal.Signals(signum).name, code)
        try:
            await self.cleanup()
        finally:
            self.unregister()
            # outside the task, so SystemExit reaches the loop instead of the task result
            asyncio.get_running_loop().call_soon(self._exit, code)

    def cleanup(self) -> asyncio.Future:
        """Start cleanup on first call; every call returns the same task."""
        if self._cleanup_task is None:
            self._cleanup_task = asyncio.ensure_future(self._run_cleanup())
        return self._cleanup_task

    async def _run_cleanup(self) -> None:
        session = self.session
        started = time.monotonic()
        if session.state.value < SessionState.TERMINATING.value:
            session.advance(SessionState.TERMINATING)

        connection, session.connection = session.connection, None
        if connection is not None:
            try:
                await connection.close()
            except Exception as e:
                log.debug("Ignoring CDP disconnect failure: %s", e)

        killed = False
        if session.owns_process and session.chrome is not None:
            try:
                await session.chrome.terminate()
                killed = True
            except Exception as e:
                # the process may already be gone
                log.debug("Ignoring Chrome terminate failure: %s", e)

        removed = False
        if session.owns_process and session.profile_dir:
            if self.keep_profile:
                log.info("Keeping browser profile at %s", session.profile_dir)
            else:
                removed = await remove_profile_dir(session.profile_dir)

        session.advance(SessionState.TERMINATED)
        if self._event_logger is not None:
            self._event_logger.log_cleanup(killed, removed, time.monotonic() - started)
