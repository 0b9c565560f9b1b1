"""Hide the Chrome window without stopping it (macOS only)."""
import asyncio
import logging
import platform

from ..errors import VisibilityUnsupported

log = logging.getLogger(__name__)


def build_hide_script(pid: int) -> str:
    return (
        'tell application "System Events"\n'
        "  try\n"
        f"    set visible of (first process whose unix id is {pid}) to false\n"
        "  end try\n"
        "end tell"
    )


def _check_supported(pid: int | None, system: str) -> None:
    if system != "Darwin":
        raise VisibilityUnsupported("Window hiding is only supported on macOS")
    if not pid:
        raise VisibilityUnsupported("Unable to hide window: missing Chrome PID")


async def hide_chrome_window(target, *, system: str | None = None) -> bool:
    """Best-effort Cmd-H for the Chrome process behind *target*.

    *target* is a pid or anything with a ``pid`` attribute (session or
    ``ChromeProcess``). Returns True when the window was hidden; failures are
    logged, never raised.
    """
    pid = target if isinstance(target, int) else getattr(target, "pid", None)
    system = platform.system() if system is None else system
    try:
        _check_supported(pid, system)
    except VisibilityUnsupported as e:
        log.info("%s", e)
        return False

    try:
        proc = await asyncio.create_subprocess_exec(
            "osascript", "-e", build_hide_script(pid),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        _stdout, stderr = await proc.communicate()
    except OSError as e:
        log.warning("Failed to hide Chrome window: %s", e)
        return False

    if proc.returncode != 0:
        log.warning("Failed to hide Chrome window: %s", stderr.decode("utf-8", "replace").strip())
        return False
    log.info("Chrome window hidden (Cmd-H)")
    return True
