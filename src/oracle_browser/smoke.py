"""Lightweight browser connectivity smoke test.

- Launches Chrome headful on a fixed DevTools port (default 45871, or
  ``ORACLE_BROWSER_PORT`` / ``ORACLE_BROWSER_DEBUG_PORT``).
- Verifies the DevTools ``/json/version`` endpoint responds, retrying once.
- Prints a WSL firewall hint if the port is unreachable.
"""
import argparse
import asyncio
import logging
import sys
import tempfile

from .browser.chrome import launch_chrome
from .browser.connection import probe_devtools
from .browser.endpoint import is_wsl, resolve_endpoint
from .browser.lifecycle import LifecycleGuard
from .browser.model import BrowserSession
from .browser.session import PROFILE_PREFIX
from .config import BrowserConfig
from .errors import BrowserError, ConnectionUnavailable

PREFIX = "[browser-test]"


async def run_smoke(config: BrowserConfig, *, env=None, out=None, err=None) -> int:
    """Launch, probe, terminate. Returns the process exit code."""
    out = out or sys.stdout
    err = err or sys.stderr
    endpoint = resolve_endpoint(config.remote_debug_host, config.debug_port, env=env)
    wsl = is_wsl(env)

    session = BrowserSession()
    session.set_profile_dir(await asyncio.to_thread(tempfile.mkdtemp, prefix=PROFILE_PREFIX))
    print(f"{PREFIX} launching Chrome on {endpoint} (headful)...", file=out)

    failure: ConnectionUnavailable | None = None
    async with LifecycleGuard(session, keep_profile=config.keep_profile):
        chrome = await launch_chrome(config, endpoint, session.profile_dir)
        session.attach_process(chrome)
        try:
            await probe_devtools(chrome.host, chrome.port, wsl=wsl)
        except ConnectionUnavailable as e:
            failure = e

    if failure is None:
        print(f"{PREFIX} PASS: DevTools responding on {session.endpoint}", file=out)
        return 0
    print(f"{PREFIX} FAIL: DevTools not reachable at {failure.host}:{failure.port}", file=err)
    if failure.hint:
        print(failure.hint, file=err)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="oracle-browser-smoke",
        description="Launch Chrome and check that its DevTools endpoint answers.",
    )
    parser.add_argument("--port", type=int, default=None, help="DevTools port (default 45871)")
    parser.add_argument("--host", default=None, help="host to probe instead of the resolved one")
    parser.add_argument("--chrome-path", default=None, help="Chrome/Chromium executable")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    config = BrowserConfig.from_env(
        debug_port=args.port,
        remote_debug_host=args.host,
        chrome_path=args.chrome_path,
    )
    try:
        return asyncio.run(run_smoke(config))
    except BrowserError as e:
        print(f"{PREFIX} FAIL: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"{PREFIX} Unexpected failure: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
