"""Tests for the smoke-test CLI — launcher and probe are mocked."""
import asyncio
import io
import os
from unittest.mock import AsyncMock, patch

from oracle_browser import smoke
from oracle_browser.config import BrowserConfig
from oracle_browser.errors import ConnectionUnavailable, LaunchFailure


class FakeChrome:
    def __init__(self, host, port):
        self.pid = 4242
        self.host = host
        self.port = port
        self.terminated = 0

    async def terminate(self):
        self.terminated += 1


def _fake_launch(launched):
    async def launch(config, endpoint, profile_dir):
        launched.append((FakeChrome(endpoint.host, endpoint.port), profile_dir))
        return launched[-1][0]
    return launch


def _run(probe, env=None):
    launched = []
    out, err = io.StringIO(), io.StringIO()
    config = BrowserConfig(debug_port=45871, remote_debug_host="127.0.0.1")
    with patch.object(smoke, "launch_chrome", _fake_launch(launched)), \
            patch.object(smoke, "probe_devtools", probe):
        code = asyncio.run(smoke.run_smoke(config, env=env or {}, out=out, err=err))
    return code, out.getvalue(), err.getvalue(), launched


def test_pass_when_devtools_responds():
    probe = AsyncMock(return_value={"webSocketDebuggerUrl": "ws://x"})
    code, out, err, launched = _run(probe)
    assert code == 0
    assert "launching Chrome on 127.0.0.1:45871" in out
    assert "PASS: DevTools responding on 127.0.0.1:45871" in out
    chrome, profile = launched[0]
    assert chrome.terminated == 1
    assert not os.path.exists(profile)


def test_fail_prints_firewall_hint():
    probe = AsyncMock(side_effect=ConnectionUnavailable(
        "10.0.0.1", 45871, "refused", hint="New-NetFirewallRule ...",
    ))
    code, out, err, launched = _run(probe)
    assert code == 1
    assert "FAIL: DevTools not reachable at 10.0.0.1:45871" in err
    assert "New-NetFirewallRule" in err
    assert launched[0][0].terminated == 1


def test_main_reports_launch_failure(capsys):
    with patch.object(smoke, "run_smoke", AsyncMock(side_effect=LaunchFailure("no chrome"))):
        assert smoke.main(["--port", "9222"]) == 1
    assert "FAIL: no chrome" in capsys.readouterr().err


def test_main_reports_unexpected_failure(capsys):
    with patch.object(smoke, "run_smoke", AsyncMock(side_effect=RuntimeError("boom"))):
        assert smoke.main([]) == 1
    assert "Unexpected failure: boom" in capsys.readouterr().err


def test_main_passes_cli_overrides():
    runner = AsyncMock(return_value=0)
    with patch.object(smoke, "run_smoke", runner):
        assert smoke.main(["--port", "9333", "--host", "10.0.0.9", "--chrome-path", "/opt/c"]) == 0
    config = runner.await_args.args[0]
    assert config.debug_port == 9333
    assert config.remote_debug_host == "10.0.0.9"
    assert config.chrome_path == "/opt/c"
