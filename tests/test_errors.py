"""Tests for BrowserFailure and the error taxonomy."""
from oracle_browser.errors import (
    BrowserError,
    BrowserFailure,
    CleanupFailure,
    ConnectionUnavailable,
    LaunchFailure,
    VisibilityUnsupported,
)


def test_failure_values():
    assert BrowserFailure.LAUNCH.value == "launch"
    assert BrowserFailure.CONNECTION.value == "connection"
    assert BrowserFailure.CLEANUP.value == "cleanup"
    assert BrowserFailure.VISIBILITY.value == "visibility"


def test_browser_error_default_message():
    err = BrowserError(BrowserFailure.LAUNCH)
    assert str(err) == "launch"


def test_launch_failure():
    err = LaunchFailure("Chrome exited unexpectedly (code 3)", exit_code=3)
    assert err.failure == BrowserFailure.LAUNCH
    assert err.exit_code == 3
    assert "code 3" in str(err)


def test_connection_unavailable_carries_endpoint():
    err = ConnectionUnavailable("10.0.0.1", 45871, "connection refused", hint="open the port")
    assert err.failure == BrowserFailure.CONNECTION
    assert err.host == "10.0.0.1"
    assert err.port == 45871
    assert err.hint == "open the port"
    assert str(err) == "DevTools not reachable at 10.0.0.1:45871: connection refused"


def test_subclasses_are_browser_errors():
    for err in (LaunchFailure(), ConnectionUnavailable("h", 1), CleanupFailure(),
                VisibilityUnsupported()):
        assert isinstance(err, BrowserError)
        assert isinstance(err, Exception)
    assert CleanupFailure().failure == BrowserFailure.CLEANUP
    assert str(VisibilityUnsupported()) == "visibility"
