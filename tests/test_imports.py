"""Smoke tests: public modules are importable."""


def test_browser_imports():
    from oracle_browser.browser import (
        DebugEndpoint,
        resolve_endpoint,
        is_wsl,
        find_system_chrome,
        build_chrome_flags,
        launch_chrome,
        fetch_version,
        probe_devtools,
        connect_to_chrome,
        connect_to_remote_chrome,
        LifecycleGuard,
        hide_chrome_window,
        BrowserSession,
    )
    assert callable(resolve_endpoint)
    assert callable(is_wsl)
    assert callable(find_system_chrome)
    assert callable(build_chrome_flags)
    assert callable(launch_chrome)
    assert callable(fetch_version)
    assert callable(probe_devtools)
    assert callable(connect_to_chrome)
    assert callable(connect_to_remote_chrome)
    assert callable(hide_chrome_window)
    assert callable(LifecycleGuard)
    assert callable(BrowserSession)
    assert DebugEndpoint("127.0.0.1", 1).is_loopback


def test_top_level_imports():
    from oracle_browser import (
        open_browser_session,
        attach_browser_session,
        BrowserConfig,
        BrowserError,
        LaunchFailure,
        ConnectionUnavailable,
    )
    assert callable(open_browser_session)
    assert callable(attach_browser_session)
    assert callable(BrowserConfig.from_env)
    assert issubclass(LaunchFailure, BrowserError)
    assert issubclass(ConnectionUnavailable, BrowserError)


def test_telemetry_imports():
    from oracle_browser.telemetry import SessionEventLogger
    assert callable(SessionEventLogger)
