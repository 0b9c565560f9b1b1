"""Tests for debug endpoint resolution — no real WSL needed."""
from oracle_browser.browser.endpoint import (
    DEFAULT_DEBUG_PORT,
    DebugEndpoint,
    is_wsl,
    parse_nameserver,
    parse_port,
    resolve_debug_port,
    resolve_endpoint,
    resolve_remote_debug_host,
)

WSL_ENV = {"WSL_DISTRO_NAME": "Ubuntu"}
RESOLV = "# generated by WSL\nsearch lan\nnameserver 10.0.0.1\nnameserver 8.8.8.8\n"


def _reader(text):
    def read(path):
        assert path == "/etc/resolv.conf"
        return text
    return read


def _failing_reader(path):
    raise FileNotFoundError(path)


def test_parse_port_valid():
    for raw in ("1", "9222", "45871", "65535", " 8080 "):
        assert parse_port(raw) == int(raw)


def test_parse_port_invalid():
    for raw in ("", "0", "-1", "65536", "70000", "abc", "12ab", "1.5", None):
        assert parse_port(raw) is None


def test_resolve_port_explicit_wins():
    env = {"ORACLE_BROWSER_PORT": "9333"}
    assert resolve_debug_port(9444, env=env) == 9444


def test_resolve_port_from_env():
    assert resolve_debug_port(env={"ORACLE_BROWSER_PORT": "9333"}) == 9333
    assert resolve_debug_port(env={"ORACLE_BROWSER_DEBUG_PORT": "9334"}) == 9334


def test_resolve_port_first_alias_wins():
    env = {"ORACLE_BROWSER_PORT": "9333", "ORACLE_BROWSER_DEBUG_PORT": "9334"}
    assert resolve_debug_port(env=env) == 9333


def test_out_of_range_port_falls_back_to_default():
    assert resolve_debug_port(env={"ORACLE_BROWSER_PORT": "70000"}) == DEFAULT_DEBUG_PORT
    assert resolve_debug_port(70000, env={}) == DEFAULT_DEBUG_PORT
    assert resolve_debug_port(env={}) == 45871


def test_is_wsl_detection():
    assert is_wsl(WSL_ENV, system="Linux", release="6.1.0")
    assert is_wsl({}, system="Linux", release="5.15.90.1-microsoft-standard-WSL2")
    assert not is_wsl({}, system="Linux", release="6.8.0-generic")
    assert not is_wsl(WSL_ENV, system="Darwin", release="23.0.0")


def test_parse_nameserver():
    assert parse_nameserver(RESOLV) == "10.0.0.1"
    assert parse_nameserver("search lan\n") is None
    assert parse_nameserver("  nameserver 1.2.3.4\n") is None


def test_wsl_host_from_resolv_conf():
    host = resolve_remote_debug_host(
        env=WSL_ENV, read_file=_reader(RESOLV), system="Linux", release="6.1.0",
    )
    assert host == "10.0.0.1"


def test_host_override_used_verbatim():
    env = dict(WSL_ENV, ORACLE_BROWSER_REMOTE_DEBUG_HOST=" 192.168.1.5 ")
    host = resolve_remote_debug_host(
        env=env, read_file=_reader(RESOLV), system="Linux", release="6.1.0",
    )
    assert host == "192.168.1.5"
    assert resolve_remote_debug_host("my-host", env=env) == "my-host"


def test_not_wsl_means_no_remote_host():
    host = resolve_remote_debug_host(
        env={}, read_file=_reader(RESOLV), system="Linux", release="6.8.0-generic",
    )
    assert host is None


def test_unreadable_resolv_conf_falls_back_to_loopback():
    endpoint = resolve_endpoint(
        env=WSL_ENV, read_file=_failing_reader, system="Linux", release="6.1.0",
    )
    assert endpoint == DebugEndpoint("127.0.0.1", DEFAULT_DEBUG_PORT)
    assert endpoint.is_loopback


def test_resolve_endpoint_wsl():
    env = dict(WSL_ENV, ORACLE_BROWSER_DEBUG_PORT="9555")
    endpoint = resolve_endpoint(env=env, read_file=_reader(RESOLV), system="Linux", release="x")
    assert endpoint.host == "10.0.0.1"
    assert endpoint.port == 9555
    assert not endpoint.is_loopback
    assert endpoint.http_url == "http://10.0.0.1:9555"
    assert str(endpoint) == "10.0.0.1:9555"


def test_resolution_is_deterministic():
    kwargs = dict(env=WSL_ENV, read_file=_reader(RESOLV), system="Linux", release="x")
    assert resolve_endpoint(**kwargs) == resolve_endpoint(**kwargs)
