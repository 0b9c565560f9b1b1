"""Structured JSONL event logging for browser sessions."""
import json
import logging
import os
import time

log = logging.getLogger(__name__)


class SessionEventLogger:
    """Writes one JSON line per lifecycle event to ``<log_dir>/<session_id>.jsonl``.

    All logging is best-effort: methods never raise exceptions, since the
    cleanup events are written while the process is shutting down.
    Supports context-manager protocol for automatic close.
    """

    def __init__(self, session_id: str, log_dir: str = "data/logs/browser_sessions"):
        self._session_id = session_id
        self._f = None
        try:
            os.makedirs(log_dir, exist_ok=True)
            safe_id = session_id.replace("/", "_").replace("\\", "_")
            path = os.path.join(log_dir, f"{safe_id}.jsonl")
            self._f = open(path, "a", encoding="utf-8")
        except Exception as e:
            log.warning("SessionEventLogger: failed to open log file: %s", e)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _write(self, event: dict):
        if self._f is None:
            return
        try:
            event["ts"] = time.time()
            event["session_id"] = self._session_id
            self._f.write(json.dumps(event, ensure_ascii=False) + "\n")
            self._f.flush()
        except Exception as e:
            log.warning("SessionEventLogger: write failed: %s", e)

    def log_launch(self, pid: int | None, host: str, port: int, chrome_path: str = ""):
        self._write({
            "event": "launch",
            "pid": pid,
            "host": host,
            "port": port,
            "chrome_path": chrome_path,
        })

    def log_connect(self, host: str, port: int, remote: bool = False):
        self._write({"event": "connect", "host": host, "port": port, "remote": remote})

    def log_signal(self, signal_name: str, exit_code: int):
        self._write({"event": "signal", "signal": signal_name, "exit_code": exit_code})

    def log_cleanup(self, killed: bool, profile_removed: bool, duration: float):
        self._write({
            "event": "cleanup",
            "killed": killed,
            "profile_removed": profile_removed,
            "duration": duration,
        })

    def log_error(self, failure: str, message: str, host: str | None = None,
                  port: int | None = None):
        self._write({
            "event": "error",
            "failure": failure,
            "message": message,
            "host": host,
            "port": port,
        })

    def close(self):
        if self._f is not None:
            try:
                self._f.flush()
                self._f.close()
            except Exception:
                pass
            self._f = None
