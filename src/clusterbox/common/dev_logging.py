"""Session logging for clustering runs.

Mirrors stdout/stderr into a timestamped log file under `logs/` while leaving
console output untouched, and attaches a file handler so `logging` records from
the pipeline land in the same file. Enabled by default; disable with
`CLUSTERBOX_DEV_LOGGING_ENABLED=false`.
"""
from __future__ import annotations

import atexit
import io
import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Mapping, Optional, TextIO


_CONFIG_KEYS = [
    "CLUSTERBOX_CLUSTER_COUNT",
    "CLUSTERBOX_EMAIL_COUNT",
    "CLUSTERBOX_BM25K",
    "CLUSTERBOX_TOTAL_ROUNDS",
    "CLUSTERBOX_MAX_ITERATIONS",
    "CLUSTERBOX_RANDOM_SEED",
    "CLUSTERBOX_PARALLEL_ROUNDS",
    "CLUSTERBOX_HOST",
    "CLUSTERBOX_PORT",
]

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_session: dict[str, object] = {}


def _is_enabled(env: Mapping[str, str]) -> bool:
    raw = env.get("CLUSTERBOX_DEV_LOGGING_ENABLED")
    if raw is None:
        return True
    return raw.strip().lower() in {"1", "true", "yes"}


def _resolve_logs_dir(env: Mapping[str, str]) -> Path:
    if env.get("CLUSTERBOX_LOG_DIR"):
        return Path(env["CLUSTERBOX_LOG_DIR"]).expanduser().resolve()
    return Path.cwd() / "logs"


def _format_header(session_label: str, start_time: datetime, env: Mapping[str, str]) -> str:
    lines = [
        f"===== ClusterBox {session_label} session =====",
        f"Start: {start_time.strftime('%Y-%m-%d %H:%M:%S')}",
        f"CWD:   {Path.cwd()}",
        "Settings:",
    ]
    for key in _CONFIG_KEYS:
        if key in env:
            lines.append(f"  {key}: {env[key]}")
    lines.append("=" * 40)
    return "\n".join(lines) + "\n"


class TeeStream(io.TextIOBase):
    """Mirror writes to both the original stream and a log file."""

    def __init__(self, original: TextIO, log_file: TextIO) -> None:
        self._original = original
        self._log_file = log_file
        self._log_disabled = False

    @property
    def encoding(self) -> Optional[str]:
        return getattr(self._original, "encoding", None)

    def write(self, s: str) -> int:
        if not isinstance(s, str):
            s = str(s)
        written = self._original.write(s)
        if not self._log_disabled:
            try:
                self._log_file.write(s)
            except (OSError, ValueError) as exc:
                # Keep the console alive; stop mirroring after the first failure.
                self._log_disabled = True
                self._original.write(f"\n[CLUSTERBOX-LOG] Logging to file disabled: {exc}\n")
        return written

    def flush(self) -> None:
        self._original.flush()
        if not self._log_disabled:
            try:
                self._log_file.flush()
            except (OSError, ValueError):
                self._log_disabled = True

    def isatty(self) -> bool:
        return getattr(self._original, "isatty", lambda: False)()


def close_dev_logging() -> None:
    """Restore the original streams and close the session log file."""
    handler = _session.get("handler")
    if isinstance(handler, logging.Handler):
        root = logging.getLogger()
        root.removeHandler(handler)
        root.setLevel(_session.get("root_level", root.level))
        handler.close()

    for name in ("stdout", "stderr"):
        tee = _session.get(f"tee_{name}")
        original = _session.get(f"original_{name}")
        if tee is not None and getattr(sys, name) is tee and original is not None:
            setattr(sys, name, original)

    log_file = _session.get("log_file")
    if log_file is not None and not log_file.closed:
        log_file.close()

    _session.clear()


def init_dev_logging(
    session_label: str = "clustering",
    env: Optional[Mapping[str, str]] = None,
    level: int = logging.INFO,
) -> Optional[Path]:
    """Start mirroring console output and log records to a session log file.

    Returns:
        Path of the log file, or None if logging is disabled or already active
    """
    env = os.environ if env is None else env

    if _session or not _is_enabled(env):
        return None

    start_time = datetime.now()
    logs_dir = _resolve_logs_dir(env)
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        log_path = logs_dir / f"{start_time.strftime('%Y%m%d_%H%M%S')}_clusterbox.log"
        log_file = log_path.open("a", encoding="utf-8")
        log_file.write(_format_header(session_label, start_time, env))
        log_file.flush()
    except OSError as exc:
        sys.stdout.write(f"[CLUSTERBOX-LOG] Could not open session log in {logs_dir}: {exc}\n")
        return None

    handler = logging.StreamHandler(log_file)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    handler.setLevel(level)
    root = logging.getLogger()
    root_level = root.level
    root.addHandler(handler)
    if root.level > level or root.level == logging.NOTSET:
        root.setLevel(level)

    tee_stdout = TeeStream(sys.stdout, log_file)
    tee_stderr = TeeStream(sys.stderr, log_file)
    _session.update(
        {
            "log_file": log_file,
            "log_path": log_path,
            "handler": handler,
            "root_level": root_level,
            "tee_stdout": tee_stdout,
            "tee_stderr": tee_stderr,
            "original_stdout": sys.stdout,
            "original_stderr": sys.stderr,
        }
    )
    sys.stdout = tee_stdout  # type: ignore[assignment]
    sys.stderr = tee_stderr  # type: ignore[assignment]

    atexit.register(close_dev_logging)
    return log_path
