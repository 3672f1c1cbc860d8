"""Session keys: which terminal an invocation belongs to.

A key is stable for the lifetime of one interactive shell, so every frs
command typed into that shell shares one active context while other
terminals keep their own.
"""

from __future__ import annotations

import os
import re
from pathlib import Path

SESSION_ENV = "FRS_SESSION"
TERM_PID_ENV = "FRS_TERM_PID"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_key(key: str) -> str:
    return _UNSAFE.sub("_", key) or "_"


def process_start_time(pid: int) -> str | None:
    """Start time of ``pid`` from /proc (field 22), or None if unavailable.

    Pairing it with the pid keeps a recycled pid from inheriting a dead
    shell's context.
    """
    try:
        stat = Path(f"/proc/{pid}/stat").read_text()
    except OSError:
        return None
    # The command name (field 2) may contain spaces; fields resume after ")".
    fields = stat[stat.rfind(")") + 2 :].split()
    # fields[0] is field 3 (state), so field 22 is fields[19]
    return fields[19] if len(fields) > 19 else None


def resolve_session_key(explicit: str | None = None) -> str:
    """Pick the session key for this invocation.

    Order: an explicit key, $FRS_SESSION, then the shell's pid (taken from
    $FRS_TERM_PID or the parent process) qualified by its start time.
    """
    if explicit:
        return sanitize_key(explicit)

    from_env = os.environ.get(SESSION_ENV)
    if from_env:
        return sanitize_key(from_env)

    term_pid = os.environ.get(TERM_PID_ENV)
    pid = int(term_pid) if term_pid and term_pid.isdigit() else os.getppid()
    start = process_start_time(pid)
    return f"{pid}.{start}" if start else str(pid)
