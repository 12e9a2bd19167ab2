"""
Blocking subprocess calls for the adapters.

winget, git and the elevation wrapper all go through ``run_command``.
A command that cannot start, times out or exits non-zero is reported
in the returned dict; only programming errors propagate.
"""

from __future__ import annotations

import logging
import subprocess
import time
from typing import Any

logger = logging.getLogger(__name__)

# Keep the end of long tool output; winget prints progress bars first.
OUTPUT_TAIL_CHARS = 2000


def _tail(text: str | None) -> str:
    return text[-OUTPUT_TAIL_CHARS:] if text else ""


def _result(
    ok: bool,
    returncode: int | None,
    *,
    error: str | None = None,
    stdout: str = "",
    stderr: str = "",
    elapsed_ms: int = 0,
) -> dict[str, Any]:
    return {
        "ok": ok,
        "returncode": returncode,
        "error": error,
        "stdout": stdout,
        "stderr": stderr,
        "elapsed_ms": elapsed_ms,
    }


def run_command(cmd: list[str], *, timeout: int = 600) -> dict[str, Any]:
    """Run ``cmd`` and wait for it.

    Returns a dict with ``ok``, ``returncode``, ``error``, ``stdout``,
    ``stderr`` and ``elapsed_ms``. ``returncode`` is None when the
    process never finished (missing executable, timeout, OS error).
    Output is decoded leniently and trimmed to its last
    ``OUTPUT_TAIL_CHARS`` characters.
    """
    logger.debug("exec (timeout %ss): %s", timeout, subprocess.list2cmdline(cmd))

    started = time.monotonic()
    try:
        proc = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
        )
    except FileNotFoundError:
        return _result(False, None, error=f"Command not found: {cmd[0]}")
    except subprocess.TimeoutExpired:
        logger.warning("%s gave no result within %ss", cmd[0], timeout)
        return _result(False, None, error=f"Command timed out ({timeout}s)")
    except OSError as e:
        logger.exception("Could not start %s", cmd[0])
        return _result(False, None, error=str(e))

    elapsed_ms = int((time.monotonic() - started) * 1000)
    ok = proc.returncode == 0
    if not ok:
        logger.debug("%s exited %s after %sms", cmd[0], proc.returncode, elapsed_ms)
    return _result(
        ok,
        proc.returncode,
        error=None if ok else f"Command failed (exit {proc.returncode})",
        stdout=_tail(proc.stdout),
        stderr=_tail(proc.stderr),
        elapsed_ms=elapsed_ms,
    )
