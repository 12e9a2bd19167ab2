"""
Elevation adapter — run one command with administrator rights.

On Windows the command is started through ``Start-Process -Verb RunAs``
(UAC prompt) from a non-elevated PowerShell that waits for it and exits
with the child's exit code, so the caller gets a real result across the
privilege boundary. Elsewhere the command is run under ``sudo``.

Action params:
    operation (str): 'run'.
    command (list[str]): Command to run elevated.
    timeout (int): Timeout in seconds (default: 300).
"""

from __future__ import annotations

import logging
import shutil
import sys

from profilekit.adapters.base import Adapter, ExecutionContext
from profilekit.core.execution.subprocess_runner import run_command
from profilekit.core.models.action import Receipt

logger = logging.getLogger(__name__)

# ERROR_CANCELLED: the UAC prompt was dismissed.
UAC_CANCELLED_EXIT = 1223

_DENIED_MARKERS = ("incorrect password", "sorry", "a password is required", "not in the sudoers")


def _ps_quote(value: str) -> str:
    """Single-quote a string for a PowerShell command line."""
    return "'" + value.replace("'", "''") + "'"


class ElevationAdapter(Adapter):
    """Run a command elevated and wait for its exit code."""

    operations = frozenset({"run"})
    required_params = {"run": ("command",)}

    def __init__(self, platform: str | None = None):
        self._platform = platform or sys.platform

    @property
    def name(self) -> str:
        return "elevation"

    @property
    def _windows(self) -> bool:
        return self._platform.startswith("win")

    def is_available(self) -> bool:
        if self._windows:
            return shutil.which("powershell") is not None or shutil.which("pwsh") is not None
        return shutil.which("sudo") is not None

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        ok, error = super().validate(context)
        if ok and not isinstance(context.params["command"], list):
            return False, "Param 'command' must be a list"
        return ok, error

    def execute(self, context: ExecutionContext) -> Receipt:
        command = [str(part) for part in context.params["command"]]
        timeout = context.params.get("timeout", 300)

        wrapped = self.build_command(command)
        logger.info("Requesting elevation for: %s", " ".join(command))
        result = run_command(wrapped, timeout=timeout)

        returncode = result.get("returncode")
        metadata = {"command": command, "return_code": returncode}

        if result["ok"]:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=result.get("stdout", "").strip(),
                duration_ms=result.get("elapsed_ms", 0),
                metadata=metadata,
            )

        stderr = result.get("stderr", "").strip()
        if returncode == UAC_CANCELLED_EXIT or any(m in stderr.lower() for m in _DENIED_MARKERS):
            return Receipt.failure(
                adapter=self.name,
                action_id=context.action.id,
                error="Elevation was denied",
                error_kind="permission",
                metadata=metadata,
            )

        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=stderr or result["error"],
            error_kind="external_tool" if returncode is None else "io",
            metadata=metadata,
        )

    def build_command(self, command: list[str]) -> list[str]:
        """Wrap ``command`` so it runs elevated and reports its exit code."""
        if not self._windows:
            return ["sudo", *command]

        exe, *args = command
        arg_list = ",".join(_ps_quote(f'"{a}"') for a in args) or "@()"
        script = (
            "try { "
            f"$p = Start-Process -FilePath {_ps_quote(exe)} -ArgumentList {arg_list} "
            "-Verb RunAs -Wait -PassThru -WindowStyle Hidden; "
            "exit $p.ExitCode "
            "} catch { "
            "[Console]::Error.WriteLine($_.Exception.Message); "
            f"exit {UAC_CANCELLED_EXIT} "
            "}"
        )
        shell = "powershell" if shutil.which("powershell") else "pwsh"
        return [shell, "-NoProfile", "-NonInteractive", "-Command", script]
