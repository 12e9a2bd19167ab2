"""
winget adapter — the system package manager.

Answers "is package X installed" and installs or removes it. Agreement
prompts are always pre-accepted so installs can run unattended; the
only interaction left is the installer UI of packages flagged
``interactive``.

Action params:
    operation (str): One of 'query', 'install', 'uninstall'.
    package_id (str): winget package identifier (e.g. 'Git.Git').
    interactive (bool): Pass ``--interactive`` to install (default: False).
    timeout (int): Timeout in seconds (default: 900).
"""

from __future__ import annotations

import logging
import shutil

from profilekit.adapters.base import Adapter, ExecutionContext
from profilekit.core.execution.subprocess_runner import run_command
from profilekit.core.models.action import Receipt

logger = logging.getLogger(__name__)


class WingetAdapter(Adapter):
    """Package queries and installs through the winget CLI."""

    operations = frozenset({"query", "install", "uninstall"})
    required_params = {
        "query": ("package_id",),
        "install": ("package_id",),
        "uninstall": ("package_id",),
    }

    def __init__(self, executable: str = "winget"):
        self._executable = executable

    @property
    def name(self) -> str:
        return "winget"

    def is_available(self) -> bool:
        return shutil.which(self._executable) is not None

    def execute(self, context: ExecutionContext) -> Receipt:
        operation = context.operation
        package_id = context.params["package_id"]
        timeout = context.params.get("timeout", 900)

        cmd = self.build_command(operation, package_id, context.params.get("interactive", False))
        result = run_command(cmd, timeout=timeout)

        if operation == "query":
            return self._query_receipt(context, package_id, result)

        if result["ok"]:
            return Receipt.success(
                adapter=self.name,
                action_id=context.action.id,
                output=result.get("stdout", "").strip(),
                duration_ms=result.get("elapsed_ms", 0),
                metadata={"package_id": package_id, "return_code": 0},
            )

        error = result.get("stderr", "").strip() or result.get("stdout", "").strip() or result["error"]
        return Receipt.failure(
            adapter=self.name,
            action_id=context.action.id,
            error=f"winget {operation} {package_id} failed: {error}",
            error_kind="external_tool",
            metadata={"package_id": package_id, "return_code": result.get("returncode")},
        )

    def build_command(self, operation: str, package_id: str, interactive: bool = False) -> list[str]:
        """The winget command line for one operation."""
        base = [self._executable]
        if operation == "query":
            return base + [
                "list", "--id", package_id, "--exact",
                "--accept-source-agreements", "--disable-interactivity",
            ]
        if operation == "install":
            cmd = base + [
                "install", "--id", package_id, "--exact",
                "--accept-package-agreements", "--accept-source-agreements",
            ]
            if interactive:
                cmd.append("--interactive")
            return cmd
        return base + [
            "uninstall", "--id", package_id, "--exact",
            "--accept-source-agreements",
        ]

    def _query_receipt(self, ctx: ExecutionContext, package_id: str, result: dict) -> Receipt:
        # winget exits non-zero when the package is simply not installed,
        # so only a missing or hung winget is a failed query.
        if result.get("returncode") is None:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=result["error"],
                error_kind="external_tool",
                metadata={"package_id": package_id},
            )

        installed = result["ok"] and package_id.lower() in result.get("stdout", "").lower()
        logger.debug("winget query %s: installed=%s", package_id, installed)
        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output="installed" if installed else "not installed",
            metadata={"package_id": package_id, "installed": installed},
        )
