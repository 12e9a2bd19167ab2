"""
Git adapter — version control operations.

Only what the installer needs: cloning the theme repository. Uses the
git CLI — never raw API calls.

Action params:
    operation (str): 'clone'.
    url (str): Repository URL.
    dest (str): Destination directory (must not exist yet).
    depth (int): Optional shallow-clone depth.
    timeout (int): Timeout in seconds (default: 300).
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from profilekit.adapters.base import Adapter, ExecutionContext
from profilekit.core.execution.subprocess_runner import run_command
from profilekit.core.models.action import Receipt

logger = logging.getLogger(__name__)


class GitAdapter(Adapter):
    """Git version control operations."""

    operations = frozenset({"clone"})
    required_params = {"clone": ("url", "dest")}

    @property
    def name(self) -> str:
        return "git"

    def is_available(self) -> bool:
        return shutil.which("git") is not None

    def execute(self, context: ExecutionContext) -> Receipt:
        return self._clone(context)

    # ── Operations ──────────────────────────────────────────────

    def _clone(self, ctx: ExecutionContext) -> Receipt:
        url = ctx.params["url"]
        dest = Path(ctx.params["dest"])
        depth = ctx.params.get("depth")

        args = ["clone"]
        if depth:
            args += ["--depth", str(depth)]
        args += [url, str(dest)]

        try:
            dest.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=f"Cannot create {dest.parent}: {e}",
                error_kind="io",
            )

        result = self._git(args, timeout=ctx.params.get("timeout", 300))
        if not result["ok"]:
            return Receipt.failure(
                adapter=self.name,
                action_id=ctx.action.id,
                error=result.get("stderr", "").strip() or result["error"],
                error_kind="external_tool",
                metadata={"url": url, "dest": str(dest)},
            )

        return Receipt.success(
            adapter=self.name,
            action_id=ctx.action.id,
            output=f"Cloned {url} into {dest}",
            duration_ms=result.get("elapsed_ms", 0),
            metadata={"url": url, "dest": str(dest)},
        )

    # ── Helpers ─────────────────────────────────────────────────

    def _git(self, args: list[str], timeout: int = 300) -> dict:
        """Run a git command through the subprocess runner."""
        return run_command(["git", *args], timeout=timeout)
