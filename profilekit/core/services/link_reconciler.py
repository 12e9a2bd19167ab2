"""
Link reconciliation — make a profile path a symlink to the bundle's
profile, or take it away again.

States:

    Absent ─────────────── install ──▶ SymbolicLink(source)
    RegularFile / other link ─ install, confirmed ──▶ SymbolicLink(source)
    SymbolicLink / RegularFile ─ uninstall ──▶ Absent

Machine-wide profile folders need administrator rights. When the
process is not elevated, the filesystem work is handed to an elevated
copy of this CLI (the hidden ``link`` / ``unlink`` commands) through the
elevation adapter. The child's exit code decides the outcome; the
target is then observed again to confirm it.
"""

from __future__ import annotations

import logging
import os
import shutil
import sys
from pathlib import Path

from profilekit.adapters.registry import AdapterRegistry
from profilekit.core.models.action import Action, ErrorKind, Receipt
from profilekit.core.models.profile import LinkState
from profilekit.core.services.capabilities import HostCapabilities
from profilekit.core.services.interaction import Confirm

logger = logging.getLogger(__name__)

ADAPTER_NAME = "links"

# Windows ERROR_ACCESS_DENIED and ERROR_PRIVILEGE_NOT_HELD.
_PRIVILEGE_WINERRORS = {5, 1314}


class LinkError(OSError):
    """Raised by the low-level helpers when the target is in the way."""


# ── Filesystem primitives ───────────────────────────────────────────
#
# Used directly for user-scoped targets and by the hidden CLI commands
# inside the elevated child.


def _remove_entry(path: Path) -> None:
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


def create_link(source: Path, target: Path, replace: bool = False) -> None:
    """Create ``target`` as a symlink to ``source``.

    Creates missing parent directories. An existing entry at ``target``
    is removed first when ``replace`` is set, otherwise LinkError.
    """
    source = Path(os.path.abspath(source))
    target.parent.mkdir(parents=True, exist_ok=True)

    if not LinkState.observe(target).absent:
        if not replace:
            raise LinkError(f"{target} already exists")
        _remove_entry(target)

    os.symlink(source, target)
    logger.debug("Created symlink %s -> %s", target, source)


def remove_link(target: Path) -> bool:
    """Remove whatever is at ``target``. Returns False if it was absent."""
    if LinkState.observe(target).absent:
        return False
    _remove_entry(target)
    logger.debug("Removed %s", target)
    return True


def error_kind_for(error: OSError) -> ErrorKind:
    """``permission`` when the OS refused for lack of rights, else ``io``."""
    if isinstance(error, PermissionError):
        return "permission"
    if getattr(error, "winerror", None) in _PRIVILEGE_WINERRORS:
        return "permission"
    return "io"


# ── Reconciler ──────────────────────────────────────────────────────


class LinkReconciler:
    """Install and remove profile symlinks, one target at a time.

    Every call returns exactly one Receipt; an OSError for one target
    never stops the others.
    """

    def __init__(
        self,
        registry: AdapterRegistry,
        capabilities: HostCapabilities,
        confirm: Confirm,
        python_executable: str | None = None,
    ):
        self._registry = registry
        self._capabilities = capabilities
        self._confirm = confirm
        self._python = python_executable or sys.executable

    def install(self, source: Path, target: Path, *, machine_scope: bool, label: str) -> Receipt:
        """Point ``target`` at ``source``."""
        action_id = f"link:{label}"
        try:
            return self._install(source, target, machine_scope=machine_scope, action_id=action_id)
        except OSError as e:
            return self._os_failure(action_id, f"Could not link {target}", e, target)

    def uninstall(self, target: Path, *, machine_scope: bool, label: str) -> Receipt:
        """Return ``target`` to Absent. An absent target is a no-op."""
        action_id = f"unlink:{label}"
        try:
            return self._uninstall(target, machine_scope=machine_scope, action_id=action_id)
        except OSError as e:
            return self._os_failure(action_id, f"Could not remove {target}", e, target)

    @staticmethod
    def _os_failure(action_id: str, what: str, error: OSError, target: Path) -> Receipt:
        logger.warning("%s: %s", what, error)
        return Receipt.failure(
            ADAPTER_NAME, action_id,
            error=f"{what}: {error}",
            error_kind=error_kind_for(error),
            metadata={"target": str(target)},
        )

    def _install(self, source: Path, target: Path, *, machine_scope: bool, action_id: str) -> Receipt:
        source = Path(os.path.abspath(source))
        metadata = {"source": str(source), "target": str(target)}

        if not source.is_file():
            return Receipt.failure(
                ADAPTER_NAME, action_id,
                error=f"Profile source not found: {source}",
                error_kind="io",
                metadata=metadata,
            )

        state = LinkState.observe(target)
        if state.points_to(source):
            return Receipt.skip(ADAPTER_NAME, action_id, f"{target} already linked", metadata=metadata)

        replace = not state.absent
        if replace:
            question = f"{target} already exists ({state.describe()}). Overwrite it?"
            if not self._confirm(question):
                logger.info("Left %s untouched", target)
                return Receipt.skip(
                    ADAPTER_NAME, action_id,
                    f"{target} exists, skipping",
                    metadata={**metadata, "state": state.kind.value},
                )

        if machine_scope and not self._capabilities.is_elevated:
            args = ["link", "--source", str(source), "--target", str(target)]
            if replace:
                args.append("--replace")
            return self._run_elevated(
                action_id, args, target,
                done=lambda s: s.points_to(source),
                success=f"Linked {target} -> {source} (elevated)",
                metadata=metadata,
            )

        create_link(source, target, replace=replace)
        verb = "Replaced" if replace else "Linked"
        return Receipt.success(ADAPTER_NAME, action_id, f"{verb} {target} -> {source}", metadata=metadata)

    def _uninstall(self, target: Path, *, machine_scope: bool, action_id: str) -> Receipt:
        state = LinkState.observe(target)
        metadata = {"target": str(target), "state": state.kind.value}

        if state.absent:
            return Receipt.skip(ADAPTER_NAME, action_id, f"{target} not present, nothing to remove", metadata=metadata)

        what = "link" if state.is_link else "regular file (not a link)"

        if machine_scope and not self._capabilities.is_elevated:
            return self._run_elevated(
                action_id, ["unlink", "--target", str(target)], target,
                done=lambda s: s.absent,
                success=f"Removed {what} {target} (elevated)",
                metadata=metadata,
            )

        remove_link(target)
        return Receipt.success(ADAPTER_NAME, action_id, f"Removed {what} {target}", metadata=metadata)

    # ── Elevation ───────────────────────────────────────────────

    def _run_elevated(self, action_id, args, target, *, done, success, metadata) -> Receipt:
        command = [self._python, "-m", "profilekit.main", *args]
        action = Action(
            id=action_id,
            adapter="elevation",
            params={"operation": "run", "command": command},
        )
        logger.info("Not elevated; delegating %s for %s", args[0], target)
        receipt = self._registry.execute_action(action)

        after = LinkState.observe(target)
        metadata = {**metadata, "elevated": True, "observed": after.kind.value}
        confirmed = done(after)

        if receipt.ok and confirmed:
            return Receipt.success(ADAPTER_NAME, action_id, success, metadata=metadata)

        if receipt.ok:
            return Receipt.failure(
                ADAPTER_NAME, action_id,
                error=f"Elevated helper reported success but {target} is {after.describe()}",
                error_kind="io",
                metadata=metadata,
            )

        if confirmed:
            logger.warning(
                "Elevated helper failed (%s) but %s is in the expected state",
                receipt.error, target,
            )
            return Receipt.success(ADAPTER_NAME, action_id, success, metadata=metadata)

        return Receipt.failure(
            ADAPTER_NAME, action_id,
            error=receipt.error or "Elevated helper failed",
            error_kind=receipt.error_kind or "unexpected",
            metadata=metadata,
        )
