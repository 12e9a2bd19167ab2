"""Prompt theme repository: clone on install, remove on uninstall."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import sys
from pathlib import Path

from profilekit.adapters.registry import AdapterRegistry
from profilekit.core.models.action import Action, Receipt
from profilekit.core.services.interaction import Confirm
from profilekit.core.services.link_reconciler import error_kind_for

logger = logging.getLogger(__name__)


def fetch_theme(registry: AdapterRegistry, url: str, dest: Path) -> Receipt:
    """Clone ``url`` into ``dest`` unless ``dest`` already exists.

    An existing checkout is left as is; it is not pulled.
    """
    metadata = {"dest": str(dest)}
    try:
        present = dest.is_symlink() or dest.exists()
    except OSError as e:
        return Receipt.failure(
            "git", "clone:theme",
            error=f"Cannot inspect {dest}: {e}",
            error_kind=error_kind_for(e),
            metadata=metadata,
        )
    if present:
        return Receipt.skip("git", "clone:theme", f"{dest} already present", metadata=metadata)

    action = Action(
        id="clone:theme",
        adapter="git",
        params={"operation": "clone", "url": url, "dest": str(dest), "depth": 1},
    )
    receipt = registry.execute_action(action)
    if receipt.failed:
        logger.warning("Theme clone failed (continuing): %s", receipt.error)
    return receipt


def _retry_writable(func, path, exc: BaseException) -> None:
    # git marks object files read-only, which Windows refuses to delete.
    # Only the entry that failed is touched, and never through a symlink.
    if not isinstance(exc, PermissionError) or os.path.islink(path):
        raise exc
    os.chmod(path, stat.S_IREAD | stat.S_IWRITE)
    func(path)


def _rmtree(path: Path) -> None:
    if sys.version_info >= (3, 12):
        shutil.rmtree(path, onexc=_retry_writable)
    else:
        shutil.rmtree(path, onerror=lambda func, p, info: _retry_writable(func, p, info[1]))


def remove_theme(dest: Path, confirm: Confirm) -> Receipt:
    """Delete the theme checkout after confirmation.

    A symlink at ``dest`` is refused rather than followed.
    """
    metadata = {"dest": str(dest)}
    try:
        is_link = dest.is_symlink()
        present = is_link or dest.exists()
    except OSError as e:
        return Receipt.failure(
            "theme", "remove:theme",
            error=f"Cannot inspect {dest}: {e}",
            error_kind=error_kind_for(e),
            metadata=metadata,
        )

    if not present:
        return Receipt.skip("theme", "remove:theme", f"{dest} not present", metadata=metadata)
    if is_link:
        return Receipt.failure(
            "theme", "remove:theme",
            error=f"{dest} is a symbolic link, not a theme checkout; not removing it",
            error_kind="io",
            metadata=metadata,
        )

    if not confirm(f"Remove theme directory {dest}?"):
        return Receipt.skip("theme", "remove:theme", f"{dest} kept", metadata=metadata)

    try:
        _rmtree(dest)
    except OSError as e:
        return Receipt.failure(
            "theme", "remove:theme",
            error=f"Could not remove {dest}: {e}",
            error_kind=error_kind_for(e),
            metadata=metadata,
        )

    return Receipt.success("theme", "remove:theme", f"Removed {dest}", metadata=metadata)
