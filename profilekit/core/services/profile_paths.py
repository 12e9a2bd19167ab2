"""Profile path resolution: (ShellTarget, Scope) to the file PowerShell loads."""

from __future__ import annotations

from pathlib import Path

from profilekit.core.models.config import ProfileRoots
from profilekit.core.models.profile import Scope, ShellTarget

CURRENT_HOST_FILENAME = "Microsoft.PowerShell_profile.ps1"
ALL_HOSTS_FILENAME = "profile.ps1"


def profile_filename(scope: Scope) -> str:
    return ALL_HOSTS_FILENAME if scope.all_hosts else CURRENT_HOST_FILENAME


def profile_path(shell: ShellTarget, scope: Scope, roots: ProfileRoots) -> Path:
    """Absolute profile path for a shell and scope.

    Pure: the same inputs always give the same path. Install, uninstall
    and status all go through here so they agree on the location.
    """
    base = roots.system if scope.all_users else roots.documents
    return base / shell.folder / profile_filename(scope)


def requires_elevation(scope: Scope) -> bool:
    """Whether writing a profile for ``scope`` needs administrator rights."""
    return scope.all_users
