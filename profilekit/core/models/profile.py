"""
Profile placement models — scopes, shells, packages and link state.

PowerShell looks for profile scripts in four slots per shell: the
cross product of (current user | all users) and (current host | all
hosts). Windows PowerShell 5.x and PowerShell 6+ keep separate folders,
so a placement is always a (ShellTarget, Scope) pair.
"""

from __future__ import annotations

import os
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict


class Scope(str, Enum):
    """Which users and hosts a profile applies to."""

    CURRENT_USER_CURRENT_HOST = "CurrentUserCurrentHost"
    CURRENT_USER_ALL_HOSTS = "CurrentUserAllHosts"
    ALL_USERS_CURRENT_HOST = "AllUsersCurrentHost"
    ALL_USERS_ALL_HOSTS = "AllUsersAllHosts"

    @property
    def all_users(self) -> bool:
        """Machine-wide placement (needs a system directory)."""
        return self in (Scope.ALL_USERS_CURRENT_HOST, Scope.ALL_USERS_ALL_HOSTS)

    @property
    def all_hosts(self) -> bool:
        return self in (Scope.CURRENT_USER_ALL_HOSTS, Scope.ALL_USERS_ALL_HOSTS)


class ShellTarget(str, Enum):
    """Which PowerShell edition a placement concerns."""

    WINDOWS_LEGACY = "WindowsLegacy"
    MODERN_SHELL = "ModernShell"

    @property
    def folder(self) -> str:
        """Directory name the edition reads profiles from."""
        if self is ShellTarget.WINDOWS_LEGACY:
            return "WindowsPowerShell"
        return "PowerShell"

    @property
    def label(self) -> str:
        if self is ShellTarget.WINDOWS_LEGACY:
            return "Windows PowerShell"
        return "PowerShell"


class PackageSpec(BaseModel):
    """A package the profile depends on, as known to the package manager."""

    model_config = ConfigDict(frozen=True)

    id: str
    interactive: bool = False
    name: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.id


class LinkKind(str, Enum):
    ABSENT = "absent"
    REGULAR_FILE = "regular_file"
    SYMBOLIC_LINK = "symbolic_link"


class LinkState(BaseModel):
    """Observed state of a profile path.

    A directory sitting where the profile should be is reported as
    ``REGULAR_FILE``: it is a foreign entry either way.
    """

    model_config = ConfigDict(frozen=True)

    kind: LinkKind
    target: str | None = None

    @classmethod
    def observe(cls, path: Path) -> LinkState:
        """Read the current state of ``path`` without following links."""
        if path.is_symlink():
            target = os.readlink(path)
            if target.startswith("\\\\?\\"):
                target = target[4:]
            if not os.path.isabs(target):
                target = os.path.join(path.parent, target)
            return cls(kind=LinkKind.SYMBOLIC_LINK, target=target)
        if path.exists():
            return cls(kind=LinkKind.REGULAR_FILE)
        return cls(kind=LinkKind.ABSENT)

    @property
    def absent(self) -> bool:
        return self.kind is LinkKind.ABSENT

    @property
    def is_link(self) -> bool:
        return self.kind is LinkKind.SYMBOLIC_LINK

    def points_to(self, source: Path) -> bool:
        """Whether this is a link whose target is ``source``."""
        if not self.is_link or self.target is None:
            return False
        return os.path.normcase(os.path.abspath(self.target)) == os.path.normcase(
            os.path.abspath(source)
        )

    def describe(self) -> str:
        if self.kind is LinkKind.SYMBOLIC_LINK:
            return f"link -> {self.target}"
        if self.kind is LinkKind.REGULAR_FILE:
            return "regular file"
        return "absent"
