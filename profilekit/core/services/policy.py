"""
Policy resolution — CLI tokens to a scope and the shells to act on.

Pure mapping, no side effects. Runs once per invocation, before
anything touches the filesystem or the package manager.
"""

from __future__ import annotations

from dataclasses import dataclass

from profilekit.core.models.profile import Scope, ShellTarget

# Major version at which PowerShell became the cross-platform edition.
MODERN_SHELL_MAJOR = 6

SCOPE_TOKENS: dict[str, Scope] = {
    "current": Scope.CURRENT_USER_CURRENT_HOST,
    "all-hosts": Scope.CURRENT_USER_ALL_HOSTS,
    "all-users": Scope.ALL_USERS_CURRENT_HOST,
    "global": Scope.ALL_USERS_ALL_HOSTS,
}

SHELL_TOKENS: tuple[str, ...] = ("current", "windows", "pwsh", "both")


class PolicyError(ValueError):
    """Raised for a scope or shell token outside the accepted set."""


@dataclass(frozen=True)
class ResolvedPolicy:
    """The scope and ordered shell targets for one run."""

    scope: Scope
    shells: tuple[ShellTarget, ...]

    @property
    def machine_wide(self) -> bool:
        return self.scope.all_users

    def to_dict(self) -> dict:
        return {
            "scope": self.scope.value,
            "shells": [s.value for s in self.shells],
        }


def resolve_scope(token: str) -> Scope:
    """Map a scope token to a Scope."""
    try:
        return SCOPE_TOKENS[token.lower()]
    except KeyError:
        raise PolicyError(
            f"Unknown profile scope '{token}'. Valid: {', '.join(SCOPE_TOKENS)}"
        ) from None


def shell_for_version(major: int | None) -> ShellTarget:
    """Edition of a running shell. Unknown counts as modern."""
    if major is None or major >= MODERN_SHELL_MAJOR:
        return ShellTarget.MODERN_SHELL
    return ShellTarget.WINDOWS_LEGACY


def resolve_shells(token: str, host_major: int | None) -> tuple[ShellTarget, ...]:
    """Map a shell token to the ordered shell targets.

    ``current`` follows the running shell's major version.
    """
    token = token.lower()
    if token == "current":
        return (shell_for_version(host_major),)
    if token == "windows":
        return (ShellTarget.WINDOWS_LEGACY,)
    if token == "pwsh":
        return (ShellTarget.MODERN_SHELL,)
    if token == "both":
        return (ShellTarget.WINDOWS_LEGACY, ShellTarget.MODERN_SHELL)
    raise PolicyError(f"Unknown shell '{token}'. Valid: {', '.join(SHELL_TOKENS)}")


def resolve_policy(scope_token: str, shell_token: str, host_major: int | None) -> ResolvedPolicy:
    """Resolve both tokens; fails before any side effect on a bad token."""
    return ResolvedPolicy(
        scope=resolve_scope(scope_token),
        shells=resolve_shells(shell_token, host_major),
    )
