"""
Orchestrator — sequences one install, uninstall or status run.

    install:   policy → banner → packages → theme → links
    uninstall: policy → banner → packages → links → theme
    status:    policy → read-only observation

The policy is resolved first, so an invalid token fails before any
package or file is touched. Everything after that reports through
receipts; the run always reaches the end.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from profilekit.adapters.registry import AdapterRegistry
from profilekit.core.engine.report import RunReport
from profilekit.core.models.config import InstallerConfig
from profilekit.core.models.profile import LinkState, ShellTarget
from profilekit.core.services.capabilities import HostCapabilities
from profilekit.core.services.interaction import Confirm, Notify, log_notify
from profilekit.core.services.link_reconciler import LinkReconciler
from profilekit.core.services.package_reconciler import PackageReconciler
from profilekit.core.services.policy import ResolvedPolicy, resolve_policy
from profilekit.core.services.profile_paths import profile_path, requires_elevation
from profilekit.core.services.theme import fetch_theme, remove_theme

logger = logging.getLogger(__name__)


@dataclass
class TargetStatus:
    shell: ShellTarget
    path: Path
    state: LinkState
    linked_to_source: bool

    def to_dict(self) -> dict:
        return {
            "shell": self.shell.value,
            "path": str(self.path),
            "state": self.state.kind.value,
            "link_target": self.state.target,
            "linked_to_source": self.linked_to_source,
        }


@dataclass
class StatusReport:
    """Read-only view of where a run would act and what is there now."""

    policy: ResolvedPolicy
    capabilities: HostCapabilities
    profile_source: Path
    targets: list[TargetStatus] = field(default_factory=list)
    packages: dict[str, bool | None] = field(default_factory=dict)
    theme_path: Path | None = None
    theme_present: bool = False

    def to_dict(self) -> dict:
        return {
            "policy": self.policy.to_dict(),
            "capabilities": self.capabilities.to_dict(),
            "profile_source": str(self.profile_source),
            "targets": [t.to_dict() for t in self.targets],
            "packages": self.packages,
            "theme": {"path": str(self.theme_path), "present": self.theme_present},
        }


class Orchestrator:
    """Runs the install, uninstall and status flows for one config."""

    def __init__(
        self,
        config: InstallerConfig,
        registry: AdapterRegistry,
        capabilities: HostCapabilities,
        confirm: Confirm,
        notify: Notify = log_notify,
    ):
        self.config = config
        self.capabilities = capabilities
        self._registry = registry
        self._confirm = confirm
        self._notify = notify
        self.packages = PackageReconciler(registry, confirm, notify)
        self.links = LinkReconciler(registry, capabilities, confirm)

    def resolve(self, scope_token: str, shell_token: str) -> ResolvedPolicy:
        return resolve_policy(scope_token, shell_token, self.capabilities.shell_major)

    def targets(self, policy: ResolvedPolicy) -> list[tuple[ShellTarget, Path]]:
        return [(s, profile_path(s, policy.scope, self.config.roots)) for s in policy.shells]

    def banner(self, verb: str, policy: ResolvedPolicy) -> None:
        """Tell the operator what is about to happen. Informational only."""
        shells = ", ".join(s.label for s in policy.shells)
        self._notify(f"{verb} profile for {shells} ({policy.scope.value})")
        self._notify(f"Running under: {self.capabilities.shell_label}")
        if requires_elevation(policy.scope) and not self.capabilities.is_elevated:
            self._notify("Machine-wide scope: administrator approval will be requested.")

    # ── Flows ───────────────────────────────────────────────────

    def install(self, scope_token: str = "current", shell_token: str = "current") -> RunReport:
        policy = self.resolve(scope_token, shell_token)
        report = self._new_report("install", policy)
        self.banner("Installing", policy)

        report.add("packages", *self.packages.reconcile_install(self.config.packages))

        self._notify(f"Fetching theme into {self.config.theme_path}")
        report.add("theme", fetch_theme(self._registry, self.config.theme_repository, self.config.theme_path))

        machine = requires_elevation(policy.scope)
        for shell, path in self.targets(policy):
            receipt = self.links.install(
                self.config.profile_source, path, machine_scope=machine, label=shell.value,
            )
            self._notify(f"{shell.label}: {receipt.output or receipt.error}")
            report.add("links", receipt)

        logger.info("Install finished: %s", report.status)
        return report

    def uninstall(self, scope_token: str = "current", shell_token: str = "current") -> RunReport:
        policy = self.resolve(scope_token, shell_token)
        report = self._new_report("uninstall", policy)
        self.banner("Removing", policy)

        report.add("packages", *self.packages.reconcile_uninstall(self.config.packages))

        machine = requires_elevation(policy.scope)
        for shell, path in self.targets(policy):
            receipt = self.links.uninstall(path, machine_scope=machine, label=shell.value)
            self._notify(f"{shell.label}: {receipt.output or receipt.error}")
            report.add("links", receipt)

        report.add("theme", remove_theme(self.config.theme_path, self._confirm))

        logger.info("Uninstall finished: %s", report.status)
        return report

    def status(self, scope_token: str = "current", shell_token: str = "current") -> StatusReport:
        policy = self.resolve(scope_token, shell_token)
        source = self.config.profile_source
        result = StatusReport(
            policy=policy,
            capabilities=self.capabilities,
            profile_source=source,
            theme_path=self.config.theme_path,
            theme_present=self.config.theme_path.exists(),
        )
        for shell, path in self.targets(policy):
            state = LinkState.observe(path)
            result.targets.append(TargetStatus(shell, path, state, state.points_to(source)))
        for spec in self.config.packages:
            result.packages[spec.id] = self.packages.is_installed(spec)
        return result

    def _new_report(self, command: str, policy: ResolvedPolicy) -> RunReport:
        return RunReport(
            command=command,
            scope=policy.scope.value,
            shells=[s.value for s in policy.shells],
        )
