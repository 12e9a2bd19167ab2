"""
Install use case — link the profile and bring in its tools.

The top-level entry the CLI calls: loads config, probes the host,
runs the orchestrator and hands back a report. Per-item failures live
in the report; only configuration and token errors end up in
``error``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from profilekit.adapters.registry import AdapterRegistry
from profilekit.core.config.loader import ConfigError
from profilekit.core.engine.report import RunReport
from profilekit.core.services.interaction import Confirm, Notify, decline_all, log_notify
from profilekit.core.services.policy import PolicyError
from profilekit.core.use_cases.wiring import build_orchestrator


@dataclass
class InstallResult:
    """Result of an install run."""

    report: RunReport | None = None
    error: str | None = None


def run_install(
    scope: str = "current",
    shell: str = "current",
    config_path: Path | None = None,
    confirm: Confirm = decline_all,
    notify: Notify = log_notify,
    registry: AdapterRegistry | None = None,
    environ: Mapping[str, str] | None = None,
) -> InstallResult:
    """Install the profile bundle.

    Args:
        scope: Scope token (current, all-hosts, all-users, global).
        shell: Shell token (current, windows, pwsh, both).
        config_path: Optional explicit path to profilekit.yml.
        confirm: Yes/no prompt for overwrites.
        notify: Operator-facing progress output.
        registry: Optional pre-configured adapter registry.
        environ: Environment mapping (default: ``os.environ``).
    """
    result = InstallResult()

    try:
        orchestrator = build_orchestrator(config_path, registry, confirm, notify, environ)
        result.report = orchestrator.install(scope, shell)
    except (ConfigError, PolicyError) as e:
        result.error = str(e)

    return result
