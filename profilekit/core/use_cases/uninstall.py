"""
Uninstall use case — remove the profile link, its tools and the theme.
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
class UninstallResult:
    """Result of an uninstall run."""

    report: RunReport | None = None
    error: str | None = None


def run_uninstall(
    scope: str = "current",
    shell: str = "current",
    config_path: Path | None = None,
    confirm: Confirm = decline_all,
    notify: Notify = log_notify,
    registry: AdapterRegistry | None = None,
    environ: Mapping[str, str] | None = None,
) -> UninstallResult:
    """Reverse an install.

    Packages and the theme directory are only removed when ``confirm``
    says yes; profile links are removed unconditionally.
    """
    result = UninstallResult()

    try:
        orchestrator = build_orchestrator(config_path, registry, confirm, notify, environ)
        result.report = orchestrator.uninstall(scope, shell)
    except (ConfigError, PolicyError) as e:
        result.error = str(e)

    return result
