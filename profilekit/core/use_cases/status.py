"""
Status use case — where the profile would go and what is there now.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from profilekit.adapters.registry import AdapterRegistry
from profilekit.core.config.loader import ConfigError
from profilekit.core.engine.orchestrator import StatusReport
from profilekit.core.services.policy import PolicyError
from profilekit.core.use_cases.wiring import build_orchestrator


@dataclass
class StatusResult:
    """Aggregated install status."""

    status: StatusReport | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        if self.error:
            return {"error": self.error}
        return self.status.to_dict() if self.status else {}


def get_status(
    scope: str = "current",
    shell: str = "current",
    config_path: Path | None = None,
    registry: AdapterRegistry | None = None,
    environ: Mapping[str, str] | None = None,
) -> StatusResult:
    """Observe profile targets, packages and theme without changing anything."""
    result = StatusResult()

    try:
        orchestrator = build_orchestrator(config_path, registry, environ=environ)
        result.status = orchestrator.status(scope, shell)
    except (ConfigError, PolicyError) as e:
        result.error = str(e)

    return result
