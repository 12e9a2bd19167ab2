"""
Shared setup for the use cases: config, adapters, host probe.

Loaded once per command; the pieces are then handed to the
Orchestrator so nothing below it reads the environment again.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

from profilekit.adapters.registry import AdapterRegistry, default_registry
from profilekit.core.config.loader import load_config
from profilekit.core.engine.orchestrator import Orchestrator
from profilekit.core.services.capabilities import detect_host
from profilekit.core.services.interaction import Confirm, Notify, decline_all, log_notify

logger = logging.getLogger(__name__)


def build_orchestrator(
    config_path: Path | None = None,
    registry: AdapterRegistry | None = None,
    confirm: Confirm = decline_all,
    notify: Notify = log_notify,
    environ: Mapping[str, str] | None = None,
) -> Orchestrator:
    """Load config, wire adapters and probe the host.

    Raises:
        ConfigError: If the configuration file is missing or invalid.
    """
    config = load_config(config_path, environ=environ)
    if registry is None:
        registry = default_registry()
    capabilities = detect_host(registry, environ=environ)
    logger.debug("Orchestrator ready (elevated=%s)", capabilities.is_elevated)
    return Orchestrator(config, registry, capabilities, confirm, notify)
