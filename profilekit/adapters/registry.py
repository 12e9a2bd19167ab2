"""
AdapterRegistry — routes each Action to the adapter it names.

Reconcilers hold a registry, never an adapter. ``execute_action`` turns
every problem (unknown adapter, rejected params, an adapter that raises)
into a failed Receipt, so callers only ever branch on receipt status.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from profilekit.adapters.base import Adapter, ExecutionContext
from profilekit.core.models.action import Action, Receipt

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """Name → adapter table plus the single dispatch path."""

    def __init__(self, *adapters: Adapter) -> None:
        self._adapters: dict[str, Adapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: Adapter) -> None:
        if adapter.name in self._adapters:
            logger.warning("Replacing adapter %r", adapter.name)
        self._adapters[adapter.name] = adapter
        logger.debug("Adapter %r registered (%s)", adapter.name, type(adapter).__name__)

    def get(self, name: str) -> Adapter | None:
        return self._adapters.get(name)

    def names(self) -> list[str]:
        """Registered adapter names, in registration order."""
        return list(self._adapters)

    def probe(self) -> dict[str, dict[str, Any]]:
        """Availability of each adapter's backing tool.

        A probe that raises counts as unavailable.
        """
        report: dict[str, dict[str, Any]] = {}
        for name, adapter in self._adapters.items():
            try:
                available = bool(adapter.is_available())
            except Exception as e:
                logger.debug("Availability probe for %s raised: %s", name, e)
                available = False
            report[name] = {"available": available, "type": type(adapter).__name__}
        return report

    def available(self) -> frozenset[str]:
        """Names of adapters whose tool is present on this host."""
        return frozenset(name for name, info in self.probe().items() if info["available"])

    def execute_action(self, action: Action) -> Receipt:
        """Validate and run ``action``; the result is always a Receipt."""
        started = time.monotonic()
        receipt = self._dispatch(action)
        receipt.duration_ms = int((time.monotonic() - started) * 1000)
        logger.debug("%s:%s -> %s", action.adapter, action.id, receipt.status)
        return receipt

    def _dispatch(self, action: Action) -> Receipt:
        adapter = self._adapters.get(action.adapter)
        if adapter is None:
            return Receipt.failure(
                action.adapter,
                action.id,
                error=f"No adapter registered for '{action.adapter}'",
                error_kind="unexpected",
            )

        context = ExecutionContext(action=action, params=action.params)
        try:
            valid, reason = adapter.validate(context)
        except Exception as e:
            valid, reason = False, str(e)
        if not valid:
            return Receipt.failure(
                action.adapter,
                action.id,
                error=f"Validation failed: {reason}",
                error_kind="validation",
            )

        try:
            return adapter.execute(context)
        except Exception as e:
            logger.error("Adapter %s raised while running %s: %s", action.adapter, action.id, e)
            return Receipt.failure(
                action.adapter,
                action.id,
                error=f"Unexpected error: {e}",
                error_kind="unexpected",
            )


def default_registry() -> AdapterRegistry:
    """Registry wired with the real winget, git and elevation adapters."""
    from profilekit.adapters.packages.winget import WingetAdapter
    from profilekit.adapters.system.elevation import ElevationAdapter
    from profilekit.adapters.vcs.git import GitAdapter

    return AdapterRegistry(WingetAdapter(), GitAdapter(), ElevationAdapter())
