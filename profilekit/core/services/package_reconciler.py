"""
Package reconciliation through the package-manager adapter.

Install is "ensure present": a package the manager already lists is
left alone, anything else is installed. Uninstall only touches the
packages that are actually present, after asking the operator.
Each package is independent; one failure never stops the rest.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from profilekit.adapters.registry import AdapterRegistry
from profilekit.core.models.action import Action, Receipt
from profilekit.core.models.profile import PackageSpec
from profilekit.core.services.interaction import Confirm, Notify, log_notify

logger = logging.getLogger(__name__)

PACKAGE_ADAPTER = "winget"


class PackageReconciler:
    """Bring a fixed package list in or out of the system."""

    def __init__(
        self,
        registry: AdapterRegistry,
        confirm: Confirm,
        notify: Notify = log_notify,
        adapter: str = PACKAGE_ADAPTER,
    ):
        self._registry = registry
        self._confirm = confirm
        self._notify = notify
        self._adapter = adapter

    def _run(self, operation: str, spec: PackageSpec, **params) -> Receipt:
        action = Action(
            id=f"{operation}:{spec.id}",
            adapter=self._adapter,
            params={"operation": operation, "package_id": spec.id, **params},
        )
        return self._registry.execute_action(action)

    # ── Queries ─────────────────────────────────────────────────

    def query(self, spec: PackageSpec) -> Receipt:
        """Raw query receipt; ``metadata['installed']`` holds the answer."""
        return self._run("query", spec)

    def is_installed(self, spec: PackageSpec) -> bool | None:
        """True/False from the package manager, None if it could not be asked."""
        receipt = self.query(spec)
        if receipt.failed:
            logger.warning("Could not query %s: %s", spec.id, receipt.error)
            return None
        return bool(receipt.metadata.get("installed"))

    # ── Install ─────────────────────────────────────────────────

    def ensure_installed(self, spec: PackageSpec) -> Receipt:
        """Install ``spec`` unless it is already present."""
        action_id = f"install:{spec.id}"
        query = self.query(spec)

        if query.failed:
            return Receipt.failure(
                self._adapter, action_id,
                error=f"Could not determine whether {spec.id} is installed: {query.error}",
                error_kind=query.error_kind or "external_tool",
                metadata={"package_id": spec.id},
            )

        if query.metadata.get("installed"):
            logger.debug("%s already installed", spec.id)
            return Receipt.skip(
                self._adapter, action_id,
                f"{spec.display_name} already installed",
                metadata={"package_id": spec.id},
            )

        self._notify(f"Installing {spec.display_name}...")
        receipt = self._run("install", spec, interactive=spec.interactive)
        if receipt.failed:
            logger.warning("Install of %s failed (continuing): %s", spec.id, receipt.error)
        return receipt

    def reconcile_install(self, specs: Iterable[PackageSpec]) -> list[Receipt]:
        return [self.ensure_installed(s) for s in specs]

    # ── Uninstall ───────────────────────────────────────────────

    def reconcile_uninstall(self, specs: Iterable[PackageSpec]) -> list[Receipt]:
        """Remove the present packages, with confirmation.

        One question covers the whole list. Answering no falls back to
        asking about each package in turn.
        """
        receipts: list[Receipt] = []
        present: list[PackageSpec] = []

        for spec in specs:
            query = self.query(spec)
            if query.failed:
                receipts.append(Receipt.failure(
                    self._adapter, f"uninstall:{spec.id}",
                    error=f"Could not determine whether {spec.id} is installed: {query.error}",
                    error_kind=query.error_kind or "external_tool",
                    metadata={"package_id": spec.id},
                ))
            elif query.metadata.get("installed"):
                present.append(spec)

        if not present:
            self._notify("None of the bundle's packages are installed.")
            return receipts

        self._notify("Installed packages from this bundle:")
        for spec in present:
            self._notify(f"  - {spec.display_name} ({spec.id})")

        remove_all = self._confirm(f"Uninstall all {len(present)} package(s)?")
        for spec in present:
            if remove_all or self._confirm(f"Uninstall {spec.display_name}?"):
                receipt = self._run("uninstall", spec)
                if receipt.failed:
                    logger.warning("Uninstall of %s failed (continuing): %s", spec.id, receipt.error)
            else:
                receipt = Receipt.skip(
                    self._adapter, f"uninstall:{spec.id}",
                    f"{spec.display_name} kept",
                    metadata={"package_id": spec.id},
                )
            receipts.append(receipt)

        return receipts
