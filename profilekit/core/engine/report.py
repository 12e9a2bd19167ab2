"""Run report — the receipts of one install or uninstall, grouped by phase."""

from __future__ import annotations

from dataclasses import dataclass, field

from profilekit.core.models.action import Receipt

PHASES = ("packages", "theme", "links")


@dataclass
class RunReport:
    """Result of one orchestrated run."""

    command: str = ""
    scope: str = ""
    shells: list[str] = field(default_factory=list)
    phase_receipts: dict[str, list[Receipt]] = field(default_factory=dict)

    def add(self, phase: str, *receipts: Receipt) -> None:
        self.phase_receipts.setdefault(phase, []).extend(receipts)

    def phase(self, name: str) -> list[Receipt]:
        return self.phase_receipts.get(name, [])

    @property
    def receipts(self) -> list[Receipt]:
        ordered = [p for p in PHASES if p in self.phase_receipts]
        ordered += [p for p in self.phase_receipts if p not in PHASES]
        return [r for p in ordered for r in self.phase_receipts[p]]

    @property
    def total(self) -> int:
        return len(self.receipts)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.receipts if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.receipts if r.failed)

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.receipts if r.skipped)

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.succeeded + self.skipped > 0:
            return "partial"
        return "failed"
