"""
Action and Receipt — what a reconciler asks for, and what came of it.

Each package, link or theme step produces exactly one Receipt, so a
failed item is a row in the run report rather than an exception that
ends the run.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Literal

from pydantic import BaseModel, Field

Status = Literal["ok", "skipped", "failed"]
ErrorKind = Literal["validation", "permission", "io", "external_tool", "unexpected"]


class Action(BaseModel):
    """One request for an adapter, e.g. ``install:Git.Git`` for winget."""

    id: str
    adapter: str
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def operation(self) -> str:
        return str(self.params.get("operation", ""))


class Receipt(BaseModel):
    """Outcome of one step.

    ``output`` holds what the tool printed on success, or the reason for a
    skip. ``error`` and ``error_kind`` are set only on failure.
    """

    adapter: str
    action_id: str
    status: Status = "ok"
    started_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    duration_ms: int = 0
    output: str = ""
    error: str | None = None
    error_kind: ErrorKind | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def skipped(self) -> bool:
        return self.status == "skipped"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def headline(self) -> str:
        """First line of the error (failed) or the output (otherwise)."""
        text = self.error if self.failed else self.output
        return (text or "").strip().split("\n", 1)[0]

    def detail_lines(self, limit: int = 10) -> list[str]:
        """Lines after the headline, capped at ``limit``."""
        text = (self.error if self.failed else self.output) or ""
        return text.strip().split("\n")[1:limit + 1]

    # ── Constructors ─────────────────────────────────────────────

    @classmethod
    def success(cls, adapter: str, action_id: str, output: str = "", **extra: Any) -> Receipt:
        return cls(adapter=adapter, action_id=action_id, output=output, **extra)

    @classmethod
    def skip(cls, adapter: str, action_id: str, reason: str = "", **extra: Any) -> Receipt:
        """Nothing needed doing, or the operator said no."""
        return cls(adapter=adapter, action_id=action_id, status="skipped", output=reason, **extra)

    @classmethod
    def failure(
        cls,
        adapter: str,
        action_id: str,
        error: str,
        error_kind: ErrorKind = "external_tool",
        **extra: Any,
    ) -> Receipt:
        return cls(
            adapter=adapter,
            action_id=action_id,
            status="failed",
            error=error,
            error_kind=error_kind,
            **extra,
        )
