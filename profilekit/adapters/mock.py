"""
MockAdapter — in-memory stand-in for winget, git or the elevation helper.

Every action succeeds unless scripted. A script is either a fixed
Receipt or a handler computing one from the context; scripts are keyed
by action ID, with an optional catch-all. Tests use handlers to keep
fake state (an installed-package set, a cloned directory, a link made
by the "elevated" child).
"""

from __future__ import annotations

from collections.abc import Callable

from profilekit.adapters.base import Adapter, ExecutionContext
from profilekit.core.models.action import ErrorKind, Receipt

Handler = Callable[[ExecutionContext], Receipt]


class MockAdapter(Adapter):
    """Records every call and answers from its scripts."""

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "[mock] executed",
    ):
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        self._scripts: dict[str, Handler] = {}
        self._fallback: Handler | None = None
        self.call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_count(self) -> int:
        return len(self.call_log)

    def calls_for(self, operation: str) -> list[ExecutionContext]:
        return [ctx for ctx in self.call_log if ctx.operation == operation]

    def is_available(self) -> bool:
        return self._available

    # ── Scripting ────────────────────────────────────────────────

    def set_handler(self, handler: Handler, action_id: str | None = None) -> None:
        """Answer ``action_id`` (or every unscripted action) with ``handler``."""
        if action_id is None:
            self._fallback = handler
        else:
            self._scripts[action_id] = handler

    def set_response(self, action_id: str, receipt: Receipt) -> None:
        self._scripts[action_id] = lambda _ctx: receipt

    def set_failure(
        self,
        action_id: str,
        error: str = "Mock failure",
        error_kind: ErrorKind = "external_tool",
    ) -> None:
        self.set_response(
            action_id,
            Receipt.failure(self._name, action_id, error=error, error_kind=error_kind),
        )

    def reset(self) -> None:
        self.call_log.clear()
        self._scripts.clear()
        self._fallback = None

    # ── Adapter protocol ─────────────────────────────────────────

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        # Scripts decide what a bad call looks like.
        return True, ""

    def execute(self, context: ExecutionContext) -> Receipt:
        self.call_log.append(context)
        handler = self._scripts.get(context.action.id, self._fallback)
        if handler is not None:
            return handler(context)
        return Receipt.success(
            self._name,
            context.action.id,
            output=self._default_output,
            metadata={"mock": True},
        )
