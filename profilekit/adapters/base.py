"""
Adapter protocol for the installer's external collaborators.

winget, git and the elevation mechanism each sit behind one Adapter.
Reconcilers build an Action naming the adapter and an ``operation``
param, and the AdapterRegistry routes it here. Every outcome, good or
bad, comes back as a Receipt.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from profilekit.core.models.action import Action, Receipt


class ExecutionContext(BaseModel):
    """One action as an adapter sees it."""

    action: Action
    params: dict[str, Any] = Field(default_factory=dict)

    @property
    def operation(self) -> str:
        return str(self.params.get("operation", ""))

    def missing(self, *names: str) -> list[str]:
        """Names of required params that are absent or empty."""
        return [n for n in names if not self.params.get(n)]


class Adapter(ABC):
    """A collaborator the installer drives through subprocesses.

    Subclasses list their ``operations`` and the params each one needs
    in ``required_params``; the default ``validate`` checks both.
    ``execute`` reports failure through the Receipt and never raises.
    """

    operations: ClassVar[frozenset[str]] = frozenset()
    required_params: ClassVar[dict[str, tuple[str, ...]]] = {}

    @property
    @abstractmethod
    def name(self) -> str:
        """Registry key: 'winget', 'git' or 'elevation'."""

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the backing executable is on this host. Cheap, never raises."""

    def validate(self, context: ExecutionContext) -> tuple[bool, str]:
        """Check operation and required params before anything runs.

        Returns:
            (is_valid, error_message); the message is empty when valid.
        """
        operation = context.operation
        if operation not in self.operations:
            valid = ", ".join(sorted(self.operations))
            return False, f"Unknown operation '{operation}' for {self.name}. Valid: {valid}"
        missing = context.missing(*self.required_params.get(operation, ()))
        if missing:
            return False, f"Missing required param(s) for {operation}: {', '.join(missing)}"
        return True, ""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the validated action; failures go in the Receipt."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
