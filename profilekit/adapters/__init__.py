"""winget, git and elevation behind one Adapter interface, dispatched by AdapterRegistry."""

from profilekit.adapters.base import Adapter, ExecutionContext
from profilekit.adapters.mock import MockAdapter
from profilekit.adapters.registry import AdapterRegistry, default_registry

__all__ = [
    "Adapter",
    "AdapterRegistry",
    "ExecutionContext",
    "MockAdapter",
    "default_registry",
]
