"""
Domain models — Pydantic types for profilekit.

All models are re-exported here for convenient access:

    from profilekit.core.models import Scope, ShellTarget, InstallerConfig, Receipt
"""

from profilekit.core.models.action import Action, Receipt
from profilekit.core.models.config import InstallerConfig, ProfileRoots
from profilekit.core.models.profile import (
    LinkKind,
    LinkState,
    PackageSpec,
    Scope,
    ShellTarget,
)

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # config.py
    "InstallerConfig",
    "ProfileRoots",
    # profile.py
    "LinkKind",
    "LinkState",
    "PackageSpec",
    "Scope",
    "ShellTarget",
]
