"""
Host capability detection.

Read-only probes run once at startup: are we elevated, which PowerShell
is running us, and which collaborator tools are on PATH. The result is
an immutable HostCapabilities value the rest of the run consults
instead of probing again.
"""

from __future__ import annotations

import ctypes
import logging
import os
import re
import shutil
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field

from profilekit.adapters.registry import AdapterRegistry

logger = logging.getLogger(__name__)

ENV_HOST_VERSION = "PROFILEKIT_HOST_VERSION"

# Major versions reported for the two editions when detected from the
# environment rather than asked directly.
LEGACY_SHELL_MAJOR = 5
MODERN_SHELL_MAJOR_DETECTED = 7

_SHELL_TOOLS = ("pwsh", "powershell")


@dataclass(frozen=True)
class HostCapabilities:
    """What this host can do, probed once."""

    platform: str
    is_elevated: bool
    shell_major: int | None = None
    tools: frozenset[str] = field(default_factory=frozenset)

    @property
    def shell_label(self) -> str:
        if self.shell_major is None:
            return "unknown"
        edition = "PowerShell" if self.shell_major >= 6 else "Windows PowerShell"
        return f"{edition} {self.shell_major}"

    def to_dict(self) -> dict:
        return {
            "platform": self.platform,
            "is_elevated": self.is_elevated,
            "shell_major": self.shell_major,
            "shell": self.shell_label,
            "tools": sorted(self.tools),
        }


def is_elevated() -> bool:
    """Whether this process holds administrator (or root) rights."""
    if sys.platform.startswith("win"):
        try:
            return bool(ctypes.windll.shell32.IsUserAnAdmin())  # type: ignore[attr-defined]
        except (AttributeError, OSError):
            return False
    return os.geteuid() == 0


def detect_shell_major(environ: Mapping[str, str] | None = None) -> int | None:
    """Major version of the PowerShell running this process.

    ``PROFILEKIT_HOST_VERSION`` wins when set. Otherwise the inherited
    ``PSModulePath`` tells the editions apart: PowerShell 6+ puts its own
    ``...\\PowerShell\\Modules`` folders on it, Windows PowerShell only
    ``...\\WindowsPowerShell\\...`` ones.

    This is a heuristic. Windows sets a machine-level ``PSModulePath``
    that every process inherits, so a launch from cmd.exe or Explorer
    reads as Windows PowerShell (5). None only when the variable is
    absent, which in practice means a non-Windows host outside pwsh.
    """
    env = os.environ if environ is None else environ

    override = env.get(ENV_HOST_VERSION, "").strip()
    if override:
        match = re.match(r"(\d+)", override)
        if match:
            return int(match.group(1))
        logger.warning("Ignoring unparseable %s=%r", ENV_HOST_VERSION, override)

    module_path = env.get("PSModulePath", "")
    if not module_path:
        return None

    separator = ";" if ";" in module_path else os.pathsep
    for entry in module_path.split(separator):
        parts = [p.lower() for p in re.split(r"[\\/]+", entry) if p]
        if "powershell" in parts:
            return MODERN_SHELL_MAJOR_DETECTED
    return LEGACY_SHELL_MAJOR


def detect_host(
    registry: AdapterRegistry,
    environ: Mapping[str, str] | None = None,
) -> HostCapabilities:
    """Probe the host once.

    Tools are the registered adapters reporting available, plus the
    PowerShell executables themselves. When the running shell cannot be
    read from the environment, an installed ``pwsh`` counts as modern
    and a lone ``powershell`` as legacy.
    """
    tools = set(registry.available())
    tools.update(t for t in _SHELL_TOOLS if shutil.which(t))

    shell_major = detect_shell_major(environ)
    if shell_major is None:
        if "pwsh" in tools:
            shell_major = MODERN_SHELL_MAJOR_DETECTED
        elif "powershell" in tools:
            shell_major = LEGACY_SHELL_MAJOR

    caps = HostCapabilities(
        platform=sys.platform,
        is_elevated=is_elevated(),
        shell_major=shell_major,
        tools=frozenset(tools),
    )
    logger.debug("Host capabilities: %s", caps.to_dict())
    return caps
