"""
Configuration loader — reads profilekit.yml into an InstallerConfig.

The file is optional. Without one, the built-in package list and theme
repository are used and the profile source is looked up in the current
directory. Profile roots come from the environment unless the file or
the PROFILEKIT_* variables override them.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

import yaml

from profilekit.core.models.config import InstallerConfig, ProfileRoots
from profilekit.core.models.profile import PackageSpec

logger = logging.getLogger(__name__)

CONFIG_FILE = "profilekit.yml"
DEFAULT_PROFILE_SOURCE = "profile.ps1"

ENV_DOCUMENTS_DIR = "PROFILEKIT_DOCUMENTS_DIR"
ENV_SYSTEM_DIR = "PROFILEKIT_SYSTEM_DIR"


class ConfigError(Exception):
    """Raised when profilekit.yml is unreadable or invalid."""


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Nearest profilekit.yml at or above ``start_dir`` (default: cwd)."""
    start = (start_dir or Path.cwd()).resolve()
    for directory in (start, *start.parents):
        candidate = directory / CONFIG_FILE
        if candidate.is_file():
            return candidate
    return None


def _read_mapping(path: Path) -> dict:
    """Parse ``path`` as YAML; an empty file is an empty mapping."""
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must hold a YAML mapping, not a {type(data).__name__}")
    return data


def default_roots(environ: Mapping[str, str] | None = None) -> ProfileRoots:
    """Profile roots for this host.

    Current-user profiles live under the user's Documents folder,
    all-users profiles under Program Files.
    """
    env = os.environ if environ is None else environ

    documents = env.get(ENV_DOCUMENTS_DIR)
    if not documents:
        home = env.get("USERPROFILE") or str(Path.home())
        documents = str(Path(home) / "Documents")

    system = env.get(ENV_SYSTEM_DIR)
    if not system:
        if sys.platform.startswith("win"):
            system = env.get("ProgramFiles") or env.get("PROGRAMFILES") or r"C:\Program Files"
        else:
            system = "/opt/microsoft"

    return ProfileRoots(documents=Path(documents), system=Path(system))


def load_config(
    path: Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> InstallerConfig:
    """Load the installer configuration.

    Args:
        path: Explicit path to profilekit.yml. If None, searches upward;
            if nothing is found the defaults are used.
        environ: Environment mapping (default: ``os.environ``).

    Returns:
        Validated, immutable InstallerConfig.

    Raises:
        ConfigError: If an explicit file is missing, or any file is invalid.
    """
    env = os.environ if environ is None else environ
    if path is None:
        path = find_config_file()

    if path is None:
        logger.debug("No %s found; using defaults", CONFIG_FILE)
        return InstallerConfig(
            roots=default_roots(env),
            profile_source=Path.cwd() / DEFAULT_PROFILE_SOURCE,
        )

    if not path.is_file():
        raise ConfigError(f"Config file not found: {path}")

    logger.debug("Loading installer config from %s", path)
    data = _read_mapping(path)
    try:
        config = _build_config(data, path.parent.resolve(), env)
    except ValueError as e:
        # pydantic's ValidationError is a ValueError
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e

    logger.info("Loaded config from %s with %d packages", path, len(config.packages))
    return config


def _build_config(data: dict, base_dir: Path, env: Mapping[str, str]) -> InstallerConfig:
    roots = default_roots(env)
    if data.get("documents_dir") and not env.get(ENV_DOCUMENTS_DIR):
        roots = roots.model_copy(update={"documents": _relative_to(data["documents_dir"], base_dir)})
    if data.get("system_dir") and not env.get(ENV_SYSTEM_DIR):
        roots = roots.model_copy(update={"system": _relative_to(data["system_dir"], base_dir)})

    fields: dict = {
        "roots": roots,
        "profile_source": _relative_to(data.get("profile_source", DEFAULT_PROFILE_SOURCE), base_dir),
    }
    if "packages" in data:
        packages = data["packages"] or []
        if not isinstance(packages, list):
            raise ConfigError("'packages' must be a list")
        fields["packages"] = tuple(_parse_package(p) for p in packages)
    if data.get("theme_repository"):
        fields["theme_repository"] = str(data["theme_repository"])
    if data.get("theme_dir"):
        fields["theme_dir"] = _relative_to(data["theme_dir"], base_dir)

    return InstallerConfig.model_validate(fields)


def _parse_package(entry: object) -> PackageSpec:
    """A package entry is either a bare id or a mapping."""
    if isinstance(entry, str):
        return PackageSpec(id=entry)
    if isinstance(entry, dict):
        return PackageSpec.model_validate(entry)
    raise ConfigError(f"Invalid package entry: {entry!r}")


def _relative_to(value: str | Path, base_dir: Path) -> Path:
    p = Path(os.path.expandvars(str(value))).expanduser()
    return p if p.is_absolute() else base_dir / p
