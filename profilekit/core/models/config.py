"""
Installer configuration model.

One immutable value built at startup (by the config loader) and handed
to the orchestrator. Nothing else in the package keeps the package
list or the theme repository as module state.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator

from profilekit.core.models.profile import PackageSpec

DEFAULT_PACKAGES: tuple[PackageSpec, ...] = (
    PackageSpec(id="Git.Git", interactive=True, name="Git"),
    PackageSpec(id="JanDeDobbeleer.OhMyPosh", name="Oh My Posh"),
    PackageSpec(id="ajeetdsouza.zoxide", name="zoxide"),
    PackageSpec(id="junegunn.fzf", name="fzf"),
    PackageSpec(id="eza-community.eza", name="eza"),
)

DEFAULT_THEME_REPOSITORY = "https://github.com/catppuccin/powershell.git"


def _absolute(value: Path) -> Path:
    return Path(os.path.abspath(Path(value).expanduser()))


class ProfileRoots(BaseModel):
    """Base directories profile paths are computed under.

    ``documents`` holds current-user profiles, ``system`` holds
    all-users profiles. Both are made absolute on construction.
    """

    model_config = ConfigDict(frozen=True)

    documents: Path
    system: Path

    @field_validator("documents", "system")
    @classmethod
    def _make_absolute(cls, value: Path) -> Path:
        return _absolute(value)


class InstallerConfig(BaseModel):
    """Everything the orchestrator needs to know that is not user input."""

    model_config = ConfigDict(frozen=True)

    roots: ProfileRoots
    profile_source: Path
    packages: tuple[PackageSpec, ...] = Field(default=DEFAULT_PACKAGES)
    theme_repository: str = DEFAULT_THEME_REPOSITORY
    theme_dir: Path | None = None

    @field_validator("profile_source")
    @classmethod
    def _source_absolute(cls, value: Path) -> Path:
        return _absolute(value)

    @property
    def theme_path(self) -> Path:
        """Where the theme repository is cloned to."""
        if self.theme_dir is not None:
            return _absolute(self.theme_dir)
        return self.roots.documents / "PowerShell" / "Themes"
