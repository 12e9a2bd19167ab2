"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from profilekit.adapters.base import ExecutionContext
from profilekit.adapters.mock import MockAdapter
from profilekit.adapters.registry import AdapterRegistry
from profilekit.core.models.action import Receipt
from profilekit.core.models.config import InstallerConfig, ProfileRoots
from profilekit.core.models.profile import PackageSpec
from profilekit.core.services.capabilities import HostCapabilities
from profilekit.core.services.link_reconciler import create_link, remove_link


class ScriptedConfirm:
    """Answers questions from a fixed script, recording them.

    With an empty script every further question gets ``default``.
    """

    def __init__(self, *answers: bool, default: bool = False):
        self.answers = list(answers)
        self.default = default
        self.questions: list[str] = []

    def __call__(self, question: str) -> bool:
        self.questions.append(question)
        if self.answers:
            return self.answers.pop(0)
        return self.default


@pytest.fixture
def roots(tmp_path: Path) -> ProfileRoots:
    documents = tmp_path / "Documents"
    system = tmp_path / "ProgramFiles"
    documents.mkdir()
    system.mkdir()
    return ProfileRoots(documents=documents, system=system)


@pytest.fixture
def profile_source(tmp_path: Path) -> Path:
    source = tmp_path / "bundle" / "profile.ps1"
    source.parent.mkdir()
    source.write_text("# bundle profile\n", encoding="utf-8")
    return source


@pytest.fixture
def packages() -> tuple[PackageSpec, ...]:
    return (
        PackageSpec(id="Git.Git", interactive=True, name="Git"),
        PackageSpec(id="junegunn.fzf", name="fzf"),
    )


@pytest.fixture
def config(roots, profile_source, packages, tmp_path: Path) -> InstallerConfig:
    return InstallerConfig(
        roots=roots,
        profile_source=profile_source,
        packages=packages,
        theme_repository="https://example.invalid/theme.git",
        theme_dir=tmp_path / "Themes",
    )


@pytest.fixture
def winget() -> MockAdapter:
    """Package manager double. Nothing installed unless told otherwise."""
    mock = MockAdapter(adapter_name="winget")
    installed: set[str] = set()

    def handler(ctx: ExecutionContext) -> Receipt:
        package_id = ctx.params["package_id"]
        if ctx.operation == "query":
            return Receipt.success(
                "winget", ctx.action.id,
                metadata={"package_id": package_id, "installed": package_id in installed},
            )
        if ctx.operation == "install":
            installed.add(package_id)
        elif ctx.operation == "uninstall":
            installed.discard(package_id)
        return Receipt.success("winget", ctx.action.id, output=f"{ctx.operation} {package_id}")

    mock.set_handler(handler)
    mock.installed = installed  # type: ignore[attr-defined]
    return mock


@pytest.fixture
def git() -> MockAdapter:
    """git double that creates the clone directory."""
    mock = MockAdapter(adapter_name="git")

    def handler(ctx: ExecutionContext) -> Receipt:
        Path(ctx.params["dest"]).mkdir(parents=True)
        return Receipt.success("git", ctx.action.id, output="cloned")

    mock.set_handler(handler)
    return mock


@pytest.fixture
def elevation() -> MockAdapter:
    """Elevation double that runs the hidden link/unlink helpers in-process."""
    mock = MockAdapter(adapter_name="elevation")

    def handler(ctx: ExecutionContext) -> Receipt:
        command = ctx.params["command"]
        args = command[command.index("profilekit.main") + 1:]
        target = Path(args[args.index("--target") + 1])
        if args[0] == "link":
            source = Path(args[args.index("--source") + 1])
            create_link(source, target, replace="--replace" in args)
        else:
            remove_link(target)
        return Receipt.success("elevation", ctx.action.id, metadata={"return_code": 0})

    mock.set_handler(handler)
    return mock


@pytest.fixture
def registry(winget, git, elevation) -> AdapterRegistry:
    reg = AdapterRegistry()
    reg.register(winget)
    reg.register(git)
    reg.register(elevation)
    return reg


@pytest.fixture
def caps():
    """Factory for HostCapabilities."""

    def make(is_elevated: bool = False, shell_major: int | None = 7) -> HostCapabilities:
        return HostCapabilities(
            platform="win32",
            is_elevated=is_elevated,
            shell_major=shell_major,
            tools=frozenset({"winget", "git", "elevation"}),
        )

    return make


@pytest.fixture
def scripted():
    """The ScriptedConfirm class, for building operator answers."""
    return ScriptedConfirm
