"""
Tests for CLI commands — install, uninstall, status, hidden helpers,
and global options.
"""

import json
import os
import textwrap
from pathlib import Path

import pytest
from click.testing import CliRunner

from profilekit.core.models.profile import LinkState
from profilekit.main import cli


@pytest.fixture
def bundle(tmp_path: Path, monkeypatch, registry) -> Path:
    """A bundle directory with config, wired to mock adapters."""
    (tmp_path / "profile.ps1").write_text("# profile\n")
    config = tmp_path / "profilekit.yml"
    config.write_text(textwrap.dedent("""\
        profile_source: profile.ps1
        theme_dir: Themes
        packages:
          - id: Git.Git
            interactive: true
          - junegunn.fzf
    """))
    monkeypatch.setenv("PROFILEKIT_DOCUMENTS_DIR", str(tmp_path / "Documents"))
    monkeypatch.setenv("PROFILEKIT_SYSTEM_DIR", str(tmp_path / "ProgramFiles"))
    monkeypatch.setenv("PROFILEKIT_HOST_VERSION", "7.4")
    monkeypatch.setattr("profilekit.core.use_cases.wiring.default_registry", lambda: registry)
    monkeypatch.setattr("profilekit.core.services.capabilities.is_elevated", lambda: False)
    return config


def _invoke(*args, input=None):
    return CliRunner().invoke(cli, list(args), input=input)


class TestCLIGlobal:
    def test_help(self):
        result = _invoke("--help")
        assert result.exit_code == 0
        assert "install" in result.output
        assert "uninstall" in result.output
        assert "link" not in result.output.split()

    def test_version(self):
        result = _invoke("--version")
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_install_help_shows_tokens(self):
        result = _invoke("install", "--help")
        assert result.exit_code == 0
        assert "-Profile" in result.output
        assert "all-hosts" in result.output
        assert "both" in result.output

    def test_bad_scope_token(self):
        result = _invoke("install", "-Profile", "everyone")
        assert result.exit_code == 2

    def test_bad_shell_token(self):
        result = _invoke("install", "-Shell", "bash")
        assert result.exit_code == 2


class TestInstallCommand:
    def test_install_current_pwsh(self, bundle: Path, tmp_path: Path, winget):
        result = _invoke("--config", str(bundle), "install", "-Profile", "current", "-Shell", "pwsh")

        assert result.exit_code == 0, result.output
        target = tmp_path / "Documents" / "PowerShell" / "Microsoft.PowerShell_profile.ps1"
        assert LinkState.observe(target).points_to(tmp_path / "profile.ps1")
        assert "Install: CurrentUserCurrentHost for ModernShell" in result.output
        assert "failed (4 steps)" in result.output
        assert winget.installed == {"Git.Git", "junegunn.fzf"}

    def test_long_option_names_and_case(self, bundle: Path, tmp_path: Path):
        result = _invoke("--config", str(bundle), "install", "--profile", "ALL-HOSTS", "--shell", "Both")
        assert result.exit_code == 0, result.output
        assert (tmp_path / "Documents" / "WindowsPowerShell" / "profile.ps1").is_symlink()
        assert (tmp_path / "Documents" / "PowerShell" / "profile.ps1").is_symlink()

    def test_overwrite_prompt_declined(self, bundle: Path, tmp_path: Path):
        target = tmp_path / "Documents" / "PowerShell" / "Microsoft.PowerShell_profile.ps1"
        target.parent.mkdir(parents=True)
        target.write_text("mine")

        result = _invoke("--config", str(bundle), "install", "-Shell", "pwsh", input="n\n")

        assert result.exit_code == 0, result.output
        assert "Overwrite" in result.output
        assert "skipping" in result.output
        assert target.read_text() == "mine"

    def test_per_item_failure_still_exits_zero(self, bundle: Path, winget):
        winget.set_failure("install:Git.Git", error="installer exited 1603")
        result = _invoke("--config", str(bundle), "install", "-Shell", "pwsh")
        assert result.exit_code == 0
        assert "1603" in result.output

    def test_machine_scope_uses_elevation(self, bundle: Path, tmp_path: Path, elevation):
        result = _invoke("--config", str(bundle), "install", "-Profile", "global", "-Shell", "pwsh")
        assert result.exit_code == 0, result.output
        assert elevation.call_count == 1
        assert (tmp_path / "ProgramFiles" / "PowerShell" / "profile.ps1").is_symlink()

    def test_missing_config_exits_one(self, tmp_path: Path):
        result = _invoke("--config", str(tmp_path / "nope.yml"), "install")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unexpected_error_exits_one(self, bundle: Path, monkeypatch):
        def explode(*args, **kwargs):
            raise RuntimeError("disk on fire")

        monkeypatch.setattr("profilekit.core.use_cases.install.run_install", explode)
        result = _invoke("--config", str(bundle), "install")
        assert result.exit_code == 1
        assert "disk on fire" in result.output


class TestUninstallCommand:
    def test_round_trip(self, bundle: Path, tmp_path: Path, winget):
        assert _invoke("--config", str(bundle), "install", "-Shell", "both").exit_code == 0

        result = _invoke("--config", str(bundle), "uninstall", "-Shell", "both", input="y\ny\n")

        assert result.exit_code == 0, result.output
        for folder in ("WindowsPowerShell", "PowerShell"):
            assert LinkState.observe(tmp_path / "Documents" / folder / "Microsoft.PowerShell_profile.ps1").absent
        assert winget.installed == set()
        assert not (tmp_path / "Themes").exists()

    def test_decline_everything(self, bundle: Path, tmp_path: Path, winget):
        _invoke("--config", str(bundle), "install", "-Shell", "pwsh")
        result = _invoke("--config", str(bundle), "uninstall", "-Shell", "pwsh", input="n\nn\nn\nn\n")

        assert result.exit_code == 0, result.output
        assert winget.installed == {"Git.Git", "junegunn.fzf"}
        assert (tmp_path / "Themes").exists()


class TestStatusCommand:
    def test_status_text(self, bundle: Path):
        _invoke("--config", str(bundle), "install", "-Shell", "pwsh")
        result = _invoke("--config", str(bundle), "status", "-Shell", "pwsh")
        assert result.exit_code == 0, result.output
        assert "CurrentUserCurrentHost" in result.output
        assert "Git.Git" in result.output

    def test_status_json(self, bundle: Path):
        result = _invoke("--config", str(bundle), "status", "-Profile", "all-users", "-Shell", "both", "--json")
        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["policy"] == {"scope": "AllUsersCurrentHost", "shells": ["WindowsLegacy", "ModernShell"]}
        assert all(t["state"] == "absent" for t in data["targets"])


class TestElevatedHelpers:
    def test_link_and_unlink(self, tmp_path: Path):
        source = tmp_path / "profile.ps1"
        source.write_text("x")
        target = tmp_path / "PF" / "PowerShell" / "profile.ps1"

        result = _invoke("link", "--source", str(source), "--target", str(target))
        assert result.exit_code == 0
        assert LinkState.observe(target).points_to(source)

        result = _invoke("unlink", "--target", str(target))
        assert result.exit_code == 0
        assert not os.path.lexists(target)

    def test_link_existing_without_replace_fails(self, tmp_path: Path):
        source = tmp_path / "profile.ps1"
        source.write_text("x")
        target = tmp_path / "existing.ps1"
        target.write_text("mine")

        result = _invoke("link", "--source", str(source), "--target", str(target))
        assert result.exit_code == 1
        assert target.read_text() == "mine"

        result = _invoke("link", "--source", str(source), "--target", str(target), "--replace")
        assert result.exit_code == 0
        assert target.is_symlink()

    def test_unlink_absent_succeeds(self, tmp_path: Path):
        assert _invoke("unlink", "--target", str(tmp_path / "none.ps1")).exit_code == 0
