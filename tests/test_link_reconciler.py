"""
Tests for link reconciliation — create, replace, remove, elevation.

Real symlinks are created under tmp_path.
"""

import os
from pathlib import Path

import pytest

from profilekit.adapters.base import ExecutionContext
from profilekit.core.models.action import Receipt
from profilekit.core.models.profile import LinkKind, LinkState
from profilekit.core.services.link_reconciler import (
    LinkError,
    LinkReconciler,
    create_link,
    error_kind_for,
    remove_link,
)


@pytest.fixture
def target(roots) -> Path:
    return roots.documents / "PowerShell" / "Microsoft.PowerShell_profile.ps1"


@pytest.fixture
def machine_target(roots) -> Path:
    return roots.system / "PowerShell" / "profile.ps1"


def _reconciler(registry, caps, confirm, **kw):
    return LinkReconciler(registry, caps(**kw), confirm, python_executable="python")


# ── Primitives ───────────────────────────────────────────────────────


class TestPrimitives:
    def test_create_link_makes_parents(self, profile_source, target):
        create_link(profile_source, target)
        assert LinkState.observe(target).points_to(profile_source)

    def test_create_link_refuses_existing(self, profile_source, target):
        target.parent.mkdir(parents=True)
        target.write_text("mine")
        with pytest.raises(LinkError):
            create_link(profile_source, target)
        assert target.read_text() == "mine"

    def test_create_link_replaces_directory(self, profile_source, target):
        target.mkdir(parents=True)
        (target / "inner.txt").write_text("x")
        create_link(profile_source, target, replace=True)
        assert LinkState.observe(target).points_to(profile_source)

    def test_remove_link(self, profile_source, target):
        create_link(profile_source, target)
        assert remove_link(target) is True
        assert LinkState.observe(target).absent
        assert profile_source.exists()

    def test_remove_absent(self, target):
        assert remove_link(target) is False

    def test_error_kinds(self):
        assert error_kind_for(PermissionError(13, "denied")) == "permission"
        assert error_kind_for(FileNotFoundError(2, "missing")) == "io"
        assert error_kind_for(LinkError("exists")) == "io"


# ── Install ──────────────────────────────────────────────────────────


class TestInstall:
    def test_absent_target_gets_linked(self, registry, caps, scripted, profile_source, target):
        confirm = scripted()
        receipt = _reconciler(registry, caps, confirm).install(
            profile_source, target, machine_scope=False, label="ModernShell",
        )
        assert receipt.ok
        assert receipt.action_id == "link:ModernShell"
        assert LinkState.observe(target).points_to(profile_source)
        assert confirm.questions == []

    def test_already_linked_skips_without_prompt(self, registry, caps, scripted, profile_source, target):
        create_link(profile_source, target)
        confirm = scripted()
        receipt = _reconciler(registry, caps, confirm).install(
            profile_source, target, machine_scope=False, label="ModernShell",
        )
        assert receipt.skipped
        assert "already linked" in receipt.output
        assert confirm.questions == []

    def test_regular_file_declined_is_untouched(self, registry, caps, scripted, profile_source, target):
        target.parent.mkdir(parents=True)
        target.write_text("user profile")
        confirm = scripted(False)

        receipt = _reconciler(registry, caps, confirm).install(
            profile_source, target, machine_scope=False, label="ModernShell",
        )

        assert receipt.skipped
        assert "skipping" in receipt.output
        assert target.read_text() == "user profile"
        assert LinkState.observe(target).kind is LinkKind.REGULAR_FILE
        assert len(confirm.questions) == 1

    def test_declined_twice_is_stable(self, registry, caps, scripted, profile_source, target):
        target.parent.mkdir(parents=True)
        target.write_text("user profile")
        reconciler = _reconciler(registry, caps, scripted(False, False))

        before = LinkState.observe(target)
        reconciler.install(profile_source, target, machine_scope=False, label="ModernShell")
        reconciler.install(profile_source, target, machine_scope=False, label="ModernShell")
        assert LinkState.observe(target) == before

    def test_regular_file_accepted_is_replaced(self, registry, caps, scripted, profile_source, target):
        target.parent.mkdir(parents=True)
        target.write_text("user profile")

        receipt = _reconciler(registry, caps, scripted(True)).install(
            profile_source, target, machine_scope=False, label="ModernShell",
        )
        assert receipt.ok
        assert "Replaced" in receipt.output
        assert LinkState.observe(target).points_to(profile_source)

    def test_foreign_link_accepted_is_replaced(self, registry, caps, scripted, profile_source, target, tmp_path):
        other = tmp_path / "other.ps1"
        other.write_text("x")
        create_link(other, target)

        receipt = _reconciler(registry, caps, scripted(True)).install(
            profile_source, target, machine_scope=False, label="ModernShell",
        )
        assert receipt.ok
        assert LinkState.observe(target).points_to(profile_source)
        assert other.exists()

    def test_relative_source_is_made_absolute(self, registry, caps, scripted, profile_source, target, monkeypatch):
        monkeypatch.chdir(profile_source.parent)
        _reconciler(registry, caps, scripted()).install(
            Path("profile.ps1"), target, machine_scope=False, label="ModernShell",
        )
        assert os.path.isabs(os.readlink(target))

    def test_missing_source_fails(self, registry, caps, scripted, target, tmp_path):
        receipt = _reconciler(registry, caps, scripted()).install(
            tmp_path / "nope.ps1", target, machine_scope=False, label="ModernShell",
        )
        assert receipt.failed
        assert receipt.error_kind == "io"
        assert LinkState.observe(target).absent

    def test_os_error_becomes_receipt(self, registry, caps, scripted, profile_source, target, monkeypatch):
        def deny(*args, **kwargs):
            raise PermissionError(13, "Access is denied")

        monkeypatch.setattr(os, "symlink", deny)
        receipt = _reconciler(registry, caps, scripted()).install(
            profile_source, target, machine_scope=False, label="ModernShell",
        )
        assert receipt.failed
        assert receipt.error_kind == "permission"

    def test_unreadable_target_becomes_receipt(self, registry, caps, scripted, profile_source, target, monkeypatch):
        real_is_symlink = Path.is_symlink

        def guarded(self):
            if self == target:
                raise PermissionError(13, "Access is denied")
            return real_is_symlink(self)

        monkeypatch.setattr(Path, "is_symlink", guarded)
        reconciler = _reconciler(registry, caps, scripted())

        installed = reconciler.install(profile_source, target, machine_scope=False, label="ModernShell")
        removed = reconciler.uninstall(target, machine_scope=False, label="ModernShell")

        assert installed.failed and installed.error_kind == "permission"
        assert installed.action_id == "link:ModernShell"
        assert removed.failed and removed.error_kind == "permission"
        assert removed.action_id == "unlink:ModernShell"


# ── Elevation boundary ───────────────────────────────────────────────


class TestElevation:
    def test_machine_scope_unelevated_goes_through_adapter(
        self, registry, caps, scripted, elevation, profile_source, machine_target,
    ):
        receipt = _reconciler(registry, caps, scripted(), is_elevated=False).install(
            profile_source, machine_target, machine_scope=True, label="ModernShell",
        )

        assert receipt.ok
        assert receipt.metadata["elevated"] is True
        assert elevation.call_count == 1
        command = elevation.call_log[0].params["command"]
        assert command[:3] == ["python", "-m", "profilekit.main"]
        assert command[3:] == ["link", "--source", str(profile_source), "--target", str(machine_target)]
        assert LinkState.observe(machine_target).points_to(profile_source)

    def test_replace_flag_passed_to_child(
        self, registry, caps, scripted, elevation, profile_source, machine_target,
    ):
        machine_target.parent.mkdir(parents=True)
        machine_target.write_text("old")
        receipt = _reconciler(registry, caps, scripted(True), is_elevated=False).install(
            profile_source, machine_target, machine_scope=True, label="ModernShell",
        )
        assert receipt.ok
        assert "--replace" in elevation.call_log[0].params["command"]

    def test_machine_scope_elevated_writes_directly(
        self, registry, caps, scripted, elevation, profile_source, machine_target,
    ):
        receipt = _reconciler(registry, caps, scripted(), is_elevated=True).install(
            profile_source, machine_target, machine_scope=True, label="ModernShell",
        )
        assert receipt.ok
        assert elevation.call_count == 0

    def test_user_scope_never_elevates(self, registry, caps, scripted, elevation, profile_source, target):
        _reconciler(registry, caps, scripted(), is_elevated=False).install(
            profile_source, target, machine_scope=False, label="ModernShell",
        )
        assert elevation.call_count == 0

    def test_exit_zero_without_link_is_failure(
        self, registry, caps, scripted, elevation, profile_source, machine_target,
    ):
        elevation.set_handler(lambda ctx: Receipt.success("elevation", ctx.action.id))
        receipt = _reconciler(registry, caps, scripted(), is_elevated=False).install(
            profile_source, machine_target, machine_scope=True, label="ModernShell",
        )
        assert receipt.failed
        assert receipt.error_kind == "io"

    def test_nonzero_exit_with_link_present_is_success(
        self, registry, caps, scripted, elevation, profile_source, machine_target,
    ):
        def handler(ctx: ExecutionContext) -> Receipt:
            create_link(profile_source, machine_target)
            return Receipt.failure("elevation", ctx.action.id, error="exit 3", error_kind="io")

        elevation.set_handler(handler)
        receipt = _reconciler(registry, caps, scripted(), is_elevated=False).install(
            profile_source, machine_target, machine_scope=True, label="ModernShell",
        )
        assert receipt.ok

    def test_denied_elevation_is_permission_failure(
        self, registry, caps, scripted, elevation, profile_source, machine_target,
    ):
        elevation.set_handler(
            lambda ctx: Receipt.failure(
                "elevation", ctx.action.id, error="Elevation was denied", error_kind="permission",
            )
        )
        receipt = _reconciler(registry, caps, scripted(), is_elevated=False).install(
            profile_source, machine_target, machine_scope=True, label="ModernShell",
        )
        assert receipt.failed
        assert receipt.error_kind == "permission"
        assert LinkState.observe(machine_target).absent

    def test_uninstall_machine_scope_uses_unlink_helper(
        self, registry, caps, scripted, elevation, profile_source, machine_target,
    ):
        create_link(profile_source, machine_target)
        receipt = _reconciler(registry, caps, scripted(), is_elevated=False).uninstall(
            machine_target, machine_scope=True, label="ModernShell",
        )
        assert receipt.ok
        assert elevation.call_log[0].params["command"][3:] == ["unlink", "--target", str(machine_target)]
        assert LinkState.observe(machine_target).absent


# ── Uninstall ────────────────────────────────────────────────────────


class TestUninstall:
    def test_absent_is_noop(self, registry, caps, scripted, target):
        receipt = _reconciler(registry, caps, scripted()).uninstall(
            target, machine_scope=False, label="ModernShell",
        )
        assert receipt.skipped
        assert not receipt.failed

    def test_removes_link(self, registry, caps, scripted, profile_source, target):
        create_link(profile_source, target)
        receipt = _reconciler(registry, caps, scripted()).uninstall(
            target, machine_scope=False, label="ModernShell",
        )
        assert receipt.ok
        assert "link" in receipt.output
        assert LinkState.observe(target).absent
        assert profile_source.exists()

    def test_removes_regular_file_and_says_so(self, registry, caps, scripted, target):
        target.parent.mkdir(parents=True)
        target.write_text("foreign")
        receipt = _reconciler(registry, caps, scripted()).uninstall(
            target, machine_scope=False, label="ModernShell",
        )
        assert receipt.ok
        assert "regular file" in receipt.output
        assert receipt.metadata["state"] == "regular_file"
        assert LinkState.observe(target).absent

    def test_round_trip(self, registry, caps, scripted, profile_source, target):
        reconciler = _reconciler(registry, caps, scripted())
        reconciler.install(profile_source, target, machine_scope=False, label="ModernShell")
        reconciler.uninstall(target, machine_scope=False, label="ModernShell")
        assert LinkState.observe(target).absent
