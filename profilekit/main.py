"""
profilekit — CLI entrypoint.

Usage:
    python -m profilekit.main --help
    python -m profilekit.main install -Profile current -Shell pwsh
    python -m profilekit.main uninstall -Profile all-hosts -Shell both
    python -m profilekit.main status
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click

from profilekit import __version__
from profilekit.core.observability.logging_config import configure_from_flags
from profilekit.core.services.policy import SCOPE_TOKENS, SHELL_TOKENS

logger = logging.getLogger(__name__)

_STATUS_COLORS = {"ok": "green", "partial": "yellow", "failed": "red"}


def _scope_option(fn):
    return click.option(
        "-Profile",
        "--profile",
        "scope",
        type=click.Choice(list(SCOPE_TOKENS), case_sensitive=False),
        default="current",
        show_default=True,
        help="Which profile slot to use.",
    )(fn)


def _shell_option(fn):
    return click.option(
        "-Shell",
        "--shell",
        "shell",
        type=click.Choice(list(SHELL_TOKENS), case_sensitive=False),
        default="current",
        show_default=True,
        help="Which PowerShell edition(s) to target.",
    )(fn)


def _confirm(question: str) -> bool:
    return click.confirm(question, default=False)


def _notify(message: str) -> None:
    click.echo(f"   {message}")


def _fail(message: str) -> None:
    click.secho(f"❌ {message}", fg="red", err=True)
    sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="profilekit")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to profilekit.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """profilekit — install and remove the PowerShell profile bundle."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    configure_from_flags(debug=debug, verbose=verbose, quiet=quiet)


# ── Report rendering ────────────────────────────────────────────────


def _print_report(ctx: click.Context, report) -> None:
    click.echo()
    click.secho(f"   {report.command.capitalize()}: {report.scope} for {', '.join(report.shells)}", bold=True)
    for phase, receipts in report.phase_receipts.items():
        if not receipts:
            continue
        click.echo()
        click.secho(f"   {phase.capitalize()}:", fg="white", bold=True)
        for receipt in receipts:
            if receipt.ok:
                click.secho(f"     ✓ {receipt.action_id}", fg="green", nl=False)
                click.echo(f"  {receipt.headline}")
                if ctx.obj.get("verbose"):
                    for line in receipt.detail_lines():
                        click.echo(f"       │ {line}")
            elif receipt.failed:
                click.secho(f"     ✗ {receipt.action_id} [{receipt.error_kind}]", fg="red")
                click.echo(f"       │ {receipt.headline}")
                for line in receipt.detail_lines(limit=4):
                    click.echo(f"       │ {line}")
            else:
                click.secho(f"     ⊘ {receipt.action_id} ", fg="yellow", nl=False)
                click.echo(f"({receipt.headline})")

    click.echo()
    click.secho(
        f"   Result: {report.succeeded} done, {report.skipped} skipped, {report.failed} failed"
        f" ({report.total} steps)",
        fg=_STATUS_COLORS.get(report.status, "white"),
        bold=True,
    )
    click.echo()


# ── Commands ────────────────────────────────────────────────────────


@cli.command()
@_scope_option
@_shell_option
@click.pass_context
def install(ctx: click.Context, scope: str, shell: str) -> None:
    """Link the profile and install its tools.

    Examples:

        profilekit install

        profilekit install -Profile all-hosts -Shell both
    """
    from profilekit.core.use_cases.install import run_install

    try:
        result = run_install(
            scope=scope,
            shell=shell,
            config_path=ctx.obj.get("config_path"),
            confirm=_confirm,
            notify=_notify,
        )
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        _fail(str(e))
        return

    if result.error:
        _fail(result.error)
        return

    click.secho("\n⚡ install", fg="cyan", bold=True)
    _print_report(ctx, result.report)


@cli.command()
@_scope_option
@_shell_option
@click.pass_context
def uninstall(ctx: click.Context, scope: str, shell: str) -> None:
    """Remove the profile link, its tools and the theme."""
    from profilekit.core.use_cases.uninstall import run_uninstall

    try:
        result = run_uninstall(
            scope=scope,
            shell=shell,
            config_path=ctx.obj.get("config_path"),
            confirm=_confirm,
            notify=_notify,
        )
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        _fail(str(e))
        return

    if result.error:
        _fail(result.error)
        return

    click.secho("\n🧹 uninstall", fg="cyan", bold=True)
    _print_report(ctx, result.report)


@cli.command()
@_scope_option
@_shell_option
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def status(ctx: click.Context, scope: str, shell: str, as_json: bool) -> None:
    """Show where the profile goes and what is there now."""
    from profilekit.core.use_cases.status import get_status

    try:
        result = get_status(scope=scope, shell=shell, config_path=ctx.obj.get("config_path"))
    except Exception as e:
        logger.debug("Unhandled error", exc_info=True)
        _fail(str(e))
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if result.error:
            sys.exit(1)
        return

    if result.error:
        _fail(result.error)
        return

    info = result.status
    assert info is not None

    click.secho(f"\n📋 {info.policy.scope.value}", fg="cyan", bold=True)
    click.echo(f"   Running under: {info.capabilities.shell_label}"
               f"{' (elevated)' if info.capabilities.is_elevated else ''}")
    click.echo(f"   Profile source: {info.profile_source}")

    click.echo()
    click.secho("   Targets:", fg="white", bold=True)
    for target in info.targets:
        if target.linked_to_source:
            click.secho(f"     ✓ {target.shell.label}", fg="green", nl=False)
        elif target.state.absent:
            click.secho(f"     ○ {target.shell.label}", fg="white", nl=False)
        else:
            click.secho(f"     ⚠ {target.shell.label}", fg="yellow", nl=False)
        click.echo(f"  {target.path} ({target.state.describe()})")

    click.echo()
    click.secho("   Packages:", fg="white", bold=True)
    for package_id, present in info.packages.items():
        if present is None:
            click.secho(f"     ? {package_id}", fg="yellow")
        elif present:
            click.secho(f"     ✓ {package_id}", fg="green")
        else:
            click.echo(f"     ○ {package_id}")

    click.echo()
    marker = "✓" if info.theme_present else "○"
    click.echo(f"   Theme: {marker} {info.theme_path}")
    click.echo()


# ── Elevated helpers ────────────────────────────────────────────────
#
# Run by the elevated child process. Exit code is the result.


@cli.command(hidden=True)
@click.option("--source", required=True, type=click.Path(), help="Profile to link to.")
@click.option("--target", required=True, type=click.Path(), help="Profile path to create.")
@click.option("--replace", is_flag=True, help="Replace an existing entry.")
def link(source: str, target: str, replace: bool) -> None:
    """Create the profile symlink (elevated helper)."""
    from profilekit.core.services.link_reconciler import create_link

    try:
        create_link(Path(source), Path(target), replace=replace)
    except OSError as e:
        click.echo(f"link failed: {e}", err=True)
        sys.exit(1)


@cli.command(hidden=True)
@click.option("--target", required=True, type=click.Path(), help="Profile path to remove.")
def unlink(target: str) -> None:
    """Remove the profile symlink (elevated helper)."""
    from profilekit.core.services.link_reconciler import remove_link

    try:
        remove_link(Path(target))
    except OSError as e:
        click.echo(f"unlink failed: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    cli()
