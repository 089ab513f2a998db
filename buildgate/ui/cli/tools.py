"""
CLI commands for required tools and package managers.

Thin wrappers over ``buildgate.core.use_cases.check_tools`` and the
package manager registry. Read-only: nothing here installs.
"""

from __future__ import annotations

import json
import sys

import click


@click.group("tools")
def tools() -> None:
    """Tools — required commands and available package managers."""


@tools.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, as_json: bool) -> None:
    """Report which required tools are on PATH (installs nothing)."""
    from buildgate.adapters.shell.command import SubprocessCommandAdapter
    from buildgate.core.use_cases.check_tools import check_tools

    report = check_tools(SubprocessCommandAdapter(), config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        if not report.all_available:
            sys.exit(1)
        return

    if report.error:
        click.secho(f"❌ {report.error}", fg="red", err=True)
        sys.exit(1)

    click.secho("🔍 Required tools:", fg="cyan", bold=True)
    for tool in report.tools:
        if tool.available:
            click.secho(f"   ✅ {tool.command:<14} {tool.path}", fg="green")
        else:
            pkg = f" (package: {tool.package})" if tool.package != tool.command else ""
            click.secho(f"   ❌ {tool.command:<14} missing{pkg}", fg="red")

    if report.missing:
        click.echo()
        if report.package_manager:
            click.echo(f"   Missing tools would be installed with: {report.package_manager}")
        else:
            click.secho("   No supported package manager found; install them manually.", fg="yellow")
        sys.exit(1)


@tools.command("managers")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def managers(as_json: bool) -> None:
    """List known package managers in priority order."""
    from buildgate.adapters.registry import PackageManagerRegistry
    from buildgate.adapters.shell.command import SubprocessCommandAdapter

    registry = PackageManagerRegistry(SubprocessCommandAdapter())
    availability = registry.availability()
    selected = registry.detect_available()

    if as_json:
        click.echo(json.dumps({
            "selected": selected.name if selected else None,
            "managers": [
                {
                    "name": m.name,
                    "label": m.label,
                    "available": availability[m.name],
                    "needs_sudo": m.needs_sudo,
                }
                for m in registry.managers
            ],
        }, indent=2))
        return

    click.secho("📦 Package managers (priority order):", fg="cyan", bold=True)
    for position, manager in enumerate(registry.managers, start=1):
        marker = " ← selected" if selected is not None and manager is selected else ""
        if availability[manager.name]:
            click.secho(f"   {position}. ✅ {manager.name:<8} {manager.label}{marker}", fg="green")
        else:
            click.echo(f"   {position}. ·  {manager.name:<8} {manager.label}")
