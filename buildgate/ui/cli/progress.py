"""
Console progress — human-readable lines around each phase.

Implements both engine observers and writes with click, so the engine
itself stays free of terminal output.
"""

from __future__ import annotations

from collections.abc import Sequence

import click

from buildgate.adapters.package_managers import PackageManagerSpec
from buildgate.core.engine.resolver import ResolvedTool, ResolverObserver
from buildgate.core.engine.runner import PipelineObserver
from buildgate.core.models.outcome import ExecutionResult, PipelineOutcome
from buildgate.core.models.requirement import ToolRequirement
from buildgate.core.models.stage import Stage


class ConsoleProgress(ResolverObserver, PipelineObserver):
    """Echo progress for dependency checks and stages.

    Args:
        quiet: Print nothing. The caller still reports the final error.
    """

    def __init__(self, quiet: bool = False):
        self._quiet = quiet

    def _echo(self, message: str = "", **style) -> None:
        if self._quiet:
            return
        if style:
            click.secho(message, **style)
        else:
            click.echo(message)

    # ── Dependencies ────────────────────────────────────────────

    def resolution_started(self, requirements: Sequence[ToolRequirement]) -> None:
        self._echo("✅ Checking for required command-line tools...", fg="cyan", bold=True)

    def requirement_present(self, requirement: ToolRequirement, path: str) -> None:
        self._echo(f"✅ Command '{requirement.command}' is already installed.")

    def requirement_missing(self, requirement: ToolRequirement) -> None:
        self._echo(
            f"❌ Command '{requirement.command}' not found. Attempting to install...",
            fg="yellow",
        )

    def install_started(self, requirement: ToolRequirement, manager: PackageManagerSpec) -> None:
        self._echo(f"🔧 Detected {manager.name}. Trying to install '{requirement.package}'...")

    def requirement_installed(self, requirement: ToolRequirement, path: str) -> None:
        self._echo(f"✅ Successfully installed '{requirement.command}'!", fg="green")

    def resolution_finished(self, resolved: Sequence[ResolvedTool]) -> None:
        names = ", ".join(t.requirement.command for t in resolved)
        self._echo(f"🔍 All required tools are installed: {names}")
        self._echo()

    # ── Stages ──────────────────────────────────────────────────

    def stage_started(self, index: int, stage: Stage) -> None:
        self._echo(f"▶ {stage.description or stage.label}...", fg="cyan", bold=True)
        where = f" in {stage.working_directory}/" if stage.working_directory else ""
        self._echo(f"   $ {stage.command_display}{where}", dim=True)

    def stage_finished(self, index: int, stage: Stage, result: ExecutionResult) -> None:
        if result.succeeded:
            self._echo(f"✅ {stage.success_message or stage.label + ' passed'}", fg="green")
            self._echo()
        elif result.error:
            self._echo(f"   {result.error}", fg="red")

    def pipeline_finished(self, outcome: PipelineOutcome) -> None:
        if outcome.overall_success:
            self._echo("🎉 All steps executed successfully. 🚀", fg="green", bold=True)
