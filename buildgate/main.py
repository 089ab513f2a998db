"""
buildgate — CLI entrypoint.

Usage:
    buildgate                 # same as `buildgate run`
    buildgate run --root path/to/book
    buildgate stages
    buildgate tools check
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path

import click

from buildgate import __version__
from buildgate.core.observability.logging_config import (
    LOG_FILE_ENV,
    LOG_FILE_LEVEL_ENV,
    cli_log_level,
    setup_logging,
)
from buildgate.ui.cli.tools import tools


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="buildgate")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Only print failures.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False, dir_okay=False),
    default=None,
    help="Path to buildgate.yml (default: auto-detect, else built-in pipeline).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """buildgate — check tools, then build, test and validate in order."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    setup_logging(
        level=cli_log_level(verbose=verbose, quiet=quiet, debug=debug),
        log_file=os.environ.get(LOG_FILE_ENV),
        log_file_level=os.environ.get(LOG_FILE_LEVEL_ENV),
    )

    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root to run stages from (default: config dir or cwd).",
)
@click.option("--skip-deps", is_flag=True, help="Do not check or install required tools.")
@click.option(
    "--install-plugin",
    is_flag=True,
    help="Also run the optional 'cargo install' stage for mdbook-trpl.",
)
@click.option("--record", is_flag=True, help="Append the result to .state/runs.ndjson.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def run(
    ctx: click.Context,
    root: Path | None,
    skip_deps: bool,
    install_plugin: bool,
    record: bool,
    as_json: bool,
) -> None:
    """Resolve required tools, then run every stage, stopping at the first failure."""
    from buildgate.adapters.shell.command import SubprocessCommandAdapter
    from buildgate.core.use_cases.run import run_check
    from buildgate.ui.cli.progress import ConsoleProgress

    progress = ConsoleProgress(quiet=ctx.obj.get("quiet", False) or as_json)
    adapter = SubprocessCommandAdapter(capture_output=as_json)

    result = run_check(
        adapter,
        config_path=ctx.obj.get("config_path"),
        root=root,
        skip_deps=skip_deps,
        install_plugin=install_plugin,
        record=record,
        resolver_observer=progress,
        pipeline_observer=progress,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        if not result.ok:
            sys.exit(1)
        return

    if result.ok:
        return

    if result.failed_stage:
        click.secho(f"❌ Error: stage '{result.failed_stage}' failed: {result.error}", fg="red", err=True)
    elif result.failed_tool:
        click.secho(f"❌ Error: {result.error}", fg="red", err=True)
        for line in result.hint:
            click.echo(f"   {line}", err=True)
    else:
        click.secho(f"❌ Error: {result.error}", fg="red", err=True)
    sys.exit(1)


@cli.command()
@click.option("--install-plugin", is_flag=True, help="Include the optional plugin install stage.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def stages(ctx: click.Context, install_plugin: bool, as_json: bool) -> None:
    """List the configured tools and stages in execution order."""
    from buildgate.core.config.loader import ConfigError, resolve_pipeline

    try:
        pipeline, path = resolve_pipeline(
            config_path=ctx.obj.get("config_path"),
            install_plugin=install_plugin,
        )
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps({
            "pipeline": pipeline.name,
            "config_path": str(path) if path else None,
            "tools": [t.model_dump() for t in pipeline.tools],
            "stages": [
                {
                    "label": s.label,
                    "description": s.description,
                    "directory": s.working_directory,
                    "command": list(s.command),
                }
                for s in pipeline.stages
            ],
        }, indent=2))
        return

    source = str(path) if path else "built-in"
    click.secho(f"📋 {pipeline.name} ({source})", fg="cyan", bold=True)
    click.echo(f"   Tools: {', '.join(pipeline.tool_names) or '(none)'}")
    click.echo()
    for position, stage in enumerate(pipeline.stages, start=1):
        where = f"  [{stage.working_directory}]" if stage.working_directory else ""
        click.echo(f"   {position}. {stage.label:<20} {stage.command_display}{where}")


@cli.command()
@click.option("-n", "limit", default=10, show_default=True, help="Number of runs to show.")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project root holding .state/ (default: config dir or cwd).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def history(ctx: click.Context, limit: int, root: Path | None, as_json: bool) -> None:
    """Show recorded runs (see `run --record`)."""
    from buildgate.core.config.loader import find_pipeline_file, pipeline_root
    from buildgate.core.persistence.history import HistoryWriter

    if root is None:
        root = pipeline_root(ctx.obj.get("config_path") or find_pipeline_file())

    entries = HistoryWriter(project_root=root).read_recent(limit)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No recorded runs.")
        return

    for entry in entries:
        color = "green" if entry.status == "succeeded" else "red"
        click.secho(f"   {entry.timestamp}  {entry.status:<9}", fg=color, nl=False)
        detail = f" {entry.stages_completed}/{entry.stages_total} stages"
        if entry.failed_stage:
            detail += f", failed at {entry.failed_stage}"
        elif entry.failed_tool:
            detail += f", missing {entry.failed_tool}"
        click.echo(f"{detail}  ({entry.run_id})")


cli.add_command(tools)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
