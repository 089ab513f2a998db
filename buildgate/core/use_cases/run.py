"""
Run use case — resolve tools, then execute the pipeline.

This is the top-level orchestrator: it loads the pipeline, enters the
pipeline root, gates on every required tool, runs the stages, and
optionally records the result. The full vertical slice from CLI intent
to a finished outcome.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path

from buildgate.adapters.base import CommandAdapter
from buildgate.adapters.registry import PackageManagerRegistry
from buildgate.core.config.loader import ConfigError, pipeline_root, resolve_pipeline
from buildgate.core.engine.resolver import (
    DependencyError,
    DependencyResolver,
    NoPackageManagerError,
    ResolvedTool,
    ResolverObserver,
)
from buildgate.core.engine.runner import PipelineObserver, PipelineRunner, StageExecutionError
from buildgate.core.engine.workdir import DirectoryTransitionError, enter_directory
from buildgate.core.models.outcome import PipelineOutcome
from buildgate.core.models.pipeline import PipelineConfig
from buildgate.core.persistence.history import HistoryWriter, RunEntry

logger = logging.getLogger(__name__)


class FailureKind(StrEnum):
    """Which phase a failed run stopped in."""

    CONFIG = "config"
    DIRECTORY = "directory"
    DEPENDENCY = "dependency"
    STAGE = "stage"


@dataclass
class RunResult:
    """Result of one buildgate run."""

    run_id: str = ""
    pipeline: PipelineConfig | None = None
    config_path: Path | None = None
    root: Path | None = None
    tools: list[ResolvedTool] = field(default_factory=list)
    outcome: PipelineOutcome | None = None
    error: str | None = None
    failure_kind: FailureKind | None = None
    failed_tool: str | None = None
    hint: list[str] = field(default_factory=list)
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None and self.outcome is not None and self.outcome.overall_success

    @property
    def failed_stage(self) -> str | None:
        if self.outcome and self.outcome.failed_at:
            return self.outcome.failed_at.label
        return None

    def to_dict(self) -> dict:
        result: dict = {
            "run_id": self.run_id,
            "ok": self.ok,
            "pipeline": self.pipeline.name if self.pipeline else None,
            "config_path": str(self.config_path) if self.config_path else None,
            "root": str(self.root) if self.root else None,
            "tools": [t.to_dict() for t in self.tools],
            "duration_ms": self.duration_ms,
        }
        if self.outcome:
            result["outcome"] = self.outcome.to_dict()
        if self.error:
            result["error"] = self.error
            result["failure_kind"] = self.failure_kind.value if self.failure_kind else None
        if self.failed_tool:
            result["failed_tool"] = self.failed_tool
        if self.hint:
            result["hint"] = self.hint
        return result

    def to_history_entry(self) -> RunEntry:
        outcome = self.outcome
        return RunEntry(
            run_id=self.run_id,
            pipeline=self.pipeline.name if self.pipeline else "",
            status="succeeded" if self.ok else "failed",
            stages_total=len(self.pipeline.stages) if self.pipeline else 0,
            stages_completed=len(outcome.completed_stages) if outcome else 0,
            failed_stage=self.failed_stage,
            failed_tool=self.failed_tool,
            error=self.error,
            duration_ms=self.duration_ms,
        )


def generate_run_id() -> str:
    """Generate a unique run ID."""
    now = datetime.now(UTC).strftime("%Y%m%d-%H%M%S")
    short = uuid.uuid4().hex[:6]
    return f"run-{now}-{short}"


def run_check(
    adapter: CommandAdapter,
    config_path: Path | None = None,
    root: Path | None = None,
    skip_deps: bool = False,
    install_plugin: bool = False,
    record: bool = False,
    registry: PackageManagerRegistry | None = None,
    resolver_observer: ResolverObserver | None = None,
    pipeline_observer: PipelineObserver | None = None,
) -> RunResult:
    """Resolve required tools and run every stage, fail-fast.

    Args:
        adapter: Command adapter for PATH lookups, installs and stages.
        config_path: Explicit pipeline file. None = search, then built-in.
        root: Directory to run from. None = the pipeline file's
            directory, or cwd for the built-in pipeline.
        skip_deps: Skip dependency resolution.
        install_plugin: Enable the built-in optional install stage.
        record: Append the result to the run history ledger.
        registry: Optional pre-configured package manager registry.
        resolver_observer: Progress observer for dependency resolution.
        pipeline_observer: Progress observer for stage execution.

    Returns:
        RunResult. Never raises for config, dependency, directory or
        stage failures; those are reported through ``error``.
    """
    result = RunResult(run_id=generate_run_id())
    start = time.monotonic()

    # ── Load pipeline ────────────────────────────────────────────
    try:
        pipeline, found_path = resolve_pipeline(
            config_path=config_path,
            start_dir=root,
            install_plugin=install_plugin,
        )
    except ConfigError as e:
        result.error = str(e)
        result.failure_kind = FailureKind.CONFIG
        return result

    result.pipeline = pipeline
    result.config_path = found_path
    result.root = (root or pipeline_root(found_path)).resolve()

    # ── Enter root, resolve, run ─────────────────────────────────
    try:
        with enter_directory(result.root):
            _resolve_and_run(
                result,
                pipeline,
                adapter,
                skip_deps=skip_deps,
                registry=registry,
                resolver_observer=resolver_observer,
                pipeline_observer=pipeline_observer,
            )
    except DirectoryTransitionError as e:
        result.error = str(e)
        result.failure_kind = FailureKind.DIRECTORY

    result.duration_ms = int((time.monotonic() - start) * 1000)

    # ── Record ───────────────────────────────────────────────────
    # Never create a root that could not be entered
    if record and result.root is not None:
        if result.root.is_dir():
            HistoryWriter(project_root=result.root).write(result.to_history_entry())
        else:
            logger.warning("Not recording run %s: %s is not a directory", result.run_id, result.root)

    return result


def _resolve_and_run(
    result: RunResult,
    pipeline: PipelineConfig,
    adapter: CommandAdapter,
    skip_deps: bool,
    registry: PackageManagerRegistry | None,
    resolver_observer: ResolverObserver | None,
    pipeline_observer: PipelineObserver | None,
) -> None:
    if skip_deps:
        logger.info("Skipping dependency resolution")
    else:
        resolver = DependencyResolver(adapter, registry=registry, observer=resolver_observer)
        try:
            resolver.ensure_all(pipeline.tools)
        except DependencyError as e:
            logger.debug("Dependency resolution stopped at %s", e.command)
            result.error = str(e)
            result.failure_kind = FailureKind.DEPENDENCY
            result.failed_tool = e.command
            if isinstance(e, NoPackageManagerError):
                result.hint = list(e.hint)
            return
        finally:
            result.tools = resolver.resolved

    runner = PipelineRunner(adapter, observer=pipeline_observer)
    result.outcome = runner.run(pipeline.stages)

    error = StageExecutionError.from_outcome(result.outcome)
    if error is not None:
        result.error = error.stage.failure_text
        result.failure_kind = FailureKind.STAGE
