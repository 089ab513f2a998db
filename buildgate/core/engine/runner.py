"""
Pipeline runner — sequential, fail-fast stage execution.

The runner is the heart of buildgate. It takes an ordered list of
stages, runs each one through the command adapter (inside its working
directory, if it names one), and stops at the first failure.

Flow:
    PENDING → RUNNING(0) → RUNNING(1) → … → SUCCEEDED
                       ↘ FAILED(i) on the first non-zero stage

No stage is retried, reordered, or rolled back.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from buildgate.adapters.base import CommandAdapter
from buildgate.core.engine.workdir import DirectoryTransitionError, enter_directory
from buildgate.core.models.command import Invocation, Receipt
from buildgate.core.models.outcome import ExecutionResult, PipelineOutcome, RunnerState
from buildgate.core.models.stage import Stage

logger = logging.getLogger(__name__)

# Exit code recorded when a stage's directory cannot be entered
EXIT_DIRECTORY_ERROR = 1


class StageExecutionError(Exception):
    """A stage's command returned a non-zero exit status."""

    def __init__(self, stage: Stage, result: ExecutionResult):
        self.stage = stage
        self.result = result
        super().__init__(f"Stage '{stage.label}' failed: {stage.failure_text}")

    @classmethod
    def from_outcome(cls, outcome: PipelineOutcome) -> StageExecutionError | None:
        """Build the error for a failed outcome, or None if it succeeded."""
        if outcome.failed_at is None or outcome.failed_result is None:
            return None
        return cls(outcome.failed_at, outcome.failed_result)


class PipelineObserver:
    """Progress callbacks for a pipeline run. Default: no-op."""

    def pipeline_started(self, stages: Sequence[Stage]) -> None:
        pass

    def stage_started(self, index: int, stage: Stage) -> None:
        pass

    def stage_finished(self, index: int, stage: Stage, result: ExecutionResult) -> None:
        pass

    def pipeline_finished(self, outcome: PipelineOutcome) -> None:
        pass


class PipelineRunner:
    """Runs stages in order and halts on the first failure.

    A runner instance performs exactly one run; its ``state`` follows
    the PENDING → RUNNING → SUCCEEDED/FAILED machine and never leaves a
    terminal state.

    Args:
        adapter: Command adapter that executes stage commands.
        observer: Optional progress observer.
    """

    def __init__(self, adapter: CommandAdapter, observer: PipelineObserver | None = None):
        self._adapter = adapter
        self._observer = observer or PipelineObserver()
        self._state = RunnerState.PENDING
        self._current_index: int | None = None

    @property
    def state(self) -> RunnerState:
        return self._state

    @property
    def current_index(self) -> int | None:
        """Index of the active (or last active) stage."""
        return self._current_index

    def run(self, stages: Sequence[Stage]) -> PipelineOutcome:
        """Execute ``stages`` strictly in order.

        Returns:
            PipelineOutcome. ``failed_at`` is the first failing stage,
            or None when every stage succeeded.

        Raises:
            RuntimeError: If this runner has already run.
        """
        if self._state != RunnerState.PENDING:
            raise RuntimeError(f"Runner already used (state={self._state.value})")

        outcome = PipelineOutcome()
        self._transition(outcome, RunnerState.RUNNING)
        self._observer.pipeline_started(stages)

        for index, stage in enumerate(stages):
            self._current_index = index
            self._observer.stage_started(index, stage)

            result = self._execute_stage(stage)
            outcome.completed_stages.append(result)
            self._observer.stage_finished(index, stage, result)

            if not result.succeeded:
                logger.info("✗ %s → exit %d", stage.label, result.exit_code)
                outcome.failed_at = stage
                self._transition(outcome, RunnerState.FAILED)
                self._observer.pipeline_finished(outcome)
                return outcome

            logger.info("✓ %s", stage.label)

        self._transition(outcome, RunnerState.SUCCEEDED)
        self._observer.pipeline_finished(outcome)
        return outcome

    def _transition(self, outcome: PipelineOutcome, state: RunnerState) -> None:
        logger.debug("Runner %s → %s", self._state.value, state.value)
        self._state = state
        outcome.state = state

    def _execute_stage(self, stage: Stage) -> ExecutionResult:
        invocation = Invocation(argv=stage.command)
        start = time.monotonic()

        if stage.working_directory:
            try:
                with enter_directory(stage.working_directory):
                    receipt = self._adapter.execute(invocation)
            except DirectoryTransitionError as e:
                logger.error("%s", e)
                return ExecutionResult(
                    stage_label=stage.label,
                    succeeded=False,
                    exit_code=EXIT_DIRECTORY_ERROR,
                    error=str(e),
                    duration_ms=int((time.monotonic() - start) * 1000),
                )
        else:
            receipt = self._adapter.execute(invocation)

        return _result_from_receipt(stage, receipt, start)


def _result_from_receipt(stage: Stage, receipt: Receipt, start: float) -> ExecutionResult:
    return ExecutionResult(
        stage_label=stage.label,
        succeeded=receipt.ok,
        exit_code=receipt.exit_code,
        error=None if receipt.ok else receipt.error,
        duration_ms=receipt.duration_ms or int((time.monotonic() - start) * 1000),
    )


def run_pipeline(
    stages: Sequence[Stage],
    adapter: CommandAdapter,
    observer: PipelineObserver | None = None,
) -> PipelineOutcome:
    """Run ``stages`` with a fresh runner."""
    return PipelineRunner(adapter, observer=observer).run(stages)
