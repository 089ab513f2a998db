"""
Tests for the pipeline runner — ordering, fail-fast, directories, states.
"""

import os
from pathlib import Path

import pytest

from buildgate.adapters.mock import MockCommandAdapter
from buildgate.core.engine.runner import (
    EXIT_DIRECTORY_ERROR,
    PipelineObserver,
    PipelineRunner,
    StageExecutionError,
    run_pipeline,
)
from buildgate.core.models.outcome import RunnerState


class RecordingObserver(PipelineObserver):
    def __init__(self):
        self.events: list[tuple] = []

    def pipeline_started(self, stages):
        self.events.append(("pipeline_started", len(stages)))

    def stage_started(self, index, stage):
        self.events.append(("stage_started", index, stage.label))

    def stage_finished(self, index, stage, result):
        self.events.append(("stage_finished", index, result.succeeded))

    def pipeline_finished(self, outcome):
        self.events.append(("pipeline_finished", outcome.state.value))


# ── Success ──────────────────────────────────────────────────────────


class TestAllSucceed:
    def test_overall_success(self, make_stage):
        stages = [make_stage("one"), make_stage("two"), make_stage("three")]
        mock = MockCommandAdapter()

        outcome = run_pipeline(stages, mock)

        assert outcome.overall_success
        assert outcome.failed_at is None
        assert outcome.state == RunnerState.SUCCEEDED
        assert [r.stage_label for r in outcome.completed_stages] == ["one", "two", "three"]

    def test_runs_in_declaration_order(self, make_stage):
        stages = [make_stage(label) for label in ("c", "a", "b")]
        mock = MockCommandAdapter()
        run_pipeline(stages, mock)
        assert mock.executed == [("echo", "c"), ("echo", "a"), ("echo", "b")]

    def test_empty_pipeline_succeeds(self):
        outcome = run_pipeline([], MockCommandAdapter())
        assert outcome.overall_success
        assert outcome.completed_stages == []


# ── Fail-fast ────────────────────────────────────────────────────────


class TestFailFast:
    @pytest.mark.parametrize("failing", [0, 2, 4])
    def test_stops_at_failing_stage(self, make_stage, failing):
        stages = [make_stage(f"s{i}") for i in range(5)]
        mock = MockCommandAdapter()
        mock.set_failure(stages[failing].command, exit_code=101)

        outcome = run_pipeline(stages, mock)

        assert not outcome.overall_success
        assert outcome.state == RunnerState.FAILED
        assert outcome.failed_at == stages[failing]
        assert mock.executed == [s.command for s in stages[: failing + 1]]
        assert len(outcome.completed_stages) == failing + 1
        assert outcome.completed_stages[-1].exit_code == 101
        assert all(r.succeeded for r in outcome.completed_stages[:-1])

    def test_command_not_found_fails_stage(self, make_stage):
        stages = [make_stage("lfp", "cargo", "run", "--bin", "lfp", "src"), make_stage("after")]
        mock = MockCommandAdapter()
        mock.set_failure(("cargo", "run", "--bin", "lfp", "src"), exit_code=127)

        outcome = run_pipeline(stages, mock)

        assert outcome.failed_at.label == "lfp"
        assert mock.executed == [("cargo", "run", "--bin", "lfp", "src")]

    def test_stage_execution_error_from_outcome(self, make_stage):
        stage = make_stage("book", "mdbook", "build", on_failure_message="'mdbook build' failed.")
        mock = MockCommandAdapter()
        mock.set_failure(stage.command)

        outcome = run_pipeline([stage], mock)
        error = StageExecutionError.from_outcome(outcome)

        assert error is not None
        assert error.stage is stage
        assert error.result.exit_code == 1
        assert "'mdbook build' failed." in str(error)

    def test_no_error_for_success(self, make_stage):
        outcome = run_pipeline([make_stage("ok")], MockCommandAdapter())
        assert StageExecutionError.from_outcome(outcome) is None


# ── Working directories ──────────────────────────────────────────────


class TestDirectories:
    def test_stage_runs_inside_directory(self, workspace: Path, make_stage):
        stages = [make_stage("build", "cargo", "build", directory="packages/trpl")]
        mock = MockCommandAdapter()

        run_pipeline(stages, mock)

        assert Path(mock.cwd_log[0]).resolve() == (workspace / "packages" / "trpl").resolve()

    def test_directory_restored_between_stages(self, workspace: Path, make_stage):
        stages = [
            make_stage("build", "cargo", "build", directory="packages/trpl"),
            make_stage("test", "cargo", "test"),
            make_stage("plugin", "cargo", "test", "-p", "x", directory="packages/mdbook-trpl"),
        ]
        mock = MockCommandAdapter()
        before = os.getcwd()

        run_pipeline(stages, mock)

        cwds = [Path(c).resolve() for c in mock.cwd_log]
        assert cwds == [
            (workspace / "packages" / "trpl").resolve(),
            workspace.resolve(),
            (workspace / "packages" / "mdbook-trpl").resolve(),
        ]
        assert os.getcwd() == before

    def test_directory_restored_after_failure(self, workspace: Path, make_stage):
        stage = make_stage("build", "cargo", "build", directory="packages/trpl")
        mock = MockCommandAdapter()
        mock.set_failure(stage.command)
        before = os.getcwd()

        outcome = run_pipeline([stage], mock)

        assert not outcome.overall_success
        assert os.getcwd() == before

    def test_missing_directory_fails_stage_without_running(self, workspace: Path, make_stage):
        stages = [
            make_stage("first"),
            make_stage("ghost", "cargo", "build", directory="packages/ghost"),
            make_stage("never"),
        ]
        mock = MockCommandAdapter()
        before = os.getcwd()

        outcome = run_pipeline(stages, mock)

        assert outcome.failed_at.label == "ghost"
        result = outcome.failed_result
        assert result.exit_code == EXIT_DIRECTORY_ERROR
        assert "packages/ghost" in result.error
        assert mock.executed == [("echo", "first")]
        assert os.getcwd() == before


# ── State machine ────────────────────────────────────────────────────


class TestRunnerState:
    def test_pending_before_run(self):
        runner = PipelineRunner(MockCommandAdapter())
        assert runner.state == RunnerState.PENDING
        assert runner.current_index is None

    def test_terminal_after_success(self, make_stage):
        runner = PipelineRunner(MockCommandAdapter())
        runner.run([make_stage("a"), make_stage("b")])
        assert runner.state == RunnerState.SUCCEEDED
        assert runner.current_index == 1

    def test_terminal_after_failure(self, make_stage):
        mock = MockCommandAdapter()
        stages = [make_stage("a"), make_stage("b"), make_stage("c")]
        mock.set_failure(stages[1].command)
        runner = PipelineRunner(mock)
        runner.run(stages)
        assert runner.state == RunnerState.FAILED
        assert runner.current_index == 1

    def test_runner_cannot_be_reused(self, make_stage):
        runner = PipelineRunner(MockCommandAdapter())
        runner.run([make_stage("a")])
        with pytest.raises(RuntimeError, match="already used"):
            runner.run([make_stage("a")])

    def test_observer_sees_running_stages(self, make_stage):
        mock = MockCommandAdapter()
        stages = [make_stage("a"), make_stage("b"), make_stage("c")]
        mock.set_failure(stages[1].command)
        observer = RecordingObserver()

        PipelineRunner(mock, observer=observer).run(stages)

        assert observer.events == [
            ("pipeline_started", 3),
            ("stage_started", 0, "a"),
            ("stage_finished", 0, True),
            ("stage_started", 1, "b"),
            ("stage_finished", 1, False),
            ("pipeline_finished", "failed"),
        ]
