"""
Outcome models — per-stage results and the aggregate pipeline outcome.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from buildgate.core.models.stage import Stage


class RunnerState(StrEnum):
    """Pipeline runner states.

    Transitions:
        PENDING → RUNNING
        RUNNING → RUNNING     (stage i succeeded, move to i+1)
        RUNNING → SUCCEEDED   (last stage succeeded)
        RUNNING → FAILED      (any stage failed)

    SUCCEEDED and FAILED are terminal.
    """

    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (RunnerState.SUCCEEDED, RunnerState.FAILED)


@dataclass(frozen=True)
class ExecutionResult:
    """Result of executing one stage."""

    stage_label: str
    succeeded: bool
    exit_code: int
    error: str | None = None
    duration_ms: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "stage": self.stage_label,
            "succeeded": self.succeeded,
            "exit_code": self.exit_code,
            "error": self.error,
            "duration_ms": self.duration_ms,
        }


@dataclass
class PipelineOutcome:
    """Aggregate result of one pipeline run.

    Built incrementally by the runner; once ``state`` is terminal the
    outcome no longer changes.
    """

    completed_stages: list[ExecutionResult] = field(default_factory=list)
    failed_at: Stage | None = None
    state: RunnerState = RunnerState.PENDING

    @property
    def overall_success(self) -> bool:
        return self.state == RunnerState.SUCCEEDED

    @property
    def failed_result(self) -> ExecutionResult | None:
        """The result of the failing stage, if the run failed."""
        if self.failed_at is None or not self.completed_stages:
            return None
        return self.completed_stages[-1]

    @property
    def duration_ms(self) -> int:
        return sum(r.duration_ms for r in self.completed_stages)

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.state.value,
            "overall_success": self.overall_success,
            "failed_at": self.failed_at.label if self.failed_at else None,
            "stages": [r.to_dict() for r in self.completed_stages],
            "duration_ms": self.duration_ms,
        }
