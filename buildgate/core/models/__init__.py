"""
Domain models — configuration and result types for the pipeline.

All models are re-exported here for convenient access:

    from buildgate.core.models import Stage, ToolRequirement, PipelineOutcome
"""

from buildgate.core.models.command import Invocation, Receipt
from buildgate.core.models.outcome import ExecutionResult, PipelineOutcome, RunnerState
from buildgate.core.models.pipeline import PipelineConfig
from buildgate.core.models.requirement import ToolRequirement
from buildgate.core.models.stage import Stage

__all__ = [
    "ExecutionResult",
    "Invocation",
    "PipelineConfig",
    "PipelineOutcome",
    "Receipt",
    "RunnerState",
    "Stage",
    "ToolRequirement",
]
