"""
Pipeline configuration model — what buildgate.yml deserializes into.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from buildgate.core.models.requirement import ToolRequirement
from buildgate.core.models.stage import Stage


class PipelineConfig(BaseModel):
    """Declared tools and ordered stages for one project.

    Stage order is the execution order. Inter-stage data dependencies
    are not checked; the file author is responsible for ordering.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = "pipeline"
    tools: tuple[ToolRequirement, ...] = ()
    stages: tuple[Stage, ...] = Field(default=())

    @model_validator(mode="after")
    def _unique_labels(self) -> PipelineConfig:
        seen: set[str] = set()
        for stage in self.stages:
            if stage.label in seen:
                raise ValueError(f"duplicate stage label: {stage.label!r}")
            seen.add(stage.label)
        return self

    @property
    def tool_names(self) -> list[str]:
        return [t.command for t in self.tools]

    def get_stage(self, label: str) -> Stage | None:
        for stage in self.stages:
            if stage.label == label:
                return stage
        return None
