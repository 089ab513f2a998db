"""
Tool requirement model — a command that must exist before stages run.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ToolRequirement(BaseModel):
    """A required command-line tool and the package that provides it.

    ``package`` defaults to ``command`` — most tools ship in a package
    of the same name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    command: str = Field(min_length=1)
    package: str = Field(min_length=1)

    @model_validator(mode="before")
    @classmethod
    def _fill_package(cls, data: Any) -> Any:
        # "cargo" is shorthand for {command: cargo, package: cargo}
        if isinstance(data, str):
            return {"command": data, "package": data}
        if isinstance(data, dict) and not data.get("package") and data.get("command"):
            return {**data, "package": data["command"]}
        return data
