"""
Stage model — one named unit of pipeline work.

A stage is a single external command, optionally run inside a
subdirectory of the project root, with the messages shown around it.
"""

from __future__ import annotations

import shlex
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Stage(BaseModel):
    """A build, test, or validation step.

    ``command`` may be given as a list or as a shell-like string, which
    is split with :func:`shlex.split`. It is never run through a shell.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    label: str = Field(min_length=1)
    description: str = ""
    working_directory: str | None = Field(default=None, alias="directory")
    command: tuple[str, ...]
    on_failure_message: str = Field(default="", alias="on_failure")
    success_message: str = Field(default="", alias="success")

    @field_validator("command", mode="before")
    @classmethod
    def _split_command(cls, value: Any) -> Any:
        if isinstance(value, str):
            return tuple(shlex.split(value))
        return value

    @field_validator("command")
    @classmethod
    def _require_command(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        if not value:
            raise ValueError("stage command must not be empty")
        return value

    @property
    def command_display(self) -> str:
        return shlex.join(self.command)

    @property
    def failure_text(self) -> str:
        """Failure message, falling back to a generic one naming the command."""
        if self.on_failure_message:
            return self.on_failure_message
        where = f" in {self.working_directory}/" if self.working_directory else ""
        return f"'{self.command_display}' failed{where}"
