"""
Invocation and Receipt models — the command execution contract.

Invocations describe an external command to run. Receipts describe what
happened when it ran. This is the I/O contract between the engine and
command adapters: the engine sends Invocations, adapters return
Receipts. Never exceptions.
"""

from __future__ import annotations

import shlex
from typing import Any

from pydantic import BaseModel, ConfigDict

# Exit code reported by shells for "command not found"
EXIT_COMMAND_NOT_FOUND = 127


class Invocation(BaseModel):
    """A single external command to execute.

    ``needs_sudo`` marks commands that must run as root; the subprocess
    adapter decides whether a ``sudo`` prefix is actually required.
    """

    model_config = ConfigDict(frozen=True)

    argv: tuple[str, ...]
    needs_sudo: bool = False

    @property
    def display(self) -> str:
        """Shell-quoted form for diagnostics."""
        return shlex.join(self.argv)


class Receipt(BaseModel):
    """Result of running an Invocation.

    Adapters NEVER raise — a missing binary, a non-zero exit, or an OS
    error all end up here with ``exit_code != 0``.
    """

    argv: tuple[str, ...] = ()
    exit_code: int = 0
    duration_ms: int = 0

    output: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the command exited with status 0."""
        return self.exit_code == 0

    @property
    def failed(self) -> bool:
        return not self.ok

    @classmethod
    def success(
        cls,
        argv: tuple[str, ...] | list[str],
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(argv=tuple(argv), exit_code=0, output=output, **kwargs)

    @classmethod
    def failure(
        cls,
        argv: tuple[str, ...] | list[str],
        exit_code: int = 1,
        error: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        if exit_code == 0:
            raise ValueError("failure receipt needs a non-zero exit code")
        return cls(
            argv=tuple(argv),
            exit_code=exit_code,
            error=error or f"Command exited with code {exit_code}",
            **kwargs,
        )

    @classmethod
    def not_found(cls, argv: tuple[str, ...] | list[str], **kwargs: Any) -> Receipt:
        """Create a receipt for a command whose binary is not on PATH."""
        name = argv[0] if argv else ""
        return cls.failure(
            argv,
            exit_code=EXIT_COMMAND_NOT_FOUND,
            error=f"Command not found: {name}",
            **kwargs,
        )
