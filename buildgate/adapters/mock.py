"""
Mock adapter — test double for the command execution contract.

Simulates PATH lookups and command exit codes without touching the
host. Configurable per command, and able to "install" a binary when a
given command succeeds so the resolver's re-probe can be exercised.
"""

from __future__ import annotations

import os

from buildgate.adapters.base import CommandAdapter
from buildgate.core.models.command import Invocation, Receipt


class MockCommandAdapter(CommandAdapter):
    """Scripted command adapter for tests.

    By default every command succeeds and no binary is on PATH.

    Args:
        available_commands: Binaries reported as present by ``which``.
        adapter_name: Name reported by the adapter.
    """

    def __init__(
        self,
        available_commands: list[str] | set[str] | None = None,
        adapter_name: str = "mock",
    ):
        self._name = adapter_name
        self._path: set[str] = set(available_commands or ())
        self._exit_codes: dict[tuple[str, ...], int] = {}
        self._installs: dict[tuple[str, ...], list[str]] = {}
        self._call_log: list[Invocation] = []
        self._cwd_log: list[str] = []
        self._which_log: list[str] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[Invocation]:
        """All invocations this mock has executed, in order."""
        return self._call_log

    @property
    def cwd_log(self) -> list[str]:
        """Working directory at the time of each execute call."""
        return self._cwd_log

    @property
    def which_log(self) -> list[str]:
        return self._which_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def executed(self) -> list[tuple[str, ...]]:
        """argv of every executed invocation."""
        return [inv.argv for inv in self._call_log]

    def is_available(self) -> bool:
        return True

    def add_command(self, *commands: str) -> None:
        """Make commands resolvable on the simulated PATH."""
        self._path.update(commands)

    def remove_command(self, *commands: str) -> None:
        self._path.difference_update(commands)

    def set_exit_code(self, argv: list[str] | tuple[str, ...], exit_code: int) -> None:
        """Script the exit code for an exact argv."""
        self._exit_codes[tuple(argv)] = exit_code

    def set_failure(self, argv: list[str] | tuple[str, ...], exit_code: int = 1) -> None:
        self.set_exit_code(argv, exit_code)

    def installs(self, argv: list[str] | tuple[str, ...], *commands: str) -> None:
        """When argv succeeds, add ``commands`` to the simulated PATH."""
        self._installs[tuple(argv)] = list(commands)

    def which(self, command: str) -> str | None:
        self._which_log.append(command)
        if command in self._path:
            return f"/usr/bin/{command}"
        return None

    def execute(self, invocation: Invocation) -> Receipt:
        self._call_log.append(invocation)
        self._cwd_log.append(os.getcwd())

        exit_code = self._exit_codes.get(invocation.argv, 0)
        if exit_code != 0:
            return Receipt.failure(
                invocation.argv,
                exit_code=exit_code,
                error=f"[mock] exited with code {exit_code}",
            )

        self._path.update(self._installs.get(invocation.argv, ()))
        return Receipt.success(invocation.argv, output="[mock] executed")

    def reset(self) -> None:
        """Clear call logs and scripted responses (PATH is kept)."""
        self._call_log.clear()
        self._cwd_log.clear()
        self._which_log.clear()
        self._exit_codes.clear()
        self._installs.clear()
