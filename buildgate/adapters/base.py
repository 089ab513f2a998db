"""
Adapter base — the contract between the engine and the host system.

The engine never calls ``subprocess`` or ``shutil.which`` directly. It
asks a CommandAdapter to look up binaries and run commands, so the
resolver and runner can be exercised against a mock instead of a real
shell.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from buildgate.core.models.command import Invocation, Receipt


class CommandAdapter(ABC):
    """Abstract base class for command execution backends.

    Adapters run external commands and return receipts.
    They NEVER raise exceptions — failures are captured in the Receipt.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this adapter can run commands on this host.

        Should be fast and never raise.
        """

    @abstractmethod
    def which(self, command: str) -> str | None:
        """Resolve a command name on PATH.

        Returns:
            Absolute path of the binary, or None if it is not resolvable.
        """

    @abstractmethod
    def execute(self, invocation: Invocation) -> Receipt:
        """Run a command in the current working directory and wait for it.

        Blocks until the command terminates. MUST never raise; all
        failures are captured in the Receipt.
        """

    def run(self, *argv: str, needs_sudo: bool = False) -> Receipt:
        """Convenience wrapper: build an Invocation from argv and execute it."""
        return self.execute(Invocation(argv=tuple(argv), needs_sudo=needs_sudo))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
