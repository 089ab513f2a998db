"""
Subprocess command adapter — run real commands on the host.

This is the SINGLE PLACE where ``subprocess.run`` is called. Stage
commands and package installs both go through it.
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import time

from buildgate.adapters.base import CommandAdapter
from buildgate.core.models.command import Invocation, Receipt

logger = logging.getLogger(__name__)


def _is_root() -> bool:
    geteuid = getattr(os, "geteuid", None)
    return geteuid is not None and geteuid() == 0


class SubprocessCommandAdapter(CommandAdapter):
    """Execute commands with :func:`subprocess.run`.

    Output is inherited from the parent process by default so build and
    test tools stream straight to the terminal. With ``capture_output``
    stdout/stderr are collected into the receipt instead.

    There is no timeout: a stage runs until its command exits.

    Args:
        capture_output: Capture stdout/stderr instead of inheriting them.
        sudo: Binary used to elevate ``needs_sudo`` invocations.
    """

    def __init__(self, capture_output: bool = False, sudo: str = "sudo"):
        self._capture_output = capture_output
        self._sudo = sudo

    @property
    def name(self) -> str:
        return "subprocess"

    def is_available(self) -> bool:
        return True

    def which(self, command: str) -> str | None:
        return shutil.which(command)

    def _argv_for(self, invocation: Invocation) -> list[str]:
        argv = list(invocation.argv)
        if invocation.needs_sudo and not _is_root():
            argv = [self._sudo] + argv
        return argv

    def execute(self, invocation: Invocation) -> Receipt:
        argv = self._argv_for(invocation)
        if not argv:
            return Receipt.failure(argv, error="Empty command")

        logger.debug("Executing: %s (cwd=%s)", invocation.display, os.getcwd())
        start = time.monotonic()

        try:
            result = subprocess.run(
                argv,
                capture_output=self._capture_output,
                text=True,
                errors="replace",
                check=False,
            )
        except FileNotFoundError:
            logger.debug("Binary not found: %s", argv[0])
            return Receipt.not_found(argv)
        except Exception as e:
            logger.error("Command execution error for %s: %s", invocation.display, e)
            return Receipt.failure(argv, error=f"Command execution error: {e}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = (result.stdout or "").strip()
        stderr = (result.stderr or "").strip()

        if result.returncode == 0:
            return Receipt.success(argv, output=stdout, duration_ms=elapsed_ms)

        # Negative return codes mean "killed by signal"; keep them non-zero
        return Receipt.failure(
            argv,
            exit_code=result.returncode,
            error=stderr or f"Command exited with code {result.returncode}",
            output=stdout,
            duration_ms=elapsed_ms,
        )
