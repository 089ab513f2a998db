"""
Working directory scope guard.

The process working directory is the only shared mutable state a
pipeline run touches. Every directory change goes through
``enter_directory`` so the previous directory is always restored, even
when the stage inside fails or raises.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DirectoryTransitionError(Exception):
    """Raised when a working directory cannot be entered."""

    def __init__(self, path: str | os.PathLike[str], reason: str):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Failed to enter directory '{self.path}': {reason}")


@contextmanager
def enter_directory(path: str | os.PathLike[str]) -> Iterator[Path]:
    """Change into ``path`` for the duration of the block.

    Raises:
        DirectoryTransitionError: If ``path`` cannot be entered. The
            block is not run and the working directory is unchanged.

    On exit the previous directory is restored. A failed restore is
    logged, never raised: it must not mask the block's own result.
    """
    previous = os.getcwd()

    try:
        os.chdir(path)
    except OSError as e:
        raise DirectoryTransitionError(path, e.strerror or str(e)) from e

    logger.debug("Entered %s (from %s)", os.getcwd(), previous)
    try:
        yield Path(os.getcwd())
    finally:
        try:
            os.chdir(previous)
        except OSError as e:
            logger.error("Failed to return to %s: %s", previous, e)
        else:
            logger.debug("Returned to %s", previous)


def with_directory(path: str | os.PathLike[str], work: Callable[[], T]) -> T:
    """Run ``work`` once inside ``path`` and return its result.

    Functional form of :func:`enter_directory`. Exceptions raised by
    ``work`` propagate after the previous directory is restored.
    """
    with enter_directory(path):
        return work()
