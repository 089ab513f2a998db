"""Adapters — bindings to the host system.

Public re-exports for convenient access.
"""

from buildgate.adapters.base import CommandAdapter
from buildgate.adapters.mock import MockCommandAdapter
from buildgate.adapters.package_managers import DEFAULT_PACKAGE_MANAGERS, PackageManagerSpec
from buildgate.adapters.registry import PackageManagerRegistry
from buildgate.adapters.shell.command import SubprocessCommandAdapter

__all__ = [
    "CommandAdapter",
    "DEFAULT_PACKAGE_MANAGERS",
    "MockCommandAdapter",
    "PackageManagerRegistry",
    "PackageManagerSpec",
    "SubprocessCommandAdapter",
]
