"""
Dependency resolver — make sure every required tool is on PATH.

Resolution is a precondition gate, not a best-effort step: requirements
are checked in declared order and the first one that cannot be resolved
stops everything.

Flow per requirement:
    which(command) → present?            done (no installer is touched)
                   → detect manager      none? NoPackageManagerError
                   → install package     non-zero? InstallFailedError
                   → which(command)      still missing? InstallVerificationFailedError
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from buildgate.adapters.base import CommandAdapter
from buildgate.adapters.package_managers import PackageManagerSpec, manual_install_hint
from buildgate.adapters.registry import PackageManagerRegistry
from buildgate.core.models.command import Receipt
from buildgate.core.models.requirement import ToolRequirement

logger = logging.getLogger(__name__)


# ── Errors ──────────────────────────────────────────────────────


class DependencyError(Exception):
    """A required tool is missing and could not be installed."""

    def __init__(self, requirement: ToolRequirement, message: str):
        self.requirement = requirement
        super().__init__(message)

    @property
    def command(self) -> str:
        return self.requirement.command


class NoPackageManagerError(DependencyError):
    """Tool missing and no supported package manager is present."""

    def __init__(self, requirement: ToolRequirement):
        self.hint = manual_install_hint(requirement.command, requirement.package)
        super().__init__(
            requirement,
            f"Command '{requirement.command}' is not installed, "
            "and no supported package manager was found.",
        )


class InstallFailedError(DependencyError):
    """The package manager's install command exited non-zero."""

    def __init__(
        self,
        requirement: ToolRequirement,
        manager: PackageManagerSpec,
        receipt: Receipt,
    ):
        self.manager = manager
        self.receipt = receipt
        super().__init__(
            requirement,
            f"Installing '{requirement.package}' with {manager.name} failed "
            f"(exit {receipt.exit_code}). Please install '{requirement.command}' manually.",
        )


class InstallVerificationFailedError(DependencyError):
    """The install command succeeded but the tool is still not on PATH."""

    def __init__(self, requirement: ToolRequirement, manager: PackageManagerSpec):
        self.manager = manager
        super().__init__(
            requirement,
            f"Failed to install '{requirement.command}': {manager.name} installed "
            f"'{requirement.package}' but the command is still not on PATH. "
            "Please install it manually.",
        )


# ── Observer ────────────────────────────────────────────────────


class ResolverObserver:
    """Progress callbacks for dependency resolution. Default: no-op."""

    def resolution_started(self, requirements: Sequence[ToolRequirement]) -> None:
        pass

    def requirement_present(self, requirement: ToolRequirement, path: str) -> None:
        pass

    def requirement_missing(self, requirement: ToolRequirement) -> None:
        pass

    def install_started(self, requirement: ToolRequirement, manager: PackageManagerSpec) -> None:
        pass

    def requirement_installed(self, requirement: ToolRequirement, path: str) -> None:
        pass

    def resolution_finished(self, resolved: Sequence[ResolvedTool]) -> None:
        pass


@dataclass(frozen=True)
class ResolvedTool:
    """A requirement that is satisfied, and how."""

    requirement: ToolRequirement
    path: str
    installed_via: str | None = None

    @property
    def was_installed(self) -> bool:
        return self.installed_via is not None

    def to_dict(self) -> dict:
        return {
            "command": self.requirement.command,
            "package": self.requirement.package,
            "path": self.path,
            "installed_via": self.installed_via,
        }


# ── Resolver ────────────────────────────────────────────────────


class DependencyResolver:
    """Checks, and if needed installs, required tools.

    This is the only component allowed to change the host: it may run
    privileged install commands through the command adapter.

    Args:
        adapter: Command adapter used for PATH lookups and installs.
        registry: Package manager registry. Defaults to the built-in
            managers probed through ``adapter``.
        observer: Optional progress observer.
    """

    def __init__(
        self,
        adapter: CommandAdapter,
        registry: PackageManagerRegistry | None = None,
        observer: ResolverObserver | None = None,
    ):
        self._adapter = adapter
        self._registry = registry or PackageManagerRegistry(adapter)
        self._observer = observer or ResolverObserver()
        self._resolved: list[ResolvedTool] = []

    @property
    def registry(self) -> PackageManagerRegistry:
        return self._registry

    @property
    def resolved(self) -> list[ResolvedTool]:
        """Every requirement satisfied so far by this resolver, in order."""
        return list(self._resolved)

    def probe(self, requirement: ToolRequirement) -> str | None:
        """Read-only presence check. Returns the resolved path or None."""
        return self._adapter.which(requirement.command)

    def ensure(self, requirement: ToolRequirement) -> ResolvedTool:
        """Make ``requirement.command`` resolvable, installing if needed.

        Raises:
            NoPackageManagerError: Tool missing, no installer available.
            InstallFailedError: Installer exited non-zero.
            InstallVerificationFailedError: Tool still missing after install.
        """
        path = self.probe(requirement)
        if path:
            logger.debug("'%s' already installed at %s", requirement.command, path)
            self._observer.requirement_present(requirement, path)
            return self._record(ResolvedTool(requirement=requirement, path=path))

        self._observer.requirement_missing(requirement)

        manager = self._registry.detect_available()
        if manager is None:
            raise NoPackageManagerError(requirement)

        self._observer.install_started(requirement, manager)
        invocation = manager.install_command(requirement.package)
        logger.info("Installing %s via %s: %s", requirement.package, manager.name, invocation.display)

        receipt = self._adapter.execute(invocation)
        if not receipt.ok:
            logger.error(
                "Install of %s via %s failed (exit %d): %s",
                requirement.package, manager.name, receipt.exit_code, receipt.error,
            )
            raise InstallFailedError(requirement, manager, receipt)

        path = self.probe(requirement)
        if not path:
            raise InstallVerificationFailedError(requirement, manager)

        self._observer.requirement_installed(requirement, path)
        return self._record(
            ResolvedTool(requirement=requirement, path=path, installed_via=manager.name)
        )

    def _record(self, tool: ResolvedTool) -> ResolvedTool:
        self._resolved.append(tool)
        return tool

    def ensure_all(self, requirements: Iterable[ToolRequirement]) -> list[ResolvedTool]:
        """Ensure every requirement in order; the first failure propagates.

        Nothing after the failing requirement is probed or installed.
        """
        requirements = list(requirements)
        self._observer.resolution_started(requirements)
        resolved = [self.ensure(requirement) for requirement in requirements]
        self._observer.resolution_finished(resolved)
        return resolved
